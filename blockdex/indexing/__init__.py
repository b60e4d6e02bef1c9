"""Indexing package for blockdex.

- Indexer: Builds a finalized, content-addressed DirIndex for a tree.
- HashLookup: Hash-keyed tables over a finalized tree.
- BlockMatcher: Rolling-checksum scan for known blocks in raw data.
- TreeDiffer: What a remote peer already has of a local tree.
"""

from .differ import TreeDiffer
from .indexer import Indexer
from .lookup import HashLookup
from .matcher import BlockMatcher

__all__ = ["Indexer", "HashLookup", "BlockMatcher", "TreeDiffer"]
