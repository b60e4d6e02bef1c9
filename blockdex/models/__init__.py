"""
Models package for the block index.

This package provides convenient imports for all data models:
- NodeKind: Kind column of directory serialization lines
- BlockIndex: Checksums of one block
- FileIndex: Block checksums plus whole-file hash
- DirIndex: Deduplicated, content-addressed directory index
- WalkEntry: Directory yielded by the tree walker
- IndexStats: Indexing counters
- BlockMatch: Known block found in scanned data
- FileTransfer: File a remote peer lacks
- TreeDiff: Comparison of a local tree against a remote lookup
"""

from .node_kind import NodeKind
from .data_models import (
    BlockIndex,
    BlockMatch,
    DirIndex,
    FileIndex,
    FileTransfer,
    IndexStats,
    TreeDiff,
    WalkEntry,
)

__all__ = [
    "NodeKind",
    "BlockIndex",
    "BlockMatch",
    "DirIndex",
    "FileIndex",
    "FileTransfer",
    "IndexStats",
    "TreeDiff",
    "WalkEntry",
]
