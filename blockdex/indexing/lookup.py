"""Content-addressed lookup over a finalized index.

HashLookup flattens a finalized DirIndex tree into hash-keyed tables so a
peer can answer "do I already have this?" for any block, file or directory
hash, and can find candidate blocks for a weak checksum during a rolling
scan.

Example:
    >>> lookup = HashLookup(root)
    >>> lookup.has_file(bytes.fromhex("aaf4c61d..."))
    True
"""

from collections import defaultdict
from typing import Dict, List, Optional, Set

from blockdex.checksum import BLOCKSIZE
from blockdex.models import BlockIndex, DirIndex, FileIndex


class HashLookup:
    """Hash-keyed tables for every node reachable from a finalized root.

    When several blocks share a strong hash, the first one seen in walk
    order is the one returned by :meth:`block`; all of them are still
    candidates for their weak checksum.

    Args:
        root: A finalized DirIndex.

    Raises:
        ValueError: If ``root`` is not finalized.
    """

    def __init__(self, root: DirIndex) -> None:
        if not root.finalized:
            raise ValueError("Cannot build a lookup over an unfinalized index")
        self.root = root
        self._dirs: Dict[bytes, DirIndex] = {}
        self._files: Dict[bytes, FileIndex] = {}
        self._blocks: Dict[bytes, BlockIndex] = {}
        self._weak: Dict[int, List[BlockIndex]] = defaultdict(list)
        self._tail_sizes: Set[int] = set()

        for dir_index in root.walk():
            self._dirs.setdefault(dir_index.get_hash(), dir_index)
            for file_hash, file_index in dir_index.files.items():
                self._files.setdefault(file_hash, file_index)
                for block in file_index.blocks:
                    self._add_block(block)

    def _add_block(self, block: BlockIndex) -> None:
        self._weak[block.weak].append(block)
        self._blocks.setdefault(block.strong, block)
        if block.size < BLOCKSIZE:
            self._tail_sizes.add(block.size)

    def blocks_for_weak(self, weak: int) -> List[BlockIndex]:
        """Candidate blocks whose weak checksum equals ``weak``."""
        return list(self._weak.get(weak, ()))

    def block(self, strong: bytes) -> Optional[BlockIndex]:
        return self._blocks.get(strong)

    def file(self, strong: bytes) -> Optional[FileIndex]:
        return self._files.get(strong)

    def dir(self, strong: bytes) -> Optional[DirIndex]:
        return self._dirs.get(strong)

    def has_block(self, strong: bytes) -> bool:
        return strong in self._blocks

    def has_file(self, strong: bytes) -> bool:
        return strong in self._files

    def has_dir(self, strong: bytes) -> bool:
        return strong in self._dirs

    def has_weak(self, weak: int) -> bool:
        return weak in self._weak

    def tail_sizes(self) -> Set[int]:
        """Lengths of all indexed blocks shorter than BLOCKSIZE."""
        return set(self._tail_sizes)

    def get_stats(self) -> Dict[str, int]:
        """Get table sizes.

        Returns:
            Dictionary containing 'dirs', 'files', 'blocks' and 'weak'.
        """
        return {
            "dirs": len(self._dirs),
            "files": len(self._files),
            "blocks": len(self._blocks),
            "weak": len(self._weak),
        }
