"""Rolling block matching against an index.

BlockMatcher scans a byte buffer for blocks that are already present in a
HashLookup, the way rsync's sender finds reusable blocks: a BLOCKSIZE window
slides forward one byte at a time with an O(1) weak checksum update, a weak
hit is confirmed with the strong hash, and on a confirmed match the window
jumps a full block.

Example:
    >>> matcher = BlockMatcher(HashLookup(root))
    >>> for match in matcher.match_bytes(data):
    ...     print(match.offset, match.block.strong.hex())
"""

from pathlib import Path
from typing import List, Optional

from blockdex.checksum import BLOCKSIZE, RollingChecksum, strong, weak_checksum, weak_start
from blockdex.models import BlockIndex, BlockMatch

from .lookup import HashLookup


class BlockMatcher:
    """Finds indexed blocks inside arbitrary data.

    Attributes:
        lookup: The HashLookup holding the known blocks.
    """

    def __init__(self, lookup: HashLookup) -> None:
        self.lookup = lookup
        self._weak_hits = 0
        self._false_hits = 0

    def match_bytes(self, data: bytes) -> List[BlockMatch]:
        """Find known blocks in ``data``.

        Full-size blocks may match at any offset. Blocks shorter than
        BLOCKSIZE are the final blocks of their files and are only tried
        against the end of ``data``.

        Args:
            data: Bytes to scan.

        Returns:
            Non-overlapping matches in ascending offset order.
        """
        matches: List[BlockMatch] = []
        length = len(data)
        offset = 0
        rolling: Optional[RollingChecksum] = None

        while offset + BLOCKSIZE <= length:
            if rolling is None:
                rolling = RollingChecksum(data[offset:offset + BLOCKSIZE])

            block = self._confirm(rolling.checksum, data, offset, BLOCKSIZE)
            if block is not None:
                matches.append(BlockMatch(offset=offset, block=block))
                offset += BLOCKSIZE
                rolling = None
                continue

            if offset + BLOCKSIZE < length:
                rolling.roll(data[offset], data[offset + BLOCKSIZE])
            offset += 1

        for size in sorted(self.lookup.tail_sizes(), reverse=True):
            start = length - size
            if start < offset:
                continue
            weak = weak_checksum(*weak_start(data[start:]))
            block = self._confirm(weak, data, start, size)
            if block is not None:
                matches.append(BlockMatch(offset=start, block=block))
                break

        return matches

    def match_file(self, file_path: Path) -> List[BlockMatch]:
        """Read a whole file and find known blocks in it.

        Raises:
            OSError: If the file cannot be read.
        """
        with open(file_path, "rb") as f:
            data = f.read()
        return self.match_bytes(data)

    def _confirm(
        self, weak: int, data: bytes, offset: int, size: int
    ) -> Optional[BlockIndex]:
        candidates = [
            block for block in self.lookup.blocks_for_weak(weak)
            if block.size == size
        ]
        if not candidates:
            return None

        self._weak_hits += 1
        digest = strong(data[offset:offset + size])
        for block in candidates:
            if block.strong == digest:
                return block
        self._false_hits += 1
        return None

    def get_stats(self) -> dict:
        """Get weak-hit statistics.

        Returns:
            Dictionary containing 'weak_hits' and 'false_hits' (weak hits the
            strong hash rejected).
        """
        return {"weak_hits": self._weak_hits, "false_hits": self._false_hits}
