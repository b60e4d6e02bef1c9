"""Block storage backed by an indexed local directory.

LocalStore indexes a directory and serves raw bytes by content hash: a whole
block by its strong hash, or a byte range of a file by the file's strong
hash. This is what a sending peer uses to answer requests for blocks the
other side reported missing.

Example:
    >>> store = LocalStore(Path("/data"))
    >>> data = store.read_block(block_hash)
    >>> with open("copy.bin", "wb") as out:
    ...     store.read_into(file_hash, 0, file_size, out)
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional

from blockdex.checksum import BLOCKSIZE, strong
from blockdex.indexing import HashLookup, Indexer
from blockdex.models import DirIndex
from blockdex.scanning import read_block

logger = logging.getLogger("blockdex.store")


class LocalStore:
    """Serves block and file bytes from an indexed directory.

    Attributes:
        root_path: Resolved root of the store.
    """

    def __init__(self, root_path: Path, indexer: Optional[Indexer] = None) -> None:
        """Index ``root_path`` and prepare the lookup tables.

        Args:
            root_path: Directory to serve.
            indexer: Optional Indexer. If not provided, a new instance will
                be created.

        Raises:
            FileNotFoundError: If root_path does not exist.
            NotADirectoryError: If root_path is not a directory.
            PermissionError: If root_path cannot be listed.
        """
        self.root_path = root_path.resolve()
        self._indexer = indexer if indexer is not None else Indexer()
        self._root: Optional[DirIndex] = None
        self._lookup: Optional[HashLookup] = None
        self.reindex()

    def reindex(self) -> None:
        """Re-index the root, replacing the current index."""
        logger.debug(f"Reindexing store at {self.root_path}")
        root = self._indexer.index(self.root_path)
        self._lookup = HashLookup(root)
        self._root = root

    @property
    def root(self) -> DirIndex:
        return self._root

    @property
    def lookup(self) -> HashLookup:
        return self._lookup

    def rel_path(self, full_path: Path) -> str:
        """Path of ``full_path`` relative to the store root, '/' separated."""
        return Path(full_path).resolve().relative_to(self.root_path).as_posix()

    def resolve(self, rel_path: str) -> Path:
        """Full path for a '/' separated path relative to the store root."""
        if not rel_path:
            return self.root_path
        return self.root_path.joinpath(*rel_path.split("/"))

    def read_block(self, block_hash: bytes) -> bytes:
        """Read the bytes of a block by its strong hash.

        Raises:
            KeyError: If no indexed block has this hash.
            ValueError: If the bytes on disk no longer match the hash.
            OSError: If the containing file cannot be read.
        """
        block = self._lookup.block(block_hash)
        if block is None or block.file is None:
            raise KeyError(f"Block with strong checksum {block_hash.hex()} not found")

        data = read_block(self.resolve(block.file.rel_path()), block)
        if strong(data) != block_hash:
            logger.warning(f"Stale block {block_hash.hex()} in {block.file.rel_path()}")
            raise ValueError(
                f"Block {block_hash.hex()} changed on disk since indexing"
            )
        return data

    def read_into(
        self, file_hash: bytes, start: int, length: int, writer: BinaryIO
    ) -> int:
        """Copy a byte range of a file, identified by its strong hash.

        Args:
            file_hash: Strong hash of the file.
            start: Offset of the first byte to copy.
            length: Maximum number of bytes to copy.
            writer: Binary stream receiving the bytes.

        Returns:
            Number of bytes written; less than ``length`` if the file ends
            first.

        Raises:
            KeyError: If no indexed file has this hash.
            OSError: If the file cannot be read.
        """
        file_index = self._lookup.file(file_hash)
        if file_index is None:
            raise KeyError(f"File with strong checksum {file_hash.hex()} not found")

        written = 0
        with open(self.resolve(file_index.rel_path()), "rb") as f:
            f.seek(start)
            while written < length:
                chunk = f.read(min(BLOCKSIZE, length - written))
                if not chunk:
                    break
                writer.write(chunk)
                written += len(chunk)
        return written
