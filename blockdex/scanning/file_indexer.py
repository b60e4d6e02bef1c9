"""Per-file block indexing.

This module builds a FileIndex from one sequential read of a file in
BLOCKSIZE chunks. Each chunk gets a weak and a strong checksum, and the same
bytes feed a running whole-file strong hash, so the file is never read twice.

Example:
    >>> from blockdex.scanning import FileIndexer
    >>> indexer = FileIndexer()
    >>> file_index = indexer.index_file(Path("/path/to/file.bin"))
    >>> if file_index:
    ...     print(f"{len(file_index.blocks)} blocks, {file_index.get_hash().hex()}")
"""

import weakref
from pathlib import Path
from typing import List, Optional

from blockdex.checksum import BLOCKSIZE, new_strong, strong, weak_checksum, weak_start
from blockdex.models import BlockIndex, FileIndex


def build_file_index(file_path: Path) -> FileIndex:
    """Index a file in a single streaming pass.

    The final block is checksummed over its actual length and never padded.
    An empty file yields no blocks and the strong hash of the empty string.

    Args:
        file_path: Path to the file.

    Returns:
        The complete FileIndex.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    file_index = FileIndex(name=file_path.name)
    file_ref = weakref.ref(file_index)
    whole_file = new_strong()

    with open(file_path, "rb") as f:
        position = 1
        while True:
            chunk = f.read(BLOCKSIZE)
            if not chunk:
                break
            file_index.blocks.append(
                BlockIndex(
                    weak=weak_checksum(*weak_start(chunk)),
                    strong=strong(chunk),
                    position=position,
                    size=len(chunk),
                    file_ref=file_ref,
                )
            )
            whole_file.update(chunk)
            file_index.size += len(chunk)
            position += 1

    file_index.strong = whole_file.digest()
    return file_index


def read_block(file_path: Path, block: BlockIndex) -> bytes:
    """Read the raw bytes of one indexed block back from disk.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    with open(file_path, "rb") as f:
        f.seek(block.offset)
        return f.read(block.size)


class FileIndexer:
    """Builds FileIndex objects and records files that could not be read.

    Unreadable files are not fatal: :meth:`index_file` records a message and
    returns None, and the caller leaves the file out of its directory.

    Attributes:
        _errors: Messages for files that could not be indexed.
        _files_indexed: Number of files indexed successfully.
        _bytes_indexed: Total bytes read from indexed files.
        _blocks_indexed: Total blocks checksummed.
    """

    def __init__(self) -> None:
        """Initialize the FileIndexer with empty counters."""
        self._errors: List[str] = []
        self._files_indexed: int = 0
        self._bytes_indexed: int = 0
        self._blocks_indexed: int = 0

    def index_file(self, file_path: Path) -> Optional[FileIndex]:
        """Index a file, returning None if it cannot be read.

        Args:
            file_path: Path to the file to index.

        Returns:
            The FileIndex, or None if an error occurred. Errors include:
            file not found, permission denied, I/O errors.
        """
        try:
            file_index = build_file_index(file_path)
        except PermissionError:
            self._errors.append(f"Permission denied: {file_path}")
            return None
        except FileNotFoundError:
            self._errors.append(f"File not found: {file_path}")
            return None
        except IsADirectoryError:
            self._errors.append(f"Not a file: {file_path}")
            return None
        except OSError as e:
            self._errors.append(f"OS error reading {file_path}: {e}")
            return None

        self._files_indexed += 1
        self._bytes_indexed += file_index.size
        self._blocks_indexed += len(file_index.blocks)
        return file_index

    def get_stats(self) -> dict:
        """Get counters for files indexed so far.

        Returns:
            Dictionary containing 'files', 'bytes' and 'blocks'.
        """
        return {
            "files": self._files_indexed,
            "bytes": self._bytes_indexed,
            "blocks": self._blocks_indexed,
        }

    def reset_stats(self) -> None:
        self._files_indexed = 0
        self._bytes_indexed = 0
        self._blocks_indexed = 0

    def get_errors(self) -> List[str]:
        """Get list of errors encountered during indexing.

        Returns:
            List of error message strings.
        """
        return self._errors.copy()

    def clear_errors(self) -> None:
        """Clear the list of accumulated errors."""
        self._errors.clear()
