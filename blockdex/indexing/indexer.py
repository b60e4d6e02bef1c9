"""Directory tree indexing.

This module provides the Indexer class, which turns a directory tree into a
finalized DirIndex. It drives a TreeWalker, builds pending DirIndex nodes
top-down as walk entries arrive, indexes every file with a FileIndexer, and
finalizes the root once the walk is complete, which finalizes the whole
tree bottom-up.

Example:
    >>> from blockdex.indexing import Indexer
    >>> indexer = Indexer()
    >>> root = indexer.index(Path("/data"))
    >>> print(root.get_hash().hex())
"""

import logging
import os
import time
from pathlib import Path
from typing import Dict, List, Optional, Set

from blockdex.models import DirIndex, IndexStats
from blockdex.scanning import FileIndexer, TreeWalker

logger = logging.getLogger("blockdex.indexer")


class Indexer:
    """Builds a content-addressed index of a directory tree.

    Only a missing or unreadable root is fatal. Files that cannot be read
    are left out of their directory, and subdirectories the walk could not
    enter are left out of their parent; both are recorded as errors.

    Attributes:
        _walker: TreeWalker supplying directory entries.
        _file_indexer: FileIndexer building per-file indexes.
        _errors: Indexer-level error messages.
        _stats: Counters for the most recent run.
    """

    def __init__(
        self,
        walker: Optional[TreeWalker] = None,
        file_indexer: Optional[FileIndexer] = None,
    ) -> None:
        """Initialize the Indexer.

        Args:
            walker: Optional TreeWalker. If not provided, a walker with
                default settings is created.
            file_indexer: Optional FileIndexer. If not provided, a new
                instance will be created.
        """
        self._walker = walker if walker is not None else TreeWalker()
        self._file_indexer = file_indexer if file_indexer is not None else FileIndexer()
        self._errors: List[str] = []
        self._stats = IndexStats()

    def index(self, root_path: Path) -> DirIndex:
        """Index a directory tree and return its finalized root.

        Args:
            root_path: Directory to index.

        Returns:
            The finalized root DirIndex.

        Raises:
            FileNotFoundError: If root_path does not exist.
            NotADirectoryError: If root_path is not a directory.
            PermissionError: If root_path cannot be listed.
        """
        started = time.monotonic()
        resolved_path = self._check_root(root_path)
        self.clear_errors()
        self._file_indexer.reset_stats()

        root = DirIndex(resolved_path.name)
        # Walk-scoped: directories registered but not yet reached by the walk
        pending: Dict[Path, DirIndex] = {resolved_path: root}
        visited: Set[Path] = set()

        for entry in self._walker.walk(resolved_path):
            dir_index = pending.get(entry.path)
            if dir_index is None:
                self._errors.append(f"Unexpected directory from walk: {entry.path}")
                logger.warning(f"Unexpected directory from walk: {entry.path}")
                continue
            visited.add(entry.path)

            for file_path in entry.files:
                file_index = self._file_indexer.index_file(file_path)
                if file_index is not None:
                    dir_index.add_file(file_index)

            for subdir_path in entry.subdirs:
                pending[subdir_path] = dir_index.add_dir(DirIndex(subdir_path.name))

        if resolved_path not in visited:
            raise PermissionError(f"Cannot read root directory: {root_path}")

        # Subdirectories the walk never entered are omitted, not hashed as empty
        for path, dir_index in pending.items():
            if path not in visited:
                self._errors.append(f"Directory skipped: {path}")
                logger.warning(f"Directory skipped: {path}")
                dir_index.parent.discard_dir(dir_index)

        root.finalize()

        self._stats = self._collect_stats(root, resolved_path, len(visited))
        self._stats.duration = time.monotonic() - started
        logger.info(
            f"Indexed {resolved_path}: {self._stats.files_indexed} files, "
            f"root {self._stats.root_hash}"
        )
        return root

    def _check_root(self, root_path: Path) -> Path:
        resolved_path = root_path.resolve()
        if not resolved_path.exists():
            raise FileNotFoundError(f"Root path does not exist: {root_path}")
        if not resolved_path.is_dir():
            raise NotADirectoryError(f"Root path is not a directory: {root_path}")
        if not os.access(resolved_path, os.R_OK | os.X_OK):
            raise PermissionError(f"Permission denied - cannot read: {root_path}")
        return resolved_path

    def _collect_stats(self, root: DirIndex, root_path: Path, visited: int) -> IndexStats:
        file_stats = self._file_indexer.get_stats()
        stats = IndexStats(
            root_path=root_path,
            root_hash=root.get_hash().hex(),
            dirs_indexed=visited,
            files_indexed=file_stats["files"],
            blocks_indexed=file_stats["blocks"],
            bytes_indexed=file_stats["bytes"],
            errors=self.get_errors(),
        )
        for dir_index in root.walk():
            stats.duplicate_dirs += dir_index.duplicate_dirs
            stats.duplicate_files += dir_index.duplicate_files
        return stats

    def get_stats(self) -> IndexStats:
        """Counters for the most recent :meth:`index` run."""
        return self._stats

    def get_errors(self) -> List[str]:
        """Get all errors from the walker, the file indexer and the indexer.

        Returns:
            List of error message strings.
        """
        return (
            self._walker.get_errors()
            + self._file_indexer.get_errors()
            + self._errors
        )

    def clear_errors(self) -> None:
        """Clear accumulated errors in all components."""
        self._walker.clear_errors()
        self._file_indexer.clear_errors()
        self._errors.clear()

    @property
    def walker(self) -> TreeWalker:
        return self._walker

    @property
    def file_indexer(self) -> FileIndexer:
        return self._file_indexer
