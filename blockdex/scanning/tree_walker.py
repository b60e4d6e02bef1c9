"""Directory walking for the indexer.

This module provides the TreeWalker class, which yields one WalkEntry per
directory: the directory path with its immediate subdirectories and regular
files, already joined to full paths. Parents are always yielded before their
descendants.

Example:
    >>> from blockdex.scanning import TreeWalker
    >>> walker = TreeWalker(exclude=[".git"])
    >>> for entry in walker.walk(Path("/data")):
    ...     print(entry.path, len(entry.files))
"""

import os
import stat
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from blockdex.models import WalkEntry


class TreeWalker:
    """Walks a directory tree top-down and yields WalkEntry objects.

    Only regular files are reported; sockets, FIFOs and devices are skipped
    because reading them could block or never end. Excluded names are pruned
    before they are reported, so excluded subtrees are never entered.

    When ``follow_symlinks`` is False (the default), symlinked files and
    directories are skipped. When True, they are followed, with visited
    directories tracked by (device, inode) so a link back up the tree does
    not recurse forever.

    Attributes:
        follow_symlinks: Whether symbolic links are followed.
        exclude: Names of files and directories to skip.
        _errors: Error messages for entries that could not be walked.
    """

    def __init__(
        self,
        follow_symlinks: bool = False,
        exclude: Optional[Iterable[str]] = None,
    ) -> None:
        """Initialize the TreeWalker.

        Args:
            follow_symlinks: Follow symbolic links to files and directories.
            exclude: File and directory names to skip anywhere in the tree.
        """
        self.follow_symlinks = follow_symlinks
        self.exclude: Set[str] = set(exclude or ())
        self._errors: List[str] = []

    def walk(self, root_path: Path) -> Iterator[WalkEntry]:
        """Walk a directory tree.

        Directories that cannot be listed are recorded as errors and yield
        no entry; the walk continues with their siblings.

        Args:
            root_path: Directory to walk.

        Yields:
            WalkEntry for each directory reached, parents first.
        """
        # Track visited directories by (device, inode) to detect cycles
        visited_dirs: Set[Tuple[int, int]] = set()
        try:
            root_stat = os.stat(root_path)
            visited_dirs.add((root_stat.st_dev, root_stat.st_ino))
        except OSError as e:
            self._errors.append(f"Error accessing {root_path}: {e}")
            return

        for dirpath, dirnames, filenames in os.walk(
            root_path, onerror=self._on_walk_error, followlinks=self.follow_symlinks
        ):
            current = Path(dirpath)

            # Prune in place so os.walk does not descend into removed names
            dirnames[:] = [
                name for name in sorted(dirnames)
                if self._keep_dir(current / name, name, visited_dirs)
            ]

            files = [
                current / name
                for name in sorted(filenames)
                if self._keep_file(current / name, name)
            ]

            yield WalkEntry(
                path=current,
                subdirs=[current / name for name in dirnames],
                files=files,
            )

    def _keep_dir(
        self, dir_path: Path, name: str, visited_dirs: Set[Tuple[int, int]]
    ) -> bool:
        if name in self.exclude:
            return False

        if dir_path.is_symlink():
            if not self.follow_symlinks:
                return False
            try:
                # Resolve the symlink target; skip it if that directory was already walked
                target_stat = dir_path.stat()
            except OSError:
                self._errors.append(f"Broken directory link: {dir_path}")
                return False
            dir_id = (target_stat.st_dev, target_stat.st_ino)
            if dir_id in visited_dirs:
                self._errors.append(f"Directory already visited, link skipped: {dir_path}")
                return False
            visited_dirs.add(dir_id)
            return True

        # Regular directory - track it to detect if a symlink points back
        try:
            dir_stat = os.stat(dir_path)
            visited_dirs.add((dir_stat.st_dev, dir_stat.st_ino))
        except OSError as e:
            self._errors.append(f"Error accessing {dir_path}: {e}")
            return False
        return True

    def _keep_file(self, file_path: Path, name: str) -> bool:
        if name in self.exclude:
            return False
        try:
            if file_path.is_symlink() and not self.follow_symlinks:
                return False
            mode = os.stat(file_path).st_mode
        except OSError as e:
            self._errors.append(f"Error accessing {file_path}: {e}")
            return False
        if not stat.S_ISREG(mode):
            self._errors.append(f"Not a regular file: {file_path}")
            return False
        return True

    def _on_walk_error(self, error: OSError) -> None:
        if isinstance(error, PermissionError):
            self._errors.append(f"Permission denied: {error.filename}")
        else:
            self._errors.append(f"Error walking {error.filename}: {error}")

    def get_errors(self) -> List[str]:
        """Get list of errors encountered during walking.

        Returns:
            List of error message strings.
        """
        return self._errors.copy()

    def clear_errors(self) -> None:
        """Clear the list of accumulated errors."""
        self._errors.clear()
