"""File scanning package for blockdex.

This package reads the filesystem. It contains two main classes:

- FileIndexer: Builds a FileIndex (per-block weak and strong checksums plus
  a whole-file hash) from a single streaming pass over a file.
- TreeWalker: Walks a directory tree and yields each directory with its
  immediate subdirectories and regular files.

Example:
    >>> from blockdex.scanning import FileIndexer, TreeWalker
    >>> from pathlib import Path
    >>>
    >>> walker = TreeWalker(exclude=[".git"])
    >>> indexer = FileIndexer()
    >>> for entry in walker.walk(Path("/data")):
    ...     for file_path in entry.files:
    ...         file_index = indexer.index_file(file_path)
"""

from .file_indexer import FileIndexer, build_file_index, read_block
from .tree_walker import TreeWalker

__all__ = ["FileIndexer", "TreeWalker", "build_file_index", "read_block"]
