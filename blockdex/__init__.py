"""blockdex - Content-addressed block indexing of directory trees.

A Python library and command-line tool that computes rsync-style weak
rolling checksums and SHA-1 strong hashes over fixed-size blocks of every
file in a tree, and assembles a deduplicated, Merkle-style directory index
keyed by content hash.
"""

__version__ = "0.1.0"

from .checksum import BLOCKSIZE
from .models import (
    BlockIndex,
    BlockMatch,
    DirIndex,
    FileIndex,
    FileTransfer,
    IndexStats,
    NodeKind,
    TreeDiff,
    WalkEntry,
)

__all__ = [
    "__version__",
    "BLOCKSIZE",
    "BlockIndex",
    "BlockMatch",
    "DirIndex",
    "FileIndex",
    "FileTransfer",
    "IndexStats",
    "NodeKind",
    "TreeDiff",
    "WalkEntry",
]


def main() -> None:
    """Entry point for the blockdex CLI application.

    This function is called when the `blockdex` command is invoked after
    package installation via pip. It imports and runs the Typer app
    from the blockdex.cli module.
    """
    from blockdex.cli import app
    app()
