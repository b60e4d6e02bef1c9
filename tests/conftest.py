"""Pytest fixtures for blockdex tests."""

import io
import os
import platform
import tempfile
from pathlib import Path
from typing import Dict, Generator, Optional

import pytest
from rich.console import Console

from blockdex.checksum import BLOCKSIZE
from blockdex.indexing import Indexer
from blockdex.models import DirIndex
from blockdex.ui import IndexTUI


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests that index real directory trees")


def permissions_enforced() -> bool:
    """Whether chmod-based permission tests can work here (not Windows, not root)."""
    if platform.system() == "Windows":
        return False
    return hasattr(os, "geteuid") and os.geteuid() != 0


def index_tree(path: Path) -> DirIndex:
    """Index a directory with default settings."""
    return Indexer().index(path)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_files(temp_dir: Path) -> Dict[str, Path]:
    """Create files around the block boundary with known content.

    Creates:
        - empty.bin: 0 bytes
        - small.bin: 5 bytes ("hello")
        - exact.bin: exactly one block
        - two_blocks.bin: two full blocks
        - partial.bin: two full blocks plus 100 bytes

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Dictionary mapping short names to file paths.
    """
    files = {}

    files["empty"] = temp_dir / "empty.bin"
    files["empty"].touch()

    files["small"] = temp_dir / "small.bin"
    files["small"].write_bytes(b"hello")

    files["exact"] = temp_dir / "exact.bin"
    files["exact"].write_bytes(bytes(range(256)) * (BLOCKSIZE // 256))

    files["two_blocks"] = temp_dir / "two_blocks.bin"
    files["two_blocks"].write_bytes(b"a" * BLOCKSIZE + b"b" * BLOCKSIZE)

    files["partial"] = temp_dir / "partial.bin"
    files["partial"].write_bytes(b"x" * (2 * BLOCKSIZE) + b"y" * 100)

    return files


@pytest.fixture
def sample_tree(temp_dir: Path) -> Path:
    """Create a nested tree with duplicate files and duplicate subtrees.

    Creates:
        tree/
        ├── readme.txt      ("read me")
        ├── copy.txt        ("read me", duplicate of readme.txt)
        ├── big.bin         (3 blocks + 10 bytes)
        ├── docs/
        │   ├── a.txt       ("alpha")
        │   └── nested/
        │       └── b.txt   ("beta")
        ├── docs_backup/    (same content as docs/)
        │   ├── a.txt
        │   └── nested/
        │       └── b.txt
        └── empty/

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Path to the tree root.
    """
    root = temp_dir / "tree"
    root.mkdir()
    (root / "readme.txt").write_bytes(b"read me")
    (root / "copy.txt").write_bytes(b"read me")
    (root / "big.bin").write_bytes(os.urandom(3 * BLOCKSIZE + 10))

    for name in ("docs", "docs_backup"):
        docs = root / name
        (docs / "nested").mkdir(parents=True)
        (docs / "a.txt").write_bytes(b"alpha")
        (docs / "nested" / "b.txt").write_bytes(b"beta")

    (root / "empty").mkdir()
    return root


@pytest.fixture
def restricted_file(temp_dir: Path) -> Generator[Optional[Path], None, None]:
    """Create a file with no read permissions.

    Yields:
        Path to the restricted file, or None where permissions are not
        enforced (Windows, or running as root).
    """
    if not permissions_enforced():
        yield None
        return

    restricted = temp_dir / "restricted.txt"
    restricted.write_text("secret content")
    original_mode = restricted.stat().st_mode
    os.chmod(restricted, 0o000)

    try:
        yield restricted
    finally:
        # Restore permissions for cleanup
        os.chmod(restricted, original_mode)


@pytest.fixture
def captured_tui() -> IndexTUI:
    """IndexTUI writing into an in-memory buffer (read via .console.file)."""
    console = Console(file=io.StringIO(), force_terminal=False, width=200)
    return IndexTUI(console=console)
