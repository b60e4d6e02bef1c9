"""
Core data models for the block index.

This module contains the following types:
- BlockIndex: Weak and strong checksum of one block of a file
- FileIndex: Ordered block checksums plus a whole-file strong hash
- DirIndex: Recursive, content-hash-deduplicated directory index
- WalkEntry: One directory yielded by the tree walker
- IndexStats: Counters collected while indexing a tree
- BlockMatch: A block found at an offset of a scanned buffer
- FileTransfer: A file the remote side is missing, with its block split
- TreeDiff: Result of comparing a local tree against a remote lookup

Parent links are ``weakref.ref`` handles. Children own nothing upward, so a
FileIndex or DirIndex never keeps its container alive.
"""

import weakref
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from blockdex.checksum import BLOCKSIZE, strong

from .node_kind import NodeKind


def _encode_name(name: str) -> bytes:
    """Encode a node name exactly as it appears in serialization lines."""
    return name.encode("utf-8", "surrogateescape")


def _sort_key(node: Union["DirIndex", "FileIndex"]) -> Tuple[bytes, int]:
    # Byte order of the encoded name; directories first on equal names
    return _encode_name(node.name), 0 if node.kind is NodeKind.DIR else 1


def _deref(ref: Optional[weakref.ref]):
    return ref() if ref is not None else None


@dataclass(frozen=True)
class BlockIndex:
    """Checksums for one block of a file."""
    weak: int                         # Rolling checksum of the block bytes
    strong: bytes                     # SHA-1 digest of the block bytes
    position: int                     # 1-based position within the file
    size: int                         # Block length in bytes (last may be short)
    file_ref: Optional[weakref.ref] = field(default=None, repr=False, compare=False)

    @property
    def offset(self) -> int:
        """Byte offset of the block within its file."""
        return (self.position - 1) * BLOCKSIZE

    @property
    def file(self) -> Optional["FileIndex"]:
        """The containing FileIndex, or None once it has been released."""
        return _deref(self.file_ref)

    def get_hash(self) -> bytes:
        return self.strong


@dataclass(eq=False)
class FileIndex:
    """Ordered block checksums of one file plus its whole-file hash.

    Built by a single streaming pass over the file. ``strong`` stays None
    until the stream is exhausted.
    """
    name: str                                          # Base name of the file
    blocks: List[BlockIndex] = field(default_factory=list)  # In byte order
    size: int = 0                                      # Total bytes read
    strong: Optional[bytes] = None                     # SHA-1 of full content
    parent_ref: Optional[weakref.ref] = field(default=None, repr=False)

    kind = NodeKind.FILE

    @property
    def parent(self) -> Optional["DirIndex"]:
        return _deref(self.parent_ref)

    def get_hash(self) -> bytes:
        """Return the whole-file strong hash.

        Raises:
            ValueError: If the file stream has not been fully indexed.
        """
        if self.strong is None:
            raise ValueError(f"File index for {self.name!r} is incomplete")
        return self.strong

    def rel_path(self) -> str:
        """Path of this file relative to the indexed root, '/' separated."""
        parent = self.parent
        if parent is None:
            return self.name
        prefix = parent.rel_path()
        return f"{prefix}/{self.name}" if prefix else self.name


class DirIndex:
    """Recursive index of a directory, keyed by content hash once finalized.

    A DirIndex is created empty when the walk first visits a directory and
    is in the *building* state: children are appended with :meth:`add_file`
    and :meth:`add_dir`. :meth:`finalize` turns it into the *finalized*
    state, after which ``dirs`` and ``files`` map each retained child's
    strong hash to the child, ``strong`` holds the directory's own hash and
    the object no longer accepts children.

    Finalization is post-order: every pending subdirectory is finalized
    first because this directory's hash is computed from theirs. Children
    with equal content hash collapse to a single entry; the one whose name
    sorts first is kept.

    The directory hash is the strong hash of :meth:`serialize`, one line per
    retained child::

        <name>\\t<d|f>\\t<lowercase hex strong hash>\\n

    with lines ordered by the UTF-8 bytes of the child name (directories
    before files on equal names).

    Attributes:
        name: Base name of the directory.
        strong: Own strong hash, None while building.
        dirs: Finalized subdirectories keyed by strong hash.
        files: Finalized files keyed by strong hash.
        duplicate_dirs: Subdirectories dropped as content duplicates.
        duplicate_files: Files dropped as content duplicates.
    """

    kind = NodeKind.DIR

    def __init__(self, name: str) -> None:
        self.name = name
        self.strong: Optional[bytes] = None
        self.dirs: Dict[bytes, "DirIndex"] = {}
        self.files: Dict[bytes, FileIndex] = {}
        self.duplicate_dirs = 0
        self.duplicate_files = 0
        self._parent_ref: Optional[weakref.ref] = None
        self._pending_dirs: List["DirIndex"] = []
        self._pending_files: List[FileIndex] = []

    def __repr__(self) -> str:
        state = self.strong.hex() if self.strong is not None else "building"
        return f"DirIndex(name={self.name!r}, {state})"

    @property
    def finalized(self) -> bool:
        return self.strong is not None

    @property
    def parent(self) -> Optional["DirIndex"]:
        return _deref(self._parent_ref)

    @property
    def pending_dirs(self) -> Tuple["DirIndex", ...]:
        return tuple(self._pending_dirs)

    @property
    def pending_files(self) -> Tuple[FileIndex, ...]:
        return tuple(self._pending_files)

    def _check_building(self) -> None:
        if self.finalized:
            raise ValueError(f"Directory index {self.name!r} is already finalized")

    def add_file(self, file_index: FileIndex) -> FileIndex:
        """Append a fully built FileIndex to the pending file list.

        Raises:
            ValueError: If this directory is finalized.
        """
        self._check_building()
        file_index.parent_ref = weakref.ref(self)
        self._pending_files.append(file_index)
        return file_index

    def add_dir(self, child: "DirIndex") -> "DirIndex":
        """Register a pending subdirectory.

        Raises:
            ValueError: If this directory is finalized.
        """
        self._check_building()
        child._parent_ref = weakref.ref(self)
        self._pending_dirs.append(child)
        return child

    def discard_dir(self, child: "DirIndex") -> None:
        """Drop a pending subdirectory that could not be walked."""
        self._check_building()
        self._pending_dirs.remove(child)
        child._parent_ref = None

    def finalize(self) -> "DirIndex":
        """Finalize the subtree rooted here, children first.

        Calling finalize on an already finalized directory returns it
        unchanged.

        Returns:
            This DirIndex.
        """
        if self.finalized:
            return self

        for child in self._pending_dirs:
            child.finalize()

        self.dirs = self._collapse(self._pending_dirs)
        self.files = self._collapse(self._pending_files)
        self.duplicate_dirs = len(self._pending_dirs) - len(self.dirs)
        self.duplicate_files = len(self._pending_files) - len(self.files)
        self._pending_dirs = []
        self._pending_files = []

        self.strong = strong(self._serialize())
        return self

    @staticmethod
    def _collapse(children):
        collapsed = {}
        for child in sorted(children, key=_sort_key):
            collapsed.setdefault(child.get_hash(), child)
        return collapsed

    def children(self) -> List[Union["DirIndex", FileIndex]]:
        """Retained children in serialization order."""
        return sorted(
            [*self.dirs.values(), *self.files.values()], key=_sort_key
        )

    def _serialize(self) -> bytes:
        lines = []
        for child in self.children():
            lines.append(
                b"%s\t%s\t%s\n"
                % (
                    _encode_name(child.name),
                    child.kind.value.encode("ascii"),
                    child.get_hash().hex().encode("ascii"),
                )
            )
        return b"".join(lines)

    def serialize(self) -> bytes:
        """Canonical serialization of the retained children.

        Raises:
            ValueError: If this directory has not been finalized.
        """
        if not self.finalized:
            raise ValueError(f"Directory index {self.name!r} is not finalized")
        return self._serialize()

    def get_hash(self) -> bytes:
        """Return this directory's strong hash.

        Raises:
            ValueError: If this directory has not been finalized.
        """
        if self.strong is None:
            raise ValueError(f"Directory index {self.name!r} is not finalized")
        return self.strong

    def rel_path(self) -> str:
        """Path relative to the indexed root; the root itself is ''."""
        parent = self.parent
        if parent is None:
            return ""
        prefix = parent.rel_path()
        return f"{prefix}/{self.name}" if prefix else self.name

    def walk(self) -> Iterator["DirIndex"]:
        """Yield this directory and every retained descendant, pre-order."""
        stack = [self]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(
                sorted(current.dirs.values(), key=_sort_key, reverse=True)
            )

    @classmethod
    def restore(
        cls,
        name: str,
        dirs: List["DirIndex"],
        files: List[FileIndex],
        expected: Optional[bytes] = None,
    ) -> "DirIndex":
        """Rebuild a finalized directory from already finalized children.

        Args:
            name: Directory name.
            dirs: Finalized subdirectories.
            files: Complete file indexes.
            expected: Stored strong hash to verify against, if any.

        Returns:
            The finalized DirIndex.

        Raises:
            ValueError: If the recomputed hash differs from ``expected``.
        """
        restored = cls(name)
        for child in dirs:
            if not child.finalized:
                raise ValueError(f"Subdirectory {child.name!r} is not finalized")
            restored.add_dir(child)
        for file_index in files:
            restored.add_file(file_index)
        restored.finalize()
        if expected is not None and restored.strong != expected:
            raise ValueError(
                f"Directory hash mismatch for {name!r}: "
                f"stored {expected.hex()}, computed {restored.strong.hex()}"
            )
        return restored


@dataclass
class WalkEntry:
    """One directory yielded by the tree walker."""
    path: Path                        # Full path of the directory
    subdirs: List[Path]               # Immediate subdirectories, full paths
    files: List[Path]                 # Immediate regular files, full paths


@dataclass
class IndexStats:
    """Counters collected while indexing a tree."""
    root_path: Optional[Path] = None  # Indexed root
    root_hash: str = ""               # Hex strong hash of the root
    dirs_indexed: int = 0             # Directories visited by the walk
    files_indexed: int = 0            # Files successfully indexed
    blocks_indexed: int = 0           # Blocks checksummed
    bytes_indexed: int = 0            # Bytes read
    duplicate_dirs: int = 0           # Subtrees collapsed by content hash
    duplicate_files: int = 0          # Files collapsed by content hash
    errors: List[str] = field(default_factory=list)  # Skipped entries
    duration: float = 0.0             # Wall time in seconds


@dataclass(frozen=True)
class BlockMatch:
    """A known block found in a scanned buffer."""
    offset: int                       # Offset in the scanned data
    block: BlockIndex                 # The matching indexed block


@dataclass
class FileTransfer:
    """A file the remote side lacks, split into reusable and missing blocks."""
    path: str                         # Path relative to the local root
    file: FileIndex                   # Local file index
    reusable_blocks: List[BlockIndex] = field(default_factory=list)
    missing_blocks: List[BlockIndex] = field(default_factory=list)

    @property
    def bytes_to_send(self) -> int:
        return sum(block.size for block in self.missing_blocks)


@dataclass
class TreeDiff:
    """What a remote peer already has of a local tree, and what it lacks."""
    root_shared: bool = False         # Remote already has the whole tree
    shared_dirs: List[str] = field(default_factory=list)   # Whole subtrees known
    shared_files: List[str] = field(default_factory=list)  # Whole files known
    transfers: List[FileTransfer] = field(default_factory=list)

    @property
    def bytes_to_send(self) -> int:
        return sum(transfer.bytes_to_send for transfer in self.transfers)

    @property
    def blocks_to_send(self) -> int:
        return sum(len(transfer.missing_blocks) for transfer in self.transfers)
