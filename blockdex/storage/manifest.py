"""Versioned JSON manifest of a finalized index.

A manifest stores a whole DirIndex tree so that it can be handed to a peer
or compared later without re-reading the files. Hashes are stored as
lowercase hex. Loading re-links parent handles and recomputes every
directory hash from its children, so a manifest whose directory entries were
altered is rejected.

Document layout::

    {
      "version": 1,
      "root": {
        "name": "data",
        "strong": "<hex>",
        "dirs": [ <dir>, ... ],
        "files": [
          {"name": "a.txt", "strong": "<hex>", "size": 5,
           "blocks": [[<weak>, "<hex>", <size>], ...]}
        ]
      }
    }
"""

import json
import weakref
from pathlib import Path
from typing import Any, Dict

from blockdex.models import BlockIndex, DirIndex, FileIndex

MANIFEST_VERSION = 1


def to_dict(root: DirIndex) -> Dict[str, Any]:
    """Convert a finalized tree to a JSON-ready document.

    Raises:
        ValueError: If ``root`` is not finalized.
    """
    return {"version": MANIFEST_VERSION, "root": _dir_to_dict(root)}


def _dir_to_dict(dir_index: DirIndex) -> Dict[str, Any]:
    children = dir_index.children()
    return {
        "name": dir_index.name,
        "strong": dir_index.get_hash().hex(),
        "dirs": [_dir_to_dict(c) for c in children if isinstance(c, DirIndex)],
        "files": [_file_to_dict(c) for c in children if isinstance(c, FileIndex)],
    }


def _file_to_dict(file_index: FileIndex) -> Dict[str, Any]:
    return {
        "name": file_index.name,
        "strong": file_index.get_hash().hex(),
        "size": file_index.size,
        "blocks": [
            [block.weak, block.strong.hex(), block.size]
            for block in file_index.blocks
        ],
    }


def from_dict(document: Dict[str, Any]) -> DirIndex:
    """Rebuild a finalized tree from a manifest document.

    Raises:
        ValueError: On a version mismatch, malformed entries, or a directory
            hash that does not match its children.
    """
    version = document.get("version")
    if version != MANIFEST_VERSION:
        raise ValueError(
            f"Manifest version {MANIFEST_VERSION} reader cannot decode version {version}"
        )
    try:
        return _dir_from_dict(document["root"])
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed manifest entry: {e}")


def _name(entry: Dict[str, Any]) -> str:
    name = entry["name"]
    if not isinstance(name, str):
        raise ValueError(f"Malformed manifest entry: name must be a string, got {name!r}")
    return name


def _dir_from_dict(entry: Dict[str, Any]) -> DirIndex:
    return DirIndex.restore(
        name=_name(entry),
        dirs=[_dir_from_dict(child) for child in entry["dirs"]],
        files=[_file_from_dict(child) for child in entry["files"]],
        expected=bytes.fromhex(entry["strong"]),
    )


def _file_from_dict(entry: Dict[str, Any]) -> FileIndex:
    file_index = FileIndex(
        name=_name(entry),
        size=entry["size"],
        strong=bytes.fromhex(entry["strong"]),
    )
    file_ref = weakref.ref(file_index)
    for position, (weak, block_hash, size) in enumerate(entry["blocks"], start=1):
        file_index.blocks.append(
            BlockIndex(
                weak=weak,
                strong=bytes.fromhex(block_hash),
                position=position,
                size=size,
                file_ref=file_ref,
            )
        )
    if sum(block.size for block in file_index.blocks) != file_index.size:
        raise ValueError(f"Block sizes do not add up for file {file_index.name!r}")
    return file_index


def save_manifest(root: DirIndex, manifest_path: Path) -> None:
    """Write a finalized tree to a manifest file.

    Raises:
        OSError: If the file cannot be written.
    """
    Path(manifest_path).write_text(
        json.dumps(to_dict(root), indent=2), encoding="utf-8"
    )


def load_manifest(manifest_path: Path) -> DirIndex:
    """Read a manifest file and rebuild its finalized tree.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not a valid manifest.
    """
    document = json.loads(Path(manifest_path).read_text(encoding="utf-8"))
    if not isinstance(document, dict):
        raise ValueError(f"Not a manifest: {manifest_path}")
    return from_dict(document)
