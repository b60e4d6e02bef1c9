"""Storage package for blockdex.

- LocalStore: Serves block and file bytes by strong hash from a directory.
- save_manifest / load_manifest: Versioned JSON manifest of a finalized index.
"""

from .local_store import LocalStore
from .manifest import MANIFEST_VERSION, from_dict, load_manifest, save_manifest, to_dict

__all__ = [
    "LocalStore",
    "MANIFEST_VERSION",
    "from_dict",
    "load_manifest",
    "save_manifest",
    "to_dict",
]
