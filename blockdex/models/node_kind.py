"""
NodeKind enum for the canonical directory serialization.

Each line of a directory's serialization carries a single-character kind
column telling the reader whether the child is a directory or a file.
"""

from enum import Enum


class NodeKind(Enum):
    """Kind column values used in directory serialization lines."""
    DIR = "d"      # Child is a directory
    FILE = "f"     # Child is a regular file
