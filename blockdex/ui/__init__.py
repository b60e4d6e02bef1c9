"""Terminal UI package for blockdex."""

from .index_tui import IndexTUI

__all__ = ["IndexTUI"]
