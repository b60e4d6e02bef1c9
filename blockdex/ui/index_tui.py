"""Terminal output for blockdex.

This module provides the IndexTUI class, a Rich-based display layer for
index summaries, stored index trees and diff results.

Example:
    from blockdex.ui import IndexTUI

    tui = IndexTUI()
    tui.display_index_summary(stats)
    tui.display_tree(root)
    tui.display_diff(diff)
"""

from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from blockdex.models import DirIndex, IndexStats, TreeDiff


class IndexTUI:
    """Rich-based display for indexing results.

    Args:
        console: Optional Rich Console instance for output. If None, creates
            a new Console. Pass a custom Console for testing (e.g., with
            StringIO file for output capture).

    Attributes:
        console: The Rich Console instance used for all output.
    """

    # Hex digits shown for hashes in tables and trees
    SHORT_HASH = 12

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display_index_summary(self, stats: IndexStats) -> None:
        """Display the counters of an indexing run in a panel.

        Args:
            stats: Counters returned by the indexer.
        """
        body = (
            f"Root: {stats.root_path}\n"
            f"Root hash: [bold]{stats.root_hash}[/bold]\n"
            f"Directories: {stats.dirs_indexed:,}\n"
            f"Files: {stats.files_indexed:,}\n"
            f"Blocks: {stats.blocks_indexed:,}\n"
            f"Bytes: {self._format_size(stats.bytes_indexed)}\n"
            f"Duplicates collapsed: {stats.duplicate_files:,} files, "
            f"{stats.duplicate_dirs:,} directories\n"
            f"Skipped entries: {len(stats.errors)}"
        )
        self.console.print(Panel(body, title="Index Results", border_style="blue"))

    def display_tree(self, root: DirIndex, max_depth: Optional[int] = None) -> None:
        """Render a finalized index as a tree of names and short hashes.

        Args:
            root: Finalized root DirIndex.
            max_depth: Deepest directory level to expand; None for all.
        """
        tree = Tree(self._label(root.name or "/", root.get_hash(), is_dir=True))
        self._add_children(tree, root, 1, max_depth)
        self.console.print(tree)

    def _add_children(
        self, branch: Tree, dir_index: DirIndex, depth: int, max_depth: Optional[int]
    ) -> None:
        for child in dir_index.children():
            if isinstance(child, DirIndex):
                sub = branch.add(self._label(child.name, child.get_hash(), is_dir=True))
                if max_depth is None or depth < max_depth:
                    self._add_children(sub, child, depth + 1, max_depth)
                elif child.children():
                    sub.add("[dim]...[/dim]")
            else:
                branch.add(
                    self._label(child.name, child.get_hash(), is_dir=False)
                    + f" [dim]{len(child.blocks)} blocks[/dim]"
                )

    def display_diff(self, diff: TreeDiff) -> None:
        """Display what the remote side already has and what must be sent.

        Args:
            diff: Result of a tree comparison.
        """
        if diff.root_shared:
            self.console.print(
                "[green]Remote already holds the whole tree. Nothing to send.[/green]"
            )
            return

        body = (
            f"Shared directories: {len(diff.shared_dirs):,}\n"
            f"Shared files: {len(diff.shared_files):,}\n"
            f"Files to transfer: {len(diff.transfers):,}\n"
            f"Blocks to send: {diff.blocks_to_send:,}\n"
            f"Bytes to send: {self._format_size(diff.bytes_to_send)}"
        )
        self.console.print(Panel(body, title="Diff Results", border_style="blue"))

        if not diff.transfers:
            return

        table = Table(title="Files to Transfer")
        table.add_column("Path", style="cyan")
        table.add_column("Hash", style="magenta", no_wrap=True)
        table.add_column("Reusable", justify="right")
        table.add_column("Missing", justify="right")
        table.add_column("Bytes", justify="right")
        for transfer in diff.transfers:
            table.add_row(
                escape(transfer.path),
                transfer.file.get_hash().hex()[: self.SHORT_HASH],
                str(len(transfer.reusable_blocks)),
                str(len(transfer.missing_blocks)),
                self._format_size(transfer.bytes_to_send),
            )
        self.console.print(table)

    def display_errors(self, errors: List[str]) -> None:
        """List skipped entries as warnings."""
        if not errors:
            return
        self.console.print("[yellow]Skipped entries:[/yellow]")
        for error in errors:
            self.console.print(f"  [dim]- {escape(error)}[/dim]")

    def _label(self, name: str, digest: bytes, is_dir: bool) -> str:
        short = digest.hex()[: self.SHORT_HASH]
        if is_dir:
            return f"[bold blue]{escape(name)}/[/bold blue] [dim]{short}[/dim]"
        return f"{escape(name)} [dim]{short}[/dim]"

    def _format_size(self, size: int) -> str:
        """Format a byte count as a human-readable size."""
        value = float(size)
        for unit in ("B", "KB", "MB"):
            if value < 1024:
                return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
            value /= 1024
        return f"{value:.1f} GB"
