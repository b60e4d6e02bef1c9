"""IndexOrchestrator for coordinating indexing and diff workflows.

This module provides the IndexOrchestrator class that wires the TreeWalker,
Indexer, TreeDiffer, manifest storage, IndexTUI and IndexLogger together
for the two command-line workflows.

Example:
    from blockdex.orchestration import IndexOrchestrator
    from pathlib import Path

    orchestrator = IndexOrchestrator(root_path=Path("/data"), verbose=True)

    # Index and store a manifest
    stats = orchestrator.run_index_workflow(manifest_path=Path("data.json"))

    # Compare against a peer's manifest
    diff = orchestrator.run_diff_workflow(Path("peer.json"))
"""

import sys
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from rich.console import Console

from blockdex.indexing import HashLookup, Indexer, TreeDiffer
from blockdex.models import DirIndex, IndexStats, TreeDiff
from blockdex.orchestration.index_logger import IndexLogger
from blockdex.scanning import TreeWalker
from blockdex.storage import load_manifest, save_manifest
from blockdex.ui import IndexTUI


class IndexOrchestrator:
    """Orchestrates indexing and diff workflows.

    Attributes:
        root_path: Directory to index.
        log_file_path: Optional path for the log file; no log is written
            when None.
        verbose: Whether to print skipped entries.
        follow_symlinks: Whether the walker follows symbolic links.
        exclude: Names skipped by the walker.
        root: Finalized root from the most recent run, if any.
    """

    def __init__(
        self,
        root_path: Path,
        log_file_path: Optional[Path] = None,
        verbose: bool = False,
        follow_symlinks: bool = False,
        exclude: Optional[Iterable[str]] = None,
        console: Optional[Console] = None,
    ) -> None:
        """Initialize the IndexOrchestrator.

        Args:
            root_path: Directory to index.
            log_file_path: Optional path for a structured log file.
            verbose: If True, print skipped entries after each run.
            follow_symlinks: If True, follow symbolic links while walking.
            exclude: File and directory names to skip.
            console: Optional Rich Console, e.g. for capturing output.
        """
        self.root_path = root_path
        self.log_file_path = log_file_path
        self.verbose = verbose
        self.follow_symlinks = follow_symlinks
        self.exclude: List[str] = list(exclude or ())
        self.root: Optional[DirIndex] = None
        self._tui = IndexTUI(console)

    @property
    def tui(self) -> IndexTUI:
        return self._tui

    def _index_tree(self, path: Path) -> Tuple[DirIndex, IndexStats]:
        indexer = Indexer(
            walker=TreeWalker(follow_symlinks=self.follow_symlinks, exclude=self.exclude)
        )
        root = indexer.index(path)
        return root, indexer.get_stats()

    def run_index_workflow(self, manifest_path: Optional[Path] = None) -> IndexStats:
        """Index the root directory, display the result and log it.

        Args:
            manifest_path: If given, the finalized index is saved there.

        Returns:
            Counters for the run.

        Raises:
            FileNotFoundError: If the root path does not exist.
            NotADirectoryError: If the root path is not a directory.
            PermissionError: If the root path cannot be read.
            OSError: If the manifest cannot be written.
        """
        self.root, stats = self._index_tree(self.root_path)

        self._tui.display_index_summary(stats)
        if self.verbose:
            self._tui.display_errors(stats.errors)

        if manifest_path is not None:
            save_manifest(self.root, manifest_path)
            self._tui.console.print(f"[dim]Manifest written to: {manifest_path}[/dim]")

        self._write_log("INDEX", [stats], None, stats.duration, stats.errors)
        return stats

    def run_diff_workflow(self, remote_path: Path) -> TreeDiff:
        """Compare the root directory against a remote tree.

        Args:
            remote_path: A manifest file, or a directory that is indexed
                on the fly.

        Returns:
            What the remote side already has and what it must receive.

        Raises:
            FileNotFoundError: If either path does not exist.
            NotADirectoryError: If the root path is not a directory.
            PermissionError: If either path cannot be read.
            ValueError: If remote_path is a file but not a valid manifest.
        """
        self.root, local_stats = self._index_tree(self.root_path)
        runs = [local_stats]

        if remote_path.is_file():
            remote_root = load_manifest(remote_path)
        else:
            remote_root, remote_stats = self._index_tree(remote_path)
            runs.append(remote_stats)

        diff = TreeDiffer(HashLookup(remote_root)).diff(self.root)

        self._tui.display_diff(diff)
        errors = [error for run in runs for error in run.errors]
        if self.verbose:
            self._tui.display_errors(errors)

        duration = sum(run.duration for run in runs)
        self._write_log("DIFF", runs, diff, duration, errors)
        return diff

    def _write_log(
        self,
        mode: str,
        runs: List[IndexStats],
        diff: Optional[TreeDiff],
        duration: float,
        errors: List[str],
    ) -> None:
        if self.log_file_path is None:
            return
        try:
            with IndexLogger(self.log_file_path, mode=mode) as logger:
                logger.log_header()
                labels = ["INDEX PHASE", "REMOTE INDEX PHASE"]
                for label, stats in zip(labels, runs):
                    logger.log_index_phase(stats, label=label)
                logger.log_skipped(errors)
                if diff is not None:
                    logger.log_diff_phase(diff)
                logger.log_summary(duration, error_count=len(errors))

                if self.verbose:
                    self._tui.console.print(
                        f"[dim]Log file: {logger.get_log_path()}[/dim]"
                    )
        except OSError as e:
            # Logging problems are not fatal to the workflow
            print(f"Warning: Could not create log file: {e}", file=sys.stderr)
