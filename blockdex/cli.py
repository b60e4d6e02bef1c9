"""
blockdex - CLI Interface.

A command-line interface for building content-addressed block indexes of
directory trees and comparing them, so a peer can tell which subtrees,
files and blocks it already has.

Usage Examples:
    # Index a directory and print its root hash
    python -m blockdex index /path/to/data

    # Index and store the result as a manifest
    python -m blockdex index /path/to/data --manifest data.json

    # Compare against a peer's manifest (or directory)
    python -m blockdex diff /path/to/data peer.json

    # Show a stored manifest as a tree
    python -m blockdex show data.json --depth 2
"""

import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from blockdex.orchestration import IndexOrchestrator
from blockdex.storage import load_manifest
from blockdex.ui import IndexTUI

__version__ = "0.1.0"

# Initialize Typer app
app = typer.Typer(
    name="blockdex",
    help="blockdex - Content-addressed block indexes of directory trees.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"blockdex v{__version__}")
        raise typer.Exit()


def validate_root_path(root_path: Path) -> None:
    """
    Validate that the provided root path exists and is accessible.

    Args:
        root_path: Path to validate.

    Raises:
        typer.Exit: If validation fails with descriptive error message.
    """
    if not root_path.exists():
        console.print(f"[red]Error:[/red] Path does not exist: {root_path}")
        raise typer.Exit(1)

    if not root_path.is_dir():
        console.print(f"[red]Error:[/red] Path is not a directory: {root_path}")
        raise typer.Exit(1)

    if not os.access(root_path, os.R_OK):
        console.print(f"[red]Error:[/red] Permission denied - cannot read: {root_path}")
        raise typer.Exit(1)


def validate_depth(value: Optional[int]) -> Optional[int]:
    """Validate that a tree depth, when given, is at least 1."""
    if value is not None and value < 1:
        raise typer.BadParameter("Depth must be at least 1")
    return value


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """blockdex - Content-addressed block indexes of directory trees."""
    pass


@app.command()
def index(
    root_path: Path = typer.Argument(
        ...,
        help="Directory to index.",
        exists=False,  # We do our own validation
    ),
    manifest: Optional[Path] = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Write the finished index to this manifest file.",
    ),
    exclude: Optional[List[str]] = typer.Option(
        None,
        "--exclude",
        "-x",
        help="File or directory name to skip (repeatable).",
    ),
    follow_symlinks: bool = typer.Option(
        False,
        "--follow-symlinks",
        help="Follow symbolic links to files and directories.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
) -> None:
    """
    Index a directory tree.

    Computes per-block weak and strong checksums for every file, collapses
    content duplicates and prints the resulting root hash.
    """
    validate_root_path(root_path)

    try:
        orchestrator = IndexOrchestrator(
            root_path=root_path,
            log_file_path=log_file,
            verbose=verbose,
            follow_symlinks=follow_symlinks,
            exclude=exclude,
            console=console,
        )
        stats = orchestrator.run_index_workflow(manifest_path=manifest)

        if stats.errors and not verbose:
            console.print(
                f"\n[yellow]Skipped entries: {len(stats.errors)}. "
                "Use --verbose to list them.[/yellow]"
            )

    except KeyboardInterrupt:
        console.print("\n[yellow]Indexing interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except PermissionError as e:
        console.print(f"[red]Error:[/red] Permission denied - {e}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def diff(
    root_path: Path = typer.Argument(
        ...,
        help="Local directory to send from.",
        exists=False,  # We do our own validation
    ),
    remote: Path = typer.Argument(
        ...,
        help="Remote side: a manifest file or a directory.",
        exists=False,
    ),
    exclude: Optional[List[str]] = typer.Option(
        None,
        "--exclude",
        "-x",
        help="File or directory name to skip (repeatable).",
    ),
    follow_symlinks: bool = typer.Option(
        False,
        "--follow-symlinks",
        help="Follow symbolic links to files and directories.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
) -> None:
    """
    Show what a remote tree already has and what it would need to receive.

    Subtrees and files whose hashes the remote knows are shared; every
    other file is split into reusable and missing blocks.
    """
    validate_root_path(root_path)

    if not remote.exists():
        console.print(f"[red]Error:[/red] Remote path does not exist: {remote}")
        raise typer.Exit(1)

    try:
        orchestrator = IndexOrchestrator(
            root_path=root_path,
            log_file_path=log_file,
            verbose=verbose,
            follow_symlinks=follow_symlinks,
            exclude=exclude,
            console=console,
        )
        orchestrator.run_diff_workflow(remote)

    except KeyboardInterrupt:
        console.print("\n[yellow]Diff interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid manifest - {e}")
        raise typer.Exit(1)

    except PermissionError as e:
        console.print(f"[red]Error:[/red] Permission denied - {e}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def show(
    manifest: Path = typer.Argument(
        ...,
        help="Manifest file written by 'index --manifest'.",
        exists=False,
    ),
    depth: Optional[int] = typer.Option(
        None,
        "--depth",
        "-d",
        help="Deepest directory level to expand.",
        callback=validate_depth,
    ),
) -> None:
    """
    Display a stored manifest as a tree of names and hashes.
    """
    if not manifest.is_file():
        console.print(f"[red]Error:[/red] Manifest not found: {manifest}")
        raise typer.Exit(1)

    try:
        root = load_manifest(manifest)
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid manifest - {e}")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    IndexTUI(console).display_tree(root, max_depth=depth)


if __name__ == "__main__":
    app()
