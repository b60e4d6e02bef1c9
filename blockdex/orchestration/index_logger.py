"""IndexLogger for writing indexing runs to a structured log file.

The log is plain text, split into sections separated by a rule line: a
header, the index phase, skipped entries, an optional diff phase and a
summary.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO

from blockdex.models import IndexStats, TreeDiff


class IndexLogger:
    """Logger for indexing runs with structured output format.

    Usage:
        with IndexLogger(mode="INDEX") as logger:
            logger.log_header()
            logger.log_index_phase(stats)
            logger.log_skipped(stats.errors)
            logger.log_summary(stats.duration)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(self, log_file_path: Optional[Path] = None, mode: str = "INDEX") -> None:
        """Initialize the IndexLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            mode: Run mode written in the header (e.g. INDEX, DIFF).

        Raises:
            OSError: If the log file path is not writable.
        """
        self._mode = mode
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"blockdex_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file's parent directory is usable.

        Raises:
            OSError: If the parent directory doesn't exist or is not a directory.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")

    def __enter__(self) -> "IndexLogger":
        """Enter the context manager, opening the log file.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(
                self._log_file_path, "w", encoding="utf-8", errors="backslashreplace"
            )
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the context manager, closing the log file."""
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, timestamp and mode."""
        self._write_separator()
        self._write_line("blockdex - Index Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        self._write_line(f"Mode: {self._mode}")
        self._write_line("")

    def log_index_phase(self, stats: IndexStats, label: str = "INDEX PHASE") -> None:
        """Write the counters of one indexing run.

        Args:
            stats: Counters returned by the indexer.
            label: Section title, so a diff run can log both trees.
        """
        self._write_separator()
        self._write_line(label)
        self._write_separator()
        self._write_line(f"Root Path: {stats.root_path}")
        self._write_line(f"Root Hash: {stats.root_hash}")
        self._write_line(f"Directories indexed: {stats.dirs_indexed:,}")
        self._write_line(f"Files indexed: {stats.files_indexed:,}")
        self._write_line(f"Blocks indexed: {stats.blocks_indexed:,}")
        self._write_line(f"Bytes indexed: {stats.bytes_indexed:,}")
        self._write_line(f"Duplicate directories collapsed: {stats.duplicate_dirs:,}")
        self._write_line(f"Duplicate files collapsed: {stats.duplicate_files:,}")
        self._write_line(f"Duration: {self._format_duration(stats.duration)}")
        self._write_line("")

    def log_skipped(self, errors: List[str]) -> None:
        """Write every entry that was left out of the index."""
        if not errors:
            return
        self._write_separator()
        self._write_line("SKIPPED ENTRIES")
        self._write_separator()
        for error in errors:
            self._write_line(f"- {error}", indent=2)
        self._write_line("")

    def log_diff_phase(self, diff: TreeDiff) -> None:
        """Write what the remote side already has and what it lacks."""
        self._write_separator()
        self._write_line("DIFF PHASE")
        self._write_separator()
        if diff.root_shared:
            self._write_line("Remote already holds the whole tree.")
            self._write_line("")
            return

        self._write_line(f"Shared directories: {len(diff.shared_dirs)}")
        for path in diff.shared_dirs:
            self._write_line(f"= {path}/", indent=2)
        self._write_line(f"Shared files: {len(diff.shared_files)}")
        for path in diff.shared_files:
            self._write_line(f"= {path}", indent=2)
        self._write_line(f"Files to transfer: {len(diff.transfers)}")
        for transfer in diff.transfers:
            self._write_line(
                f"+ {transfer.path} ({len(transfer.missing_blocks)} missing, "
                f"{len(transfer.reusable_blocks)} reusable blocks)",
                indent=2,
            )
        self._write_line(f"Blocks to send: {diff.blocks_to_send:,}")
        self._write_line(f"Bytes to send: {diff.bytes_to_send:,}")
        self._write_line("")

    def log_summary(self, duration: float, error_count: int = 0) -> None:
        """Write the closing summary section."""
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Total errors: {error_count}")
        self._write_line(f"Duration: {self._format_duration(duration)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _format_duration(self, seconds: float) -> str:
        """Format duration in human-readable format.

        Args:
            seconds: Duration in seconds.

        Returns:
            Formatted string like "5m 23s", "1h 5m 30s", or "45s".
        """
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        else:
            return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation.

        Args:
            text: The text to write.
            indent: Number of spaces to indent the line.
        """
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)
