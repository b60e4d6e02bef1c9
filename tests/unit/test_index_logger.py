"""Unit tests for IndexLogger."""

import os
import re
from pathlib import Path

import pytest

from blockdex.models import IndexStats, TreeDiff
from blockdex.orchestration import IndexLogger

from conftest import index_tree


def make_stats(**overrides) -> IndexStats:
    values = dict(
        root_path=Path("/data/photos"),
        root_hash="ab" * 20,
        dirs_indexed=3,
        files_indexed=1234,
        blocks_indexed=5000,
        bytes_indexed=40_960_000,
        duplicate_dirs=1,
        duplicate_files=2,
        errors=[],
        duration=75.0,
    )
    values.update(overrides)
    return IndexStats(**values)


@pytest.mark.unit
class TestIndexLoggerBasic:

    def test_auto_generated_filename(self, temp_dir: Path):
        original_cwd = os.getcwd()
        try:
            os.chdir(temp_dir)
            with IndexLogger() as logger:
                log_path = logger.get_log_path()
                assert log_path.parent == temp_dir
                pattern = r"blockdex_\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.log"
                assert re.match(pattern, log_path.name)
        finally:
            os.chdir(original_cwd)

    def test_header(self, temp_dir: Path):
        log_path = temp_dir / "run.log"
        with IndexLogger(log_file_path=log_path, mode="DIFF") as logger:
            logger.log_header()

        content = log_path.read_text()
        assert "blockdex - Index Log" in content
        assert "Mode: DIFF" in content
        assert IndexLogger.SEPARATOR in content

    def test_missing_parent_directory(self, temp_dir: Path):
        with pytest.raises(OSError):
            IndexLogger(log_file_path=temp_dir / "nope" / "run.log")

    def test_write_after_close_warns(self, temp_dir: Path, capsys):
        logger = IndexLogger(log_file_path=temp_dir / "run.log")
        with logger:
            pass

        logger.log_header()

        assert "closed log file" in capsys.readouterr().err


@pytest.mark.unit
class TestIndexLoggerSections:

    def test_index_phase(self, temp_dir: Path):
        log_path = temp_dir / "run.log"
        with IndexLogger(log_file_path=log_path) as logger:
            logger.log_index_phase(make_stats())

        content = log_path.read_text()
        assert "INDEX PHASE" in content
        assert "Root Hash: " + "ab" * 20 in content
        assert "Files indexed: 1,234" in content
        assert "Bytes indexed: 40,960,000" in content
        assert "Duration: 1m 15s" in content

    def test_custom_label(self, temp_dir: Path):
        log_path = temp_dir / "run.log"
        with IndexLogger(log_file_path=log_path) as logger:
            logger.log_index_phase(make_stats(), label="REMOTE INDEX PHASE")

        assert "REMOTE INDEX PHASE" in log_path.read_text()

    def test_skipped_entries(self, temp_dir: Path):
        log_path = temp_dir / "run.log"
        with IndexLogger(log_file_path=log_path) as logger:
            logger.log_skipped([])
            logger.log_skipped(["Permission denied: /data/x"])

        content = log_path.read_text()
        assert content.count("SKIPPED ENTRIES") == 1
        assert "  - Permission denied: /data/x" in content

    def test_diff_phase_root_shared(self, temp_dir: Path):
        log_path = temp_dir / "run.log"
        with IndexLogger(log_file_path=log_path) as logger:
            logger.log_diff_phase(TreeDiff(root_shared=True))

        assert "Remote already holds the whole tree." in log_path.read_text()

    def test_diff_phase_transfers(self, sample_tree: Path, temp_dir: Path):
        from blockdex.indexing import HashLookup, TreeDiffer

        remote = temp_dir / "remote"
        (remote / "docs").mkdir(parents=True)
        (remote / "docs" / "a.txt").write_bytes(b"alpha")
        diff = TreeDiffer(HashLookup(index_tree(remote))).diff(index_tree(sample_tree))

        log_path = temp_dir / "run.log"
        with IndexLogger(log_file_path=log_path) as logger:
            logger.log_diff_phase(diff)

        content = log_path.read_text()
        assert "DIFF PHASE" in content
        assert "  = docs/a.txt" in content
        assert "  + big.bin (4 missing, 0 reusable blocks)" in content
        assert f"Bytes to send: {diff.bytes_to_send:,}" in content

    def test_summary(self, temp_dir: Path):
        log_path = temp_dir / "run.log"
        with IndexLogger(log_file_path=log_path) as logger:
            logger.log_summary(3725.0, error_count=2)

        content = log_path.read_text()
        assert "SUMMARY" in content
        assert "Total errors: 2" in content
        assert "Duration: 1h 2m 5s" in content
        assert f"Log file: {log_path}" in content

    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0s"), (45.9, "45s"), (60, "1m 0s"), (3600, "1h 0m 0s")],
    )
    def test_format_duration(self, temp_dir: Path, seconds, expected):
        logger = IndexLogger(log_file_path=temp_dir / "run.log")

        assert logger._format_duration(seconds) == expected
