"""End-to-end tests for the blockdex CLI.

This module tests the CLI interface using Typer's CliRunner against real
directory trees.
"""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from blockdex import __version__
from blockdex.cli import app
from blockdex.storage import load_manifest

from conftest import index_tree, permissions_enforced


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a CliRunner instance for testing."""
    return CliRunner()


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_version_flag_short(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert f"blockdex v{__version__}" in result.output

    def test_version_flag_long(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_app_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "index" in result.output
        assert "diff" in result.output
        assert "show" in result.output

    def test_index_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["index", "--help"])
        assert result.exit_code == 0
        assert "--manifest" in result.output


class TestIndexCommand:

    def test_prints_root_hash(self, cli_runner: CliRunner, sample_tree: Path) -> None:
        expected = index_tree(sample_tree).get_hash().hex()

        result = cli_runner.invoke(app, ["index", str(sample_tree)])

        assert result.exit_code == 0
        assert "Index Results" in result.output
        assert expected in result.output

    def test_writes_manifest(self, cli_runner: CliRunner, sample_tree: Path, temp_dir: Path) -> None:
        manifest = temp_dir / "tree.json"

        result = cli_runner.invoke(app, ["index", str(sample_tree), "-m", str(manifest)])

        assert result.exit_code == 0
        assert load_manifest(manifest).get_hash() == index_tree(sample_tree).get_hash()

    def test_exclude_option(self, cli_runner: CliRunner, sample_tree: Path, temp_dir: Path) -> None:
        manifest = temp_dir / "tree.json"

        result = cli_runner.invoke(
            app,
            ["index", str(sample_tree), "-x", "docs", "-x", "docs_backup", "-m", str(manifest)],
        )

        assert result.exit_code == 0
        assert load_manifest(manifest).dirs.keys() == {
            d.get_hash() for d in index_tree(sample_tree).dirs.values() if d.name == "empty"
        }

    def test_log_file_option(self, cli_runner: CliRunner, sample_tree: Path, temp_dir: Path) -> None:
        log_path = temp_dir / "index.log"

        result = cli_runner.invoke(app, ["index", str(sample_tree), "--log-file", str(log_path)])

        assert result.exit_code == 0
        assert "INDEX PHASE" in log_path.read_text()

    def test_relative_path(self, cli_runner: CliRunner, sample_tree: Path) -> None:
        original_cwd = os.getcwd()
        try:
            os.chdir(sample_tree.parent)
            result = cli_runner.invoke(app, ["index", sample_tree.name])
        finally:
            os.chdir(original_cwd)

        assert result.exit_code == 0

    def test_skipped_entries_hint(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        (temp_dir / "bad.txt").write_bytes(b"bad")

        with patch("builtins.open", side_effect=PermissionError("denied")):
            result = cli_runner.invoke(app, ["index", str(temp_dir)])

        assert result.exit_code == 0
        assert "Skipped entries: 1" in result.output
        assert "--verbose" in result.output

    def test_nonexistent_path(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["index", "/nonexistent/path/12345"])
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_file_not_directory(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        file_path = temp_dir / "file.txt"
        file_path.write_text("content")

        result = cli_runner.invoke(app, ["index", str(file_path)])

        assert result.exit_code == 1
        assert "not a directory" in result.output

    @pytest.mark.skipif(not permissions_enforced(), reason="Permissions not enforced here")
    def test_unreadable_root(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        locked = temp_dir / "locked"
        locked.mkdir()
        os.chmod(locked, 0o000)
        try:
            result = cli_runner.invoke(app, ["index", str(locked)])
        finally:
            os.chmod(locked, 0o755)

        assert result.exit_code == 1
        assert "Permission denied" in result.output

    def test_keyboard_interrupt(self, cli_runner: CliRunner, sample_tree: Path) -> None:
        with patch(
            "blockdex.cli.IndexOrchestrator.run_index_workflow",
            side_effect=KeyboardInterrupt,
        ):
            result = cli_runner.invoke(app, ["index", str(sample_tree)])

        assert result.exit_code == 130
        assert "interrupted" in result.output


class TestDiffCommand:

    def test_against_directory(self, cli_runner: CliRunner, sample_tree: Path, temp_dir: Path) -> None:
        remote = temp_dir / "remote"
        remote.mkdir()

        result = cli_runner.invoke(app, ["diff", str(sample_tree), str(remote)])

        assert result.exit_code == 0
        assert "Diff Results" in result.output

    def test_against_own_manifest(self, cli_runner: CliRunner, sample_tree: Path, temp_dir: Path) -> None:
        manifest = temp_dir / "tree.json"
        cli_runner.invoke(app, ["index", str(sample_tree), "-m", str(manifest)])

        result = cli_runner.invoke(app, ["diff", str(sample_tree), str(manifest)])

        assert result.exit_code == 0
        assert "Nothing to send" in result.output

    def test_missing_remote(self, cli_runner: CliRunner, sample_tree: Path, temp_dir: Path) -> None:
        result = cli_runner.invoke(app, ["diff", str(sample_tree), str(temp_dir / "missing")])

        assert result.exit_code == 1
        assert "Remote path does not exist" in result.output

    def test_invalid_manifest(self, cli_runner: CliRunner, sample_tree: Path, temp_dir: Path) -> None:
        manifest = temp_dir / "bad.json"
        manifest.write_text('{"version": 99, "root": {}}')

        result = cli_runner.invoke(app, ["diff", str(sample_tree), str(manifest)])

        assert result.exit_code == 1
        assert "Invalid manifest" in result.output


class TestShowCommand:

    def test_show_tree(self, cli_runner: CliRunner, sample_tree: Path, temp_dir: Path) -> None:
        manifest = temp_dir / "tree.json"
        cli_runner.invoke(app, ["index", str(sample_tree), "-m", str(manifest)])

        result = cli_runner.invoke(app, ["show", str(manifest)])

        assert result.exit_code == 0
        assert "big.bin" in result.output
        assert "b.txt" in result.output

    def test_show_depth(self, cli_runner: CliRunner, sample_tree: Path, temp_dir: Path) -> None:
        manifest = temp_dir / "tree.json"
        cli_runner.invoke(app, ["index", str(sample_tree), "-m", str(manifest)])

        result = cli_runner.invoke(app, ["show", str(manifest), "--depth", "1"])

        assert result.exit_code == 0
        assert "b.txt" not in result.output

    def test_show_invalid_depth(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        manifest = temp_dir / "tree.json"
        manifest.write_text("{}")

        result = cli_runner.invoke(app, ["show", str(manifest), "--depth", "0"])

        assert result.exit_code != 0

    def test_show_missing_manifest(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        result = cli_runner.invoke(app, ["show", str(temp_dir / "missing.json")])

        assert result.exit_code == 1
        assert "Manifest not found" in result.output

    def test_show_manifest_with_bad_name(self, cli_runner: CliRunner, sample_tree: Path, temp_dir: Path) -> None:
        manifest = temp_dir / "tree.json"
        cli_runner.invoke(app, ["index", str(sample_tree), "-m", str(manifest)])
        document = json.loads(manifest.read_text())
        document["root"]["files"][0]["name"] = 5
        manifest.write_text(json.dumps(document))

        result = cli_runner.invoke(app, ["show", str(manifest)])

        assert result.exit_code == 1
        assert "Invalid manifest" in result.output

    def test_show_corrupt_manifest(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        manifest = temp_dir / "broken.json"
        manifest.write_text("{not json")

        result = cli_runner.invoke(app, ["show", str(manifest)])

        assert result.exit_code == 1
        assert "Invalid manifest" in result.output
