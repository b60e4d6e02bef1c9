"""Tests for IndexTUI rendering."""

from pathlib import Path

from blockdex.indexing import HashLookup, TreeDiffer
from blockdex.models import TreeDiff
from blockdex.ui import IndexTUI

from conftest import index_tree


def rendered(tui: IndexTUI) -> str:
    return tui.console.file.getvalue()


class TestDisplayTree:

    def test_shows_retained_children_only(self, captured_tui: IndexTUI, sample_tree: Path):
        captured_tui.display_tree(index_tree(sample_tree))

        output = rendered(captured_tui)
        assert "docs/" in output
        assert "b.txt" in output
        assert "copy.txt" in output
        assert "readme.txt" not in output
        assert "docs_backup" not in output

    def test_depth_limit_collapses_subtrees(self, captured_tui: IndexTUI, sample_tree: Path):
        captured_tui.display_tree(index_tree(sample_tree), max_depth=1)

        output = rendered(captured_tui)
        assert "docs/" in output
        assert "a.txt" not in output
        assert "..." in output

    def test_short_hashes(self, captured_tui: IndexTUI, sample_tree: Path):
        root = index_tree(sample_tree)

        captured_tui.display_tree(root)

        assert root.get_hash().hex()[: IndexTUI.SHORT_HASH] in rendered(captured_tui)

    def test_markup_in_names_is_escaped(self, captured_tui: IndexTUI, temp_dir: Path):
        (temp_dir / "[red]x[/red].txt").write_bytes(b"x")

        captured_tui.display_tree(index_tree(temp_dir))

        assert "[red]x[/red].txt" in rendered(captured_tui)


class TestDisplayDiff:

    def test_root_shared(self, captured_tui: IndexTUI):
        captured_tui.display_diff(TreeDiff(root_shared=True))

        assert "Nothing to send" in rendered(captured_tui)

    def test_transfers_table(self, captured_tui: IndexTUI, sample_tree: Path, temp_dir: Path):
        remote = temp_dir / "remote"
        remote.mkdir()
        diff = TreeDiffer(HashLookup(index_tree(remote))).diff(index_tree(sample_tree))

        captured_tui.display_diff(diff)

        output = rendered(captured_tui)
        assert "Diff Results" in output
        assert "Files to Transfer" in output
        assert "docs/nested/b.txt" in output


class TestDisplayErrors:

    def test_no_errors_prints_nothing(self, captured_tui: IndexTUI):
        captured_tui.display_errors([])

        assert rendered(captured_tui) == ""

    def test_lists_errors(self, captured_tui: IndexTUI):
        captured_tui.display_errors(["Permission denied: /data/x"])

        output = rendered(captured_tui)
        assert "Skipped entries:" in output
        assert "Permission denied: /data/x" in output


class TestFormatSize:

    def test_units(self):
        tui = IndexTUI()

        assert tui._format_size(512) == "512 B"
        assert tui._format_size(2048) == "2.0 KB"
        assert tui._format_size(5 * 1024 * 1024) == "5.0 MB"
        assert tui._format_size(3 * 1024 ** 3) == "3.0 GB"
