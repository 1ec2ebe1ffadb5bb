"""
Tests for the command-line entry point
"""
import pytest

from anydiff.cli import build_parser, main


@pytest.fixture
def files(tmp_path):
    """Fixture writing two text files that differ in one word."""
    left = tmp_path / "a.txt"
    right = tmp_path / "b.txt"
    left.write_text("Lorem ipsum dolor\n")
    right.write_text("Lorem consectetur dolor\n")
    return left, right


class TestParser:
    """Test argument parsing."""

    def test_defaults(self, files):
        """Test that unset switches stay unset."""
        args = build_parser().parse_args([str(files[0]), str(files[1])])

        assert args.type is None
        assert args.ignore_spaces is None
        assert args.normalize is None
        assert args.arrange_attributes is None
        assert args.output == "console"
        assert args.filters == []

    def test_switches(self, files):
        """Test turning switches off."""
        args = build_parser().parse_args(
            [str(files[0]), str(files[1]), "--no-ignore-spaces", "--no-normalize", "--no-arrange", "--width", "40"]
        )

        assert args.ignore_spaces is False
        assert args.normalize is False
        assert args.arrange_attributes is False
        assert args.width == 40


class TestMain:
    """Test running comparisons from the command line."""

    def test_match(self, tmp_path, capsys):
        """Test that equal files exit with 0."""
        left = tmp_path / "a.txt"
        right = tmp_path / "b.txt"
        left.write_text("same\n")
        right.write_text("same\n")

        assert main([str(left), str(right)]) == 0
        assert "No pending differences" in capsys.readouterr().out

    def test_difference(self, files, capsys):
        """Test that different files exit with 1 and print the report."""
        assert main([str(files[0]), str(files[1]), "--output", "log"]) == 1
        out = capsys.readouterr().out
        assert "~ipsum~" in out
        assert "1 pending difference(s)" in out

    def test_html_output(self, files, capsys):
        """Test the HTML report."""
        main([str(files[0]), str(files[1]), "--output", "html"])

        assert '<span class="del">ipsum</span>' in capsys.readouterr().out

    def test_filter_script(self, files, tmp_path):
        """Test that an accepting script makes the files match."""
        script = tmp_path / "rules.js"
        script.write_text("function acceptAll(line) { return true; }")

        assert main([str(files[0]), str(files[1]), "--filter", str(script)]) == 0

    def test_missing_script(self, files, tmp_path):
        """Test that an unreadable script is an error."""
        assert main([str(files[0]), str(files[1]), "--filter", str(tmp_path / "none.js")]) == 2
