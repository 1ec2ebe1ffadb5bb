"""
Tests for the comparison task
"""
import zlib

from anydiff.entries import BlockKind, DiffState
from anydiff.filters import Filter, entry_filter
from anydiff.markers import ELLIPSIS_TOKEN, MAX_CONTEXT_LENGTH, OutputType
from anydiff.matcher import DiffRow, RowTag
from anydiff.parameters import ContentType, TaskParameters
from anydiff.task import DiffTask, summarize_binary, truncate_context


class TestShortcuts:
    """Test results that need no matching."""

    def test_equal(self):
        """Test that equal contents give an empty comparison."""
        diff = DiffTask("same", "same", "a", "b").run()

        assert diff.state == DiffState.UNCHANGED
        assert diff.children == []

    def test_missing_left(self):
        """Test that an absent left content gives a missing block."""
        diff = DiffTask(None, "x", "a", "b").run()

        assert diff.state == DiffState.LEFT_MISSING
        assert diff.children[0].kind == BlockKind.MISS
        assert diff.count == 1

    def test_missing_right(self):
        """Test that an absent right content gives a missing block."""
        assert DiffTask("x", None, "a", "b").run().state == DiffState.RIGHT_MISSING

    def test_anticipated_change(self):
        """Test that an anticipated change gives a disparity block."""
        diff = DiffTask("x", "y", "a", "b", anticipated_state=DiffState.CHANGE).run()

        assert diff.children[0].kind == BlockKind.DISPARITY
        assert diff.count == 1

    def test_default_labels(self):
        """Test that blank labels fall back to the defaults."""
        task = DiffTask("x", "y", left_label=" ")

        assert task.left_label == "Left"
        assert task.right_label == "Right"


class TestText:
    """Test the text pipeline."""

    def test_single_change(self, lorem_diff):
        """Test that one changed word makes one block with one pair."""
        assert lorem_diff.state == DiffState.CHANGE
        assert len(lorem_diff.children) == 1
        block = lorem_diff.children[0]
        assert len(block.lines) == 1
        assert len(block.lines[0].children) == 1
        assert lorem_diff.count == 1
        assert lorem_diff.pending_count == 1

    def test_blocks_with_context(self):
        """Test that separate changes make separate blocks with lookbehind context."""
        diff = DiffTask("a\nb\nc\nd\ne", "a\nX\nc\nd\nY", "a", "b").run()

        assert len(diff.children) == 2
        first, second = diff.children
        assert [line.is_context for line in first.lines] == [True, False, True]
        assert first.lines[0].get_left(include_context=True) == "a"
        assert second.lines[0].get_left(include_context=True) == "d"
        assert diff.count == 2

    def test_insertion(self):
        """Test that appended lines make a left-missing comparison."""
        diff = DiffTask("a\nb", "a\nb\nc", "a", "b").run()

        assert diff.state == DiffState.LEFT_MISSING
        assert diff.count == 1

    def test_column_width(self):
        """Test that lines are rendered one column narrower than the width."""
        task = DiffTask("a", "b", parameters=TaskParameters(column_width=30))

        assert task.column_width == 29
        assert task.run().children[0].column_width == 29

    def test_error_block(self):
        """Test that a failing preprocessor gives an error block."""
        def broken(value):
            raise RuntimeError("boom")

        parameters = TaskParameters(preprocessors={ContentType.TEXT: broken})
        diff = DiffTask("a", "b", "a", "b", parameters=parameters).run()

        assert diff.children[0].kind == BlockKind.ERROR
        assert diff.children[0].state == DiffState.ERROR
        assert "boom" in diff.to_string(OutputType.LOG)

    def test_entry_filter(self):
        """Test that blocks rejected by the entry filter are dropped."""
        diff = DiffTask("a", "b", "a", "b", entry_filter=lambda block: False).run()

        assert diff.children == []
        assert diff.state == DiffState.UNCHANGED


class TestMarkup:
    """Test the markup pipeline."""

    def test_html_path(self, html_pair, html_type):
        """Test that an HTML change is located by its path."""
        diff = DiffTask(*html_pair, "a.html", "b.html", content_type=html_type).run()

        assert len(diff.children) == 1
        block = diff.children[0]
        assert block.path == "/html/body/p"
        assert block.markup
        changed = [line for line in block.lines if not line.is_context]
        assert str(changed[0].left_fragments[0]) == "red"
        assert changed[0].left_fragments[0].is_attribute_value("class")

    def test_accept_attribute_of_repeated_element(self, html_type):
        """Test that an accepted attribute change keeps its count but leaves nothing pending."""
        class AcceptClass(Filter):
            def accept_fragments(self, value):
                return value.left_fragment.is_attribute_value("class")

        left = '<p>a</p><p class="red">b</p>'
        right = '<p>a</p><p class="blue">b</p>'
        parameters = TaskParameters(ignore_spaces=True)

        plain = DiffTask(left, right, "a.html", "b.html", content_type=html_type, parameters=parameters).run()
        accepted = DiffTask(
            left, right, "a.html", "b.html",
            content_type=html_type,
            parameters=parameters,
            entry_filter=entry_filter([AcceptClass()]),
        ).run()

        assert len(plain.children) == 1
        assert plain.children[0].path == "/html/body/p[1]"
        assert plain.count == 1
        assert plain.pending_count == 1
        assert len(accepted.children) == 1
        assert accepted.count == 1
        assert accepted.pending_count == 0

    def test_xml_without_normalization(self):
        """Test that XML is compared line by line when normalization is off."""
        parameters = TaskParameters(normalize=False)
        diff = DiffTask("<a>\n  <b>1</b>\n</a>", "<a>\n  <b>2</b>\n</a>", content_type=ContentType.XML,
                        parameters=parameters).run()

        assert diff.children[0].path == "/a/b"


class TestBinary:
    """Test opaque content."""

    def test_summary(self):
        """Test the size and checksum summary."""
        summary = summarize_binary(b"abc", "x.bin")

        assert "{{eq}}Path:{{/}} {{_}}x.bin{{/}}" in summary
        assert "{{_}}0.0 Kb{{/}}" in summary
        assert f"{{{{_}}}}{zlib.crc32(b'abc')}{{{{/}}}}" in summary

    def test_text_summary(self):
        """Test that text is wrapped as placeholders line by line."""
        assert summarize_binary("a\nb") == "{{_}}a{{/}}\n{{_}}b{{/}}"

    def test_text_summary_trailing_newline(self):
        """Test that a trailing newline does not add an empty placeholder line."""
        assert summarize_binary("xyz\n") == "{{_}}xyz{{/}}"

    def test_text_disparity_rows(self):
        """Test that text given as opaque content gives one row per line."""
        diff = DiffTask("xyz\n", "abc", "a", "b", content_type=ContentType.UNDEFINED).run()

        assert len(diff.children[0].lines) == 1
        assert str(diff.children[0].lines[0].right_side) == "abc"

    def test_binary_disparity(self):
        """Test that different binaries give a single disparity."""
        diff = DiffTask(b"\x00\x01", b"\x00\x02", "a", "b", content_type=ContentType.UNDEFINED).run()

        assert diff.children[0].kind == BlockKind.DISPARITY
        assert diff.count == 1
        assert diff.state == DiffState.CHANGE


class TestContext:
    """Test lookbehind context truncation."""

    def test_truncate(self):
        """Test that long context keeps its ends around an ellipsis row."""
        rows = [DiffRow(RowTag.EQUAL, str(i), str(i)) for i in range(10)]
        result = truncate_context(rows)

        assert len(result) == MAX_CONTEXT_LENGTH + 1
        assert result[MAX_CONTEXT_LENGTH // 2].old_line == ELLIPSIS_TOKEN
        assert result[-1].old_line == "9"

    def test_short_context(self):
        """Test that short context is kept."""
        rows = [DiffRow(RowTag.EQUAL, "a", "a")]

        assert truncate_context(rows) == rows
