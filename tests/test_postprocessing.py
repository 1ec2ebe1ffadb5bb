"""
Tests for row postprocessing
"""
from anydiff.matcher import DiffRow, RowTag
from anydiff.parameters import FOR_MARKUP, ContentType, TaskParameters
from anydiff.postprocessing import basic_postprocess, get_postprocessor, markup_postprocess


class TestBasic:
    """Test the basic postprocessor."""

    def test_empty_deleted_line(self):
        """Test that an empty deleted line becomes a newline cell."""
        rows = basic_postprocess([DiffRow(RowTag.DELETE, "{{del}}{{/}}", "")])

        assert rows == [DiffRow(RowTag.DELETE, "{{del}}{{n}}{{/}}", "")]

    def test_empty_inserted_line(self):
        """Test that an empty inserted line becomes a newline cell."""
        rows = basic_postprocess([DiffRow(RowTag.INSERT, "", "{{ins}}{{/}}")])

        assert rows == [DiffRow(RowTag.INSERT, "", "{{ins}}{{n}}{{/}}")]

    def test_other_rows(self):
        """Test that other rows are untouched."""
        row = DiffRow(RowTag.EQUAL, "a", "a")

        assert basic_postprocess([row]) == [row]


class TestMarkup:
    """Test the markup postprocessor."""

    def test_leading_spaces(self):
        """Test that indentation moves out of a deleted span."""
        rows = markup_postprocess([DiffRow(RowTag.DELETE, "{{del}}  <p>{{/}}", "")])

        assert rows[0].old_line == "  {{del}}<p>{{/}}"

    def test_lone_tag_end(self):
        """Test that a lone closing bracket is merged into the row above."""
        rows = markup_postprocess([
            DiffRow(RowTag.CHANGE, "<a {{del}}x{{/}}", "<a {{ins}}y{{/}}"),
            DiffRow(RowTag.EQUAL, "  >", "  >"),
        ])

        assert len(rows) == 1
        assert rows[0].old_line == "<a {{del}}x{{/}}{{eq}}>{{/}}"
        assert rows[0].new_line == "<a {{ins}}y{{/}}{{eq}}>{{/}}"


class TestSelection:
    """Test postprocessor lookup."""

    def test_dispatch(self):
        """Test choosing a postprocessor by type."""
        assert get_postprocessor(ContentType.HTML, FOR_MARKUP) is markup_postprocess
        assert get_postprocessor(ContentType.TEXT, TaskParameters()) is basic_postprocess
        assert get_postprocessor(ContentType.XML, TaskParameters(normalize=False)) is basic_postprocess

    def test_custom(self):
        """Test that a custom postprocessor wins."""
        custom = list
        parameters = TaskParameters(postprocessors={ContentType.TEXT: custom})

        assert get_postprocessor(ContentType.TEXT, parameters) is custom
