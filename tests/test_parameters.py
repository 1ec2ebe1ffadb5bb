"""
Tests for content types and parameter layering
"""
from anydiff.parameters import (
    DEFAULT_COLUMN_WIDTH,
    FOR_MARKUP,
    FOR_TEXT,
    ContentType,
    TaskParameters,
)


class TestContentType:
    """Test content type detection."""

    def test_from_extension(self):
        """Test detection by file extension."""
        assert ContentType.from_extension(".html") == ContentType.HTML
        assert ContentType.from_extension("XML") == ContentType.XML
        assert ContentType.from_extension("mf") == ContentType.MANIFEST
        assert ContentType.from_extension("json") == ContentType.TEXT
        assert ContentType.from_extension("png") == ContentType.UNDEFINED
        assert ContentType.from_extension("") == ContentType.UNDEFINED

    def test_from_mime_type(self):
        """Test detection by MIME type."""
        assert ContentType.from_mime_type("text/html; charset=utf-8") == ContentType.HTML
        assert ContentType.from_mime_type("application/xml") == ContentType.XML
        assert ContentType.from_mime_type("text/plain") == ContentType.TEXT
        assert ContentType.from_mime_type("image/png") == ContentType.UNDEFINED

    def test_is_markup(self):
        """Test which types are markup."""
        assert ContentType.HTML.is_markup
        assert not ContentType.MANIFEST.is_markup


class TestTaskParameters:
    """Test parameter defaults and merging."""

    def test_defaults(self):
        """Test that unset values fall back to global defaults."""
        parameters = TaskParameters()

        assert parameters.is_empty()
        assert parameters.effective_column_width == DEFAULT_COLUMN_WIDTH
        assert parameters.effective_ignore_spaces
        assert parameters.effective_normalize

    def test_narrow_width(self):
        """Test that a too narrow width falls back to the default."""
        assert TaskParameters(column_width=5).effective_column_width == DEFAULT_COLUMN_WIDTH
        assert TaskParameters(column_width=30).effective_column_width == 30

    def test_for_type(self):
        """Test per-type defaults."""
        assert TaskParameters.for_type(ContentType.XML) is FOR_MARKUP
        assert TaskParameters.for_type(ContentType.TEXT) is FOR_TEXT
        assert not TaskParameters.for_type(ContentType.MANIFEST).effective_arrange_attributes

    def test_merge(self):
        """Test that values set on the request win."""
        merged = TaskParameters.merge(FOR_MARKUP, TaskParameters(ignore_spaces=True, column_width=40))

        assert merged.ignore_spaces is True
        assert merged.column_width == 40
        assert merged.arrange_attributes is True

    def test_merge_empty(self):
        """Test merging with missing or empty parameters."""
        assert TaskParameters.merge(FOR_TEXT, None) is FOR_TEXT
        assert TaskParameters.merge(None, FOR_TEXT) is FOR_TEXT
        assert TaskParameters.merge(FOR_TEXT, TaskParameters()) is FOR_TEXT
