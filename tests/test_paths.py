"""
Tests for structural path resolution
"""
from anydiff.matcher import DiffRow, RowTag
from anydiff.parameters import ContentType
from anydiff.paths import MANIFEST, MARKUP, get_path_resolver


def equal(line):
    return DiffRow(RowTag.EQUAL, line, line)


class TestMarkupPaths:
    """Test XPath-like paths over pretty-printed markup."""

    def test_nested_path(self):
        """Test that enclosing tags are found by indentation."""
        rows = [
            equal("<html>"),
            equal("  <body>"),
            equal("    <p>"),
            DiffRow(RowTag.CHANGE, "      {{del}}a{{/}}", "      {{ins}}b{{/}}"),
        ]

        assert MARKUP.get_path(rows, 3) == "/html/body/p"

    def test_sibling_index(self):
        """Test that a repeated tag gets the number of preceding siblings."""
        rows = [
            equal("<div>"),
            equal("  <p>"),
            equal("    x"),
            equal("  </p>"),
            equal("  <p>"),
            DiffRow(RowTag.CHANGE, "    {{del}}a{{/}}", "    {{ins}}b{{/}}"),
        ]

        assert MARKUP.get_path(rows, 5) == "/div/p[1]"

    def test_no_tag(self):
        """Test that text without tags has no path."""
        assert MARKUP.get_path([equal("plain")], 0) == ""

    def test_is_tag(self):
        """Test recognizing tag rows, including marked ones."""
        assert MARKUP.is_tag("  <p>")
        assert MARKUP.is_tag("{{ins}}<p>{{/}}")
        assert not MARKUP.is_tag("text <b>")
        assert not MARKUP.is_tag("")

    def test_tag_name(self):
        """Test reading tag names."""
        assert MARKUP.tag_name('  <p class="x">') == "p"
        assert MARKUP.tag_name("<br/>") == "br"
        assert MARKUP.tag_name("<!-- note -->") == "#comment"

    def test_preceding_tag_row_index(self):
        """Test finding the row lookbehind context starts from."""
        rows = [equal("<div>"), equal("  text")]

        assert MARKUP.preceding_tag_row_index(rows, 1) == 0
        assert MARKUP.preceding_tag_row_index([equal("text")], 0) == -1


class TestManifestPaths:
    """Test key paths over manifests."""

    def test_section_path(self):
        """Test that a value row resolves to its header."""
        rows = [
            equal("Import-Package:"),
            equal("  org.a,"),
            DiffRow(RowTag.CHANGE, "  {{del}}org.b{{/}},", "  {{ins}}org.c{{/}},"),
        ]

        assert MANIFEST.get_path(rows, 2) == "Import-Package"

    def test_tag_name(self):
        """Test reading header names."""
        assert MANIFEST.tag_name("Bundle-Name: x") == "Bundle-Name"


class TestResolverSelection:
    """Test resolver lookup by content type."""

    def test_selection(self):
        """Test that only structured types have a resolver."""
        assert get_path_resolver(ContentType.HTML) is MARKUP
        assert get_path_resolver(ContentType.XML) is MARKUP
        assert get_path_resolver(ContentType.MANIFEST) is MANIFEST
        assert get_path_resolver(ContentType.TEXT) is None
