"""
Tests for content normalization
"""
from anydiff.parameters import FOR_MARKUP, ContentType, TaskParameters
from anydiff.preprocessing import (
    HtmlPrinter,
    XmlPrinter,
    arrange_attributes,
    basic_preprocess,
    get_preprocessor,
    manifest_preprocess,
)


class TestBasic:
    """Test the basic preprocessor."""

    def test_tabs(self):
        """Test that tabs become indent units."""
        assert basic_preprocess("\tx") == "  x"
        assert basic_preprocess(None) == ""


class TestAttributes:
    """Test attribute ordering."""

    def test_order(self):
        """Test privileged, then namespaced, then plain names."""
        names = ["b", "a", "ns:attr", "jcr:title", "xmlns:x"]

        assert arrange_attributes(names) == ["xmlns:x", "jcr:title", "ns:attr", "a", "b"]


class TestXml:
    """Test XML pretty-printing."""

    def test_pretty_print(self):
        """Test one element per line with sorted multi-line attributes."""
        result = XmlPrinter(FOR_MARKUP)('<root><a x="1" b="2">t</a><c/></root>')

        assert result == '<root>\n  <a\n    b="2"\n    x="1"\n  >t</a>\n  <c/>\n</root>'

    def test_namespaces(self):
        """Test that prefixes and namespace declarations are kept."""
        result = XmlPrinter(FOR_MARKUP)('<r xmlns:p="urn:p"><p:a/></r>')

        assert result == '<r xmlns:p="urn:p">\n  <p:a/>\n</r>'

    def test_invalid_xml(self):
        """Test that unparsable content is returned as is."""
        assert XmlPrinter(FOR_MARKUP, "broken.xml")("<a><b></a>") == "<a><b></a>"


class TestHtml:
    """Test HTML pretty-printing."""

    def test_pretty_print(self):
        """Test one node per line with a two-space indent."""
        lines = HtmlPrinter(FOR_MARKUP)("<div><p>Hello</p></div>").split("\n")

        assert "    <div>" in lines
        assert "      <p>Hello</p>" in lines
        assert "    </div>" in lines

    def test_attributes(self):
        """Test that attributes are sorted."""
        lines = HtmlPrinter(FOR_MARKUP)('<p id="x" class="y">t</p>').split("\n")

        assert "      class=\"y\"" in lines
        assert lines.index("      class=\"y\"") < lines.index("      id=\"x\"")


class TestManifest:
    """Test manifest normalization."""

    def test_sections_and_values(self):
        """Test that headers are ordered and list values sorted."""
        value = "Import-Package: b,a\nBundle-Name: x\nManifest-Version: 1.0\n"

        assert manifest_preprocess(value) == (
            "Manifest-Version: 1.0\nBundle-Name: x\nImport-Package:\n  a,\n  b,\n"
        )

    def test_continuation(self):
        """Test that continuation lines are unfolded."""
        assert manifest_preprocess("Import-Package: a,\n b\n") == "Import-Package:\n  a,\n  b,\n"

    def test_quoted_commas(self):
        """Test that commas inside quotes do not split values."""
        value = 'Import-Package: b;version="[1,2)",a\n'

        assert manifest_preprocess(value) == 'Import-Package:\n  a,\n  b;version="[1,2)",\n'


class TestSelection:
    """Test preprocessor lookup."""

    def test_dispatch(self):
        """Test choosing a preprocessor by type and parameters."""
        assert isinstance(get_preprocessor(ContentType.HTML, FOR_MARKUP), HtmlPrinter)
        assert isinstance(get_preprocessor(ContentType.XML, FOR_MARKUP), XmlPrinter)
        assert get_preprocessor(ContentType.MANIFEST, TaskParameters()) is manifest_preprocess
        assert get_preprocessor(ContentType.HTML, TaskParameters(normalize=False)) is basic_preprocess

    def test_custom(self):
        """Test that a custom preprocessor wins."""
        custom = str.upper
        parameters = TaskParameters(preprocessors={ContentType.TEXT: custom})

        assert get_preprocessor(ContentType.TEXT, parameters) is custom
