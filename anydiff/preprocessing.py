"""
Content normalization applied before diffing.

Markup is pretty-printed with one node per line, a fixed indent unit and (optionally)
a deterministic attribute order, so that the line matcher compares structure rather
than formatting. Manifests are unfolded and their values sorted.
"""

from __future__ import annotations

import logging
import re
from functools import cmp_to_key

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag
from lxml import etree

from anydiff.markers import DEFAULT_INDENT
from anydiff.parameters import ContentType, Preprocessor, TaskParameters

logger = logging.getLogger(__name__)

PARSER = "lxml"
INDENT = " " * DEFAULT_INDENT

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta",
    "param", "source", "track", "wbr",
})
SVG_SELF_CLOSING = frozenset({"circle", "ellipse", "line", "path", "polygon", "polyline", "rect"})

PRIVILEGED_ATTRIBUTES = (
    "xmlns:",
    "jcr:primaryType",
    "sling:resourceType",
    "sling:resourceSuperType",
    "jcr:title",
    "jcr:description",
)

ORDERED_SECTIONS = (
    "Manifest-Version",
    "Created-By",
    "Build-Jdk-Spec",
    "Bundle-Category",
    "Bundle-Name",
    "Bundle-SymbolicName",
    "Bundle-Version",
    "Bundle-ManifestVersion",
    "Bundle-Description",
)

_LINE_BREAKS = re.compile(r"[\n\r]+")


def basic_preprocess(value: str | None) -> str:
    """Replace tabs with spaces."""
    return (value or "").replace("\t", INDENT)


# =============================================================================
# Attribute Ordering
# =============================================================================


def _privileged_rank(name: str) -> int:
    for index, prefix in enumerate(PRIVILEGED_ATTRIBUTES):
        if name.startswith(prefix):
            return index
    return -1


def _compare_attributes(first: str, second: str) -> int:
    first_rank = _privileged_rank(first)
    second_rank = _privileged_rank(second)
    if first_rank >= 0 and second_rank >= 0:
        if first_rank != second_rank:
            return -1 if first_rank < second_rank else 1
    elif first_rank >= 0:
        return -1
    elif second_rank >= 0:
        return 1
    elif ":" in first and ":" not in second:
        return -1
    elif ":" in second and ":" not in first:
        return 1
    return (first > second) - (first < second)


attribute_sort_key = cmp_to_key(_compare_attributes)


def arrange_attributes(names) -> list[str]:
    """Order attribute names: privileged names, then namespaced names, then the rest, lexically."""
    return sorted(names, key=attribute_sort_key)


def _format_attributes(attributes: list[tuple[str, str]], tag_indent: str, attribute_indent: str, trim: bool) -> str:
    if not attributes:
        return ""
    multiple = len(attributes) > 1
    parts = []
    for key, value in attributes:
        if trim:
            value = value.strip()
        separator = "\n" + attribute_indent if multiple else " "
        parts.append(f'{separator}{key}="{value}"')
    if multiple:
        parts.append("\n" + tag_indent)
    return "".join(parts)


def _text_block(text: str, indent: str) -> str:
    """Re-indent a multi-line text, cutting the margin common to its non-blank lines."""
    lines = [line for line in re.split(r"[\r\n]+", text) if line.strip()]
    if not lines:
        return ""
    margin = min(len(line) - len(line.lstrip()) for line in lines)
    return "\n".join(indent + line.rstrip(" ")[margin:] for line in lines)


# =============================================================================
# HTML
# =============================================================================


class HtmlPrinter:
    """Pretty-prints an HTML document parsed with BeautifulSoup."""

    def __init__(self, parameters: TaskParameters):
        self.arrange = parameters.effective_arrange_attributes
        self.ignore_spaces = parameters.effective_ignore_spaces
        self.parts: list[str] = []

    def __call__(self, value: str) -> str:
        soup = BeautifulSoup(value or "", PARSER, multi_valued_attributes=None)
        if self.arrange:
            for tag in soup.find_all(True):
                tag.attrs = {
                    key: _LINE_BREAKS.sub(" ", str(tag.attrs[key])) for key in sorted(tag.attrs)
                }
        self.parts = []
        for child in soup.contents:
            self._print(child, 1)
        return "".join(self.parts)

    def _emit(self, value: str) -> None:
        if self.parts:
            self.parts.append("\n")
        self.parts.append(value)

    def _print(self, node, depth: int) -> None:
        this_indent = INDENT * (depth - 1)
        next_indent = INDENT * depth
        if isinstance(node, Tag):
            if self._is_one_line(node):
                if self.ignore_spaces:
                    self._emit(f"{this_indent}<{node.name}>{node.decode_contents().strip()}</{node.name}>")
                else:
                    self._emit(this_indent + str(node))
                return
            attributes = [(key, str(value)) for key, value in node.attrs.items()]
            closing = "/>" if node.name in SVG_SELF_CLOSING else ">"
            self._emit(
                f"{this_indent}<{node.name}"
                + _format_attributes(attributes, this_indent, next_indent, self.ignore_spaces)
                + closing
            )
            for child in node.contents:
                self._print(child, depth + 1)
            if node.name not in VOID_ELEMENTS and node.name not in SVG_SELF_CLOSING:
                self.parts.append(f"\n{this_indent}</{node.name}>")
            return
        if isinstance(node, (Comment, Doctype)):
            self._emit(this_indent + node.output_ready())
            return
        if not isinstance(node, NavigableString) or not node.strip():
            return
        text = node.output_ready() if self.ignore_spaces else str(node).strip()
        if "\n" in text or "\r" in text:
            self._emit(_text_block(text, this_indent))
        else:
            self._emit(this_indent + text.strip())

    @staticmethod
    def _is_one_line(node: Tag) -> bool:
        if any(isinstance(child, Tag) for child in node.contents):
            return False
        markup = str(node)
        if "\n" in markup or "\r" in markup:
            return False
        return not node.attrs


# =============================================================================
# XML
# =============================================================================


def _secure_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False, load_dtd=False)


class XmlPrinter:
    """Pretty-prints an XML document parsed with lxml, keeping prefixes and namespace declarations."""

    def __init__(self, parameters: TaskParameters, content_id: str | None = None):
        self.arrange = parameters.effective_arrange_attributes
        self.ignore_spaces = parameters.effective_ignore_spaces
        self.content_id = content_id

    def __call__(self, value: str) -> str:
        try:
            root = etree.fromstring((value or "").encode("utf-8"), _secure_parser())
        except (etree.XMLSyntaxError, ValueError) as e:
            logger.error("Error parsing XML for %s: %s", self.content_id, e)
            return value
        parts: list[str] = []
        self._append(parts, root, 0, {})
        return "".join(parts)

    def _attributes(self, element, parent_nsmap: dict) -> list[tuple[str, str]]:
        result = []
        for prefix, uri in element.nsmap.items():
            if parent_nsmap.get(prefix) != uri:
                result.append((f"xmlns:{prefix}" if prefix else "xmlns", uri))
        reverse = {uri: prefix for prefix, uri in element.nsmap.items() if prefix}
        for key, value in element.attrib.items():
            result.append((_qualified_name(key, reverse), value))
        if self.arrange:
            result.sort(key=lambda item: attribute_sort_key(item[0]))
        return result

    def _append(self, parts: list[str], element, level: int, parent_nsmap: dict) -> None:
        this_indent = INDENT * level
        next_indent = INDENT * (level + 1)
        if not isinstance(element.tag, str):
            parts.append(this_indent + _special_node(element))
            return
        reverse = {uri: prefix for prefix, uri in element.nsmap.items() if prefix}
        name = _qualified_name(element.tag, reverse)
        attributes = self._attributes(element, parent_nsmap)
        parts.append(f"{this_indent}<{name}")
        parts.append(_format_attributes(attributes, this_indent, next_indent, self.ignore_spaces))
        children = _child_nodes(element)
        if not children or (len(children) == 1 and isinstance(children[0], str) and not children[0].strip()):
            parts.append("/>")
            return
        parts.append(">")
        if len(children) == 1 and isinstance(children[0], str) and "\n" not in children[0] and "\r" not in children[0]:
            text = children[0]
            parts.append(text.strip() if self.ignore_spaces else text)
        else:
            for child in children:
                if isinstance(child, str):
                    if not child.strip():
                        continue
                    parts.append(f"\n{next_indent}{child}")
                    continue
                parts.append("\n")
                self._append(parts, child, level + 1, dict(element.nsmap))
            parts.append("\n" + this_indent)
        parts.append(f"</{name}>")


def _child_nodes(element) -> list:
    """Text, child nodes and tails in document order."""
    result: list = []
    if element.text:
        result.append(element.text)
    for child in element:
        result.append(child)
        if child.tail:
            result.append(child.tail)
    return result


def _qualified_name(clark_name: str, prefixes: dict[str, str]) -> str:
    qname = etree.QName(clark_name)
    if not qname.namespace:
        return qname.localname
    if qname.namespace == "http://www.w3.org/XML/1998/namespace":
        return f"xml:{qname.localname}"
    prefix = prefixes.get(qname.namespace)
    return f"{prefix}:{qname.localname}" if prefix else qname.localname


def _special_node(node) -> str:
    if node.tag is etree.Comment:
        return f"<!--{node.text or ''}-->"
    if node.tag is etree.PI:
        return f"<?{node.target} {node.text or ''}?>".replace(" ?>", "?>")
    if node.tag is etree.Entity:
        return node.text or ""
    return etree.tostring(node, with_tail=False, encoding="unicode")


# =============================================================================
# Manifest
# =============================================================================


def _split_unquoted(value: str, separator: str = ",", quote: str = '"') -> list[str]:
    result = []
    current: list[str] = []
    quoted = False
    for char in value:
        if char == quote:
            quoted = not quoted
        if char == separator and not quoted:
            result.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    result.append("".join(current).strip())
    return result


def _section_key(key: str) -> tuple[int, str]:
    if key in ORDERED_SECTIONS:
        return ORDERED_SECTIONS.index(key), ""
    return len(ORDERED_SECTIONS), key


def manifest_preprocess(value: str | None) -> str:
    """Unfold continuation lines, sort comma-separated values, and order the headers."""
    if value is None or not value.strip():
        return value or ""
    logical_lines: list[str] = []
    for raw in value.split("\n"):
        line = raw.strip("\r")
        if line.startswith(" ") and logical_lines:
            logical_lines[-1] += line[1:]
        elif line:
            logical_lines.append(line)
    entries: dict[str, list[str]] = {}
    for line in logical_lines:
        if ":" not in line:
            continue
        key, _, entry_value = line.partition(":")
        entry_value = entry_value.strip()
        entries[key] = sorted(_split_unquoted(entry_value)) if "," in entry_value else [entry_value]
    parts = []
    for key in sorted(entries, key=_section_key):
        values = entries[key]
        if len(values) == 1:
            parts.append(f"{key}: {values[0]}\n")
        else:
            parts.append(f"{key}:\n" + "".join(f"{INDENT}{v},\n" for v in values))
    return "".join(parts)


# =============================================================================
# Selection
# =============================================================================


def get_preprocessor(
    content_type: ContentType | None,
    parameters: TaskParameters,
    content_id: str | None = None,
) -> Preprocessor:
    if content_type is None:
        return basic_preprocess
    custom = parameters.preprocessors.get(content_type)
    if custom is not None:
        return custom
    if not parameters.effective_normalize:
        return basic_preprocess
    if content_type == ContentType.HTML:
        return HtmlPrinter(parameters)
    if content_type == ContentType.XML:
        return XmlPrinter(parameters, content_id)
    if content_type == ContentType.MANIFEST:
        return manifest_preprocess
    return basic_preprocess
