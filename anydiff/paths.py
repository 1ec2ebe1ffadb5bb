"""
Structural paths of diff blocks.

A path is built by walking the diff rows backward from a position: the nearest tag row
gives the last segment, and every enclosing tag row (found one indent unit less) adds a
segment before it. Indentation is assumed to grow by exactly DEFAULT_INDENT per level,
which is what the markup preprocessors emit.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from anydiff.markers import DEFAULT_INDENT, get_indent, remove_tokens
from anydiff.matcher import DiffRow
from anydiff.parameters import ContentType

_BLANK_OR_MARKERS = re.compile(r"(?:\s|\{\{[\w/.]*\}\})*")


class Side(Enum):
    LEFT = "left"
    RIGHT = "right"
    ANY = "any"


@dataclass(frozen=True)
class SidedPosition:
    index: int
    side: Side = Side.ANY

    @property
    def is_valid(self) -> bool:
        return self.index >= 0

    def step_back(self) -> SidedPosition:
        return SidedPosition(self.index - 1, self.side)


INVALID = SidedPosition(-1)


class PathResolver:
    """Base resolver. Subclasses decide what a tag row is and how a tag is named."""

    def get_path(self, rows: list[DiffRow], position: int) -> str:
        raise NotImplementedError

    def preceding_tag_row_index(self, rows: list[DiffRow], position: int) -> int:
        """Index of the tag row that lookbehind context starts from, or -1."""
        return -1

    def is_tag(self, value: str) -> bool:
        raise NotImplementedError

    def tag_name(self, value: str) -> str:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Row scanning
    # -------------------------------------------------------------------------

    def _text_at(self, rows: list[DiffRow], position: SidedPosition) -> str:
        row = rows[position.index]
        if position.side == Side.LEFT:
            return row.old_line
        if position.side == Side.RIGHT or self.is_tag(row.new_line):
            return row.new_line
        return row.old_line

    def preceding_tag_position(
        self,
        rows: list[DiffRow],
        position: SidedPosition,
        condition: Callable[[str], bool] = lambda value: True,
    ) -> SidedPosition:
        for i in range(min(position.index, len(rows) - 1), -1, -1):
            row = rows[i]
            if not self.is_tag(row.old_line) and not self.is_tag(row.new_line):
                continue
            left_match = condition(row.old_line)
            right_match = condition(row.new_line)
            if (
                (position.side == Side.LEFT and left_match)
                or (position.side == Side.RIGHT and right_match)
                or (position.side == Side.ANY and (left_match or right_match))
            ):
                return SidedPosition(i, position.side)
        return INVALID

    def indent_at(self, rows: list[DiffRow], position: SidedPosition) -> int:
        return get_indent(self._text_at(rows, position))

    def tag_name_at(self, rows: list[DiffRow], position: SidedPosition) -> str:
        return self.tag_name(self._text_at(rows, position))

    def _with_index(self, rows: list[DiffRow], position: SidedPosition, name: str, indent: int) -> str:
        return name

    def _build_path(self, rows: list[DiffRow], position: int) -> list[str]:
        tag_position = self.preceding_tag_position(rows, SidedPosition(position))
        if not tag_position.is_valid:
            return []
        name = self.tag_name_at(rows, tag_position)
        indent = self.indent_at(rows, tag_position)
        segments = [self._with_index(rows, tag_position, name, indent)]
        while indent >= 0:
            parent_indent = indent - DEFAULT_INDENT
            tag_position = self.preceding_tag_position(
                rows,
                tag_position.step_back(),
                lambda value: get_indent(value) == parent_indent,
            )
            if not tag_position.is_valid:
                break
            name = self.tag_name_at(rows, tag_position)
            segments.insert(0, self._with_index(rows, tag_position, name, parent_indent))
            indent -= DEFAULT_INDENT
        return segments


# =============================================================================
# Markup
# =============================================================================


class MarkupPathResolver(PathResolver):
    """Builds XPath-like paths such as `/html/body/div[1]/p`."""

    def get_path(self, rows: list[DiffRow], position: int) -> str:
        segments = self._build_path(rows, position)
        if not segments:
            return ""
        return "/" + "/".join(segments)

    def preceding_tag_row_index(self, rows: list[DiffRow], position: int) -> int:
        return self.preceding_tag_position(rows, SidedPosition(position)).index

    def is_tag(self, value: str) -> bool:
        if not value:
            return False
        index = value.find("<")
        if index < 0:
            return False
        return _BLANK_OR_MARKERS.fullmatch(value[:index]) is not None

    def tag_name(self, value: str) -> str:
        start = value.find("<") + 1
        ends = [pos for pos in (value.find(">", start), value.find(" ", start)) if pos > start]
        result = remove_tokens(value[start:min(ends) if ends else len(value)])
        if result.endswith("/"):
            result = result[:-1]
        return "#comment" if result == "!--" else result

    def _with_index(self, rows: list[DiffRow], position: SidedPosition, name: str, indent: int) -> str:
        index = self.sibling_index(rows, position.step_back(), name, indent)
        return f"{name}[{index}]" if index > 0 else name

    def sibling_index(self, rows: list[DiffRow], position: SidedPosition, name: str, indent: int) -> int:
        """Count same-named tags at the same level before the position."""
        result = 0
        preceding = self.preceding_tag_position(rows, position)
        while preceding.is_valid:
            if self.indent_at(rows, preceding) < indent:
                return result
            if self.tag_name_at(rows, preceding) == name:
                result += 1
            preceding = self.preceding_tag_position(rows, preceding.step_back())
        return result


# =============================================================================
# Manifest
# =============================================================================


class ManifestPathResolver(PathResolver):
    """Builds key paths such as `Import-Package/org.example`."""

    TAG_PATTERN = re.compile(r"^\s*[A-Z][\w-]+:")

    def get_path(self, rows: list[DiffRow], position: int) -> str:
        return "/".join(self._build_path(rows, position))

    def is_tag(self, value: str) -> bool:
        return bool(value) and self.TAG_PATTERN.search(value) is not None

    def tag_name(self, value: str) -> str:
        indent = get_indent(value)
        colon = value.find(":")
        return value[indent:colon if colon > 0 else len(value)]


MARKUP = MarkupPathResolver()
MANIFEST = ManifestPathResolver()


def get_path_resolver(content_type: ContentType | None) -> PathResolver | None:
    if content_type in (ContentType.HTML, ContentType.XML):
        return MARKUP
    if content_type == ContentType.MANIFEST:
        return MANIFEST
    return None
