"""
Entry hierarchy of a comparison: Diff -> Block -> Line -> FragmentPair -> Fragment.

Every level reports a state, a total count of differences and a pending count (the
differences that have not been accepted). `accept()` silences changes in place;
`exclude()` removes a child from its parent.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import NamedTuple

from anydiff.exceptions import UnsupportedOperation
from anydiff.fragments import Fragment
from anydiff.marked_string import MarkedString
from anydiff.markers import (
    CLASS_HEADER,
    CLASS_LEFT,
    CLASS_PATH,
    CLASS_RIGHT,
    DASH,
    ELLIPSIS,
    ELLIPSIS_TOKEN,
    LABEL_LEFT,
    LABEL_RIGHT,
    MAX_CONTEXT_LENGTH,
    Marker,
    OutputType,
    center,
    truncate_middle,
    truncate_right,
)
from anydiff.matcher import DiffRow, RowTag
from anydiff.parameters import DEFAULT_COLUMN_WIDTH

logger = logging.getLogger(__name__)

MISSING = "Missing"


class DiffState(Enum):
    UNCHANGED = "unchanged"
    CHANGE = "change"
    LEFT_MISSING = "left_missing"
    RIGHT_MISSING = "right_missing"
    ERROR = "error"

    @property
    def is_change(self) -> bool:
        return self == DiffState.CHANGE

    @property
    def is_insertion(self) -> bool:
        return self == DiffState.LEFT_MISSING

    @property
    def is_deletion(self) -> bool:
        return self == DiffState.RIGHT_MISSING


class EntryType(Enum):
    """Granularity of an entry. The value lists the tokens that name it in filter scripts."""

    UNDEFINED = ()
    BLOCK = ("block", "entry")
    LINE = ("line",)
    FRAGMENT_PAIR = ("fragmentpair", "fragments")
    FRAGMENT = ("fragment",)

    @classmethod
    def from_token(cls, value: str | None) -> EntryType:
        if not value:
            return cls.UNDEFINED
        token = value.lower()
        for entry_type in cls:
            if token in entry_type.value:
                return entry_type
        return cls.UNDEFINED


def html_tag(name: str, content: object = "", css_class: str | None = None, **attributes: str) -> str:
    """Render `<name attr="v">content</name>`."""
    attrs = f' class="{css_class}"' if css_class else ""
    attrs += "".join(f' {key}="{value}"' for key, value in attributes.items())
    return f"<{name}{attrs}>{content}</{name}>"


def _html_line(left: str, right: str, css_class: str | None = None) -> str:
    return html_tag(
        "line",
        html_tag("div", left, CLASS_LEFT) + html_tag("div", right, CLASS_RIGHT),
        css_class,
    )


# =============================================================================
# Fragment Pair
# =============================================================================


class FragmentPair:
    """Two fragments occupying the same ordinal position on both sides of a line."""

    entry_type = EntryType.FRAGMENT_PAIR

    def __init__(self, line: Line, left_fragment: Fragment, right_fragment: Fragment):
        self.line = line
        self.left_fragment = left_fragment
        self.right_fragment = right_fragment

    @property
    def state(self) -> DiffState:
        return DiffState.CHANGE

    @property
    def is_pending(self) -> bool:
        return self.left_fragment.is_pending and self.right_fragment.is_pending

    @property
    def count(self) -> int:
        return 1

    @property
    def pending_count(self) -> int:
        return 1 if self.is_pending else 0

    @property
    def children(self) -> list:
        return []

    @property
    def left(self) -> str:
        return str(self.left_fragment)

    @property
    def right(self) -> str:
        return str(self.right_fragment)

    @property
    def diff(self) -> Diff | None:
        return self.line.diff

    def accept(self) -> None:
        self.line.left_side.accept(self.left_fragment)
        self.line.right_side.accept(self.right_fragment)
        self.line._reset_fragments()

    def __repr__(self) -> str:
        return f"FragmentPair({self.left!r}, {self.right!r})"


# =============================================================================
# Line
# =============================================================================


class Line:
    """One side-by-side row of a block."""

    entry_type = EntryType.LINE
    fragment_holder = True

    def __init__(self, left: MarkedString | None = None, right: MarkedString | None = None):
        self.left_side = left if left is not None else MarkedString()
        self.right_side = right if right is not None else MarkedString()
        self.is_context = False
        self.is_markup = False
        self.block: Block | None = None
        self._left_fragments: list[Fragment] | None = None
        self._right_fragments: list[Fragment] | None = None
        self._pairs: list[FragmentPair] | None = None

    def copy(self) -> Line:
        result = Line(self.left_side.copy(), self.right_side.copy())
        result.is_context = self.is_context
        result.is_markup = self.is_markup
        result.block = self.block
        return result

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> DiffState:
        if self.is_context:
            return DiffState.UNCHANGED
        left_empty = self.left_side.is_empty()
        right_empty = self.right_side.is_empty()
        if left_empty and not right_empty:
            return DiffState.LEFT_MISSING if self.right_side.has_changes() else DiffState.UNCHANGED
        if right_empty and not left_empty:
            return DiffState.RIGHT_MISSING if self.left_side.has_changes() else DiffState.UNCHANGED
        if left_empty:
            return DiffState.UNCHANGED
        if self.left_side.has_changes() or self.right_side.has_changes():
            return DiffState.CHANGE
        return DiffState.UNCHANGED

    @property
    def count(self) -> int:
        if self.state == DiffState.UNCHANGED:
            return 0
        # Unpaired fragments count once each, and so does every pair
        return len(self.left_fragments) + len(self.right_fragments) - len(self.children)

    @property
    def pending_count(self) -> int:
        if self.state == DiffState.UNCHANGED:
            return 0
        return (
            sum(1 for f in self.left_fragments if f.is_pending)
            + sum(1 for f in self.right_fragments if f.is_pending)
            - sum(1 for p in self.children if p.is_pending)
        )

    @property
    def indent(self) -> int:
        left_indent = self.left_side.indent
        right_indent = self.right_side.indent
        if left_indent == 0 and not str(self.left_side):
            return right_indent
        if right_indent == 0 and not str(self.right_side):
            return left_indent
        return min(left_indent, right_indent)

    @property
    def column_width(self) -> int:
        return self.block.column_width if self.block is not None else DEFAULT_COLUMN_WIDTH

    @property
    def diff(self) -> Diff | None:
        return self.block.diff if self.block is not None else None

    @property
    def path(self) -> str:
        return self.block.path if self.block is not None else ""

    def set_is_context(self) -> None:
        self.is_context = True
        self.left_side.mark(Marker.CONTEXT)
        self.right_side.mark(Marker.CONTEXT)
        self._reset_fragments()

    def cut_left(self, count: int) -> None:
        if count == 0:
            return
        self.left_side.cut_left(count)
        self.right_side.cut_left(count)
        self._reset_fragments()

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def get_left(self, include_context: bool = False) -> str:
        if self.is_context and not include_context:
            return ""
        return str(self.left_side)

    def get_right(self, include_context: bool = False) -> str:
        if self.is_context and not include_context:
            return ""
        return str(self.right_side)

    @property
    def left(self) -> str:
        return self.get_left()

    @property
    def right(self) -> str:
        return self.get_right()

    @property
    def children(self) -> list[FragmentPair]:
        if self._pairs is None:
            self._init_fragments()
        return self._pairs

    @property
    def left_fragments(self) -> list[Fragment]:
        if self._left_fragments is None:
            self._init_fragments()
        return self._left_fragments

    @property
    def right_fragments(self) -> list[Fragment]:
        if self._right_fragments is None:
            self._init_fragments()
        return self._right_fragments

    @property
    def fragments(self) -> list[Fragment]:
        return self.left_fragments + self.right_fragments

    def _siblings(self, get_side: Callable[[Line], MarkedString]) -> list[MarkedString] | None:
        if self.block is None or self not in self.block.lines:
            return None
        return [get_side(line) for line in self.block.lines]

    def _init_fragments(self) -> None:
        self._left_fragments = self.left_side.get_fragments(
            markup_aware=self.is_markup,
            siblings=self._siblings(lambda line: line.left_side),
        )
        self._right_fragments = self.right_side.get_fragments(
            markup_aware=self.is_markup,
            siblings=self._siblings(lambda line: line.right_side),
        )
        left, right = self._left_fragments, self._right_fragments
        if len(left) != len(right) or not left or left[0].line_offset != right[0].line_offset:
            self._pairs = []
            return
        self._pairs = [FragmentPair(self, l, r) for l, r in zip(left, right)]

    def _reset_fragments(self) -> None:
        self._left_fragments = None
        self._right_fragments = None
        self._pairs = None

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def _sides_of(self, fragment: Fragment | str | None) -> list[MarkedString]:
        """The sides a fragment applies to: the one it was taken from, when known."""
        if isinstance(fragment, Fragment) and fragment.owner is not None:
            return [side for side in (self.left_side, self.right_side) if side is fragment.owner]
        return [self.left_side, self.right_side]

    def accept(self, fragment: Fragment | None = None) -> None:
        for side in self._sides_of(fragment):
            side.accept(fragment)
        self._reset_fragments()

    def exclude(self, value: FragmentPair | Fragment) -> None:
        """Drop the markers of a fragment pair, or of a single fragment on its own side."""
        if isinstance(value, FragmentPair):
            self.left_side.unmark(value.left_fragment)
            self.right_side.unmark(value.right_fragment)
        elif isinstance(value, Fragment):
            for side in self._sides_of(value):
                side.unmark(value)
        else:
            return
        self._reset_fragments()

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def to_string(self, target: OutputType) -> str:
        if target == OutputType.HTML:
            return _html_line(
                self._ellipsize_html(self.left_side.to_html()),
                self._ellipsize_html(self.right_side.to_html()),
            )
        return self._to_text(target)

    def __str__(self) -> str:
        return self.to_string(OutputType.LOG)

    def _to_text(self, target: OutputType) -> str:
        width = self.column_width
        left_rows = self.left_side.to_text(target, width)
        right_rows = self.right_side.to_text(target, width)
        self._ellipsize_text(left_rows, target)
        self._ellipsize_text(right_rows, target)
        while len(left_rows) < len(right_rows):
            left_rows.append(" " * width)
        while len(right_rows) < len(left_rows):
            right_rows.append("")
        return "\n".join(f"{left} | {right}" for left, right in zip(left_rows, right_rows))

    def _ellipsize_text(self, rows: list[str], target: OutputType) -> None:
        if not self.is_context or len(rows) <= MAX_CONTEXT_LENGTH:
            return
        half = MAX_CONTEXT_LENGTH // 2
        cut = len(rows) - MAX_CONTEXT_LENGTH
        rows.insert(half, MarkedString.marked(ELLIPSIS, Marker.CONTEXT).to_text(target, self.column_width)[0])
        del rows[half + 1:half + 1 + cut]

    def _ellipsize_html(self, value: str) -> str:
        if not self.is_context:
            return value
        return truncate_middle(value, MAX_CONTEXT_LENGTH * self.column_width * 2, "&lt;...&gt;")


# =============================================================================
# Block
# =============================================================================


class BlockKind(Enum):
    CONTENT = "content"
    DISPARITY = "disparity"
    MISS = "miss"
    ERROR = "error"


class _BlockBehaviour(NamedTuple):
    state: Callable[[Block], DiffState]
    count: Callable[[Block], int]
    pending_count: Callable[[Block], int]
    render_text: Callable[[Block, OutputType], str]
    render_html: Callable[[Block], str]


class Block:
    """A region of difference. The `kind` selects how state, counts and output are computed."""

    entry_type = EntryType.BLOCK

    def __init__(
        self,
        kind: BlockKind = BlockKind.CONTENT,
        path: str = "",
        left_label: str | None = LABEL_LEFT,
        right_label: str | None = LABEL_RIGHT,
        column_width: int = DEFAULT_COLUMN_WIDTH - 1,
        markup: bool = False,
        ignore_spaces: bool = False,
        normalize: bool = False,
    ):
        self.kind = kind
        self.path = path or ""
        self.left_label = left_label
        self.right_label = right_label
        self.column_width = column_width
        self.markup = markup
        self.ignore_spaces = ignore_spaces
        self.normalize = normalize
        self.lines: list[Line] = []
        self.ellipsis_position = -1
        self.message: MarkedString | None = None
        self.diff: Diff | None = None

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def disparity(cls, left_content: object, right_content: object, **kwargs) -> Block:
        """Build a block that pairs two opaque contents line by line."""
        block = cls(BlockKind.DISPARITY, **kwargs)
        left_strings = _placeholder_lines(left_content, Marker.DELETE)
        right_strings = _placeholder_lines(right_content, Marker.INSERT)
        for i in range(max(len(left_strings), len(right_strings))):
            block.add_line(Line(
                left_strings[i] if i < len(left_strings) else None,
                right_strings[i] if i < len(right_strings) else None,
            ))
        return block

    @classmethod
    def missing_left(cls, right_id: str | None, **kwargs) -> Block:
        block = cls(BlockKind.MISS, **kwargs)
        block.add_line(Line(
            MarkedString.marked(MISSING, Marker.CONTEXT),
            MarkedString.marked(right_id, Marker.INSERT),
        ))
        return block

    @classmethod
    def missing_right(cls, left_id: str | None, **kwargs) -> Block:
        block = cls(BlockKind.MISS, **kwargs)
        block.add_line(Line(
            MarkedString.marked(left_id, Marker.DELETE),
            MarkedString.marked(MISSING, Marker.CONTEXT),
        ))
        return block

    @classmethod
    def error(cls, exception: BaseException, **kwargs) -> Block:
        block = cls(BlockKind.ERROR, **kwargs)
        message = str(exception) or type(exception).__name__
        block.message = MarkedString.marked(message, Marker.DELETE)
        return block

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def _behaviour(self) -> _BlockBehaviour:
        return _BEHAVIOURS[self.kind]

    @property
    def state(self) -> DiffState:
        return self._behaviour.state(self)

    @property
    def count(self) -> int:
        return self._behaviour.count(self)

    @property
    def pending_count(self) -> int:
        return self._behaviour.pending_count(self)

    @property
    def children(self) -> list[Line]:
        return self.lines

    def get_left(self, include_context: bool = False) -> str:
        if self.kind == BlockKind.MISS:
            return self.lines[0].get_left()
        if self.kind != BlockKind.CONTENT:
            return ""
        return "\n".join(
            line.get_left(include_context) for line in self.lines if include_context or not line.is_context
        )

    def get_right(self, include_context: bool = False) -> str:
        if self.kind == BlockKind.MISS:
            return self.lines[0].get_right()
        if self.kind != BlockKind.CONTENT:
            return ""
        return "\n".join(
            line.get_right(include_context) for line in self.lines if include_context or not line.is_context
        )

    @property
    def left(self) -> str:
        return self.get_left()

    @property
    def right(self) -> str:
        return self.get_right()

    @property
    def left_fragments(self) -> list[Fragment]:
        return [fragment for line in self.lines for fragment in line.left_fragments]

    @property
    def right_fragments(self) -> list[Fragment]:
        return [fragment for line in self.lines for fragment in line.right_fragments]

    @property
    def fragments(self) -> list[Fragment]:
        return self.left_fragments + self.right_fragments

    # -------------------------------------------------------------------------
    # Adding lines
    # -------------------------------------------------------------------------

    def _marked(self, value: str) -> MarkedString:
        return MarkedString(value, self.ignore_spaces, self.normalize)

    def add(self, row: DiffRow) -> None:
        if row.tag == RowTag.CHANGE:
            self.add_line(Line(self._marked(row.old_line), self._marked(row.new_line)))
        elif row.tag == RowTag.DELETE:
            self.add_line(Line(self._marked(row.old_line), None))
        elif row.tag == RowTag.INSERT:
            self.add_line(Line(None, self._marked(row.new_line)))

    def add_line(self, line: Line) -> None:
        line.block = self
        if self.markup:
            line.is_markup = True
        self.lines.append(line)
        for existing in self.lines:
            existing._reset_fragments()

    def add_context(self, rows: list[DiffRow]) -> None:
        for row in rows:
            if row.old_line == ELLIPSIS_TOKEN and row.new_line == ELLIPSIS_TOKEN:
                self.ellipsis_position = len(self.lines)
                continue
            line = Line(self._marked(row.old_line), self._marked(row.new_line))
            line.set_is_context()
            self.add_line(line)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def accept(self, fragment: Fragment | None = None) -> None:
        if self.kind == BlockKind.ERROR:
            raise UnsupportedOperation("An error block cannot be accepted", {"message": str(self.message)})
        for line in self.lines:
            line.accept(fragment)

    def exclude(self, value: Line | FragmentPair | Fragment) -> None:
        """Remove a line, or drop the markers of a fragment pair or fragment in every line."""
        if isinstance(value, Line):
            if value not in self.lines:
                return
            index = self.lines.index(value)
            del self.lines[index]
            if index < self.ellipsis_position:
                self.ellipsis_position -= 1
            value.block = None
            for line in self.lines:
                line._reset_fragments()
            return
        for line in self.lines:
            line.exclude(value)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def to_string(self, target: OutputType) -> str:
        if target == OutputType.HTML:
            return self._behaviour.render_html(self)
        return self._behaviour.render_text(self, target)

    def __str__(self) -> str:
        return self.to_string(OutputType.LOG)

    def __repr__(self) -> str:
        return f"Block({self.kind.name}, path={self.path!r}, lines={len(self.lines)})"

    def _compacted_lines(self) -> list[Line]:
        min_indent = min((line.indent for line in self.lines), default=0)
        if min_indent <= 0:
            return self.lines
        result = []
        for line in self.lines:
            line_copy = line.copy()
            line_copy.cut_left(min_indent)
            result.append(line_copy)
        return result

    def _label_row(self) -> str:
        left = truncate_middle(self.left_label or "", self.column_width - 2)
        right = truncate_middle(self.right_label or "", self.column_width - 2)
        return f"{center(left, self.column_width + 1)}|{center(right, self.column_width + 1)}"

    def _html_header(self) -> str:
        return _html_line(self.left_label or "", self.right_label or "", CLASS_HEADER)


def _placeholder_lines(content: object, marker: Marker) -> list[MarkedString]:
    lines = str(content).split("\n")
    while lines and not lines[-1]:
        lines.pop()
    return [MarkedString(line).mark_placeholders(marker) for line in lines]


# -----------------------------------------------------------------------------
# Per-kind behaviour
# -----------------------------------------------------------------------------


def _content_state(block: Block) -> DiffState:
    states = [line.state for line in block.lines]
    if all(state == DiffState.UNCHANGED for state in states):
        return DiffState.UNCHANGED
    if DiffState.CHANGE in states:
        return DiffState.CHANGE
    for missing in (DiffState.LEFT_MISSING, DiffState.RIGHT_MISSING):
        if all(state in (missing, DiffState.UNCHANGED) for state in states):
            return missing
    return DiffState.CHANGE


def _content_count(block: Block) -> int:
    return sum(line.count for line in block.lines)


def _content_pending(block: Block) -> int:
    return sum(line.pending_count for line in block.lines)


def _single_pending(block: Block) -> int:
    return 1 if any(line.pending_count > 0 for line in block.lines) else 0


def _miss_state(block: Block) -> DiffState:
    if block.lines and block.lines[0].left_side == MarkedString.marked(MISSING, Marker.CONTEXT):
        return DiffState.LEFT_MISSING
    return DiffState.RIGHT_MISSING


def _content_text(block: Block, target: OutputType) -> str:
    if not block.lines:
        return ""
    width = block.column_width
    full_width = (width + 1) * 2 + 1
    parts = []
    if block.path.strip():
        truncated = truncate_right(block.path, (full_width - 4) // 4 * 3)
        delimiter = (truncated + "----").rjust(full_width, DASH)
        if target == OutputType.CONSOLE:
            colored = MarkedString(delimiter)
            colored.mark_text(truncated, Marker.CONTEXT)
            delimiter = colored.to_text(OutputType.CONSOLE, full_width)[0]
        parts.append(delimiter)
    else:
        parts.append(DASH * full_width)
    parts.append(block._label_row())
    parts.append(DASH * full_width)
    for position, line in enumerate(block._compacted_lines()):
        if position == block.ellipsis_position:
            parts.append(center(ELLIPSIS, full_width))
        parts.append(line.to_string(target))
    return "\n" + "\n".join(parts)


def _content_html(block: Block) -> str:
    if not block.lines:
        return ""
    rows = []
    for position, line in enumerate(block._compacted_lines()):
        if position == block.ellipsis_position:
            rows.append(html_tag("line", ELLIPSIS, "ellipsis"))
        rows.append(line.to_string(OutputType.HTML))
    return html_tag("section", html_tag("div", block.path, CLASS_PATH) + block._html_header() + "".join(rows))


def _miss_text(block: Block, target: OutputType) -> str:
    full_width = block.column_width * 2 + 3
    line = block.lines[0].to_string(target)
    if block.left_label and block.right_label:
        return "\n".join([DASH * full_width, block._label_row(), DASH * full_width, line])
    return "\n".join([DASH * full_width, line, DASH * full_width])


def _miss_html(block: Block) -> str:
    return html_tag("section", block._html_header() + block.lines[0].to_string(OutputType.HTML), "no-highlight")


def _error_text(block: Block, target: OutputType) -> str:
    return "\n".join(block.message.to_text(target, block.column_width * 2 + 3))


def _error_html(block: Block) -> str:
    return html_tag("section", block._html_header() + block.message.to_html(), "no-header")


_BEHAVIOURS = {
    BlockKind.CONTENT: _BlockBehaviour(
        _content_state, _content_count, _content_pending, _content_text, _content_html,
    ),
    BlockKind.DISPARITY: _BlockBehaviour(
        lambda block: DiffState.CHANGE, lambda block: 1, _single_pending, _content_text, _content_html,
    ),
    BlockKind.MISS: _BlockBehaviour(
        _miss_state, lambda block: 1, _single_pending, _miss_text, _miss_html,
    ),
    BlockKind.ERROR: _BlockBehaviour(
        lambda block: DiffState.ERROR, lambda block: 0, lambda block: 0, _error_text, _error_html,
    ),
}


# =============================================================================
# Diff
# =============================================================================


class Diff:
    """Result of comparing two pieces of content."""

    def __init__(self, left: str | None, right: str | None, children: list[Block] | None = None):
        self.left = left or ""
        self.right = right or ""
        self.children: list[Block] = []
        if children:
            self.with_children(children)

    def with_children(self, children: list[Block]) -> Diff:
        self.children = list(children)
        for child in self.children:
            child.diff = self
        return self

    @property
    def state(self) -> DiffState:
        states = [child.state for child in self.children]
        if all(state == DiffState.UNCHANGED for state in states):
            return DiffState.UNCHANGED
        if all(state == DiffState.LEFT_MISSING for state in states):
            return DiffState.LEFT_MISSING
        if all(state == DiffState.RIGHT_MISSING for state in states):
            return DiffState.RIGHT_MISSING
        return DiffState.CHANGE

    @property
    def count(self) -> int:
        if self.state == DiffState.UNCHANGED:
            return 0
        return sum(child.count for child in self.children)

    @property
    def pending_count(self) -> int:
        if self.state == DiffState.UNCHANGED:
            return 0
        return sum(child.pending_count for child in self.children)

    def accept(self) -> None:
        """Silence every block except error blocks, which cannot be accepted."""
        for child in self.children:
            if child.kind != BlockKind.ERROR:
                child.accept()

    def exclude(self, value: Block) -> None:
        if value in self.children:
            self.children.remove(value)
            value.diff = None

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def to_string(self, target: OutputType) -> str:
        if target == OutputType.HTML:
            return self._to_html()
        return "\n\n".join(child.to_string(target).strip() for child in self.children) + "\n"

    def __str__(self) -> str:
        return self.to_string(OutputType.LOG)

    def __repr__(self) -> str:
        return f"Diff({self.left!r}, {self.right!r}, state={self.state.name}, count={self.count})"

    @property
    def html_id(self) -> str:
        if self.left and self.right and self.left != self.right:
            return f"{self.left}-vs-{self.right}"
        return self.left or self.right

    @property
    def html_label(self) -> str:
        if self.left and self.right and self.left != self.right:
            return html_tag("span", self.left, CLASS_LEFT) + " vs " + html_tag("span", self.right, CLASS_RIGHT)
        return html_tag("span", self.left or self.right, "center")

    def _to_html(self) -> str:
        header = html_tag("a", id=self.html_id) + html_tag("h4", self.html_label)
        return header + "".join(child.to_string(OutputType.HTML) for child in self.children)
