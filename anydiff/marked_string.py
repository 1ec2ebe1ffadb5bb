"""
Annotated text: a string split into chunks, each optionally carrying a change marker.

Marked strings are parsed from the intermediate representation produced by the line
matcher, e.g. "Lorem {{ins}}ipsum{{/}}", and can be re-marked, accepted (silenced),
cut, and rendered to console, log, or HTML output.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass

from anydiff.fragments import Fragment, MarkupFragment
from anydiff.markers import (
    NEW_LINE,
    Marker,
    OutputType,
    escape_html,
    find_nearest_token,
    get_indent,
    split_by_length,
)

_CHANGE_MARKERS = (Marker.INSERT, Marker.DELETE)


# =============================================================================
# Chunk
# =============================================================================


@dataclass(eq=False)
class Chunk:
    """A run of text sharing the same marker."""

    text: str
    marker: Marker | None = None
    is_newline: bool = False  # Stands for an empty line; occupies one column when rendered
    silenced: bool = False  # Set when the change has been accepted by a filter

    def __post_init__(self) -> None:
        if self.text == NEW_LINE:
            self.text = ""
            self.is_newline = True

    def __len__(self) -> int:
        return 1 if self.is_newline else len(self.text)

    @property
    def is_pending(self) -> bool:
        return not self.silenced and self.marker is not None and self.marker != Marker.CONTEXT

    def accept(self) -> None:
        self.silenced = True

    def copy(self) -> Chunk:
        return Chunk(self.text, self.marker, self.is_newline, self.silenced)

    def cut_left(self, count: int) -> None:
        self.text = "" if count >= len(self) else self.text[count:]

    def split_at(self, position: int) -> tuple[Chunk, Chunk | None]:
        if position >= len(self):
            return self, None
        return Chunk(self.text[:position], self.marker), Chunk(self.text[position:], self.marker)

    def split_by(self, separator: str) -> list[Chunk]:
        """Split around every occurrence of the separator, keeping the separators as chunks."""
        if not separator or separator not in self.text:
            return [self]
        result: list[Chunk] = []
        parts = self.text.split(separator)
        for i, part in enumerate(parts):
            if part:
                result.append(Chunk(part, self.marker))
            if i < len(parts) - 1:
                result.append(Chunk(separator, self.marker))
        return result

    def to_string(self, target: OutputType) -> str:
        before = self.marker.render(target) if self.marker is not None else ""
        main = self.text
        if self.is_newline and target in (OutputType.CONSOLE, OutputType.HTML):
            main = " "
        if target == OutputType.HTML:
            main = escape_html(main)
        after = Marker.RESET.render(target, self.marker) if self.marker is not None else ""
        return before + main + after


# =============================================================================
# Marked String
# =============================================================================


class MarkedString:
    """A piece of text with embedded change markers."""

    def __init__(self, content: str | None = None, ignore_spaces: bool = False, normalize: bool = False):
        self.ignore_spaces = ignore_spaces
        self.normalize = normalize
        self.chunks: list[Chunk] = _parse(content)
        self._compactify()

    @classmethod
    def marked(cls, content: str | None, marker: Marker | None) -> MarkedString:
        """Create a string whose whole content carries a single marker."""
        result = cls()
        if content:
            result.chunks.append(Chunk(content, marker))
        return result

    def copy(self) -> MarkedString:
        result = MarkedString(None, self.ignore_spaces, self.normalize)
        result.chunks = [chunk.copy() for chunk in self.chunks]
        return result

    def __str__(self) -> str:
        return "".join(chunk.text for chunk in self.chunks)

    def __repr__(self) -> str:
        return f"MarkedString({self.to_log()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MarkedString):
            return NotImplemented
        return [(c.text, c.marker) for c in self.chunks] == [(c.text, c.marker) for c in other.chunks]

    __hash__ = None  # type: ignore[assignment]

    def is_empty(self) -> bool:
        return not self.chunks

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def indent(self) -> int:
        indentable = []
        for chunk in self.chunks:
            if chunk.marker is not None and not self.normalize:
                break
            indentable.append(chunk.text)
        result = 0
        for text in indentable:
            chunk_indent = get_indent(text)
            result += chunk_indent
            if chunk_indent < len(text):
                break
        return result

    def has_changes(self) -> bool:
        return any(chunk.marker is not None and chunk.marker != Marker.CONTEXT for chunk in self.chunks)

    # -------------------------------------------------------------------------
    # Fragments
    # -------------------------------------------------------------------------

    def get_fragments(
        self,
        markup_aware: bool = False,
        include_context: bool = False,
        siblings: Sequence[MarkedString] | None = None,
    ) -> list[Fragment]:
        """Extract the marked spans of this string as fragments.

        Offsets are computed against the text of all `siblings` (the same side of every
        line in a block) joined by newlines, so that a fragment can look at the
        surrounding markup. Only the chunks owned by this string produce fragments.
        """
        sources = [s for s in (siblings if siblings is not None else [self]) if s.chunks]
        fragment_class = MarkupFragment if markup_aware else Fragment
        owned = {id(chunk) for chunk in self.chunks}
        pieces: list[str] = []
        result: list[Fragment] = []
        offset = 0
        for index, source in enumerate(sources):
            line_offset = 0
            for chunk in source.chunks:
                pieces.append(chunk.text)
                is_marked = chunk.marker in _CHANGE_MARKERS or (include_context and chunk.marker is not None)
                if is_marked and id(chunk) in owned:
                    result.append(fragment_class(
                        offset=offset,
                        end_offset=offset + len(chunk.text),
                        line_offset=line_offset,
                        is_insert=chunk.is_pending and chunk.marker == Marker.INSERT,
                        is_delete=chunk.is_pending and chunk.marker == Marker.DELETE,
                        owner=self,
                    ))
                offset += len(chunk.text)
                line_offset += len(chunk.text)
            if index < len(sources) - 1:
                pieces.append("\n")
                offset += 1
        full_text = "".join(pieces)
        for fragment in result:
            fragment.source = full_text
            if self.ignore_spaces:
                fragment.trim()
        return result

    # -------------------------------------------------------------------------
    # Manipulation
    # -------------------------------------------------------------------------

    def _matches(self, chunk: Chunk, fragment_text: str) -> bool:
        text = chunk.text.strip() if self.ignore_spaces else chunk.text
        return text == fragment_text

    def find_chunk(self, fragment: Fragment | str) -> Chunk | None:
        """Locate the changed chunk a fragment stands for.

        A fragment taken from this string is found by its offset within the string;
        anything else by the first changed chunk with the same text.
        """
        if isinstance(fragment, Fragment) and fragment.owner is self:
            position = 0
            for chunk in self.chunks:
                end = position + len(chunk.text)
                inside = position <= fragment.line_offset < end
                # A blank chunk trims down to an empty fragment at its end
                collapsed = len(fragment) == 0 and fragment.line_offset == end
                if chunk.marker in _CHANGE_MARKERS and (inside or collapsed):
                    return chunk
                position = end
        fragment_text = str(fragment)
        for chunk in self.chunks:
            if chunk.marker in _CHANGE_MARKERS and self._matches(chunk, fragment_text):
                return chunk
        return None

    def accept(self, fragment: Fragment | str | None = None) -> None:
        """Silence every change in the string, or only the one the fragment stands for."""
        if fragment is None:
            for chunk in self.chunks:
                if chunk.marker in _CHANGE_MARKERS:
                    chunk.accept()
            return
        chunk = self.find_chunk(fragment)
        if chunk is not None:
            chunk.accept()

    def mark(self, marker: Marker | None) -> MarkedString:
        """Put the whole text under a single marker."""
        if self.chunks:
            self.chunks = [Chunk(str(self), marker)]
        return self

    def mark_text(self, text: str, marker: Marker) -> MarkedString:
        """Put every occurrence of the text under the marker."""
        if not self.chunks or not text:
            return self
        containers = [chunk for chunk in self.chunks if text in chunk.text]
        for chunk in reversed(containers):
            if chunk.marker == marker:
                return self
            if chunk.text == text:
                chunk.marker = marker
                return self
            splits = chunk.split_by(text)
            for split in splits:
                if split.text == text:
                    split.marker = marker
            position = self.chunks.index(chunk)
            self.chunks[position:position + 1] = splits
        self._compactify()
        return self

    def mark_placeholders(self, marker: Marker) -> MarkedString:
        for chunk in self.chunks:
            if chunk.marker == Marker.PLACEHOLDER:
                chunk.marker = marker
        return self

    def unmark(self, fragment: Fragment | str | None = None) -> MarkedString:
        """Drop all markers, or the marker of the changed chunk the fragment stands for."""
        if fragment is None:
            if self.chunks:
                self.chunks = [Chunk(str(self))]
            return self
        chunk = self.find_chunk(fragment)
        if chunk is not None:
            chunk.marker = None
            chunk.silenced = False
            self._compactify()
        return self

    def cut_left(self, count: int) -> None:
        remaining = count
        while remaining > 0 and self.chunks:
            first = self.chunks[0]
            if len(first) <= remaining:
                remaining -= len(first)
                self.chunks.pop(0)
            else:
                first.cut_left(remaining)
                break

    def _compactify(self) -> None:
        cursor = 1
        while cursor < len(self.chunks):
            previous = self.chunks[cursor - 1]
            current = self.chunks[cursor]
            mergeable = (
                previous.marker == current.marker
                and previous.silenced == current.silenced
                and not previous.is_newline
                and not current.is_newline
            )
            if mergeable:
                previous.text += current.text
                del self.chunks[cursor]
            else:
                cursor += 1

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def to_log(self) -> str:
        return "".join(chunk.to_string(OutputType.LOG) for chunk in self.chunks)

    def to_html(self) -> str:
        return "".join(chunk.to_string(OutputType.HTML) for chunk in self.chunks)

    def to_text(self, target: OutputType, column_width: int) -> list[str]:
        """Render the string as a column of fixed-width rows."""
        if not self.chunks:
            return [" " * column_width]
        if target == OutputType.LOG:
            return self._to_log_rows(column_width)
        return self._to_console_rows(column_width)

    def _to_log_rows(self, column_width: int) -> list[str]:
        result = split_by_length(self.to_log(), column_width)
        if not result:
            return result
        if len(result[-1]) < column_width:
            result[-1] = result[-1].ljust(column_width)
        return result

    def _to_console_rows(self, column_width: int) -> list[str]:
        result: list[str] = []
        queue = deque(self.chunks)
        current: list[str] = []
        filled = 0
        while queue:
            chunk = queue.popleft()
            if len(chunk) > column_width - filled:
                left, right = chunk.split_at(column_width - filled)
                if right is not None:
                    queue.appendleft(right)
                queue.appendleft(left)
                continue
            current.append(chunk.to_string(OutputType.CONSOLE))
            filled += len(chunk)
            if filled >= column_width:
                result.append("".join(current))
                current = []
                filled = 0
        if current:
            current.append(" " * (column_width - filled))
            result.append("".join(current))
        return result


# =============================================================================
# Parsing
# =============================================================================


def _parse(content: str | None) -> list[Chunk]:
    if content is None:
        return []
    chunks: list[Chunk] = []
    source = content
    open_marker: Marker | None = None
    entry = find_nearest_token(source)
    while entry is not None:
        position, token = entry
        current = Marker.from_token(token)
        if open_marker not in (None, Marker.RESET) and current == Marker.RESET:
            chunks.append(Chunk(source[:position], open_marker))
            open_marker = None
        else:
            if position > 0:
                chunks.append(Chunk(source[:position]))
            open_marker = current
        source = source[position + len(token):]
        entry = find_nearest_token(source)
    if source:
        trailing_marker = open_marker if open_marker != Marker.RESET else None
        chunks.append(Chunk(source, trailing_marker))
    return chunks
