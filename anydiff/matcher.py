"""
Line matcher: turns two lists of lines into diff rows with inline change markers.

Matching is done with difflib at two levels: whole lines first, then, inside every
replaced region, tokens produced by `tokenize`.
"""

from __future__ import annotations

import difflib
import re
from dataclasses import dataclass
from enum import Enum

from anydiff.markers import Marker


class RowTag(Enum):
    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"
    CHANGE = "change"


@dataclass
class DiffRow:
    """One row of a side-by-side diff. Lines carry inline markers for INSERT/DELETE/CHANGE rows."""

    tag: RowTag
    old_line: str
    new_line: str


# =============================================================================
# Tokenizer
# =============================================================================


def _is_word_char(value: str, index: int) -> bool:
    char = value[index]
    if char.isalnum() or char in "-_":
        return True
    if char != ":" or index == 0 or index == len(value) - 1:
        return False
    before, after = value[index - 1], value[index + 1]
    return before.isascii() and before.isalnum() and after.isascii() and after.isalnum()


def tokenize(value: str) -> list[str]:
    """Split text into tokens for inline diffing.

    Boundaries are placed between whitespace and non-whitespace, before `<`, after `>`,
    and between word and non-word characters. `:` counts as a word character when it
    sits between two ASCII alphanumerics (as in `jcr:title`).
    """
    if not value or value.isspace():
        return [value]
    result: list[str] = []
    start = 0
    for i in range(1, len(value)):
        previous, current = value[i - 1], value[i]
        if (
            previous.isspace() != current.isspace()
            or current == "<"
            or previous == ">"
            or _is_word_char(value, i - 1) != _is_word_char(value, i)
        ):
            result.append(value[start:i])
            start = i
    result.append(value[start:])
    return result


# =============================================================================
# Matching
# =============================================================================

_WHITESPACE = re.compile(r"\s+")


def _line_key(line: str, ignore_spaces: bool) -> str:
    return _WHITESPACE.sub(" ", line).strip() if ignore_spaces else line


def _token_key(token: str, ignore_spaces: bool) -> str:
    if ignore_spaces and token.isspace():
        return " "
    return token


def _wrap(marker: Marker, text: str) -> str:
    return marker.wrap(text)


def _append_marked(lines: list[list[str]], text: str, marker: Marker | None) -> None:
    """Append text to the line being built, closing and reopening the marker at line breaks."""
    pieces = text.split("\n")
    for index, piece in enumerate(pieces):
        if index > 0:
            lines.append([])
        if not piece:
            continue
        lines[-1].append(_wrap(marker, piece) if marker is not None else piece)


def _inline_diff(old_lines: list[str], new_lines: list[str], ignore_spaces: bool) -> list[DiffRow]:
    old_tokens = tokenize("\n".join(old_lines))
    new_tokens = tokenize("\n".join(new_lines))
    matcher = difflib.SequenceMatcher(
        None,
        [_token_key(t, ignore_spaces) for t in old_tokens],
        [_token_key(t, ignore_spaces) for t in new_tokens],
        autojunk=False,
    )
    old_result: list[list[str]] = [[]]
    new_result: list[list[str]] = [[]]
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        old_text = "".join(old_tokens[i1:i2])
        new_text = "".join(new_tokens[j1:j2])
        if tag == "equal":
            _append_marked(old_result, old_text, None)
            _append_marked(new_result, new_text, None)
            continue
        if tag in ("delete", "replace"):
            _append_marked(old_result, old_text, Marker.DELETE)
        if tag in ("insert", "replace"):
            _append_marked(new_result, new_text, Marker.INSERT)
    old_strings = ["".join(parts) for parts in old_result]
    new_strings = ["".join(parts) for parts in new_result]
    rows = []
    for i in range(max(len(old_strings), len(new_strings))):
        rows.append(DiffRow(
            RowTag.CHANGE,
            old_strings[i] if i < len(old_strings) else "",
            new_strings[i] if i < len(new_strings) else "",
        ))
    return rows


def match_lines(left_lines: list[str], right_lines: list[str], ignore_spaces: bool = False) -> list[DiffRow]:
    """Produce side-by-side diff rows for two lists of lines.

    Returns:
        EQUAL rows hold the original lines; DELETE/INSERT rows hold the line wrapped in a
        single marker on one side and an empty string on the other; CHANGE rows hold
        inline-marked versions of both lines
    """
    matcher = difflib.SequenceMatcher(
        None,
        [_line_key(line, ignore_spaces) for line in left_lines],
        [_line_key(line, ignore_spaces) for line in right_lines],
        autojunk=False,
    )
    rows: list[DiffRow] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for old_line, new_line in zip(left_lines[i1:i2], right_lines[j1:j2]):
                rows.append(DiffRow(RowTag.EQUAL, old_line, new_line))
        elif tag == "delete":
            for old_line in left_lines[i1:i2]:
                rows.append(DiffRow(RowTag.DELETE, _wrap(Marker.DELETE, old_line), ""))
        elif tag == "insert":
            for new_line in right_lines[j1:j2]:
                rows.append(DiffRow(RowTag.INSERT, "", _wrap(Marker.INSERT, new_line)))
        else:
            rows.extend(_inline_diff(left_lines[i1:i2], right_lines[j1:j2], ignore_spaces))
    return rows
