"""
Comparison of one pair of contents.

`DiffTask.run()` short-circuits equal, anticipated and missing contents, summarizes
opaque (binary) contents as a disparity block, and for everything else runs the text
pipeline: preprocess, match lines, postprocess, split the rows into blocks with
lookbehind context, and filter the blocks.
"""

from __future__ import annotations

import logging
import zlib
from collections.abc import Callable
from dataclasses import dataclass, field

from anydiff.entries import Block, BlockKind, Diff, DiffState, Line
from anydiff.marked_string import MarkedString
from anydiff.markers import ELLIPSIS_TOKEN, LABEL_LEFT, LABEL_RIGHT, MAX_CONTEXT_LENGTH, TOKENS, Marker
from anydiff.matcher import DiffRow, RowTag, match_lines
from anydiff.parameters import ContentType, TaskParameters
from anydiff.paths import get_path_resolver
from anydiff.postprocessing import get_postprocessor
from anydiff.preprocessing import get_preprocessor

logger = logging.getLogger(__name__)


def _split_lines(value: str) -> list[str]:
    return value.splitlines() if value else []


def _to_text(value: object) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def summarize_binary(value: object, path: str | None = None) -> str:
    """Describe opaque content with marked "Path:", "Size:" and "CRC:" lines.

    Text without marker tokens is wrapped as a placeholder so that it gets highlighted
    as a whole.
    """
    if not isinstance(value, (bytes, bytearray)):
        text = str(value)
        if any(token in text for token in TOKENS):
            return text
        lines = text.split("\n")
        # A trailing newline ends the last line rather than starting an empty one
        if len(lines) > 1 and not lines[-1]:
            lines.pop()
        return "\n".join(Marker.PLACEHOLDER.wrap(line) for line in lines)
    lines = []
    if path:
        lines.append(f"{Marker.CONTEXT.wrap('Path:')} {Marker.PLACEHOLDER.wrap(path)}")
    lines.append(f"{Marker.CONTEXT.wrap('Size:')} {Marker.PLACEHOLDER.wrap(f'{len(value) / 1024.0:.1f} Kb')}")
    lines.append(f"{Marker.CONTEXT.wrap('CRC:')} {Marker.PLACEHOLDER.wrap(zlib.crc32(value))}")
    return "\n".join(lines)


@dataclass
class DiffTask:
    """Compares two contents and builds the entry tree."""

    left_content: object
    right_content: object
    left_id: str | None = None
    right_id: str | None = None
    left_label: str | None = None
    right_label: str | None = None
    content_type: ContentType = ContentType.TEXT
    parameters: TaskParameters | None = None
    entry_filter: Callable[[Block], bool] | None = None  # Keeps a block when it returns True
    anticipated_state: DiffState = DiffState.UNCHANGED
    _resolved: TaskParameters = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._resolved = TaskParameters.merge(TaskParameters.for_type(self.content_type), self.parameters)
        if not self.left_label or not self.left_label.strip():
            self.left_label = LABEL_LEFT
        if not self.right_label or not self.right_label.strip():
            self.right_label = LABEL_RIGHT
        if self.anticipated_state is None:
            self.anticipated_state = DiffState.UNCHANGED

    @property
    def column_width(self) -> int:
        return self._resolved.effective_column_width - 1

    def _block_options(self) -> dict:
        return {
            "left_label": self.left_label,
            "right_label": self.right_label,
            "column_width": self.column_width,
        }

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def run(self) -> Diff:
        if self.left_content == self.right_content:
            return Diff(self.left_id, self.right_id)

        if self.anticipated_state == DiffState.CHANGE:
            block = Block(BlockKind.DISPARITY, **self._block_options())
            block.add_line(Line(
                MarkedString(str(self.left_content)).mark_placeholders(Marker.DELETE),
                MarkedString(str(self.right_content)).mark_placeholders(Marker.INSERT),
            ))
            return Diff(self.left_id, self.right_id, [block])

        if self.left_content is None or self.anticipated_state == DiffState.LEFT_MISSING:
            block = Block.missing_left(self.right_id, **self._block_options())
            return Diff(self.left_id, self.right_id, [block])

        if self.right_content is None or self.anticipated_state == DiffState.RIGHT_MISSING:
            block = Block.missing_right(self.left_id, **self._block_options())
            return Diff(self.left_id, self.right_id, [block])

        try:
            if self.content_type == ContentType.UNDEFINED:
                return self._run_for_binary()
            return self._run_for_text()
        except Exception as e:
            logger.exception("Error comparing %s and %s", self.left_id, self.right_id)
            return Diff(self.left_id, self.right_id, [Block.error(e, **self._block_options())])

    def _run_for_binary(self) -> Diff:
        block = Block.disparity(
            summarize_binary(self.left_content),
            summarize_binary(self.right_content),
            **self._block_options(),
        )
        return Diff(self.left_id, self.right_id, [block])

    def _run_for_text(self) -> Diff:
        parameters = self._resolved
        left = get_preprocessor(self.content_type, parameters, self.left_id)(_to_text(self.left_content))
        right = get_preprocessor(self.content_type, parameters, self.right_id)(_to_text(self.right_content))
        rows = match_lines(_split_lines(left), _split_lines(right), parameters.effective_ignore_spaces)
        rows = get_postprocessor(self.content_type, parameters)(rows)
        logger.debug("Matched %d rows for %s vs %s", len(rows), self.left_id, self.right_id)

        result = Diff(self.left_id, self.right_id)
        blocks = self._split_into_blocks(rows)
        for block in blocks:
            block.diff = result
        if self.entry_filter is not None:
            blocks = [block for block in blocks if self.entry_filter(block)]
        return result.with_children(blocks)

    # -------------------------------------------------------------------------
    # Segmentation
    # -------------------------------------------------------------------------

    def _new_block(self, rows: list[DiffRow], position: int) -> Block:
        resolver = get_path_resolver(self.content_type)
        return Block(
            path=resolver.get_path(rows, position) if resolver is not None else "",
            markup=self.content_type.is_markup,
            ignore_spaces=self._resolved.effective_ignore_spaces,
            normalize=self._resolved.effective_normalize,
            **self._block_options(),
        )

    def _split_into_blocks(self, rows: list[DiffRow]) -> list[Block]:
        result: list[Block] = []
        pending: Block | None = None
        for i, row in enumerate(rows):
            if row.tag == RowTag.EQUAL:
                if pending is not None:
                    pending.add_context([row])
                    result.append(pending)
                    pending = None
                continue
            if pending is None:
                pending = self._new_block(rows, i)
                pending.add_context(self._lookbehind_context(rows, i))
            pending.add(row)
        if pending is not None:
            result.append(pending)
        return result

    def _lookbehind_context(self, rows: list[DiffRow], position: int) -> list[DiffRow]:
        if position == 0:
            return []
        resolver = get_path_resolver(self.content_type)
        if resolver is None:
            return [rows[position - 1]]
        tag_index = resolver.preceding_tag_row_index(rows, position - 1)
        if tag_index >= 0:
            return truncate_context(rows[tag_index:position])
        return [rows[position - 1]]


def truncate_context(rows: list[DiffRow]) -> list[DiffRow]:
    """Keep the first and last halves of an overlong context, joined by an ellipsis row."""
    if len(rows) <= MAX_CONTEXT_LENGTH:
        return rows
    half = MAX_CONTEXT_LENGTH // 2
    return rows[:half] + [DiffRow(RowTag.EQUAL, ELLIPSIS_TOKEN, ELLIPSIS_TOKEN)] + rows[-half:]
