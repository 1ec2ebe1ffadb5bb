"""Row-level cleanup applied to the matcher output before it is segmented into blocks."""

from __future__ import annotations

from anydiff.markers import NEW_LINE, Marker
from anydiff.matcher import DiffRow, RowTag
from anydiff.parameters import ContentType, Postprocessor, TaskParameters

TAG_CLOSE = ">"
TAG_AUTO_CLOSE = "/>"


def basic_postprocess(rows: list[DiffRow]) -> list[DiffRow]:
    """Turn an empty deleted/inserted line into an explicit newline cell."""
    return [_insert_newline_marker(row) for row in rows]


def _insert_newline_marker(row: DiffRow) -> DiffRow:
    if row.tag == RowTag.DELETE and row.old_line == Marker.DELETE.wrap(""):
        return DiffRow(row.tag, Marker.DELETE.wrap(NEW_LINE), "")
    if row.tag == RowTag.INSERT and row.new_line == Marker.INSERT.wrap(""):
        return DiffRow(row.tag, "", Marker.INSERT.wrap(NEW_LINE))
    return row


def markup_postprocess(rows: list[DiffRow]) -> list[DiffRow]:
    """Pull leading indentation out of inserted/deleted spans and merge lone `>` rows upward."""
    result: list[DiffRow] = []
    for row in rows:
        if row.tag == RowTag.CHANGE:
            result.append(row)
        elif row.tag in (RowTag.INSERT, RowTag.DELETE):
            result.append(DiffRow(
                row.tag,
                _extract_marked_spaces(row.old_line, Marker.DELETE.token),
                _extract_marked_spaces(row.new_line, Marker.INSERT.token),
            ))
        else:
            _append_context(row, result)
    return basic_postprocess(result)


def _append_context(row: DiffRow, rows: list[DiffRow]) -> None:
    trimmed = row.old_line.strip()
    if trimmed not in (TAG_CLOSE, TAG_AUTO_CLOSE) or not rows:
        rows.append(row)
        return
    ending = Marker.CONTEXT.wrap(trimmed)
    last = rows.pop()
    rows.append(DiffRow(last.tag, last.old_line + ending, last.new_line + ending))


def _extract_marked_spaces(value: str, token: str) -> str:
    if not value.startswith(token + " "):
        return value
    body = value[len(token):]
    spaces = len(body) - len(body.lstrip(" "))
    return " " * spaces + token + body[spaces:]


def get_postprocessor(content_type: ContentType | None, parameters: TaskParameters) -> Postprocessor:
    custom = parameters.postprocessors.get(content_type) if content_type is not None else None
    if custom is not None:
        return custom
    if content_type is not None and content_type.is_markup and parameters.effective_normalize:
        return markup_postprocess
    return basic_postprocess
