"""
Facade for comparing two strings or two files.

    diffs = AnyDiff.from_files("old/page.html", "new/page.html").compare()
    if not is_match(diffs):
        print(diffs[0].to_string(OutputType.CONSOLE))

Files are read according to their content type, which is detected from the file
extension unless given. A file that does not exist or cannot be read counts as absent,
so the comparison reports it as missing.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from anydiff.entries import Diff, DiffState
from anydiff.exceptions import ContentError
from anydiff.filters import diff_filter, entry_filter
from anydiff.parameters import ContentType, TaskParameters
from anydiff.task import DiffTask

logger = logging.getLogger(__name__)


def is_match(diffs: Sequence[Diff]) -> bool:
    """True when there are no differences or all of them have been accepted."""
    return all(diff.pending_count == 0 for diff in diffs)


def read_content(path: Path, content_type: ContentType) -> str | bytes | None:
    """Read a file as text, or as bytes for opaque content. A missing file yields None."""
    if not path.exists():
        return None
    try:
        if content_type == ContentType.UNDEFINED:
            return path.read_bytes()
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ContentError(f"Cannot read {path}: {e}", {"path": str(path)}) from e


def detect_content_type(*paths: Path | None) -> ContentType:
    """Content type by the extension of the first path that has one."""
    for path in paths:
        if path is not None and path.suffix:
            return ContentType.from_extension(path.suffix)
    return ContentType.UNDEFINED


@dataclass
class AnyDiff:
    """Compares two contents. `Path` values are read from disk; anything else is compared as is."""

    left: object
    right: object
    content_type: ContentType | None = None
    parameters: TaskParameters | None = None
    left_label: str | None = None
    right_label: str | None = None
    filters: list = field(default_factory=list)

    @classmethod
    def from_files(cls, left: str | Path, right: str | Path, **kwargs) -> AnyDiff:
        return cls(Path(left), Path(right), **kwargs)

    @property
    def effective_content_type(self) -> ContentType:
        if self.content_type is not None:
            return self.content_type
        paths = [value for value in (self.left, self.right) if isinstance(value, Path)]
        if paths:
            return detect_content_type(*paths)
        if isinstance(self.left, bytes) or isinstance(self.right, bytes):
            return ContentType.UNDEFINED
        return ContentType.TEXT

    def _load(self, value: object, content_type: ContentType) -> object:
        if not isinstance(value, Path):
            return value
        try:
            return read_content(value, content_type)
        except ContentError as e:
            logger.warning("%s; treating it as absent", e)
            return None

    @staticmethod
    def _identify(value: object, default: str) -> str:
        return str(value) if isinstance(value, Path) else default

    def compare(self) -> list[Diff]:
        """Run the comparison. The result is empty when nothing differs or the difference is skipped."""
        content_type = self.effective_content_type
        task = DiffTask(
            left_content=self._load(self.left, content_type),
            right_content=self._load(self.right, content_type),
            left_id=self._identify(self.left, "left"),
            right_id=self._identify(self.right, "right"),
            left_label=self.left_label,
            right_label=self.right_label,
            content_type=content_type,
            parameters=self.parameters,
            entry_filter=entry_filter(self.filters),
        )
        diff = task.run()
        logger.debug("Compared %s and %s: %s", diff.left, diff.right, diff.state.name)
        if diff.state == DiffState.UNCHANGED or not diff_filter(self.filters)(diff):
            return []
        return [diff]

    def is_match(self) -> bool:
        return is_match(self.compare())
