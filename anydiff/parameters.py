"""Content types and comparison parameters with their layered defaults."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from anydiff.matcher import DiffRow

# =============================================================================
# Global defaults
# =============================================================================

DEFAULT_ARRANGE_ATTRIBUTES = True
DEFAULT_COLUMN_WIDTH = 60
DEFAULT_IGNORE_SPACES = True
DEFAULT_NORMALIZE = True
MIN_COLUMN_WIDTH = 10

Preprocessor = Callable[[str], str]
Postprocessor = Callable[[list["DiffRow"]], list["DiffRow"]]


class ContentType(Enum):
    UNDEFINED = "undefined"
    XML = "xml"
    HTML = "html"
    MANIFEST = "manifest"
    TEXT = "text"

    @property
    def is_markup(self) -> bool:
        return self in (ContentType.HTML, ContentType.XML)

    @classmethod
    def from_mime_type(cls, value: str | None) -> ContentType:
        """Detect the type from a MIME type such as `text/html; charset=utf-8`."""
        if not value or not value.strip():
            return cls.UNDEFINED
        effective = value.split(";", 1)[0].lower()
        for content_type, fragment in _MIME_FRAGMENTS:
            if fragment in effective:
                return content_type
        return cls.UNDEFINED

    @classmethod
    def from_extension(cls, value: str | None) -> ContentType:
        """Detect the type from a file extension, with or without the leading dot."""
        if not value or not value.strip():
            return cls.UNDEFINED
        extension = value.lower().lstrip(".")
        for content_type, extensions in _EXTENSIONS.items():
            if extension in extensions:
                return content_type
        return cls.UNDEFINED


_MIME_FRAGMENTS = (
    (ContentType.XML, "xml"),
    (ContentType.HTML, "html"),
    (ContentType.TEXT, "text"),
)

_EXTENSIONS = {
    ContentType.XML: {"xml"},
    ContentType.HTML: {"htl", "html", "htm"},
    ContentType.MANIFEST: {"mf"},
    ContentType.TEXT: {
        "css", "csv", "ecma", "info", "java", "jsp", "jspx", "js", "json",
        "log", "md", "php", "properties", "ts", "txt",
    },
}


# =============================================================================
# Task Parameters
# =============================================================================


@dataclass(frozen=True)
class TaskParameters:
    """Switches of a comparison. Unset (None) values fall back to the global defaults."""

    arrange_attributes: bool | None = None
    column_width: int | None = None
    ignore_spaces: bool | None = None
    normalize: bool | None = None
    preprocessors: dict[ContentType, Preprocessor] = field(default_factory=dict)  # Custom, per content type
    postprocessors: dict[ContentType, Postprocessor] = field(default_factory=dict)

    @property
    def effective_arrange_attributes(self) -> bool:
        return self.arrange_attributes if self.arrange_attributes is not None else DEFAULT_ARRANGE_ATTRIBUTES

    @property
    def effective_column_width(self) -> int:
        if self.column_width is not None and self.column_width >= MIN_COLUMN_WIDTH:
            return self.column_width
        return DEFAULT_COLUMN_WIDTH

    @property
    def effective_ignore_spaces(self) -> bool:
        return self.ignore_spaces if self.ignore_spaces is not None else DEFAULT_IGNORE_SPACES

    @property
    def effective_normalize(self) -> bool:
        return self.normalize if self.normalize is not None else DEFAULT_NORMALIZE

    def is_empty(self) -> bool:
        return (
            self.arrange_attributes is None
            and self.column_width is None
            and self.ignore_spaces is None
            and self.normalize is None
            and not self.preprocessors
            and not self.postprocessors
        )

    @classmethod
    def for_type(cls, content_type: ContentType | None) -> TaskParameters:
        if content_type in (ContentType.HTML, ContentType.XML):
            return FOR_MARKUP
        if content_type == ContentType.MANIFEST:
            return FOR_STRUCTURED_TEXT
        return FOR_TEXT

    @staticmethod
    def merge(first: TaskParameters | None, second: TaskParameters | None) -> TaskParameters:
        """Layer `second` over `first`: every value set in `second` wins."""
        if first is None or first.is_empty():
            return second if second is not None else TaskParameters()
        if second is None or second.is_empty():
            return first
        return replace(
            first,
            arrange_attributes=_pick(second.arrange_attributes, first.arrange_attributes),
            column_width=_pick(second.column_width, first.column_width),
            ignore_spaces=_pick(second.ignore_spaces, first.ignore_spaces),
            normalize=_pick(second.normalize, first.normalize),
            preprocessors=second.preprocessors or first.preprocessors,
            postprocessors=second.postprocessors or first.postprocessors,
        )


def _pick(preferred, fallback):
    return preferred if preferred is not None else fallback


FOR_MARKUP = TaskParameters(arrange_attributes=True, normalize=True, ignore_spaces=False)
FOR_TEXT = TaskParameters(arrange_attributes=False, normalize=False, ignore_spaces=False)
FOR_STRUCTURED_TEXT = TaskParameters(arrange_attributes=False, normalize=True, ignore_spaces=False)
