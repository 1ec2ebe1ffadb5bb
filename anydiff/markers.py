"""Change markers embedded in intermediate diff strings and their per-target renderings."""

from __future__ import annotations

from enum import Enum

# Structural tokens. They are recognized by the annotated-text model but are not markers
ELLIPSIS_TOKEN = "{{.}}"
NEW_LINE = "{{n}}"

# Rendering constants
DEFAULT_INDENT = 2
MAX_CONTEXT_LENGTH = 8
ELLIPSIS = "..."
DASH = "-"
LABEL_LEFT = "Left"
LABEL_RIGHT = "Right"

CLASS_LEFT = "left"
CLASS_RIGHT = "right"
CLASS_HEADER = "header"
CLASS_PATH = "path"


class OutputType(Enum):
    """Targets a diff tree can be rendered to."""

    CONSOLE = "console"
    LOG = "log"
    HTML = "html"


class Marker(Enum):
    """Inline marker. The value is the token as it appears inside a marked string."""

    CONTEXT = "{{eq}}"
    DELETE = "{{del}}"
    INSERT = "{{ins}}"
    PLACEHOLDER = "{{_}}"
    RESET = "{{/}}"

    @property
    def token(self) -> str:
        return self.value

    def wrap(self, value: object) -> str:
        """Surround the value with this marker and a reset token."""
        text = "" if value is None else str(value)
        return f"{self.value}{text}{Marker.RESET.value}"

    def render(self, target: OutputType, previous: Marker | None = None) -> str:
        """Render the marker for the given output target.

        `previous` is the marker being closed; it only matters for RESET.
        """
        if target == OutputType.CONSOLE:
            return _CONSOLE_CODES[self]
        if target == OutputType.LOG:
            if self == Marker.RESET:
                if previous in (Marker.INSERT, Marker.DELETE):
                    return _LOG_CHARS[previous]
                return ""
            return _LOG_CHARS[self]
        if self == Marker.RESET:
            return "</span>" if previous is not None and previous != Marker.PLACEHOLDER else ""
        if self == Marker.PLACEHOLDER:
            return ""
        return f'<span class="{_HTML_CLASSES[self]}">'

    @classmethod
    def from_token(cls, value: str | None) -> Marker | None:
        for marker in cls:
            if marker.value == value:
                return marker
        return None


_CONSOLE_CODES = {
    Marker.CONTEXT: "\033[37m",
    Marker.DELETE: "\033[30;48;5;207m",
    Marker.INSERT: "\033[30;48;5;119m",
    Marker.PLACEHOLDER: "",
    Marker.RESET: "\033[0m",
}

_LOG_CHARS = {
    Marker.CONTEXT: "=",
    Marker.DELETE: "~",
    Marker.INSERT: "+",
    Marker.PLACEHOLDER: "",
}

_HTML_CLASSES = {
    Marker.CONTEXT: "eq",
    Marker.DELETE: "del",
    Marker.INSERT: "ins",
}

TOKENS = tuple(marker.token for marker in Marker)


def find_nearest_token(value: str, candidates: tuple[str, ...] = TOKENS) -> tuple[int, str] | None:
    """Find the leftmost occurrence of any candidate.

    Returns:
        (position, candidate) or None if no candidate occurs in the value
    """
    result: tuple[int, str] | None = None
    for candidate in candidates:
        position = value.find(candidate)
        if position >= 0 and (result is None or position < result[0]):
            result = (position, candidate)
    return result


def remove_tokens(value: str) -> str:
    """Strip every marker token from the value."""
    for token in TOKENS:
        value = value.replace(token, "")
    return value


def escape_html(value: str) -> str:
    return value.replace("<", "&lt;").replace(">", "&gt;")


def truncate_middle(value: str | None, limit: int, ellipsis: str = ELLIPSIS) -> str:
    """Shorten a string by replacing its middle part with an ellipsis."""
    if value is None:
        return ""
    if len(value) < limit or (value.endswith(ellipsis) and len(value) < limit + len(ellipsis)):
        return value
    stripped = value.removesuffix(ELLIPSIS)
    half = max((limit - 3) // 2, 0)
    left_part = stripped[:half]
    right_part = stripped[len(value) - half:] if half else ""
    return left_part + ellipsis + right_part


def truncate_right(value: str | None, limit: int) -> str:
    if value is None:
        return ""
    return value[: limit - 3] + ELLIPSIS if len(value) > limit else value


def center(value: str, width: int) -> str:
    """Center the value, placing the extra space on the right (like commons-lang center)."""
    if len(value) >= width:
        return value
    pad = width - len(value)
    left = pad // 2
    return " " * left + value + " " * (pad - left)


def get_indent(value: str) -> int:
    """Count leading whitespace characters."""
    for i, char in enumerate(value):
        if not char.isspace():
            return i
    return len(value)


def split_by_length(value: str, length: int) -> list[str]:
    if length <= 0:
        return []
    if len(value) <= length:
        return [value]
    return [value[i:i + length] for i in range(0, len(value), length)]
