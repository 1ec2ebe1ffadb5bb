"""
Fragments: marked spans of text located within the full text of a block side.

A markup fragment can additionally resolve the attribute, tag, or JSON property
it belongs to by scanning the surrounding source.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum


def _is_name_char(char: str) -> bool:
    return char.isalnum() or char in "-_:"


# =============================================================================
# Fragment
# =============================================================================


@dataclass(eq=False)
class Fragment:
    """A span [offset, end_offset) of `source` that carries a change."""

    offset: int
    end_offset: int
    source: str = ""
    line_offset: int = 0  # Offset relative to the start of the line the fragment belongs to
    is_insert: bool = False
    is_delete: bool = False
    owner: object = field(default=None, repr=False)  # MarkedString the fragment was taken from

    @property
    def is_pending(self) -> bool:
        """True if the change has not been silenced by a filter."""
        return self.is_insert or self.is_delete

    def __len__(self) -> int:
        return self.end_offset - self.offset

    def __str__(self) -> str:
        return self.source[self.offset:self.end_offset]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return str(self) == other
        if not isinstance(other, Fragment):
            return NotImplemented
        return (
            self.offset == other.offset
            and self.end_offset == other.end_offset
            and self.source == other.source
        )

    def __hash__(self) -> int:
        return hash((self.offset, self.end_offset, self.source))

    def trim(self) -> None:
        """Move the boundaries past surrounding whitespace."""
        while self.offset < self.end_offset and self.source[self.offset].isspace():
            self.offset += 1
            self.line_offset += 1
        while self.end_offset > self.offset and self.source[self.end_offset - 1].isspace():
            self.end_offset -= 1

    def _span(self, offset: int, end_offset: int) -> MarkupFragment:
        return MarkupFragment(offset, end_offset, self.source)


# =============================================================================
# Markup Fragment
# =============================================================================


class MarkupFragment(Fragment):
    """Fragment of HTML/XML (or JSON) text that knows about its structural surroundings."""

    def is_attribute_value(self, name: str) -> bool:
        attribute = self.to_attribute()
        return attribute is not None and str(attribute).split('="', 1)[0].lower() == name.lower()

    def is_inside_tag(self, name: str) -> bool:
        tag = self.to_tag()
        return tag is not None and TagIdentifier.parse(name).matches(tag)

    def is_tag_content(self, name: str) -> bool:
        tag = self.to_tag()
        if tag is None or not TagIdentifier.parse(name).matches(tag):
            return False
        return self.offset > self.source.find(">", tag.offset)

    def is_json_value(self, name: str) -> bool:
        prop = self.to_json_property()
        if prop is None:
            return False
        text = str(prop)
        key_end = text.find('"', 1)
        return key_end > 0 and text[1:key_end] == name

    def to_attribute(self) -> MarkupFragment | None:
        """Expand to the enclosing `name="value"` attribute, or None."""
        quote = self.source.rfind('"', 0, self.offset)
        if quote < 1 or self.source[quote - 1] != "=":
            return None
        if "<" in self.source[quote:self.offset] or ">" in self.source[quote:self.offset]:
            return None
        closing = self.source.find('"', self.end_offset)
        if closing < 0:
            return None
        equals = quote - 1
        start = equals
        while start > 0 and _is_name_char(self.source[start - 1]):
            start -= 1
        if start == equals:
            return None
        return self._span(start, closing + 1)

    def to_tag(self) -> MarkupFragment | None:
        """Expand to the innermost tag enclosing the fragment.

        If no enclosing tag is closed after the fragment, the nearest opening tag up to
        the end of the source is returned.
        """
        return self._to_tag(self.offset, None)

    def _to_tag(self, position: int, fallback: MarkupFragment | None) -> MarkupFragment | None:
        if position < 0:
            return fallback
        opening = self.source.rfind("<", 0, position + 1)
        if opening < 0:
            return fallback
        opening_end = self.source.find(">", opening)
        if opening_end < 0:
            return fallback
        opening_end += 1
        if self.source[opening_end - 2] == "/":
            if opening_end > self.end_offset:
                return self._span(opening, opening_end)
            return self._to_tag(opening - 1, fallback)
        tag_name = _read_name(self.source, opening)
        closing_tag = f"</{tag_name}>"
        closing = self.source.find(closing_tag, opening) if tag_name else -1
        if closing >= self.end_offset:
            return self._span(opening, closing + len(closing_tag))
        incomplete = self._span(opening, len(self.source))
        return self._to_tag(opening - 1, fallback if fallback is not None else incomplete)

    def to_json_property(self) -> MarkupFragment | None:
        """Expand to the enclosing `"key": "value"` pair, or None."""
        value_open = self.source.rfind('"', 0, self.offset)
        if value_open < 0:
            return None
        colon = value_open - 1
        while colon >= 0 and self.source[colon].isspace():
            colon -= 1
        if colon < 0 or self.source[colon] != ":":
            return None
        key_close = colon - 1
        while key_close >= 0 and self.source[key_close].isspace():
            key_close -= 1
        if key_close < 0 or self.source[key_close] != '"':
            return None
        key_open = self.source.rfind('"', 0, key_close)
        value_close = self.source.find('"', self.end_offset)
        if key_open < 0 or value_close < 0:
            return None
        return self._span(key_open, value_close + 1)


def _read_name(source: str, offset: int) -> str:
    begin = offset + 1 if source[offset] == "<" else offset
    end = begin
    while end < len(source) and _is_name_char(source[end]):
        end += 1
    return source[begin:end]


# =============================================================================
# Tag Selectors
# =============================================================================


class SelectorOperator(Enum):
    EQUALS = "="
    EXISTS = ""
    CONTAINS = "*="


@dataclass
class TagSelector:
    """Attribute condition of a tag identifier, e.g. [class*="card"]."""

    operator: SelectorOperator
    name: str
    value: str | None = None

    def matches(self, tag: Fragment) -> bool:
        text = str(tag)
        start = text.find("<")
        end = text.find(">", start + 1)
        caption = text[start + 1:end] if start >= 0 and end > start else ""
        if not caption:
            return False
        if self.operator == SelectorOperator.EXISTS:
            return self.name in caption
        if self.operator == SelectorOperator.EQUALS:
            return f'{self.name}="{self.value}"' in caption
        marker = f'{self.name}="'
        value_start = caption.find(marker)
        if value_start < 0:
            return False
        value_start += len(marker)
        value_end = caption.find('"', value_start)
        if value_end < 0:
            return False
        return (self.value or "") in caption[value_start:value_end]

    @classmethod
    def parse(cls, value: str) -> TagSelector | None:
        if '"' not in value:
            name = re.sub(r"[^\w-]+", "", value)
            return cls(SelectorOperator.EXISTS, name) if name else None
        parts = value.split('"')
        selector_value = parts[1] if len(parts) > 2 else None
        name_and_operator = parts[0].strip()
        if not name_and_operator or selector_value is None:
            return None
        if name_and_operator.endswith("*="):
            return cls(SelectorOperator.CONTAINS, name_and_operator.rstrip("*= "), selector_value)
        if name_and_operator.endswith("="):
            return cls(SelectorOperator.EQUALS, name_and_operator.rstrip("= "), selector_value)
        return None


@dataclass
class TagIdentifier:
    """Tag name with an optional selector: `p`, `p.cls`, `p#id`, `p[attr]`, `p[attr="v"]`, `p[attr*="v"]`."""

    name: str
    selector: TagSelector | None = None

    def matches(self, tag: Fragment) -> bool:
        return self.name == _read_name(tag.source, tag.offset) and (
            self.selector is None or self.selector.matches(tag)
        )

    @classmethod
    def parse(cls, value: str) -> TagIdentifier:
        open_bracket = value.find("[")
        close_bracket = value.find("]")
        if open_bracket >= 0 and close_bracket >= open_bracket:
            return cls(
                value[:open_bracket].strip(),
                TagSelector.parse(value[open_bracket + 1:close_bracket].strip()),
            )
        if value.find(".") > 0:
            name, _, cls_name = value.partition(".")
            return cls(name.strip(), TagSelector(SelectorOperator.CONTAINS, "class", cls_name.strip()))
        if value.find("#") > 0:
            name, _, id_value = value.partition("#")
            return cls(name.strip(), TagSelector(SelectorOperator.EQUALS, "id", id_value.strip()))
        return cls(value.strip())
