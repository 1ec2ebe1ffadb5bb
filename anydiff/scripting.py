"""
Filter rules written in JavaScript.

A script is a list of top-level function declarations. A function with exactly one
parameter becomes a rule when its name contains the word "accept" or "skip"; the
parameter name tells which entries the rule applies to:

    function skipWhitespaceChanges(line) {
        return line.getLeft().trim() === line.getRight().trim();
    }

    function acceptTimestamps(fragment) {
        return fragment.isAttributeValue('data-timestamp');
    }

Functions are evaluated in an embedded interpreter (dukpy) against a read-only
snapshot of the entry.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path

import dukpy

from anydiff.entries import Block, Diff, EntryType, FragmentPair, Line
from anydiff.exceptions import ScriptError
from anydiff.filters import Filter
from anydiff.fragments import Fragment
from anydiff.markers import OutputType

logger = logging.getLogger(__name__)

DIFF_PARAMETER = "diff"

_FUNCTION_HEADER = re.compile(r"function\s+([A-Za-z_$][\w$]*)\s*\(([^)]*)\)\s*\{")
_CAMEL_CASE_WORDS = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+|[^A-Za-z\d]+")

_FRAGMENT_METHODS = {
    "isAttributeValue": "is_attribute_value",
    "isInsideTag": "is_inside_tag",
    "isTagContent": "is_tag_content",
    "isJsonValue": "is_json_value",
}

PRELUDE = r"""
var console = {
    log: function () {
        call_python('anydiff.console', Array.prototype.join.call(arguments, ' '));
    }
};
if (!String.prototype.includes) {
    String.prototype.includes = function (search, start) {
        return this.indexOf(search, start || 0) !== -1;
    };
}
if (!String.prototype.startsWith) {
    String.prototype.startsWith = function (search, position) {
        position = position || 0;
        return this.substr(position, search.length) === search;
    };
}
if (!String.prototype.endsWith) {
    String.prototype.endsWith = function (search, length) {
        var end = length === undefined || length > this.length ? this.length : length;
        return this.substring(end - search.length, end) === search;
    };
}
var anydiff = {
    fragment: function (data) {
        if (!data) {
            return null;
        }
        var ask = function (method) {
            return function (name) {
                return !!call_python('anydiff.fragment', data.handle, method, String(name));
            };
        };
        return {
            toString: function () { return data.text; },
            equals: function (other) { return data.text === String(other); },
            isInsert: function () { return data.isInsert; },
            isDelete: function () { return data.isDelete; },
            isPending: function () { return data.isPending; },
            isAttributeValue: ask('isAttributeValue'),
            isInsideTag: ask('isInsideTag'),
            isTagContent: ask('isTagContent'),
            isJsonValue: ask('isJsonValue')
        };
    },
    fragments: function (list) {
        var result = [];
        for (var i = 0; i < list.length; i++) {
            result.push(anydiff.fragment(list[i]));
        }
        return result;
    },
    view: function (data) {
        if (data.kind === 'fragment') {
            return anydiff.fragment(data);
        }
        return {
            getLeft: function () { return data.left; },
            getRight: function () { return data.right; },
            getState: function () { return data.state; },
            getPath: function () { return data.path; },
            getName: function () { return data.name; },
            getCount: function () { return data.count; },
            getPendingCount: function () { return data.pendingCount; },
            getLeftFragment: function () { return anydiff.fragment(data.leftFragment); },
            getRightFragment: function () { return anydiff.fragment(data.rightFragment); },
            getLeftFragments: function () { return anydiff.fragments(data.leftFragments); },
            getRightFragments: function () { return anydiff.fragments(data.rightFragments); },
            toString: function () { return data.text; }
        };
    }
};
"""


# =============================================================================
# Function Definitions
# =============================================================================


def split_camel_case(value: str) -> list[str]:
    """Split an identifier into lower-cased words: `skipLogLine` -> ["skip", "log", "line"]."""
    return [word.lower() for word in _CAMEL_CASE_WORDS.findall(value)]


@dataclass
class FunctionDefinition:
    """A top-level script function: its name tokens, single parameter and full source."""

    name: str
    parameter: str
    source: str
    tokens: set[str] = field(init=False)

    def __post_init__(self) -> None:
        self.tokens = set(split_camel_case(self.name))

    @property
    def is_accept(self) -> bool:
        return "accept" in self.tokens or {"skip", "log"} <= self.tokens

    @property
    def is_skip(self) -> bool:
        return "skip" in self.tokens and not self.is_accept

    @property
    def is_rule(self) -> bool:
        return self.is_accept or self.is_skip

    @property
    def granularity(self) -> str | EntryType:
        """`diff`, `fragment`, or the entry type selected by the parameter name."""
        if self.parameter.lower() == DIFF_PARAMETER:
            return DIFF_PARAMETER
        return EntryType.from_token(self.parameter)


def _skip_literal(source: str, start: int) -> int:
    """Return the index just past a string literal or comment starting at `start`."""
    char = source[start]
    if char in "'\"`":
        i = start + 1
        while i < len(source):
            if source[i] == "\\":
                i += 2
                continue
            if source[i] == char:
                return i + 1
            i += 1
        return len(source)
    if source.startswith("//", start):
        end = source.find("\n", start)
        return len(source) if end < 0 else end + 1
    if source.startswith("/*", start):
        end = source.find("*/", start + 2)
        return len(source) if end < 0 else end + 2
    return start + 1


def _is_literal_start(source: str, index: int) -> bool:
    return source[index] in "'\"`" or source.startswith("//", index) or source.startswith("/*", index)


def extract_functions(source: str) -> list[FunctionDefinition]:
    """Find top-level `function name(param) { ... }` declarations with exactly one parameter."""
    result = []
    depth = 0
    i = 0
    while i < len(source):
        if _is_literal_start(source, i):
            i = _skip_literal(source, i)
            continue
        char = source[i]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        elif depth == 0 and source.startswith("function", i):
            match = _FUNCTION_HEADER.match(source, i)
            if match is not None:
                end = _find_closing_brace(source, match.end() - 1)
                parameters = [p.strip() for p in match.group(2).split(",") if p.strip()]
                if len(parameters) == 1:
                    result.append(FunctionDefinition(match.group(1), parameters[0], source[i:end]))
                i = end
                continue
        i += 1
    return result


def _find_closing_brace(source: str, opening: int) -> int:
    depth = 0
    i = opening
    while i < len(source):
        if _is_literal_start(source, i):
            i = _skip_literal(source, i)
            continue
        if source[i] == "{":
            depth += 1
        elif source[i] == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return len(source)


# =============================================================================
# Evaluation
# =============================================================================


class FilterFactory:
    """Loads scripts into rules and evaluates them in one shared interpreter.

    Evaluations are serialized with a lock since the interpreter context is not
    reentrant.
    """

    def __init__(self):
        self.filters: list[ScriptedFilter] = []
        self._lock = threading.Lock()
        self._handles: dict[int, Fragment] = {}
        self._interpreter = dukpy.JSInterpreter()
        self._interpreter.export_function("anydiff.console", self._console)
        self._interpreter.export_function("anydiff.fragment", self._fragment)

    def __enter__(self) -> FilterFactory:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._interpreter = None

    def use_script(self, source: str) -> list[ScriptedFilter]:
        """Register the rules declared in a script. A script with a syntax error yields none."""
        try:
            self._check_syntax(source)
        except ScriptError as e:
            logger.error("Error while parsing script: %s", e)
            return []
        added = []
        for definition in extract_functions(source):
            if not definition.is_rule:
                continue
            logger.debug("Loaded rule %s(%s)", definition.name, definition.parameter)
            added.append(ScriptedFilter(self, definition))
        self.filters.extend(added)
        return added

    def use_file(self, path: str | Path) -> list[ScriptedFilter]:
        return self.use_script(Path(path).read_text(encoding="utf-8"))

    def _check_syntax(self, source: str) -> None:
        with self._lock:
            if self._interpreter is None:
                raise ScriptError("The script interpreter is closed")
            try:
                self._interpreter.evaljs("new Function(dukpy['source']); true", source=source)
            except dukpy.JSRuntimeError as e:
                raise ScriptError(str(e), {"source": source}) from e

    def evaluate(self, source: str, entry_type: str | EntryType, value: object) -> bool:
        """Run `(source)(view)` where `view` is a read-only snapshot of the value."""
        logger.debug("Evaluating %s rule on %s", entry_type, type(value).__name__)
        with self._lock:
            if self._interpreter is None:
                raise ScriptError("The script interpreter is closed")
            try:
                snapshot = self._snapshot(value)
                code = f"{PRELUDE}\n!!(({source})(anydiff.view(dukpy['value'])));"
                return bool(self._interpreter.evaljs(code, value=snapshot))
            except dukpy.JSRuntimeError as e:
                logger.error("Error while executing script: %s", e)
                return False
            finally:
                self._handles.clear()

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------

    @staticmethod
    def _console(message: str) -> None:
        logger.info("%s", message)

    def _fragment(self, handle: int, method: str, argument: str) -> bool:
        fragment = self._handles.get(handle)
        predicate = getattr(fragment, _FRAGMENT_METHODS.get(method, ""), None)
        if predicate is None:
            return False
        return bool(predicate(argument))

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def _fragment_snapshot(self, fragment: Fragment | None) -> dict | None:
        if fragment is None:
            return None
        handle = len(self._handles)
        self._handles[handle] = fragment
        return {
            "kind": "fragment",
            "handle": handle,
            "text": str(fragment),
            "isInsert": fragment.is_insert,
            "isDelete": fragment.is_delete,
            "isPending": fragment.is_pending,
        }

    def _snapshot(self, value: object) -> dict:
        if isinstance(value, Fragment):
            return self._fragment_snapshot(value)
        if isinstance(value, FragmentPair):
            left_fragments = [value.left_fragment]
            right_fragments = [value.right_fragment]
            name, path, text = "FragmentPair", value.line.path, f"{value.left} | {value.right}"
        elif isinstance(value, (Line, Block)):
            left_fragments = value.left_fragments
            right_fragments = value.right_fragments
            name, path, text = type(value).__name__, value.path, value.to_string(OutputType.LOG)
        elif isinstance(value, Diff):
            left_fragments = right_fragments = []
            name, path, text = "Diff", "", value.to_string(OutputType.LOG)
        else:
            raise ScriptError(f"Cannot expose {type(value).__name__} to a script")
        return {
            "kind": "entry",
            "left": value.left,
            "right": value.right,
            "state": value.state.name,
            "path": path,
            "name": name,
            "count": value.count,
            "pendingCount": value.pending_count,
            "text": text,
            "leftFragment": self._fragment_snapshot(left_fragments[0] if left_fragments else None),
            "rightFragment": self._fragment_snapshot(right_fragments[0] if right_fragments else None),
            "leftFragments": [self._fragment_snapshot(f) for f in left_fragments],
            "rightFragments": [self._fragment_snapshot(f) for f in right_fragments],
        }


class ScriptedFilter(Filter):
    """A rule backed by one script function."""

    def __init__(self, factory: FilterFactory, definition: FunctionDefinition):
        self.factory = factory
        self.definition = definition

    def __repr__(self) -> str:
        return f"ScriptedFilter({self.definition.name}({self.definition.parameter}))"

    def _applies(self, granularity: str | EntryType, accept: bool) -> bool:
        if self.definition.granularity != granularity:
            return False
        return self.definition.is_accept if accept else self.definition.is_skip

    def _run(self, granularity: str | EntryType, accept: bool, value: object) -> bool:
        if not self._applies(granularity, accept):
            return False
        return self.factory.evaluate(self.definition.source, granularity, value)

    def accept_diff(self, value) -> bool:
        return self._run(DIFF_PARAMETER, True, value)

    def skip_diff(self, value) -> bool:
        return self._run(DIFF_PARAMETER, False, value)

    def accept_block(self, value) -> bool:
        return self._run(EntryType.BLOCK, True, value)

    def skip_block(self, value) -> bool:
        return self._run(EntryType.BLOCK, False, value)

    def accept_line(self, value) -> bool:
        return self._run(EntryType.LINE, True, value)

    def skip_line(self, value) -> bool:
        return self._run(EntryType.LINE, False, value)

    def accept_fragments(self, value) -> bool:
        return self._run(EntryType.FRAGMENT_PAIR, True, value)

    def skip_fragments(self, value) -> bool:
        return self._run(EntryType.FRAGMENT_PAIR, False, value)

    def accept_fragment(self, value) -> bool:
        return self._run(EntryType.FRAGMENT, True, value)

    def skip_fragment(self, value) -> bool:
        return self._run(EntryType.FRAGMENT, False, value)
