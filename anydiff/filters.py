"""
Filter rules and their aggregation.

A rule is any object with some of the predicates of `Filter`. "accept" predicates
silence a difference and keep it in the report; "skip" predicates remove it. The
aggregators turn a list of rules into predicates usable by the comparison task
(`entry_filter`) and by the caller for whole comparisons (`diff_filter`).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from anydiff.entries import Diff, DiffState, EntryType
from anydiff.fragments import Fragment

logger = logging.getLogger(__name__)


class Filter:
    """Base class for rules. Every predicate answers False unless overridden."""

    def accept_diff(self, value) -> bool:
        return False

    def skip_diff(self, value) -> bool:
        return False

    def accept_block(self, value) -> bool:
        return False

    def skip_block(self, value) -> bool:
        return False

    def accept_line(self, value) -> bool:
        return False

    def skip_line(self, value) -> bool:
        return False

    def accept_fragments(self, value) -> bool:
        return False

    def skip_fragments(self, value) -> bool:
        return False

    def accept_fragment(self, value) -> bool:
        return False

    def skip_fragment(self, value) -> bool:
        return False


# Predicate names per granularity: (accept, skip)
_PREDICATES = {
    EntryType.BLOCK: ("accept_block", "skip_block"),
    EntryType.LINE: ("accept_line", "skip_line"),
    EntryType.FRAGMENT_PAIR: ("accept_fragments", "skip_fragments"),
}


def invoke_silently(rule: object, name: str, value: object) -> bool:
    """Call a rule predicate, treating a missing predicate or an exception as False."""
    predicate = getattr(rule, name, None)
    if predicate is None:
        return False
    try:
        return bool(predicate(value))
    except Exception as e:
        logger.debug("Rule %r failed in %s: %s", rule, name, e)
        return False


# =============================================================================
# Aggregation
# =============================================================================


def diff_filter(rules: Sequence[object] | None) -> Callable[[Diff], bool]:
    """Build a predicate that keeps a comparison unless it is unchanged or skipped."""
    return lambda diff: not _should_exclude_diff(diff, rules or [])


def entry_filter(rules: Sequence[object] | None) -> Callable[[object], bool]:
    """Build a predicate that keeps an entry unless it is unchanged or skipped."""
    return lambda entry: not should_exclude(entry, rules or [])


def _should_exclude_diff(diff: Diff, rules: Sequence[object]) -> bool:
    if diff.state == DiffState.UNCHANGED:
        return True
    for rule in rules:
        if invoke_silently(rule, "skip_diff", diff):
            return True
        if invoke_silently(rule, "accept_diff", diff):
            diff.accept()
            return False
    return False


def should_exclude(entry, rules: Sequence[object]) -> bool:
    if entry.state == DiffState.UNCHANGED:
        return True
    if not rules:
        return False
    predicates = _PREDICATES.get(entry.entry_type)
    if predicates is not None:
        accept_name, skip_name = predicates
        for rule in rules:
            if invoke_silently(rule, accept_name, entry):
                entry.accept()
                return False
            if invoke_silently(rule, skip_name, entry):
                return True
    return _should_exclude_by_children(entry, rules) or _should_exclude_by_fragments(entry, rules)


def _should_exclude_by_children(entry, rules: Sequence[object]) -> bool:
    children = list(entry.children)
    if not children:
        return False
    # Context lines are unchanged by nature; they stay in place
    removable = [
        child for child in children
        if child.state != DiffState.UNCHANGED and should_exclude(child, rules)
    ]
    for child in removable:
        entry.exclude(child)
    remaining = entry.children
    if not remaining:
        return bool(removable)
    return all(child.state == DiffState.UNCHANGED for child in remaining)


def _should_exclude_fragment(holder, fragment: Fragment, rules: Sequence[object]) -> bool:
    for rule in rules:
        if invoke_silently(rule, "skip_fragment", fragment):
            return True
        if invoke_silently(rule, "accept_fragment", fragment):
            holder.accept(fragment)
            break
    return False


def _should_exclude_by_fragments(entry, rules: Sequence[object]) -> bool:
    if not getattr(entry, "fragment_holder", False):
        return False
    fragments = entry.fragments
    removed = 0
    for fragment in fragments:
        if _should_exclude_fragment(entry, fragment, rules):
            entry.exclude(fragment)
            removed += 1
    return removed > 0 and removed == len(fragments)
