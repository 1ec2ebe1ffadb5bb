"""anydiff: side-by-side comparison of text, markup, manifest and binary content."""

from anydiff.api import AnyDiff, is_match
from anydiff.entries import Block, BlockKind, Diff, DiffState, EntryType, FragmentPair, Line
from anydiff.exceptions import AnyDiffError, ContentError, ScriptError, UnsupportedOperation
from anydiff.filters import Filter, diff_filter, entry_filter
from anydiff.fragments import Fragment, MarkupFragment
from anydiff.marked_string import MarkedString
from anydiff.markers import Marker, OutputType
from anydiff.parameters import ContentType, TaskParameters
from anydiff.scripting import FilterFactory, ScriptedFilter
from anydiff.task import DiffTask

__all__ = [
    # Facade
    "AnyDiff",
    "is_match",
    "DiffTask",
    # Entries
    "Diff",
    "Block",
    "BlockKind",
    "Line",
    "FragmentPair",
    "Fragment",
    "MarkupFragment",
    "DiffState",
    "EntryType",
    # Text model
    "MarkedString",
    "Marker",
    "OutputType",
    # Configuration
    "ContentType",
    "TaskParameters",
    # Filters
    "Filter",
    "FilterFactory",
    "ScriptedFilter",
    "diff_filter",
    "entry_filter",
    # Exceptions
    "AnyDiffError",
    "ContentError",
    "ScriptError",
    "UnsupportedOperation",
]
