"""
Command-line comparison of two files.

Usage:
    anydiff old/page.html new/page.html
    anydiff old.xml new.xml --filter rules.js --output html > report.html
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from anydiff.api import AnyDiff, is_match
from anydiff.markers import OutputType
from anydiff.parameters import ContentType, TaskParameters
from anydiff.scripting import FilterFactory

# ANSI color codes for TTY output
IS_TTY = sys.stdout.isatty()
RED = "\033[91m" if IS_TTY else ""
GREEN = "\033[92m" if IS_TTY else ""
RESET = "\033[0m" if IS_TTY else ""
BOLD = "\033[1m" if IS_TTY else ""

CONTENT_TYPES = {
    "text": ContentType.TEXT,
    "html": ContentType.HTML,
    "xml": ContentType.XML,
    "manifest": ContentType.MANIFEST,
    "binary": ContentType.UNDEFINED,
}

OUTPUT_TYPES = {
    "console": OutputType.CONSOLE,
    "log": OutputType.LOG,
    "html": OutputType.HTML,
}


def log(msg: str = "") -> None:
    """Print a message and flush stdout immediately."""
    print(msg, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anydiff",
        description="Compare two files and report their differences side by side",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("left", type=Path, help="Left (old) file")
    parser.add_argument("right", type=Path, help="Right (new) file")
    parser.add_argument(
        "--type",
        choices=sorted(CONTENT_TYPES),
        default=None,
        help="Content type (default: detected from the file extension)",
    )
    parser.add_argument(
        "--ignore-spaces",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Compare with collapsed whitespace",
    )
    parser.add_argument(
        "--no-normalize",
        dest="normalize",
        action="store_false",
        default=None,
        help="Do not pretty-print markup or reorder manifests before comparing",
    )
    parser.add_argument(
        "--no-arrange",
        dest="arrange_attributes",
        action="store_false",
        default=None,
        help="Keep markup attributes in document order",
    )
    parser.add_argument("--width", type=int, default=None, help="Width of the report (default: 60)")
    parser.add_argument(
        "--filter",
        dest="filters",
        type=Path,
        nargs="+",
        default=[],
        metavar="SCRIPT",
        help="JavaScript files with accept/skip rules",
    )
    parser.add_argument(
        "--output",
        choices=sorted(OUTPUT_TYPES),
        default="console",
        help="Report format (default: console)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Compare two files. Returns 0 when they match and 1 otherwise."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    parameters = TaskParameters(
        arrange_attributes=args.arrange_attributes,
        column_width=args.width,
        ignore_spaces=args.ignore_spaces,
        normalize=args.normalize,
    )
    target = OUTPUT_TYPES[args.output]

    with FilterFactory() as factory:
        for script in args.filters:
            try:
                factory.use_file(script)
            except OSError as e:
                print(f"Error: cannot read {script}: {e}", file=sys.stderr)
                return 2
        diffs = AnyDiff(
            args.left,
            args.right,
            content_type=CONTENT_TYPES[args.type] if args.type else None,
            parameters=parameters,
            left_label=args.left.name,
            right_label=args.right.name,
            filters=factory.filters,
        ).compare()

    for diff in diffs:
        log(diff.to_string(target))

    matched = is_match(diffs)
    if target != OutputType.HTML:
        if matched:
            log(f"{GREEN}{BOLD}No pending differences{RESET}")
        else:
            pending = sum(diff.pending_count for diff in diffs)
            log(f"{RED}{BOLD}{pending} pending difference(s){RESET}")
    return 0 if matched else 1


if __name__ == "__main__":
    sys.exit(main())
