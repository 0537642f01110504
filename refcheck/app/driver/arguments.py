"""
Command-line arguments.
"""

from __future__ import annotations

import argparse
import re
from typing import Optional, Sequence

from refcheck.app.config import DEFAULT_CONCURRENCY


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {raw!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def _non_negative_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {raw!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {value}")
    return value


def _regex(raw: str) -> "re.Pattern[str]":
    try:
        return re.compile(raw)
    except re.error as exc:
        raise argparse.ArgumentTypeError(f"invalid regular expression: {exc}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refcheck",
        description=(
            "Check links and local file references in markdown and HTML "
            "documents."
        ),
    )
    parser.add_argument(
        "filenames",
        nargs="+",
        help="Markup files to check, or directories with --recursive.",
    )
    parser.add_argument(
        "-c",
        "--concurrency",
        type=_positive_int,
        default=DEFAULT_CONCURRENCY,
        help=f"Maximum number of simultaneous HTTP requests (default: {DEFAULT_CONCURRENCY}).",
    )
    parser.add_argument(
        "-d",
        "--document-root",
        default="",
        help="Directory that absolute local paths are resolved against.",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Search directories for markup files recursively.",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=_non_negative_int,
        default=0,
        help="Timeout of each HTTP request in seconds, 0 for none.",
    )
    parser.add_argument(
        "-x",
        "--exclude",
        type=_regex,
        default=None,
        help="Regular expression of resolved targets to treat as valid.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Report valid and skipped references too.",
    )
    parser.add_argument(
        "-l",
        "--local-only",
        action="store_true",
        help="Skip remote references, check local ones only.",
    )
    return parser


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse argv. Invalid arguments exit with status 2, as argparse does.
    """
    return build_parser().parse_args(list(argv) if argv is not None else None)
