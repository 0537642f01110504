"""
Markup file discovery.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

MARKUP_SUFFIXES = {".md", ".markdown", ".html", ".htm"}


class DiscoveryError(Exception):
    pass


def is_markup_file(path: Path) -> bool:
    return path.suffix.lower() in MARKUP_SUFFIXES


def _walk(root: Path) -> Iterable[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        # Hidden directories (.git, .venv, ...) never hold documentation.
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if is_markup_file(path):
                yield path


def find_markup_files(paths: Iterable[str], recursive: bool) -> List[Path]:
    """
    Expand command-line paths into the list of files to check.

    Files named explicitly are kept whatever their suffix. Directories
    are expanded only in recursive mode. Duplicates are dropped, first
    occurrence wins.
    """
    found: List[Path] = []
    seen = set()

    for raw in paths:
        path = Path(raw)

        if path.is_dir():
            if not recursive:
                raise DiscoveryError(
                    f"{raw} is a directory, use --recursive to search it"
                )
            candidates = list(_walk(path))
        elif path.exists():
            candidates = [path]
        else:
            raise DiscoveryError(f"{raw} does not exist")

        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                found.append(candidate)

    return found
