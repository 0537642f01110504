"""
Reference extraction from markdown and HTML text.

Recognized forms:
    [text](target "title")      inline links and images
    [label]: target             reference-style definitions
    <https://example.com>       autolinks
    href="..." / src="..."      HTML attributes, in .html files and
                                inline HTML inside markdown

Fenced code blocks and inline code spans are ignored. In-page anchors
(#section) and non-fetchable schemes (mailto:, tel:, ...) are not
references.
"""

from __future__ import annotations

import html
import re
from typing import Iterable, Iterator, List

INLINE_LINK_RE = re.compile(
    r"!?\[[^\]]*\]\(\s*(<[^>]*>|[^)\s]+)(?:\s+(?:\"[^\"]*\"|'[^']*'|\([^)]*\)))?\s*\)"
)
REF_DEF_RE = re.compile(r"^\s{0,3}\[[^\]]+\]:\s*(<[^>]*>|\S+)")
AUTOLINK_RE = re.compile(r"<((?:https?|ftp|file)://[^>\s]+)>", re.IGNORECASE)
HTML_ATTR_RE = re.compile(
    r"""\b(?:href|src)\s*=\s*(?:"([^"]*)"|'([^']*)')""",
    re.IGNORECASE,
)
INLINE_CODE_RE = re.compile(r"`+[^`]*`+")
SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*):")

IGNORED_SCHEMES = {"mailto", "tel", "javascript", "data"}


def iter_non_code_lines(text: str) -> Iterator[str]:
    in_fence = False
    fence = None
    for line in text.splitlines():
        stripped = line.lstrip()
        if stripped.startswith("```") or stripped.startswith("~~~"):
            marker = stripped[:3]
            if not in_fence:
                in_fence = True
                fence = marker
            elif marker == fence:
                in_fence = False
                fence = None
            continue
        if in_fence:
            continue
        yield INLINE_CODE_RE.sub("", line)


def is_checkable(reference: str) -> bool:
    if not reference or reference.startswith("#"):
        return False
    match = SCHEME_RE.match(reference)
    if match and match.group(1).lower() in IGNORED_SCHEMES:
        return False
    return True


def _clean(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("<") and raw.endswith(">"):
        raw = raw[1:-1].strip()
    return raw


def _candidates(line: str) -> Iterable[str]:
    for match in INLINE_LINK_RE.finditer(line):
        yield _clean(match.group(1))

    ref_match = REF_DEF_RE.match(line)
    if ref_match:
        yield _clean(ref_match.group(1))

    for match in AUTOLINK_RE.finditer(line):
        yield match.group(1)

    for match in HTML_ATTR_RE.finditer(line):
        value = match.group(1) if match.group(1) is not None else match.group(2)
        yield html.unescape(value.strip())


def extract_references(text: str) -> List[str]:
    """
    Return the checkable references of a document in first-seen order,
    without duplicates.
    """
    references: List[str] = []
    seen = set()

    for line in iter_non_code_lines(text):
        for reference in _candidates(line):
            if reference in seen or not is_checkable(reference):
                continue
            seen.add(reference)
            references.append(reference)

    return references
