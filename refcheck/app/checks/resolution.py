"""
Reference resolution.

Translates a raw reference, as written in a document, into a concrete
target: either a local filesystem path or a remote URL.

Resolution is pure. It performs no I/O and is safe to call concurrently.

Resolution policy:
    Remote references (any scheme other than "file") are returned
    unchanged. Local references are resolved relative to the directory of
    the document that contains them, unless the path is absolute, in which
    case it is resolved under the configured document root. An absolute
    path with no document root configured is a resolution failure: the
    filesystem root is never used implicitly.

Design note: file URLs.
    RFC 8089 file URLs look like file://host/absolute/path or
    file:///absolute/path. Documents in the wild also use
    file://relative/path, which a standard URI parser reads as a host
    named "relative". To support that form the path is taken from the raw
    string after the literal "file://" prefix instead of from the parsed
    URI. A file-scheme reference that does not start with that literal
    prefix (file:relative, FILE://x) is rejected as malformed.

Error handling policy:
    Failures raise ResolutionError subclasses, each tagged with the
    FailureKind the checker reports. ValueError raised by urllib while
    parsing is translated to InvalidURLSyntaxError; nothing else is caught.
"""

from __future__ import annotations

import logging
import os
import posixpath
import re
from urllib.parse import SplitResult, unquote, urlsplit

from refcheck.app.schemas.check_result import FailureKind, Resolution

logger = logging.getLogger(__name__)

FILE_URL_PREFIX = "file://"

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ResolutionError(ValueError):
    """Base class for references that cannot be turned into a target."""

    kind: FailureKind

    def __init__(self, reference: str, message: str) -> None:
        super().__init__(message)
        self.reference = reference
        self.message = message


class InvalidURLSyntaxError(ResolutionError):
    kind = FailureKind.INVALID_URL_SYNTAX


class MalformedFileURLError(ResolutionError):
    kind = FailureKind.MALFORMED_FILE_URL_SCHEME


class MissingDocumentRootError(ResolutionError):
    kind = FailureKind.MISSING_DOCUMENT_ROOT


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse(reference: str) -> SplitResult:
    """
    Parse a reference as a URI, rejecting what a strict parser rejects.

    urlsplit accepts almost any string, so the strict rules are checked
    explicitly: control characters, a missing scheme before ":", a colon
    in the first segment of a relative path, and malformed percent
    escapes outside the query string.
    """
    if _CONTROL_CHARS_RE.search(reference):
        raise InvalidURLSyntaxError(
            reference, "invalid control character in URL"
        )

    if reference.startswith(":"):
        raise InvalidURLSyntaxError(reference, "missing protocol scheme")

    try:
        parsed = urlsplit(reference)
    except ValueError as exc:
        raise InvalidURLSyntaxError(reference, str(exc)) from exc

    if not parsed.scheme and not parsed.netloc:
        first_segment = parsed.path.split("/", 1)[0]
        if ":" in first_segment:
            raise InvalidURLSyntaxError(
                reference, "first path segment in URL cannot contain colon"
            )

    for component in (parsed.netloc, parsed.path, parsed.fragment):
        _check_escapes(reference, component)

    return parsed


def _check_escapes(reference: str, component: str) -> None:
    match = _BAD_ESCAPE_RE.search(component)
    if match is not None:
        raise InvalidURLSyntaxError(
            reference,
            f"invalid URL escape {component[match.start():match.start() + 3]!r}",
        )


def _decode(reference: str, raw: str) -> str:
    _check_escapes(reference, raw)
    return unquote(raw, errors="strict")


def _join(*elements: str) -> str:
    """
    Join path elements with "/" and clean the result.

    Unlike posixpath.join, an absolute element does not discard the
    elements before it: _join("root", "/a") == "root/a".
    """
    joined = "/".join(e for e in elements if e)
    if not joined:
        return ""

    cleaned = posixpath.normpath(joined)
    # normpath keeps a leading "//" as POSIX allows; collapse it.
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_reference(
    reference: str,
    source_file: str,
    document_root: str = "",
) -> Resolution:
    """
    Resolve a reference found in source_file into a concrete target.

    Raises ResolutionError when the reference cannot be resolved.
    """
    parsed = _parse(reference)

    if parsed.scheme and parsed.scheme != "file":
        return Resolution(target=reference, is_local=False)

    if parsed.scheme == "file":
        if not reference.startswith(FILE_URL_PREFIX):
            raise MalformedFileURLError(reference, "wrong file URL syntax")
        try:
            path = _decode(reference, reference[len(FILE_URL_PREFIX):])
        except UnicodeDecodeError as exc:
            raise InvalidURLSyntaxError(reference, str(exc)) from exc
    else:
        try:
            path = unquote(parsed.path, errors="strict")
        except UnicodeDecodeError as exc:
            raise InvalidURLSyntaxError(reference, str(exc)) from exc

    if not posixpath.isabs(path):
        target = _join(os.path.dirname(source_file) or ".", path)
        logger.debug("resolved %r relative to %r: %s", reference, source_file, target)
        return Resolution(target=target, is_local=True)

    if not document_root:
        raise MissingDocumentRootError(
            reference, "document root directory is not specified"
        )

    target = _join(document_root, path)
    logger.debug("resolved %r under document root: %s", reference, target)
    return Resolution(target=target, is_local=True)
