"""
Tests for reference resolution.

Coverage matrix:

  Remote        any non-file scheme                  -> unchanged, not local
  Relative      bare path, file://relative           -> joined to source dir
  Absolute      /path, file:///path                  -> joined to document root
  No root       absolute path, empty document root   -> MissingDocumentRoot
  file scheme   without literal "file://" prefix     -> MalformedFileURLScheme
  Syntax        control chars, "://", bad escapes    -> InvalidURLSyntax
"""

import pytest

from refcheck.app.checks.resolution import (
    InvalidURLSyntaxError,
    MalformedFileURLError,
    MissingDocumentRootError,
    ResolutionError,
    resolve_reference,
)
from refcheck.app.schemas.check_result import FailureKind, Resolution


# ---------------------------------------------------------------------------
# Remote references
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "reference",
    [
        "https://google.com",
        "http://example.com/a%20b?q=1#top",
        "ftp://files.example.com/pub",
    ],
)
def test_remote_reference_is_returned_unchanged(reference):
    resolution = resolve_reference(reference, "docs/foo.md", "root")

    assert resolution == Resolution(target=reference, is_local=False)


def test_remote_reference_never_uses_document_root():
    resolution = resolve_reference("https://google.com/path", "foo.md", "/srv")

    assert "/srv" not in resolution.target


# ---------------------------------------------------------------------------
# Relative local references
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "reference, source, target",
    [
        ("foo", "foo.md", "foo"),
        ("guide.md", "docs/index.md", "docs/guide.md"),
        ("../README.md", "docs/index.md", "README.md"),
        ("./img/logo.png", "docs/index.md", "docs/img/logo.png"),
        ("README.md#install", "README.md", "README.md"),
        ("guide.md?plain=1", "docs/index.md", "docs/guide.md"),
        ("my%20notes.md", "index.md", "my notes.md"),
        ("file://README.md", "README.md", "README.md"),
        ("file://sub/page.md", "docs/index.md", "docs/sub/page.md"),
        ("file://my%20notes.md", "docs/index.md", "docs/my notes.md"),
    ],
)
def test_relative_reference_is_joined_to_source_directory(reference, source, target):
    resolution = resolve_reference(reference, source)

    assert resolution.target == target
    assert resolution.is_local is True


# ---------------------------------------------------------------------------
# Absolute local references
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("reference", ["/foo", "file:///etc/hosts"])
def test_absolute_reference_without_document_root_fails(reference):
    with pytest.raises(MissingDocumentRootError) as exc_info:
        resolve_reference(reference, "foo.md")

    assert exc_info.value.kind == FailureKind.MISSING_DOCUMENT_ROOT


@pytest.mark.parametrize(
    "reference, root, target",
    [
        ("/foo", "foo", "foo/foo"),
        ("/docs/guide.md", "/srv/www", "/srv/www/docs/guide.md"),
        ("file:///etc/hosts", "/srv/www", "/srv/www/etc/hosts"),
        ("/a/../b.md", "site", "site/b.md"),
    ],
)
def test_absolute_reference_is_joined_to_document_root(reference, root, target):
    resolution = resolve_reference(reference, "docs/index.md", root)

    assert resolution == Resolution(target=target, is_local=True)


def test_relative_reference_ignores_document_root():
    resolution = resolve_reference("foo", "foo.md", "root")

    assert resolution.target == "foo"


# ---------------------------------------------------------------------------
# Malformed file URLs
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "reference",
    ["file:README.md", "file:/README.md", "FILE://README.md"],
)
def test_file_scheme_without_literal_prefix_is_malformed(reference):
    with pytest.raises(MalformedFileURLError) as exc_info:
        resolve_reference(reference, "README.md")

    assert exc_info.value.kind == FailureKind.MALFORMED_FILE_URL_SCHEME


# ---------------------------------------------------------------------------
# Syntax errors
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "reference",
    [
        "://",
        "http://[::1",
        "foo\x7fbar",
        "line\nbreak",
        "bad%zzescape.md",
        "file://bad%2",
    ],
)
def test_invalid_syntax(reference):
    with pytest.raises(InvalidURLSyntaxError) as exc_info:
        resolve_reference(reference, "README.md")

    assert exc_info.value.kind == FailureKind.INVALID_URL_SYNTAX
    assert exc_info.value.reference == reference


def test_resolution_errors_are_value_errors():
    with pytest.raises(ValueError):
        resolve_reference("://", "README.md")

    assert issubclass(MissingDocumentRootError, ResolutionError)
