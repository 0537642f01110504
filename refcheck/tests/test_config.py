import re

import pytest
from pydantic import ValidationError

from refcheck.app.config import CheckerConfig, DEFAULT_CONCURRENCY
from refcheck.app.coordinator.checker import ReferenceChecker
from refcheck.app.driver.arguments import parse_arguments


def test_defaults():
    config = CheckerConfig()

    assert config.document_root == ""
    assert config.excluded_pattern is None
    assert config.local_only is False
    assert config.timeout == 0
    assert config.request_timeout is None
    assert config.concurrency == DEFAULT_CONCURRENCY


def test_pattern_is_compiled_from_string():
    config = CheckerConfig(excluded_pattern=r"^https://internal\.")

    assert isinstance(config.excluded_pattern, re.Pattern)
    assert config.is_excluded("https://internal.example.com")
    assert not config.is_excluded("https://example.com")


def test_pattern_search_is_unanchored():
    config = CheckerConfig(excluded_pattern="localhost")

    assert config.is_excluded("http://localhost:8080/health")


@pytest.mark.parametrize(
    "overrides",
    [{"timeout": -1}, {"concurrency": 0}, {"excluded_pattern": "("}],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        CheckerConfig(**overrides)


def test_config_is_frozen():
    config = CheckerConfig()

    with pytest.raises(ValidationError):
        config.local_only = True


def test_document_root_accepts_paths(tmp_path):
    config = CheckerConfig(document_root=tmp_path)

    assert config.document_root == str(tmp_path)


def test_from_env(monkeypatch):
    monkeypatch.setenv("REFCHECK_DOCUMENT_ROOT", "site")
    monkeypatch.setenv("REFCHECK_EXCLUDE", "^https://localhost")
    monkeypatch.setenv("REFCHECK_LOCAL_ONLY", "yes")
    monkeypatch.setenv("REFCHECK_TIMEOUT", "2.5")
    monkeypatch.setenv("REFCHECK_CONCURRENCY", "8")

    config = CheckerConfig.from_env()

    assert config.document_root == "site"
    assert config.is_excluded("https://localhost:1")
    assert config.local_only is True
    assert config.request_timeout == 2.5
    assert config.concurrency == 8


def test_from_arguments():
    args = parse_arguments(
        ["-c", "4", "-d", "root", "-t", "9", "-x", "^x$", "-l", "file.md"]
    )

    config = CheckerConfig.from_arguments(args)

    assert config.concurrency == 4
    assert config.document_root == "root"
    assert config.timeout == 9
    assert config.excluded_pattern.pattern == "^x$"
    assert config.local_only is True


def test_checker_limiter_uses_configured_capacity():
    checker = ReferenceChecker(CheckerConfig(concurrency=7))

    assert checker.limiter.capacity == 7
