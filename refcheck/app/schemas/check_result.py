"""
Standardized check result schema.

Defines the canonical structure used to report the outcome of checking a
single reference. Every reference submitted for checking produces exactly
one CheckResult.

An outcome is a three-way variant:
- OK       the reference resolved and its target is reachable
- SKIPPED  the reference was deliberately not checked (local-only mode)
- FAILED   the reference is broken; kind and detail say why

SKIPPED is policy, not a fault, and MUST NOT be conflated with OK or FAILED.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class OutcomeStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureKind(str, Enum):
    """
    Classification of a broken reference.

    Resolution failures come first, then check failures.
    """

    INVALID_URL_SYNTAX = "invalid_url_syntax"
    MALFORMED_FILE_URL_SCHEME = "malformed_file_url_scheme"
    MISSING_DOCUMENT_ROOT = "missing_document_root"

    BROKEN_LOCAL_LINK = "broken_local_link"
    REMOTE_FETCH_ERROR = "remote_fetch_error"
    HTTP_STATUS_ERROR = "http_status_error"


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class Resolution(BaseModel):
    """
    Concrete target of a reference.

    Local targets are filesystem paths; remote targets are the reference
    string itself, unchanged.
    """

    target: str
    is_local: bool

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------


class CheckOutcome(BaseModel):
    """
    Outcome of checking one reference.

    Use the ok(), skipped() and failed() constructors rather than building
    instances by hand.
    """

    status: OutcomeStatus

    kind: Optional[FailureKind] = Field(
        None,
        description="Failure classification, set only for FAILED outcomes",
    )

    detail: Optional[str] = Field(
        None,
        description="Human-readable explanation of the failure or skip",
    )

    status_code: Optional[int] = Field(
        None,
        description="HTTP status code, set only for HTTP status failures",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @model_validator(mode="after")
    def kind_matches_status(self) -> "CheckOutcome":
        if self.status == OutcomeStatus.FAILED and self.kind is None:
            raise ValueError("FAILED outcomes require a failure kind")
        if self.status != OutcomeStatus.FAILED and self.kind is not None:
            raise ValueError(
                f"{self.status.value} outcomes must not carry a failure kind"
            )
        if (
            self.status_code is not None
            and self.kind != FailureKind.HTTP_STATUS_ERROR
        ):
            raise ValueError(
                "status_code is only valid for HTTP status failures"
            )
        return self

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def ok(cls) -> "CheckOutcome":
        return cls(status=OutcomeStatus.OK)

    @classmethod
    def skipped(cls, detail: str = "skipped as instructed") -> "CheckOutcome":
        return cls(status=OutcomeStatus.SKIPPED, detail=detail)

    @classmethod
    def failed(
        cls,
        kind: FailureKind,
        detail: str,
        status_code: Optional[int] = None,
    ) -> "CheckOutcome":
        return cls(
            status=OutcomeStatus.FAILED,
            kind=kind,
            detail=detail,
            status_code=status_code,
        )

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    @property
    def is_ok(self) -> bool:
        return self.status == OutcomeStatus.OK

    @property
    def is_skipped(self) -> bool:
        return self.status == OutcomeStatus.SKIPPED

    @property
    def is_failed(self) -> bool:
        return self.status == OutcomeStatus.FAILED

    def describe(self) -> str:
        if self.is_failed:
            return self.detail or self.kind.value
        if self.is_skipped:
            return self.detail or "skipped"
        return "ok"


class CheckResult(BaseModel):
    """
    One entry of a batch result stream.
    """

    reference: str = Field(
        ...,
        description="The raw reference exactly as submitted",
    )

    outcome: CheckOutcome

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
