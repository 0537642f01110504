"""
Runtime configuration for the reference checker.

This module centralizes the settings that shape how references are
resolved and checked: the per-request deadline, the document root used
for absolute local paths, the exclusion pattern, local-only mode and the
capacity of the remote-check limiter.

Configuration is constructed once per run and is read-only afterwards.
It is shared by every concurrent check task without synchronization.
"""

from __future__ import annotations

import os
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Default capacity of the remote-check limiter.
DEFAULT_CONCURRENCY = 256


class CheckerConfig(BaseModel):
    """
    Immutable configuration of one checking run.
    """

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    document_root: str = Field(
        "",
        description=(
            "Base directory for absolute local references. "
            "Empty means no document root is configured and absolute "
            "local references fail to resolve."
        ),
    )

    # ------------------------------------------------------------------
    # Checking policy
    # ------------------------------------------------------------------

    excluded_pattern: Optional[re.Pattern[str]] = Field(
        None,
        description=(
            "Regular expression searched in the resolved target. "
            "Matching references are reported as valid without any I/O."
        ),
    )

    local_only: bool = Field(
        False,
        description="Never fetch remote references, report them as skipped",
    )

    # ------------------------------------------------------------------
    # Resource limits
    # ------------------------------------------------------------------

    timeout: float = Field(
        0.0,
        description="Per-request deadline in seconds, 0 disables the deadline",
    )

    concurrency: int = Field(
        DEFAULT_CONCURRENCY,
        description="Maximum number of simultaneous remote checks",
    )

    # ------------------------------------------------------------------
    # Validators (Pydantic v2)
    # ------------------------------------------------------------------

    @field_validator("timeout")
    @classmethod
    def timeout_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"timeout must not be negative, got {v}")
        return v

    @field_validator("concurrency")
    @classmethod
    def concurrency_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"concurrency must be at least 1, got {v}")
        return v

    @field_validator("document_root", mode="before")
    @classmethod
    def document_root_as_string(cls, v: object) -> str:
        if v is None:
            return ""
        return os.fspath(v)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def request_timeout(self) -> Optional[float]:
        """Timeout in the form httpx expects: None when unbounded."""
        return self.timeout or None

    def is_excluded(self, target: str) -> bool:
        return (
            self.excluded_pattern is not None
            and self.excluded_pattern.search(target) is not None
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "CheckerConfig":
        """
        Load configuration from environment variables.

        All values are parsed once at startup and must remain immutable.
        """

        def env_bool(name: str, default: bool) -> bool:
            raw = os.getenv(name)
            if raw is None:
                return default
            return raw.lower() in {"1", "true", "yes", "on"}

        exclude = os.getenv("REFCHECK_EXCLUDE")

        return cls(
            document_root=os.getenv("REFCHECK_DOCUMENT_ROOT", ""),
            excluded_pattern=re.compile(exclude) if exclude else None,
            local_only=env_bool("REFCHECK_LOCAL_ONLY", False),
            timeout=float(os.getenv("REFCHECK_TIMEOUT", "0")),
            concurrency=int(
                os.getenv("REFCHECK_CONCURRENCY", str(DEFAULT_CONCURRENCY))
            ),
        )

    @classmethod
    def from_arguments(cls, args: object) -> "CheckerConfig":
        """
        Build configuration from parsed command-line arguments.
        """
        return cls(
            document_root=getattr(args, "document_root", "") or "",
            excluded_pattern=getattr(args, "exclude", None),
            local_only=getattr(args, "local_only", False),
            timeout=getattr(args, "timeout", 0),
            concurrency=getattr(args, "concurrency", DEFAULT_CONCURRENCY),
        )

    model_config = {
        "frozen": True,
    }
