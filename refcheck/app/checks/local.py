"""
Local reference checks.

A local target is valid when the filesystem can stat it. Directories are
valid targets. A path the OS rejects outright (an embedded NUL byte) is
broken, not an error. Local checks are cheap and are never rate-limited.
"""

from __future__ import annotations

import logging
import os

from refcheck.app.schemas.check_result import CheckOutcome, FailureKind

logger = logging.getLogger(__name__)


def check_local_target(target: str) -> CheckOutcome:
    try:
        os.stat(target)
    except (OSError, ValueError) as exc:
        # ValueError: the path holds a NUL byte, which no file can match.
        logger.debug("local target %s is not accessible: %s", target, exc)
        reason = getattr(exc, "strerror", None) or str(exc)
        return CheckOutcome.failed(
            FailureKind.BROKEN_LOCAL_LINK,
            f"{reason}: {target}",
        )

    return CheckOutcome.ok()
