from __future__ import annotations

from typing import Protocol

from refcheck.app.schemas.check_result import CheckResult


class ResultSink(Protocol):
    """
    Destination of a batch check.

    Implementations must:
    - accept results from many concurrent producers
    - never block a producer indefinitely
    - treat close() as the end-of-results signal
    """

    async def emit(self, result: CheckResult) -> None:
        ...

    async def close(self) -> None:
        ...
