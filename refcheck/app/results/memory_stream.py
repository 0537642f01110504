from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List

from refcheck.app.schemas.check_result import CheckResult
from refcheck.app.results.sink import ResultSink

logger = logging.getLogger(__name__)


class MemoryQueueResultStream(ResultSink):
    """
    In-memory result stream for one batch.

    Properties:
    - multi-producer, single-consumer
    - unbounded, so producers never wait for the consumer
    - arrival order only, no ordering between references
    - terminates cleanly once close() is called
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[CheckResult | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def emit(self, result: CheckResult) -> None:
        if self._closed:
            logger.warning(
                "dropping result for %r emitted after close", result.reference
            )
            return

        self._queue.put_nowait(result)

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    async def stream(self) -> AsyncIterator[CheckResult]:
        """
        Async generator yielding results until the stream is closed.
        """
        while True:
            result = await self._queue.get()
            if result is None:
                break
            yield result

    async def drain(self) -> List[CheckResult]:
        return [result async for result in self.stream()]
