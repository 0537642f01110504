import asyncio

import pytest

from refcheck.app.results import MemoryQueueResultStream
from refcheck.app.schemas.check_result import CheckOutcome, CheckResult

pytestmark = pytest.mark.anyio


def _result(reference: str) -> CheckResult:
    return CheckResult(reference=reference, outcome=CheckOutcome.ok())


async def test_stream_yields_emitted_results_until_closed():
    stream = MemoryQueueResultStream()

    await stream.emit(_result("a"))
    await stream.emit(_result("b"))
    await stream.close()

    assert [r.reference for r in await stream.drain()] == ["a", "b"]


async def test_results_after_close_are_dropped():
    stream = MemoryQueueResultStream()
    await stream.close()
    await stream.emit(_result("late"))

    assert await stream.drain() == []
    assert stream.closed is True


async def test_close_is_idempotent():
    stream = MemoryQueueResultStream()
    await stream.emit(_result("a"))
    await stream.close()
    await stream.close()

    assert len(await stream.drain()) == 1


async def test_consumer_may_start_before_producers():
    stream = MemoryQueueResultStream()
    consumer = asyncio.create_task(stream.drain())

    for name in ("x", "y", "z"):
        await stream.emit(_result(name))
        await asyncio.sleep(0)
    await stream.close()

    results = await asyncio.wait_for(consumer, timeout=1)
    assert {r.reference for r in results} == {"x", "y", "z"}


async def test_producers_do_not_block_without_consumer():
    stream = MemoryQueueResultStream()

    await asyncio.wait_for(
        asyncio.gather(*(stream.emit(_result(str(i))) for i in range(5000))),
        timeout=5,
    )
    await stream.close()

    assert len(await stream.drain()) == 5000
