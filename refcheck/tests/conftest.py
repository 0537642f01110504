import pytest


@pytest.fixture
def anyio_backend():
    # The checker is built on asyncio primitives.
    return "asyncio"
