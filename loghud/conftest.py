"""全局 pytest 配置 -- 异步等待辅助"""

import asyncio
from collections.abc import Awaitable, Callable

import pytest


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    """轮询等待条件成立，超时抛出 TimeoutError"""

    async def _wait(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        async with asyncio.timeout(timeout):
            while not predicate():
                await asyncio.sleep(0.005)

    return _wait
