"""packages/stream 测试配置 -- 假连接器与记录型 sink"""

import asyncio

import pytest
from loghud.stream import ReconnectPolicy

_END = object()


class FakeSocket:
    """可脚本化的 socket：按顺序产出帧，异常项在迭代时抛出"""

    def __init__(self, frames: list | None = None) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self.closed = False
        for frame in frames or []:
            self._queue.put_nowait(frame)

    def push(self, frame) -> None:
        self._queue.put_nowait(frame)

    def finish(self) -> None:
        """模拟对端正常关闭"""
        self._queue.put_nowait(_END)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._queue.get()
        if item is _END:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True
        self._queue.put_nowait(_END)


class FakeConnector:
    """按 outcomes 顺序返回 socket 或抛出异常，用完后返回空闲 socket"""

    def __init__(self, outcomes: list | None = None) -> None:
        self.outcomes = list(outcomes or [])
        self.calls: list[str] = []
        self.sockets: list[FakeSocket] = []

    async def __call__(self, url: str) -> FakeSocket:
        self.calls.append(url)
        outcome = self.outcomes.pop(0) if self.outcomes else FakeSocket()
        if isinstance(outcome, BaseException):
            raise outcome
        self.sockets.append(outcome)
        return outcome


class RecordingSink:
    """记录收到的原始帧"""

    def __init__(self, fail_on: str | None = None) -> None:
        self.received: list[str] = []
        self._fail_on = fail_on

    def add(self, raw: str) -> None:
        if raw == self._fail_on:
            raise RuntimeError("sink rejected frame")
        self.received.append(raw)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fast_policy() -> ReconnectPolicy:
    """10ms 固定重连间隔"""
    return ReconnectPolicy(initial_delay_s=0.01)


@pytest.fixture
def slow_policy() -> ReconnectPolicy:
    """测试期间不会触发的重连间隔"""
    return ReconnectPolicy(initial_delay_s=60.0)


@pytest.fixture
def make_socket() -> type[FakeSocket]:
    return FakeSocket


@pytest.fixture
def make_connector() -> type[FakeConnector]:
    return FakeConnector


@pytest.fixture
def make_sink() -> type[RecordingSink]:
    return RecordingSink
