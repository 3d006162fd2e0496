"""packages/core 测试配置 -- 核心层 fixture"""

import json
from collections.abc import Callable
from datetime import UTC

import pytest
from loghud.core.store import LogStore

# 2024-01-01 00:00:00 UTC
BASE_NS = 1_704_067_200_000_000_000


class FakeClock:
    """可手动推进的纳秒时钟"""

    def __init__(self, start_ns: int = BASE_NS) -> None:
        self.now_ns = start_ns

    def __call__(self) -> int:
        return self.now_ns

    def advance(self, seconds: float) -> None:
        self.now_ns += int(seconds * 1_000_000_000)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> LogStore:
    """UTC 时区、固定时钟的 LogStore"""
    return LogStore(tz=UTC, clock=clock)


@pytest.fixture
def make_payload() -> Callable[..., str]:
    """构造带 _meta 信封的原始 payload"""

    def _make(
        event_id: str | None,
        unix_ns: int | None = None,
        channel: str | None = None,
        **fields,
    ) -> str:
        meta: dict = {}
        if event_id is not None:
            meta["id"] = event_id
        if unix_ns is not None:
            meta["unixNs"] = unix_ns
        if channel is not None:
            meta["channel"] = channel
        return json.dumps({**fields, "_meta": meta}, ensure_ascii=False)

    return _make
