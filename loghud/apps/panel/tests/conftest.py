"""apps/panel 测试配置 -- 环境变量清理与脚本化连接器"""

import asyncio
import json

import pytest

PANEL_ENV_VARS = [
    "LOGHUD_ENDPOINTS",
    "LOGHUD_CHANNELS",
    "LOGHUD_TEMPLATE",
    "LOGHUD_FILTER",
    "LOGHUD_MAX_MESSAGES",
    "LOGHUD_SEEN_CAPACITY",
    "LOGHUD_RECONNECT_DELAY_S",
]

# 2024-01-01 00:00:00 UTC
BASE_NS = 1_704_067_200_000_000_000


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """每个用例从干净的面板环境变量开始"""
    for key in PANEL_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


class ScriptedSocket:
    """先产出预设帧，之后保持打开直到 close()"""

    def __init__(self, frames: list[str]) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        for frame in frames:
            self._queue.put_nowait(frame)
        self.closed = False

    def push(self, frame: str) -> None:
        self._queue.put_nowait(frame)

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        item = await self._queue.get()
        if item is None:
            raise StopAsyncIteration
        return item

    async def close(self) -> None:
        self.closed = True
        self._queue.put_nowait(None)


class ScriptedConnector:
    """每个 URL 对应一个 ScriptedSocket"""

    def __init__(self, frames_by_url: dict[str, list[str]] | None = None) -> None:
        self.frames_by_url = frames_by_url or {}
        self.sockets: dict[str, ScriptedSocket] = {}

    async def __call__(self, url: str) -> ScriptedSocket:
        socket = ScriptedSocket(self.frames_by_url.get(url, []))
        self.sockets[url] = socket
        return socket


@pytest.fixture
def make_connector() -> type[ScriptedConnector]:
    return ScriptedConnector


@pytest.fixture
def frame():
    """构造带 _meta 的帧"""

    def _frame(event_id: str, offset_s: int, channel: str = "/events/app1", **fields) -> str:
        meta = {
            "id": event_id,
            "unixNs": BASE_NS + offset_s * 1_000_000_000,
            "channel": channel,
        }
        return json.dumps({**fields, "_meta": meta}, ensure_ascii=False)

    return _frame
