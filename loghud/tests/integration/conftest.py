"""集成测试共享 fixture -- 本地 WebSocket 日志服务端"""

import json
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from websockets.asyncio.server import ServerConnection, serve

# 2024-01-01 00:00:00 UTC
BASE_NS = 1_704_067_200_000_000_000


class LogServer:
    """按连接路径记录订阅者，支持广播与主动断开"""

    def __init__(self) -> None:
        self.port = 0
        self.connections: set[ServerConnection] = set()
        self.accepted_paths: list[str] = []

    @property
    def base_url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    async def handler(self, connection: ServerConnection) -> None:
        self.accepted_paths.append(connection.request.path)
        self.connections.add(connection)
        try:
            await connection.wait_closed()
        finally:
            self.connections.discard(connection)

    async def broadcast(self, message: str | bytes, path: str | None = None) -> None:
        for connection in list(self.connections):
            if path is None or connection.request.path == path:
                await connection.send(message)

    async def drop_all(self) -> None:
        """服务端主动关闭全部连接"""
        for connection in list(self.connections):
            await connection.close()


@pytest_asyncio.fixture
async def log_server() -> AsyncGenerator[LogServer, None]:
    server = LogServer()
    async with serve(server.handler, "127.0.0.1", 0) as ws_server:
        server.port = ws_server.sockets[0].getsockname()[1]
        yield server


@pytest.fixture
def frame():
    """构造带 _meta 的帧"""

    def _frame(event_id: str, offset_s: int, channel: str = "/events/app1", **fields) -> str:
        meta = {
            "id": event_id,
            "ts": "2024-01-01T00:00:00Z",
            "unixNs": BASE_NS + offset_s * 1_000_000_000,
            "originNodeId": "node-1",
            "channel": channel,
            "keyVersion": 1,
            "hmac": "00",
        }
        return json.dumps({**fields, "_meta": meta}, ensure_ascii=False)

    return _frame
