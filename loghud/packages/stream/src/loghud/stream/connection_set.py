"""ConnectionSet -- 端点 x 频道的连接集合

所有连接共享同一个 sink。重新配置时先关闭并丢弃全部旧连接，
再按启用的端点和频道重建。
"""

import asyncio
from collections.abc import Iterable

import structlog
from loghud.core.exceptions import EndpointURLError
from loghud.core.models import ChannelEntry, ConnectionState, Endpoint
from loghud.core.store import LogSink

from .backoff import ReconnectPolicy
from .connection import ChannelConnection, Connector
from .url import build_stream_url

log = structlog.get_logger()

# (端点 base_url, 频道 path)
ConnectionKey = tuple[str, str]


class ConnectionSet:
    """管理一组 ChannelConnection"""

    def __init__(
        self,
        endpoints: Iterable[Endpoint],
        sink: LogSink,
        *,
        policy: ReconnectPolicy | None = None,
        connector: Connector | None = None,
    ) -> None:
        self._endpoints = list(endpoints)
        self._sink = sink
        self._policy = policy
        self._connector = connector
        self._connections: dict[ConnectionKey, ChannelConnection] = {}

    @property
    def endpoints(self) -> list[Endpoint]:
        return list(self._endpoints)

    @property
    def connections(self) -> dict[ConnectionKey, ChannelConnection]:
        return dict(self._connections)

    async def configure(
        self,
        channels: Iterable[ChannelEntry],
        endpoints: Iterable[Endpoint] | None = None,
    ) -> None:
        """按频道列表重建全部连接

        Args:
            channels: 频道列表，禁用项跳过
            endpoints: 新的端点列表，None 表示沿用当前端点
        """
        await self.close()
        if endpoints is not None:
            self._endpoints = list(endpoints)

        channel_list = list(channels)
        for endpoint in self._endpoints:
            if not endpoint.enabled:
                log.debug("endpoint_disabled_skipped", base_url=endpoint.base_url)
                continue
            for channel in channel_list:
                if not channel.enabled:
                    continue
                key = (endpoint.base_url, channel.path)
                if key in self._connections:
                    log.warning(
                        "channel_duplicate_skipped",
                        base_url=endpoint.base_url,
                        path=channel.path,
                    )
                    continue
                try:
                    url = build_stream_url(endpoint.base_url, channel.path)
                except EndpointURLError as e:
                    log.warning(
                        "channel_url_invalid",
                        base_url=endpoint.base_url,
                        path=channel.path,
                        reason=e.reason,
                    )
                    continue

                connection = ChannelConnection(
                    url,
                    self._sink,
                    policy=self._policy,
                    connector=self._connector,
                )
                self._connections[key] = connection
                connection.connect()

        log.info("connection_set_configured", connections=len(self._connections))

    def connect(self) -> None:
        """对所有连接调用 connect()（FAULTED 的连接立即重连）"""
        for connection in self._connections.values():
            connection.connect()

    async def close(self) -> None:
        """关闭并丢弃全部连接"""
        connections = list(self._connections.values())
        self._connections.clear()
        if connections:
            await asyncio.gather(*(c.close() for c in connections))

    def states(self) -> dict[ConnectionKey, ConnectionState]:
        return {key: c.state for key, c in self._connections.items()}
