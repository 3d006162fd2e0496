"""ChannelConnection -- 单个频道的 WebSocket 连接

状态流转：IDLE -> CONNECTING -> OPEN -> (CLOSING | FAULTED) -> IDLE

- 每个连接持有一个 asyncio 接收任务，收到的帧直接交给 sink
- 连接失败、接收出错或对端关闭都进入 FAULTED，并用 loop.call_later
  安排重连，不在接收循环里 sleep
- close() 是终态：取消重连定时器和接收任务，之后的 connect() 都是空操作
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Protocol

import structlog
from loghud.core.config import MAX_FRAME_BYTES
from loghud.core.exceptions import ConnectionStateError, TransportError
from loghud.core.models import ACTIVE_STATES, ConnectionState, validate_transition
from loghud.core.store import LogSink
from websockets.asyncio.client import connect as websocket_connect

from .backoff import ReconnectPolicy

log = structlog.get_logger()


class StreamSocket(Protocol):
    """接收端 socket 的最小接口（websockets ClientConnection 满足）"""

    def __aiter__(self) -> AsyncIterator[str | bytes]: ...

    async def close(self) -> None: ...


Connector = Callable[[str], Awaitable[StreamSocket]]


async def websocket_connector(url: str) -> StreamSocket:
    """默认连接器：websockets asyncio 客户端"""
    return await websocket_connect(url, max_size=MAX_FRAME_BYTES)


class ChannelConnection:
    """单个 (端点, 频道) 的连接生命周期"""

    def __init__(
        self,
        url: str,
        sink: LogSink,
        *,
        policy: ReconnectPolicy | None = None,
        connector: Connector | None = None,
    ) -> None:
        """
        Args:
            url: WebSocket 地址
            sink: 接收帧的日志存储
            policy: 重连退避策略，默认固定 1.5 秒
            connector: 建立连接的协程函数，默认 websocket_connector
        """
        self.url = url
        self._sink = sink
        self._policy = policy or ReconnectPolicy()
        self._connector = connector or websocket_connector
        self._state = ConnectionState.IDLE
        self._closed = False
        self._task: asyncio.Task | None = None
        self._retry_handle: asyncio.TimerHandle | None = None
        self._socket: StreamSocket | None = None
        self._failures = 0
        self._frames_received = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def failures(self) -> int:
        """连续失败次数，连接成功后清零"""
        return self._failures

    @property
    def frames_received(self) -> int:
        return self._frames_received

    def connect(self) -> None:
        """开始连接（需在事件循环中调用）

        已关闭、正在连接或已连接时为空操作；处于 FAULTED 时取消等待中的
        重连并立即连接。
        """
        if self._closed or self._state in ACTIVE_STATES:
            return
        if self._state == ConnectionState.FAULTED:
            self._cancel_retry()
            self._transition(ConnectionState.IDLE)
        if self._state != ConnectionState.IDLE:
            return

        self._transition(ConnectionState.CONNECTING)
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"loghud-channel:{self.url}"
        )

    async def close(self) -> None:
        """关闭连接并禁止后续重连"""
        if self._closed:
            return
        self._closed = True
        self._cancel_retry()

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        self._transition(ConnectionState.CLOSING)
        await self._discard_socket()
        self._transition(ConnectionState.IDLE)
        log.info("channel_closed", url=self.url, frames_received=self._frames_received)

    async def _run(self) -> None:
        try:
            socket = await self._connector(self.url)
        except Exception as e:
            await self._fault(TransportError(self.url, e))
            return

        self._socket = socket
        self._transition(ConnectionState.OPEN)
        self._failures = 0
        log.info("channel_opened", url=self.url)

        try:
            async for frame in socket:
                self._deliver(frame)
        except Exception as e:
            await self._fault(TransportError(self.url, e))
            return
        await self._fault(TransportError(self.url))

    def _deliver(self, frame: str | bytes) -> None:
        if isinstance(frame, str):
            text = frame
        else:
            try:
                text = bytes(frame).decode("utf-8")
            except UnicodeDecodeError:
                log.warning("channel_frame_undecodable", url=self.url, size=len(frame))
                return

        self._frames_received += 1
        try:
            self._sink.add(text)
        except Exception:
            log.exception("log_sink_failed", url=self.url)

    async def _fault(self, error: TransportError) -> None:
        await self._discard_socket()
        self._transition(ConnectionState.FAULTED)
        self._failures += 1
        if self._closed:
            return

        delay = self._policy.delay_for(self._failures)
        log.warning(
            "channel_faulted",
            url=self.url,
            error=str(error),
            failures=self._failures,
            retry_in_s=round(delay, 3),
        )
        self._retry_handle = asyncio.get_running_loop().call_later(delay, self._retry)

    def _retry(self) -> None:
        self._retry_handle = None
        # 定时器触发前可能已被 close()
        if self._closed or self._state != ConnectionState.FAULTED:
            return
        self._transition(ConnectionState.IDLE)
        self.connect()

    def _cancel_retry(self) -> None:
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None

    async def _discard_socket(self) -> None:
        socket, self._socket = self._socket, None
        if socket is None:
            return
        try:
            await socket.close()
        except Exception as e:
            log.debug("channel_socket_close_failed", url=self.url, error=str(e))

    def _transition(self, to_state: ConnectionState) -> None:
        if not validate_transition(self._state, to_state):
            raise ConnectionStateError(self._state, to_state)
        log.debug(
            "channel_state_changed",
            url=self.url,
            from_state=self._state,
            to_state=to_state,
        )
        self._state = to_state
