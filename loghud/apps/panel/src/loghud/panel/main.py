"""LogPanel -- 面板运行时

配置 -> LogStore -> MessageHub -> ConnectionSet 的装配与生命周期管理。
"""

import asyncio
import time
from collections.abc import AsyncGenerator, AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import tzinfo

import structlog
from loghud.core.filtering import filter_messages
from loghud.core.models import LogEvent
from loghud.core.store import LogStore
from loghud.stream import (
    ALL_CHANNELS,
    ConnectionSet,
    Connector,
    MessageHub,
    ReconnectPolicy,
)
from loghud.template import StyledSegment, TemplateEngine

from .config import PanelConfig, load_panel_config

log = structlog.get_logger()


class LogPanel:
    """日志面板

    所有连接写入同一个 LogStore；新事件经 MessageHub 推送给订阅队列。
    通知通过 loop.call_soon_threadsafe 派发到事件循环线程。
    """

    def __init__(
        self,
        config: PanelConfig,
        *,
        connector: Connector | None = None,
        tz: tzinfo | None = None,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self.config = config
        self._loop: asyncio.AbstractEventLoop | None = None
        self.store = LogStore(
            max_messages=config.max_messages,
            seen_capacity=config.seen_capacity,
            tz=tz,
            clock=clock,
            dispatch=self._dispatch,
        )
        self.hub = MessageHub()
        self.connections = ConnectionSet(
            config.endpoints,
            self.store,
            policy=ReconnectPolicy(initial_delay_s=config.reconnect_delay_s),
            connector=connector,
        )
        self._started = False

    def _dispatch(self, callback: Callable[[], None]) -> None:
        if self._loop is None:
            callback()
        else:
            self._loop.call_soon_threadsafe(callback)

    async def start(self) -> None:
        """注册监听并建立全部连接"""
        if self._started:
            return
        self._loop = asyncio.get_running_loop()
        self.hub.attach(self.store)
        await self.connections.configure(self.config.channels)
        self._started = True
        log.info(
            "panel_started",
            endpoints=len(self.config.endpoints),
            connections=len(self.connections.connections),
        )

    async def stop(self) -> None:
        """关闭全部连接"""
        if not self._started:
            return
        await self.connections.close()
        self.hub.detach(self.store)
        self._started = False
        self._loop = None
        log.info("panel_stopped", messages=len(self.store))

    def render_segments(self, event: LogEvent) -> list[StyledSegment]:
        return TemplateEngine.render_event_segments(self.config.template, event)

    def render_line(self, event: LogEvent) -> str:
        return TemplateEngine.render_event(self.config.template, event)

    def visible_messages(self, keyword: str | None = None) -> list[LogEvent]:
        """当前快照按关键字过滤后的结果（None 表示使用配置中的关键字）"""
        keyword = self.config.keyword if keyword is None else keyword
        return filter_messages(self.store.messages(), keyword)

    def render_lines(self, keyword: str | None = None) -> list[str]:
        """按时间顺序渲染当前可见的全部日志行"""
        return [self.render_line(event) for event in self.visible_messages(keyword)]

    async def follow(self, channel: str = ALL_CHANNELS) -> AsyncIterator[LogEvent]:
        """逐条产出新入库的事件，直到调用方停止迭代"""
        queue = await self.hub.subscribe(channel)
        try:
            while True:
                yield await queue.get()
        finally:
            await self.hub.unsubscribe(queue, channel)


@asynccontextmanager
async def run_panel(
    config: PanelConfig | None = None,
    **kwargs,
) -> AsyncGenerator[LogPanel, None]:
    """启动面板，退出上下文时关闭全部连接

    Args:
        config: 面板配置，None 时从环境变量加载
        **kwargs: 传递给 LogPanel 的额外参数（connector、tz、clock）
    """
    panel = LogPanel(config or load_panel_config(), **kwargs)
    await panel.start()
    try:
        yield panel
    finally:
        await panel.stop()
