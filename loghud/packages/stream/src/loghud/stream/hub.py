"""MessageHub -- 新日志事件的内存广播器

每个订阅者持有一个 asyncio.Queue，可按频道订阅或订阅全部。
通过 attach() 挂到任意 LogSource 上，供展示层轮询队列。
"""

import asyncio
from collections import defaultdict

import structlog
from loghud.core.models import LogEvent
from loghud.core.store import LogSource

log = structlog.get_logger()

# 订阅全部频道
ALL_CHANNELS = "*"


class MessageHub:
    """基于 asyncio.Queue 的发布/订阅"""

    def __init__(self, queue_maxsize: int = 1000) -> None:
        # channel -> set of asyncio.Queue
        self._subscribers: dict[str, set[asyncio.Queue]] = defaultdict(set)
        self._queue_maxsize = queue_maxsize

    async def subscribe(self, channel: str = ALL_CHANNELS) -> asyncio.Queue:
        """订阅指定频道（默认全部）

        Returns:
            asyncio.Queue 实例，新事件会被推送到此队列
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers[channel].add(queue)
        return queue

    async def unsubscribe(self, queue: asyncio.Queue, channel: str = ALL_CHANNELS) -> None:
        self._subscribers[channel].discard(queue)
        if not self._subscribers[channel]:
            del self._subscribers[channel]

    def publish(self, event: LogEvent) -> None:
        """推送给全部订阅者与该事件频道的订阅者

        队列已满的订阅者视为失效，直接移除。
        """
        for channel in {ALL_CHANNELS, event.channel}:
            queues = self._subscribers.get(channel)
            if not queues:
                continue
            dead_queues = []
            for queue in queues:
                try:
                    queue.put_nowait(event)
                except asyncio.QueueFull:
                    dead_queues.append(queue)

            # 清理已满的队列
            for q in dead_queues:
                queues.discard(q)
            if dead_queues:
                log.warning("subscriber_dropped", channel=channel, dropped=len(dead_queues))
            if not queues:
                del self._subscribers[channel]

    @property
    def subscriber_count(self) -> int:
        return sum(len(queues) for queues in self._subscribers.values())

    def attach(self, source: LogSource) -> None:
        """把 publish 注册为 source 的新事件回调"""
        source.add_listener(self.publish)

    def detach(self, source: LogSource) -> None:
        source.remove_listener(self.publish)
