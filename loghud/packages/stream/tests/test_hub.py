"""MessageHub 单元测试"""

import asyncio

from loghud.core.models import LogEvent
from loghud.core.store import LogStore
from loghud.stream import MessageHub


def _event(event_id: str, channel: str = "") -> LogEvent:
    return LogEvent(
        id=event_id,
        timestamp_ns=0,
        channel=channel,
        raw="{}",
        formatted_time="1970-01-01 00:00:00",
    )


class TestMessageHub:
    async def test_subscribe_all(self):
        hub = MessageHub()
        queue = await hub.subscribe()

        hub.publish(_event("a", "/events/app1"))
        hub.publish(_event("b"))

        assert (await queue.get()).id == "a"
        assert (await queue.get()).id == "b"

    async def test_channel_subscription(self):
        hub = MessageHub()
        app1 = await hub.subscribe("/events/app1")
        everything = await hub.subscribe()

        hub.publish(_event("a", "/events/app1"))
        hub.publish(_event("b", "/events/app2"))

        assert app1.qsize() == 1
        assert app1.get_nowait().id == "a"
        assert everything.qsize() == 2

    async def test_unsubscribe(self):
        hub = MessageHub()
        queue = await hub.subscribe()
        await hub.unsubscribe(queue)

        hub.publish(_event("a"))

        assert queue.empty()
        assert hub.subscriber_count == 0

    async def test_full_queue_dropped(self):
        """队列满的订阅者被移除，其他订阅者不受影响"""
        hub = MessageHub(queue_maxsize=1)
        slow = await hub.subscribe()
        fast = await hub.subscribe()

        hub.publish(_event("a"))
        fast.get_nowait()
        hub.publish(_event("b"))

        assert hub.subscriber_count == 1
        assert slow.qsize() == 1
        assert fast.get_nowait().id == "b"

    async def test_store_listener(self):
        """attach 到 LogStore 后接收新入库事件，重复 id 不推送"""
        hub = MessageHub()
        queue = await hub.subscribe()
        store = LogStore()
        hub.attach(store)

        store.add('{"_meta": {"id": "x", "unixNs": 1}}')
        store.add('{"_meta": {"id": "x", "unixNs": 1}}')

        event = await asyncio.wait_for(queue.get(), timeout=1.0)
        assert event.id == "x"
        assert queue.empty()

    async def test_detach_stops_delivery(self):
        hub = MessageHub()
        queue = await hub.subscribe()
        store = LogStore()
        hub.attach(store)
        hub.detach(store)

        store.add('{"_meta": {"id": "x", "unixNs": 1}}')

        assert queue.empty()
        assert len(store) == 1

    async def test_attach_any_log_source(self):
        """attach 只依赖 add_listener/remove_listener，不要求具体的 LogStore"""

        class ListSource:
            def __init__(self):
                self.listeners = []

            def messages(self):
                return ()

            def add_listener(self, listener):
                self.listeners.append(listener)

            def remove_listener(self, listener):
                self.listeners.remove(listener)

        hub = MessageHub()
        queue = await hub.subscribe()
        source = ListSource()
        hub.attach(source)
        for listener in source.listeners:
            listener(_event("a"))
        hub.detach(source)

        assert queue.get_nowait().id == "a"
        assert source.listeners == []
