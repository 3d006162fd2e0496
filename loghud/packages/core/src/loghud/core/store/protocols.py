"""Store Protocol 接口定义

使用 Python Protocol 实现结构化子类型（duck typing），
连接层只依赖 LogSink，不依赖具体的 LogStore。
"""

from collections.abc import Callable
from typing import Protocol

from ..models.event import LogEvent

# 新事件入库回调
LogListener = Callable[[LogEvent], None]

# 通知派发钩子：接收一个无参回调，决定在哪个执行上下文调用它
Dispatcher = Callable[[Callable[[], None]], object]


class LogSink(Protocol):
    """原始帧接收方"""

    def add(self, raw: str) -> LogEvent | None:
        """接收一条原始 payload，重复 id 时返回 None"""
        ...


class LogSource(Protocol):
    """有序日志序列的只读视图"""

    def messages(self) -> tuple[LogEvent, ...]:
        """返回完整快照，按 timestamp_ns 升序"""
        ...

    def add_listener(self, listener: LogListener) -> None:
        """注册新事件回调"""
        ...

    def remove_listener(self, listener: LogListener) -> None:
        """取消注册"""
        ...
