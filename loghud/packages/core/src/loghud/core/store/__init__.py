"""LogHUD Core Store -- 内存有序日志序列

所有连接共享一个 LogStore 实例。
"""

from .log_store import LogStore, format_timestamp
from .protocols import Dispatcher, LogListener, LogSink, LogSource

__all__ = [
    "LogStore",
    "format_timestamp",
    "LogSink",
    "LogSource",
    "LogListener",
    "Dispatcher",
]
