"""LogStore -- 去重 + 时间有序 + 有界的内存日志序列

多个 ChannelConnection 并发写入同一个 LogStore：
- 去重检查、有序插入、裁剪在同一把锁内完成，读方不会看到半完成的插入
- 按 timestamp_ns 二分插入，相同时间戳保持到达顺序
- 序列超过 max_messages 时从头部裁剪（按位置，不按时间戳）
- 去重索引超过 seen_capacity 时裁剪最近插入时间之前 seen_ttl_ns 的条目
- 插入提交后通过 dispatch 钩子通知监听者，重复 id 不通知
"""

import bisect
import threading
import time
from collections.abc import Callable
from datetime import datetime, tzinfo

import structlog
from pydantic import ValidationError
from ulid import ULID

from ..config import MAX_MESSAGES, SEEN_CAPACITY, SEEN_TTL_NS, TIME_FORMAT
from ..models.event import LogEnvelope, LogEvent
from .protocols import Dispatcher, LogListener

log = structlog.get_logger()


def _call_now(callback: Callable[[], None]) -> None:
    callback()


def format_timestamp(timestamp_ns: int, tz: tzinfo | None = None) -> str:
    """将 Unix 纳秒时间格式化为 yyyy-MM-dd HH:mm:ss

    tz 为 None 时使用本地时区。
    """
    seconds = timestamp_ns // 1_000_000_000
    try:
        return datetime.fromtimestamp(seconds, tz).strftime(TIME_FORMAT)
    except (OverflowError, OSError, ValueError):
        # 超出平台可表示范围的时间戳
        return ""


class LogStore:
    """LogSink / LogSource 的内存实现"""

    def __init__(
        self,
        max_messages: int = MAX_MESSAGES,
        seen_capacity: int = SEEN_CAPACITY,
        seen_ttl_ns: int = SEEN_TTL_NS,
        tz: tzinfo | None = None,
        clock: Callable[[], int] = time.time_ns,
        dispatch: Dispatcher | None = None,
    ) -> None:
        """
        Args:
            max_messages: 有序序列最大条数
            seen_capacity: 去重索引触发裁剪的容量
            seen_ttl_ns: 去重索引保留窗口（纳秒）
            tz: formatted_time 使用的时区，None 为本地时区
            clock: 缺少 unixNs 时使用的墙钟（纳秒）
            dispatch: 通知派发钩子，如 loop.call_soon_threadsafe；默认同步调用
        """
        self._max_messages = max_messages
        self._seen_capacity = seen_capacity
        self._seen_ttl_ns = seen_ttl_ns
        self._tz = tz
        self._clock = clock
        self._dispatch = dispatch or _call_now

        self._lock = threading.Lock()
        self._messages: list[LogEvent] = []
        self._seen: dict[str, int] = {}
        self._listeners: list[LogListener] = []

    def add(self, raw: str) -> LogEvent | None:
        """接收一条原始 payload

        JSON 无法解析或缺少 _meta.id 时仍然入库，只是使用生成的 id
        和到达时间。

        Returns:
            新插入的 LogEvent；id 已存在时返回 None
        """
        event = self._build_event(raw)

        with self._lock:
            if event.id in self._seen:
                return None
            self._seen[event.id] = event.timestamp_ns
            if len(self._seen) > self._seen_capacity:
                self._prune_seen(event.timestamp_ns)

            # 相同时间戳插在已有条目之后，保持到达顺序
            index = bisect.bisect_right(
                self._messages,
                event.timestamp_ns,
                key=lambda e: e.timestamp_ns,
            )
            self._messages.insert(index, event)

            overflow = len(self._messages) - self._max_messages
            if overflow > 0:
                del self._messages[:overflow]

        self._dispatch(lambda: self._notify(event))
        return event

    def messages(self) -> tuple[LogEvent, ...]:
        """当前序列快照（不可变）"""
        with self._lock:
            return tuple(self._messages)

    def add_listener(self, listener: LogListener) -> None:
        """注册新事件回调"""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: LogListener) -> None:
        """取消注册，未注册过则忽略"""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def clear(self) -> None:
        """清空序列和去重索引"""
        with self._lock:
            self._messages.clear()
            self._seen.clear()

    @property
    def seen_count(self) -> int:
        """去重索引当前大小"""
        with self._lock:
            return len(self._seen)

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def _build_event(self, raw: str) -> LogEvent:
        """解析 _meta，补齐 id 与时间戳"""
        event_id = ""
        timestamp_ns: int | None = None
        channel = ""

        try:
            envelope = LogEnvelope.model_validate_json(raw)
        except ValidationError:
            envelope = None

        if envelope is not None and envelope.meta is not None:
            meta = envelope.meta
            event_id = meta.id
            timestamp_ns = meta.unix_ns
            channel = meta.channel or ""

        if not event_id:
            event_id = str(ULID())
        if timestamp_ns is None:
            timestamp_ns = self._clock()

        return LogEvent(
            id=event_id,
            timestamp_ns=timestamp_ns,
            channel=channel,
            raw=raw,
            formatted_time=format_timestamp(timestamp_ns, self._tz),
        )

    def _prune_seen(self, latest_ns: int) -> None:
        """裁剪去重索引（调用方持有锁）"""
        cutoff = latest_ns - self._seen_ttl_ns
        before = len(self._seen)
        self._seen = {k: ts for k, ts in self._seen.items() if ts >= cutoff}
        log.debug(
            "seen_index_pruned",
            before=before,
            after=len(self._seen),
            cutoff_ns=cutoff,
        )

    def _notify(self, event: LogEvent) -> None:
        """通知所有监听者，单个监听者失败不影响入库"""
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                log.exception("log_listener_failed", event_id=event.id)
