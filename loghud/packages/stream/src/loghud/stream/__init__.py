"""LogHUD Stream -- WebSocket 日志流接入

ChannelConnection 负责单个频道的连接与重连，ConnectionSet 管理
端点 x 频道的连接集合，MessageHub 把新事件广播给订阅队列。
"""

from .backoff import ReconnectPolicy
from .connection import ChannelConnection, Connector, StreamSocket, websocket_connector
from .connection_set import ConnectionKey, ConnectionSet
from .hub import ALL_CHANNELS, MessageHub
from .url import build_stream_url

__all__ = [
    "ChannelConnection",
    "ConnectionSet",
    "ConnectionKey",
    "Connector",
    "StreamSocket",
    "websocket_connector",
    "ReconnectPolicy",
    "build_stream_url",
    "MessageHub",
    "ALL_CHANNELS",
]
