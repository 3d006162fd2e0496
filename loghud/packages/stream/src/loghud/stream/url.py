"""端点 URL 到 WebSocket 流地址的转换"""

import httpx
from loghud.core.exceptions import EndpointURLError

# http(s) 端点映射为对应的 WebSocket 协议
SCHEME_MAP: dict[str, str] = {
    "http": "ws",
    "https": "wss",
    "ws": "ws",
    "wss": "wss",
}


def build_stream_url(base_url: str, path: str) -> str:
    """拼接频道流地址

    http -> ws, https -> wss, ws/wss 保持不变；频道路径以 "/" 开头
    追加到端点已有路径之后，端点上的查询参数保留。

    Args:
        base_url: 端点地址，如 "http://localhost:8080"
        path: 频道路径，如 "/events/app1"

    Returns:
        WebSocket 地址，如 "ws://localhost:8080/events/app1"

    Raises:
        EndpointURLError: 地址无法解析、协议不支持或缺少主机名
    """
    try:
        url = httpx.URL(base_url.strip())
    except httpx.InvalidURL as e:
        raise EndpointURLError(base_url, str(e)) from e

    scheme = SCHEME_MAP.get(url.scheme.lower())
    if scheme is None:
        raise EndpointURLError(base_url, f"不支持的协议: {url.scheme or '(空)'}")
    if not url.host:
        raise EndpointURLError(base_url, "缺少主机名")

    channel_path = path.strip()
    if not channel_path.startswith("/"):
        channel_path = "/" + channel_path
    full_path = url.path.rstrip("/") + channel_path

    try:
        return str(url.copy_with(scheme=scheme, path=full_path))
    except httpx.InvalidURL as e:
        raise EndpointURLError(base_url, str(e)) from e
