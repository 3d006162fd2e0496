"""PanelConfig -- 面板配置加载

从环境变量加载端点、频道、模板与缓冲参数。
数值不合法时记录 warning 并使用默认值，不阻塞启动。
"""

import os
from collections.abc import Callable

import structlog
from loghud.core.config import (
    DEFAULT_CHANNEL_PATH,
    DEFAULT_ENDPOINT,
    DEFAULT_TEMPLATE,
    MAX_MESSAGES,
    RECONNECT_DELAY_S,
    SEEN_CAPACITY,
)
from loghud.core.models import ChannelEntry, Endpoint
from pydantic import BaseModel, Field

log = structlog.get_logger()

# LOGHUD_CHANNELS 中以此前缀标记的频道为禁用
DISABLED_PREFIX = "!"


class PanelConfig(BaseModel):
    """面板配置 -- 从环境变量加载

    环境变量:
        LOGHUD_ENDPOINTS: 端点地址，逗号分隔（默认 http://localhost:8080）
        LOGHUD_CHANNELS: 频道路径，逗号分隔，"!" 前缀表示禁用（默认 /events/app1）
        LOGHUD_TEMPLATE: 展示模板
        LOGHUD_FILTER: 关键字过滤
        LOGHUD_MAX_MESSAGES: 消息缓冲上限（默认 50000）
        LOGHUD_SEEN_CAPACITY: 去重索引容量（默认 100000）
        LOGHUD_RECONNECT_DELAY_S: 重连间隔（秒，默认 1.5）
    """

    endpoints: list[Endpoint] = Field(
        default_factory=lambda: [Endpoint(name="local", base_url=DEFAULT_ENDPOINT)],
        description="日志端点",
    )
    channels: list[ChannelEntry] = Field(
        default_factory=lambda: [ChannelEntry(path=DEFAULT_CHANNEL_PATH)],
        description="订阅的频道",
    )
    template: str = Field(default=DEFAULT_TEMPLATE, description="日志行展示模板")
    keyword: str = Field(default="", description="关键字过滤，空串表示不过滤")
    max_messages: int = Field(default=MAX_MESSAGES, ge=1, description="消息缓冲上限")
    seen_capacity: int = Field(default=SEEN_CAPACITY, ge=1, description="去重索引容量")
    reconnect_delay_s: float = Field(
        default=RECONNECT_DELAY_S,
        ge=0,
        description="断线重连间隔（秒）",
    )


def _split_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_channel(item: str) -> ChannelEntry:
    if item.startswith(DISABLED_PREFIX):
        return ChannelEntry(path=item[len(DISABLED_PREFIX) :].strip(), enabled=False)
    return ChannelEntry(path=item)


def _read_number(
    env_var: str,
    cast: Callable[[str], int | float],
    fallback: int | float,
    minimum: int | float,
) -> int | float | None:
    """读取数值环境变量，未设置或不合法时返回 None"""
    val = os.environ.get(env_var)
    if not val:
        return None
    try:
        number = cast(val)
    except ValueError:
        number = None
    if number is None or not number >= minimum:
        log.warning(
            "invalid_panel_config",
            env_var=env_var,
            value=val,
            fallback=fallback,
        )
        # 使用默认值，不阻塞启动
        return None
    return number


def load_panel_config() -> PanelConfig:
    """从环境变量加载面板配置

    Returns:
        PanelConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("LOGHUD_ENDPOINTS"):
        urls = _split_list(val)
        if urls:
            kwargs["endpoints"] = [Endpoint(base_url=url) for url in urls]

    if val := os.environ.get("LOGHUD_CHANNELS"):
        channels = [_parse_channel(item) for item in _split_list(val)]
        channels = [c for c in channels if c.path]
        if channels:
            kwargs["channels"] = channels

    if val := os.environ.get("LOGHUD_TEMPLATE"):
        kwargs["template"] = val

    if val := os.environ.get("LOGHUD_FILTER"):
        kwargs["keyword"] = val

    numeric_fields = [
        ("max_messages", "LOGHUD_MAX_MESSAGES", int, MAX_MESSAGES, 1),
        ("seen_capacity", "LOGHUD_SEEN_CAPACITY", int, SEEN_CAPACITY, 1),
        ("reconnect_delay_s", "LOGHUD_RECONNECT_DELAY_S", float, RECONNECT_DELAY_S, 0),
    ]
    for field, env_var, cast, fallback, minimum in numeric_fields:
        number = _read_number(env_var, cast, fallback, minimum)
        if number is not None:
            kwargs[field] = number

    return PanelConfig(**kwargs)
