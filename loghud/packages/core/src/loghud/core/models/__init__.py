"""LogHUD Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    ACTIVE_STATES,
    ROLE_ALIASES,
    VALID_TRANSITIONS,
    ConnectionState,
    Role,
    resolve_role,
    validate_transition,
)
from .event import LogEnvelope, LogEvent, LogMeta, short_id
from .settings import ChannelEntry, Endpoint

__all__ = [
    # 枚举
    "ConnectionState",
    "Role",
    # 状态机
    "VALID_TRANSITIONS",
    "ACTIVE_STATES",
    "validate_transition",
    # 角色
    "ROLE_ALIASES",
    "resolve_role",
    # Event
    "LogEvent",
    "LogMeta",
    "LogEnvelope",
    "short_id",
    # 配置
    "Endpoint",
    "ChannelEntry",
]
