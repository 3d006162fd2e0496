"""枚举定义

包含 ChannelConnection 状态机、语义样式角色 Role，
以及 VALID_TRANSITIONS 合法流转映射和角色同义词表。
"""

from enum import StrEnum


class ConnectionState(StrEnum):
    """ChannelConnection 状态机"""

    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    OPEN = "OPEN"
    CLOSING = "CLOSING"
    FAULTED = "FAULTED"


# 合法状态流转
VALID_TRANSITIONS: dict[ConnectionState, set[ConnectionState]] = {
    ConnectionState.IDLE: {ConnectionState.CONNECTING, ConnectionState.CLOSING},
    ConnectionState.CONNECTING: {
        ConnectionState.OPEN,
        ConnectionState.FAULTED,
        ConnectionState.CLOSING,
    },
    ConnectionState.OPEN: {ConnectionState.FAULTED, ConnectionState.CLOSING},
    # 故障后先回到 IDLE，再由重连定时器发起 CONNECTING
    ConnectionState.FAULTED: {ConnectionState.IDLE, ConnectionState.CLOSING},
    ConnectionState.CLOSING: {ConnectionState.IDLE},
}

# 接收帧的状态
ACTIVE_STATES: set[ConnectionState] = {
    ConnectionState.CONNECTING,
    ConnectionState.OPEN,
}


class Role(StrEnum):
    """语义展示角色 -- 颜色映射由展示层负责"""

    PRIMARY = "primary"
    SECOND = "second"
    WARNING = "warning"
    ERROR = "error"
    NOTICE = "notice"
    DEBUG = "debug"
    NORMAL = "normal"


# 模板中可用的角色同义词
ROLE_ALIASES: dict[str, Role] = {
    "secondary": Role.SECOND,
    "warn": Role.WARNING,
    "err": Role.ERROR,
    "info": Role.NOTICE,
    "trace": Role.DEBUG,
    "plain": Role.NORMAL,
}


def validate_transition(from_state: ConnectionState, to_state: ConnectionState) -> bool:
    """验证状态流转是否合法

    Args:
        from_state: 当前状态
        to_state: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_state, set())
    return to_state in allowed


def resolve_role(name: str) -> Role | None:
    """将模板中的函数名解析为 Role，非角色名返回 None"""
    try:
        return Role(name)
    except ValueError:
        return ROLE_ALIASES.get(name)
