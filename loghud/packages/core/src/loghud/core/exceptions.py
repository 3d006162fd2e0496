"""LogHUD 异常体系

传输层故障在连接内部恢复，模板错误降级为字面量，
这里的异常只在模块边界之间传递，不会抛给展示层。
"""


class LogHudError(Exception):
    """LogHUD 基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试或跳过恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class EndpointURLError(LogHudError):
    """端点 URL 无法构造为流式地址

    ConnectionSet 捕获此异常后跳过对应连接，不影响其他连接。
    """

    def __init__(self, base_url: str, reason: str) -> None:
        super().__init__(f"无法构造流式地址: {base_url} -- {reason}", recoverable=True)
        self.base_url = base_url
        self.reason = reason


class TransportError(LogHudError):
    """WebSocket 连接失败、握手失败或异常断开

    由 ChannelConnection 记录并触发重连。
    """

    def __init__(self, url: str, original_error: Exception | None = None) -> None:
        detail = original_error if original_error is not None else "remote closed"
        super().__init__(f"连接中断: {url} -- {detail}", recoverable=True)
        self.url = url
        self.original_error = original_error


class ConnectionStateError(LogHudError):
    """非法的连接状态流转（程序缺陷，不可恢复）"""

    def __init__(self, from_state: str, to_state: str) -> None:
        super().__init__(
            f"非法状态流转: {from_state} -> {to_state}",
            recoverable=False,
        )
        self.from_state = from_state
        self.to_state = to_state
