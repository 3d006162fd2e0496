"""重连退避策略"""

import random

from loghud.core.config import RECONNECT_DELAY_S, RECONNECT_MAX_DELAY_S
from pydantic import BaseModel, Field, model_validator


class ReconnectPolicy(BaseModel):
    """重连间隔策略

    默认参数即固定 1.5 秒重连；multiplier > 1 时为带上限的指数退避。
    """

    initial_delay_s: float = Field(
        default=RECONNECT_DELAY_S,
        ge=0,
        description="首次重连等待（秒）",
    )
    multiplier: float = Field(
        default=1.0,
        ge=1.0,
        description="每次连续失败后的间隔倍数",
    )
    max_delay_s: float = Field(
        default=RECONNECT_MAX_DELAY_S,
        ge=0,
        description="重连间隔上限（秒）",
    )
    jitter_ratio: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="随机抖动比例，0 表示不抖动",
    )

    @model_validator(mode="after")
    def cap_not_below_initial(self) -> "ReconnectPolicy":
        # 上限只约束退避增长，不缩短配置的首次间隔
        if self.max_delay_s < self.initial_delay_s:
            self.max_delay_s = self.initial_delay_s
        return self

    def delay_for(self, attempt: int) -> float:
        """第 attempt 次连续失败后的等待时间（attempt 从 1 开始）"""
        exponent = max(0, attempt - 1)
        try:
            delay = self.initial_delay_s * self.multiplier**exponent
        except OverflowError:
            delay = self.max_delay_s
        delay = min(delay, self.max_delay_s)
        if self.jitter_ratio:
            delay *= 1 + random.uniform(-self.jitter_ratio, self.jitter_ratio)
        return delay
