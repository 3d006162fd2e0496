"""LogEvent Domain Model

服务端为每条日志注入 _meta 信封：
{"_meta": {"id": ..., "ts": ..., "unixNs": ..., "originNodeId": ..., "channel": ...}}
_meta 之外的字段对核心层不透明。
"""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from ..config import SHORT_ID_LENGTH


def short_id(event_id: str) -> str:
    """id 末 SHORT_ID_LENGTH 位，不足时返回全部"""
    return event_id[-SHORT_ID_LENGTH:]


class LogMeta(BaseModel):
    """_meta 元数据信封"""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str = Field(default="", description="去重标识，缺失时由 Store 生成")
    ts: str | None = Field(default=None, description="RFC3339 时间字符串")
    unix_ns: int | None = Field(
        default=None,
        alias="unixNs",
        description="事件时间（Unix 纳秒）",
    )
    origin_node_id: str | None = Field(
        default=None,
        alias="originNodeId",
        description="产生事件的服务端节点",
    )
    channel: str | None = Field(default=None, description="逻辑频道路径")

    @field_validator("ts", "unix_ns", "origin_node_id", "channel", mode="wrap")
    @classmethod
    def drop_malformed(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        # 辅助字段格式错误时按缺失处理，不连累 id
        try:
            return handler(value)
        except ValidationError:
            return None


class LogEnvelope(BaseModel):
    """原始帧的解码视图，仅关心 _meta"""

    meta: LogMeta | None = Field(default=None, alias="_meta")


class LogEvent(BaseModel):
    """一条已入库的日志事件

    入库时创建，之后不可变；只会因裁剪被移除。
    raw 保留原始 payload，供模板渲染和关键字过滤使用。
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="去重标识，Store 内唯一")
    timestamp_ns: int = Field(description="事件时间（Unix 纳秒）")
    channel: str = Field(default="", description="来源频道，可为空")
    raw: str = Field(description="原始 payload 文本")
    formatted_time: str = Field(description="yyyy-MM-dd HH:mm:ss 格式时间")

    @property
    def short_id(self) -> str:
        return short_id(self.id)
