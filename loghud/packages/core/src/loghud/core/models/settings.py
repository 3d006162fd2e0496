"""端点与频道配置模型

Endpoint 对应一台日志服务端，ChannelEntry 对应其上的一个频道路径。
两者都可独立启用/禁用。
"""

from pydantic import BaseModel, Field
from ulid import ULID


def _new_id() -> str:
    return str(ULID())


class Endpoint(BaseModel):
    """日志服务端"""

    id: str = Field(default_factory=_new_id, description="端点标识")
    name: str = Field(default="", description="展示名称")
    base_url: str = Field(description="基础地址，如 http://localhost:8080")
    enabled: bool = Field(default=True, description="是否启用")


class ChannelEntry(BaseModel):
    """订阅频道"""

    id: str = Field(default_factory=_new_id, description="频道标识")
    path: str = Field(description="频道路径，如 /events/app1")
    enabled: bool = Field(default=True, description="是否启用")
