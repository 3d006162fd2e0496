"""模板语法树与渲染输出模型

模板字符串解析为 TemplateNode 树：
- 叶子：字面文本、字符串参数、时间常量、id 引用、JSON key path 引用
- 内部节点：函数调用（角色函数 / 变换函数）与序列
渲染结果为 StyledSegment 列表，角色到颜色的映射由展示层负责。
"""

from enum import StrEnum

from loghud.core.models import Role
from pydantic import BaseModel, ConfigDict, Field


class NodeKind(StrEnum):
    """语法树节点类型"""

    TEXT = "text"
    # 独占整个参数的字符串字面量，渲染时去掉引号
    STRING = "string"
    # 嵌在其他参数文本中的字符串，保留引号，内部括号不参与函数解析
    QUOTED = "quoted"
    CONSTANT = "constant"
    IDENTITY = "identity"
    KEY_PATH = "key_path"
    CALL = "call"
    SEQUENCE = "sequence"


# 时间常量（$DATE_TIME 为 $DTIME 的旧名）
DTIME = "$DTIME"
DATE_TIME = "$DATE_TIME"
DATE = "$DATE"
TIME = "$TIME"

# id 引用
UUID = "$UUID"
LAST6 = "$LAST6"
UUID_LAST6 = "$UUID_LAST6"

CONSTANT_TOKENS: tuple[str, ...] = (DATE_TIME, DTIME, DATE, TIME)
IDENTITY_TOKENS: tuple[str, ...] = (UUID_LAST6, LAST6, UUID)

# 同一位置取最长匹配，$UUID_LAST6 不会被当作 $UUID 消费
TOKENS_LONGEST_FIRST: tuple[str, ...] = tuple(
    sorted(CONSTANT_TOKENS + IDENTITY_TOKENS, key=len, reverse=True)
)

# 变换函数
MAX_FUNC = "max"
DEFAULT_FUNC = "default"
TRANSFORM_FUNCS: frozenset[str] = frozenset({MAX_FUNC, DEFAULT_FUNC})


class TemplateNode(BaseModel):
    """模板语法树节点

    value 含义随 kind 变化：
    - TEXT: 文本内容
    - CONSTANT / IDENTITY: 记号本身，如 "$DTIME"
    - KEY_PATH: 点分路径，如 "a.b"
    - CALL: 调用的原始函数名
    CALL 的 children 为参数列表（每个参数是一个 SEQUENCE）；
    STRING / QUOTED 的 children 为引号内的文本与引用（引号内仍做变量替换）。
    """

    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    value: str = ""
    role: Role | None = None
    children: tuple["TemplateNode", ...] = ()

    @property
    def is_role_call(self) -> bool:
        return self.kind == NodeKind.CALL and self.role is not None


class StyledSegment(BaseModel):
    """渲染输出单元"""

    role: Role | None = Field(default=None, description="语义角色，无角色为 None")
    text: str = Field(default="", description="片段文本")


def text_node(value: str) -> TemplateNode:
    return TemplateNode(kind=NodeKind.TEXT, value=value)


def sequence_node(children: list[TemplateNode]) -> TemplateNode:
    return TemplateNode(kind=NodeKind.SEQUENCE, children=tuple(children))
