"""LogHUD Template -- 日志行模板解析与渲染

模板语法见 parser 模块文档。
"""

from .engine import (
    TemplateEngine,
    render,
    render_event,
    render_event_segments,
    render_segments,
)
from .functions import apply_default, apply_max, extract_key_path, stringify_value
from .nodes import NodeKind, StyledSegment, TemplateNode
from .parser import parse_template

__all__ = [
    # 渲染
    "TemplateEngine",
    "render",
    "render_segments",
    "render_event",
    "render_event_segments",
    # 解析
    "parse_template",
    "TemplateNode",
    "NodeKind",
    "StyledSegment",
    # 辅助函数
    "apply_max",
    "apply_default",
    "extract_key_path",
    "stringify_value",
]
