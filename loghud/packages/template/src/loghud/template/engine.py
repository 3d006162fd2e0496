"""模板渲染引擎

对 parse_template 产出的语法树求值：
- 常量与 id 引用直接替换
- ${.path} 从 payload 取值（payload 只在首次用到时解析）
- 变换函数先对参数求值（由内向外），参数不合法时保留调用的字面文本
- 角色函数为内部内容打上角色，内层角色优先

渲染为纯函数，不抛异常。
"""

from typing import Any

import structlog
from loghud.core.models import LogEvent, Role, short_id

from .functions import evaluate_transform, extract_key_path, load_payload
from .nodes import (
    DATE,
    DATE_TIME,
    DTIME,
    LAST6,
    TIME,
    UUID,
    UUID_LAST6,
    NodeKind,
    StyledSegment,
    TemplateNode,
)
from .parser import parse_template

log = structlog.get_logger()

_UNSET = object()


class _RenderContext:
    """单次渲染的替换数据"""

    def __init__(self, json_payload: str, formatted_time: str, event_id: str) -> None:
        self.json_payload = json_payload
        self.formatted_time = formatted_time
        self.event_id = event_id
        parts = formatted_time.split()
        if len(parts) == 2:
            self.date, self.time = parts
        else:
            self.date = self.time = formatted_time
        self._payload: Any = _UNSET

    @property
    def payload(self) -> Any:
        if self._payload is _UNSET:
            self._payload = load_payload(self.json_payload)
        return self._payload

    def constant(self, token: str) -> str:
        if token in (DTIME, DATE_TIME):
            return self.formatted_time
        if token == DATE:
            return self.date
        if token == TIME:
            return self.time
        return ""

    def identity(self, token: str) -> str:
        if token in (LAST6, UUID_LAST6):
            return short_id(self.event_id)
        if token == UUID:
            return self.event_id
        return ""


def _evaluate(
    node: TemplateNode,
    role: Role | None,
    ctx: _RenderContext,
    out: list[StyledSegment],
) -> None:
    kind = node.kind
    if kind == NodeKind.TEXT:
        out.append(StyledSegment(role=role, text=node.value))
    elif kind == NodeKind.CONSTANT:
        out.append(StyledSegment(role=role, text=ctx.constant(node.value)))
    elif kind == NodeKind.IDENTITY:
        out.append(StyledSegment(role=role, text=ctx.identity(node.value)))
    elif kind == NodeKind.KEY_PATH:
        out.append(StyledSegment(role=role, text=extract_key_path(ctx.payload, node.value)))
    elif kind == NodeKind.SEQUENCE:
        for child in node.children:
            _evaluate(child, role, ctx, out)
    elif kind == NodeKind.STRING:
        out.append(StyledSegment(role=role, text=_flatten_children(node, ctx)))
    elif kind == NodeKind.QUOTED:
        out.append(StyledSegment(role=role, text=f'"{_flatten_children(node, ctx)}"'))
    elif kind == NodeKind.CALL:
        if node.is_role_call:
            for child in node.children:
                _evaluate(child, node.role, ctx, out)
        else:
            out.append(StyledSegment(role=role, text=_evaluate_transform_call(node, ctx)))


def _flatten_children(node: TemplateNode, ctx: _RenderContext) -> str:
    out: list[StyledSegment] = []
    for child in node.children:
        _evaluate(child, None, ctx, out)
    return "".join(segment.text for segment in out)


def _argument_text(argument: TemplateNode, ctx: _RenderContext) -> str:
    """参数求值：独占的字符串字面量原样保留，其余去首尾空白"""
    significant = [
        n
        for n in argument.children
        if not (n.kind == NodeKind.TEXT and not n.value.strip())
    ]
    if len(significant) == 1 and significant[0].kind == NodeKind.STRING:
        return _flatten_children(significant[0], ctx)
    return _flatten_children(argument, ctx).strip()


def _evaluate_transform_call(node: TemplateNode, ctx: _RenderContext) -> str:
    args = [_argument_text(argument, ctx) for argument in node.children]
    result = evaluate_transform(node.value, args)
    if result is None:
        return f"{node.value}({','.join(args)})"
    return result


def _merge(segments: list[StyledSegment]) -> list[StyledSegment]:
    """丢弃空片段，合并相邻同角色片段"""
    merged: list[StyledSegment] = []
    for segment in segments:
        if not segment.text:
            continue
        if merged and merged[-1].role == segment.role:
            merged[-1] = StyledSegment(role=segment.role, text=merged[-1].text + segment.text)
        else:
            merged.append(segment)
    return merged


class TemplateEngine:
    """模板渲染入口"""

    @staticmethod
    def render_segments(
        template: str,
        json_payload: str,
        formatted_time: str,
        event_id: str,
    ) -> list[StyledSegment]:
        """渲染为带角色的片段列表

        Args:
            template: 模板字符串
            json_payload: 原始 JSON 文本
            formatted_time: 已格式化的时间，如 "2024-01-01 00:00:00"
            event_id: 事件 id

        Returns:
            合并后的 StyledSegment 列表；模板为空时为空列表
        """
        if not template:
            return []
        ctx = _RenderContext(json_payload, formatted_time, event_id)
        out: list[StyledSegment] = []
        try:
            _evaluate(parse_template(template), None, ctx, out)
        except Exception:
            log.exception("template_render_failed", template=template)
            return [StyledSegment(text=template)]
        return _merge(out)

    @staticmethod
    def render(
        template: str,
        json_payload: str,
        formatted_time: str,
        event_id: str,
    ) -> str:
        """渲染为纯文本（片段文本拼接）"""
        segments = TemplateEngine.render_segments(
            template, json_payload, formatted_time, event_id
        )
        return "".join(segment.text for segment in segments)

    @staticmethod
    def render_event_segments(template: str, event: LogEvent) -> list[StyledSegment]:
        return TemplateEngine.render_segments(
            template, event.raw, event.formatted_time, event.id
        )

    @staticmethod
    def render_event(template: str, event: LogEvent) -> str:
        return TemplateEngine.render(template, event.raw, event.formatted_time, event.id)


render_segments = TemplateEngine.render_segments
render = TemplateEngine.render
render_event_segments = TemplateEngine.render_event_segments
render_event = TemplateEngine.render_event
