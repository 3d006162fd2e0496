"""模板解析器 -- 递归下降

语法：
- 时间/身份常量：$DTIME $DATE_TIME $DATE $TIME $UUID $LAST6 $UUID_LAST6
- JSON 取值：${.a.b}
- 函数调用：标识符紧跟 "("，仅识别角色函数与 max/default；
  匹配右括号时跳过双引号内的字符
- 函数参数内的双引号字符串：独占参数时为 STRING（去引号），
  否则为 QUOTED（保留引号）；引号内只做变量替换

解析针对模板本身，不针对替换后的文本，payload 里的括号和引号不会被当作语法。
未知函数名、括号不配对、引号不闭合的片段按字面文本处理。
"""

from enum import Enum, auto
from functools import lru_cache

import structlog
from loghud.core.models import resolve_role

from .nodes import (
    CONSTANT_TOKENS,
    TOKENS_LONGEST_FIRST,
    TRANSFORM_FUNCS,
    NodeKind,
    TemplateNode,
    sequence_node,
    text_node,
)

log = structlog.get_logger()

KEY_PATH_OPEN = "${."
KEY_PATH_CLOSE = "}"
QUOTE = '"'


class _Mode(Enum):
    TOP = auto()
    ARGS = auto()
    QUOTED = auto()


def _is_ident_start(ch: str) -> bool:
    return (ch.isascii() and ch.isalpha()) or ch == "_"


def _is_ident_char(ch: str) -> bool:
    return (ch.isascii() and ch.isalnum()) or ch == "_"


def _is_function(name: str) -> bool:
    return name in TRANSFORM_FUNCS or resolve_role(name) is not None


@lru_cache(maxsize=256)
def parse_template(template: str) -> TemplateNode:
    """解析模板字符串为语法树（按模板字符串缓存）"""
    try:
        nodes = _Parser(template).parse_range(0, len(template), _Mode.TOP)
    except RecursionError:
        log.warning("template_too_deep", template_length=len(template))
        nodes = [text_node(template)]
    return sequence_node(nodes)


class _Parser:
    def __init__(self, source: str) -> None:
        self._src = source

    def parse_range(self, start: int, end: int, mode: _Mode) -> list[TemplateNode]:
        """解析 [start, end) 区间"""
        src = self._src
        nodes: list[TemplateNode] = []
        buffer: list[str] = []

        def flush() -> None:
            if buffer:
                nodes.append(text_node("".join(buffer)))
                buffer.clear()

        i = start
        while i < end:
            ch = src[i]

            if ch == "$":
                node, next_index = self._parse_reference(i, end)
                if node is not None:
                    flush()
                    nodes.append(node)
                    i = next_index
                    continue

            elif ch == QUOTE and mode is _Mode.ARGS:
                close = src.find(QUOTE, i + 1, end)
                if close >= 0:
                    flush()
                    inner = self.parse_range(i + 1, close, _Mode.QUOTED)
                    nodes.append(TemplateNode(kind=NodeKind.QUOTED, children=tuple(inner)))
                    i = close + 1
                    continue

            elif (
                mode is not _Mode.QUOTED
                and _is_ident_start(ch)
                and (i == 0 or not _is_ident_char(src[i - 1]))
            ):
                j = i + 1
                while j < end and _is_ident_char(src[j]):
                    j += 1
                name = src[i:j]
                if j < end and src[j] == "(" and _is_function(name):
                    close = self._find_closing(j, end)
                    if close >= 0:
                        flush()
                        nodes.append(self._parse_call(name, j, close))
                        i = close + 1
                        continue
                buffer.append(name)
                i = j
                continue

            buffer.append(ch)
            i += 1

        flush()
        return nodes

    def _parse_reference(self, i: int, end: int) -> tuple[TemplateNode | None, int]:
        """解析 $ 开头的常量或 ${.path}"""
        src = self._src
        if src.startswith(KEY_PATH_OPEN, i, end):
            close = src.find(KEY_PATH_CLOSE, i + len(KEY_PATH_OPEN), end)
            if close >= 0:
                path = src[i + len(KEY_PATH_OPEN) : close]
                return TemplateNode(kind=NodeKind.KEY_PATH, value=path), close + 1
            return None, i

        for token in TOKENS_LONGEST_FIRST:
            if src.startswith(token, i, end):
                kind = NodeKind.CONSTANT if token in CONSTANT_TOKENS else NodeKind.IDENTITY
                return TemplateNode(kind=kind, value=token), i + len(token)
        return None, i

    def _find_closing(self, open_index: int, end: int) -> int:
        """返回与 open_index 处 "(" 匹配的 ")" 位置，找不到返回 -1"""
        src = self._src
        depth = 0
        in_quote = False
        for k in range(open_index, end):
            ch = src[k]
            if in_quote:
                if ch == QUOTE:
                    in_quote = False
                continue
            if ch == QUOTE:
                in_quote = True
            elif ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return k
        return -1

    def _split_arguments(self, start: int, end: int) -> list[tuple[int, int]]:
        """按顶层逗号切分参数区间"""
        src = self._src
        spans: list[tuple[int, int]] = []
        depth = 0
        in_quote = False
        arg_start = start
        for k in range(start, end):
            ch = src[k]
            if in_quote:
                if ch == QUOTE:
                    in_quote = False
                continue
            if ch == QUOTE:
                in_quote = True
            elif ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
            elif ch == "," and depth == 0:
                spans.append((arg_start, k))
                arg_start = k + 1
        spans.append((arg_start, end))
        return spans

    def _parse_call(self, name: str, open_index: int, close_index: int) -> TemplateNode:
        role = resolve_role(name)
        if role is not None:
            # 角色函数的全部内容作为一个参数
            spans = [(open_index + 1, close_index)]
        else:
            spans = self._split_arguments(open_index + 1, close_index)
        args = tuple(self._parse_argument(s, e) for s, e in spans)
        return TemplateNode(kind=NodeKind.CALL, value=name, role=role, children=args)

    def _parse_argument(self, start: int, end: int) -> TemplateNode:
        nodes = self.parse_range(start, end, _Mode.ARGS)
        significant = [
            n for n in nodes if not (n.kind == NodeKind.TEXT and not n.value.strip())
        ]
        if len(significant) == 1 and significant[0].kind == NodeKind.QUOTED:
            # 独占参数的字符串字面量
            literal = significant[0]
            nodes = [TemplateNode(kind=NodeKind.STRING, children=literal.children)]
        return sequence_node(nodes)
