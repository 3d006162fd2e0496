"""终端输出 -- 角色到 ANSI 颜色的映射与关键字高亮"""

from loghud.core.filtering import split_keyword
from loghud.core.models import Role
from loghud.template import StyledSegment

RESET = "\x1b[0m"
# 反显，关闭时只恢复反显，保留角色颜色
HIGHLIGHT_ON = "\x1b[7m"
HIGHLIGHT_OFF = "\x1b[27m"

ROLE_ANSI: dict[Role, str] = {
    Role.PRIMARY: "\x1b[1m",
    Role.SECOND: "\x1b[36m",
    Role.WARNING: "\x1b[33m",
    Role.ERROR: "\x1b[31m",
    Role.NOTICE: "\x1b[34m",
    Role.DEBUG: "\x1b[2m",
    Role.NORMAL: "",
}


def _highlight(text: str, keyword: str) -> str:
    parts: list[str] = []
    rest = text
    while (hit := split_keyword(rest, keyword)) is not None:
        before, match, rest = hit
        parts.append(f"{before}{HIGHLIGHT_ON}{match}{HIGHLIGHT_OFF}")
    parts.append(rest)
    return "".join(parts)


def style_segments(
    segments: list[StyledSegment],
    keyword: str = "",
    color: bool = True,
) -> str:
    """将片段拼成一行终端文本

    Args:
        segments: render_segments 的输出
        keyword: 需要高亮的关键字（仅 color=True 时生效）
        color: False 时输出纯文本
    """
    if not color:
        return "".join(segment.text for segment in segments)

    parts: list[str] = []
    for segment in segments:
        text = _highlight(segment.text, keyword)
        style = ROLE_ANSI.get(segment.role, "") if segment.role is not None else ""
        parts.append(f"{style}{text}{RESET}" if style else text)
    return "".join(parts)
