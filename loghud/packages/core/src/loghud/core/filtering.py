"""关键字过滤与命中拆分

过滤作用于原始 payload（raw），而不是渲染后的文本；
命中拆分作用于渲染后的行，供展示层加粗/下划线。
"""

from collections.abc import Iterable

from .models.event import LogEvent


def filter_messages(messages: Iterable[LogEvent], keyword: str) -> list[LogEvent]:
    """按关键字过滤（大小写不敏感），关键字为空时返回全部"""
    if not keyword:
        return list(messages)
    needle = keyword.casefold()
    return [m for m in messages if needle in m.raw.casefold()]


def split_keyword(text: str, keyword: str) -> tuple[str, str, str] | None:
    """在 text 中查找关键字的首次出现（与 filter_messages 相同的 casefold 匹配）

    Returns:
        (命中前, 命中文本, 命中后)；关键字为空或未命中时返回 None
    """
    needle = keyword.casefold()
    if not needle:
        return None

    # casefold 可能改变长度（ß -> ss），记录每个折叠字符对应的原文位置
    folded: list[str] = []
    origins: list[int] = []
    for index, char in enumerate(text):
        for folded_char in char.casefold():
            folded.append(folded_char)
            origins.append(index)

    pos = "".join(folded).find(needle)
    if pos < 0:
        return None
    start = origins[pos]
    end = origins[pos + len(needle) - 1] + 1
    return text[:start], text[start:end], text[end:]
