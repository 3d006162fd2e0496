"""模板变换函数与 JSON 取值

所有函数都不抛异常：参数不合法时返回 None，由引擎降级为字面文本。
"""

import json
from typing import Any

DEFAULT_MAX_EXTRA = ".."


def apply_max(text: str, length: int, extra: str = DEFAULT_MAX_EXTRA) -> str:
    """截断到 length 个字符

    - 不超过 length 时原样返回
    - length 不大于 extra 长度时直接截断，不加后缀
    - 否则截断到 length - len(extra) 并追加 extra
    """
    if len(text) <= length:
        return text
    if length <= len(extra):
        return text[: max(0, length)]
    return text[: length - len(extra)] + extra


def apply_default(value: str, fallback: str) -> str:
    """value 去空白后为空时使用 fallback"""
    stripped = value.strip()
    return stripped if stripped else fallback


def evaluate_transform(name: str, args: list[str]) -> str | None:
    """执行变换函数

    Args:
        name: max 或 default
        args: 已求值的参数文本

    Returns:
        结果文本；参数个数或长度参数不合法时返回 None
    """
    if name == "max":
        if len(args) not in (2, 3):
            return None
        # 长度只接受 ASCII 数字
        if not (args[1].isascii() and args[1].isdigit()):
            return None
        length = int(args[1])
        extra = args[2] if len(args) == 3 else DEFAULT_MAX_EXTRA
        return apply_max(args[0], length, extra)

    if name == "default":
        if len(args) != 2:
            return None
        return apply_default(args[0], args[1])

    return None


def stringify_value(value: Any) -> str:
    """JSON 值转展示文本

    字符串原样；布尔为 true/false；整数为十进制；整数值浮点去掉小数部分；
    null 为空串；对象/数组为紧凑 JSON。
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    # bool 是 int 的子类，需先判断
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def extract_key_path(payload: Any, key_path: str) -> str:
    """按点分路径从 JSON 对象中取值

    数字段可索引数组。根不是对象、路径不存在时返回空串。
    """
    if not isinstance(payload, dict) or not key_path:
        return ""
    current: Any = payload
    for part in key_path.split("."):
        if isinstance(current, dict):
            if part not in current:
                return ""
            current = current[part]
        elif isinstance(current, list) and part.isdecimal():
            index = int(part)
            if index >= len(current):
                return ""
            current = current[index]
        else:
            return ""
    return stringify_value(current)


def load_payload(json_payload: str) -> Any:
    """解析 payload，失败时返回 None"""
    try:
        return json.loads(json_payload)
    except (TypeError, ValueError):
        return None
