"""CLI 入口模块 -- python -m loghud.panel <command>

支持的命令：
  watch                         按环境变量配置连接，逐行输出新日志
  render <template> <json> [id] 渲染单条 payload 并输出
"""

import asyncio
import os
import sys

from loghud.core.filtering import filter_messages
from loghud.core.store import LogStore
from loghud.template import TemplateEngine

from .config import load_panel_config
from .console import style_segments
from .logging_config import setup_logging
from .main import run_panel

USAGE = """用法: python -m loghud.panel <command>
命令:
  watch                         按环境变量配置连接，逐行输出新日志
  render <template> <json> [id] 渲染单条 payload 并输出"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "watch":
        setup_logging()
        try:
            asyncio.run(watch())
        except KeyboardInterrupt:
            print("已停止")
    elif command == "render":
        if len(sys.argv) < 4:
            print("用法: python -m loghud.panel render <template> <json> [id]")
            sys.exit(1)
        event_id = sys.argv[4] if len(sys.argv) > 4 else None
        print(render_payload(sys.argv[2], sys.argv[3], event_id))
    else:
        print(f"未知命令: {command}")
        print("可用命令: watch, render")
        sys.exit(1)


def render_payload(template: str, payload: str, event_id: str | None = None) -> str:
    """按入库规则补齐 id 与时间后渲染单条 payload"""
    event = LogStore().add(payload)
    if event_id:
        event = event.model_copy(update={"id": event_id})
    return TemplateEngine.render_event(template, event)


def _use_color() -> bool:
    return sys.stdout.isatty() and "NO_COLOR" not in os.environ


async def watch() -> None:
    """持续输出新日志，直到被中断"""
    config = load_panel_config()
    color = _use_color()

    async with run_panel(config) as panel:
        for (base_url, path), connection in panel.connections.connections.items():
            print(f"订阅: {connection.url} ({base_url} {path})")
        async for event in panel.follow():
            if not filter_messages([event], config.keyword):
                continue
            segments = panel.render_segments(event)
            print(style_segments(segments, config.keyword, color=color), flush=True)


if __name__ == "__main__":
    main()
