"""面板诊断日志配置

面板的 stdout 专用于渲染后的日志行，自身的连接/入库诊断一律经 structlog
写到 stderr：
- LOGHUD_LOG_FORMAT=json 时输出结构化 JSON，便于被采集
- 默认 dev 格式；stderr 不是终端或设置了 NO_COLOR 时不输出颜色
- websockets 库自身的日志只在 DEBUG 级别放行
"""

import logging
import os
import sys
from typing import TextIO

import structlog

DEFAULT_LOG_LEVEL = "WARNING"

# 第三方库 logger，非 DEBUG 时压到 WARNING
NOISY_LOGGERS = ("websockets", "asyncio")


def _diagnostic_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _build_renderer(log_format: str, stream: TextIO) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    colors = stream.isatty() and "NO_COLOR" not in os.environ
    return structlog.dev.ConsoleRenderer(colors=colors)


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """配置 structlog 与标准库 logging 共用一个 stderr handler

    Args:
        log_format: "json" 或 "dev"，默认读 LOGHUD_LOG_FORMAT
        log_level: 日志级别名，默认读 LOGHUD_LOG_LEVEL（WARNING）
        stream: 输出流，默认 sys.stderr
    """
    log_format = log_format or os.environ.get("LOGHUD_LOG_FORMAT", "dev")
    level = _resolve_level(log_level or os.environ.get("LOGHUD_LOG_LEVEL", DEFAULT_LOG_LEVEL))
    stream = stream or sys.stderr

    processors = _diagnostic_processors()
    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_build_renderer(log_format, stream),
            foreign_pre_chain=processors,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    library_level = level if level <= logging.DEBUG else max(level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
