"""面板诊断日志配置测试

测试内容：
1. 诊断日志写入指定流（默认 stderr），不占用 stdout
2. json 格式输出可解析的结构化记录
3. 日志级别来自参数或 LOGHUD_LOG_LEVEL
4. websockets 库日志仅在 DEBUG 时放行
"""

import io
import json
import logging

import pytest
import structlog
from loghud.panel.logging_config import NOISY_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch):
    """还原 root logger 与 structlog 全局配置"""
    monkeypatch.delenv("LOGHUD_LOG_FORMAT", raising=False)
    monkeypatch.delenv("LOGHUD_LOG_LEVEL", raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    library_levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, library_level in library_levels.items():
        logging.getLogger(name).setLevel(library_level)
    structlog.reset_defaults()


class TestSetupLogging:
    def test_json_records_on_stream(self, capsys):
        stream = io.StringIO()
        setup_logging(log_format="json", log_level="INFO", stream=stream)

        structlog.get_logger("loghud.test").info("channel_opened", url="ws://h/events/app1")

        record = json.loads(stream.getvalue().strip())
        assert record["event"] == "channel_opened"
        assert record["level"] == "info"
        assert record["url"] == "ws://h/events/app1"
        assert capsys.readouterr().out == ""

    def test_level_filters_records(self):
        stream = io.StringIO()
        setup_logging(log_format="json", log_level="WARNING", stream=stream)

        structlog.get_logger("loghud.test").info("channel_opened")

        assert stream.getvalue() == ""
        assert logging.getLogger().level == logging.WARNING

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOGHUD_LOG_LEVEL", "debug")
        setup_logging(stream=io.StringIO())
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back(self):
        setup_logging(log_level="loud", stream=io.StringIO())
        assert logging.getLogger().level == logging.WARNING

    def test_single_root_handler(self):
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())
        assert len(logging.getLogger().handlers) == 1

    def test_dev_format_without_tty_has_no_colors(self):
        stream = io.StringIO()
        setup_logging(log_format="dev", log_level="INFO", stream=stream)

        structlog.get_logger("loghud.test").warning("channel_faulted", failures=2)

        output = stream.getvalue()
        assert "channel_faulted" in output
        assert "\x1b[" not in output

    def test_library_loggers_quiet_unless_debug(self):
        setup_logging(log_level="INFO", stream=io.StringIO())
        assert logging.getLogger("websockets").level == logging.WARNING

        setup_logging(log_level="DEBUG", stream=io.StringIO())
        assert logging.getLogger("websockets").level == logging.DEBUG
