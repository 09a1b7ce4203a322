import logging

import pytest

from studio.core.logger import CONSOLE_FORMAT, ColoredFormatter, ToolLoggingHandler


@pytest.mark.parametrize("logger_name, tool", [
    ("studio.toolcalling.dockerhub.service", "dockerhub"),
    ("studio.toolcalling.dockerhub", "dockerhub"),
    ("studio.toolcalling.common.rest", None),
    ("studio.chat.client", None),
    ("httpx", None),
])
def test_tool_name_from_logger(logger_name, tool):
    assert ToolLoggingHandler.get_tool_name_from_logger(logger_name) == tool


def _record(name, msg, level=logging.INFO):
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


def test_tool_logs_go_to_their_own_file(tmp_path):
    handler = ToolLoggingHandler(str(tmp_path), "studio.log")
    try:
        handler.emit(_record("studio.toolcalling.dockerhub.service", "search nginx"))
        handler.emit(_record("studio.chat.client", "call model"))
    finally:
        handler.close()

    assert "search nginx" in (tmp_path / "dockerhub.log").read_text(encoding="utf-8")
    main_log = (tmp_path / "studio.log").read_text(encoding="utf-8")
    assert "call model" in main_log
    assert "search nginx" not in main_log


def test_colored_formatter_leaves_record_untouched():
    record = _record("studio", "hi", logging.WARNING)
    text = ColoredFormatter(CONSOLE_FORMAT).format(record)
    assert "\033[33mWARNING" in text
    assert record.levelname == "WARNING"
