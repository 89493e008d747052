from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from backend.app.core import config
from backend.app.core.logging import JsonFormatter, configure_logging


@pytest.fixture(autouse=True)
def reset_settings_cache() -> None:
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


def test_configure_logging_is_idempotent(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    log_file = tmp_path / "nested" / "moodbuddy.log"
    monkeypatch.setenv("LOG_FILE", str(log_file))
    monkeypatch.chdir(tmp_path)

    root_logger = logging.getLogger()
    original_handlers = list(root_logger.handlers)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    try:
        configure_logging()
        file_handlers = [
            handler
            for handler in root_logger.handlers
            if isinstance(handler, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert Path(file_handlers[0].baseFilename) == log_file

        handler_count = len(root_logger.handlers)
        configure_logging()
        assert len(root_logger.handlers) == handler_count
    finally:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        for handler in original_handlers:
            root_logger.addHandler(handler)


def _record(msg: str = "mood saved") -> logging.LogRecord:
    return logging.LogRecord(
        name="moodbuddy.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=7,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_includes_request_and_user() -> None:
    record = _record()
    record.request_id = "req-1"
    record.user_id = "user-42"
    record.status = 201

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "mood saved"
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "moodbuddy.test"
    assert payload["request_id"] == "req-1"
    assert payload["user_id"] == "user-42"
    assert payload["status"] == 201
    assert "path" not in payload


def test_json_formatter_merges_extra_fields_and_keeps_emoji() -> None:
    record = _record("chose 😊")
    record.extra_fields = {"kind": "suggestions"}

    output = JsonFormatter().format(record)

    assert "😊" in output
    assert json.loads(output)["kind"] == "suggestions"
