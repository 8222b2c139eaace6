"""Tests for sales_tiers.utils.logging.configure_logging."""

from __future__ import annotations

import json
import logging

import pytest

from sales_tiers.config import LoggingConfig
from sales_tiers.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_console_only_when_no_log_file():
    configure_logging(LoggingConfig(level="warning", log_file=""))
    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], logging.StreamHandler)


def test_file_handler_writes_plain_lines(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_file)))
    logging.getLogger("sales_tiers.test").info("classified %d practices", 3)
    for handler in logging.getLogger().handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "[INFO] sales_tiers.test: classified 3 practices" in text


def test_json_lines_include_extra_fields(tmp_path):
    log_file = tmp_path / "run.jsonl"
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))
    logging.getLogger("sales_tiers.test").info("loaded", extra={"source": "sales.xlsx"})
    for handler in logging.getLogger().handlers:
        handler.flush()

    payload = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert payload["level"] == "INFO"
    assert payload["logger"] == "sales_tiers.test"
    assert payload["msg"] == "loaded"
    assert payload["source"] == "sales.xlsx"
    assert "args" not in payload
    assert "levelno" not in payload
