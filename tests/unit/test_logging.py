from __future__ import annotations

import json
from typing import TYPE_CHECKING

from progressiveforms import logger as package_logger
from progressiveforms.logging import configure_logging, get_logger, session_context
from progressiveforms.settings import Settings

if TYPE_CHECKING:
    from pathlib import Path


def test_stdlib_logger_is_configured(capsys) -> None:
    configure_logging(settings=Settings(log_json=False, log_level="INFO"), force=True)
    logger = get_logger("tests")
    logger.info("hello")

    captured = capsys.readouterr()
    assert "hello" in captured.err.lower()


def test_json_logs_expose_message_key(tmp_path: Path) -> None:
    log_file = tmp_path / "app.log"
    configure_logging(settings=Settings(log_json=True, log_level="INFO", log_file=str(log_file)), force=True)

    with session_context("s1"):
        get_logger("tests.json").info("Form analyzed", extra={"completion_estimate": 40, "session_id": "other"})
    get_logger("tests.json").info("Outside session")

    lines = log_file.read_text(encoding="utf-8").strip().splitlines()
    record = json.loads(lines[-2])
    outside = json.loads(lines[-1])
    assert record["message"] == "Form analyzed"
    assert record["session_id"] == "s1"
    assert record["completion_estimate"] == 40
    assert "extra" not in record
    assert "session_id" not in outside
    assert record["level"] == "info"
    assert "event" not in record

    configure_logging(settings=Settings(log_json=False, log_level="INFO"), force=True)


def test_package_logger_created_on_import() -> None:
    assert callable(getattr(package_logger, "info", None))
