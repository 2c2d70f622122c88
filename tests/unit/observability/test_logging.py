"""
kepview: unit tests for observability logging

Purpose
- Validate structured JSON-lines logging and its config wrapper.

What this test file should cover
- JSON line validity and extra field capture.
- Level and sink selection from the ``[observability]`` section.
- Shutdown and handle replacement behavior.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from kepview.observability import (
    LoggingConfig,
    get_active_logger,
    get_active_logging_handle,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging()


def _logger_name() -> str:
    return f"kepview.tests.logging.{uuid4().hex}"


def _read_json_lines(path: Path) -> list[dict[str, object]]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


@pytest.mark.unit
def test_json_lines_include_message_level_and_extra_fields(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            logger_name=logger_name,
            level="DEBUG",
            log_dir=tmp_path,
            log_to_stderr=False,
        )
    )
    logger = logging.getLogger(logger_name)

    logger.debug("parsing %s", "keps/0001.md", extra={"creation_date": date(2018, 4, 15)})
    shutdown_logging(handle)

    assert handle.log_path is not None
    parsed = _read_json_lines(handle.log_path)
    assert len(parsed) == 1
    event = parsed[0]
    assert event["message"] == "parsing keps/0001.md"
    assert event["level"] == "DEBUG"
    assert event["logger"] == logger_name
    assert event["fields"] == {"creation_date": "2018-04-15"}
    assert str(event["timestamp"]).endswith("Z")


@pytest.mark.unit
def test_exceptions_are_serialized(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(logger_name=logger_name, log_dir=tmp_path, log_to_stderr=False)
    )
    logger = logging.getLogger(logger_name)

    try:
        raise ValueError("bad header")
    except ValueError:
        logger.exception("decode failed")
    shutdown_logging(handle)

    assert handle.log_path is not None
    (event,) = _read_json_lines(handle.log_path)
    assert "ValueError: bad header" in str(event["exception"])


@pytest.mark.unit
def test_setup_logging_wrapper_uses_observability_config(tmp_path: Path) -> None:
    logger = setup_logging(
        {"log_level": "INFO", "log_dir": str(tmp_path), "log_to_stderr": False},
        logger_name=_logger_name(),
    )

    logger.debug("hidden")
    logger.info("shown")
    shutdown_logging()

    messages = [event["message"] for event in _read_json_lines(tmp_path / "kepview.jsonl")]
    assert messages == ["shown"]


@pytest.mark.unit
def test_verbose_forces_debug_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    logger = setup_logging(
        {"log_level": "ERROR", "log_dir": "", "log_to_stderr": False},
        verbose=True,
        logger_name=_logger_name(),
    )

    logger.debug("skipping %s", "README.md")
    shutdown_logging()

    line = capsys.readouterr().err.strip()
    assert json.loads(line)["message"] == "skipping README.md"


@pytest.mark.unit
def test_no_sinks_is_silent(capsys: pytest.CaptureFixture[str]) -> None:
    logger = setup_logging({"log_level": "DEBUG", "log_dir": ""}, logger_name=_logger_name())

    logger.warning("nobody hears this")
    shutdown_logging()

    captured = capsys.readouterr()
    assert captured.err == ""
    assert captured.out == ""


@pytest.mark.unit
def test_new_setup_replaces_active_handle(tmp_path: Path) -> None:
    first = setup_structured_logging(
        LoggingConfig(logger_name=_logger_name(), log_dir=tmp_path / "a", log_to_stderr=False)
    )
    second = setup_structured_logging(
        LoggingConfig(logger_name=_logger_name(), log_dir=tmp_path / "b", log_to_stderr=False)
    )

    assert first.is_shutdown
    assert get_active_logging_handle() is second
    assert get_active_logger() is second.logger

    shutdown_logging()
    assert second.is_shutdown
    assert get_active_logging_handle() is None


@pytest.mark.unit
def test_invalid_level_and_filename_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="unsupported logging level"):
        setup_structured_logging(LoggingConfig(logger_name=_logger_name(), level="LOUD"))
    with pytest.raises(ValueError, match="path separators"):
        setup_structured_logging(
            LoggingConfig(
                logger_name=_logger_name(), log_dir=tmp_path, log_filename="nested/x.jsonl"
            )
        )


@pytest.mark.unit
def test_log_to_stderr_key_enables_stderr_sink(capsys: pytest.CaptureFixture[str]) -> None:
    logger = setup_logging(
        {"log_level": "INFO", "log_dir": "", "log_to_stderr": True},
        logger_name=_logger_name(),
    )

    logger.info("walking %s", "keps")
    shutdown_logging()

    captured = capsys.readouterr()
    assert json.loads(captured.err.strip())["message"] == "walking keps"
    assert captured.out == ""
