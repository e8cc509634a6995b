"""Property-based tests for logging configuration.

Feature: person-updates
"""

import json
import logging
import tempfile
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest
import structlog
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from person_updates.utils.logging_config import build_processors, configure_logging


def last_json_line(output: str) -> dict:
    lines = [line for line in output.strip().splitlines() if line.strip()]
    return json.loads(lines[-1])


@given(
    person_id=st.text(alphabet="0123456789", min_size=1, max_size=8),
    error_message=st.text(min_size=1, max_size=100),
)
@settings(max_examples=25, suppress_health_check=[HealthCheck.function_scoped_fixture])
def test_refresh_failure_log_has_required_fields(
    capsys: pytest.CaptureFixture, person_id: str, error_message: str
) -> None:
    """Error logs carry timestamp, level, event, and the failing person id."""
    configure_logging(log_level="DEBUG", json_logs=True)
    capsys.readouterr()

    log = structlog.stdlib.get_logger("test_logger")
    log.error("person_refresh_failed", person_id=person_id, error=error_message)

    entry = last_json_line(capsys.readouterr().out)

    datetime.fromisoformat(entry["timestamp"].replace("Z", "+00:00"))
    assert entry["level"] == "error"
    assert entry["event"] == "person_refresh_failed"
    assert entry["person_id"] == person_id
    assert entry["error"] == error_message
    assert "filename" in entry and "lineno" in entry


def test_log_level_filters_lower_levels(capsys: pytest.CaptureFixture) -> None:
    configure_logging(log_level="WARNING", json_logs=True)
    capsys.readouterr()

    log = structlog.stdlib.get_logger("level_test")
    log.info("should_not_appear")
    log.warning("should_appear")

    output = capsys.readouterr().out
    assert "should_not_appear" not in output
    assert "should_appear" in output


def test_console_renderer_when_json_disabled() -> None:
    processors = build_processors(json_logs=False)

    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
    assert isinstance(build_processors(json_logs=True)[-1], structlog.processors.JSONRenderer)


def test_log_file_is_written() -> None:
    with tempfile.TemporaryDirectory() as tmp_dir:
        log_file = Path(tmp_dir) / "logs" / "person_updates.log"
        configure_logging(log_level="INFO", json_logs=True, log_file=str(log_file))
        try:
            structlog.stdlib.get_logger("file_test").info("cursor_saved", synced_through="x")

            assert "cursor_saved" in log_file.read_text()
        finally:
            for handler in list(logging.root.handlers):
                if isinstance(handler, RotatingFileHandler):
                    logging.root.removeHandler(handler)
                    handler.close()
