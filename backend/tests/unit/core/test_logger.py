"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from idserver.core.logger import JSONFormatter, configure_logging, ensure_request_id


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="idserver.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="token.issued",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_quiets_chatty_loggers() -> None:
    configure_logging("INFO")

    assert logging.getLogger("aiosqlite").level == logging.WARNING


def test_json_formatter_includes_known_extras() -> None:
    payload = json.loads(
        JSONFormatter().format(
            _record(client_id="dashboard", owner_id="42", request_id="abc", password="x")
        )
    )

    assert payload["message"] == "token.issued"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "abc"
    assert payload["client_id"] == "dashboard"
    assert payload["owner_id"] == "42"
    assert "password" not in payload


def test_ensure_request_id_outside_request_is_random() -> None:
    assert ensure_request_id() != ensure_request_id()
