"""JSON logging to stdout with per-request correlation ids.

Log calls use event-style messages (``token.issued``) and pass context via
``extra``; the keys listed in :data:`EXTRA_KEYS` end up in the JSON payload.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

EXTRA_KEYS = ("endpoint", "elapsed_ms", "client_id", "owner_id", "reason", "status")

# Kept at WARNING unless LOG_LEVEL is DEBUG.
QUIET_LOGGERS = ("aiosqlite", "asyncio", "werkzeug")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """
    Return the correlation id of the current request.

    Taken from ``X-Request-ID`` / ``X-Correlation-ID`` when the caller sent
    one, generated otherwise, and memoized on :data:`flask.g`. Outside a
    request a fresh id is returned on every call.
    """
    if not has_request_context():
        return str(uuid4())
    if "request_id" not in g:
        incoming = next(
            (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None
        )
        g.request_id = incoming or str(uuid4())
    return g.request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Replace the root handlers with a single JSON stdout handler."""
    if isinstance(level, str):
        level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    if level != logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def init_app(app: Flask) -> None:
    """Seed the request id early and echo it on every response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
