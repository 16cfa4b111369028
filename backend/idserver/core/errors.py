"""Error bodies of the server.

Three wire formats are produced here:

* RFC 7807 problem documents for everything that is not protocol traffic
  (malformed authorization requests, unknown routes, storage outages);
* RFC 6749 §5.2 JSON errors for the token endpoint;
* RFC 6750 ``WWW-Authenticate`` challenges for bearer-protected resources.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from idserver.core.logger import ensure_request_id

log = logging.getLogger(__name__)

_STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    415: "unsupported_media_type",
    500: "internal_server_error",
    503: "service_unavailable",
}


def problem(
    status: int, code: str, detail: str, *, details: dict[str, Any] | None = None
) -> Response:
    """
    Render an ``application/problem+json`` response.

    :param status: HTTP status code.
    :param code: Stable machine-readable code (``invalid_client``, ``not_found``...).
    :param detail: Human-readable summary, safe to show to clients.
    :param details: Optional structured payload.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    resp = jsonify(body)
    resp.status_code = status
    resp.mimetype = "application/problem+json"
    return resp


class APIError(Exception):
    """
    Error raised by views and rendered as a problem document.

    :param message: Client-facing description.
    :param status_code: HTTP status (default 400).
    :param code: Machine-readable code (default ``bad_request``).
    :param details: Optional structured payload.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_response(self) -> Response:
        return problem(self.status_code, self.code, self.message, details=self.details or None)


class NotFound(APIError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code="conflict")


# --------------------------------------------------------------------------- #
# OAuth wire formats
# --------------------------------------------------------------------------- #


def oauth_error_response(error: str, description: str, status: int) -> Response:
    """
    Render a token endpoint error (RFC 6749 §5.2).

    :param error: OAuth ``error`` code (``invalid_grant``...).
    :param description: ``error_description`` value.
    :param status: 400, or 401 for ``invalid_client``.
    """
    resp = jsonify({"error": error, "error_description": description})
    resp.status_code = status
    resp.headers["Cache-Control"] = "no-store"
    resp.headers["Pragma"] = "no-cache"
    return resp


def bearer_challenge(realm: str, error: str = "", description: str = "") -> str:
    """Build an RFC 6750 ``WWW-Authenticate`` header value."""
    parts = [f'realm="{realm}"']
    if error:
        parts.append(f'error="{error}"')
        if description:
            parts.append(f'error_description="{description}"')
    return "Bearer " + ", ".join(parts)


# --------------------------------------------------------------------------- #
# Handlers
# --------------------------------------------------------------------------- #


def _logged(resp: Response, label: str, *, exc_info: bool = False) -> Response:
    body = resp.get_json(silent=True) or {}
    level = logging.ERROR if resp.status_code >= 500 else logging.WARNING
    log.log(
        level,
        "%s: code=%s status=%s detail=%s",
        label,
        body.get("code"),
        resp.status_code,
        body.get("detail"),
        extra={"status": resp.status_code},
        exc_info=exc_info,
    )
    return resp


def init_app(app: Flask) -> None:
    """
    Register the problem-document error handlers.

    Service errors go through :meth:`BaseService.translate_exceptions`;
    storage driver errors that escape a unit of work answer 503.
    """
    from idserver.services._shared.base import BaseService
    from idserver.services._shared.errors import ServiceError

    translator = BaseService()

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return _logged(err.to_response(), "APIError")

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = translator.translate_exceptions(err)
        if not isinstance(translated, APIError):  # pragma: no cover - every ServiceError maps
            return handle_unexpected_error(err)
        return handle_api_error(translated)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or code.replace("_", " ").capitalize()).strip()
        return _logged(problem(status, code, detail), "HTTPException")

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        resp = problem(
            HTTPStatus.BAD_REQUEST,
            "invalid_request",
            "Validation failed",
            details={"errors": err.messages},
        )
        return _logged(resp, "ValidationError")

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(err: SQLAlchemyError):
        resp = problem(
            HTTPStatus.SERVICE_UNAVAILABLE,
            "service_unavailable",
            "Service temporarily unavailable",
        )
        return _logged(resp, "SQLAlchemyError", exc_info=True)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        resp = problem(
            HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"
        )
        return _logged(resp, "Unhandled exception", exc_info=True)
