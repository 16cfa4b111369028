"""Shared API helpers: service wiring, bearer protection and response utilities."""

from __future__ import annotations

import functools
import inspect
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from idserver.core import extensions
from idserver.core.errors import bearer_challenge
from idserver.infra.redis.redis_presence_store import RedisPresenceStore
from idserver.infra.sqlalchemy.grant_code_authorizer import SQLAlchemyCodeAuthorizer
from idserver.infra.strategy import build_token_issuer
from idserver.services._shared.errors import InsufficientScope, TokenError
from idserver.services.consent.service import (
    ConsentGate,
    InteractiveConsentGate,
    PresenceConsentGate,
    VacantConsentGate,
)
from idserver.services.oauth.dto import Grant
from idserver.services.oauth.service import AuthorizationFlowService

F = TypeVar("F", bound=Callable[..., Any])


# ------------------------------ Service wiring -------------------------------


def build_flow_service(gate: ConsentGate) -> AuthorizationFlowService:
    """Compose the flow service for the current app around ``gate``."""

    cfg = current_app.config
    registry = extensions.get_registry()
    session_factory = extensions.session_factory
    issuer = build_token_issuer(
        extensions.token_strategy,
        registry=registry,
        session_factory=session_factory,
        ttl=timedelta(days=int(cfg.get("TOKEN_TTL_DAYS", 30))),
    )
    return AuthorizationFlowService(
        registry=registry,
        gate=gate,
        authorizer=SQLAlchemyCodeAuthorizer(session_factory=session_factory),
        issuer=issuer,
        code_ttl=timedelta(minutes=int(cfg.get("CODE_TTL_MINUTES", 10))),
        session_factory=session_factory,
    )


def interactive_flow() -> AuthorizationFlowService:
    login_url = current_app.config.get("LOGIN_URL") or ""
    return build_flow_service(InteractiveConsentGate(login_url))


@asynccontextmanager
async def presence_flow() -> AsyncIterator[AuthorizationFlowService]:
    """Yield a presence-gated flow service; the Redis client lives for the request only."""

    kv = extensions.open_kv()
    try:
        store = RedisPresenceStore(kv, prefix=current_app.config.get("PRESENCE_KEY_PREFIX", ""))
        gate = PresenceConsentGate(store, session_factory=extensions.session_factory)
        yield build_flow_service(gate)
    finally:
        await kv.aclose()


def vacant_flow() -> AuthorizationFlowService:
    """Flow service for steps that never solicit consent (token exchange, resource checks)."""
    return build_flow_service(VacantConsentGate())


# ------------------------------ Bearer protection ----------------------------


def bearer_error_response(err: TokenError | InsufficientScope) -> Response:
    """401/403 JSON body with the matching ``WWW-Authenticate`` challenge."""

    realm = current_app.config.get("RESOURCE_REALM", "id")
    status = 403 if isinstance(err, InsufficientScope) else 401
    body: dict[str, Any] = {"error": err.error or "unauthorized", "error_description": str(err)}
    response = jsonify(body)
    response.status_code = status
    response.headers["WWW-Authenticate"] = bearer_challenge(realm, err.error, str(err))
    return response


def current_grant() -> Grant:
    """Return the grant recovered by :func:`require_oauth` for this request."""

    return g.oauth_grant


def require_oauth(*scopes: str) -> Callable[[F], F]:
    """Protect an async view with a bearer token.

    When ``scopes`` are given the token must grant at least one of them.
    The recovered :class:`Grant` is available through :func:`current_grant`.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any):
            service = vacant_flow()
            try:
                g.oauth_grant = await service.check_resource(
                    request.headers.get("Authorization"), scopes
                )
            except (TokenError, InsufficientScope) as err:
                current_app.logger.info(
                    "resource.rejected", extra={"reason": type(err).__name__}
                )
                return bearer_error_response(err)
            return await func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


# ------------------------------ Responses ------------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def _log_elapsed(start: float) -> None:
    elapsed_ms = (time.perf_counter() - start) * 1000
    request_endpoint = getattr(request, "endpoint", None)
    current_app.logger.debug(
        "request.elapsed",
        extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
    )


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any):
            start = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                _log_elapsed(start)

        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            _log_elapsed(start)

    return wrapper  # type: ignore[return-value]
