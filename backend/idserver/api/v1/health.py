"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from idserver import __version__
from idserver.api.deps import json_response, timing
from idserver.core import extensions

bp = Blueprint("health", __name__)


async def _check_db() -> str:
    if extensions.engine is None:
        return "fail"
    try:
        async with extensions.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        return "fail"
    return "ok"


async def _check_kv() -> str:
    kv = extensions.open_kv()
    try:
        await kv.ping()
    except RedisError:
        current_app.logger.exception("healthcheck.kv_error")
        return "fail"
    finally:
        await kv.aclose()
    return "ok"


@bp.get("/health")
@timing
async def healthcheck():
    """Return application, database and key-value store health information."""

    db_status = await _check_db()
    kv_status = await _check_kv()
    status = "ok" if db_status == kv_status == "ok" else "degraded"
    version = current_app.config.get("APP_VERSION", __version__)
    payload = {"status": status, "db": db_status, "kv": kv_status, "version": version}
    return json_response(payload, status=200 if status == "ok" else 503)
