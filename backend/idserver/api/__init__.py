"""HTTP surface: protocol endpoints at the root, resources under ``/api/<version>``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join(*segments: str) -> str:
    path = "/".join(s.strip("/") for s in segments if s.strip("/"))
    return f"/{path}"


def register_blueprint_group(
    app: Flask, *, base_prefix: str, entries: Iterable[tuple[Blueprint, str]]
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` below ``base_prefix``."""
    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=_join(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    from idserver.api.oauth import bp as oauth_bp
    from idserver.api.v1 import API_VERSION as V1
    from idserver.api.v1 import REGISTRY as V1_REGISTRY

    # /authorize, /token
    register_blueprint_group(app, base_prefix="", entries=[(oauth_bp, "")])

    api_base = app.config.get("API_BASE_PREFIX", "/api")
    register_blueprint_group(app, base_prefix=f"{api_base}/{V1}", entries=V1_REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
