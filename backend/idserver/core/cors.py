"""CORS configuration helper for the token endpoint and API resources."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Configure CORS for browser-facing endpoints based on application config.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS`` and ``CORS_MAX_AGE`` settings are
        consulted. When ``CORS_ORIGINS`` is blank or ``"*"`` the policy allows
        any origin but disables credential support.

    Notes
    -----
    ``/authorize`` is navigated to, never fetched, so it is left out.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = len(origins) == 0 or origins == ["*"]
    policy = {"origins": "*" if wildcard else origins}

    CORS(
        app,
        resources={r"/token": policy, r"/api/*": policy},
        supports_credentials=not wildcard,
        expose_headers=["WWW-Authenticate", "X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
