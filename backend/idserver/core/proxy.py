"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Apply :class:`werkzeug.middleware.proxy_fix.ProxyFix` when enabled.

    Parameters
    ----------
    app: flask.Flask
        Application whose WSGI pipeline should respect upstream proxy headers.

    Notes
    -----
    Controlled by the ``USE_PROXYFIX`` configuration flag (off unless set).
    Only ``X-Forwarded-For`` and ``X-Forwarded-Proto`` are trusted, for a
    single hop, so redirect URLs and logs see the client's scheme and address.
    """
    if app.config.get("USE_PROXYFIX", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)
