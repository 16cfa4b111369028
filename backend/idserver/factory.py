"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from idserver.core.config import BaseConfig, get_config
from idserver.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    overrides: dict | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    ``overrides`` are applied last, after the config object and the instance
    file; the test suite uses them to point the app at throwaway storage.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)
    if overrides:
        app.config.update(overrides)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Proxy headers if running behind a reverse proxy (optional module)
    from idserver.core import proxy

    proxy.init_app(app)

    from idserver.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from idserver.core import cors

    cors.init_app(app)

    from idserver.api import init_app as init_api

    init_api(app)

    from idserver.core import errors

    errors.init_app(app)

    from idserver import cli as app_cli

    app_cli.init_app(app)

    return app
