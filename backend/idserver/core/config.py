"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# No-op when .env is missing
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a boolean flag (``1``, ``true``, ``yes``, ``y``, ``on``) from the environment."""
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for the versioned resource API.
    SECRET_KEY: str
        Flask secret. Unused by the OAuth flow but required by extensions.
    DATABASE_URL: str
        Async SQLAlchemy URL (``sqlite+aiosqlite://`` or ``postgresql+asyncpg://``).
    DATABASE_ECHO: bool
        When ``True`` SQLAlchemy logs SQL statements for debugging.
    KV_URL: str
        Redis URL holding presence signals.
    PRESENCE_KEY_PREFIX: str
        Prefix prepended to the badge id to form the presence key.
    TOKEN_STRATEGY: str
        ``"jwt"`` (self-contained ES256 tokens) or ``"db"`` (opaque tokens).
    TOKEN_TTL_DAYS: int
        Access token lifetime.
    CODE_TTL_MINUTES: int
        Authorization code lifetime.
    JWK: str | None
        Private P-256 key as JWK JSON. Takes precedence over the PEM keys.
    JWT_PRIVATE_KEY / JWT_PUBLIC_KEY: str | None
        PEM-encoded key pair used when ``JWK`` is unset.
    ALLOW_EPHEMERAL_KEYS: bool
        Generate a throwaway signing key when none is configured.
    LOGIN_URL: str
        Consent surface the interactive gate redirects to.
    OAUTH_CLIENTS: str | None
        JSON array of registered clients; ``None`` keeps the built-in list.
    RESOURCE_REALM: str
        Realm advertised in ``WWW-Authenticate`` challenges.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    USE_PROXYFIX: bool
        Trust one hop of ``X-Forwarded-*`` headers.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Storage
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./dev.db")
    DATABASE_ECHO = env_bool("DATABASE_ECHO", False)
    KV_URL = os.getenv("KV_URL", "redis://localhost:6379/0")
    PRESENCE_KEY_PREFIX = os.getenv("PRESENCE_KEY_PREFIX", "")

    # Tokens
    TOKEN_STRATEGY = os.getenv("TOKEN_STRATEGY", "jwt")
    TOKEN_TTL_DAYS = env_int("TOKEN_TTL_DAYS", 30)
    CODE_TTL_MINUTES = env_int("CODE_TTL_MINUTES", 10)

    # Signing keys (flask-jwt-extended reads the JWT_* keys)
    JWK = os.getenv("JWK")
    JWT_PRIVATE_KEY = os.getenv("JWT_PRIVATE_KEY")
    JWT_PUBLIC_KEY = os.getenv("JWT_PUBLIC_KEY")
    JWT_ALGORITHM = "ES256"
    JWT_ENCODE_ISSUER = "id"
    JWT_DECODE_ISSUER = "id"
    JWT_ENCODE_NBF = False
    ALLOW_EPHEMERAL_KEYS = False

    # OAuth
    LOGIN_URL = os.getenv("LOGIN_URL", "https://id.purduehackers.com/authorize")
    OAUTH_CLIENTS = os.getenv("OAUTH_CLIENTS")
    RESOURCE_REALM = os.getenv("RESOURCE_REALM", "id")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging, CORS & proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", False)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and falls back to an ephemeral signing key
    when none is configured.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    ALLOW_EPHEMERAL_KEYS = True
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses a local SQLite file unless ``TEST_DATABASE_URL`` is set; the test
      suite overrides it per test.
    """

    TESTING = True
    DEBUG = False
    DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test.db")
    ALLOW_EPHEMERAL_KEYS = True
    PROPAGATE_EXCEPTIONS = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    A signing key must be configured; startup fails otherwise.
    """

    DEBUG = False
    DATABASE_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    ALLOW_EPHEMERAL_KEYS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
