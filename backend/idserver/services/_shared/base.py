# idserver/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from http import HTTPStatus

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from idserver.core import errors as api_errors
from idserver.services._shared.errors import (
    ClientNotRegistered,
    ConfigurationError,
    ConflictError,
    InsufficientScope,
    NotFoundError,
    OAuthError,
    ServiceError,
    StorageUnavailable,
    TokenError,
)
from idserver.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class BaseService:
    """
    Shared plumbing of the services and the SQLAlchemy adapters.

    Each use case opens its own unit of work from :attr:`session_factory`
    (injected, or the one configured by :func:`idserver.core.extensions.init_app`).
    Time comes from an injectable clock so expiry is testable.
    """

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock or utc_now

    # -------------------------- UoW helpers ---------------------------------

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is not None:
            return self._session_factory
        from idserver.core import extensions

        if extensions.session_factory is None:
            raise ConfigurationError("Database is not configured")
        return extensions.session_factory

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork(self.session_factory)

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(self.session_factory)

    def now_utc(self) -> datetime:
        return self._clock()

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Turn a :class:`ServiceError` into the :class:`APIError` rendered for it.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, StorageUnavailable):
            # → 503 Service Unavailable
            return api_errors.APIError(
                message=str(exc),
                status_code=HTTPStatus.SERVICE_UNAVAILABLE,
                code="service_unavailable",
            )

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, ConfigurationError):
            return api_errors.APIError(
                message="Server misconfigured",
                status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
                code="internal_server_error",
            )

        if isinstance(exc, (TokenError, ClientNotRegistered)):
            # → 401 Unauthorized
            return api_errors.APIError(
                message=str(exc),
                status_code=HTTPStatus.UNAUTHORIZED,
                code=exc.error or "unauthorized",
            )

        if isinstance(exc, InsufficientScope):
            return api_errors.APIError(
                message=str(exc),
                status_code=HTTPStatus.FORBIDDEN,
                code=exc.error,
            )

        if isinstance(exc, OAuthError):
            return api_errors.APIError(message=str(exc), status_code=400, code=exc.error)

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
