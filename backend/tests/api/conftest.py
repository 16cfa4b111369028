"""Fixtures shared by the endpoint tests."""

from __future__ import annotations

import asyncio

import pytest
from tests.factories import persist
from tests.factories.passport import PassportFactory
from tests.helpers.assertions import redirect_params
from tests.helpers.http import build_url
from tests.helpers.utils import BADGE_ID, OWNER_ID, PRESENCE_PREFIX


@pytest.fixture
def passport(app_session_factory):
    """Activated passport ``5`` owned by ``42``."""
    return asyncio.run(
        persist(app_session_factory, PassportFactory.build(id=BADGE_ID, owner_id=OWNER_ID))
    )


@pytest.fixture
def tap(sync_kv):
    """Record a passport scan the way the reader process does."""

    def _tap(badge_id: int = BADGE_ID, ready: str = "true") -> None:
        sync_kv.set(f"{PRESENCE_PREFIX}{badge_id}", ready)

    return _tap


@pytest.fixture
def authorize(client, passport, tap):
    """Run a successful consent for ``client_id`` and return the redirect query."""

    def _authorize(client_id: str = "dashboard", **params) -> dict[str, str]:
        tap()
        response = client.post(
            build_url(
                "/authorize",
                client_id=client_id,
                response_type="code",
                id=BADGE_ID,
                allow="true",
                **params,
            )
        )
        _, query = redirect_params(response)
        return query

    return _authorize
