"""Factory Boy definition for :class:`idserver.models.grant.AuthGrant`."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import factory
from idserver.models.grant import AuthGrant
from idserver.services._shared.ports import generate_secret
from tests.factories import BaseFactory


class AuthGrantFactory(BaseFactory):
    class Meta:
        model = AuthGrant

    id = None
    owner_id = factory.Sequence(lambda n: 2000 + n)
    client_id = "dashboard"
    redirect_uri = "https://dash.purduehackers.com/api/callback"
    scope = "user:read"
    until = factory.LazyFunction(lambda: datetime.now(UTC) + timedelta(minutes=10))
    code = factory.LazyFunction(generate_secret)
