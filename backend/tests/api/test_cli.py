"""``flask db`` commands."""

from __future__ import annotations

import asyncio

from idserver.core import extensions
from idserver.uow import SQLAlchemyReadOnlyUnitOfWork


def _passport(passport_id):
    async def _get():
        async with SQLAlchemyReadOnlyUnitOfWork(extensions.session_factory) as uow:
            return await uow.passports.get(passport_id)

    return asyncio.run(_get())


def test_add_passport(app):
    result = app.test_cli_runner().invoke(args=["db", "add-passport", "42", "--id", "9"])

    assert result.exit_code == 0, result.output
    assert "Passport 9 for owner 42 (activated)" in result.output
    passport = _passport(9)
    assert passport.owner_id == 42
    assert passport.activated is True


def test_add_inactive_passport(app):
    result = app.test_cli_runner().invoke(args=["db", "add-passport", "7", "--inactive"])

    assert result.exit_code == 0, result.output
    assert "(inactive)" in result.output


def test_duplicate_passport_fails(app):
    runner = app.test_cli_runner()
    runner.invoke(args=["db", "add-passport", "42", "--id", "9"])

    result = runner.invoke(args=["db", "add-passport", "43", "--id", "9"])

    assert result.exit_code != 0
    assert "Could not add passport" in result.output


def test_drop_all_then_create_all(app):
    runner = app.test_cli_runner()

    dropped = runner.invoke(args=["db", "drop-all", "--yes"])
    created = runner.invoke(args=["db", "create-all"])

    assert dropped.exit_code == 0, dropped.output
    assert created.exit_code == 0, created.output
