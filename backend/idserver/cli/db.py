"""Flask CLI commands for schema management and passport provisioning."""

from __future__ import annotations

import asyncio
import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from idserver.core import extensions
from idserver.core.database import create_all, drop_all
from idserver.models.passport import Passport
from idserver.services._shared.errors import ServiceError
from idserver.uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


def _engine():
    if extensions.engine is None:  # pragma: no cover - init_app always runs first
        raise click.ClickException("Database engine is not initialised.")
    return extensions.engine


def _ensure_non_production() -> None:
    """Abort destructive commands when running in production."""
    config = current_app.config
    is_debug = bool(config.get("DEBUG"))
    is_testing = bool(config.get("TESTING"))
    if not is_debug and not is_testing:
        raise click.UsageError(
            "The 'flask db drop-all' command is restricted to non-production environments."
        )


async def _add_passport(owner_id: int, activated: bool, passport_id: int | None) -> Passport:
    if extensions.session_factory is None:
        raise click.ClickException("Database session factory is not initialised.")
    async with SQLAlchemyUnitOfWork(extensions.session_factory) as uow:
        passport = Passport(owner_id=owner_id, activated=activated)
        if passport_id is not None:
            passport.id = passport_id
        return await uow.passports.add(passport)


@click.group("db")
def db_cli() -> None:
    """Database schema and provisioning commands."""


@db_cli.command("create-all")
@with_appcontext
def create_all_command() -> None:
    """Create every table that does not exist yet."""
    asyncio.run(create_all(_engine()))
    LOGGER.info("db.created")
    click.echo("Tables created.")


@db_cli.command("drop-all")
@click.option("--yes", is_flag=True, help="Skip the destructive confirmation prompt.")
@with_appcontext
def drop_all_command(yes: bool) -> None:
    """Drop every table (development only)."""
    _ensure_non_production()
    if not yes:
        click.confirm("This will DROP all tables. Continue?", abort=True)
    asyncio.run(drop_all(_engine()))
    LOGGER.info("db.dropped")
    click.echo("Tables dropped.")


@db_cli.command("add-passport")
@click.argument("owner_id", type=int)
@click.option("--id", "passport_id", type=int, default=None, help="Explicit badge id.")
@click.option("--inactive", is_flag=True, help="Provision without activating.")
@with_appcontext
def add_passport_command(owner_id: int, passport_id: int | None, inactive: bool) -> None:
    """Provision a passport (badge) for OWNER_ID."""
    try:
        passport = asyncio.run(_add_passport(owner_id, not inactive, passport_id))
    except ServiceError as exc:
        raise click.ClickException(f"Could not add passport: {exc}") from exc
    state = "inactive" if inactive else "activated"
    click.echo(f"Passport {passport.id} for owner {owner_id} ({state}).")
