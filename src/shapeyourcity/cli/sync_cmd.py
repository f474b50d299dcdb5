"""CLI command for syncing a remote map into the local store."""

import asyncio
from typing import Annotated

import typer
from loguru import logger


def sync(
    database_file: Annotated[
        str | None,
        typer.Option("--database-file", help="SQLite data file path (default: DATABASE_FILE or data.db)"),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option(
            "--base-url",
            help="Map URL, eg https://www.shapeyourcityhalifax.ca/peninsula-south-complete-streets/maps/peninsula-south-complete-streets",
        ),
    ] = None,
) -> None:
    """Fetch new and still-editable markers from a map and store them."""
    from shapeyourcity.core.config import get_settings

    settings = get_settings()
    database_file = database_file or settings.database_file
    base_url = base_url or settings.base_url
    if not base_url:
        typer.echo("Error: need --base-url", err=True)
        raise typer.Exit(code=1)

    asyncio.run(_sync_impl(database_file, base_url, settings.http_timeout, settings.user_agent))


async def _sync_impl(database_file: str, base_url: str, timeout: float, user_agent: str) -> None:
    """Async implementation of the sync command."""
    from sqlalchemy.exc import SQLAlchemyError

    from shapeyourcity.core.config import ConfigError, sqlite_url
    from shapeyourcity.core.database import create_schema, dispose_engine, get_session_factory, init_engine
    from shapeyourcity.lib.map_client import MapClient
    from shapeyourcity.services.marker_store import MarkerStore
    from shapeyourcity.services.sync_service import SyncError, sync_markers

    try:
        client = MapClient(base_url, timeout=timeout, user_agent=user_agent)
    except ConfigError as e:
        typer.echo(f"Error: creating map client: {e}", err=True)
        raise typer.Exit(code=1) from e

    init_engine(sqlite_url(database_file))
    try:
        await create_schema()
        store = MarkerStore(get_session_factory())

        logger.info("Syncing {} into {}", client.base_url, database_file)
        result = await sync_markers(store, client)

        typer.echo(
            f"Synced {len(result.synced_ids)} marker(s), "
            f"skipped {len(result.skipped_ids)} finalized marker(s), "
            f"{len(result.unlisted_ids)} stored marker(s) no longer listed"
        )
    except SQLAlchemyError as e:
        typer.echo(f"Error: initializing store: {e}", err=True)
        raise typer.Exit(code=1) from e
    except SyncError as e:
        typer.echo(f"Error: syncing: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await client.close()
        await dispose_engine()
