"""CLI command for dumping stored markers as CSV on standard output."""

import asyncio
import sys
from typing import TYPE_CHECKING, Annotated

import typer

if TYPE_CHECKING:
    from shapeyourcity.lib.exporter import ResponseField


def dump(
    fields: Annotated[
        list[str] | None,
        typer.Argument(
            help="Response field mappings as NAME REGEX pairs, eg: your_comment '^Your Comment'",
            show_default=False,
        ),
    ] = None,
    database_file: Annotated[
        str | None,
        typer.Option("--database-file", help="SQLite data file path (default: DATABASE_FILE or data.db)"),
    ] = None,
) -> None:
    """Write stored markers as CSV, oldest first, with one column per response field."""
    from shapeyourcity.core.config import ConfigError, get_settings
    from shapeyourcity.lib.exporter import parse_response_fields

    settings = get_settings()
    database_file = database_file or settings.database_file

    try:
        response_fields = parse_response_fields(fields or [])
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    asyncio.run(_dump_impl(database_file, response_fields))


async def _dump_impl(database_file: str, response_fields: "list[ResponseField]") -> None:
    """Async implementation of the dump command."""
    from sqlalchemy.exc import SQLAlchemyError

    from shapeyourcity.core.config import sqlite_url
    from shapeyourcity.core.database import create_schema, dispose_engine, get_session_factory, init_engine
    from shapeyourcity.services.export_service import dump_markers
    from shapeyourcity.services.marker_store import MarkerStore, StoreError

    init_engine(sqlite_url(database_file))
    try:
        await create_schema()
        store = MarkerStore(get_session_factory())
        await dump_markers(store, response_fields, sys.stdout)
    except (SQLAlchemyError, StoreError) as e:
        typer.echo(f"Error: dumping data: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()
