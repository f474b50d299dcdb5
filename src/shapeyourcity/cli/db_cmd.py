"""Database migration CLI commands using Alembic programmatically."""

from typing import TYPE_CHECKING, Annotated

import typer
from loguru import logger

if TYPE_CHECKING:
    from alembic.config import Config

db_app = typer.Typer()

DatabaseFileOption = Annotated[
    str | None,
    typer.Option("--database-file", help="SQLite data file path (default: DATABASE_FILE or data.db)"),
]


def _alembic_config(database_file: str | None) -> "Config":
    """Alembic config targeting ``database_file``, or DATABASE_FILE when omitted."""
    from alembic.config import Config

    from shapeyourcity.core.config import get_settings, sqlite_url

    config = Config("alembic.ini")
    config.attributes["database_url"] = sqlite_url(database_file or get_settings().database_file)
    return config


@db_app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Target revision"),
    database_file: DatabaseFileOption = None,
) -> None:
    """Run database migrations up to the target revision."""
    from alembic import command

    config = _alembic_config(database_file)
    logger.info(f"Upgrading {config.attributes['database_url']} to {revision}")
    command.upgrade(config, revision)
    logger.info("Database upgrade complete")


@db_app.command()
def current(database_file: DatabaseFileOption = None) -> None:
    """Show the current database migration revision."""
    from alembic import command

    command.current(_alembic_config(database_file), verbose=True)
