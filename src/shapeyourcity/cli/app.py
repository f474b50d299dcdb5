"""Typer CLI root application."""

from typing import Annotated

import typer

from shapeyourcity.core.config import get_settings
from shapeyourcity.core.logging import setup_logging

app = typer.Typer(name="shapeyourcity", help="Mirror ShapeYourCity map markers into SQLite and dump them as CSV")


@app.callback()
def _main_callback(
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Log to stderr as JSON lines (also enabled by LOG_JSON)"),
    ] = False,
) -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(
        settings.log_level,
        log_dir=settings.log_dir,
        json_logs=json_logs or settings.log_json,
    )


def _register_subcommands() -> None:
    """Register all CLI commands and subcommand groups."""
    from shapeyourcity.cli.db_cmd import db_app
    from shapeyourcity.cli.dump_cmd import dump
    from shapeyourcity.cli.sync_cmd import sync

    app.command("sync")(sync)
    app.command("dump")(dump)
    app.add_typer(db_app, name="db", help="Database migration commands")


_register_subcommands()
