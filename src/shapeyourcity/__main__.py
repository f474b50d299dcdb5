"""Allow ``python -m shapeyourcity``."""

from shapeyourcity.cli.app import app

app()
