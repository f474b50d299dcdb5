"""Export service — dump stored markers as CSV."""

from collections.abc import Sequence
from typing import TextIO

from loguru import logger

from shapeyourcity.lib.exporter import ResponseField, export_columns, project_markers, write_csv
from shapeyourcity.services.marker_store import MarkerStore


async def dump_markers(store: MarkerStore, fields: Sequence[ResponseField], out: TextIO) -> int:
    """Write every stored marker to ``out`` as CSV, oldest first.

    Args:
        store: Source marker store.
        fields: Response fields to add as columns after the marker columns.
        out: Destination text stream.

    Returns:
        Number of marker rows written.

    Raises:
        StoreError: If loading the stored markers fails.
    """
    markers = await store.list_markers()
    rows = project_markers(markers, fields)
    count = write_csv(out, rows, columns=export_columns(fields))
    logger.info("Dumped {} markers", count)
    return count
