"""Exporter library — flatten stored markers into CSV rows.

Public API:
    - ResponseField / parse_response_fields: question-matching output columns
    - project_markers: one row per marker, oldest first
    - export_columns: header matching project_markers rows
    - write_csv: write rows to a text stream
"""

from shapeyourcity.lib.exporter.csv_writer import write_csv
from shapeyourcity.lib.exporter.projection import (
    MARKER_COLUMNS,
    ResponseField,
    export_columns,
    format_timestamp,
    match_responses,
    parse_response_fields,
    project_markers,
)

__all__ = [
    "MARKER_COLUMNS",
    "ResponseField",
    "export_columns",
    "format_timestamp",
    "match_responses",
    "parse_response_fields",
    "project_markers",
    "write_csv",
]
