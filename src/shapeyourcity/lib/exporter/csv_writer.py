"""CSV export writer for projected marker rows."""

import csv
from collections.abc import Iterable
from typing import TextIO


def write_csv(
    out: TextIO,
    records: Iterable[dict[str, str]],
    *,
    columns: list[str],
) -> int:
    """Write marker rows as CSV to a text stream.

    Values are written as-is; the export is meant to round-trip coordinates
    and answers exactly.

    Args:
        out: Destination stream, eg ``sys.stdout`` or an open file.
        records: Row dicts keyed by column name.
        columns: Column names, in output order.

    Returns:
        Number of records written.
    """
    writer = csv.DictWriter(out, fieldnames=columns, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()

    count = 0
    for record in records:
        writer.writerow(record)
        count += 1

    return count
