"""Flatten markers into one row per marker with configurable response fields."""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC

from shapeyourcity.core.config import ConfigError
from shapeyourcity.schemas.marker import Marker

MARKER_COLUMNS = ["id", "url", "created_at", "address", "user", "category", "lat", "lng"]


@dataclass(frozen=True)
class ResponseField:
    """An output column filled from responses whose question matches ``pattern``."""

    name: str
    pattern: re.Pattern[str]

    def matches(self, question: str) -> bool:
        return self.pattern.search(question) is not None


def parse_response_fields(args: Sequence[str]) -> list[ResponseField]:
    """Parse ``[name, regex, name, regex, ...]`` into response fields.

    Args:
        args: Alternating field names and regular expressions.

    Returns:
        Response fields in the given order.

    Raises:
        ConfigError: If the arguments are not in pairs, a name repeats a
            column, or a regex is invalid.
    """
    if len(args) % 2 != 0:
        msg = (
            "response field mappings must be in pairs, eg: "
            "your_comment '^Your Comment' what_should_happen '^What should happen'"
        )
        raise ConfigError(msg)

    fields: list[ResponseField] = []
    for name, expr in zip(args[::2], args[1::2], strict=True):
        if name in MARKER_COLUMNS or any(f.name == name for f in fields):
            msg = f"response field name {name!r} is already a column"
            raise ConfigError(msg)
        try:
            pattern = re.compile(expr)
        except re.error as exc:
            msg = f"invalid pattern {expr!r} for response field {name!r}: {exc}"
            raise ConfigError(msg) from exc
        fields.append(ResponseField(name=name, pattern=pattern))
    return fields


def format_timestamp(marker: Marker) -> str:
    """Render ``created_at`` as an RFC 3339 UTC timestamp."""
    created = marker.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=UTC)
    return created.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def match_responses(marker: Marker, fields: Sequence[ResponseField]) -> dict[str, str]:
    """Map field names to unescaped answers for one marker.

    Each response goes to the first field whose pattern matches its
    question.  A later response matching the same field replaces the
    earlier answer.
    """
    values: dict[str, str] = {}
    for response in marker.responses:
        for f in fields:
            if f.matches(response.question):
                values[f.name] = response.answer_text
                break
    return values


def project_markers(markers: Iterable[Marker], fields: Sequence[ResponseField]) -> list[dict[str, str]]:
    """Build export rows, oldest marker first.

    Returns:
        One dict per marker keyed by ``MARKER_COLUMNS`` and the field names;
        fields without a matching response are empty strings.
    """
    rows: list[dict[str, str]] = []
    for marker in sorted(markers, key=lambda m: m.created_at):
        matched = match_responses(marker, fields)
        row = {
            "id": str(marker.id),
            "url": marker.url,
            "created_at": format_timestamp(marker),
            "address": marker.address,
            "user": marker.user,
            "category": marker.category,
            "lat": marker.latitude,
            "lng": marker.longitude,
        }
        for f in fields:
            row[f.name] = matched.get(f.name, "")
        rows.append(row)
    return rows


def export_columns(fields: Sequence[ResponseField]) -> list[str]:
    """Header for rows built by ``project_markers``."""
    return MARKER_COLUMNS + [f.name for f in fields]
