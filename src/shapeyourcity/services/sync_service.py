"""Sync service — reconcile the marker store with a remote map.

Markers stored as no longer editable are final and are never fetched again.
Every other listed marker has its responses fetched and replaces the stored
copy.  Markers missing from the listing are left alone.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from shapeyourcity.lib.map_client import DecodeError, FetchError, MapClient
from shapeyourcity.schemas.marker import Marker
from shapeyourcity.services.marker_store import MarkerStore, StoreError

_SYNC_ERRORS = (FetchError, DecodeError, StoreError)


class SyncError(Exception):
    """Raised when a sync run stops; wraps the underlying error.

    Attributes:
        operation: What the run was doing when it failed.
        marker_id: The marker being processed, when the failure concerns one.
        cause: The original FetchError, DecodeError, or StoreError.
    """

    def __init__(self, operation: str, cause: Exception, marker_id: int | None = None):
        prefix = f"{operation} for marker {marker_id}" if marker_id is not None else operation
        super().__init__(f"{prefix}: {cause}")
        self.operation = operation
        self.marker_id = marker_id
        self.cause = cause


@dataclass
class SyncResult:
    """Outcome of one sync run."""

    synced_ids: list[int] = field(default_factory=list)
    skipped_ids: list[int] = field(default_factory=list)
    unlisted_ids: set[int] = field(default_factory=set)


def unlisted_marker_ids(stored: Iterable[Marker], listed: Iterable[Marker]) -> set[int]:
    """Return ids of stored markers that the remote listing no longer includes."""
    return {m.id for m in stored} - {m.id for m in listed}


async def sync_markers(store: MarkerStore, client: MapClient) -> SyncResult:
    """Run one sync of ``client``'s map into ``store``.

    Markers are processed one at a time in remote listing order.  Each
    marker is committed on its own, so a failure leaves every marker
    processed before it in place.

    Args:
        store: Destination marker store.
        client: Client for the remote map.

    Returns:
        SyncResult listing synced, skipped, and unlisted marker ids.

    Raises:
        SyncError: On the first fetch, decode, or store failure.
    """
    try:
        stored = await store.list_markers()
    except _SYNC_ERRORS as exc:
        raise SyncError("loading stored markers", exc) from exc
    stored_by_id = {m.id: m for m in stored}

    try:
        remote = await client.list_markers()
    except _SYNC_ERRORS as exc:
        raise SyncError("fetching remote markers", exc) from exc

    logger.info("Syncing {} remote markers ({} stored)", len(remote), len(stored_by_id))

    result = SyncResult(unlisted_ids=unlisted_marker_ids(stored, remote))

    for marker in remote:
        known = stored_by_id.get(marker.id)
        if known is not None and not known.editable:
            logger.debug("Skipping finalized marker {}", marker.id)
            result.skipped_ids.append(marker.id)
            continue

        try:
            await client.fill_responses(marker)
        except _SYNC_ERRORS as exc:
            raise SyncError("filling responses", exc, marker_id=marker.id) from exc

        try:
            await store.sync_marker(marker)
        except _SYNC_ERRORS as exc:
            raise SyncError("storing marker", exc, marker_id=marker.id) from exc

        logger.info(
            "Synced marker {} ({} responses, editable={})",
            marker.id,
            len(marker.responses),
            marker.editable,
        )
        result.synced_ids.append(marker.id)

    if result.unlisted_ids:
        logger.info("{} stored markers are no longer listed remotely; keeping them", len(result.unlisted_ids))
    logger.info("Sync complete: {} synced, {} finalized", len(result.synced_ids), len(result.skipped_ids))
    return result
