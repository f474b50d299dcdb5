"""Marker store — read and atomically replace persisted markers.

Each operation runs in its own session, so a replace never sees stale
objects from an earlier read.
"""

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from shapeyourcity.models.marker import MarkerRecord, ResponseRecord
from shapeyourcity.schemas.marker import Marker, MarkerResponse


class StoreError(Exception):
    """Raised when a store query or transaction fails."""


def _to_marker(record: MarkerRecord) -> Marker:
    """Convert a loaded MarkerRecord (with responses) to a Marker."""
    return Marker(
        id=record.id,
        user=record.user,
        created_at=record.created_at,
        address=record.address,
        category=record.category,
        latitude=record.lat,
        longitude=record.lng,
        url=record.url,
        editable=record.editable,
        responses=[MarkerResponse.model_validate(r) for r in record.responses],
    )


def _to_record(marker: Marker) -> MarkerRecord:
    """Build an unsaved MarkerRecord, without responses, from a Marker."""
    return MarkerRecord(
        id=marker.id,
        url=marker.url,
        address=marker.address,
        category=marker.category,
        created_at=marker.created_at,
        editable=marker.editable,
        lat=marker.latitude,
        lng=marker.longitude,
        user=marker.user,
    )


class MarkerStore:
    """Persistence for markers and their responses.

    Args:
        session_factory: Factory producing sessions bound to the store's engine.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_markers(self) -> list[Marker]:
        """Return every stored marker with its responses, ordered by marker id.

        Raises:
            StoreError: If the query fails.
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(MarkerRecord).options(selectinload(MarkerRecord.responses)).order_by(MarkerRecord.id)
                )
                return [_to_marker(record) for record in result.scalars().all()]
        except SQLAlchemyError as exc:
            msg = f"Loading stored markers failed: {exc}"
            logger.error(msg)
            raise StoreError(msg) from exc

    async def sync_marker(self, marker: Marker) -> None:
        """Replace the stored copy of ``marker`` and its responses.

        Deletes the old responses, deletes the old marker row, inserts the
        new marker row, then inserts each response, all in one transaction.

        Raises:
            StoreError: If any step fails; nothing is written in that case.
        """
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(delete(ResponseRecord).where(ResponseRecord.marker_id == marker.id))
                await session.execute(delete(MarkerRecord).where(MarkerRecord.id == marker.id))

                session.add(_to_record(marker))
                await session.flush()

                session.add_all(
                    ResponseRecord(
                        marker_id=marker.id,
                        mode=r.mode,
                        question_type=r.question_type,
                        question=r.question,
                        answer=r.answer,
                    )
                    for r in marker.responses
                )
        except SQLAlchemyError as exc:
            msg = f"Storing marker {marker.id} failed: {exc}"
            logger.error(msg)
            raise StoreError(msg) from exc

        logger.debug("Stored marker {} with {} responses", marker.id, len(marker.responses))
