"""Unit tests for the marker store."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from shapeyourcity.models.marker import MarkerRecord, ResponseRecord
from shapeyourcity.schemas.marker import Marker, MarkerResponse
from shapeyourcity.services.marker_store import StoreError


def _response(question: str, answer: bytes, question_type: str = "EssayQuestion") -> MarkerResponse:
    return MarkerResponse(mode="comment_mode", question_type=question_type, question=question, answer=answer)


class TestListMarkers:
    """Tests for MarkerStore.list_markers()."""

    @pytest.mark.asyncio
    async def test_empty_store(self, marker_store):
        assert await marker_store.list_markers() == []

    @pytest.mark.asyncio
    async def test_round_trip_preserves_responses(self, marker_store, sample_marker):
        sample_marker.responses.append(_response("Anything else?", b"a &amp; b"))

        await marker_store.sync_marker(sample_marker)
        [stored] = await marker_store.list_markers()

        assert stored.responses == sample_marker.responses
        assert stored.id == sample_marker.id
        assert stored.url == sample_marker.url
        assert stored.user == sample_marker.user
        assert stored.address == sample_marker.address
        assert stored.category == sample_marker.category
        assert stored.latitude == sample_marker.latitude
        assert stored.longitude == sample_marker.longitude
        assert stored.editable is True

    @pytest.mark.asyncio
    async def test_marker_without_responses(self, marker_store, sample_marker):
        sample_marker.responses = []
        await marker_store.sync_marker(sample_marker)

        [stored] = await marker_store.list_markers()

        assert stored.responses == []

    @pytest.mark.asyncio
    async def test_responses_grouped_by_marker(self, marker_store, sample_marker):
        other = sample_marker.model_copy(
            update={"id": 3, "responses": [_response("q", b"three")]},
            deep=True,
        )
        await marker_store.sync_marker(sample_marker)
        await marker_store.sync_marker(other)

        stored = await marker_store.list_markers()

        assert [m.id for m in stored] == [3, 5]
        assert [r.answer for r in stored[0].responses] == [b"three"]
        assert len(stored[1].responses) == 2

    @pytest.mark.asyncio
    async def test_created_at_normalized_to_utc(self, marker_store, sample_marker):
        sample_marker.created_at = datetime(2020, 5, 28, 15, 22, 40, tzinfo=timezone(timedelta(hours=-3)))
        await marker_store.sync_marker(sample_marker)

        [stored] = await marker_store.list_markers()

        assert stored.created_at == datetime(2020, 5, 28, 18, 22, 40, tzinfo=UTC)
        assert stored.created_at.utcoffset() == timedelta(0)


class TestSyncMarker:
    """Tests for MarkerStore.sync_marker()."""

    @pytest.mark.asyncio
    async def test_replaces_marker_and_responses(self, marker_store, sample_marker):
        await marker_store.sync_marker(sample_marker)

        updated = sample_marker.model_copy(
            update={"address": "New address", "editable": False, "responses": [_response("q", b"only")]},
            deep=True,
        )
        await marker_store.sync_marker(updated)

        [stored] = await marker_store.list_markers()
        assert stored.address == "New address"
        assert stored.editable is False
        assert [r.answer for r in stored.responses] == [b"only"]

    @pytest.mark.asyncio
    async def test_repeated_sync_does_not_duplicate_rows(self, marker_store, session_factory, sample_marker):
        for _ in range(3):
            await marker_store.sync_marker(sample_marker)

        async with session_factory() as session:
            marker_count = await session.scalar(select(func.count()).select_from(MarkerRecord))
            response_count = await session.scalar(select(func.count()).select_from(ResponseRecord))

        assert marker_count == 1
        assert response_count == 2

    @pytest.mark.asyncio
    async def test_failed_replace_rolls_back(self, marker_store, sample_marker):
        await marker_store.sync_marker(sample_marker)
        before = await marker_store.list_markers()

        broken = sample_marker.model_copy(update={"address": "changed"}, deep=True)
        broken.responses = [
            _response("ok", b"fine"),
            MarkerResponse.model_construct(mode="m", question_type="EssayQuestion", question="bad", answer=None),
        ]

        with pytest.raises(StoreError, match="marker 5"):
            await marker_store.sync_marker(broken)

        assert await marker_store.list_markers() == before

    @pytest.mark.asyncio
    async def test_failed_first_insert_leaves_nothing(self, marker_store):
        marker = Marker.model_construct(
            id=8,
            user="u",
            created_at=None,
            address="",
            category="",
            latitude="",
            longitude="",
            url="",
            response_url="",
            editable=True,
            responses=[],
        )

        with pytest.raises(StoreError):
            await marker_store.sync_marker(marker)

        assert await marker_store.list_markers() == []
