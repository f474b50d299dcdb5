"""Integration tests for syncing a mocked remote map into a real SQLite store."""

import json
from datetime import UTC, datetime

import httpx
import pytest

from shapeyourcity.lib.map_client import MapClient
from shapeyourcity.schemas.marker import Marker, MarkerResponse
from shapeyourcity.services.sync_service import SyncError, sync_markers

_BASE_URL = "https://maps.test.local/the-map"
_FILE_ANSWER = b'{"url": "http:\\/\\/test.local\\/caf\\u00e9.jpg", "filename": "IMG_1337.JPG", "size": 1E3}'


def _remote_marker(marker_id: int, *, editable: bool) -> dict:
    return {
        "address": f"{marker_id} South Park St, Halifax, NS",
        "category": {"name": "Space to Move"},
        "created_at": f"2020-05-{marker_id:02d}T15:22:40-03:00",
        "editable": editable,
        "id": marker_id,
        "lat": "44.642074",
        "lng": "-63.5801552",
        "response_url": f"/responses/{marker_id}.json",
        "user": {"login": f"user{marker_id}"},
    }


class FakeMap:
    """Serves a marker listing and per-marker responses, recording requested paths."""

    def __init__(self, markers: list[dict], answers: dict[int, object]) -> None:
        self.markers = markers
        self.answers = answers
        self.paths: list[str] = []
        self.status: dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.paths.append(path)
        if path in self.status:
            return httpx.Response(self.status[path])
        if path == "/the-map/markers":
            return httpx.Response(200, json={"markers": self.markers})
        marker_id = int(path.removeprefix("/responses/").removesuffix(".json"))
        essay = {
            "answer": self.answers[marker_id],
            "mode": "comment_mode",
            "question": "  Your Comment  ",
            "question_type": "EssayQuestion",
        }
        body = (
            b'{"marker_response": [\n  '
            + json.dumps(essay).encode()
            + b',\n  {"answer": '
            + _FILE_ANSWER
            + b' , "mode": "comment_mode", "question": "Photo", "question_type": "FileQuestion"}\n]}'
        )
        return httpx.Response(200, content=body)

    def client(self) -> MapClient:
        return MapClient(_BASE_URL, http_client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)))


class TestSyncEndToEnd:
    """Sync runs against a mocked map and a file-backed store."""

    @pytest.mark.asyncio
    async def test_editable_marker_stored_with_trimmed_answers(self, marker_store):
        remote = FakeMap([_remote_marker(5, editable=True)], answers={5: "  more bikes  "})

        result = await sync_markers(marker_store, remote.client())

        assert result.synced_ids == [5]
        [stored] = await marker_store.list_markers()
        assert stored.url == "https://maps.test.local/the-map/#marker-5"
        assert stored.created_at == datetime(2020, 5, 5, 18, 22, 40, tzinfo=UTC)
        assert stored.user == "user5"
        assert stored.editable is True
        assert [(r.question, r.answer) for r in stored.responses] == [
            ("Your Comment", b"more bikes"),
            ("Photo", _FILE_ANSWER),
        ]

    @pytest.mark.asyncio
    async def test_finalized_marker_responses_not_requested(self, marker_store):
        stored_marker = Marker(
            id=10,
            user="user10",
            created_at=datetime(2020, 5, 10, 18, 22, 40, tzinfo=UTC),
            address="original address",
            category="Space to Move",
            latitude="44.642074",
            longitude="-63.5801552",
            url="https://maps.test.local/the-map/#marker-10",
            editable=False,
            responses=[
                MarkerResponse(mode="comment_mode", question_type="EssayQuestion", question="q", answer=b"final"),
            ],
        )
        await marker_store.sync_marker(stored_marker)
        before = await marker_store.list_markers()
        remote = FakeMap(
            [_remote_marker(10, editable=True), _remote_marker(11, editable=False)],
            answers={10: "changed", 11: "eleven"},
        )

        result = await sync_markers(marker_store, remote.client())

        assert "/responses/10.json" not in remote.paths
        assert remote.paths == ["/the-map/markers", "/responses/11.json"]
        assert result.skipped_ids == [10]
        assert result.synced_ids == [11]
        after = await marker_store.list_markers()
        assert after[0] == before[0]
        assert [r.answer for r in after[1].responses][0] == b"eleven"

    @pytest.mark.asyncio
    async def test_second_sync_of_finalized_markers_changes_nothing(self, marker_store):
        remote = FakeMap(
            [_remote_marker(1, editable=False), _remote_marker(2, editable=False)],
            answers={1: "one", 2: "two"},
        )

        await sync_markers(marker_store, remote.client())
        first = await marker_store.list_markers()
        remote.paths.clear()
        await sync_markers(marker_store, remote.client())

        assert remote.paths == ["/the-map/markers"]
        assert await marker_store.list_markers() == first

    @pytest.mark.asyncio
    async def test_editable_marker_refreshed_each_run(self, marker_store):
        remote = FakeMap([_remote_marker(3, editable=True)], answers={3: "draft"})
        await sync_markers(marker_store, remote.client())

        remote.markers = [_remote_marker(3, editable=False)]
        remote.answers[3] = "final"
        await sync_markers(marker_store, remote.client())

        [stored] = await marker_store.list_markers()
        assert stored.editable is False
        assert [r.answer for r in stored.responses] == [
            b"final",
            _FILE_ANSWER,
        ]

    @pytest.mark.asyncio
    async def test_http_error_mid_run_keeps_committed_markers(self, marker_store):
        remote = FakeMap(
            [_remote_marker(1, editable=True), _remote_marker(2, editable=True)],
            answers={1: "one", 2: "two"},
        )
        remote.status["/responses/2.json"] = 503

        with pytest.raises(SyncError, match="HTTP 503"):
            await sync_markers(marker_store, remote.client())

        assert [m.id for m in await marker_store.list_markers()] == [1]

    @pytest.mark.asyncio
    async def test_non_string_answer_aborts_run(self, marker_store):
        remote = FakeMap([_remote_marker(4, editable=True)], answers={4: 42})

        with pytest.raises(SyncError, match="filling responses for marker 4"):
            await sync_markers(marker_store, remote.client())

        assert await marker_store.list_markers() == []
