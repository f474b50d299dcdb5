"""Shared test fixtures for the SQLite store, settings, and sample markers."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from shapeyourcity.core.config import Settings, sqlite_url
from shapeyourcity.core.database import create_schema
from shapeyourcity.schemas.marker import Marker, MarkerResponse
from shapeyourcity.services.marker_store import MarkerStore


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Test application settings."""
    return Settings(
        _env_file=None,
        database_file=str(tmp_path / "test.db"),
        log_level="WARNING",
    )


@pytest.fixture
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Create a file-backed async SQLite engine with the schema in place."""
    engine = create_async_engine(sqlite_url(str(tmp_path / "store.db")), echo=False)
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
def marker_store(session_factory: async_sessionmaker[AsyncSession]) -> MarkerStore:
    """Marker store backed by the test database."""
    return MarkerStore(session_factory)


@pytest.fixture
def sample_marker() -> Marker:
    """An editable marker with one text and one file response."""
    return Marker(
        id=5,
        user="userx",
        created_at=datetime(2020, 5, 28, 18, 22, 40, tzinfo=UTC),
        address="1234 S Hi Ln, Halifax, NS, B3K 1N2, Canada",
        category="Better Cycling",
        latitude="44.6501359",
        longitude="-63.5900193",
        url="https://maps.test.local/the-map/#marker-5",
        response_url="https://maps.test.local/responses/5.json",
        editable=True,
        responses=[
            MarkerResponse(
                mode="comment_mode",
                question_type="EssayQuestion",
                question="What change would you like to see on the street?",
                answer=b"more bikes, fewer cars",
            ),
            MarkerResponse(
                mode="comment_mode",
                question_type="FileQuestion",
                question="How would you like the street to look?",
                answer=b'{"url":"http://test.local/file.jpg","filename":"IMG_1337.JPG"}',
            ),
        ],
    )
