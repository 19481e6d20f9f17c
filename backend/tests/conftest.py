"""
SpeciesBoard Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession for service unit tests
    ├── database: Fresh in-memory SQLite Database handle with tables created
    ├── db_session: AsyncSession bound to that database
    ├── test_client: HTTPX AsyncClient talking to create_app(database)
    ├── sample_image_bytes / sample_png_bytes: Small image payloads
    └── add_photo: Helper inserting a photo row with a chosen upload_date
"""

import os

# Override settings for testing BEFORE any speciesboard imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["MAX_UPLOAD_SIZE"] = str(1024 * 1024)

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from speciesboard.database import Database
from speciesboard.models.photo import Photo
from speciesboard.models.player import Player  # noqa: F401  registers the players table


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_not_found(mock_db_session):
            mock_db_session.scalar = AsyncMock(return_value=None)
            ...
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def database():
    """
    In-memory SQLite database with the players and photos tables.

    StaticPool keeps a single connection so every session in the test sees
    the same in-memory database.
    """
    db = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient routed straight into the FastAPI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from speciesboard.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_png_bytes():
    """PNG signature followed by an IHDR chunk header."""
    return b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01'


@pytest.fixture
def add_photo(database, sample_image_bytes):
    """
    Inserts a photo directly, bypassing the upload endpoint.

    Usage:
        await add_photo("alice", "owl", day=3)
    """

    async def _add(login, species, day=1, location="Forest", image=None):
        async with database.session() as session:
            session.add(
                Photo(
                    login=login,
                    location=location,
                    species=species,
                    image=image or sample_image_bytes,
                    upload_date=datetime(2024, 5, day, 12, 0, tzinfo=timezone.utc),
                )
            )
            await session.commit()

    return _add
