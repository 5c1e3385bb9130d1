"""
Petstagram Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets its own SQLite file (through aiosqlite) in tmp_path,
       with the schema already created by Database.setup_schema().

Fixture Hierarchy:
    Function-scoped:
    ├── test_settings:   Settings pointing at a fresh SQLite file
    ├── database:        Database with all four tables created
    ├── db_session:      AsyncSession; rolled back unless a test commits
    ├── mock_db_session: AsyncMock session for failure injection
    ├── test_client:     HTTPX AsyncClient bound to an app using `database`
    └── good_feed / bad_json: feed payload fixtures
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# Must run before any petstagram import: the settings singleton and the
# module-level app read the environment at import time
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="petstagram_test_"), "app.db")
)
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from petstagram.config import Settings
from petstagram.database import Database


GOOD_FEED = """
[
  {
    "photoUrl": "/photos/image1.jpg",
    "createdAt": "2020-04-01T12:00:00Z",
    "caption": "Living her best life! #corgi #puppyStyle"
  },
  {
    "photoUrl": "/photos/image2.jpg",
    "createdAt": "2020-03-11T04:44:00Z",
    "caption": "Bath time is best time!"
  },
  {
    "photoUrl": "/photos/image3.jpg",
    "createdAt": "2020-01-03T17:32:00Z",
    "caption": "Not sure if alien or dog..."
  }
]
"""

BAD_JSON = """
[
  "bad json"
]
"""


def make_settings(db_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite+aiosqlite:///{db_path}",
        "log_level": "WARNING",
        "schema_retry_attempts": 1,
        "schema_retry_min_wait": 0,
        "schema_retry_max_wait": 0,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def test_settings(tmp_path):
    return make_settings(tmp_path / "petstagram.db")


@pytest_asyncio.fixture
async def database(test_settings):
    """A Database whose tables exist. Disposed after the test."""
    db = Database(test_settings)
    report = await db.setup_schema()
    assert report.ok
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """
    A plain session. Closing it rolls back anything not committed, so
    tests commit explicitly when a second session must see the data.
    """
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        mock_db_session.flush.side_effect = OperationalError("...", {}, Exception())
        with pytest.raises(StorageError):
            await post_service.create_post(mock_db_session, data)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session


@pytest_asyncio.fixture
async def test_client(test_settings, database):
    """
    HTTPX AsyncClient talking to an app wired to the test database.

    ASGITransport does not run the lifespan; the `database` fixture has
    already created the schema.
    """
    from petstagram.main import create_app

    app = create_app(test_settings, database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def good_feed():
    return GOOD_FEED


@pytest.fixture
def bad_json():
    return BAD_JSON


@pytest.fixture
def settings_factory():
    """Build Settings for another SQLite file: settings_factory(path, **overrides)."""
    return make_settings
