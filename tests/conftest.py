"""Shared pytest fixtures configured to use SQLite in-memory for unit tests."""

import logging
from uuid import uuid4

import pytest

from smartnote.config import Settings
from smartnote.core.repositories import (
    CategoryRepository,
    NoteRepository,
    TagRepository,
    UserRepository,
    VersionRepository,
)
from smartnote.core.schemas import NoteCreate
from smartnote.database import Database

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def test_settings():
    """Settings for tests using SQLite in-memory DB."""
    return Settings(database_url=TEST_DATABASE_URL, debug=True, log_dir=None)


@pytest.fixture
async def database(test_settings):
    """Fresh in-memory database with the full schema, per test.

    StaticPool keeps one connection, so each Database gets its own private
    memory DB and tests never see each other's rows.
    """
    db = Database.from_settings(test_settings)
    await db.create_tables()
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def user_repo(database):
    return UserRepository(database)


@pytest.fixture
def category_repo(database):
    return CategoryRepository(database)


@pytest.fixture
async def alice(user_repo):
    """First test user. Repository tests only need an opaque hash."""
    return await user_repo.create(f"alice_{uuid4().hex[:8]}", "hash-alice", full_name="Alice Example")


@pytest.fixture
async def bob(user_repo):
    """Second test user, used to check isolation."""
    return await user_repo.create(f"bob_{uuid4().hex[:8]}", "hash-bob")


@pytest.fixture
def notes(database, alice):
    return NoteRepository(database, alice.id)


@pytest.fixture
def tags(database, alice):
    return TagRepository(database, alice.id)


@pytest.fixture
def versions(database, alice):
    return VersionRepository(database, alice.id)


@pytest.fixture
def bob_notes(database, bob):
    return NoteRepository(database, bob.id)


@pytest.fixture
def bob_tags(database, bob):
    return TagRepository(database, bob.id)


@pytest.fixture
def bob_versions(database, bob):
    return VersionRepository(database, bob.id)


@pytest.fixture
def make_note(notes):
    """Create a note for alice and return its id."""

    async def _make_note(title="Test Note", content="This is a test note content", **fields):
        return await notes.create(NoteCreate(title=title, content=content, **fields))

    return _make_note


@pytest.fixture
async def test_note(make_note):
    """A single note owned by alice."""
    return await make_note()
