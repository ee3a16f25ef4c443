"""
conftest.py
-----------
Shared pytest fixtures for Mementos tests.

Provides fixtures for:
- Temporary database setup and teardown
- Users and their owner-scoped managers
- Small sample records (places, events, people)
"""
import os

import pytest
from pathlib import Path
from tempfile import TemporaryDirectory


# ----- Environment Fixtures -----

@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep MEMENTOS_* variables of the calling shell out of Settings."""
    for name in list(os.environ):
        if name.startswith("MEMENTOS_"):
            monkeypatch.delenv(name)


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ----- Test Database Fixtures -----

@pytest.fixture
def test_db_path(tmp_dir):
    """Create temporary test database path."""
    return tmp_dir / "test.db"


@pytest.fixture
def test_db(test_db_path):
    """
    Create test database instance with schema.

    Returns a MementosDB instance with an initialized schema.
    Database is torn down after the test.
    """
    from mementos.database import MementosDB

    db = MementosDB(f"sqlite:///{test_db_path}")
    db.create_schema()

    yield db

    db.dispose()


@pytest.fixture
def db_session(test_db):
    """
    Create a database session for tests.

    Provides a session with automatic rollback after test.
    """
    with test_db.session_scope() as session:
        yield session
        session.rollback()


# ----- User Fixtures -----

@pytest.fixture
def user_manager(db_session):
    """Create UserManager instance for testing."""
    from mementos.database.managers import UserManager
    return UserManager(db_session)


@pytest.fixture
def user(user_manager):
    """The user most tests act as."""
    created, _ = user_manager.sync("user_alice", "alice@example.com")
    return created


@pytest.fixture
def other_user(user_manager):
    """A second user, for isolation tests."""
    created, _ = user_manager.sync("user_bob", "bob@example.com")
    return created


# ----- Manager Fixtures -----

@pytest.fixture
def scope(test_db, db_session, user):
    """Owner-scoped managers for ``user``."""
    return test_db.scope_for(db_session, user.id)


@pytest.fixture
def other_scope(test_db, db_session, other_user):
    """Owner-scoped managers for ``other_user``."""
    return test_db.scope_for(db_session, other_user.id)


@pytest.fixture
def lax_scope(db_session, user):
    """Managers for ``user`` with the place lock disabled."""
    from mementos.database import OwnerScope
    return OwnerScope(db_session, user.id, strict_place_lock=False)


@pytest.fixture
def person_manager(scope):
    return scope.people


@pytest.fixture
def place_manager(scope):
    return scope.places


@pytest.fixture
def event_manager(scope):
    return scope.events


@pytest.fixture
def memory_manager(scope):
    return scope.memories


@pytest.fixture
def attribute_manager(scope):
    return scope.attributes


@pytest.fixture
def association_manager(scope):
    return scope.associations


@pytest.fixture
def reflection_manager(scope):
    return scope.reflections


@pytest.fixture
def collection_manager(scope):
    return scope.collections


# ----- Sample Records -----

@pytest.fixture
def cafe(place_manager):
    """Blue Bottle Cafe in San Francisco."""
    return place_manager.create(
        {"name": "Blue Bottle Cafe", "city": "San Francisco", "country": "USA"}
    )


@pytest.fixture
def office(place_manager):
    return place_manager.create(
        {"name": "HQ", "city": "San Francisco", "country": "USA", "type": "office"}
    )


@pytest.fixture
def lunch(event_manager, cafe):
    """Team Lunch held at the cafe."""
    return event_manager.create({"title": "Team Lunch", "place_id": cafe.id})


@pytest.fixture
def photo(memory_manager):
    """A memory with no event and no place."""
    return memory_manager.create({"title": "Lunch photo"})


@pytest.fixture
def alice(person_manager):
    return person_manager.create({"name": "Alice"})


@pytest.fixture
def bob(person_manager):
    return person_manager.create({"name": "Bob"})
