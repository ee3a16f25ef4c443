"""
conftest.py
-----------
Fixtures for HTTP integration tests.

The application runs against the temporary database from the root
conftest; requests carry the identity headers an auth proxy would set.
"""
import pytest
from fastapi.testclient import TestClient

from mementos.api import create_app
from mementos.core.config import Settings

ALICE_HEADERS = {"X-Auth-User-Id": "user_alice", "X-Auth-User-Email": "alice@example.com"}
BOB_HEADERS = {"X-Auth-User-Id": "user_bob", "X-Auth-User-Email": "bob@example.com"}


@pytest.fixture
def settings(tmp_dir, test_db_path):
    return Settings(
        database_url=f"sqlite:///{test_db_path}",
        log_dir=tmp_dir / "logs",
        storage_dir=tmp_dir / "objects",
        public_base_url="http://testserver",
        signing_secret="test-secret",
        max_upload_bytes=1024,
    )


@pytest.fixture
def app(settings, test_db):
    application = create_app(settings=settings, db=test_db)
    yield application
    application.state.logger.close()


@pytest.fixture
def client(app):
    """Client authenticated as Alice."""
    with TestClient(app, headers=ALICE_HEADERS) as test_client:
        yield test_client


@pytest.fixture
def bob_client(app):
    with TestClient(app, headers=BOB_HEADERS) as test_client:
        yield test_client


@pytest.fixture
def anonymous_client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def cafe(client):
    response = client.post(
        "/api/places",
        json={"name": "Blue Bottle Cafe", "city": "San Francisco", "country": "USA"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def office(client):
    response = client.post(
        "/api/places", json={"name": "HQ", "city": "San Francisco", "country": "USA"}
    )
    return response.json()


@pytest.fixture
def lunch(client, cafe):
    response = client.post("/api/events", json={"title": "Team Lunch", "place_id": cafe["id"]})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def photo(client):
    response = client.post("/api/memories", json={"title": "Lunch photo"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def auth_headers():
    return dict(ALICE_HEADERS)
