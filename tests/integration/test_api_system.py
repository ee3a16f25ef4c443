"""
Integration tests for account, billing, upload and health endpoints.
"""
import hashlib
import hmac
import json
import time
from unittest.mock import patch
from urllib.parse import urlsplit

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from mementos.api import create_app
from mementos.client import ApiClient, ApiError
from mementos.services import StripePayments

WEBHOOK_SECRET = "whsec_test"


def sign(payload: str) -> str:
    timestamp = int(time.time())
    digest = hmac.new(
        WEBHOOK_SECRET.encode("utf-8"), f"{timestamp}.{payload}".encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={digest}"


def locked_database():
    return OperationalError("COMMIT", {}, Exception("database is locked"))


def checkout_event(user_id="user_alice"):
    return {
        "id": "evt_1",
        "type": "checkout.session.completed",
        "data": {"object": {"id": "cs_1", "metadata": {"userId": user_id}}},
    }


class TestAccount:

    def test_sync_anonymous(self, anonymous_client):
        assert anonymous_client.get("/api/auth").json() == {"isSynced": False}

    def test_sync_creates_default_collection(self, client):
        assert client.get("/api/auth").json() == {"isSynced": True}
        assert client.get("/api/auth").json() == {"isSynced": True}

        collections = client.get("/api/collections").json()
        assert len(collections) == 1

    def test_plan(self, client, photo):
        assert client.get("/api/user/plan").json() == {
            "plan": "free",
            "quota_limit": 100,
            "memory_count": 1,
        }

    def test_checkout_without_payments_is_502(self, client):
        response = client.get("/api/create-checkout-session")
        assert response.status_code == 502
        assert response.json() == {"error": "Payments are not configured"}

    def test_connection(self, anonymous_client):
        assert anonymous_client.get("/api/test-connection").json() == {
            "success": True,
            "message": "Successfully connected to database",
        }


class TestStripeWebhook:

    @pytest.fixture
    def paid_client(self, settings, test_db, auth_headers):
        payments = StripePayments("sk_test_123", WEBHOOK_SECRET, "price_pro", "http://app.test")
        app = create_app(settings=settings, db=test_db, payments=payments)
        with TestClient(app, headers=auth_headers) as test_client:
            yield test_client
        app.state.logger.close()

    def post_event(self, client, event, signature=None):
        payload = json.dumps(event)
        return client.post(
            "/api/webhooks/stripe",
            content=payload,
            headers={
                "stripe-signature": signature or sign(payload),
                "content-type": "application/json",
            },
        )

    def test_checkout_completed_upgrades_plan(self, paid_client):
        paid_client.get("/api/auth")

        response = self.post_event(paid_client, checkout_event())

        assert response.status_code == 200
        assert response.json() == {"received": True, "processed": True}
        assert paid_client.get("/api/user/plan").json()["plan"] == "pro"

    def test_replayed_event_is_ignored(self, paid_client):
        paid_client.get("/api/auth")
        self.post_event(paid_client, checkout_event())

        response = self.post_event(paid_client, checkout_event())

        assert response.json() == {"received": True, "processed": False}

    def test_bad_signature_is_400(self, paid_client):
        response = self.post_event(paid_client, checkout_event(), signature="t=1,v1=bad")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid webhook signature"}

    def test_unknown_user_is_400(self, paid_client):
        response = self.post_event(paid_client, checkout_event(user_id="user_ghost"))
        assert response.status_code == 400

    def test_failed_commit_is_not_acknowledged(self, paid_client):
        paid_client.get("/api/auth")

        with patch.object(Session, "commit", side_effect=locked_database()):
            response = self.post_event(paid_client, checkout_event())

        assert response.status_code == 500
        assert paid_client.get("/api/user/plan").json()["plan"] == "free"
        assert self.post_event(paid_client, checkout_event()).json()["processed"] is True


class TestUploads:

    def test_multipart_upload(self, client):
        response = client.post(
            "/api/uploads", files={"file": ("beach.jpg", b"jpegbytes", "image/jpeg")}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["media_type"] == "photo"
        assert body["media_size"] == 9
        assert body["url"].startswith("http://testserver/api/uploads/")

        served = client.get(f"/api/uploads/{body['key']}")
        assert served.content == b"jpegbytes"

    def test_upload_too_large_is_422(self, client):
        response = client.post(
            "/api/uploads", files={"file": ("big.bin", b"x" * 2048, "application/octet-stream")}
        )
        assert response.status_code == 422

    def test_presigned_upload(self, client):
        presigned = client.post("/api/uploads/presign", json={
            "file_name": "notes.pdf",
            "content_type": "application/pdf",
            "content_length": 4,
        }).json()

        target = urlsplit(presigned["upload_url"])
        response = client.put(
            f"{target.path}?{target.query}",
            content=b"%PDF",
            headers={"content-type": "application/pdf"},
        )

        assert response.status_code == 200
        assert response.json()["url"] == presigned["url"]
        assert client.get(f"/api/uploads/{presigned['key']}").content == b"%PDF"

    def test_presigned_upload_rejects_other_content_type(self, client):
        presigned = client.post("/api/uploads/presign", json={
            "file_name": "notes.pdf",
            "content_type": "application/pdf",
            "content_length": 4,
        }).json()

        target = urlsplit(presigned["upload_url"])
        response = client.put(
            f"{target.path}?{target.query}",
            content=b"%PDF",
            headers={"content-type": "text/plain"},
        )

        assert response.status_code == 401

    def test_missing_object_is_404(self, client):
        assert client.get("/api/uploads/abc_missing.txt").status_code == 404


class TestApiClientRoundTrip:

    def test_client_against_app(self, client):
        api = ApiClient(http=client)

        assert api.sync() is True
        place = api.create("places", {"name": "Cafe", "city": "Lisbon", "country": "Portugal"})
        memory = api.create("memories", {"title": "Coffee"})
        memory = api.set_memory_place(memory["id"], place["id"])
        assert memory["place_id"] == place["id"]

        reflection = api.add_reflection(memory["id"], "Nice", "Good coffee")
        assert api.get("memories", memory["id"])["reflections"][0]["id"] == reflection["id"]

        api.delete("memories", memory["id"])
        with pytest.raises(ApiError) as exc_info:
            api.get("memories", memory["id"])
        assert exc_info.value.status_code == 404
        assert api.plan()["memory_count"] == 0
