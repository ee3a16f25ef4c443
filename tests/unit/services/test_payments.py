"""
test_payments.py
----------------
Unit tests for StripePayments and payment event handling.
"""
import hashlib
import hmac
import json
import time
import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import stripe

from mementos.core.config import Settings
from mementos.core.exceptions import PaymentError, WebhookError
from mementos.core.logging_manager import MementosLogger
from mementos.database.models import Plan
from mementos.services import StripePayments, handle_payment_event

WEBHOOK_SECRET = "whsec_test"


@pytest.fixture
def payments():
    return StripePayments(
        "sk_test_123", WEBHOOK_SECRET, "price_pro", "http://app.test/",
        logger=MagicMock(spec=MementosLogger),
    )


def sign(payload: str, secret: str = WEBHOOK_SECRET, timestamp=None) -> str:
    """Build a Stripe-Signature header for a payload."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    digest = hmac.new(
        secret.encode("utf-8"), f"{timestamp}.{payload}".encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={digest}"


def checkout_event(event_id="evt_1", user_id="user_alice"):
    metadata = {"userId": user_id} if user_id else {}
    return {
        "id": event_id,
        "type": "checkout.session.completed",
        "data": {"object": {"id": "cs_1", "metadata": metadata}},
    }


class TestFromSettings:

    def test_disabled_without_keys(self):
        assert StripePayments.from_settings(Settings()) is None

    def test_enabled(self):
        settings = Settings(stripe_secret_key="sk", stripe_price_id="price_1")
        assert StripePayments.from_settings(settings).price_id == "price_1"


class TestCheckout:

    def test_creates_subscription_session(self, payments):
        session = SimpleNamespace(id="cs_1", url="https://checkout.stripe.test/cs_1")
        with patch.object(stripe.checkout.Session, "create", return_value=session) as create:
            url = payments.create_checkout_session("user_alice", "alice@example.com")

        assert url == "https://checkout.stripe.test/cs_1"
        kwargs = create.call_args.kwargs
        assert kwargs["api_key"] == "sk_test_123"
        assert kwargs["mode"] == "subscription"
        assert kwargs["line_items"] == [{"price": "price_pro", "quantity": 1}]
        assert kwargs["metadata"] == {"userId": "user_alice"}
        assert kwargs["customer_email"] == "alice@example.com"
        assert kwargs["success_url"] == "http://app.test/upgrade?success=true"
        assert kwargs["cancel_url"] == "http://app.test/pricing"

    def test_no_email(self, payments):
        session = SimpleNamespace(id="cs_1", url="u")
        with patch.object(stripe.checkout.Session, "create", return_value=session) as create:
            payments.create_checkout_session("user_alice", None)
        assert "customer_email" not in create.call_args.kwargs

    def test_provider_failure(self, payments):
        with patch.object(
            stripe.checkout.Session, "create", side_effect=stripe.StripeError("down")
        ):
            with pytest.raises(PaymentError, match="checkout session"):
                payments.create_checkout_session("user_alice", None)
        payments.logger.log_error.assert_called_once()


class TestParseWebhook:

    def test_valid_signature(self, payments):
        payload = json.dumps(checkout_event())
        event = payments.parse_webhook(payload.encode("utf-8"), sign(payload))
        assert event["id"] == "evt_1"

    def test_missing_signature(self, payments):
        with pytest.raises(WebhookError, match="Missing"):
            payments.parse_webhook(b"{}", None)

    def test_wrong_secret(self, payments):
        payload = json.dumps(checkout_event())
        with pytest.raises(WebhookError, match="Invalid webhook signature"):
            payments.parse_webhook(payload, sign(payload, secret="whsec_other"))

    def test_stale_timestamp(self, payments):
        payload = json.dumps(checkout_event())
        header = sign(payload, timestamp=int(time.time()) - 3600)
        with pytest.raises(WebhookError, match="signature"):
            payments.parse_webhook(payload, header)

    def test_malformed_payload(self, payments):
        payload = "not json"
        with pytest.raises(WebhookError, match="Malformed"):
            payments.parse_webhook(payload, sign(payload))

    def test_no_webhook_secret(self):
        payments = StripePayments("sk", None, "price", "http://app.test")
        with pytest.raises(PaymentError):
            payments.parse_webhook(b"{}", "t=1,v1=x")


class TestHandlePaymentEvent:

    def test_upgrades_user(self, user_manager, user):
        assert handle_payment_event(user_manager, checkout_event()) is True
        assert user.plan is Plan.PRO

    def test_redelivery_is_noop(self, user_manager, user):
        handle_payment_event(user_manager, checkout_event())
        user_manager.set_plan("user_alice", Plan.FREE)

        assert handle_payment_event(user_manager, checkout_event()) is False
        assert user.plan is Plan.FREE

    def test_missing_user_id(self, user_manager, user):
        with pytest.raises(WebhookError, match="Invalid metadata"):
            handle_payment_event(user_manager, checkout_event(user_id=None))
        assert user.plan is Plan.FREE

    def test_unknown_user(self, user_manager):
        with pytest.raises(WebhookError, match="Unknown user"):
            handle_payment_event(user_manager, checkout_event(user_id="user_ghost"))

    def test_other_events_recorded_but_ignored(self, user_manager, user):
        event = {"id": "evt_9", "type": "invoice.paid", "data": {"object": {}}}
        assert handle_payment_event(user_manager, event) is True
        assert user.plan is Plan.FREE
        assert user_manager.record_webhook_event("evt_9", "invoice.paid") is False

    def test_event_without_id(self, user_manager):
        with pytest.raises(WebhookError):
            handle_payment_event(user_manager, {"type": "checkout.session.completed"})

    def test_method_delegates(self, payments, user_manager, user):
        assert payments.handle_event(user_manager, checkout_event()) is True
        payments.logger.log_operation.assert_called_with(
            "plan_upgraded", {"external_id": "user_alice", "event_id": "evt_1"}
        )
