#!/usr/bin/env python3
"""
payments.py
--------------------
Payment collaborator backed by Stripe.

Upgrading works in two steps: the user is sent to a Stripe-hosted
checkout page for the subscription price, and Stripe later calls the
webhook with ``checkout.session.completed``. The webhook carries the
auth identity in ``metadata.userId``; that user is moved to the pro plan.

Webhook events are recorded by id, so a redelivered event is a no-op.
Recording happens in the same unit of work as the plan change, so a
failed delivery leaves nothing behind and can be retried.

Usage:
    payments = StripePayments.from_settings(settings)
    url = payments.create_checkout_session("user_2abc", "alice@example.com")

    event = payments.parse_webhook(body, request.headers["stripe-signature"])
    payments.handle_event(scope.users, event)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
from typing import Any, Dict, Mapping, Optional, Union

# --- Third party imports ---
import stripe

# --- Local imports ---
from mementos.core.config import Settings
from mementos.core.exceptions import NotFoundError, PaymentError, WebhookError
from mementos.core.logging_manager import MementosLogger, safe_logger
from mementos.database.managers import UserManager
from mementos.database.models import Plan

CHECKOUT_COMPLETED = "checkout.session.completed"


class StripePayments:
    """
    Checkout sessions and webhook handling for the pro subscription.

    Attributes:
        price_id: Subscription price offered at checkout
        app_url: Front-end URL used for the success and cancel redirects
    """

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str,
        price_id: str,
        app_url: str,
        logger: Optional[MementosLogger] = None,
    ) -> None:
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self.price_id = price_id
        self.app_url = app_url.rstrip("/")
        self.logger = logger

    @classmethod
    def from_settings(
        cls, settings: Settings, logger: Optional[MementosLogger] = None
    ) -> Optional["StripePayments"]:
        """Build the collaborator, or return None when payments are not configured."""
        if not settings.payments_enabled:
            return None
        return cls(
            settings.stripe_secret_key,
            settings.stripe_webhook_secret,
            settings.stripe_price_id,
            settings.app_url,
            logger=logger,
        )

    def create_checkout_session(self, user_id: str, email: Optional[str]) -> str:
        """
        Start a subscription checkout for a user.

        Args:
            user_id: Auth identity, echoed back in the webhook metadata
            email: Pre-filled customer email

        Returns:
            URL of the hosted checkout page

        Raises:
            PaymentError: If the provider call fails
        """
        params: dict = {
            "line_items": [{"price": self.price_id, "quantity": 1}],
            "mode": "subscription",
            "success_url": f"{self.app_url}/upgrade?success=true",
            "cancel_url": f"{self.app_url}/pricing",
            "metadata": {"userId": user_id},
        }
        if email:
            params["customer_email"] = email

        try:
            session = stripe.checkout.Session.create(api_key=self._secret_key, **params)
        except stripe.StripeError as e:
            safe_logger(self.logger).log_error(
                e, {"operation": "create_checkout_session", "user_id": user_id}
            )
            raise PaymentError("Could not create checkout session") from e

        safe_logger(self.logger).log_operation(
            "checkout_session_created", {"user_id": user_id, "session_id": session.id}
        )
        return session.url

    def parse_webhook(
        self, payload: Union[bytes, str], signature: Optional[str]
    ) -> Dict[str, Any]:
        """
        Verify and decode a webhook delivery.

        The signature is checked against the raw body; the verified body
        is decoded to a plain mapping.

        Raises:
            WebhookError: If the payload is malformed or the signature invalid
            PaymentError: If no webhook secret is configured
        """
        if not self._webhook_secret:
            raise PaymentError("Webhook secret is not configured")
        if not signature:
            raise WebhookError("Missing webhook signature")
        if isinstance(payload, bytes):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as e:
                raise WebhookError("Malformed webhook payload") from e

        try:
            stripe.WebhookSignature.verify_header(
                payload,
                signature,
                self._webhook_secret,
                tolerance=stripe.Webhook.DEFAULT_TOLERANCE,
            )
        except stripe.SignatureVerificationError as e:
            safe_logger(self.logger).log_warning(
                "Webhook signature verification failed", {"error": str(e)}
            )
            raise WebhookError("Invalid webhook signature") from e

        try:
            event = json.loads(payload)
        except ValueError as e:
            raise WebhookError("Malformed webhook payload") from e
        if not isinstance(event, dict):
            raise WebhookError("Malformed webhook payload")
        return event

    def handle_event(self, users: UserManager, event: Mapping[str, Any]) -> bool:
        """
        Apply a verified webhook event.

        Returns:
            True if the event was processed, False if it was a redelivery

        Raises:
            WebhookError: If a completed checkout lacks a known user identity
        """
        return handle_payment_event(users, event, self.logger)


def handle_payment_event(
    users: UserManager,
    event: Mapping[str, Any],
    logger: Optional[MementosLogger] = None,
) -> bool:
    """Record a payment event and upgrade the user on completed checkout."""
    log = safe_logger(logger)
    event_id = event.get("id")
    event_type = event.get("type")
    if not event_id or not event_type:
        raise WebhookError("Webhook event lacks an id or type")

    if not users.record_webhook_event(event_id, event_type):
        log.log_info("Webhook event already processed", {"event_id": event_id})
        return False

    if event_type == CHECKOUT_COMPLETED:
        session = (event.get("data") or {}).get("object") or {}
        metadata = session.get("metadata") or {}
        external_id = metadata.get("userId")
        if not external_id:
            raise WebhookError("Invalid metadata")

        try:
            users.set_plan(external_id, Plan.PRO)
        except NotFoundError as e:
            raise WebhookError(f"Unknown user in webhook metadata: {external_id}") from e

        log.log_operation("plan_upgraded", {"external_id": external_id, "event_id": event_id})
    else:
        log.log_debug("webhook_event_ignored", {"event_id": event_id, "type": event_type})

    return True
