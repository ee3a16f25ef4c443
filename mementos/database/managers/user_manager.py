#!/usr/bin/env python3
"""
user_manager.py
--------------------
Manages User records and processed payment webhook events.

Users mirror identities from the auth provider one-to-one. A user is
created lazily on first authenticated visit together with a default
"Recent Uploads" collection.

Key Features:
    - Idempotent sync (get-or-create) keyed by the external identity
    - Plan changes driven by payment events
    - Webhook event bookkeeping so redelivered events are skipped

Usage:
    user_mgr = UserManager(session, logger)

    user, created = user_mgr.sync("user_2abc", "alice@example.com")
    user_mgr.set_plan("user_2abc", Plan.PRO)

    if user_mgr.record_webhook_event("evt_123", "checkout.session.completed"):
        ...  # first delivery
"""
from typing import Optional, Tuple, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mementos.core.exceptions import NotFoundError, ValidationError
from mementos.core.logging_manager import MementosLogger, safe_logger
from mementos.core.validators import DataValidator
from mementos.database.decorators import handle_db_errors, log_database_operation
from mementos.database.models import Collection, Plan, User, WebhookEvent
from .base_manager import BaseManager

DEFAULT_COLLECTION_NAME = "Recent Uploads"
DEFAULT_COLLECTION_DETAILS = "A collection of your most recent uploads"


class UserManager(BaseManager):
    """
    Manages User table operations.

    Unlike the entity managers this one is not owner-scoped: it is what
    maps an external identity to the owner id the others use.
    """

    def __init__(
        self,
        session: Session,
        logger: Optional[MementosLogger] = None,
        default_quota_limit: int = 100,
    ):
        super().__init__(session, logger)
        self.default_quota_limit = default_quota_limit

    @handle_db_errors
    @log_database_operation("get_user_by_external_id")
    def get_by_external_id(self, external_id: str) -> Optional[User]:
        """Return the user for an auth identity, or None."""
        clean_id = DataValidator.normalize_string(external_id)
        if not clean_id:
            return None
        return self.session.scalars(
            select(User).where(User.external_id == clean_id)
        ).first()

    @handle_db_errors
    @log_database_operation("get_user")
    def get(self, user_id: int) -> User:
        """Return a user by internal id (NotFoundError when missing)."""
        user = self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    @handle_db_errors
    @log_database_operation("sync_user")
    def sync(self, external_id: str, email: Optional[str] = None) -> Tuple[User, bool]:
        """
        Get or create the user for an auth identity.

        A new user starts on the free plan with the default quota and a
        default collection.

        Args:
            external_id: Identity issued by the auth provider
            email: Primary email address

        Returns:
            (user, created) tuple

        Raises:
            ValidationError: If external_id is empty
        """
        clean_id = DataValidator.require_string(external_id, "external_id")
        existing = self.get_by_external_id(clean_id)
        if existing is not None:
            clean_email = DataValidator.normalize_string(email)
            if clean_email and existing.email != clean_email:
                existing.email = clean_email
            return existing, False

        try:
            with self.session.begin_nested():
                user = User(
                    external_id=clean_id,
                    email=DataValidator.normalize_string(email) or "",
                    plan=Plan.FREE,
                    quota_limit=self.default_quota_limit,
                )
                self.session.add(user)
                self.session.flush()

                collection = Collection(
                    owner_id=user.id,
                    name=DEFAULT_COLLECTION_NAME,
                    details=DEFAULT_COLLECTION_DETAILS,
                )
                self.session.add(collection)
                self.session.flush()
                user.default_collection = collection
        except IntegrityError:
            # Another request synced the same identity first
            user = self.get_by_external_id(clean_id)
            if user is None:
                raise
            return user, False

        safe_logger(self.logger).log_info(
            "User created", {"user_id": user.id, "external_id": clean_id}
        )
        return user, True

    @handle_db_errors
    @log_database_operation("set_user_plan")
    def set_plan(self, external_id: str, plan: Union[str, Plan]) -> User:
        """
        Change a user's plan.

        Raises:
            NotFoundError: If no user has this identity
            ValidationError: If the plan is unknown
        """
        user = self.get_by_external_id(external_id)
        if user is None:
            raise NotFoundError("User", external_id)
        new_plan = DataValidator.normalize_enum(plan, Plan, "plan")
        if new_plan is None:
            raise ValidationError("Required field 'plan' missing or empty")
        user.plan = new_plan
        self._flush()
        return user

    @handle_db_errors
    @log_database_operation("record_webhook_event")
    def record_webhook_event(self, provider_event_id: str, event_type: str) -> bool:
        """
        Remember that a payment event was processed.

        Returns:
            True on first delivery, False if the event was already recorded
        """
        existing = self.session.scalars(
            select(WebhookEvent).where(WebhookEvent.provider_event_id == provider_event_id)
        ).first()
        if existing is not None:
            return False

        try:
            with self.session.begin_nested():
                self.session.add(
                    WebhookEvent(provider_event_id=provider_event_id, event_type=event_type)
                )
        except IntegrityError:
            return False
        return True
