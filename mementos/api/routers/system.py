"""
Account, billing and health endpoints.
"""
# --- Standard library imports ---
from typing import Optional

# --- Third party imports ---
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

# --- Local imports ---
from mementos.core.exceptions import DatabaseError
from mementos.core.logging_manager import MementosLogger, safe_logger
from mementos.database import MementosDB, OwnerScope
from mementos.database.models import User
from mementos.services import AuthUser, StripePayments
from ..dependencies import (
    get_auth_user,
    get_current_user,
    get_db,
    get_logger,
    get_payments,
    get_raw_body,
    get_scope,
    require_auth_user,
    use_session,
)
from ..schemas import CheckoutOut, PlanOut, SyncOut

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/auth", response_model=SyncOut)
def sync_user(
    auth_user: Optional[AuthUser] = Depends(get_auth_user),
    session: Session = use_session,
    db: MementosDB = Depends(get_db),
) -> SyncOut:
    """Create the caller's user record on first visit."""
    if auth_user is None:
        return SyncOut(isSynced=False)
    db.users(session).sync(auth_user.id, auth_user.primary_email)
    return SyncOut(isSynced=True)


@router.get("/user/plan", response_model=PlanOut)
def get_user_plan(
    user: User = Depends(get_current_user),
    scope: OwnerScope = Depends(get_scope),
) -> PlanOut:
    return PlanOut.from_user(user, scope.memories.count())


@router.get("/create-checkout-session", response_model=CheckoutOut)
def create_checkout_session(
    auth_user: AuthUser = Depends(require_auth_user),
    user: User = Depends(get_current_user),
    payments: StripePayments = Depends(get_payments),
) -> CheckoutOut:
    url = payments.create_checkout_session(auth_user.id, auth_user.primary_email or user.email)
    return CheckoutOut(url=url)


@router.post("/webhooks/stripe")
def stripe_webhook(
    request: Request,
    body: bytes = Depends(get_raw_body),
    payments: StripePayments = Depends(get_payments),
    session: Session = use_session,
    db: MementosDB = Depends(get_db),
) -> dict:
    event = payments.parse_webhook(body, request.headers.get("stripe-signature"))
    processed = payments.handle_event(db.users(session), event)
    return {"received": True, "processed": processed}


@router.get("/test-connection")
def test_connection(
    db: MementosDB = Depends(get_db),
    logger: Optional[MementosLogger] = Depends(get_logger),
):
    try:
        db.check_connection()
    except DatabaseError as e:
        safe_logger(logger).log_error(e, {"operation": "test_connection"})
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to connect to database"},
        )
    return {"success": True, "message": "Successfully connected to database"}
