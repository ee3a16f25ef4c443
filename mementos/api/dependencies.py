#!/usr/bin/env python3
"""
dependencies.py
--------------------
FastAPI dependencies shared by the routers.

Every request gets one SQLAlchemy session from the application's
MementosDB handle; it is committed when the handler returns, before the
response is sent, and rolled back when it raises. A failed commit reaches
the error handlers as a DatabaseError. Authenticated handlers receive an OwnerScope whose
managers only see the caller's records.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Iterator, Optional

# --- Third party imports ---
from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

# --- Local imports ---
from mementos.core.config import Settings
from mementos.core.exceptions import AuthenticationError, PaymentError
from mementos.core.logging_manager import MementosLogger
from mementos.database import MementosDB, OwnerScope
from mementos.database.decorators import as_database_error
from mementos.database.models import User
from mementos.services import AuthProvider, AuthUser, LocalStorage, StripePayments


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> MementosDB:
    return request.app.state.db


def get_logger(request: Request) -> Optional[MementosLogger]:
    return request.app.state.logger


def get_storage(request: Request) -> LocalStorage:
    return request.app.state.storage


def get_payments(request: Request) -> StripePayments:
    payments = request.app.state.payments
    if payments is None:
        raise PaymentError("Payments are not configured")
    return payments


def get_session(db: MementosDB = Depends(get_db)) -> Iterator[Session]:
    """One unit of work per request."""
    try:
        with db.session_scope() as session:
            yield session
    except SQLAlchemyError as e:
        raise as_database_error(e) from e


# Function scope closes the session (and commits) before the response goes out.
# Every handler and dependency must share this one object so they get the
# same cached session.
use_session = Depends(get_session, scope="function")


async def get_raw_body(request: Request) -> bytes:
    """Request body as bytes, for handlers that verify signatures over it."""
    return await request.body()


def get_auth_user(request: Request) -> Optional[AuthUser]:
    provider: AuthProvider = request.app.state.auth
    return provider.current_user(request)


def require_auth_user(auth_user: Optional[AuthUser] = Depends(get_auth_user)) -> AuthUser:
    if auth_user is None:
        raise AuthenticationError("User not authenticated")
    return auth_user


def get_current_user(
    auth_user: AuthUser = Depends(require_auth_user),
    session: Session = use_session,
    db: MementosDB = Depends(get_db),
) -> User:
    """Internal user for the caller, created on first visit."""
    user, _ = db.users(session).sync(auth_user.id, auth_user.primary_email)
    return user


def get_scope(
    user: User = Depends(get_current_user),
    session: Session = use_session,
    db: MementosDB = Depends(get_db),
) -> OwnerScope:
    """Managers bound to the caller's records."""
    return db.scope_for(session, user.id)
