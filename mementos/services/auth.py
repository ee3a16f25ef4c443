#!/usr/bin/env python3
"""
auth.py
--------------------
Authentication collaborator.

Identity is established upstream (an auth proxy or hosted identity
service); this module only reads the resulting identity off a request.
The default provider trusts two headers set by the proxy:

    X-Auth-User-Id:    user_2abc
    X-Auth-User-Email: alice@example.com[, alice@work.example]
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

# --- Third party imports ---
from starlette.requests import Request


@dataclass(frozen=True)
class AuthUser:
    """Identity issued by the auth provider."""

    id: str
    email_addresses: List[str] = field(default_factory=list)

    @property
    def primary_email(self) -> Optional[str]:
        return self.email_addresses[0] if self.email_addresses else None


class AuthProvider(Protocol):
    """Anything that can tell who sent a request."""

    def current_user(self, request: Request) -> Optional[AuthUser]:
        ...


class HeaderAuthProvider:
    """Reads the identity from headers set by an upstream auth proxy."""

    def __init__(
        self,
        id_header: str = "X-Auth-User-Id",
        email_header: str = "X-Auth-User-Email",
    ) -> None:
        self.id_header = id_header
        self.email_header = email_header

    def current_user(self, request: Request) -> Optional[AuthUser]:
        user_id = (request.headers.get(self.id_header) or "").strip()
        if not user_id:
            return None

        raw_emails = request.headers.get(self.email_header) or ""
        emails = [e.strip() for e in raw_emails.split(",") if e.strip()]
        return AuthUser(id=user_id, email_addresses=emails)
