"""
External collaborators: authentication, object storage and payments.
"""
from .auth import AuthProvider, AuthUser, HeaderAuthProvider
from .payments import StripePayments, handle_payment_event
from .storage import LocalStorage, StorageBackend

__all__ = [
    "AuthProvider",
    "AuthUser",
    "HeaderAuthProvider",
    "LocalStorage",
    "StorageBackend",
    "StripePayments",
    "handle_payment_event",
]
