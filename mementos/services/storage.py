#!/usr/bin/env python3
"""
storage.py
--------------------
Object storage collaborator for uploaded media.

The LocalStorage backend keeps objects in a directory and hands out
HMAC-signed, expiring upload URLs that point back at the HTTP layer, so
clients can upload directly without going through a form post.

Object keys are ``<random-id>_<file name>``; the random prefix keeps
names unguessable and avoids collisions between uploads of the same
file.

Key Features:
    - Proxy uploads (put_object) and signed direct uploads (presign_upload)
    - Upload size limit
    - Signature and expiry verification for direct uploads
    - Keys restricted to a flat namespace inside the storage directory

Usage:
    storage = LocalStorage.from_settings(settings)

    key = storage.generate_key("lunch.jpg")
    url = storage.presign_upload(key, "image/jpeg", 204800)
    # client PUTs the bytes to url; the route calls verify_upload + put_object
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import hashlib
import hmac
import mimetypes
import re
import secrets
import time
from pathlib import Path
from typing import Optional, Protocol, Tuple
from urllib.parse import quote, urlencode

# --- Local imports ---
from mementos.core.config import Settings
from mementos.core.exceptions import (
    AuthenticationError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from mementos.core.logging_manager import MementosLogger, safe_logger

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class StorageBackend(Protocol):
    """Where uploaded media lives."""

    def put_object(self, key: str, data: bytes, content_type: str) -> str:
        ...

    def presign_upload(self, key: str, content_type: str, content_length: int) -> str:
        ...


class LocalStorage:
    """
    Filesystem-backed object storage.

    Attributes:
        root: Directory holding the objects
        public_base_url: Base URL the HTTP layer is reachable at
        max_upload_bytes: Largest accepted object
        expiry_seconds: Lifetime of a signed upload URL
    """

    def __init__(
        self,
        root: Path,
        public_base_url: str,
        signing_secret: str,
        max_upload_bytes: int = 10 * 1024 * 1024,
        expiry_seconds: int = 600,
        logger: Optional[MementosLogger] = None,
    ) -> None:
        self.root = Path(root).expanduser()
        self.public_base_url = public_base_url.rstrip("/")
        self._secret = signing_secret.encode("utf-8")
        self.max_upload_bytes = max_upload_bytes
        self.expiry_seconds = expiry_seconds
        self.logger = logger

    @classmethod
    def from_settings(
        cls, settings: Settings, logger: Optional[MementosLogger] = None
    ) -> "LocalStorage":
        return cls(
            settings.storage_dir,
            settings.public_base_url,
            settings.signing_secret,
            max_upload_bytes=settings.max_upload_bytes,
            expiry_seconds=settings.presign_expiry_seconds,
            logger=logger,
        )

    # ---- Keys & URLs ----
    @staticmethod
    def generate_key(filename: str) -> str:
        """
        Build an object key for an uploaded file.

        Directory parts are dropped and unsafe characters replaced, so
        the key is always a single path segment.
        """
        name = Path(filename or "").name
        name = _UNSAFE_CHARS.sub("-", name).strip(".-") or "upload"
        return f"{secrets.token_hex(10)}_{name}"

    def object_url(self, key: str) -> str:
        """Public URL a stored object is served from."""
        return f"{self.public_base_url}/api/uploads/{quote(key)}"

    def _path_for(self, key: str) -> Path:
        if not key or not _KEY_PATTERN.match(key):
            raise ValidationError(f"Invalid object key: {key!r}")
        return self.root / key

    def _check_size(self, size: int) -> None:
        if size < 0:
            raise ValidationError("Upload size must be non-negative")
        if size > self.max_upload_bytes:
            raise ValidationError(
                f"File size exceeds the maximum limit of {self.max_upload_bytes} bytes"
            )

    # ---- Signing ----
    def _signature(self, key: str, content_type: str, content_length: int, expires: int) -> str:
        message = f"{key}\n{content_type}\n{content_length}\n{expires}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def presign_upload(
        self,
        key: str,
        content_type: str,
        content_length: int,
        now: Optional[float] = None,
    ) -> str:
        """
        Create a signed URL the client can PUT the object to.

        Raises:
            ValidationError: If the key is invalid or the size exceeds the limit
        """
        self._path_for(key)
        self._check_size(content_length)

        expires = int(now if now is not None else time.time()) + self.expiry_seconds
        query = urlencode(
            {
                "expires": expires,
                "length": content_length,
                "signature": self._signature(key, content_type, content_length, expires),
            }
        )
        safe_logger(self.logger).log_debug(
            "upload_presigned", {"key": key, "content_length": content_length}
        )
        return f"{self.object_url(key)}?{query}"

    def verify_upload(
        self,
        key: str,
        content_type: str,
        content_length: int,
        expires: int,
        signature: str,
        now: Optional[float] = None,
    ) -> None:
        """
        Check a direct upload against its signed URL.

        Raises:
            AuthenticationError: If the signature is wrong or has expired
            ValidationError: If the size exceeds the limit
        """
        current = now if now is not None else time.time()
        if current > expires:
            raise AuthenticationError("Upload URL has expired")

        expected = self._signature(key, content_type, content_length, expires)
        if not hmac.compare_digest(expected, signature or ""):
            raise AuthenticationError("Invalid upload signature")

        self._check_size(content_length)

    # ---- Objects ----
    def put_object(self, key: str, data: bytes, content_type: str) -> str:
        """
        Store an object and return its public URL.

        Raises:
            ValidationError: If the key is invalid or the object too large
            StorageError: If the object cannot be written
        """
        path = self._path_for(key)
        self._check_size(len(data))

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            safe_logger(self.logger).log_error(e, {"operation": "put_object", "key": key})
            raise StorageError(f"Failed to store object {key}: {e}") from e

        safe_logger(self.logger).log_operation(
            "object_stored",
            {"key": key, "size": len(data), "content_type": content_type},
        )
        return self.object_url(key)

    def read_object(self, key: str) -> Tuple[bytes, str]:
        """
        Return an object's bytes and content type.

        Raises:
            NotFoundError: If no object has this key
            StorageError: If the object cannot be read
        """
        path = self._path_for(key)
        if not path.is_file():
            raise NotFoundError("Object", key)

        try:
            data = path.read_bytes()
        except OSError as e:
            safe_logger(self.logger).log_error(e, {"operation": "read_object", "key": key})
            raise StorageError(f"Failed to read object {key}: {e}") from e

        content_type, _ = mimetypes.guess_type(key.split("_", 1)[-1])
        return data, content_type or DEFAULT_CONTENT_TYPE
