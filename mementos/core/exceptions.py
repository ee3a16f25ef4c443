#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the Mementos project.

This module defines the hierarchy of exceptions raised by the entity
managers, the association engine, the external collaborators and the
HTTP layer.

Exception Hierarchy:
    Exception (built-in)
    └── MementosError - Base for every project error
        ├── DatabaseError - Database unavailable or integrity failures
        ├── NotFoundError - Missing or not-owned record
        ├── ValidationError - Data validation failures
        ├── ConflictError - Operation violates an association lock
        ├── AuthenticationError - No authenticated identity
        ├── StorageError - Object storage failures
        ├── PaymentError - Payment provider call failures
        └── WebhookError - Malformed or unverifiable payment events

Usage:
    from mementos.core.exceptions import NotFoundError, ValidationError

    try:
        scope.memories.get(memory_id)
    except NotFoundError as e:
        logger.log_warning(str(e))
"""


class MementosError(Exception):
    """
    Base exception for every error raised by the project.

    Catch this to handle any domain error; the HTTP layer maps each
    subclass to a status code and a user-safe message.
    """

    pass


class DatabaseError(MementosError):
    """
    Exception for database-related errors.

    Raised when database operations fail due to connection issues,
    query errors, integrity violations, or other database problems.

    Examples:
        >>> raise DatabaseError("Connection to database failed")
        >>> raise DatabaseError("Data integrity violation: duplicate attribute")
    """

    pass


class NotFoundError(MementosError):
    """
    Exception for references that do not resolve.

    Raised when an id does not exist or belongs to another owner. Both
    cases are reported identically so ids cannot be probed across users.

    Attributes:
        entity: Name of the entity type that was looked up
        entity_id: The id that failed to resolve

    Examples:
        >>> raise NotFoundError("Memory", 42)
    """

    def __init__(self, entity: str, entity_id: object = None) -> None:
        self.entity = entity
        self.entity_id = entity_id
        if entity_id is None:
            message = f"{entity} not found"
        else:
            message = f"{entity} not found with id: {entity_id}"
        super().__init__(message)


class ValidationError(MementosError):
    """
    Exception for data validation failures.

    Raised when input data fails validation checks:
    - Missing required fields (title, city, country, ...)
    - Values outside their allowed range (rating, capacity)
    - Unknown enum values
    - Self-referencing relationships

    Examples:
        >>> raise ValidationError("Required field 'title' missing or empty")
        >>> raise ValidationError("Rating must be between 1.0 and 5.0")
    """

    pass


class ConflictError(MementosError):
    """
    Exception for operations that contradict an existing association.

    Raised when a memory's place is changed while an associated event
    dictates it.

    Examples:
        >>> raise ConflictError(
        ...     "Place is locked by an associated event; "
        ...     "change or remove the event first"
        ... )
    """

    pass


class AuthenticationError(MementosError):
    """
    Exception raised when a request carries no authenticated identity,
    or a signed upload URL is invalid or expired.
    """

    pass


class StorageError(MementosError):
    """
    Exception for object storage failures.

    Raised when an upload cannot be written or a stored object cannot
    be read.
    """

    pass


class WebhookError(MementosError):
    """
    Exception for payment webhook failures.

    Raised when a webhook payload is malformed, its signature cannot be
    verified, or its metadata lacks the user identity. No state is
    changed when this is raised.
    """

    pass


class PaymentError(MementosError):
    """
    Exception for payment provider failures.

    Raised when payments are not configured or a call to the provider
    (creating a checkout session) fails.
    """

    pass
