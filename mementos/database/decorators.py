#!/usr/bin/env python3
"""
decorators.py
--------------------
Shared decorators and context managers for database operations.

- log_database_operation: timing and outcome logging for manager methods
- validate_metadata: required-field checks on metadata dictionaries
- handle_db_errors: SQLAlchemy errors surfaced as DatabaseError
- DatabaseOperation: logging and error conversion for a block of code
  (schema management, maintenance)

Rejections of client input (missing records, invalid values, association
conflicts) are expected outcomes: they are logged as warnings in the
component log, not as errors.
"""
import time
from functools import wraps
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from mementos.core.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from mementos.core.logging_manager import MementosLogger, safe_logger
from mementos.core.validators import DataValidator

REJECTIONS = (NotFoundError, ValidationError, ConflictError)


def _report_failure(logger: MementosLogger, error: BaseException, context: Dict[str, Any]) -> None:
    if isinstance(error, REJECTIONS):
        logger.log_warning(
            f"{context['operation']}_rejected",
            {**context, "error": f"{type(error).__name__}: {error}"},
        )
    else:
        logger.log_error(error, context)


def as_database_error(error: SQLAlchemyError, prefix: Optional[str] = None) -> DatabaseError:
    """Translate a SQLAlchemy exception into the project's DatabaseError."""
    if isinstance(error, IntegrityError):
        message = f"Data integrity violation: {error.orig}"
    else:
        message = f"Database operation failed: {error}"
    return DatabaseError(f"{prefix}: {message}" if prefix else message)


def log_database_operation(operation_name: str):
    """
    Log start, duration and outcome of a manager method.

    The method's object provides ``logger`` and, for owner-scoped
    managers, ``owner_id``.

    Args:
        operation_name: Name used in the log records
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            logger = safe_logger(getattr(self, "logger", None))
            started = time.perf_counter()

            logger.log_debug(
                f"Starting {operation_name}",
                {
                    "owner_id": getattr(self, "owner_id", None),
                    "args_count": len(args),
                    "kwargs_keys": sorted(kwargs),
                },
            )

            try:
                result = function(self, *args, **kwargs)
            except Exception as e:
                _report_failure(
                    logger,
                    e,
                    {
                        "operation": operation_name,
                        "duration_seconds": round(time.perf_counter() - started, 6),
                    },
                )
                raise

            logger.log_operation(
                f"{operation_name}_completed",
                {
                    "duration_seconds": round(time.perf_counter() - started, 6),
                    "success": True,
                },
            )
            return result

        return wrapper

    return decorator


def validate_metadata(required_fields: List[str]):
    """
    Reject metadata dictionaries missing a required field.

    The metadata is the first positional argument after ``self`` or the
    ``metadata`` keyword argument.
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            metadata: Dict[str, Any] = args[0] if args else kwargs.get("metadata", {})
            DataValidator.validate_required_fields(metadata, required_fields)
            return function(self, *args, **kwargs)

        return wrapper

    return decorator


def handle_db_errors(function: Callable) -> Callable:
    """Re-raise SQLAlchemy errors as DatabaseError."""

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except SQLAlchemyError as e:
            raise as_database_error(e) from e

    return wrapper


class DatabaseOperation:
    """
    Context manager combining operation logging and error conversion.

    Usage:
        with DatabaseOperation(self.logger, "create_schema", "Schema creation failed"):
            Base.metadata.create_all(self.engine)

    Attributes:
        logger: Logger receiving the records (None means no logging)
        operation_name: Name used in log records
        failure_message: Prefix for the DatabaseError message
        log_start: Whether to emit a debug record on entry
    """

    def __init__(
        self,
        logger: Optional[MementosLogger],
        operation_name: str,
        failure_message: Optional[str] = None,
        log_start: bool = False,
    ) -> None:
        self.logger = safe_logger(logger)
        self.operation_name = operation_name
        self.failure_message = failure_message
        self.log_start = log_start
        self.started: Optional[float] = None

    @property
    def elapsed(self) -> float:
        return round(time.perf_counter() - self.started, 6) if self.started else 0.0

    def __enter__(self) -> "DatabaseOperation":
        self.started = time.perf_counter()
        if self.log_start:
            self.logger.log_debug(f"Starting {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_val is None:
            self.logger.log_operation(
                f"{self.operation_name}_completed",
                {"duration_seconds": self.elapsed, "success": True},
            )
            return False

        _report_failure(
            self.logger,
            exc_val,
            {"operation": self.operation_name, "duration_seconds": self.elapsed},
        )
        if isinstance(exc_val, SQLAlchemyError):
            raise as_database_error(exc_val, self.failure_message) from exc_val
        return False
