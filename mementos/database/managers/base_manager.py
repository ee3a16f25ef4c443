#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base managers providing common CRUD operations and utilities.
All entity managers inherit from one of these classes.

Key Features:
    - Retry logic for database lock handling
    - Race-safe get-or-create
    - Owner-scoped lookups (missing and foreign records look the same)
    - Tagged partial updates of scalar fields
    - Replace-style updates of many-to-many collections
    - Case-insensitive substring search with stable ordering

Usage:
    Subclass OwnedManager for every per-user entity type and implement:
    - get(): Retrieve single entity (NotFoundError when missing)
    - get_all(): List entities in the entity's natural order
    - search(): Substring search over the entity's search fields
    - create(): Create new entity with validation and relationships
    - update(): Apply tagged updates
    - delete(): Hard delete

Example:
    class PlaceManager(OwnedManager):
        @handle_db_errors
        @log_database_operation("create_place")
        @validate_metadata(["name", "city", "country"])
        def create(self, metadata: Dict[str, Any]) -> Place:
            ...
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Type, TypeVar

# --- Third party imports ---
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Mapped, Session

# --- Local imports ---
from mementos.core.exceptions import DatabaseError, NotFoundError, ValidationError
from mementos.core.logging_manager import MementosLogger, safe_logger
from mementos.core.validators import DataValidator
from mementos.database.models import DateType
from mementos.database.updates import CLEARED, SetTo, get_update, is_set, resolve


class HasId(Protocol):
    """Protocol for objects that have an id attribute."""

    id: Mapped[int]


T = TypeVar("T", bound=HasId)

# (field_name, normalizer, nullable)
FieldConfig = tuple


class BaseManager(ABC):
    """
    Abstract base manager providing common operations and utilities.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[MementosLogger] = None):
        """
        Initialize the base manager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
        """
        self.session = session
        self.logger = logger

    # -------------------------------------------------------------------------
    # Core Helper Methods
    # -------------------------------------------------------------------------

    def _execute_with_retry(
        self,
        operation: Callable,
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Execute database operation with retry on lock.

        Args:
            operation: Callable that performs the operation
            max_retries: Maximum number of retry attempts
            retry_delay: Base delay between retries (exponential backoff)

        Returns:
            Result of the operation

        Raises:
            OperationalError: If all retries exhausted
        """
        for attempt in range(max_retries):
            try:
                return operation()
            except OperationalError as e:
                error_msg = str(e).lower()

                if (
                    "locked" in error_msg or "busy" in error_msg
                ) and attempt < max_retries - 1:
                    wait_time = retry_delay * (2**attempt)

                    safe_logger(self.logger).log_debug(
                        f"Database locked, retrying in {wait_time}s",
                        {"attempt": attempt + 1, "max_retries": max_retries},
                    )

                    time.sleep(wait_time)
                    continue

                raise

        raise DatabaseError("Retry loop completed without success")

    def _flush(self) -> None:
        """Flush pending changes, retrying on lock contention."""
        self._execute_with_retry(self.session.flush)

    def _get_or_create(
        self,
        model_class: Type[T],
        lookup_fields: Dict[str, Any],
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> T:
        """
        Get an existing row or create it if it doesn't exist.

        Handles races where another request creates the row between our
        check and our insert: the insert runs in a SAVEPOINT, and on an
        integrity violation the winner is read back.

        Args:
            model_class: ORM model class to query or create
            lookup_fields: Dictionary of field_name: value to filter/create
            extra_fields: Additional fields for new object creation only

        Returns:
            ORM instance of the model class

        Raises:
            DatabaseError: If creation fails after handling race condition
        """
        lookup = select(model_class).filter_by(**lookup_fields)
        existing = self.session.scalars(lookup).first()
        if existing is not None:
            return existing

        try:
            with self.session.begin_nested():
                obj = model_class(**lookup_fields, **(extra_fields or {}))
                self.session.add(obj)
            return obj
        except IntegrityError:
            obj = self.session.scalars(lookup).first()
            if obj is not None:
                safe_logger(self.logger).log_debug(
                    f"Concurrent create of {model_class.__name__} resolved",
                    {"lookup": lookup_fields},
                )
                return obj
            raise DatabaseError(
                f"Failed to create {model_class.__name__} even after handling race condition"
            )

    # -------------------------------------------------------------------------
    # Scalar Field Update Helpers
    # -------------------------------------------------------------------------

    def _apply_updates(
        self,
        entity: Any,
        changes: Dict[str, Any],
        field_configs: Sequence[FieldConfig],
    ) -> List[str]:
        """
        Apply tagged updates to scalar fields.

        Args:
            entity: Entity to update
            changes: Mapping of field name to UNCHANGED / SetTo / CLEARED
                (raw values count as SetTo, None as CLEARED)
            field_configs: Tuples of (field_name, normalizer, nullable)

        Returns:
            Names of the fields that were changed

        Raises:
            ValidationError: If a non-nullable field is cleared or
                normalizes to nothing

        Example:
            self._apply_updates(place, changes, [
                ("name", DataValidator.normalize_string, False),
                ("address", DataValidator.normalize_string, True),
            ])
        """
        changed: List[str] = []
        for field_name, normalizer, nullable in field_configs:
            update = get_update(changes, field_name)

            if update is CLEARED:
                if not nullable:
                    raise ValidationError(f"Required field '{field_name}' missing or empty")
                setattr(entity, field_name, None)
                changed.append(field_name)
            elif isinstance(update, SetTo):
                value = normalizer(update.value)
                if value is None and not nullable:
                    raise ValidationError(f"Required field '{field_name}' missing or empty")
                setattr(entity, field_name, value)
                changed.append(field_name)
        return changed

    def _apply_date_updates(self, entity: Any, changes: Dict[str, Any]) -> bool:
        """
        Apply ``date`` / ``date_type`` updates, truncating to the precision.

        Clearing ``date_type`` resets it to exact.

        Returns:
            True if either field was part of the update
        """
        date_update = get_update(changes, "date")
        type_update = get_update(changes, "date_type")
        if not (is_set(date_update) or is_set(type_update)):
            return False

        date_type = DataValidator.normalize_enum(
            resolve(type_update, entity.date_type), DateType, "date_type"
        ) or DateType.EXACT
        value = DataValidator.normalize_datetime(resolve(date_update, entity.date))

        entity.date_type = date_type
        entity.date = date_type.truncate(value)
        return True

    @staticmethod
    def _initial_date(metadata: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize ``date`` and ``date_type`` of a create payload."""
        date_type = DataValidator.normalize_enum(
            metadata.get("date_type"), DateType, "date_type"
        ) or DateType.EXACT
        value = DataValidator.normalize_datetime(metadata.get("date"))
        return {"date_type": date_type, "date": date_type.truncate(value)}

    @staticmethod
    def _initial_values(
        metadata: Dict[str, Any], field_configs: Sequence[FieldConfig]
    ) -> Dict[str, Any]:
        """Normalize the scalar fields of a create payload."""
        values: Dict[str, Any] = {}
        for field_name, normalizer, nullable in field_configs:
            value = normalizer(metadata.get(field_name))
            if value is None and not nullable:
                raise ValidationError(f"Required field '{field_name}' missing or empty")
            if value is not None:
                values[field_name] = value
        return values


class OwnedManager(BaseManager):
    """
    Base manager for records that belong to a single user.

    Every lookup is filtered by ``owner_id``; an id that belongs to another
    user raises the same NotFoundError as an id that does not exist.

    Attributes:
        owner_id: Internal id of the user whose records are managed
    """

    def __init__(
        self,
        session: Session,
        owner_id: int,
        logger: Optional[MementosLogger] = None,
    ):
        super().__init__(session, logger)
        self.owner_id = owner_id

    # -------------------------------------------------------------------------
    # Owner-scoped Lookups
    # -------------------------------------------------------------------------

    def _owned(self, model_class: Type[T]):
        """Select statement for the owner's rows of a model."""
        return select(model_class).where(model_class.owner_id == self.owner_id)

    def _find_owned(self, model_class: Type[T], entity_id: Any) -> Optional[T]:
        """Return an owned entity by id, or None."""
        if entity_id is None:
            return None
        entity = self.session.get(model_class, entity_id)
        if entity is None or entity.owner_id != self.owner_id:
            return None
        return entity

    def _require_owned(self, model_class: Type[T], entity_id: Any) -> T:
        """
        Return an owned entity by id.

        Raises:
            NotFoundError: If the id is missing or belongs to another user
        """
        item_id = DataValidator.normalize_int(entity_id, f"{model_class.__name__.lower()}_id")
        entity = self._find_owned(model_class, item_id)
        if entity is None:
            raise NotFoundError(model_class.__name__, entity_id)
        return entity

    def _require_all_owned(self, model_class: Type[T], ids: Iterable[Any]) -> List[T]:
        """
        Resolve a list of ids to owned entities, de-duplicated, in input order.

        Raises:
            NotFoundError: If any id does not resolve
        """
        unique_ids = DataValidator.normalize_id_list(
            list(ids), f"{model_class.__name__.lower()}_ids"
        )
        if not unique_ids:
            return []

        rows = self.session.scalars(
            self._owned(model_class).where(model_class.id.in_(unique_ids))
        ).all()
        by_id = {row.id: row for row in rows}
        for item_id in unique_ids:
            if item_id not in by_id:
                raise NotFoundError(model_class.__name__, item_id)
        return [by_id[item_id] for item_id in unique_ids]

    # -------------------------------------------------------------------------
    # Listing and Search
    # -------------------------------------------------------------------------

    def _list(self, model_class: Type[T], order_field: str, stmt=None) -> List[T]:
        """
        List the owner's entities, newest first by ``order_field``.

        Ties (and null dates) break on id descending so the order is stable.
        """
        stmt = self._owned(model_class) if stmt is None else stmt
        column = getattr(model_class, order_field)
        stmt = stmt.order_by(column.desc().nulls_last(), model_class.id.desc())
        return list(self.session.scalars(stmt).all())

    def _search(
        self,
        model_class: Type[T],
        query: Optional[str],
        search_fields: Sequence[str],
        order_field: str,
    ) -> List[T]:
        """
        Case-insensitive substring search over ``search_fields``.

        An empty query lists everything. ``%`` and ``_`` in the query match
        themselves, not any character.
        """
        term = DataValidator.normalize_string(query)
        if not term:
            return self._list(model_class, order_field)

        conditions = [
            getattr(model_class, field).icontains(term, autoescape=True)
            for field in search_fields
        ]
        stmt = self._owned(model_class).where(or_(*conditions))
        return self._list(model_class, order_field, stmt)

    # -------------------------------------------------------------------------
    # Relationship Helpers
    # -------------------------------------------------------------------------

    def _replace_collection(
        self,
        entity: Any,
        attr_name: str,
        ids: Iterable[Any],
        model_class: Type[T],
    ) -> List[T]:
        """
        Replace a many-to-many collection with the entities for ``ids``.

        The collection is cleared and refilled in one step; every id must
        resolve to an owned entity.

        Raises:
            NotFoundError: If any id does not resolve
        """
        items = self._require_all_owned(model_class, ids)
        collection = getattr(entity, attr_name)
        collection.clear()
        collection.extend(items)
        return items
