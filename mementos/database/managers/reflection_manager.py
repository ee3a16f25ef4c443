#!/usr/bin/env python3
"""
reflection_manager.py
--------------------
Manages Reflection entities: titled notes written about a memory.

Reflections are owned through their parent memory. Adding, editing or
deleting a reflection touches the memory's ``updated_at``.
"""
from typing import Any, Dict, List, Optional

from mementos.core.exceptions import NotFoundError, ValidationError
from mementos.core.validators import DataValidator
from mementos.database.decorators import handle_db_errors, log_database_operation
from mementos.database.models import Memory, Reflection
from .base_manager import OwnedManager


def _normalize_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


REFLECTION_FIELDS = [
    ("title", _normalize_text, False),
    ("content", _normalize_text, False),
]


class ReflectionManager(OwnedManager):
    """Manages Reflection table operations for one owner."""

    def _require_reflection(self, reflection_id: Any) -> Reflection:
        item_id = DataValidator.normalize_int(reflection_id, "reflection_id")
        reflection = self.session.get(Reflection, item_id) if item_id is not None else None
        if reflection is None or reflection.memory.owner_id != self.owner_id:
            raise NotFoundError("Reflection", reflection_id)
        return reflection

    @handle_db_errors
    @log_database_operation("get_reflection")
    def get(self, reflection_id: int) -> Reflection:
        """Retrieve a reflection by id (NotFoundError when missing)."""
        return self._require_reflection(reflection_id)

    @handle_db_errors
    @log_database_operation("list_reflections")
    def list_for_memory(self, memory_id: int) -> List[Reflection]:
        """Reflections of a memory, oldest first."""
        return list(self._require_owned(Memory, memory_id).reflections)

    @handle_db_errors
    @log_database_operation("add_reflection")
    def add(self, memory_id: int, title: Optional[str], content: Optional[str]) -> Reflection:
        """
        Add a reflection to a memory.

        Args:
            memory_id: Parent memory
            title: Reflection title
            content: Reflection body

        Raises:
            ValidationError: If both title and content are empty
            NotFoundError: If the memory does not resolve
        """
        memory = self._require_owned(Memory, memory_id)
        clean_title = _normalize_text(title)
        clean_content = _normalize_text(content)
        if not clean_title and not clean_content:
            raise ValidationError("A reflection needs a title or content")

        reflection = Reflection(title=clean_title, content=clean_content)
        memory.reflections.append(reflection)
        memory.touch()
        self._flush()
        return reflection

    @handle_db_errors
    @log_database_operation("update_reflection")
    def update(self, reflection_id: int, changes: Dict[str, Any]) -> Reflection:
        """Apply tagged updates to a reflection's title and content."""
        reflection = self._require_reflection(reflection_id)
        if self._apply_updates(reflection, changes, REFLECTION_FIELDS):
            reflection.memory.touch()
        self._flush()
        return reflection

    @handle_db_errors
    @log_database_operation("delete_reflection")
    def delete(self, reflection_id: int) -> None:
        """Delete a reflection."""
        reflection = self._require_reflection(reflection_id)
        memory = reflection.memory
        memory.reflections.remove(reflection)
        memory.touch()
        self._flush()
