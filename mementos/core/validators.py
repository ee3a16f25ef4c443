#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities for all Mementos operations.

Provides type-safe conversion, validation, and normalization functions
used by the entity managers and the HTTP layer. Server-side validation
repeats whatever the client checked before submitting.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from .exceptions import ValidationError

E = TypeVar("E", bound=Enum)


class DataValidator:
    """Centralized data validation for database operations."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-empty.

        Args:
            data: Data dictionary to validate
            required_fields: List of required field names

        Raises:
            ValidationError: If validation fails
        """
        for field in required_fields:
            value = data.get(field)
            if isinstance(value, str):
                value = value.strip()
            if field not in data or not value:
                raise ValidationError(f"Required field '{field}' missing or empty")

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """
        Normalize string value.

        Args:
            value: Value to normalize

        Returns:
            Stripped string, or None for empty/whitespace-only input
        """
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    @staticmethod
    def require_string(value: Any, field_name: str) -> str:
        """
        Normalize a string that must not end up empty.

        Args:
            value: Value to normalize
            field_name: Field name used in the error message

        Returns:
            Stripped, non-empty string

        Raises:
            ValidationError: If the value is missing or blank
        """
        normalized = DataValidator.normalize_string(value)
        if not normalized:
            raise ValidationError(f"Required field '{field_name}' missing or empty")
        return normalized

    @staticmethod
    def normalize_datetime(value: Any) -> Optional[datetime]:
        """
        Normalize various date inputs to a timezone-aware datetime.

        Args:
            value: ISO string, date, or datetime

        Returns:
            UTC-aware datetime or None

        Raises:
            ValidationError: If a string cannot be parsed
        """
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, date):
            dt = datetime(value.year, value.month, value.day)
        elif isinstance(value, str):
            try:
                dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            except ValueError:
                raise ValidationError(f"Invalid date: {value!r}")
        else:
            raise ValidationError(f"Cannot convert {type(value).__name__} to date")

        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def normalize_date(value: Any) -> Optional[date]:
        """
        Normalize a value to a calendar date.

        Args:
            value: ISO string, date, or datetime

        Returns:
            date object or None
        """
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip()[:10])
            except ValueError:
                raise ValidationError(f"Invalid date: {value!r}")
        raise ValidationError(f"Cannot convert {type(value).__name__} to date")

    @staticmethod
    def normalize_int(value: Any, field_name: str = "value") -> Optional[int]:
        """
        Convert value to integer.

        Args:
            value: Value to convert
            field_name: Field name used in the error message

        Returns:
            Integer value or None

        Raises:
            ValidationError: If the value is not an integer
        """
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            raise ValidationError(f"'{field_name}' must be an integer")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"'{field_name}' must be an integer, got {value!r}")

    @staticmethod
    def normalize_float(value: Any, field_name: str = "value") -> Optional[float]:
        """
        Convert value to float.

        Args:
            value: Value to convert
            field_name: Field name used in the error message

        Returns:
            Float value or None

        Raises:
            ValidationError: If the value is not numeric
        """
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"'{field_name}' must be a number, got {value!r}")

    @staticmethod
    def validate_range(
        value: Optional[float],
        field_name: str,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
    ) -> Optional[float]:
        """
        Check that a numeric value lies within inclusive bounds.

        None passes through untouched.

        Raises:
            ValidationError: If the value is out of range
        """
        if value is None:
            return None
        if minimum is not None and value < minimum:
            raise ValidationError(f"'{field_name}' must be >= {minimum}, got {value}")
        if maximum is not None and value > maximum:
            raise ValidationError(f"'{field_name}' must be <= {maximum}, got {value}")
        return value

    @staticmethod
    def normalize_enum(
        value: Any, enum_class: Type[E], field_name: str
    ) -> Optional[E]:
        """
        Convert a string or enum member to an enum member.

        Args:
            value: Enum member, its value, or None
            enum_class: Target Enum class
            field_name: Field name used in the error message

        Returns:
            Enum member or None

        Raises:
            ValidationError: If the value is not a valid member
        """
        if value is None or value == "":
            return None
        if isinstance(value, enum_class):
            return value
        try:
            return enum_class(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(str(m.value) for m in enum_class)
            raise ValidationError(
                f"Invalid {field_name}: {value!r}. Expected one of: {choices}"
            )

    @staticmethod
    def normalize_id_list(values: Any, field_name: str = "ids") -> List[int]:
        """
        Normalize a list of ids, dropping duplicates but keeping order.

        Raises:
            ValidationError: If the input is not a list of integers
        """
        if values is None:
            return []
        if not isinstance(values, (list, tuple, set)):
            raise ValidationError(f"'{field_name}' must be a list")

        result: List[int] = []
        for item in values:
            item_id = DataValidator.normalize_int(item, field_name)
            if item_id is not None and item_id not in result:
                result.append(item_id)
        return result
