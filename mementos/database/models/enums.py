"""
Enumeration Types
------------------

Enum classes for the Mementos database models.

Enums:
    - Plan: Subscription plan of a user (free, pro)
    - MaritalStatus: Marital status of a person
    - PlaceType: Kind of place (office, restaurant, ...)
    - EventType: Kind of event (meeting, workshop, ...)
    - MediaType: Kind of uploaded media (photo, document)
    - DateType: Precision of a stored date (exact, day, month, year)
    - AttributeScope: Entity type an attribute applies to

These enums provide type safety and consistent categorization across the database.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime
from enum import Enum
from typing import List, Optional


class Plan(str, Enum):
    """
    Enumeration of subscription plans.
    - FREE: Default plan for new users
    - PRO: Paid plan, granted by a completed checkout
    """

    FREE = "free"
    PRO = "pro"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available plan choices."""
        return [plan.value for plan in cls]


class MaritalStatus(str, Enum):
    """Enumeration of marital statuses."""

    SINGLE = "single"
    MARRIED = "married"
    DIVORCED = "divorced"
    WIDOWED = "widowed"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available marital status choices."""
        return [status.value for status in cls]

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        return self.value.title()


class PlaceType(str, Enum):
    """
    Enumeration of place types.

    Categories of places a memory or event can be located at:
    - OFFICE: Workplaces
    - RESTAURANT: Restaurants, cafes, bars
    - HOTEL: Hotels and other lodging
    - VENUE: Event venues
    - PARK: Parks and outdoor areas
    - MUSEUM: Museums and galleries
    - STORE: Shops
    """

    OFFICE = "office"
    RESTAURANT = "restaurant"
    HOTEL = "hotel"
    VENUE = "venue"
    PARK = "park"
    MUSEUM = "museum"
    STORE = "store"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available place type choices."""
        return [place_type.value for place_type in cls]

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        return self.value.title()


class EventType(str, Enum):
    """Enumeration of event types."""

    MEETING = "meeting"
    WORKSHOP = "workshop"
    CONFERENCE = "conference"
    SOCIAL = "social"
    TRAINING = "training"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available event type choices."""
        return [event_type.value for event_type in cls]

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        return self.value.title()


class MediaType(str, Enum):
    """Enumeration of uploaded media types."""

    PHOTO = "photo"
    DOCUMENT = "document"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available media type choices."""
        return [media_type.value for media_type in cls]

    @classmethod
    def from_content_type(cls, content_type: Optional[str]) -> "MediaType":
        """Classify an uploaded file by its MIME type."""
        if content_type and content_type.lower().startswith("image/"):
            return cls.PHOTO
        return cls.DOCUMENT


class DateType(str, Enum):
    """
    Enumeration of date precisions.

    A date is stored as a full datetime; the precision says how much of
    it is meaningful:
    - EXACT: Date and time as given
    - DAY: Calendar day
    - MONTH: Month of a year
    - YEAR: Year only
    """

    EXACT = "exact"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available date type choices."""
        return [date_type.value for date_type in cls]

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        display_map = {
            self.EXACT: "Exact date",
            self.DAY: "Day",
            self.MONTH: "Month",
            self.YEAR: "Year",
        }
        return display_map.get(self, self.value.title())

    def truncate(self, value: Optional[datetime]) -> Optional[datetime]:
        """
        Drop the components of a datetime finer than this precision.

        Args:
            value: Datetime to truncate

        Returns:
            Truncated datetime, or None
        """
        if value is None:
            return None
        if self is DateType.EXACT:
            return value
        value = value.replace(hour=0, minute=0, second=0, microsecond=0)
        if self is DateType.MONTH:
            return value.replace(day=1)
        if self is DateType.YEAR:
            return value.replace(month=1, day=1)
        return value


class AttributeScope(str, Enum):
    """
    Enumeration of attribute scopes.

    An attribute scoped to ALL is offered for every entity type.
    """

    PERSON = "person"
    EVENT = "event"
    PLACE = "place"
    ALL = "all"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available attribute scope choices."""
        return [scope.value for scope in cls]
