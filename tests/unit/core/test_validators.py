"""
test_validators.py
------------------
Unit tests for DataValidator normalization helpers.
"""
import pytest
from datetime import date, datetime, timezone, timedelta

from mementos.core.exceptions import ValidationError
from mementos.core.validators import DataValidator
from mementos.database.models import DateType, PlaceType


class TestRequiredFields:
    """Test DataValidator.validate_required_fields()."""

    def test_passes_when_present(self):
        DataValidator.validate_required_fields({"name": "Alice"}, ["name"])

    def test_missing_field_raises(self):
        with pytest.raises(ValidationError, match="Required field 'name'"):
            DataValidator.validate_required_fields({}, ["name"])

    def test_blank_string_counts_as_missing(self):
        with pytest.raises(ValidationError):
            DataValidator.validate_required_fields({"name": "   "}, ["name"])


class TestStrings:
    """Test string normalization."""

    def test_strips_whitespace(self):
        assert DataValidator.normalize_string("  Alice ") == "Alice"

    def test_blank_becomes_none(self):
        assert DataValidator.normalize_string("   ") is None
        assert DataValidator.normalize_string(None) is None

    def test_require_string_rejects_blank(self):
        with pytest.raises(ValidationError, match="'title'"):
            DataValidator.require_string(" ", "title")


class TestDatetimes:
    """Test date and datetime normalization."""

    def test_naive_iso_string_is_utc(self):
        result = DataValidator.normalize_datetime("2024-05-01T12:30:00")
        assert result == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    def test_z_suffix_accepted(self):
        result = DataValidator.normalize_datetime("2024-05-01T12:30:00Z")
        assert result.tzinfo is not None
        assert result.hour == 12

    def test_offset_converted_to_utc(self):
        tz = timezone(timedelta(hours=2))
        result = DataValidator.normalize_datetime(datetime(2024, 5, 1, 12, tzinfo=tz))
        assert result.hour == 10

    def test_date_becomes_midnight(self):
        result = DataValidator.normalize_datetime(date(2024, 5, 1))
        assert result == datetime(2024, 5, 1, tzinfo=timezone.utc)

    def test_invalid_string_raises(self):
        with pytest.raises(ValidationError, match="Invalid date"):
            DataValidator.normalize_datetime("last tuesday")

    def test_normalize_date_from_datetime_string(self):
        assert DataValidator.normalize_date("1990-02-03T10:00:00") == date(1990, 2, 3)


class TestNumbers:
    """Test numeric normalization and ranges."""

    def test_int_from_string(self):
        assert DataValidator.normalize_int("42", "capacity") == 42

    def test_bool_is_not_an_int(self):
        with pytest.raises(ValidationError):
            DataValidator.normalize_int(True, "capacity")

    def test_bad_float_raises(self):
        with pytest.raises(ValidationError, match="rating"):
            DataValidator.normalize_float("great", "rating")

    def test_range_inclusive(self):
        assert DataValidator.validate_range(5.0, "rating", 1.0, 5.0) == 5.0
        with pytest.raises(ValidationError):
            DataValidator.validate_range(5.5, "rating", 1.0, 5.0)
        with pytest.raises(ValidationError):
            DataValidator.validate_range(-1, "capacity", minimum=0)


class TestEnumsAndIds:
    """Test enum and id-list normalization."""

    def test_enum_case_insensitive(self):
        assert DataValidator.normalize_enum("Office", PlaceType, "type") is PlaceType.OFFICE

    def test_enum_member_passthrough(self):
        assert DataValidator.normalize_enum(DateType.DAY, DateType, "date_type") is DateType.DAY

    def test_unknown_enum_lists_choices(self):
        with pytest.raises(ValidationError, match="Expected one of"):
            DataValidator.normalize_enum("castle", PlaceType, "type")

    def test_id_list_deduplicates_in_order(self):
        assert DataValidator.normalize_id_list([3, "1", 3, 2, 1]) == [3, 1, 2]

    def test_id_list_must_be_a_list(self):
        with pytest.raises(ValidationError):
            DataValidator.normalize_id_list("1,2")
