"""
Unit tests for utils/normalize.py

Tests all input normalization functions to ensure:
- Correct type conversion
- Proper None/empty string handling
- Clear ValidationError messages with the offending field
"""

import pytest
from datetime import date, datetime

from utils.normalize import (
    ValidationError,
    coerce_to_date,
    to_date,
    to_float,
    to_month,
    to_str,
    to_str_list_json,
)


class TestToFloat:

    def test_valid(self):
        assert to_float("2.5") == 2.5

    def test_invalid(self):
        with pytest.raises(ValidationError):
            to_float("fast")


class TestToDate:
    """Tests for to_date()"""

    def test_iso_date(self):
        assert to_date("2025-09-01") == date(2025, 9, 1)

    def test_iso_timestamp_keeps_date_part(self):
        assert to_date("2025-09-01T13:45:00Z") == date(2025, 9, 1)

    def test_date_and_datetime_objects(self):
        assert to_date(date(2025, 1, 2)) == date(2025, 1, 2)
        assert to_date(datetime(2025, 1, 2, 10, 0)) == date(2025, 1, 2)

    def test_invalid_format(self):
        with pytest.raises(ValidationError) as exc:
            to_date("01/09/2025", field="startDate")
        assert "YYYY-MM-DD" in str(exc.value)
        assert exc.value.field == "startDate"


class TestToStr:

    def test_strips(self):
        assert to_str("  ABC ") == "ABC"

    def test_blank_is_default(self):
        assert to_str("   ") is None
        assert to_str("", default="ALL") == "ALL"


class TestToMonth:

    @pytest.mark.parametrize("raw", ["September", "september", "9", " 9 "])
    def test_variants(self, raw):
        assert to_month(raw) == "September"

    @pytest.mark.parametrize("raw", ["13", "0", "Sept"])
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            to_month(raw)


class TestToStrListJson:
    """Allowed-brands header parsing."""

    def test_array(self):
        assert to_str_list_json('["ABC", " XYZ "]') == ["ABC", "XYZ"]

    def test_missing_is_default(self):
        assert to_str_list_json(None) is None
        assert to_str_list_json("") is None

    def test_empty_array(self):
        assert to_str_list_json("[]") == []

    def test_null_is_default(self):
        assert to_str_list_json("null") is None
        assert to_str_list_json(" null ", default=["ABC"]) == ["ABC"]

    @pytest.mark.parametrize("raw", ["ABC", '{"a": 1}', "[1, 2]"])
    def test_malformed(self, raw):
        with pytest.raises(ValidationError):
            to_str_list_json(raw, field="x-user-allowed-brands")


class TestCoerceToDate:

    def test_string_from_driver(self):
        assert coerce_to_date("2025-03-04 00:00:00") == date(2025, 3, 4)

    def test_none(self):
        assert coerce_to_date(None) is None

    def test_bad_type(self):
        with pytest.raises(ValueError):
            coerce_to_date(20250304)
