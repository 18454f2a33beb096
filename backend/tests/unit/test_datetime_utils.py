"""
Tests for datetime utilities.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from utils.datetime_utils import day_range, format_date, local_now, month_bounds, parse_datetime_value


class TestParseDatetimeValue:

    def test_date_only(self):
        assert parse_datetime_value("2024-01-15") == datetime(2024, 1, 15)

    def test_naive_iso(self):
        assert parse_datetime_value("2024-01-15T08:30:00") == datetime(2024, 1, 15, 8, 30)

    def test_utc_suffix_converted_to_local_naive(self):
        parsed = parse_datetime_value("2024-01-15T08:30:00Z")
        expected = datetime(2024, 1, 15, 8, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert parsed == expected
        assert parsed.tzinfo is None

    def test_date_object(self):
        assert parse_datetime_value(date(2024, 3, 1)) == datetime(2024, 3, 1)

    @pytest.mark.parametrize("value", [None, "", "  ", "null", "undefined"])
    def test_empty_values(self, value):
        assert parse_datetime_value(value) is None

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_datetime_value("next tuesday")


class TestRanges:

    def test_month_bounds(self):
        assert month_bounds(datetime(2024, 2, 14, 12)) == (datetime(2024, 2, 1), datetime(2024, 3, 1))

    def test_month_bounds_december(self):
        assert month_bounds(datetime(2024, 12, 31)) == (datetime(2024, 12, 1), datetime(2025, 1, 1))

    def test_day_range_date_only_end(self):
        _, end = day_range(datetime(2024, 1, 1), datetime(2024, 1, 31))
        assert end == datetime(2024, 2, 1)

    def test_day_range_timed_end(self):
        _, end = day_range(datetime(2024, 1, 1), datetime(2024, 1, 31, 17, 0))
        assert end == datetime(2024, 1, 31, 17, 0) + timedelta(microseconds=1)


class TestFormatting:

    def test_format_date(self):
        assert format_date(datetime(2024, 7, 4, 10, 0)) == "2024-07-04"
        assert format_date(None) == ""

    def test_local_now_is_naive_whole_seconds(self):
        now = local_now()
        assert now.tzinfo is None
        assert now.microsecond == 0
