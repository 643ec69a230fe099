"""
Tests for the derived aggregation utilities.
"""

import datetime
import pytest

from timekeeper.domain.models import TimeEntry
from timekeeper.services import aggregation


UTC = datetime.timezone.utc


def _entry(duration, billable=True, project_id="p1", start=None):
    start = start or datetime.datetime(2026, 10, 19, 9, 0, tzinfo=UTC)
    return TimeEntry(
        id=f"e{duration}",
        description="work",
        project_id=project_id,
        customer_id="c1",
        start_time=start,
        end_time=start + datetime.timedelta(seconds=duration),
        duration=duration,
        billable=billable,
        user_id="u1",
    )


class TestFormatDuration:

    @pytest.mark.parametrize("seconds, expected", [
        (0, "00:00:00"),
        (59, "00:00:59"),
        (125, "00:02:05"),
        (3600, "01:00:00"),
        (86399, "23:59:59"),
        (90061, "25:01:01"),  # no wrap at 24h
    ])
    def test_hh_mm_ss(self, seconds, expected):
        assert aggregation.format_duration(seconds) == expected

    @pytest.mark.parametrize("seconds", [0, 1, 61, 3599, 3661, 45296, 360000])
    def test_decomposes_back_to_seconds(self, seconds):
        hours, minutes, secs = (int(part) for part in aggregation.format_duration(seconds).split(":"))
        assert hours * 3600 + minutes * 60 + secs == seconds

    @pytest.mark.parametrize("seconds, expected", [
        (0, "0h 0m"),
        (59, "0h 0m"),
        (8100, "2h 15m"),
        (8159, "2h 15m"),  # partial minute truncated
        (12600, "3h 30m"),
    ])
    def test_short_form(self, seconds, expected):
        assert aggregation.format_duration_short(seconds) == expected


class TestTotals:

    def test_total_hours_of_mappings(self):
        assert aggregation.total_hours([{"duration": 3600}, {"duration": 1800}]) == 1.5

    def test_total_hours_ignores_billable_flag(self):
        entries = [_entry(3600, billable=True), _entry(1800, billable=False)]
        assert aggregation.total_hours(entries) == 1.5

    def test_total_hours_treats_missing_duration_as_zero(self):
        assert aggregation.total_hours([{"duration": 7200}, {}, {"duration": None}]) == 2.0

    def test_total_hours_empty(self):
        assert aggregation.total_hours([]) == 0

    def test_billable_amount_only_counts_billable(self):
        entries = [{"duration": 3600, "billable": True}, {"duration": 3600, "billable": False}]
        assert aggregation.billable_amount(entries, 100) == 100

    def test_billable_amount_keeps_fractional_hours(self):
        entries = [_entry(5400), _entry(900)]
        assert aggregation.billable_amount(entries, 80) == pytest.approx(140.0)

    def test_billable_amount_zero_rate(self):
        assert aggregation.billable_amount([_entry(3600)], 0) == 0


class TestDisplayHelpers:

    def test_format_hours_one_decimal(self):
        assert aggregation.format_hours(1.26) == "1.3h"
        assert aggregation.format_hours(28.2) == "28.2h"
        assert aggregation.format_hours(0) == "0.0h"

    def test_format_currency_two_decimals(self):
        assert aggregation.format_currency(100) == "$100.00"
        assert aggregation.format_currency(1234.5, "EUR") == "€1,234.50"
        assert aggregation.format_currency(12.3, "CHF") == "12.30 CHF"


class TestGrouping:

    def test_hours_by_project_uses_names_in_first_seen_order(self):
        entries = [_entry(3600, project_id="p2"), _entry(1800, project_id="p1"), _entry(1800, project_id="p2")]
        result = aggregation.hours_by_project(entries, {"p1": "Website Redesign", "p2": "Mobile App"})
        assert list(result.items()) == [("Mobile App", 1.5), ("Website Redesign", 0.5)]

    def test_hours_by_project_falls_back_to_id(self):
        result = aggregation.hours_by_project([_entry(3600, project_id="unknown")])
        assert result == {"unknown": 1.0}

    def test_hours_by_weekday(self):
        monday = datetime.datetime(2026, 10, 19, 9, 0, tzinfo=UTC)
        entries = [_entry(3600, start=monday), _entry(1800, start=monday + datetime.timedelta(days=2))]
        result = aggregation.hours_by_weekday(entries)
        assert list(result.keys()) == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert result["Mon"] == 1.0
        assert result["Wed"] == 0.5
        assert result["Sun"] == 0

    def test_entries_between_is_half_open(self):
        start = datetime.datetime(2026, 10, 19, 0, 0, tzinfo=UTC)
        end = start + datetime.timedelta(days=1)
        inside = _entry(60, start=start)
        outside = _entry(120, start=end)
        assert aggregation.entries_between([inside, outside], start, end) == [inside]
