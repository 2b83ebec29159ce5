from datetime import date
from types import SimpleNamespace

import pytest

from kitchen_booking.services.slots.config import day_of_week, time_str_to_minutes
from kitchen_booking.services.slots.resolver import (
    TimeRange,
    carve_out,
    resolve_kitchen_day,
    resolve_open_ranges,
)

from .conftest import BOOKING_DATE


def rng(start, end):
    return TimeRange.parse(start, end)


def row(is_available, start=None, end=None):
    return SimpleNamespace(is_available=is_available, start_time=start, end_time=end)


class TestTimeRange:
    def test_touching_ranges_do_not_overlap(self):
        assert not rng("09:00", "10:00").overlaps(rng("10:00", "11:00"))
        assert rng("09:00", "10:30").overlaps(rng("10:00", "11:00"))

    def test_parse_rejects_empty_and_malformed(self):
        assert TimeRange.parse("10:00", "10:00") is None
        assert TimeRange.parse("11:00", "10:00") is None
        assert TimeRange.parse("ab:cd", "10:00") is None
        assert TimeRange.parse(None, "10:00") is None

    def test_end_of_day(self):
        assert time_str_to_minutes("24:00") == 24 * 60
        with pytest.raises(ValueError):
            time_str_to_minutes("24:30")

    def test_sunday_is_zero(self):
        assert day_of_week(date(2030, 6, 2)) == 0  # Sunday
        assert day_of_week(BOOKING_DATE) == 1  # Monday
        assert day_of_week(date(2030, 6, 8)) == 6  # Saturday


class TestCarveOut:
    def test_interior_block_splits(self):
        assert carve_out(rng("09:00", "17:00"), [rng("12:00", "13:00")]) == [
            rng("09:00", "12:00"),
            rng("13:00", "17:00"),
        ]

    def test_partial_overlap_truncates(self):
        assert carve_out(rng("09:00", "17:00"), [rng("08:00", "10:00")]) == [rng("10:00", "17:00")]
        assert carve_out(rng("09:00", "17:00"), [rng("16:00", "18:00")]) == [rng("09:00", "16:00")]

    def test_full_cover_removes_range(self):
        assert carve_out(rng("09:00", "17:00"), [rng("08:00", "18:00")]) == []


class TestResolveOpenRanges:
    def test_weekly_row_used_without_overrides(self):
        assert resolve_open_ranges([], row(1, "09:00", "17:00")) == [rng("09:00", "17:00")]

    def test_no_weekly_row_is_closed(self):
        assert resolve_open_ranges([], None) == []

    def test_unavailable_weekly_row_is_closed(self):
        assert resolve_open_ranges([], row(0, "09:00", "17:00")) == []

    def test_closure_override_wins_over_weekly(self):
        assert resolve_open_ranges([row(0)], row(1, "09:00", "17:00")) == []

    def test_available_override_replaces_weekly_hours(self):
        ranges = resolve_open_ranges([row(1, "10:00", "14:00")], row(1, "09:00", "17:00"))
        assert ranges == [rng("10:00", "14:00")]

    def test_blocks_carve_the_override_window(self):
        overrides = [
            row(1, "09:00", "17:00"),
            row(0, "12:00", "13:00"),
        ]
        assert resolve_open_ranges(overrides, None) == [rng("09:00", "12:00"), rng("13:00", "17:00")]

    def test_first_available_override_is_the_base(self):
        overrides = [
            row(1, "09:00", "12:00"),
            row(1, "13:00", "18:00"),
        ]
        assert resolve_open_ranges(overrides, None) == [rng("09:00", "12:00")]

    def test_available_override_without_hours_is_closed(self):
        assert resolve_open_ranges([row(1)], row(1, "09:00", "17:00")) == []

    def test_block_without_hours_closes_the_day(self):
        assert resolve_open_ranges([row(1, "09:00", "17:00"), row(0)], None) == []


class TestResolveKitchenDay:
    def test_override_for_other_date_is_ignored(self, db, make_kitchen, open_week, add_override):
        kitchen = make_kitchen()
        open_week(kitchen, "09:00", "17:00")
        add_override(kitchen, specific_date=date(2030, 6, 4), is_available=0)

        assert resolve_kitchen_day(db, kitchen.id, BOOKING_DATE) == [rng("09:00", "17:00")]

    def test_override_rows_from_db(self, db, make_kitchen, open_week, add_override):
        kitchen = make_kitchen()
        open_week(kitchen, "08:00", "20:00")
        add_override(kitchen, is_available=1, start_time="09:00", end_time="17:00")
        add_override(kitchen, is_available=0, start_time="12:00", end_time="13:00", reason="Deep clean")

        assert resolve_kitchen_day(db, kitchen.id, BOOKING_DATE) == [
            rng("09:00", "12:00"),
            rng("13:00", "17:00"),
        ]

