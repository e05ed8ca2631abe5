"""Tests for minutes-since-midnight helpers."""

from datetime import time

import pytest

from app.services.availability.time_of_day import (
    InvalidTimeError,
    TimeOfDay,
    format_minutes,
    intervals_overlap,
    walk_grid,
)


class TestParse:

    def test_hh_mm(self):
        assert TimeOfDay.parse("09:30").minutes == 570

    def test_single_digit_hour(self):
        assert TimeOfDay.parse("9:05").minutes == 545

    def test_database_time_with_zero_seconds(self):
        assert TimeOfDay.parse("17:00:00").minutes == 1020

    def test_datetime_time(self):
        assert TimeOfDay.parse(time(23, 59)).minutes == 1439

    def test_passthrough(self):
        t = TimeOfDay(60)
        assert TimeOfDay.parse(t) is t

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "", "12:00:30", "1200"])
    def test_malformed_strings_rejected(self, value):
        with pytest.raises(InvalidTimeError):
            TimeOfDay.parse(value)

    def test_sub_minute_time_rejected(self):
        with pytest.raises(InvalidTimeError):
            TimeOfDay.parse(time(9, 0, 30))

    def test_out_of_range_minutes(self):
        with pytest.raises(InvalidTimeError):
            TimeOfDay(1440)
        with pytest.raises(InvalidTimeError):
            TimeOfDay(-1)

    def test_invalid_time_is_a_value_error(self):
        assert issubclass(InvalidTimeError, ValueError)


class TestFormatting:

    def test_zero_padded(self):
        assert format_minutes(5) == "00:05"
        assert str(TimeOfDay(9 * 60)) == "09:00"

    def test_to_time(self):
        assert TimeOfDay(690).to_time() == time(11, 30)

    def test_ordering(self):
        assert TimeOfDay(60) < TimeOfDay(61)


class TestIntervals:

    def test_touching_intervals_do_not_overlap(self):
        assert not intervals_overlap(570, 600, 600, 630)
        assert not intervals_overlap(630, 660, 600, 630)

    def test_partial_overlap(self):
        assert intervals_overlap(585, 615, 600, 630)

    def test_containment(self):
        assert intervals_overlap(540, 720, 600, 630)

    def test_grid_stops_before_end(self):
        assert list(walk_grid(540, 600, 15)) == [540, 555, 570, 585]

    def test_grid_empty_when_end_not_after_start(self):
        assert list(walk_grid(600, 600, 15)) == []
        assert list(walk_grid(600, 540, 15)) == []

    def test_grid_rejects_non_positive_step(self):
        with pytest.raises(ValueError):
            list(walk_grid(0, 60, 0))
