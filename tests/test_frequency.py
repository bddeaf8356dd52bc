"""
Tests for frequency projections and cyclic date ranges.
"""

import pendulum
import pytest

from busyhours.domain.exceptions import InvalidQueryError
from busyhours.domain.frequency import cyclic_date_ranges, parse_period, projection_for
from busyhours.domain.models import Frequency, Timeslot


def _dt(value: str):
    return pendulum.parse(value, tz="UTC")


class TestProjection:
    """Tests for projection_for."""

    def test_steps_and_units(self):
        assert (projection_for(Frequency.ONCE_A_WEEK).step, projection_for(Frequency.ONCE_A_WEEK).unit) == (1, "week")
        assert (projection_for(Frequency.EVERY_TWO_WEEKS).step, projection_for(Frequency.EVERY_TWO_WEEKS).unit) == (2, "week")
        assert (projection_for(Frequency.ONCE_A_MONTH).step, projection_for(Frequency.ONCE_A_MONTH).unit) == (1, "month")

    def test_once_projects_nothing(self):
        for frequency in (Frequency.ONCE, None):
            projection = projection_for(frequency)

            assert not projection.is_cyclic
            assert projection.step == 0
            assert projection.shift(_dt("2024-01-12 10:00"), -3) == _dt("2024-01-12 10:00")

    def test_accepts_raw_values(self):
        assert projection_for("ONCE_A_MONTH") is projection_for(Frequency.ONCE_A_MONTH)

    def test_shift_by_cycles(self):
        """Negative cycles move the date back by whole steps."""
        assert projection_for(Frequency.ONCE_A_MONTH).shift(_dt("2024-03-12 10:00"), -2) == _dt("2024-01-12 10:00")
        assert projection_for(Frequency.EVERY_TWO_WEEKS).shift(_dt("2024-01-26 10:00"), -1) == _dt("2024-01-12 10:00")
        assert projection_for(Frequency.ONCE_A_WEEK).shift(_dt("2024-01-12 10:00"), 1) == _dt("2024-01-19 10:00")

    def test_shift_timeslot(self):
        slot = Timeslot(_dt("2024-02-12 10:00"), _dt("2024-02-12 11:00"))

        shifted = projection_for(Frequency.ONCE_A_MONTH).shift_timeslot(slot, -1)

        assert shifted == Timeslot(_dt("2024-01-12 10:00"), _dt("2024-01-12 11:00"))


class TestParsePeriod:
    """Tests for parse_period."""

    def test_valid_period(self):
        assert parse_period("2024-01") == (2024, 1)
        assert parse_period("2024-12") == (2024, 12)

    @pytest.mark.parametrize("period", ["2024-1", "2024-13", "2024-00", "24-01", "2024/01", "January", "2024-ab"])
    def test_invalid_period(self, period):
        with pytest.raises(InvalidQueryError):
            parse_period(period)


class TestCyclicDateRanges:
    """Tests for cyclic_date_ranges."""

    def test_once_covers_queried_month(self):
        ranges = cyclic_date_ranges(2024, 1, Frequency.ONCE)

        assert len(ranges) == 1
        assert ranges[0].start_date == _dt("2024-01-01 00:00")
        assert ranges[0].end_date == _dt("2024-01-01").end_of("month")

    def test_monthly_covers_a_year_ahead(self):
        ranges = cyclic_date_ranges(2024, 1, Frequency.ONCE_A_MONTH)

        assert len(ranges) == 13
        assert ranges[0].start_date == _dt("2024-01-01 00:00")
        assert ranges[-1].start_date == _dt("2025-01-01 00:00")
        assert ranges[-1].end_date == _dt("2025-01-31").end_of("day")

    def test_monthly_ranges_cover_whole_months(self):
        """Starting from a 31-day month must not cut later months short."""
        ranges = cyclic_date_ranges(2024, 1, Frequency.ONCE_A_MONTH)

        assert ranges[1].start_date == _dt("2024-02-01 00:00")
        assert ranges[1].end_date == _dt("2024-02-29").end_of("day")
        assert ranges[2].end_date == _dt("2024-03-31").end_of("day")

    def test_weekly_ranges(self):
        ranges = cyclic_date_ranges(2024, 1, Frequency.ONCE_A_WEEK)

        assert len(ranges) == 57
        assert ranges[1].start_date == _dt("2024-01-08 00:00")
        assert ranges[1].end_date == _dt("2024-02-07").end_of("day")

    def test_every_two_weeks_ranges(self):
        ranges = cyclic_date_ranges(2024, 1, Frequency.EVERY_TWO_WEEKS)

        assert len(ranges) == 29
        assert ranges[1].start_date == _dt("2024-01-15 00:00")

    def test_ranges_use_timezone(self):
        ranges = cyclic_date_ranges(2024, 1, Frequency.ONCE, timezone="Europe/Warsaw")

        assert ranges[0].start_date == pendulum.datetime(2023, 12, 31, 23, 0, tz="UTC")

    def test_longer_lookahead(self):
        assert len(cyclic_date_ranges(2024, 1, Frequency.ONCE_A_MONTH, lookahead_years=2)) == 25
