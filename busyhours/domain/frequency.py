"""
Projection of recurrence frequencies onto the calendar.

A frequency decides how far apart two occurrences of a recurring
reservation are. ``ONCE`` has no projection at all: callers must treat the
single occurrence literally.
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import InvalidQueryError
from .models import Frequency, Timeslot

AdvanceDate = Callable[[DateTime, int], DateTime]
CountUnits = Callable[[DateTime, DateTime], int]


def advance_by_weeks(date: DateTime, weeks: int) -> DateTime:
    return date.add(weeks=weeks)


def advance_by_months(date: DateTime, months: int) -> DateTime:
    return date.add(months=months)


def weeks_between(end: DateTime, start: DateTime) -> int:
    return start.diff(end).in_weeks()


def months_between(end: DateTime, start: DateTime) -> int:
    return start.diff(end).in_months()


@dataclass(frozen=True)
class FrequencyProjection:
    """
    Step size and calendar unit of a frequency.

    ``advance`` and ``count_units_between`` are None for ``ONCE``.
    """
    step: int
    unit: Optional[str] = None
    advance: Optional[AdvanceDate] = None
    count_units_between: Optional[CountUnits] = None

    @property
    def is_cyclic(self) -> bool:
        return self.advance is not None

    def shift(self, date: DateTime, cycles: int) -> DateTime:
        """Move a date by a number of cycles (negative moves backwards)."""
        if self.advance is None:
            return date
        return self.advance(date, cycles * self.step)

    def shift_timeslot(self, timeslot: Timeslot, cycles: int) -> Timeslot:
        return Timeslot(
            start_date=self.shift(timeslot.start_date, cycles),
            end_date=self.shift(timeslot.end_date, cycles),
        )


_PROJECTIONS = {
    Frequency.ONCE_A_WEEK: FrequencyProjection(
        step=1, unit="week", advance=advance_by_weeks, count_units_between=weeks_between
    ),
    Frequency.EVERY_TWO_WEEKS: FrequencyProjection(
        step=2, unit="week", advance=advance_by_weeks, count_units_between=weeks_between
    ),
    Frequency.ONCE_A_MONTH: FrequencyProjection(
        step=1, unit="month", advance=advance_by_months, count_units_between=months_between
    ),
}

_NO_PROJECTION = FrequencyProjection(step=0)


def projection_for(frequency: Optional[Frequency]) -> FrequencyProjection:
    """Return the projection for a frequency; ``ONCE`` and None project nothing."""
    if frequency is None:
        return _NO_PROJECTION
    return _PROJECTIONS.get(Frequency(frequency), _NO_PROJECTION)


def parse_period(period: str) -> Tuple[int, int]:
    """
    Parse a ``YYYY-MM`` period into (year, month). The month is 1-based.

    Raises:
        InvalidQueryError: If the period is malformed
    """
    parts = period.strip().split("-")
    if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
        raise InvalidQueryError(f"Period must have the form YYYY-MM, got '{period}'")

    try:
        year, month = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise InvalidQueryError(f"Period must have the form YYYY-MM, got '{period}'") from exc

    if not 1 <= month <= 12:
        raise InvalidQueryError(f"Month must be between 01 and 12, got {parts[1]}")

    return year, month


def cyclic_date_ranges(
    year: int,
    month: int,
    frequency: Optional[Frequency],
    timezone: str = "UTC",
    lookahead_years: int = 1,
) -> List[Timeslot]:
    """
    Create the per-cycle date ranges of a recurring query.

    The first range is the queried month. For cyclic frequencies the month
    window is advanced by one step at a time until the lookahead period is
    covered, e.g. 13 monthly ranges for a one year lookahead.
    """
    query_date = pendulum.datetime(year, month, 1, tz=timezone)
    start = query_date.start_of("month")
    end = query_date.end_of("month")

    projection = projection_for(frequency)

    if projection.advance is None or projection.count_units_between is None:
        return [Timeslot(start_date=start, end_date=end)]

    final_date = end.add(years=lookahead_years)
    units = projection.count_units_between(final_date, start)
    number_of_cycles = math.ceil((units + 1) / projection.step)

    ranges: List[Timeslot] = []

    for cycle in range(number_of_cycles):
        cycle_start = projection.advance(start, cycle * projection.step)
        if projection.unit == "month":
            # Advancing the last day of a short month would cut later months short
            cycle_end = cycle_start.end_of("month")
        else:
            cycle_end = projection.advance(end, cycle * projection.step)
        ranges.append(Timeslot(start_date=cycle_start, end_date=cycle_end))

    return ranges
