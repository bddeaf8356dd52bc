"""
Normalization of recurring busy hours into the first cycle.
"""

from datetime import date, timedelta
from typing import List, Optional, Sequence, Set

from .frequency import projection_for
from .holidays import HolidayCalendar
from .models import Frequency, Timeslot


class CyclicNormalizer:
    """
    Re-expresses busy hours of one cycle as if they happened in cycle 0.

    Once every cycle is moved onto the first one, busy hours of different
    recurrences can be compared and merged positionally: "is the employee
    busy at the same relative slot in any of the upcoming months?".
    """

    def __init__(self, holiday_calendar: HolidayCalendar, timezone: str):
        self.holiday_calendar = holiday_calendar
        self.timezone = timezone

    def normalize(
        self,
        cyclic_range: Timeslot,
        range_index: int,
        busy_hours: Sequence[Timeslot],
        frequency: Optional[Frequency],
    ) -> List[Timeslot]:
        """
        Shift the busy hours inside ``cyclic_range`` back by ``range_index`` cycles.

        A busy slot starting on a public holiday is replaced by the busy
        slots of the next non-holiday day in the range, moved back onto the
        holiday, so a visit displaced by a holiday still lands on its
        recurring day.
        """
        projection = projection_for(frequency)

        in_range = [slot for slot in busy_hours if cyclic_range.contains(slot)]
        if not in_range:
            return []

        holiday_days = self.holiday_calendar.holiday_dates(in_range)

        cycle_busy_hours: List[Timeslot] = []
        displaced_days: Set[date] = set()

        for slot in in_range:
            day = self._local_day(slot)

            if day not in holiday_days:
                cycle_busy_hours.append(slot)
                continue

            # Only substitute once per holiday
            if day in displaced_days:
                continue
            displaced_days.add(day)

            skipped_days = 1
            while day + timedelta(days=skipped_days) in holiday_days:
                skipped_days += 1
            next_day = day + timedelta(days=skipped_days)

            next_day_slots = sorted(
                (candidate for candidate in in_range if self._local_day(candidate) == next_day),
                key=lambda candidate: candidate.start_date,
            )
            cycle_busy_hours.extend(candidate.shift(days=-skipped_days) for candidate in next_day_slots)

        return [projection.shift_timeslot(slot, -range_index) for slot in cycle_busy_hours]

    def _local_day(self, timeslot: Timeslot) -> date:
        local = timeslot.start_date.in_timezone(self.timezone)
        return date(local.year, local.month, local.day)
