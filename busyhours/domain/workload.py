"""
Working hours and busy hours of a single employee.

Both calculations are day-bucketed:

* working hours add a buffer before every visit part only and are used for
  load metrics;
* busy hours add the buffer on both sides, turn heavily booked weeks and
  public holidays into full days and are used for conflict detection.

A day collapses into a full-day block only when its blocks last longer
than the threshold; a day of exactly 8h00m keeps its discrete blocks.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Set

from .holidays import HolidayCalendar, full_day
from .intervals import union
from .models import Timeslot, WorkloadPolicy


class WorkloadCalculator:
    """
    Converts raw visit-part timeslots of one employee into working or busy hours.

    Algorithm (per calendar day of the visit part start):
    1. Sort the day's timeslots
    2. Open a block at the first start minus the leading buffer
    3. Extend the block while the next buffered start reaches its end
    4. Replace the day by a single full-day block if the blocks exceed the
       full-day threshold
    """

    def __init__(self, policy: WorkloadPolicy, holiday_calendar: HolidayCalendar):
        self.policy = policy
        self.holiday_calendar = holiday_calendar

    def working_hours(self, timeslots: Iterable[Timeslot]) -> List[Timeslot]:
        """
        Calculate working hours with a buffer before each visit part.

        Days are kept apart: blocks are never merged across midnight.
        """
        working: List[Timeslot] = []

        for day, day_slots in self._group_by_day(timeslots).items():
            blocks = self._merge_day(day_slots, before=self.policy.buffer, after=timedelta(0))
            working.extend(self._collapse_day(day, blocks))

        return working

    def number_of_working_hours(self, timeslots: Iterable[Timeslot]) -> float:
        return sum(slot.duration_hours() for slot in self.working_hours(timeslots))

    def busy_hours(self, timeslots: Iterable[Timeslot]) -> List[Timeslot]:
        """
        Calculate busy hours with a buffer before and after each visit part.

        Weeks with enough busy days are filled up with full days. Every
        public holiday of the years the visit parts touch becomes a full
        day, whether or not a visit falls on it.
        """
        timeslots = list(timeslots)
        per_day = self._group_by_day(timeslots)

        day_blocks: List[Timeslot] = []
        for day, day_slots in per_day.items():
            blocks = self._merge_day(day_slots, before=self.policy.buffer, after=self.policy.buffer)
            day_blocks.extend(self._collapse_day(day, blocks))

        busy = union(day_blocks)
        busy.extend(self._full_week_blocks(set(per_day.keys())))
        if timeslots:
            busy.extend(self.holiday_calendar.full_day_intervals(timeslots))

        return union(busy)

    def _local_day(self, timeslot: Timeslot) -> date:
        local = timeslot.start_date.in_timezone(self.policy.timezone)
        return date(local.year, local.month, local.day)

    def _group_by_day(self, timeslots: Iterable[Timeslot]) -> Dict[date, List[Timeslot]]:
        per_day: Dict[date, List[Timeslot]] = defaultdict(list)
        for timeslot in timeslots:
            per_day[self._local_day(timeslot)].append(timeslot)

        return {
            day: sorted(per_day[day], key=lambda slot: slot.start_date)
            for day in sorted(per_day)
        }

    @staticmethod
    def _merge_day(
        day_slots: List[Timeslot],
        before: timedelta,
        after: timedelta,
    ) -> List[Timeslot]:
        """
        Merge sorted timeslots of one day into buffered blocks.

        Example (before=30min, after=0):
        Visits: [10:00-11:00, 11:30-12:00, 14:00-15:00]
        Result: [09:30-12:00, 13:30-15:00]
        """
        blocks: List[Timeslot] = []
        block_start = day_slots[0].start_date - before
        block_end = day_slots[0].end_date + after

        for timeslot in day_slots[1:]:
            if timeslot.start_date - before <= block_end:
                block_end = max(block_end, timeslot.end_date + after)
            else:
                blocks.append(Timeslot(start_date=block_start, end_date=block_end))
                block_start = timeslot.start_date - before
                block_end = timeslot.end_date + after

        blocks.append(Timeslot(start_date=block_start, end_date=block_end))
        return blocks

    def _collapse_day(self, day: date, blocks: List[Timeslot]) -> List[Timeslot]:
        total = sum((block.duration() for block in blocks), timedelta(0))

        if total > self.policy.full_day_threshold:
            return [self._full_day(day)]
        return blocks

    def _full_week_blocks(self, busy_days: Set[date]) -> List[Timeslot]:
        """Full days for the free days of every week with enough busy days."""
        weeks: Dict[date, Set[date]] = defaultdict(set)
        for day in busy_days:
            weeks[day - timedelta(days=day.weekday())].add(day)

        blocks: List[Timeslot] = []
        for week_start in sorted(weeks):
            if len(weeks[week_start]) < self.policy.full_week_busy_days:
                continue

            for offset in range(7):
                day = week_start + timedelta(days=offset)
                if day not in weeks[week_start]:
                    blocks.append(self._full_day(day))

        return blocks

    def _full_day(self, day: date) -> Timeslot:
        return full_day(day, self.policy.timezone)
