"""
Public holidays expressed as full-day timeslots.
"""

from datetime import date
from typing import Iterable, List, Protocol, Set

import pendulum

from .models import Timeslot


class HolidayProviderProtocol(Protocol):
    """Protocol describing the holiday lookup needed by the calendar."""

    def get_holidays(self, year: int, locale: str) -> List[date]:
        """Return the public holidays of a year (movable-feast duplicates excluded)."""


class HolidayCalendar:
    """
    Resolves the public holidays relevant to a set of timeslots.

    The result covers every holiday of each calendar year the timeslots
    touch, not only the holidays the timeslots intersect. Callers match
    holidays to busy days themselves.
    """

    def __init__(self, provider: HolidayProviderProtocol, locale: str, timezone: str):
        self.provider = provider
        self.locale = locale
        self.timezone = timezone

    def years_spanned(self, timeslots: Iterable[Timeslot]) -> List[int]:
        years: Set[int] = set()
        for timeslot in timeslots:
            years.add(timeslot.start_date.in_timezone(self.timezone).year)
            years.add(timeslot.end_date.in_timezone(self.timezone).year)
        return sorted(years)

    def holiday_dates(self, timeslots: Iterable[Timeslot]) -> Set[date]:
        """Holiday calendar days of all years spanned by the timeslots."""
        dates: Set[date] = set()
        for year in self.years_spanned(timeslots):
            dates.update(
                date(day.year, day.month, day.day)
                for day in self.provider.get_holidays(year, self.locale)
            )
        return dates

    def full_day_intervals(self, timeslots: Iterable[Timeslot]) -> List[Timeslot]:
        """Every holiday of the spanned years as a 00:00 - 23:59:59.999999 local slot."""
        return [self.full_day(day) for day in sorted(self.holiday_dates(timeslots))]

    def full_day(self, day: date) -> Timeslot:
        return full_day(day, self.timezone)


def full_day(day: date, timezone: str) -> Timeslot:
    """The whole local calendar day as a timeslot."""
    start = pendulum.datetime(day.year, day.month, day.day, tz=timezone)
    return Timeslot(start_date=start, end_date=start.end_of("day"))
