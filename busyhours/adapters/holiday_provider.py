"""
Public holiday lookup backed by the python-holidays calendars.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, List, Sequence, Tuple

import holidays
from dateutil.easter import easter

from ..domain.exceptions import HolidayLookupError

logger = logging.getLogger(__name__)


class PublicHolidayProvider:
    """
    Serves public holidays per year and locale (ISO country code).

    Some calendars list movable feasts that are not days off, e.g. the
    Pentecost Sunday ("Zielone Świątki", Easter + 49 days) in Poland. Holidays
    at the configured offsets from Easter Sunday are dropped.
    """

    def __init__(self, excluded_easter_offsets: Sequence[int] = (49,)):
        self.excluded_easter_offsets = tuple(excluded_easter_offsets)
        self._cache: Dict[Tuple[int, str], List[date]] = {}

    def get_holidays(self, year: int, locale: str) -> List[date]:
        """
        Return the sorted public holidays of a year.

        Raises:
            HolidayLookupError: If no calendar exists for the locale
        """
        key = (year, locale.upper())

        if key not in self._cache:
            self._cache[key] = self._load_holidays(*key)

        return list(self._cache[key])

    def _load_holidays(self, year: int, locale: str) -> List[date]:
        try:
            calendar = holidays.country_holidays(locale, years=year)
        except NotImplementedError as exc:
            raise HolidayLookupError(f"No public holiday calendar for locale '{locale}'") from exc

        excluded = {
            easter(year) + timedelta(days=offset)
            for offset in self.excluded_easter_offsets
        }

        public_holidays: List[date] = []
        for day in sorted(calendar.keys()):
            if day.year != year:
                continue
            if day in excluded:
                logger.debug("Skipping movable feast %s (%s)", day, calendar.get(day))
                continue
            public_holidays.append(day)

        logger.debug("Loaded %d public holidays for %s/%s", len(public_holidays), locale, year)
        return public_holidays
