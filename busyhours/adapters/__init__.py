"""
Adapters layer - External collaborators (holiday calendars, employee storage).
"""

from .holiday_provider import PublicHolidayProvider
from .json_store import JsonEmployeeStore

__all__ = ["JsonEmployeeStore", "PublicHolidayProvider"]
