"""
Domain-specific exception hierarchy for the busy-hours application.
"""


class BusyHoursError(Exception):
    """Base class for all application-level errors."""


class StorageError(BusyHoursError):
    """Raised when employees and their visit parts cannot be loaded."""


class HolidayLookupError(BusyHoursError):
    """Raised when public holidays cannot be resolved for a locale."""


class InvalidQueryError(BusyHoursError, ValueError):
    """Raised when a busy-hours query carries malformed parameters."""
