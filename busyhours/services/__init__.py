"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .busy_hours import BusyHoursQuery, BusyHoursService, EmployeeStoreProtocol
from .status_scheduler import InMemoryScheduler, SchedulerPort, VisitPartCloser

__all__ = [
    "BusyHoursQuery",
    "BusyHoursService",
    "EmployeeStoreProtocol",
    "InMemoryScheduler",
    "SchedulerPort",
    "VisitPartCloser",
]
