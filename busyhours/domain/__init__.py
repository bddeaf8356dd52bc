"""
Domain layer - Pure business logic without external dependencies.
"""

from .aggregator import BusyHoursAggregator
from .cyclic import CyclicNormalizer
from .frequency import FrequencyProjection, cyclic_date_ranges, parse_period, projection_for
from .holidays import HolidayCalendar, HolidayProviderProtocol
from .intervals import contains, intersection, overlaps, union, union_groups
from .models import (
    BusyHoursReport,
    Employee,
    EmployeeAvailability,
    EmployeeFilter,
    EmployeeService,
    Frequency,
    Status,
    Timeslot,
    VisitPart,
    WorkloadPolicy,
)
from .workload import WorkloadCalculator

__all__ = [
    "BusyHoursAggregator",
    "BusyHoursReport",
    "CyclicNormalizer",
    "Employee",
    "EmployeeAvailability",
    "EmployeeFilter",
    "EmployeeService",
    "Frequency",
    "FrequencyProjection",
    "HolidayCalendar",
    "HolidayProviderProtocol",
    "Status",
    "Timeslot",
    "VisitPart",
    "WorkloadCalculator",
    "WorkloadPolicy",
    "contains",
    "cyclic_date_ranges",
    "intersection",
    "overlaps",
    "parse_period",
    "projection_for",
    "union",
    "union_groups",
]
