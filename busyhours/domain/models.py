"""
Domain models for visit parts, employees and busy-hours results.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from pendulum import DateTime


@dataclass(frozen=True)
class Timeslot:
    """
    Represents an immutable time interval with start and end datetime.

    Invariant: start_date must not be after end_date. Every transformation
    returns a new instance.
    """
    start_date: DateTime
    end_date: DateTime

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise ValueError(
                f"Start date {self.start_date} must not be after end date {self.end_date}"
            )

    def duration(self) -> timedelta:
        """Return the duration as a timedelta."""
        return self.end_date - self.start_date

    def duration_hours(self) -> float:
        """Return the duration in (fractional) hours."""
        return self.duration().total_seconds() / 3600

    def overlaps(self, other: "Timeslot") -> bool:
        """Check if this slot overlaps with another. Touching slots do not overlap."""
        return self.end_date > other.start_date and other.end_date > self.start_date

    def contains(self, other: "Timeslot") -> bool:
        """Check if the other slot lies fully inside this one (bounds inclusive)."""
        return self.start_date <= other.start_date and other.end_date <= self.end_date

    def intersect(self, other: "Timeslot") -> "Timeslot | None":
        """
        Calculate the intersection of two slots.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return Timeslot(
            start_date=max(self.start_date, other.start_date),
            end_date=min(self.end_date, other.end_date),
        )

    def shift(self, **units: int) -> "Timeslot":
        """Move both bounds by the given pendulum units (days=, weeks=, months=...)."""
        return Timeslot(
            start_date=self.start_date.add(**units),
            end_date=self.end_date.add(**units),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "startDate": self.start_date.to_iso8601_string(),
            "endDate": self.end_date.to_iso8601_string(),
        }

    def __str__(self) -> str:
        return f"{self.start_date.format('DD.MM.YYYY HH:mm')} - {self.end_date.format('DD.MM.YYYY HH:mm')}"


class Status(str, Enum):
    """Lifecycle status of a visit part."""
    ACTIVE = "ACTIVE"
    TO_BE_CONFIRMED = "TO_BE_CONFIRMED"
    CANCELLED = "CANCELLED"
    CLOSED = "CLOSED"

    @property
    def is_terminal(self) -> bool:
        return self in (Status.CANCELLED, Status.CLOSED)


class Frequency(str, Enum):
    """Recurrence cadence of a reservation."""
    ONCE = "ONCE"
    ONCE_A_WEEK = "ONCE_A_WEEK"
    EVERY_TWO_WEEKS = "EVERY_TWO_WEEKS"
    ONCE_A_MONTH = "ONCE_A_MONTH"


@dataclass
class VisitPart:
    """
    An atomic scheduled work interval of one employee for one service.
    """
    id: int
    employee_id: int
    service_id: int
    start_date: DateTime
    end_date: DateTime
    status: Status = Status.ACTIVE
    visit_id: Optional[int] = None

    @property
    def timeslot(self) -> Timeslot:
        return Timeslot(start_date=self.start_date, end_date=self.end_date)

    @property
    def is_active(self) -> bool:
        """Only non-terminal visit parts make an employee busy."""
        return not self.status.is_terminal


@dataclass
class EmployeeService:
    """A service an employee is assigned to, with its visit parts."""
    service_id: int
    visit_parts: List[VisitPart] = field(default_factory=list)


@dataclass
class Employee:
    """
    Employee as delivered by the storage collaborator.
    """
    id: int
    first_name: str = ""
    last_name: str = ""
    services: List[EmployeeService] = field(default_factory=list)

    @property
    def service_ids(self) -> List[int]:
        return [service.service_id for service in self.services]

    def visit_parts(self, active_only: bool = True) -> List[VisitPart]:
        """Flatten visit parts of all assigned services."""
        return [
            visit_part
            for service in self.services
            for visit_part in service.visit_parts
            if visit_part.is_active or not active_only
        ]

    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or f"#{self.id}"


@dataclass
class EmployeeFilter:
    """
    Selection of employees passed to the storage collaborator.

    Empty lists select nothing; None leaves the criterion out.
    """
    employee_ids: Optional[List[int]] = None
    service_ids: Optional[List[int]] = None
    visit_ids: Optional[List[int]] = None

    def matches(self, employee: Employee) -> bool:
        if self.employee_ids is not None and employee.id not in self.employee_ids:
            return False

        if self.service_ids is not None and not set(employee.service_ids) & set(self.service_ids):
            return False

        if self.visit_ids is not None:
            visit_ids = {
                visit_part.visit_id
                for visit_part in employee.visit_parts(active_only=False)
            }
            if not visit_ids & set(self.visit_ids):
                return False

        return True


@dataclass(frozen=True)
class WorkloadPolicy:
    """
    Rules for turning visit parts into working and busy hours.
    """
    buffer_minutes: int = 30
    full_day_threshold_hours: int = 8
    full_week_busy_days: int = 5
    timezone: str = "Europe/Warsaw"

    @property
    def buffer(self) -> timedelta:
        return timedelta(minutes=self.buffer_minutes)

    @property
    def full_day_threshold(self) -> timedelta:
        return timedelta(hours=self.full_day_threshold_hours)


@dataclass
class EmployeeAvailability:
    """
    Derived busy-hours data of a single employee.
    """
    employee_id: int
    service_ids: List[int]
    working_hours: List[Timeslot]
    number_of_working_hours: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "serviceIds": list(self.service_ids),
            "workingHours": [slot.to_dict() for slot in self.working_hours],
            "numberOfWorkingHours": round(self.number_of_working_hours, 2),
        }


@dataclass
class BusyHoursReport:
    """Per-employee availability together with the aggregated busy hours."""
    employees: List[EmployeeAvailability]
    busy_hours: List[Timeslot]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employees": [employee.to_dict() for employee in self.employees],
            "busyHours": [slot.to_dict() for slot in self.busy_hours],
        }
