"""
Aggregation of employee busy hours into conflict and availability calendars.

This is the entry point of the domain layer - pure logic without any
external dependencies (no storage, no I/O).
"""

from typing import Dict, List, Optional, Sequence

from .cyclic import CyclicNormalizer
from .intervals import intersection, union_groups
from .models import (
    BusyHoursReport,
    Employee,
    EmployeeAvailability,
    Frequency,
    Timeslot,
)
from .workload import WorkloadCalculator


class BusyHoursAggregator:
    """
    Combines per-employee busy hours.

    Algorithm:
    1. Calculate busy hours of every employee from their active visit parts
    2. Move every cycle's busy hours onto the first cycle
    3. Merge the cycles into a single timeline per employee
    4. Intersect (all employees busy) or merge (any employee busy) the timelines
    """

    def __init__(self, calculator: WorkloadCalculator, normalizer: CyclicNormalizer):
        self.calculator = calculator
        self.normalizer = normalizer

    def employee_availability(
        self,
        employee: Employee,
        cyclic_ranges: Optional[Sequence[Timeslot]] = None,
        frequency: Optional[Frequency] = Frequency.ONCE,
    ) -> EmployeeAvailability:
        """
        Calculate the busy timeline and the working-hours load of one employee.

        Without cyclic ranges every busy slot stands for itself.
        """
        visit_slots = [visit_part.timeslot for visit_part in employee.visit_parts()]
        busy_hours = self.calculator.busy_hours(visit_slots)

        if cyclic_ranges:
            cycles = [
                self.normalizer.normalize(cyclic_range, index, busy_hours, frequency)
                for index, cyclic_range in enumerate(cyclic_ranges)
            ]
            scoped_slots = [
                slot for slot in visit_slots
                if any(cyclic_range.contains(slot) for cyclic_range in cyclic_ranges)
            ]
        else:
            cycles = [[slot] for slot in busy_hours]
            scoped_slots = visit_slots

        return EmployeeAvailability(
            employee_id=employee.id,
            service_ids=employee.service_ids,
            working_hours=union_groups(cycles),
            number_of_working_hours=self.calculator.number_of_working_hours(scoped_slots),
        )

    def employee_availabilities(
        self,
        employees: Sequence[Employee],
        cyclic_ranges: Optional[Sequence[Timeslot]] = None,
        frequency: Optional[Frequency] = Frequency.ONCE,
    ) -> List[EmployeeAvailability]:
        return [
            self.employee_availability(employee, cyclic_ranges, frequency)
            for employee in employees
        ]

    def compute_global_conflicts(
        self,
        employees: Sequence[Employee],
        cyclic_ranges: Optional[Sequence[Timeslot]] = None,
        frequency: Optional[Frequency] = Frequency.ONCE,
    ) -> List[Timeslot]:
        """Slots in which every employee is busy at the same time."""
        availabilities = self.employee_availabilities(employees, cyclic_ranges, frequency)
        return intersection([availability.working_hours for availability in availabilities])

    @staticmethod
    def compute_merged_availability(
        service_groups: Sequence[Sequence[Sequence[Timeslot]]],
    ) -> List[Timeslot]:
        """
        Merge the timelines of all employees of all services into one calendar.

        Args:
            service_groups: Per service, the busy timeline of each of its employees
        """
        return union_groups(
            timeline
            for service_timelines in service_groups
            for timeline in service_timelines
        )

    def global_conflicts_report(
        self,
        employees: Sequence[Employee],
        cyclic_ranges: Optional[Sequence[Timeslot]] = None,
        frequency: Optional[Frequency] = Frequency.ONCE,
    ) -> BusyHoursReport:
        availabilities = self.employee_availabilities(employees, cyclic_ranges, frequency)
        return BusyHoursReport(
            employees=availabilities,
            busy_hours=intersection([availability.working_hours for availability in availabilities]),
        )

    def merged_report(
        self,
        employees: Sequence[Employee],
        cyclic_ranges: Optional[Sequence[Timeslot]] = None,
        frequency: Optional[Frequency] = Frequency.ONCE,
    ) -> BusyHoursReport:
        availabilities = self.employee_availabilities(employees, cyclic_ranges, frequency)
        return BusyHoursReport(
            employees=availabilities,
            busy_hours=self.compute_merged_availability(self._group_by_service(availabilities)),
        )

    @staticmethod
    def _group_by_service(
        availabilities: Sequence[EmployeeAvailability],
    ) -> List[List[List[Timeslot]]]:
        groups: Dict[int, List[List[Timeslot]]] = {}
        unassigned: List[List[Timeslot]] = []

        for availability in availabilities:
            if not availability.service_ids:
                unassigned.append(availability.working_hours)
            for service_id in availability.service_ids:
                groups.setdefault(service_id, []).append(availability.working_hours)

        return list(groups.values()) + ([unassigned] if unassigned else [])
