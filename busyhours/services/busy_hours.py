"""
Application services for busy-hours queries.

The service coordinates fetching employees via a storage adapter, scopes
their visit parts to the query and delegates the actual busy-hours
calculation to the domain-level ``BusyHoursAggregator``. The storage
dependency is a simple protocol so it can be stubbed in tests.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Protocol

import pendulum
from pydantic import BaseModel, field_validator, model_validator

from ..domain.aggregator import BusyHoursAggregator
from ..domain.frequency import cyclic_date_ranges, parse_period
from ..domain.models import (
    BusyHoursReport,
    Employee,
    EmployeeFilter,
    EmployeeService,
    Frequency,
    Timeslot,
)

logger = logging.getLogger(__name__)


class EmployeeStoreProtocol(Protocol):
    """Protocol describing the storage behaviour needed by the service."""

    async def fetch_employees_with_visit_parts(
        self,
        query_filter: EmployeeFilter,
    ) -> List[Employee]:
        """Return matching employees with the visit parts of their services."""


class BusyHoursQuery(BaseModel):
    """Parameters of a busy-hours request."""
    period: Optional[str] = None  # YYYY-MM
    frequency: Optional[Frequency] = None
    employee_ids: Optional[List[int]] = None
    service_ids: Optional[List[int]] = None
    visit_ids: Optional[List[int]] = None
    exclude_from: Optional[datetime] = None
    exclude_to: Optional[datetime] = None

    @field_validator("period")
    @classmethod
    def validate_period(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            parse_period(value)
        return value

    @model_validator(mode="after")
    def validate_exclusion_window(self) -> "BusyHoursQuery":
        """Ensure the exclusion window is complete and ordered."""
        if (self.exclude_from is None) != (self.exclude_to is None):
            raise ValueError("exclude_from and exclude_to must be given together")
        if self.exclude_from and self.exclude_to and self.exclude_from > self.exclude_to:
            raise ValueError("exclude_from must not be later than exclude_to")
        return self

    def employee_filter(self) -> EmployeeFilter:
        return EmployeeFilter(
            employee_ids=self.employee_ids,
            service_ids=self.service_ids,
            visit_ids=self.visit_ids,
        )

    def exclusion_window(self) -> Timeslot | None:
        if self.exclude_from is None or self.exclude_to is None:
            return None
        return Timeslot(
            start_date=pendulum.instance(self.exclude_from),
            end_date=pendulum.instance(self.exclude_to),
        )


class BusyHoursService:
    """
    Orchestrates employee retrieval and busy-hours aggregation.
    """

    def __init__(
        self,
        employee_store: EmployeeStoreProtocol,
        aggregator: BusyHoursAggregator,
        timezone: str = "Europe/Warsaw",
        lookahead_years: int = 1,
    ) -> None:
        self._employee_store = employee_store
        self._aggregator = aggregator
        self._timezone = timezone
        self._lookahead_years = lookahead_years

    def cyclic_ranges(self, query: BusyHoursQuery) -> List[Timeslot] | None:
        """Per-cycle ranges of the queried period, or None without a period."""
        if query.period is None:
            return None

        year, month = parse_period(query.period)
        return cyclic_date_ranges(
            year,
            month,
            query.frequency,
            timezone=self._timezone,
            lookahead_years=self._lookahead_years,
        )

    async def get_global_busy_hours(self, query: BusyHoursQuery) -> BusyHoursReport:
        """
        Busy hours shared by all selected employees.

        A slot is only reported when nobody could take a booking in it.
        """
        cyclic_ranges = self.cyclic_ranges(query)
        employees = await self.fetch_employees(query, cyclic_ranges)

        logger.info(
            "Calculating global busy hours for %d employee(s) over %d cycle(s)",
            len(employees),
            len(cyclic_ranges or []),
        )

        return self._aggregator.global_conflicts_report(
            employees,
            cyclic_ranges,
            query.frequency or Frequency.ONCE,
        )

    async def get_merged_busy_hours(self, query: BusyHoursQuery) -> BusyHoursReport:
        """Busy hours of any of the selected employees, merged into one calendar."""
        cyclic_ranges = self.cyclic_ranges(query)
        employees = await self.fetch_employees(query, cyclic_ranges)

        logger.info(
            "Calculating merged busy hours for %d employee(s) over %d cycle(s)",
            len(employees),
            len(cyclic_ranges or []),
        )

        return self._aggregator.merged_report(
            employees,
            cyclic_ranges,
            query.frequency or Frequency.ONCE,
        )

    async def fetch_employees(
        self,
        query: BusyHoursQuery,
        cyclic_ranges: Optional[List[Timeslot]] = None,
    ) -> List[Employee]:
        """Fetch the selected employees and scope their visit parts to the query."""
        employees = await self._employee_store.fetch_employees_with_visit_parts(
            query.employee_filter()
        )

        return [
            self._scope_employee(employee, cyclic_ranges, query.exclusion_window())
            for employee in employees
        ]

    @staticmethod
    def _scope_employee(
        employee: Employee,
        cyclic_ranges: Optional[List[Timeslot]],
        exclusion_window: Timeslot | None,
    ) -> Employee:
        """
        Keep only the visit parts that matter for the query.

        Terminal visit parts are dropped, the remaining ones must lie within
        the span of the cyclic ranges and must not overlap the exclusion
        window (a reservation being edited does not conflict with itself).
        """
        timeframe = None
        if cyclic_ranges:
            timeframe = Timeslot(
                start_date=cyclic_ranges[0].start_date,
                end_date=cyclic_ranges[-1].end_date,
            )

        services: List[EmployeeService] = []
        for service in employee.services:
            visit_parts = [
                visit_part
                for visit_part in service.visit_parts
                if visit_part.is_active
                and (timeframe is None or timeframe.contains(visit_part.timeslot))
                and (exclusion_window is None or not exclusion_window.overlaps(visit_part.timeslot))
            ]
            services.append(replace(service, visit_parts=visit_parts))

        return replace(employee, services=services)
