"""
File-backed storage of employees and their visit parts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pendulum

from ..domain.exceptions import StorageError
from ..domain.models import Employee, EmployeeFilter, EmployeeService, Status, VisitPart

logger = logging.getLogger(__name__)


class JsonEmployeeStore:
    """
    Storage collaborator reading employees from a JSON export.

    Expected format:
    {
        "employees": [
            {
                "id": 1,
                "firstName": "Anna",
                "lastName": "Nowak",
                "services": [
                    {
                        "serviceId": 3,
                        "visitParts": [
                            {
                                "id": 10,
                                "visitId": 4,
                                "startDate": "2024-01-12T10:00:00Z",
                                "endDate": "2024-01-12T11:00:00Z",
                                "status": "ACTIVE"
                            }
                        ]
                    }
                ]
            }
        ]
    }
    """

    def __init__(self, data_file: Path, timezone: str = "UTC"):
        self.data_file = data_file
        self.timezone = timezone
        self._employees: List[Employee] | None = None

    async def fetch_employees_with_visit_parts(
        self,
        query_filter: EmployeeFilter,
    ) -> List[Employee]:
        """Return the employees matching the filter, with all their visit parts."""
        return [employee for employee in self._load() if query_filter.matches(employee)]

    def _load(self) -> List[Employee]:
        if self._employees is not None:
            return self._employees

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            raise StorageError(f"Could not read employee data from {self.data_file}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StorageError(f"Invalid JSON in {self.data_file}: {exc}") from exc

        if not isinstance(data, dict) or not isinstance(data.get("employees"), list):
            raise StorageError(f"{self.data_file} must contain an 'employees' list")

        self._employees = [self._parse_employee(raw) for raw in data["employees"]]
        return self._employees

    def _parse_employee(self, raw: Dict[str, Any]) -> Employee:
        try:
            employee_id = int(raw["id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Employee record without a valid id: {raw!r}") from exc

        services: List[EmployeeService] = []
        for raw_service in raw.get("services", []):
            try:
                service_id = int(raw_service["serviceId"])
            except (KeyError, TypeError, ValueError) as exc:
                raise StorageError(
                    f"Service record of employee {employee_id} without a valid serviceId: {raw_service!r}"
                ) from exc

            visit_parts: List[VisitPart] = []

            for raw_visit_part in raw_service.get("visitParts", []):
                try:
                    visit_parts.append(
                        self._parse_visit_part(raw_visit_part, employee_id, service_id)
                    )
                except (KeyError, TypeError, ValueError) as exc:
                    # Skip invalid visit parts
                    logger.warning(
                        "Skipping visit part %r of employee %s: %s",
                        raw_visit_part.get("id") if isinstance(raw_visit_part, dict) else raw_visit_part,
                        employee_id,
                        exc,
                    )

            services.append(EmployeeService(service_id=service_id, visit_parts=visit_parts))

        return Employee(
            id=employee_id,
            first_name=raw.get("firstName", ""),
            last_name=raw.get("lastName", ""),
            services=services,
        )

    def _parse_visit_part(
        self,
        raw: Dict[str, Any],
        employee_id: int,
        service_id: int,
    ) -> VisitPart:
        start_date = pendulum.parse(raw["startDate"]).in_timezone(self.timezone)
        end_date = pendulum.parse(raw["endDate"]).in_timezone(self.timezone)

        if start_date > end_date:
            raise ValueError(f"start {start_date} is after end {end_date}")

        return VisitPart(
            id=int(raw["id"]),
            employee_id=employee_id,
            service_id=service_id,
            start_date=start_date,
            end_date=end_date,
            status=Status(raw.get("status", Status.ACTIVE.value)),
            visit_id=raw.get("visitId"),
        )
