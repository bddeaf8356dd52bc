"""
Tests for the JSON employee store.
"""

import asyncio
import json
import logging

import pendulum
import pytest

from busyhours.adapters.json_store import JsonEmployeeStore
from busyhours.domain.exceptions import StorageError
from busyhours.domain.models import EmployeeFilter, Status


def _write(tmp_path, data):
    data_file = tmp_path / "employees.json"
    data_file.write_text(json.dumps(data), encoding="utf-8")
    return data_file


def _data():
    return {
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
                                "startDate": "2024-01-12T10:00:00+01:00",
                                "endDate": "2024-01-12T11:00:00+01:00",
                                "status": "ACTIVE",
                            },
                            {
                                "id": 11,
                                "startDate": "2024-01-13T10:00:00Z",
                                "endDate": "2024-01-13T09:00:00Z",
                            },
                        ],
                    }
                ],
            },
            {
                "id": 2,
                "services": [
                    {
                        "serviceId": 5,
                        "visitParts": [
                            {
                                "id": 20,
                                "startDate": "2024-01-15T10:00:00Z",
                                "endDate": "2024-01-15T11:00:00Z",
                                "status": "CANCELLED",
                            }
                        ],
                    }
                ],
            },
        ]
    }


class TestJsonEmployeeStore:
    """Tests for JsonEmployeeStore."""

    def test_loads_employees(self, tmp_path):
        store = JsonEmployeeStore(_write(tmp_path, _data()), timezone="Europe/Warsaw")

        employees = asyncio.run(store.fetch_employees_with_visit_parts(EmployeeFilter()))

        assert [employee.id for employee in employees] == [1, 2]
        assert employees[0].display_name() == "Anna Nowak"
        visit_part = employees[0].services[0].visit_parts[0]
        assert visit_part.visit_id == 4
        assert visit_part.service_id == 3
        assert visit_part.start_date == pendulum.datetime(2024, 1, 12, 9, 0, tz="UTC")
        assert visit_part.start_date.timezone_name == "Europe/Warsaw"
        assert employees[1].services[0].visit_parts[0].status is Status.CANCELLED

    def test_invalid_visit_part_is_skipped(self, tmp_path, caplog):
        store = JsonEmployeeStore(_write(tmp_path, _data()))

        with caplog.at_level(logging.WARNING):
            employees = asyncio.run(store.fetch_employees_with_visit_parts(EmployeeFilter()))

        assert [visit_part.id for visit_part in employees[0].services[0].visit_parts] == [10]
        assert "Skipping visit part 11" in caplog.text

    def test_filter(self, tmp_path):
        store = JsonEmployeeStore(_write(tmp_path, _data()))

        employees = asyncio.run(store.fetch_employees_with_visit_parts(EmployeeFilter(service_ids=[5])))

        assert [employee.id for employee in employees] == [2]

    def test_missing_file(self, tmp_path):
        store = JsonEmployeeStore(tmp_path / "missing.json")

        with pytest.raises(StorageError, match="Could not read"):
            asyncio.run(store.fetch_employees_with_visit_parts(EmployeeFilter()))

    def test_invalid_json(self, tmp_path):
        data_file = tmp_path / "employees.json"
        data_file.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError, match="Invalid JSON"):
            asyncio.run(JsonEmployeeStore(data_file).fetch_employees_with_visit_parts(EmployeeFilter()))

    def test_service_without_id(self, tmp_path):
        data = {"employees": [{"id": 1, "services": [{"visitParts": []}]}]}
        store = JsonEmployeeStore(_write(tmp_path, data))

        with pytest.raises(StorageError, match="without a valid serviceId"):
            asyncio.run(store.fetch_employees_with_visit_parts(EmployeeFilter()))

    def test_missing_employees_list(self, tmp_path):
        store = JsonEmployeeStore(_write(tmp_path, {"staff": []}))

        with pytest.raises(StorageError, match="'employees' list"):
            asyncio.run(store.fetch_employees_with_visit_parts(EmployeeFilter()))
