"""
Tests for domain models.
"""

import pendulum
import pytest

from busyhours.domain.models import (
    Employee,
    EmployeeFilter,
    EmployeeService,
    Status,
    Timeslot,
    VisitPart,
)


def _dt(value: str):
    return pendulum.parse(value, tz="UTC")


def _visit_part(visit_part_id, start, end, status=Status.ACTIVE, service_id=1, visit_id=None):
    return VisitPart(
        id=visit_part_id,
        employee_id=1,
        service_id=service_id,
        start_date=_dt(start),
        end_date=_dt(end),
        status=status,
        visit_id=visit_id,
    )


class TestTimeslot:
    """Tests for Timeslot model."""

    def test_create_valid_timeslot(self):
        """Test creating a valid timeslot."""
        start = _dt("2024-01-12 09:00")
        end = _dt("2024-01-12 17:00")

        slot = Timeslot(start_date=start, end_date=end)

        assert slot.start_date == start
        assert slot.end_date == end
        assert slot.duration_hours() == 8

    def test_zero_length_timeslot_is_allowed(self):
        """A timeslot may start and end at the same instant."""
        instant = _dt("2024-01-12 09:00")

        slot = Timeslot(start_date=instant, end_date=instant)

        assert slot.duration_hours() == 0

    def test_inverted_timeslot_raises_error(self):
        """Test that an end before the start raises ValueError."""
        with pytest.raises(ValueError, match="must not be after end date"):
            Timeslot(start_date=_dt("2024-01-12 17:00"), end_date=_dt("2024-01-12 09:00"))

    def test_overlaps_is_strict(self):
        """Touching slots do not overlap."""
        morning = Timeslot(_dt("2024-01-12 09:00"), _dt("2024-01-12 12:00"))
        noon = Timeslot(_dt("2024-01-12 11:00"), _dt("2024-01-12 14:00"))
        afternoon = Timeslot(_dt("2024-01-12 12:00"), _dt("2024-01-12 17:00"))

        assert morning.overlaps(noon)
        assert noon.overlaps(morning)
        assert not morning.overlaps(afternoon)

    def test_contains_includes_bounds(self):
        day = Timeslot(_dt("2024-01-12 00:00"), _dt("2024-01-12 23:59"))

        assert day.contains(Timeslot(_dt("2024-01-12 00:00"), _dt("2024-01-12 10:00")))
        assert day.contains(day)
        assert not day.contains(Timeslot(_dt("2024-01-12 23:00"), _dt("2024-01-13 01:00")))

    def test_intersect(self):
        """Test intersection calculation."""
        first = Timeslot(_dt("2024-01-12 09:00"), _dt("2024-01-12 12:00"))
        second = Timeslot(_dt("2024-01-12 11:00"), _dt("2024-01-12 14:00"))

        intersection = first.intersect(second)

        assert intersection == Timeslot(_dt("2024-01-12 11:00"), _dt("2024-01-12 12:00"))
        assert first.intersect(Timeslot(_dt("2024-01-12 14:00"), _dt("2024-01-12 15:00"))) is None

    def test_shift_returns_new_instance(self):
        slot = Timeslot(_dt("2024-02-12 10:00"), _dt("2024-02-12 11:00"))

        shifted = slot.shift(months=-1)

        assert shifted == Timeslot(_dt("2024-01-12 10:00"), _dt("2024-01-12 11:00"))
        assert slot.start_date == _dt("2024-02-12 10:00")

    def test_to_dict(self):
        slot = Timeslot(_dt("2024-01-12 10:00"), _dt("2024-01-12 11:00"))

        data = slot.to_dict()

        assert data["startDate"].startswith("2024-01-12T10:00:00")
        assert data["endDate"].startswith("2024-01-12T11:00:00")


class TestEmployee:
    """Tests for Employee and its visit parts."""

    def test_terminal_statuses(self):
        assert Status.CANCELLED.is_terminal
        assert Status.CLOSED.is_terminal
        assert not Status.ACTIVE.is_terminal
        assert not Status.TO_BE_CONFIRMED.is_terminal

    def test_visit_parts_skip_terminal_statuses(self):
        """Cancelled and closed visit parts are not part of the workload."""
        employee = Employee(
            id=1,
            services=[
                EmployeeService(
                    service_id=1,
                    visit_parts=[
                        _visit_part(1, "2024-01-12 10:00", "2024-01-12 11:00"),
                        _visit_part(2, "2024-01-13 10:00", "2024-01-13 11:00", Status.CANCELLED),
                    ],
                ),
                EmployeeService(
                    service_id=2,
                    visit_parts=[
                        _visit_part(3, "2024-01-14 10:00", "2024-01-14 11:00", Status.TO_BE_CONFIRMED),
                        _visit_part(4, "2024-01-15 10:00", "2024-01-15 11:00", Status.CLOSED),
                    ],
                ),
            ],
        )

        assert [visit_part.id for visit_part in employee.visit_parts()] == [1, 3]
        assert len(employee.visit_parts(active_only=False)) == 4
        assert employee.service_ids == [1, 2]

    def test_display_name_falls_back_to_id(self):
        assert Employee(id=7).display_name() == "#7"
        assert Employee(id=7, first_name="Anna", last_name="Nowak").display_name() == "Anna Nowak"


class TestEmployeeFilter:
    """Tests for EmployeeFilter."""

    def _employee(self):
        return Employee(
            id=1,
            services=[
                EmployeeService(
                    service_id=3,
                    visit_parts=[_visit_part(1, "2024-01-12 10:00", "2024-01-12 11:00", visit_id=9)],
                )
            ],
        )

    def test_empty_filter_matches_everyone(self):
        assert EmployeeFilter().matches(self._employee())

    def test_filter_by_ids(self):
        employee = self._employee()

        assert EmployeeFilter(employee_ids=[1]).matches(employee)
        assert not EmployeeFilter(employee_ids=[2]).matches(employee)
        assert EmployeeFilter(service_ids=[3, 4]).matches(employee)
        assert not EmployeeFilter(service_ids=[4]).matches(employee)
        assert EmployeeFilter(visit_ids=[9]).matches(employee)
        assert not EmployeeFilter(visit_ids=[10]).matches(employee)
