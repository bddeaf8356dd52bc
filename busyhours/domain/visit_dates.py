"""
Validation of visit date changes requested by clients.
"""

from datetime import timedelta

from pendulum import DateTime

MAX_SHIFT_DAYS = 7


def is_visit_date_change_valid(
    start_date: DateTime,
    end_date: DateTime,
    old_start_date: DateTime,
    old_end_date: DateTime,
    max_shift_days: int = MAX_SHIFT_DAYS,
) -> bool:
    """
    Check whether a visit may be moved to a new date.

    Rules:
    - the new start lies at most ``max_shift_days`` before or after the old start
    - the new end does not precede the new start
    - the visit starts and ends on the same calendar day

    The old end date is accepted for symmetry with the stored visit and is
    not part of any rule.
    """
    # TODO: confirm the same-day rule with product; it rejects visits crossing midnight
    if end_date < start_date:
        return False

    shift_seconds = abs((start_date - old_start_date).total_seconds())
    if shift_seconds > timedelta(days=max_shift_days).total_seconds():
        return False

    return start_date.diff(end_date).in_days() == 0 and start_date.day == end_date.day
