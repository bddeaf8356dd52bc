"""
Set operations over lists of timeslots.

Pure functions without side effects; every result is a new list of new
``Timeslot`` instances.
"""

from typing import Iterable, List, Sequence

from .models import Timeslot


def overlaps(first: Timeslot, second: Timeslot) -> bool:
    """True if both slots share some time. Touching endpoints do not count."""
    return first.overlaps(second)


def contains(outer: Timeslot, inner: Timeslot) -> bool:
    """True if ``inner`` lies within ``outer`` (inclusive bounds)."""
    return outer.contains(inner)


def union(timeslots: Iterable[Timeslot]) -> List[Timeslot]:
    """
    Merge overlapping or touching timeslots.

    Example: [09:00-10:00, 10:00-11:00, 12:00-13:00] -> [09:00-11:00, 12:00-13:00]

    Returns:
        Sorted, pairwise non-overlapping, minimal list of timeslots
    """
    sorted_slots = sorted(timeslots, key=lambda slot: (slot.start_date, slot.end_date))

    if not sorted_slots:
        return []

    merged: List[Timeslot] = []
    current_start = sorted_slots[0].start_date
    current_end = sorted_slots[0].end_date

    for slot in sorted_slots[1:]:
        if slot.start_date <= current_end:
            current_end = max(current_end, slot.end_date)
        else:
            merged.append(Timeslot(start_date=current_start, end_date=current_end))
            current_start, current_end = slot.start_date, slot.end_date

    merged.append(Timeslot(start_date=current_start, end_date=current_end))
    return merged


def union_groups(groups: Iterable[Iterable[Timeslot]]) -> List[Timeslot]:
    """Flatten several lists of timeslots and merge them."""
    return union(slot for group in groups for slot in group)


def intersection(groups: Sequence[Sequence[Timeslot]]) -> List[Timeslot]:
    """
    Calculate the time covered by every group at once.

    The first group seeds the result; for every following group each
    running slot is replaced by its overlaps with all slots of that group.
    An empty group therefore empties the result.
    """
    if not groups:
        return []

    result = list(groups[0])

    for group in groups[1:]:
        overlaps_found: List[Timeslot] = []

        for current in result:
            for candidate in group:
                overlap = current.intersect(candidate)
                if overlap:
                    overlaps_found.append(overlap)

        # Early exit if nobody else is busy at the same time
        if not overlaps_found:
            return []

        result = overlaps_found

    return sorted(result, key=lambda slot: (slot.start_date, slot.end_date))
