from typing import Iterable

from backend.core.errors import ValidationError
from backend.scheduling.timeslots import TimeInterval, TimeOfDay, overlaps


def iterate_candidate_slots(window: TimeInterval, slot_duration: int):
    if slot_duration <= 0:
        raise ValidationError('Slot duration must be a positive number of minutes.')

    current = window.start.minutes
    while current + slot_duration <= window.end.minutes:
        yield TimeInterval(TimeOfDay(current), TimeOfDay(current + slot_duration))
        current += slot_duration


def generate_slots(
    window: TimeInterval,
    booked_intervals: Iterable[TimeInterval],
    slot_duration: int,
) -> list[TimeInterval]:
    """Return the free fixed-length slots of ``window`` in ascending order.

    A candidate is dropped when it overlaps any booked interval; a booking that
    only touches a candidate's edge leaves it free.
    """
    booked = list(booked_intervals)
    return [
        candidate
        for candidate in iterate_candidate_slots(window, slot_duration)
        if not any(overlaps(candidate, interval) for interval in booked)
    ]
