from enum import Enum
from typing import Iterable

from backend.scheduling.timeslots import TimeInterval, overlaps


class ConflictCheck(str, Enum):
    OK = 'ok'
    CONFLICT = 'conflict'


def find_conflict(candidate: TimeInterval, existing: Iterable[TimeInterval]) -> TimeInterval | None:
    for interval in existing:
        if overlaps(candidate, interval):
            return interval
    return None


def check_conflict(candidate: TimeInterval, existing: Iterable[TimeInterval]) -> ConflictCheck:
    if find_conflict(candidate, existing) is not None:
        return ConflictCheck.CONFLICT
    return ConflictCheck.OK
