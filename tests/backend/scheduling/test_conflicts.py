from backend.scheduling.conflicts import ConflictCheck, check_conflict, find_conflict
from backend.scheduling.timeslots import TimeInterval

CONFIRMED = [TimeInterval.from_strings('10:00', '10:30')]


def test_overlapping_candidate_is_a_conflict() -> None:
    candidate = TimeInterval.from_strings('10:15', '10:45')

    assert check_conflict(candidate, CONFIRMED) == ConflictCheck.CONFLICT
    assert find_conflict(candidate, CONFIRMED) == CONFIRMED[0]


def test_back_to_back_candidate_is_ok() -> None:
    candidate = TimeInterval.from_strings('10:30', '11:00')

    assert check_conflict(candidate, CONFIRMED) == ConflictCheck.OK
    assert find_conflict(candidate, CONFIRMED) is None


def test_empty_day_has_no_conflict() -> None:
    assert check_conflict(TimeInterval.from_strings('09:00', '09:30'), []) == ConflictCheck.OK
