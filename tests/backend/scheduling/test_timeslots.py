import pytest

from backend.core.errors import ValidationError
from backend.scheduling.timeslots import (
    TimeInterval,
    TimeOfDay,
    add_minutes,
    compare,
    overlaps,
    parse,
)


def test_parse_returns_minutes_since_midnight() -> None:
    assert parse('00:00') == TimeOfDay(0)
    assert parse('09:30') == TimeOfDay(570)
    assert parse('23:59') == TimeOfDay(1439)


def test_parse_accepts_seconds_suffix_as_same_time() -> None:
    assert parse('09:00:00') == parse('09:00')
    assert compare('09:00', '09:00:00') == 0


def test_parse_accepts_end_of_day_bound() -> None:
    assert parse('24:00').minutes == 24 * 60


@pytest.mark.parametrize('value', ['9:00', '09:0', '0900', '25:00', '24:30', '09:60', '09:00:30', '', 'noon', '09:00x'])
def test_parse_rejects_malformed_times(value: str) -> None:
    with pytest.raises(ValidationError):
        parse(value)


def test_parse_rejects_non_string() -> None:
    with pytest.raises(ValidationError):
        parse(900)


def test_compare_orders_times() -> None:
    assert compare('08:59', '09:00') == -1
    assert compare('17:00', '09:00') == 1
    assert compare(parse('12:15'), '12:15') == 0


def test_add_minutes_stays_within_the_day() -> None:
    assert add_minutes('09:00', 30) == parse('09:30')
    assert add_minutes('23:30', 30) == parse('24:00')


def test_add_minutes_rejects_rollover() -> None:
    with pytest.raises(ValidationError):
        add_minutes('23:45', 30)


def test_interval_requires_start_before_end() -> None:
    with pytest.raises(ValidationError):
        TimeInterval.from_strings('10:00', '10:00')
    with pytest.raises(ValidationError):
        TimeInterval.from_strings('11:00', '10:00')


def test_interval_formats_and_spans() -> None:
    interval = TimeInterval.from_strings('09:00:00', '09:45')

    assert interval.span_minutes == 45
    assert interval.to_dict() == {'startTime': '09:00', 'endTime': '09:45'}
    assert str(interval) == '09:00-09:45'


@pytest.mark.parametrize(
    ('a', 'b', 'expected'),
    [
        (('10:00', '10:30'), ('10:15', '10:45'), True),
        (('10:00', '11:00'), ('10:15', '10:30'), True),
        (('10:00', '10:30'), ('10:00', '10:30'), True),
        (('10:00', '10:30'), ('10:30', '11:00'), False),
        (('09:00', '09:30'), ('10:00', '10:30'), False),
    ],
)
def test_overlaps_is_symmetric(a, b, expected: bool) -> None:
    first = TimeInterval.from_strings(*a)
    second = TimeInterval.from_strings(*b)

    assert overlaps(first, second) is expected
    assert overlaps(second, first) is expected


def test_touching_endpoints_never_overlap() -> None:
    earlier = TimeInterval.from_strings('10:00', '10:30')
    later = TimeInterval.from_strings('10:30:00', '11:00')

    assert not earlier.overlaps(later)
    assert not later.overlaps(earlier)
