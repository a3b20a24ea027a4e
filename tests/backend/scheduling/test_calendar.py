from datetime import date

import pytest

from backend.core.errors import ValidationError
from backend.scheduling.calendar import build_template, normalize_weekday, resolve_window, weekday_name
from backend.scheduling.timeslots import TimeInterval

MONDAY = date(2026, 1, 5)
SATURDAY = date(2026, 1, 10)


def test_weekday_name_uses_calendar_day() -> None:
    assert weekday_name(MONDAY) == 'monday'
    assert weekday_name(SATURDAY) == 'saturday'


def test_normalize_weekday_is_case_insensitive() -> None:
    assert normalize_weekday(' Monday ') == 'monday'


def test_normalize_weekday_rejects_unknown_day() -> None:
    with pytest.raises(ValidationError):
        normalize_weekday('funday')


def test_resolve_window_returns_configured_entry() -> None:
    template = build_template([('Monday', '08:00', '12:00'), ('tuesday', '13:00', '18:00')])

    assert resolve_window(template, MONDAY) == TimeInterval.from_strings('08:00', '12:00')


def test_resolve_window_returns_none_for_unconfigured_weekday() -> None:
    template = build_template([('monday', '08:00', '12:00')])

    assert resolve_window(template, SATURDAY) is None


def test_resolve_window_falls_back_to_default() -> None:
    default = TimeInterval.from_strings('09:00', '17:00')

    assert resolve_window({}, SATURDAY, default=default) == default


def test_build_template_rejects_duplicate_days() -> None:
    with pytest.raises(ValidationError):
        build_template([('monday', '08:00', '12:00'), ('Monday', '13:00', '17:00')])


def test_build_template_rejects_inverted_hours() -> None:
    with pytest.raises(ValidationError):
        build_template([('monday', '17:00', '09:00')])
