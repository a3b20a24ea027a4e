"""Weekly working-hours templates."""

from datetime import date
from typing import Mapping

from backend.core.errors import ValidationError
from backend.scheduling.timeslots import TimeInterval

WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')

WorkingHoursTemplate = Mapping[str, TimeInterval]


def normalize_weekday(value: str) -> str:
    normalized = (value or '').strip().lower()
    if normalized not in WEEKDAYS:
        raise ValidationError(f'Invalid day of week "{value}".')
    return normalized


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def build_template(entries) -> dict[str, TimeInterval]:
    """Build a template from ``(day, start, end)`` triples, one entry per weekday."""
    template: dict[str, TimeInterval] = {}
    for day, start_time, end_time in entries:
        normalized_day = normalize_weekday(day)
        if normalized_day in template:
            raise ValidationError(f'Working hours for {normalized_day} are listed more than once.')
        template[normalized_day] = TimeInterval.from_strings(start_time, end_time)
    return template


def resolve_window(
    template: WorkingHoursTemplate,
    day: date,
    default: TimeInterval | None = None,
) -> TimeInterval | None:
    return template.get(weekday_name(day), default)
