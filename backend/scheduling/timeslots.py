"""Time-of-day values and half-open intervals within a single day.

Times are held as minutes since midnight. Stored strings may use either
``HH:MM`` or ``HH:MM:SS``; both are normalised through :func:`parse`, so
``"09:00"`` and ``"09:00:00"`` denote the same value.
"""

import re
from dataclasses import dataclass

from backend.core.errors import ValidationError

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r'^(\d{2}):(\d{2})(?::(\d{2}))?$')


@dataclass(frozen=True, order=True)
class TimeOfDay:
    minutes: int

    def __post_init__(self) -> None:
        if not 0 <= self.minutes <= MINUTES_PER_DAY:
            raise ValidationError(f'Time of day out of range: {self.minutes} minutes.')

    def __str__(self) -> str:
        hours, minutes = divmod(self.minutes, 60)
        return f'{hours:02d}:{minutes:02d}'


def parse(value: str | TimeOfDay) -> TimeOfDay:
    if isinstance(value, TimeOfDay):
        return value
    if not isinstance(value, str):
        raise ValidationError('Time must be a string in HH:MM format.')

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValidationError(f'Invalid time "{value}". Use HH:MM.')

    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3) or 0)

    if seconds != 0 or minutes > 59:
        raise ValidationError(f'Invalid time "{value}". Use HH:MM.')
    if hours > 24 or (hours == 24 and minutes != 0):
        raise ValidationError(f'Invalid time "{value}". Use HH:MM.')

    return TimeOfDay(hours * 60 + minutes)


def compare(a: str | TimeOfDay, b: str | TimeOfDay) -> int:
    left, right = parse(a), parse(b)
    if left.minutes < right.minutes:
        return -1
    if left.minutes > right.minutes:
        return 1
    return 0


def add_minutes(value: str | TimeOfDay, minutes: int) -> TimeOfDay:
    start = parse(value)
    total = start.minutes + minutes
    if total < 0 or total > MINUTES_PER_DAY:
        raise ValidationError(f'{start} plus {minutes} minutes falls outside the day.')
    return TimeOfDay(total)


@dataclass(frozen=True, order=True)
class TimeInterval:
    """Half-open ``[start, end)`` interval; touching intervals do not overlap."""

    start: TimeOfDay
    end: TimeOfDay

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValidationError('Start time must be before end time.')

    @classmethod
    def from_strings(cls, start_time: str | TimeOfDay, end_time: str | TimeOfDay) -> 'TimeInterval':
        return cls(parse(start_time), parse(end_time))

    @property
    def span_minutes(self) -> int:
        return self.end.minutes - self.start.minutes

    @property
    def start_time(self) -> str:
        return str(self.start)

    @property
    def end_time(self) -> str:
        return str(self.end)

    def overlaps(self, other: 'TimeInterval') -> bool:
        return overlaps(self, other)

    def to_dict(self) -> dict[str, str]:
        return {'startTime': self.start_time, 'endTime': self.end_time}

    def __str__(self) -> str:
        return f'{self.start}-{self.end}'


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    return a.start < b.end and b.start < a.end
