# app/services/availability/time_of_day.py
"""
Time-of-day arithmetic for slot computation.

Times are plain minutes since midnight, so comparisons and additions are
integer arithmetic and never touch timezones or DST.
"""
import re
from dataclasses import dataclass
from datetime import time
from typing import Iterator, Union

MINUTES_PER_DAY = 24 * 60

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


class InvalidTimeError(ValueError):
    """Raised for malformed or out-of-range time values"""


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Minutes since midnight, 0 <= minutes < 1440"""

    minutes: int

    def __post_init__(self):
        if not isinstance(self.minutes, int) or isinstance(self.minutes, bool):
            raise InvalidTimeError(f"Minutes must be an integer, got {self.minutes!r}")
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise InvalidTimeError(f"Time out of range: {self.minutes} minutes")

    @classmethod
    def parse(cls, value: Union[str, time, "TimeOfDay"]) -> "TimeOfDay":
        """
        Build a TimeOfDay from "HH:MM", "HH:MM:SS" or a datetime.time.

        Seconds are accepted (database TIME columns carry them) but must be
        zero; anything else is a malformed value.
        """
        if isinstance(value, TimeOfDay):
            return value
        if isinstance(value, time):
            if value.second or value.microsecond:
                raise InvalidTimeError(f"Sub-minute precision not supported: {value}")
            return cls(value.hour * 60 + value.minute)
        if not isinstance(value, str):
            raise InvalidTimeError(f"Cannot parse time from {value!r}")

        match = _HHMM_RE.match(value.strip())
        if not match:
            raise InvalidTimeError(f"Malformed time string: {value!r}")

        hours, minutes, seconds = int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)
        if hours > 23 or minutes > 59 or seconds != 0:
            raise InvalidTimeError(f"Malformed time string: {value!r}")
        return cls(hours * 60 + minutes)

    def plus(self, minutes: int) -> int:
        """Minutes since midnight after adding an offset (may pass 24:00)"""
        return self.minutes + minutes

    def to_time(self) -> time:
        return time(self.minutes // 60, self.minutes % 60)

    def __str__(self) -> str:
        return format_minutes(self.minutes)


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as zero-padded 24h HH:MM"""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open overlap test: touching endpoints do not overlap"""
    return start_a < end_b and end_a > start_b


def walk_grid(start: int, end: int, step: int) -> Iterator[int]:
    """Yield start, start+step, ... while the value is strictly before end"""
    if step <= 0:
        raise ValueError(f"Step must be positive, got {step}")
    current = start
    while current < end:
        yield current
        current += step
