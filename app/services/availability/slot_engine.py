# app/services/availability/slot_engine.py
"""
Slot Engine

Pure computation of bookable start times for one calendar day, given:
- the day's active availability windows (already filtered by staff scope)
- whether the day is blocked for that scope
- the non-cancelled appointments already booked in that scope
- the requested service duration

No I/O, no shared state: identical inputs always give identical output.
Slot computation is advisory. The booking write re-validates under a lock.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from app.services.availability.time_of_day import (
    TimeOfDay,
    format_minutes,
    intervals_overlap,
    walk_grid,
)

DEFAULT_STEP_MINUTES = 15


class SlotEngineError(ValueError):
    """Invalid engine input. A caller bug, not a user-facing condition."""


@dataclass(frozen=True)
class AvailabilityWindow:
    """One recurring window on a given weekday"""

    day_of_week: int
    start: TimeOfDay
    end: TimeOfDay
    staff_id: Optional[UUID] = None
    active: bool = True

    def __post_init__(self):
        if not 0 <= self.day_of_week <= 6:
            raise SlotEngineError(f"day_of_week must be 0..6, got {self.day_of_week}")


@dataclass(frozen=True)
class BlockedDate:
    blocked_date: date
    staff_id: Optional[UUID] = None

    def blocks(self, staff_id: Optional[UUID]) -> bool:
        """A business-wide block applies to every staff scope"""
        return self.staff_id is None or self.staff_id == staff_id


@dataclass(frozen=True)
class ExistingAppointment:
    """An occupying booking: [start, start + duration_minutes)"""

    start: TimeOfDay
    duration_minutes: int

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise SlotEngineError(
                f"Appointment duration must be positive, got {self.duration_minutes}"
            )

    @property
    def end_minutes(self) -> int:
        return self.start.plus(self.duration_minutes)


def compute_available_slots(
        windows: Sequence[AvailabilityWindow],
        blocked: bool,
        existing_appointments: Iterable[ExistingAppointment],
        service_duration_minutes: int,
        step_minutes: int = DEFAULT_STEP_MINUTES,
        *,
        buffer_minutes: int = 0,
) -> List[str]:
    """
    Compute bookable start times as "HH:MM" strings.

    Windows are processed in the order given and their slots concatenated;
    overlapping windows may therefore yield the same time twice. Within a
    window slots are chronological.

    buffer_minutes widens each existing appointment on both sides before the
    overlap test. The booking handler passes 0 unless buffer enforcement is
    switched on in configuration.

    Raises:
        SlotEngineError: non-positive duration or step, negative buffer
    """
    if isinstance(service_duration_minutes, bool) or not isinstance(service_duration_minutes, int):
        raise SlotEngineError(f"Service duration must be an integer, got {service_duration_minutes!r}")
    if service_duration_minutes <= 0:
        raise SlotEngineError(f"Service duration must be positive, got {service_duration_minutes}")
    if step_minutes <= 0:
        raise SlotEngineError(f"Step must be positive, got {step_minutes}")
    if buffer_minutes < 0:
        raise SlotEngineError(f"Buffer cannot be negative, got {buffer_minutes}")

    if blocked:
        return []
    if not windows:
        return []

    occupied = [
        (appt.start.minutes - buffer_minutes, appt.end_minutes + buffer_minutes)
        for appt in existing_appointments
    ]

    slots: List[str] = []
    for window in windows:
        window_end = window.end.minutes

        for candidate in walk_grid(window.start.minutes, window_end, step_minutes):
            candidate_end = candidate + service_duration_minutes

            # The service must finish inside the window
            if candidate_end > window_end:
                continue

            if any(intervals_overlap(candidate, candidate_end, start, end) for start, end in occupied):
                continue

            slots.append(format_minutes(candidate))

    return slots
