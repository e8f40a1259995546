"""Conflict checking and first-available slot selection."""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Sequence

from interview_scheduler.schemas import SlotStatus, TimeInterval
from interview_scheduler.slots import slot_start


def is_slot_busy(start: datetime, duration_minutes: int, busy: Iterable[TimeInterval]) -> bool:
    """True iff [start, start + duration) overlaps a busy interval.

    Intervals are half-open: a slot ending exactly when a busy period
    begins, or starting exactly when one ends, is free.
    """
    end = start + timedelta(minutes=duration_minutes)
    return any(start < b.end and end > b.start for b in busy)


def classify_slots(
    day: date,
    slots: Sequence[str],
    duration_minutes: int,
    busy: Sequence[TimeInterval],
    tz: tzinfo,
) -> list[SlotStatus]:
    """Mark every slot of the grid busy or free for one day."""
    result = []
    for time_of_day in slots:
        start = slot_start(day, time_of_day, tz)
        result.append(SlotStatus(
            time=time_of_day,
            start=start,
            end=start + timedelta(minutes=duration_minutes),
            busy=is_slot_busy(start, duration_minutes, busy),
        ))
    return result


def find_first_available(classified: Sequence[SlotStatus]) -> str | None:
    """Earliest free slot in grid order, or None when every slot is busy."""
    for slot in classified:
        if not slot.busy:
            return slot.time
    return None


def select_default_slot(
    classified: Sequence[SlotStatus],
    current: str | None = None,
    availability_loaded: bool = True,
) -> str | None:
    """Pick the time to pre-select in the scheduling form.

    A time the user already chose is never overridden. Nothing is picked
    while the busy set is still loading.
    """
    if current:
        return current
    if not availability_loaded:
        return None
    return find_first_available(classified)
