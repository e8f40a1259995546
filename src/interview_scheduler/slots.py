"""Daily slot grid and slot-to-interval conversion."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo

from interview_scheduler.schemas import TimeInterval

DEFAULT_DAY_START = "09:00"
DEFAULT_DAY_END = "17:00"
DEFAULT_STEP_MINUTES = 30


def parse_time_of_day(value: str) -> time:
    """Parse an "HH:MM" string. Raises ValueError on anything else."""
    hours, sep, minutes = value.partition(":")
    if not sep or len(hours) != 2 or len(minutes) != 2 or not (hours + minutes).isdigit():
        raise ValueError(f"expected HH:MM, got {value!r}")
    return time(int(hours), int(minutes))


def generate_time_slots(
    day_start: str = DEFAULT_DAY_START,
    day_end: str = DEFAULT_DAY_END,
    step_minutes: int = DEFAULT_STEP_MINUTES,
) -> list[str]:
    """Return the candidate start times of a working day, both ends included.

    With the defaults this is the 17 values "09:00", "09:30", ... "17:00".
    The grid does not depend on the date or on the interview duration.
    """
    start = parse_time_of_day(day_start)
    end = parse_time_of_day(day_end)
    current = start.hour * 60 + start.minute
    last = end.hour * 60 + end.minute

    slots = []
    while current <= last:
        slots.append(f"{current // 60:02d}:{current % 60:02d}")
        current += step_minutes
    return slots


def slot_start(day: date, time_of_day: str, tz: tzinfo) -> datetime:
    return datetime.combine(day, parse_time_of_day(time_of_day), tzinfo=tz)


def slot_interval(day: date, time_of_day: str, duration_minutes: int, tz: tzinfo) -> TimeInterval:
    """The concrete [start, start + duration) interval a slot would occupy."""
    if duration_minutes <= 0:
        raise ValueError("duration must be a positive number of minutes")
    start = slot_start(day, time_of_day, tz)
    return TimeInterval(start=start, end=start + timedelta(minutes=duration_minutes))


def day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """First and last instant of a calendar day in the given timezone."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day, time.max, tzinfo=tz)
    return start, end


def is_bookable_date(day: date, today: date) -> bool:
    """Weekdays from today onwards can be offered for interviews."""
    return day >= today and day.weekday() < 5
