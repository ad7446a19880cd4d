"""
slot_utils.py
-------------
Helpers to turn a host's weekly availability window into candidate start times,
and to convert 'YYYY-MM-DD' / 'HH:MM' strings into aware datetimes in the
host's timezone.

Candidates are computed with plain integer minutes (hour * 60 + minute), so the
generator never touches dates or timezones.
"""

import re
from datetime import date, datetime, timedelta

from .errors import InvalidInput

# Fixed step between candidates, independent of the event duration
# (a 15-minute event still only gets a candidate every 30 minutes).
SLOT_STEP_MINUTES = 30

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def hhmm_to_minutes(value: str) -> int:
    h, m = value.split(":")
    return int(h) * 60 + int(m)


def minutes_to_hhmm(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


class CandidateSlots:
    """
    Ordered, lazily generated "HH:MM" start times inside [start, end).

    Iterating twice yields the same sequence. A candidate is produced only
    if candidate + duration <= end.
    """

    def __init__(self, start_minutes: int, end_minutes: int, duration_minutes: int,
                 step_minutes: int = SLOT_STEP_MINUTES):
        self.start_minutes = start_minutes
        self.end_minutes = end_minutes
        self.duration_minutes = duration_minutes
        self.step_minutes = step_minutes

    def __iter__(self):
        current = self.start_minutes
        while current + self.duration_minutes <= self.end_minutes:
            yield minutes_to_hhmm(current)
            current += self.step_minutes

    def __len__(self):
        span = self.end_minutes - self.start_minutes - self.duration_minutes
        if span < 0:
            return 0
        return span // self.step_minutes + 1

    def __repr__(self):
        return f"CandidateSlots({list(self)!r})"


def generate_slots_for_day(day_availability, duration_minutes: int):
    """
    Generate candidate slot start times for one weekday.

    Args:
        day_availability: Availability row (or None when the weekday has no entry)
        duration_minutes: event length

    Returns:
        CandidateSlots, or an empty tuple for a missing/disabled weekday.
    """
    if day_availability is None or not day_availability.is_enabled:
        return ()

    return CandidateSlots(
        start_minutes=hhmm_to_minutes(day_availability.start_time),
        end_minutes=hhmm_to_minutes(day_availability.end_time),
        duration_minutes=duration_minutes,
    )


def parse_day(date_str: str) -> date:
    """
    Parse a strict 'YYYY-MM-DD' string.
    """
    date_str = (date_str or "").strip()
    if not DATE_RE.match(date_str):
        raise InvalidInput("Invalid date format. Use YYYY-MM-DD.")
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        raise InvalidInput("Invalid date format. Use YYYY-MM-DD.")


def js_weekday(day: date) -> int:
    """
    Weekday number with 0=Sunday..6=Saturday (Python's weekday() is 0=Monday).
    """
    return (day.weekday() + 1) % 7


def local_datetime(day: date, hhmm: str, zone) -> datetime:
    """
    Wall-clock 'HH:MM' on 'day', interpreted in the given zone.
    """
    minutes = hhmm_to_minutes(hhmm)
    return datetime(day.year, day.month, day.day, minutes // 60, minutes % 60, tzinfo=zone)


def day_range(day: date, zone):
    """
    Convert a date into a timezone-aware day window [start, end) in 'zone'.
    """
    day_start = datetime(day.year, day.month, day.day, tzinfo=zone)
    next_day = day + timedelta(days=1)
    day_end = datetime(next_day.year, next_day.month, next_day.day, tzinfo=zone)
    return day_start, day_end
