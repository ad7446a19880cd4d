"""
conflicts.py
------------
Interval overlap rules shared by the availability engine, the booking manager
and the calendar provider.

A slot [start, end) conflicts with a busy interval when:
- it starts inside the busy interval, or
- it ends inside the busy interval, or
- it fully contains the busy interval.

Touching boundaries (slot end == busy start, or slot start == busy end) are
not conflicts.
"""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime


def overlaps(start, end, busy_start, busy_end) -> bool:
    if busy_end <= busy_start:
        return False
    starts_inside = busy_start <= start < busy_end
    ends_inside = busy_start < end <= busy_end
    contains = start <= busy_start and end >= busy_end
    return starts_inside or ends_inside or contains


def has_conflict(start, end, intervals) -> bool:
    return any(overlaps(start, end, i.start, i.end) for i in intervals)


def blocks_whole_day(busy_intervals, day: date, zone) -> bool:
    """
    True if an all-day busy interval starts on 'day' (as seen in 'zone').
    """
    for busy in busy_intervals:
        if busy.is_all_day and busy.start.astimezone(zone).date() == day:
            return True
    return False
