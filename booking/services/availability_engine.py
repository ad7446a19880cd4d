"""
availability_engine.py
----------------------
Computes the bookable slots of one event type on one calendar day by checking
candidate start times against:
1) existing bookings of the host (any of its event types), and
2) busy time on the host's external calendar, and
3) the current time (a slot that already started can't be booked).

All day math happens in the host's timezone.

Outcomes the caller must keep apart:
- unknown host / unknown or inactive event type -> NotFound
- weekday without enabled availability          -> [] (not an error)

An all-day external event on the requested date marks every candidate
unavailable. An unreachable calendar only removes the external conflicts.
"""

import logging
from datetime import timedelta

from django.utils import timezone

from ..models import Booking, EventType, Host
from .calendar_provider import fetch_busy_intervals, get_calendar_provider
from .conflicts import Interval, blocks_whole_day, has_conflict
from .errors import NotFound
from .slot_utils import day_range, generate_slots_for_day, js_weekday, local_datetime, parse_day

logger = logging.getLogger(__name__)


class AvailabilityEngine:
    def __init__(self, calendar=None, clock=timezone.now):
        self.calendar = calendar if calendar is not None else get_calendar_provider()
        self.clock = clock

    def get_event_type(self, host_slug: str, event_slug: str) -> EventType:
        host = Host.objects.filter(slug=host_slug).first()
        event_type = None
        if host is not None:
            event_type = (
                EventType.objects.select_related("host")
                .filter(host=host, slug=event_slug, is_active=True)
                .first()
            )
        if event_type is None:
            raise NotFound("Event type not found.")
        return event_type

    def get_conflicts(self, host, day_start, day_end):
        """
        Busy intervals for the day, or None when an all-day event blocks it.
        """
        bookings = (
            Booking.objects.active()
            .for_host(host)
            .overlapping(day_start, day_end)
            .values_list("start_time", "end_time")
        )
        busy = fetch_busy_intervals(self.calendar, host, day_start, day_end)

        zone = host.zone
        if blocks_whole_day(busy, day_start.astimezone(zone).date(), zone):
            return None

        conflicts = [Interval(start, end) for start, end in bookings]
        conflicts.extend(Interval(b.start, b.end) for b in busy if not b.is_all_day)
        return conflicts

    def get_slots(self, host_slug: str, event_slug: str, date_str: str) -> list:
        """
        Return [{"time": "HH:MM", "available": bool}, ...] in chronological order.
        """
        event_type = self.get_event_type(host_slug, event_slug)
        host = event_type.host
        day = parse_day(date_str)

        day_availability = host.availability.filter(
            day_of_week=js_weekday(day), is_enabled=True
        ).first()
        candidates = generate_slots_for_day(day_availability, event_type.duration)
        if not candidates:
            return []

        zone = host.zone
        day_start, day_end = day_range(day, zone)
        conflicts = self.get_conflicts(host, day_start, day_end)
        if conflicts is None:
            logger.debug("All-day block on %s for host %s", day, host.slug)
            return [{"time": t, "available": False} for t in candidates]

        now = self.clock()
        duration = timedelta(minutes=event_type.duration)
        slots = []
        for t in candidates:
            slot_start = local_datetime(day, t, zone)
            slot_end = slot_start + duration
            if slot_start <= now:
                available = False
            else:
                available = not has_conflict(slot_start, slot_end, conflicts)
            slots.append({"time": t, "available": available})
        return slots
