"""
calendar_provider.py
--------------------
Interface to the host's external calendar.

The core only needs three things from a calendar:
- busy intervals (timed and all-day) for a time range
- creating an event that mirrors a booking
- deleting that event when the booking is cancelled

Implementations never raise for missing/unauthorized credentials; they return
an empty list / None / False instead. fetch_busy_intervals() is the guard the
core uses on top of that, so a misbehaving provider can't break availability.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings

from .conflicts import blocks_whole_day, overlaps

logger = logging.getLogger(__name__)

# Widen the external re-check to tolerate clock skew with the provider.
SKEW_TOLERANCE = timedelta(minutes=1)


@dataclass(frozen=True)
class BusyInterval:
    start: datetime
    end: datetime
    is_all_day: bool = False


@dataclass
class CalendarEvent:
    """An event to create on the host's calendar."""

    title: str
    start: datetime
    end: datetime
    attendee_email: str
    attendee_name: str
    timezone: str
    description: str = ""


class CalendarProvider(ABC):
    """Abstract calendar backend."""

    @abstractmethod
    def list_busy_intervals(self, host, start: datetime, end: datetime) -> list[BusyInterval]:
        """Return busy intervals overlapping [start, end), or [] if unknown."""

    @abstractmethod
    def create_event(self, host, event: CalendarEvent) -> str | None:
        """Create an event and return its provider id, or None on failure."""

    @abstractmethod
    def delete_event(self, host, event_id: str) -> bool:
        """Delete an event. Returns True on success."""

    def is_slot_available(self, host, start: datetime, end: datetime) -> bool:
        """
        Check [start, end) against the calendar at commit time.

        The query window is widened by SKEW_TOLERANCE on both sides; the
        overlap test itself uses the exact slot bounds.
        """
        busy = fetch_busy_intervals(self, host, start - SKEW_TOLERANCE, end + SKEW_TOLERANCE)
        zone = host.zone
        if blocks_whole_day(busy, start.astimezone(zone).date(), zone):
            return False
        for interval in busy:
            if interval.is_all_day:
                continue
            if overlaps(start, end, interval.start, interval.end):
                return False
        return True


class DisabledCalendarProvider(CalendarProvider):
    """Used when no calendar integration is configured."""

    def list_busy_intervals(self, host, start, end):
        return []

    def create_event(self, host, event):
        return None

    def delete_event(self, host, event_id):
        return False


def fetch_busy_intervals(provider: CalendarProvider, host, start, end) -> list[BusyInterval]:
    """
    Busy intervals from 'provider', degrading to [] on any failure so that
    availability can still be computed from internal bookings alone.
    """
    try:
        return list(provider.list_busy_intervals(host, start, end))
    except Exception:
        logger.warning(
            "Calendar busy lookup failed for host %s; ignoring external conflicts",
            getattr(host, "slug", host),
            exc_info=True,
        )
        return []


def get_calendar_provider() -> CalendarProvider:
    """
    Google Calendar when OAuth client credentials are configured,
    otherwise the disabled provider.
    """
    if getattr(settings, "GOOGLE_CLIENT_ID", "") and getattr(settings, "GOOGLE_CLIENT_SECRET", ""):
        from .google_calendar import GoogleCalendarProvider

        return GoogleCalendarProvider()
    return DisabledCalendarProvider()
