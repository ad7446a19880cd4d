# booking/tests/helpers.py
#
# Shared fixtures for the booking tests: a host with a weekly template, an
# event type, and an in-memory calendar provider.

from datetime import date, timedelta

from django.contrib.auth.models import User

from booking.models import Availability, Booking, EventType, Host
from booking.services.calendar_provider import BusyInterval, CalendarProvider
from booking.services.slot_utils import js_weekday, local_datetime


def next_weekday(js_day: int, weeks_ahead: int = 2) -> date:
    """First date with weekday 'js_day' (0=Sunday) at least 'weeks_ahead' weeks from today."""
    day = date.today() + timedelta(weeks=weeks_ahead)
    while js_weekday(day) != js_day:
        day += timedelta(days=1)
    return day


def make_host(slug="jane", timezone="UTC", email="jane@example.com", username=None):
    user = User.objects.create_user(username=username or slug, password="pass12345", email=email)
    return Host.objects.create(user=user, name="Jane Doe", email=email, slug=slug, timezone=timezone)


def make_event_type(host, slug="consult", duration=30, **extra):
    return EventType.objects.create(host=host, title=extra.pop("title", "Consultation"),
                                    slug=slug, duration=duration, **extra)


def set_hours(host, day_of_week, start="09:00", end="17:00", is_enabled=True):
    return Availability.objects.create(
        host=host, day_of_week=day_of_week, start_time=start, end_time=end, is_enabled=is_enabled
    )


def book(event_type, day, hhmm, status=Booking.Status.CONFIRMED, **extra):
    start = local_datetime(day, hhmm, event_type.host.zone)
    return Booking.objects.create(
        event_type=event_type,
        guest_name=extra.pop("guest_name", "Sam Guest"),
        guest_email=extra.pop("guest_email", "sam@example.com"),
        guest_timezone=extra.pop("guest_timezone", "UTC"),
        start_time=start,
        end_time=start + timedelta(minutes=event_type.duration),
        status=status,
        **extra,
    )


class FakeCalendar(CalendarProvider):
    """In-memory calendar: records created/deleted events, can be told to fail."""

    def __init__(self, busy=None, fail_busy=False, fail_create=False, event_id="evt-1"):
        self.busy = list(busy or [])
        self.fail_busy = fail_busy
        self.fail_create = fail_create
        self.event_id = event_id
        self.created = []
        self.deleted = []

    def add_busy(self, start, end, is_all_day=False):
        self.busy.append(BusyInterval(start=start, end=end, is_all_day=is_all_day))

    def list_busy_intervals(self, host, start, end):
        if self.fail_busy:
            raise ConnectionError("calendar unreachable")
        return [b for b in self.busy if b.start < end and b.end > start]

    def create_event(self, host, event):
        if self.fail_create:
            raise ConnectionError("calendar unreachable")
        self.created.append(event)
        return self.event_id

    def delete_event(self, host, event_id):
        self.deleted.append(event_id)
        return True
