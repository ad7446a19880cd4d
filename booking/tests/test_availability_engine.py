# booking/tests/test_availability_engine.py

from datetime import timedelta

from django.test import TestCase

from booking.models import Availability, Booking
from booking.services.availability_engine import AvailabilityEngine
from booking.services.errors import InvalidInput, NotFound
from booking.services.slot_utils import local_datetime

from .helpers import FakeCalendar, book, make_event_type, make_host, next_weekday, set_hours

MONDAY = Availability.Weekday.MONDAY


def times(slots, available=None):
    return [s["time"] for s in slots if available is None or s["available"] is available]


class AvailabilityEngineTests(TestCase):
    def setUp(self):
        self.host = make_host(slug="ana", timezone="America/Bogota")
        set_hours(self.host, MONDAY, "09:00", "12:00")
        self.event_type = make_event_type(self.host, slug="consult", duration=30)
        self.day = next_weekday(MONDAY)
        self.calendar = FakeCalendar()
        self.engine = AvailabilityEngine(calendar=self.calendar)

    def slots(self, day=None, event_slug="consult"):
        return self.engine.get_slots("ana", event_slug, (day or self.day).isoformat())

    def test_all_candidates_free_on_an_empty_day(self):
        slots = self.slots()
        self.assertEqual(times(slots), ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30"])
        self.assertTrue(all(s["available"] for s in slots))

    def test_existing_booking_blocks_only_overlapping_slots(self):
        book(self.event_type, self.day, "10:00")
        slots = self.slots()
        self.assertEqual(times(slots, available=False), ["10:00"])

    def test_longer_event_is_blocked_on_both_sides_of_a_booking(self):
        make_event_type(self.host, slug="hour", duration=60)
        book(self.event_type, self.day, "10:00")
        slots = self.slots(event_slug="hour")
        self.assertEqual(times(slots), ["09:00", "09:30", "10:00", "10:30", "11:00"])
        self.assertEqual(times(slots, available=False), ["09:30", "10:00"])

    def test_bookings_of_other_event_types_of_the_host_count(self):
        other = make_event_type(self.host, slug="other", duration=30)
        book(other, self.day, "11:00")
        self.assertEqual(times(self.slots(), available=False), ["11:00"])

    def test_cancelled_bookings_do_not_block(self):
        book(self.event_type, self.day, "10:00", status=Booking.Status.CANCELLED)
        self.assertEqual(times(self.slots(), available=False), [])

    def test_other_hosts_bookings_do_not_block(self):
        other_host = make_host(slug="bob", email="bob@example.com", timezone="America/Bogota")
        other_type = make_event_type(other_host, slug="consult")
        book(other_type, self.day, "10:00")
        self.assertEqual(times(self.slots(), available=False), [])

    def test_external_busy_time_blocks_slots(self):
        zone = self.host.zone
        self.calendar.add_busy(local_datetime(self.day, "11:15", zone), local_datetime(self.day, "11:45", zone))
        self.assertEqual(times(self.slots(), available=False), ["11:00", "11:30"])

    def test_all_day_event_blocks_every_candidate(self):
        start = local_datetime(self.day, "00:00", self.host.zone)
        self.calendar.add_busy(start, start + timedelta(days=1), is_all_day=True)
        slots = self.slots()
        self.assertEqual(len(slots), 6)
        self.assertFalse(any(s["available"] for s in slots))

    def test_unreachable_calendar_falls_back_to_internal_bookings(self):
        self.calendar.fail_busy = True
        book(self.event_type, self.day, "09:00")
        slots = self.slots()
        self.assertEqual(times(slots, available=False), ["09:00"])

    def test_slots_that_already_started_are_unavailable(self):
        now = local_datetime(self.day, "10:00", self.host.zone)
        engine = AvailabilityEngine(calendar=self.calendar, clock=lambda: now)
        slots = engine.get_slots("ana", "consult", self.day.isoformat())
        self.assertEqual(times(slots, available=False), ["09:00", "09:30", "10:00"])

    def test_day_without_availability_is_empty_not_an_error(self):
        self.assertEqual(self.slots(day=self.day + timedelta(days=1)), [])

    def test_disabled_day_is_empty(self):
        set_hours(self.host, Availability.Weekday.TUESDAY, is_enabled=False)
        self.assertEqual(self.slots(day=self.day + timedelta(days=1)), [])

    def test_unknown_host_or_event_type_is_not_found(self):
        with self.assertRaises(NotFound):
            self.engine.get_slots("nobody", "consult", self.day.isoformat())
        with self.assertRaises(NotFound):
            self.engine.get_slots("ana", "missing", self.day.isoformat())

    def test_inactive_event_type_is_not_found(self):
        self.event_type.is_active = False
        self.event_type.save()
        with self.assertRaises(NotFound):
            self.slots()

    def test_bad_date_is_invalid_input(self):
        with self.assertRaises(InvalidInput):
            self.engine.get_slots("ana", "consult", "next monday")

    def test_repeated_calls_give_the_same_answer(self):
        book(self.event_type, self.day, "10:30")
        self.assertEqual(self.slots(), self.slots())

    def test_booking_running_past_midnight_blocks_the_next_morning(self):
        set_hours(self.host, Availability.Weekday.TUESDAY, "00:00", "02:00")
        long_meeting = make_event_type(self.host, slug="long", duration=120)
        book(long_meeting, self.day, "23:00")  # Monday 23:00 until Tuesday 01:00

        slots = self.slots(day=self.day + timedelta(days=1))
        self.assertEqual(times(slots), ["00:00", "00:30", "01:00", "01:30"])
        self.assertEqual(times(slots, available=False), ["00:00", "00:30"])

    def test_booking_late_in_the_local_day_is_found(self):
        # 23:30 Bogota is already the next day in UTC.
        set_hours(self.host, Availability.Weekday.SUNDAY, "20:00", "23:59")
        sunday = self.day - timedelta(days=1)
        book(self.event_type, sunday, "23:00")
        slots = self.engine.get_slots("ana", "consult", sunday.isoformat())
        self.assertIn("23:00", times(slots, available=False))


class BogotaWorkdayTests(TestCase):
    def test_one_booking_in_a_full_workday(self):
        host = make_host(slug="bogota", timezone="America/Bogota")
        set_hours(host, MONDAY, "09:00", "17:00")
        event_type = make_event_type(host, slug="meet", duration=30)
        day = next_weekday(MONDAY)
        book(event_type, day, "10:00")

        slots = AvailabilityEngine(calendar=FakeCalendar()).get_slots("bogota", "meet", day.isoformat())

        self.assertEqual(len(slots), 16)
        self.assertEqual((slots[0]["time"], slots[-1]["time"]), ("09:00", "16:30"))
        self.assertEqual(times(slots, available=False), ["10:00"])
