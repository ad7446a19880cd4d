# booking/tests/test_availability_manager.py

from django.test import TestCase

from booking.models import Availability
from booking.services.availability_manager import AvailabilityManager
from booking.services.errors import InvalidInput

from .helpers import make_host, set_hours


def day(dow, start="09:00", end="17:00", is_enabled=True):
    return {"day_of_week": dow, "start_time": start, "end_time": end, "is_enabled": is_enabled}


class AvailabilityManagerTests(TestCase):
    def setUp(self):
        self.host = make_host()
        self.manager = AvailabilityManager()

    def test_save_replaces_the_whole_week(self):
        set_hours(self.host, Availability.Weekday.SATURDAY)
        rows = self.manager.save_weekly_template(self.host, [day(1), day(2, "10:00", "14:00")])
        self.assertEqual([r.day_of_week for r in rows], [1, 2])
        self.assertFalse(Availability.objects.filter(host=self.host, day_of_week=6).exists())

    def test_times_are_zero_padded(self):
        rows = self.manager.save_weekly_template(self.host, [day(1, "9:00", "17:30")])
        self.assertEqual(rows[0].start_time, "09:00")

    def test_end_before_start_is_rejected_with_day_name(self):
        with self.assertRaises(InvalidInput) as ctx:
            self.manager.save_weekly_template(self.host, [day(1, "17:00", "09:00")])
        self.assertEqual(str(ctx.exception.detail), "End time must be after start time (Monday).")

    def test_disabled_day_may_have_any_times(self):
        rows = self.manager.save_weekly_template(self.host, [day(0, "17:00", "09:00", is_enabled=False)])
        self.assertFalse(rows[0].is_enabled)

    def test_duplicate_weekday_is_rejected(self):
        with self.assertRaises(InvalidInput):
            self.manager.save_weekly_template(self.host, [day(3), day(3, "10:00", "11:00")])

    def test_invalid_entry_leaves_the_old_week_untouched(self):
        set_hours(self.host, Availability.Weekday.MONDAY)
        with self.assertRaises(InvalidInput):
            self.manager.save_weekly_template(self.host, [day(2), day(9)])
        self.assertEqual(list(self.manager.get_weekly_template(self.host).values_list("day_of_week", flat=True)), [1])

    def test_payload_must_be_a_list(self):
        with self.assertRaises(InvalidInput):
            self.manager.save_weekly_template(self.host, {"day_of_week": 1})
        with self.assertRaises(InvalidInput):
            self.manager.save_weekly_template(self.host, [day(i % 7) for i in range(8)])

    def test_empty_week_clears_availability(self):
        set_hours(self.host, Availability.Weekday.MONDAY)
        self.assertEqual(list(self.manager.save_weekly_template(self.host, [])), [])
