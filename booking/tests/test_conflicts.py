# booking/tests/test_conflicts.py

from datetime import date, datetime, timezone as dt_timezone
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase

from booking.services.calendar_provider import BusyInterval
from booking.services.conflicts import Interval, blocks_whole_day, has_conflict, overlaps


def at(hour, minute=0):
    return datetime(2024, 1, 8, hour, minute, tzinfo=dt_timezone.utc)


class OverlapTests(SimpleTestCase):
    busy = (at(10), at(10, 30))

    def test_touching_boundaries_are_free(self):
        self.assertFalse(overlaps(at(10, 30), at(11), *self.busy))
        self.assertFalse(overlaps(at(9, 30), at(10), *self.busy))

    def test_starts_inside(self):
        self.assertTrue(overlaps(at(10, 15), at(10, 45), *self.busy))

    def test_ends_inside(self):
        self.assertTrue(overlaps(at(9, 45), at(10, 15), *self.busy))

    def test_contains_busy(self):
        self.assertTrue(overlaps(at(9), at(11), *self.busy))

    def test_inside_busy(self):
        self.assertTrue(overlaps(at(10, 5), at(10, 25), *self.busy))

    def test_identical(self):
        self.assertTrue(overlaps(at(10), at(10, 30), *self.busy))

    def test_empty_busy_interval_never_conflicts(self):
        self.assertFalse(overlaps(at(10), at(11), at(10, 30), at(10, 30)))

    def test_has_conflict_checks_every_interval(self):
        intervals = [Interval(at(8), at(9)), Interval(at(12), at(13))]
        self.assertFalse(has_conflict(at(9), at(10), intervals))
        self.assertTrue(has_conflict(at(12, 30), at(13, 30), intervals))


class AllDayTests(SimpleTestCase):
    zone = ZoneInfo("America/Bogota")

    def all_day(self, day):
        start = datetime(day.year, day.month, day.day, tzinfo=self.zone)
        return BusyInterval(start=start, end=start.replace(day=day.day + 1), is_all_day=True)

    def test_all_day_event_blocks_its_own_date(self):
        self.assertTrue(blocks_whole_day([self.all_day(date(2024, 1, 8))], date(2024, 1, 8), self.zone))

    def test_all_day_event_on_another_date_does_not_block(self):
        self.assertFalse(blocks_whole_day([self.all_day(date(2024, 1, 9))], date(2024, 1, 8), self.zone))

    def test_timed_events_never_block_the_whole_day(self):
        timed = BusyInterval(start=at(0), end=at(23, 59))
        self.assertFalse(blocks_whole_day([timed], date(2024, 1, 8), self.zone))
