# booking/tests/test_slot_utils.py

from datetime import date, datetime, timezone as dt_timezone
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase

from booking.models import Availability
from booking.services.errors import InvalidInput
from booking.services.slot_utils import (
    CandidateSlots,
    day_range,
    generate_slots_for_day,
    hhmm_to_minutes,
    js_weekday,
    local_datetime,
    minutes_to_hhmm,
    parse_day,
)


def window(start="09:00", end="17:00", is_enabled=True):
    return Availability(day_of_week=1, start_time=start, end_time=end, is_enabled=is_enabled)


class GenerateSlotsTests(SimpleTestCase):
    def test_full_working_day_gives_sixteen_half_hour_candidates(self):
        slots = list(generate_slots_for_day(window(), 30))
        self.assertEqual(len(slots), 16)
        self.assertEqual(slots[0], "09:00")
        self.assertEqual(slots[1], "09:30")
        self.assertEqual(slots[-1], "16:30")

    def test_last_candidate_must_fit_the_duration(self):
        slots = list(generate_slots_for_day(window(), 60))
        self.assertEqual(slots[-1], "16:00")
        self.assertEqual(len(slots), 15)

    def test_step_stays_thirty_minutes_for_short_events(self):
        slots = list(generate_slots_for_day(window("09:00", "10:00"), 15))
        self.assertEqual(slots, ["09:00", "09:30"])

    def test_duration_longer_than_window_gives_nothing(self):
        slots = generate_slots_for_day(window("09:00", "10:00"), 90)
        self.assertEqual(list(slots), [])
        self.assertEqual(len(slots), 0)

    def test_disabled_or_missing_day_gives_nothing(self):
        self.assertEqual(list(generate_slots_for_day(window(is_enabled=False), 30)), [])
        self.assertEqual(list(generate_slots_for_day(None, 30)), [])

    def test_odd_start_minutes_are_kept(self):
        slots = list(generate_slots_for_day(window("09:15", "10:30"), 30))
        self.assertEqual(slots, ["09:15", "09:45"])

    def test_iterating_twice_yields_the_same_sequence(self):
        slots = CandidateSlots(540, 600, 30)
        self.assertEqual(list(slots), list(slots))
        self.assertEqual(len(slots), len(list(slots)))


class ConversionTests(SimpleTestCase):
    def test_minutes_round_trip(self):
        self.assertEqual(hhmm_to_minutes("09:30"), 570)
        self.assertEqual(minutes_to_hhmm(570), "09:30")
        self.assertEqual(minutes_to_hhmm(0), "00:00")

    def test_js_weekday_starts_on_sunday(self):
        self.assertEqual(js_weekday(date(2024, 1, 7)), 0)  # Sunday
        self.assertEqual(js_weekday(date(2024, 1, 8)), 1)  # Monday
        self.assertEqual(js_weekday(date(2024, 1, 13)), 6)  # Saturday

    def test_parse_day_rejects_bad_input(self):
        self.assertEqual(parse_day("2024-01-08"), date(2024, 1, 8))
        for bad in ["", "2024-1-8", "08/01/2024", "2024-02-30"]:
            with self.assertRaises(InvalidInput):
                parse_day(bad)

    def test_local_datetime_uses_the_host_zone(self):
        start = local_datetime(date(2024, 1, 8), "09:00", ZoneInfo("America/Bogota"))
        self.assertEqual(start.astimezone(dt_timezone.utc), datetime(2024, 1, 8, 14, 0, tzinfo=dt_timezone.utc))

    def test_day_range_spans_the_local_day(self):
        zone = ZoneInfo("America/Bogota")
        start, end = day_range(date(2024, 1, 8), zone)
        self.assertEqual(start.astimezone(dt_timezone.utc), datetime(2024, 1, 8, 5, 0, tzinfo=dt_timezone.utc))
        self.assertEqual(end.astimezone(dt_timezone.utc), datetime(2024, 1, 9, 5, 0, tzinfo=dt_timezone.utc))
