from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from booking.models import Booking
from booking.tests.helpers import make_event_type, make_host


class ReportsSummaryTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.host = make_host()
        self.event_type = make_event_type(self.host)

    def booking_at(self, start, status=Booking.Status.CONFIRMED):
        return Booking.objects.create(
            event_type=self.event_type,
            guest_name="Sam Guest",
            guest_email="sam@example.com",
            guest_timezone="UTC",
            start_time=start,
            end_time=start + timedelta(minutes=30),
            status=status,
        )

    def test_requires_a_host(self):
        self.assertIn(self.client.get("/api/reports/summary").status_code, (401, 403))

    def test_summary(self):
        now = timezone.now()
        self.booking_at(now + timedelta(days=3))
        self.booking_at(now + timedelta(days=4), status=Booking.Status.CANCELLED)
        self.booking_at(now - timedelta(days=2))
        self.booking_at(now - timedelta(days=45))
        make_event_type(self.host, slug="off", is_active=False)

        other = make_host(slug="bob", email="bob@example.com")
        Booking.objects.create(
            event_type=make_event_type(other), guest_name="X Y", guest_email="x@example.com",
            guest_timezone="UTC", start_time=now + timedelta(days=1), end_time=now + timedelta(days=1, minutes=30),
        )

        self.client.force_authenticate(user=self.host.user)
        resp = self.client.get("/api/reports/summary")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["upcoming"], 1)
        self.assertEqual(resp.data["active_event_types"], 1)
        self.assertEqual(sum(row["count"] for row in resp.data["bookings_per_day"]), 3)
        self.assertEqual(sum(row["count"] for row in resp.data["cancellations_per_day"]), 1)
        self.assertIn("bookings_today", resp.data)
