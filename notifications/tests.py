from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings

from booking.models import Booking
from booking.services.notification_service import NotificationService
from booking.tests.helpers import book, make_event_type, make_host, next_weekday
from notifications.models import Notification


@override_settings(SITE_URL="https://book.example.com")
class NotificationTests(TestCase):
    def setUp(self):
        self.host = make_host(timezone="America/Bogota")
        self.event_type = make_event_type(self.host, title="Consultation")
        self.day = next_weekday(1)
        self.booking = book(
            self.event_type, self.day, "10:00",
            guest_timezone="Europe/Madrid", guest_notes="Bring the contract",
        )
        self.service = NotificationService()

    def test_confirmation_goes_to_guest_and_host(self):
        self.service.send_booking_confirmation(self.booking)

        guest, host = mail.outbox
        self.assertEqual(guest.to, ["sam@example.com"])
        self.assertIn("Europe/Madrid", guest.body)
        self.assertIn("Bring the contract", guest.body)
        self.assertEqual(host.to, ["jane@example.com"])
        self.assertIn("10:00 AM (America/Bogota)", host.body)
        self.assertIn("https://book.example.com/dashboard/bookings", host.body)
        self.assertEqual(Notification.objects.filter(booking=self.booking, sent=True).count(), 2)

    def test_host_without_email_gets_no_alert(self):
        self.host.email = ""
        self.host.save()
        self.booking.refresh_from_db()
        self.service.send_booking_confirmation(self.booking)
        self.assertEqual(len(mail.outbox), 1)

    def test_unknown_guest_timezone_falls_back_to_host_zone(self):
        self.booking.guest_timezone = "Nowhere/Special"
        self.service.send_booking_confirmation(self.booking)
        self.assertIn("10:00 AM", mail.outbox[0].body)

    def test_send_failure_is_recorded_not_raised(self):
        with mock.patch("booking.services.notification_service.send_mail", side_effect=OSError("smtp down")):
            self.assertFalse(self.service.send_reminder(self.booking))
        note = Notification.objects.get(booking=self.booking)
        self.assertFalse(note.sent)
        self.assertEqual(note.kind, Notification.Kind.REMINDER)

    def test_notification_history_survives_booking_deletion(self):
        self.service.send_cancellation(self.booking)
        self.booking.delete()
        note = Notification.objects.get(kind=Notification.Kind.CANCELLATION)
        self.assertIsNone(note.booking)

    def test_cancellation_includes_reason(self):
        self.booking.status = Booking.Status.CANCELLED
        self.booking.cancel_reason = "Double booked"
        self.service.send_cancellation(self.booking)
        self.assertIn("Reason: Double booked", mail.outbox[0].body)
