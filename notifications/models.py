# notifications/models.py
#
# Purpose:
# - Record emails sent about bookings (confirmation, host alert,
#   cancellation, reminder).
#
# Design:
# - FK to booking.Booking (kept nullable so the audit trail survives deletes).
# - 'sent' indicates the delivery attempt result.
#
from django.db import models


class Notification(models.Model):
    class Kind(models.TextChoices):
        CONFIRMATION = "confirmation", "Confirmation"
        HOST_ALERT = "host_alert", "Host alert"
        CANCELLATION = "cancellation", "Cancellation"
        REMINDER = "reminder", "Reminder"

    booking = models.ForeignKey(
        "booking.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    recipient = models.EmailField()
    kind = models.CharField(max_length=20, choices=Kind.choices)
    subject = models.CharField(max_length=255)
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    sent = models.BooleanField(default=False)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.get_kind_display()} to {self.recipient} at {self.created_at:%Y-%m-%d %H:%M}"
