"""
errors.py
---------
Error taxonomy shared by the availability and booking services.

All errors are DRF APIExceptions, so views can let them propagate and DRF
renders {"detail": "..."} with the matching status code.

- InvalidInput      400  malformed input (first offending field wins)
- NotFound          404  unknown host / event type / booking
- SlotUnavailable   409  slot taken at commit time; re-fetch and re-prompt
- AlreadyCancelled  400  second cancel attempt on the same booking
- BookingNotSaved   500  the store rejected the write; nothing was persisted

Upstream calendar and email failures are never raised; they are logged.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class BookingError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Booking request failed."
    default_code = "booking_error"


class InvalidInput(BookingError):
    default_detail = "Invalid data."
    default_code = "invalid"


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class SlotUnavailable(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This time slot is no longer available. Please pick another one."
    default_code = "slot_unavailable"


class AlreadyCancelled(BookingError):
    default_detail = "This booking is already cancelled."
    default_code = "already_cancelled"


class BookingNotSaved(BookingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Could not create the booking."
    default_code = "booking_not_saved"


def first_error(errors) -> str:
    """
    Pull the first message out of a serializer.errors structure
    (dict of field -> list, possibly nested).
    """
    if isinstance(errors, dict):
        errors = list(errors.values())
    if isinstance(errors, (list, tuple)):
        for value in errors:
            if value:
                return first_error(value)
        return InvalidInput.default_detail
    return str(errors)
