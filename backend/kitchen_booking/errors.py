# backend/kitchen_booking/errors.py
"""
Booking error taxonomy.

Every expected business outcome of admission and lifecycle transitions is a
``BookingError`` subclass with its own code, descriptive message and
structured details. The API layer renders them through a single exception
handler (see ``main.py``); nothing here knows about HTTP beyond the status
code each kind maps to.
"""

from typing import Any, Optional

from fastapi import status


class BookingError(Exception):
    """Base class for expected booking outcomes."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    retry_safe: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "error": self.message,
            "code": self.code,
            "details": self.details,
        }
        if self.retry_safe:
            body["retrySafe"] = True
        return body


class NotEligible(BookingError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, application_status: str, message: Optional[str] = None):
        super().__init__(
            message
            or "You do not have approved access to this kitchen location. "
            "Please complete all required application steps to book.",
            {"applicationStatus": application_status},
        )
        self.application_status = application_status


class LicenseNotApproved(BookingError):
    status_code = status.HTTP_403_FORBIDDEN

    _MESSAGES = {
        "pending": "This location's kitchen license is still pending approval. Bookings are not available yet.",
        "rejected": "This location's kitchen license was rejected. Bookings are not available.",
        "unset": "This location has not submitted a kitchen license. Bookings are not available.",
    }

    def __init__(self, license_status: str):
        super().__init__(
            self._MESSAGES.get(
                license_status,
                f"This location's kitchen license is not approved (status: {license_status}).",
            ),
            {"licenseStatus": license_status},
        )
        self.license_status = license_status


class TooSoonToBook(BookingError):
    def __init__(self, hours_required: float, hours_available: float):
        if hours_available < 0:
            message = "Cannot book a time slot that has already passed"
        else:
            unit = "hour" if hours_required == 1 else "hours"
            message = f"Bookings must be made at least {hours_required:g} {unit} in advance"
        super().__init__(
            message,
            {
                "hoursRequired": hours_required,
                "hoursAvailable": round(hours_available, 2),
            },
        )
        self.hours_required = hours_required
        self.hours_available = hours_available


class DailyLimitExceeded(BookingError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, limit: int, existing_hours: int, requested_hours: int):
        unit = "slot" if limit == 1 else "slots"
        super().__init__(
            f"Daily booking limit reached: you may book at most {limit} {unit} "
            f"per day in this kitchen (already booked: {existing_hours}, "
            f"requested: {requested_hours})",
            {
                "maxSlotsPerChef": limit,
                "existingHours": existing_hours,
                "requestedHours": requested_hours,
            },
        )
        self.limit = limit
        self.existing_hours = existing_hours


class SlotConflict(BookingError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, conflicting_ids: list[int]):
        super().__init__(
            "The requested time overlaps an existing booking",
            {"conflictingBookingIds": conflicting_ids},
        )


class KitchenClosed(BookingError):
    def __init__(self, message: str = "Booking time must be within manager-set available hours"):
        super().__init__(message)


class InvalidRange(BookingError):
    pass


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(BookingError):
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransition(BookingError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot change a {current} booking to {target}",
            {"currentStatus": current, "targetStatus": target},
        )


class CancellationNotAllowed(BookingError):
    def __init__(self, message: str, policy_hours: int):
        super().__init__(message, {"cancellationPolicyHours": policy_hours})


class Unavailable(BookingError):
    """Storage or transport failure. The operation left no partial state."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retry_safe = True

    def __init__(self, message: str = "Booking storage is temporarily unavailable, please retry"):
        super().__init__(message)
