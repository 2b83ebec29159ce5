# backend/kitchen_booking/services/access.py
"""
Access gates consulted by admission and lifecycle.

- Eligibility: a chef may book kitchens of a location once access was granted
  (chef_location_access) or their kitchen application there is approved at
  tier 2 or higher.
- License: a location's kitchen license must be approved before its kitchens
  take bookings.

Both are small provider classes so callers can swap the backend (tests pass
their own objects with the same methods).
"""

from typing import Optional, Protocol

from sqlalchemy.orm import Session

from ..models.generated import (
    ChefKitchenApplications as DBApplication,
    ChefLocationAccess as DBAccess,
    Locations as DBLocation,
)

APPROVED = "approved"
LICENSE_STATUSES = ("pending", "approved", "rejected", "unset")
MIN_BOOKING_TIER = 2


class EligibilityProvider(Protocol):
    def application_status(self, chef_id: int, location_id: int) -> str: ...

    def is_approved(self, chef_id: int, location_id: int) -> bool: ...


class LicenseProvider(Protocol):
    def get_license_status(self, location_id: int) -> str: ...


class SqlEligibilityProvider:
    """Eligibility backed by access grants and kitchen applications."""

    def __init__(self, db: Session):
        self.db = db

    def application_status(self, chef_id: int, location_id: int) -> str:
        """
        Returns:
            "approved" when the chef may book, otherwise the application state:
            "none", "inReview", "rejected", "cancelled" or "incomplete"
            (approved but below the required tier).
        """
        grant = (
            self.db.query(DBAccess)
            .filter(DBAccess.chef_id == chef_id, DBAccess.location_id == location_id)
            .first()
        )
        if grant:
            return APPROVED

        application: Optional[DBApplication] = (
            self.db.query(DBApplication)
            .filter(
                DBApplication.chef_id == chef_id,
                DBApplication.location_id == location_id,
            )
            .order_by(DBApplication.id.desc())
            .first()
        )
        if application is None:
            return "none"
        if application.status == APPROVED:
            return APPROVED if (application.current_tier or 0) >= MIN_BOOKING_TIER else "incomplete"
        return application.status

    def is_approved(self, chef_id: int, location_id: int) -> bool:
        return self.application_status(chef_id, location_id) == APPROVED


class SqlLicenseProvider:
    """License status read from the location row."""

    def __init__(self, db: Session):
        self.db = db

    def get_license_status(self, location_id: int) -> str:
        location = self.db.get(DBLocation, location_id)
        status = (location.kitchen_license_status or "").strip().lower() if location else ""
        if not status:
            return "unset"
        return status if status in LICENSE_STATUSES else "unset"
