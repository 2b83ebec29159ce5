# backend/kitchen_booking/principal.py
"""
Authenticated caller as forwarded by the gateway.

Authentication happens upstream; the backend only receives the user id and
role and decides what that role may do with a booking.
"""

from dataclasses import dataclass

ROLES = ("chef", "manager", "admin")


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: str  # chef, manager, admin

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_chef(self) -> bool:
        return self.role == "chef"

    def manages(self, location) -> bool:
        """Admins manage everything; managers only their own locations."""
        if self.is_admin:
            return True
        return (
            self.role == "manager"
            and location is not None
            and location.manager_id == self.user_id
        )
