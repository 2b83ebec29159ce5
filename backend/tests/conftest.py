from datetime import date, datetime

import pytest
import pytz
from sqlalchemy import update
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kitchen_booking.database import build_engine
from kitchen_booking.models import Base
from kitchen_booking.models.generated import (
    ChefKitchenApplications,
    ChefLocationAccess,
    KitchenAvailability,
    KitchenDateOverrides,
    Kitchens,
    Locations,
)
from kitchen_booking.services.slots.config import BookingConfig

CHEF_ID = 7
OTHER_CHEF_ID = 8
MANAGER_ID = 100

# Monday 2030-06-03; "now" is two days earlier at noon UTC
BOOKING_DATE = date(2030, 6, 3)
NOW = datetime(2030, 6, 1, 12, 0, tzinfo=pytz.utc)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def config() -> BookingConfig:
    return BookingConfig()


@pytest.fixture
def make_location(db):
    def _make(**fields) -> Locations:
        values = {
            "name": "Harbour Commissary",
            "manager_id": MANAGER_ID,
            "notification_email": "kitchen@example.com",
            "timezone": "America/St_Johns",
            "kitchen_license_status": "approved",
        }
        values.update(fields)
        location = Locations(**values)
        db.add(location)
        db.commit()
        if values["kitchen_license_status"] is None:
            # the column has a server default, so NULL has to be written explicitly
            db.execute(update(Locations).where(Locations.id == location.id).values(kitchen_license_status=None))
            db.commit()
        return location

    return _make


@pytest.fixture
def make_kitchen(db, make_location):
    def _make(location=None, **fields) -> Kitchens:
        location = location or make_location()
        values = {"name": "Main Line", "hourly_rate": 2000, "location_id": location.id}
        values.update(fields)
        kitchen = Kitchens(**values)
        db.add(kitchen)
        db.commit()
        return kitchen

    return _make


@pytest.fixture
def open_week(db):
    """Same hours on every weekday."""

    def _open(kitchen, start="08:00", end="20:00", max_slots_per_chef=None):
        for dow in range(7):
            db.add(KitchenAvailability(
                kitchen_id=kitchen.id,
                day_of_week=dow,
                start_time=start,
                end_time=end,
                is_available=1,
                max_slots_per_chef=max_slots_per_chef,
            ))
        db.commit()

    return _open


@pytest.fixture
def add_override(db):
    def _add(kitchen, specific_date=BOOKING_DATE, **fields) -> KitchenDateOverrides:
        override = KitchenDateOverrides(
            kitchen_id=kitchen.id,
            specific_date=specific_date.isoformat(),
            **fields,
        )
        db.add(override)
        db.commit()
        return override

    return _add


@pytest.fixture
def grant_access(db):
    def _grant(chef_id, location):
        db.add(ChefLocationAccess(chef_id=chef_id, location_id=location.id, granted_by=MANAGER_ID))
        db.commit()

    return _grant


@pytest.fixture
def add_application(db):
    def _add(chef_id, location, status="approved", current_tier=2):
        db.add(ChefKitchenApplications(
            chef_id=chef_id,
            location_id=location.id,
            status=status,
            current_tier=current_tier,
        ))
        db.commit()

    return _add


@pytest.fixture
def kitchen(make_kitchen, open_week, grant_access):
    """Approved, open 08:00-20:00 daily, CHEF_ID has access."""
    kitchen = make_kitchen()
    open_week(kitchen)
    grant_access(CHEF_ID, kitchen.location)
    grant_access(OTHER_CHEF_ID, kitchen.location)
    return kitchen
