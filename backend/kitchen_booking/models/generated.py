from sqlalchemy import Column, Float, ForeignKey, Integer, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Locations(Base):
    __tablename__ = 'locations'

    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    address = Column(Text)
    manager_id = Column(Integer)
    notification_email = Column(Text)
    timezone = Column(Text, nullable=False, server_default=text("'America/St_Johns'"))
    minimum_booking_window_hours = Column(Integer, nullable=False, server_default=text('1'))
    default_daily_booking_limit = Column(Integer, nullable=False, server_default=text('2'))
    cancellation_policy_hours = Column(Integer, nullable=False, server_default=text('24'))
    cancellation_policy_message = Column(
        Text,
        nullable=False,
        server_default=text(
            "'Bookings cannot be cancelled within {hours} hours of the scheduled time.'"
        ),
    )
    kitchen_license_status = Column(Text, server_default=text("'pending'"))  # pending, approved, rejected
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    kitchens = relationship('Kitchens', back_populates='location')


class Kitchens(Base):
    __tablename__ = 'kitchens'

    location_id = Column(ForeignKey('locations.id'), nullable=False)
    name = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    hourly_rate = Column(Integer)  # cents, NULL = free
    currency = Column(Text, nullable=False, server_default=text("'CAD'"))
    minimum_booking_hours = Column(Integer, nullable=False, server_default=text('1'))
    capacity = Column(Integer, nullable=False, server_default=text('1'))
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    location = relationship('Locations', back_populates='kitchens')
    availability = relationship('KitchenAvailability', back_populates='kitchen')
    date_overrides = relationship('KitchenDateOverrides', back_populates='kitchen')
    bookings = relationship('KitchenBookings', back_populates='kitchen')
    storage_listings = relationship('StorageListings', back_populates='kitchen')
    equipment_listings = relationship('EquipmentListings', back_populates='kitchen')


class KitchenAvailability(Base):
    __tablename__ = 'kitchen_availability'
    __table_args__ = (
        UniqueConstraint('kitchen_id', 'day_of_week'),
    )

    kitchen_id = Column(ForeignKey('kitchens.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0-6, Sunday is 0
    start_time = Column(Text, nullable=False)  # HH:MM
    end_time = Column(Text, nullable=False)  # HH:MM
    is_available = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    max_slots_per_chef = Column(Integer)

    kitchen = relationship('Kitchens', back_populates='availability')


class KitchenDateOverrides(Base):
    __tablename__ = 'kitchen_date_overrides'

    kitchen_id = Column(ForeignKey('kitchens.id', ondelete='CASCADE'), nullable=False)
    specific_date = Column(Text, nullable=False)  # YYYY-MM-DD
    is_available = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    start_time = Column(Text)  # NULL if the row covers the whole day
    end_time = Column(Text)
    reason = Column(Text)
    max_slots_per_chef = Column(Integer)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    kitchen = relationship('Kitchens', back_populates='date_overrides')


class KitchenBookings(Base):
    __tablename__ = 'kitchen_bookings'

    kitchen_id = Column(ForeignKey('kitchens.id'), nullable=False)
    booking_date = Column(Text, nullable=False)  # YYYY-MM-DD
    start_time = Column(Text, nullable=False)  # HH:MM
    end_time = Column(Text, nullable=False)  # HH:MM
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    booking_type = Column(Text, nullable=False, server_default=text("'chef'"))  # chef, external
    id = Column(Integer, primary_key=True)
    chef_id = Column(Integer)  # NULL for external bookings
    created_by = Column(Integer)
    external_contact_name = Column(Text)
    external_contact_email = Column(Text)
    external_contact_phone = Column(Text)
    external_contact_company = Column(Text)
    special_notes = Column(Text)
    hourly_rate = Column(Integer)
    duration_hours = Column(Float)
    total_price = Column(Integer)
    service_fee = Column(Integer, nullable=False, server_default=text('0'))
    currency = Column(Text, nullable=False, server_default=text("'CAD'"))
    cancelled_at = Column(Text)
    cancelled_by = Column(Integer)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    kitchen = relationship('Kitchens', back_populates='bookings')
    storage_bookings = relationship('StorageBookings', back_populates='kitchen_booking')
    equipment_bookings = relationship('EquipmentBookings', back_populates='kitchen_booking')


class StorageListings(Base):
    __tablename__ = 'storage_listings'

    kitchen_id = Column(ForeignKey('kitchens.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    base_price = Column(Integer, nullable=False, server_default=text('0'))  # cents
    pricing_model = Column(Text, nullable=False, server_default=text("'daily'"))  # daily, hourly, monthly-flat
    minimum_booking_duration = Column(Integer, nullable=False, server_default=text('1'))  # days
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)

    kitchen = relationship('Kitchens', back_populates='storage_listings')


class EquipmentListings(Base):
    __tablename__ = 'equipment_listings'

    kitchen_id = Column(ForeignKey('kitchens.id', ondelete='CASCADE'), nullable=False)
    equipment_type = Column(Text, nullable=False)
    session_rate = Column(Integer, nullable=False, server_default=text('0'))  # cents
    damage_deposit = Column(Integer, nullable=False, server_default=text('0'))
    availability_type = Column(Text, nullable=False, server_default=text("'rental'"))  # rental, included
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)

    kitchen = relationship('Kitchens', back_populates='equipment_listings')


class StorageBookings(Base):
    __tablename__ = 'storage_bookings'

    kitchen_booking_id = Column(ForeignKey('kitchen_bookings.id', ondelete='CASCADE'), nullable=False)
    storage_listing_id = Column(ForeignKey('storage_listings.id'), nullable=False)
    start_date = Column(Text, nullable=False)  # ISO datetime
    end_date = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    total_price = Column(Integer, nullable=False, server_default=text('0'))
    pricing_model = Column(Text, nullable=False, server_default=text("'daily'"))
    currency = Column(Text, nullable=False, server_default=text("'CAD'"))
    id = Column(Integer, primary_key=True)
    chef_id = Column(Integer)

    kitchen_booking = relationship('KitchenBookings', back_populates='storage_bookings')


class EquipmentBookings(Base):
    __tablename__ = 'equipment_bookings'

    kitchen_booking_id = Column(ForeignKey('kitchen_bookings.id', ondelete='CASCADE'), nullable=False)
    equipment_listing_id = Column(ForeignKey('equipment_listings.id'), nullable=False)
    start_date = Column(Text, nullable=False)
    end_date = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    total_price = Column(Integer, nullable=False, server_default=text('0'))
    damage_deposit = Column(Integer, nullable=False, server_default=text('0'))
    currency = Column(Text, nullable=False, server_default=text("'CAD'"))
    id = Column(Integer, primary_key=True)
    chef_id = Column(Integer)

    kitchen_booking = relationship('KitchenBookings', back_populates='equipment_bookings')


class ChefLocationAccess(Base):
    __tablename__ = 'chef_location_access'
    __table_args__ = (
        UniqueConstraint('chef_id', 'location_id'),
    )

    chef_id = Column(Integer, nullable=False)
    location_id = Column(ForeignKey('locations.id', ondelete='CASCADE'), nullable=False)
    granted_by = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)
    granted_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))


class ChefKitchenApplications(Base):
    __tablename__ = 'chef_kitchen_applications'

    chef_id = Column(Integer, nullable=False)
    location_id = Column(ForeignKey('locations.id', ondelete='CASCADE'), nullable=False)
    status = Column(Text, nullable=False, server_default=text("'inReview'"))  # inReview, approved, rejected, cancelled
    current_tier = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    reviewed_by = Column(Integer)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))


class KitchenDayLocks(Base):
    __tablename__ = 'kitchen_day_locks'
    __table_args__ = (
        UniqueConstraint('kitchen_id', 'lock_date'),
    )

    kitchen_id = Column(ForeignKey('kitchens.id', ondelete='CASCADE'), nullable=False)
    lock_date = Column(Text, nullable=False)
    version = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
