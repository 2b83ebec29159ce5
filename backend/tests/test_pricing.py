from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from kitchen_booking.services.pricing import (
    calculate_booking_totals,
    calculate_equipment_price,
    calculate_kitchen_price,
    calculate_service_fee,
    calculate_storage_price,
    round_minor,
)


class TestKitchenPrice:
    def test_minimum_hours_applied(self, config):
        price = calculate_kitchen_price(2000, 90, 2, config=config)

        assert price.duration_hours == 1.5
        assert price.billable_hours == 2
        assert price.total_price == 4000
        assert price.service_fee == 200
        assert price.total_with_fee == 4200

    def test_fractional_hours_over_minimum(self, config):
        price = calculate_kitchen_price(2500, 150, 1, config=config)

        assert price.total_price == 6250
        assert price.service_fee == 313  # 312.5 rounds half up

    def test_free_kitchen(self, config):
        price = calculate_kitchen_price(None, 120, 1, config=config)
        assert price.total_with_fee == 0

    def test_rounding_is_half_away_from_zero(self):
        assert round_minor(Decimal("2.5")) == 3
        assert round_minor(Decimal("3.5")) == 4
        assert calculate_service_fee(10, 0.05) == 1


class TestAddons:
    def test_storage_daily_uses_minimum_days(self):
        listing = SimpleNamespace(base_price=1000, pricing_model="daily", minimum_booking_duration=3)
        price = calculate_storage_price(listing, datetime(2030, 6, 3), datetime(2030, 6, 4, 6))
        assert price == 3000

    def test_storage_daily_rounds_partial_days_up(self):
        listing = SimpleNamespace(base_price=1000, pricing_model="daily", minimum_booking_duration=1)
        price = calculate_storage_price(listing, datetime(2030, 6, 3), datetime(2030, 6, 4, 6))
        assert price == 2000

    def test_storage_hourly(self):
        listing = SimpleNamespace(base_price=150, pricing_model="hourly", minimum_booking_duration=1)
        price = calculate_storage_price(listing, datetime(2030, 6, 3, 9), datetime(2030, 6, 3, 11, 30))
        assert price == 450

    def test_storage_monthly_flat(self):
        listing = SimpleNamespace(base_price=9000, pricing_model="monthly-flat", minimum_booking_duration=1)
        assert calculate_storage_price(listing, datetime(2030, 6, 1), datetime(2030, 6, 20)) == 9000

    def test_included_equipment_is_not_priced(self):
        assert calculate_equipment_price(SimpleNamespace(availability_type="included", session_rate=500)) is None
        assert calculate_equipment_price(SimpleNamespace(availability_type="rental", session_rate=500)) == 500

    def test_fee_on_grand_total(self, config):
        kitchen_price = calculate_kitchen_price(2000, 90, 2, config=config)

        assert calculate_booking_totals(kitchen_price, 0, config) == (4000, 200)
        assert calculate_booking_totals(kitchen_price, 1500, config) == (5500, 275)
