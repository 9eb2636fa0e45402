"""
Тесты для расчета стоимости проживания.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from booking_engine.catalog.application import RoomCatalogService
from booking_engine.pricing.application import PricingService
from booking_engine.pricing.domain import PriceCalculated
from booking_engine.shared_kernel import (
    EntityNotFoundException,
    InvalidDateRangeException,
)
from booking_engine.unit_of_work import InMemoryUnitOfWork

from conftest import FIXED_NOW


class TestComputeStayPrice:
    """Тесты для PricingService.compute_stay_price."""

    def test_stay_without_seasons(self, pricing_service, room):
        priced = pricing_service.compute_stay_price(
            room.id, date(2024, 5, 1), date(2024, 5, 4)
        )

        assert priced.nights == 3
        assert priced.total_price == Decimal("300.00")
        assert [rate.price for rate in priced.nightly_rates] == [Decimal("100.00")] * 3
        assert [rate.night for rate in priced.nightly_rates] == [
            date(2024, 5, 1),
            date(2024, 5, 2),
            date(2024, 5, 3),
        ]
        assert {rate.season_name for rate in priced.nightly_rates} == {"Off season"}
        assert priced.average_coefficient == Decimal("1.00")
        assert priced.room_code == room.code
        assert priced.room_type == room.room_type
        assert priced.base_price == room.base_price

    def test_stay_entering_a_season(self, pricing_service, season_service, room):
        season_service.create_season(
            "High", date(2024, 6, 1), date(2024, 8, 31), Decimal("1.5")
        )

        priced = pricing_service.compute_stay_price(
            room.id, date(2024, 5, 30), date(2024, 6, 2)
        )

        assert priced.total_price == Decimal("350.00")
        assert priced.nightly_rates[0].price == Decimal("100.00")
        assert priced.nightly_rates[1].price == Decimal("100.00")
        assert priced.nightly_rates[2].price == Decimal("150.00")
        assert priced.nightly_rates[2].season_name == "High"
        assert priced.nightly_rates[2].coefficient == Decimal("1.5")
        # (1 + 1 + 1.5) / 3 = 1.1666...
        assert priced.average_coefficient == Decimal("1.17")

    def test_total_rounds_unrounded_sum(self, pricing_service, room_service):
        room = room_service.create_room(
            code="501", room_type="single", base_price=Decimal("10.005"), capacity=1
        )

        priced = pricing_service.compute_stay_price(
            room.id, date(2024, 3, 1), date(2024, 3, 3)
        )

        # Каждая ночь 10.005 -> 10.01, но итог 20.01, а не 20.02
        assert [rate.price for rate in priced.nightly_rates] == [Decimal("10.01")] * 2
        assert priced.total_price == Decimal("20.01")

    def test_half_rounds_away_from_zero(self, pricing_service, season_service, room_service):
        room = room_service.create_room(
            code="502", room_type="single", base_price=Decimal("0.25"), capacity=1
        )
        season_service.create_season(
            "Promo", date(2024, 3, 1), date(2024, 3, 1), Decimal("0.1")
        )

        priced = pricing_service.compute_stay_price(
            room.id, date(2024, 3, 1), date(2024, 3, 2)
        )

        # 0.25 * 0.1 = 0.025 -> 0.03
        assert priced.total_price == Decimal("0.03")

    @pytest.mark.parametrize(
        "check_in, check_out",
        [
            (date(2024, 5, 4), date(2024, 5, 4)),
            (date(2024, 5, 4), date(2024, 5, 1)),
        ],
    )
    def test_invalid_range_fails(self, pricing_service, room, event_bus, check_in, check_out):
        with pytest.raises(InvalidDateRangeException):
            pricing_service.compute_stay_price(room.id, check_in, check_out)
        assert event_bus.events_of(PriceCalculated) == []

    def test_invalid_range_checked_before_room_lookup(self, pricing_service):
        with pytest.raises(InvalidDateRangeException):
            pricing_service.compute_stay_price(uuid4(), date(2024, 5, 4), date(2024, 5, 1))

    def test_missing_room_fails(self, pricing_service):
        with pytest.raises(EntityNotFoundException):
            pricing_service.compute_stay_price(uuid4(), date(2024, 5, 1), date(2024, 5, 4))

    def test_publishes_price_calculated(self, pricing_service, room, event_bus):
        pricing_service.compute_stay_price(room.id, date(2024, 5, 1), date(2024, 5, 4))

        events = event_bus.events_of(PriceCalculated)
        assert len(events) == 1
        event = events[0]
        assert event.room_id == room.id
        assert event.room_code == room.code
        assert event.nights == 3
        assert event.total_price == Decimal("300.00")
        assert event.event_type == "PriceCalculated"
        assert event.occurred_on == FIXED_NOW

    def test_publish_failure_does_not_fail_calculation(self):
        broken_bus = MagicMock()
        broken_bus.publish.side_effect = RuntimeError("sink is down")
        uow = InMemoryUnitOfWork(event_bus=broken_bus)
        room = RoomCatalogService(uow).create_room(
            code="101", room_type="double", base_price=Decimal("100"), capacity=2
        )

        priced = PricingService(uow).compute_stay_price(
            room.id, date(2024, 5, 1), date(2024, 5, 2)
        )

        assert priced.total_price == Decimal("100.00")
        assert broken_bus.publish.call_count == 2

    def test_custom_off_season_label(self, uow, room):
        service = PricingService(uow, off_season_label="Hors saison")

        priced = service.compute_stay_price(room.id, date(2024, 5, 1), date(2024, 5, 2))

        assert priced.nightly_rates[0].season_name == "Hors saison"


class TestCalculateTotal:
    """Тесты для PricingService.calculate_total."""

    def test_returns_total_without_event(self, pricing_service, room, event_bus):
        total = pricing_service.calculate_total(room.id, date(2024, 5, 1), date(2024, 5, 4))

        assert total == Decimal("300.00")
        assert event_bus.events_of(PriceCalculated) == []

    def test_invalid_range_fails(self, pricing_service, room):
        with pytest.raises(InvalidDateRangeException):
            pricing_service.calculate_total(room.id, date(2024, 5, 4), date(2024, 5, 4))
