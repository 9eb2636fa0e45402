"""
Общие фикстуры для тестов движка бронирования.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from booking_engine.catalog.application import RoomCatalogService, SeasonCatalogService
from booking_engine.catalog.domain import Room
from booking_engine.payment.application import PaymentApplicationService
from booking_engine.pricing.application import PricingService
from booking_engine.reservation.application import ReservationApplicationService
from booking_engine.shared_kernel import EntityId
from booking_engine.shared_kernel.infrastructure import InMemoryEventBus
from booking_engine.unit_of_work import InMemoryUnitOfWork

FIXED_NOW = datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Управляемые часы для тестов."""

    def __init__(self, current: datetime = FIXED_NOW):
        self.current = current

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def uow(event_bus: InMemoryEventBus) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(event_bus=event_bus)


@pytest.fixture
def room_service(uow: InMemoryUnitOfWork, clock: FakeClock) -> RoomCatalogService:
    return RoomCatalogService(uow, clock=clock)


@pytest.fixture
def season_service(uow: InMemoryUnitOfWork, clock: FakeClock) -> SeasonCatalogService:
    return SeasonCatalogService(uow, clock=clock)


@pytest.fixture
def pricing_service(uow: InMemoryUnitOfWork, clock: FakeClock) -> PricingService:
    return PricingService(uow, clock=clock)


@pytest.fixture
def payment_service(uow: InMemoryUnitOfWork, clock: FakeClock) -> PaymentApplicationService:
    return PaymentApplicationService(uow, clock=clock)


@pytest.fixture
def reservation_service(
    uow: InMemoryUnitOfWork,
    payment_service: PaymentApplicationService,
    clock: FakeClock,
) -> ReservationApplicationService:
    return ReservationApplicationService(
        uow, payment_service=payment_service, clock=clock
    )


@pytest.fixture
def room(room_service: RoomCatalogService) -> Room:
    """Номер с базовой ценой 100.0 за ночь."""
    return room_service.create_room(
        code="101", room_type="double", base_price=Decimal("100.0"), capacity=2
    )


@pytest.fixture
def guest_id() -> EntityId:
    return uuid4()
