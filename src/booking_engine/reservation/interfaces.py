"""
Интерфейсы (порты) для контекста бронирования.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, ContextManager, List, Optional, Protocol

from ..catalog.domain import Room
from ..shared_kernel import EntityId
from ..shared_kernel.interfaces import IEventBus
from .domain import Reservation, ReservationStatus


class IReservationRepository(Protocol):
    """Интерфейс репозитория для бронирований."""

    def get_by_id(self, reservation_id: EntityId) -> Optional[Reservation]: ...
    def save(self, reservation: Reservation) -> Reservation: ...
    def delete_by_id(self, reservation_id: EntityId) -> None: ...
    def list_all(self) -> List[Reservation]: ...
    def list_by_status(self, status: ReservationStatus) -> List[Reservation]: ...
    def list_by_room(self, room_id: EntityId) -> List[Reservation]: ...
    def list_by_guest(self, guest_id: EntityId) -> List[Reservation]: ...
    def exists_by_id(self, reservation_id: EntityId) -> bool: ...

    def find_conflicting(
        self,
        room_id: EntityId,
        check_in: date,
        check_out: date,
        exclude_id: Optional[EntityId] = None,
    ) -> List[Reservation]:
        """Бронирования номера, пересекающиеся с [check_in, check_out).

        Статус бронирований не учитывается.
        """
        ...


class IRoomLookup(Protocol):
    def get_by_id(self, room_id: EntityId) -> Optional[Room]: ...


class IPaymentCreator(Protocol):
    """Порт создания платежа для бронирования."""

    def create_payment(
        self, reservation_id: EntityId, amount: Decimal, payment_method: str
    ) -> Any: ...


class IReservationUnitOfWork(Protocol):
    """Интерфейс Unit of Work для контекста бронирования."""

    @property
    def rooms(self) -> IRoomLookup: ...
    @property
    def reservations(self) -> IReservationRepository: ...
    @property
    def event_bus(self) -> IEventBus: ...

    def __enter__(self) -> IReservationUnitOfWork: ...
    def __exit__(self, exc_type, exc_val, exc_tb) -> None: ...
    def reading(self) -> ContextManager[Any]: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
