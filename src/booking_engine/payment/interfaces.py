"""
Интерфейсы (порты) для контекста платежей.
"""

from __future__ import annotations

from typing import Any, ContextManager, List, Optional, Protocol

from ..reservation.interfaces import IReservationRepository
from ..shared_kernel import EntityId
from ..shared_kernel.interfaces import IEventBus
from .domain import Payment


class IPaymentRepository(Protocol):
    """Интерфейс репозитория для платежей."""

    def get_by_id(self, payment_id: EntityId) -> Optional[Payment]: ...
    def save(self, payment: Payment) -> Payment: ...
    def delete_by_id(self, payment_id: EntityId) -> None: ...
    def list_all(self) -> List[Payment]: ...
    def list_by_reservation(self, reservation_id: EntityId) -> List[Payment]: ...


class IPaymentUnitOfWork(Protocol):
    """Интерфейс Unit of Work для контекста платежей.

    Платежи меняют статус бронирования, поэтому работают
    с тем же хранилищем бронирований.
    """

    @property
    def payments(self) -> IPaymentRepository: ...
    @property
    def reservations(self) -> IReservationRepository: ...
    @property
    def event_bus(self) -> IEventBus: ...

    def __enter__(self) -> IPaymentUnitOfWork: ...
    def __exit__(self, exc_type, exc_val, exc_tb) -> None: ...
    def reading(self) -> ContextManager[Any]: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
