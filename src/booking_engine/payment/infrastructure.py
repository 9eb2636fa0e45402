"""
Инфраструктурный слой платежей.
"""

from typing import List

from ..shared_kernel import EntityId
from ..shared_kernel.infrastructure import InMemoryRepository, JsonFileRepository
from .domain import Payment
from .interfaces import IPaymentRepository


class InMemoryPaymentRepository(InMemoryRepository[Payment], IPaymentRepository):
    """Реализация репозитория платежей в памяти."""

    model_class = Payment

    def list_by_reservation(self, reservation_id: EntityId) -> List[Payment]:
        return self._select(lambda p: p.reservation_id == reservation_id)


class JsonFilePaymentRepository(JsonFileRepository[Payment], InMemoryPaymentRepository):
    """Репозиторий платежей, сохраняемый в JSON-файл."""
