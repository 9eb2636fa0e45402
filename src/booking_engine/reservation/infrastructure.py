"""
Инфраструктурный слой бронирования.
"""

from datetime import date
from typing import List, Optional

from ..shared_kernel import EntityId
from ..shared_kernel.infrastructure import InMemoryRepository, JsonFileRepository
from .domain import Reservation, ReservationStatus
from .interfaces import IReservationRepository


class InMemoryReservationRepository(
    InMemoryRepository[Reservation], IReservationRepository
):
    """Реализация репозитория бронирований в памяти."""

    model_class = Reservation

    def list_by_status(self, status: ReservationStatus) -> List[Reservation]:
        return self._select(lambda r: r.status == status)

    def list_by_room(self, room_id: EntityId) -> List[Reservation]:
        return self._select(lambda r: r.room_id == room_id)

    def list_by_guest(self, guest_id: EntityId) -> List[Reservation]:
        return self._select(lambda r: r.guest_id == guest_id)

    def find_conflicting(
        self,
        room_id: EntityId,
        check_in: date,
        check_out: date,
        exclude_id: Optional[EntityId] = None,
    ) -> List[Reservation]:
        return self._select(
            lambda r: r.room_id == room_id
            and r.id != exclude_id
            and r.period.overlaps(check_in, check_out)
        )


class JsonFileReservationRepository(
    JsonFileRepository[Reservation], InMemoryReservationRepository
):
    """Репозиторий бронирований, сохраняемый в JSON-файл."""
