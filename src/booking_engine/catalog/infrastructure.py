"""
Инфраструктурный слой каталога.

Реализации репозиториев номеров и сезонов в памяти и в JSON-файлах.
"""

from datetime import date
from typing import List, Optional

from ..shared_kernel.infrastructure import InMemoryRepository, JsonFileRepository
from .domain import Room, Season
from .interfaces import IRoomRepository, ISeasonRepository


class InMemoryRoomRepository(InMemoryRepository[Room], IRoomRepository):
    """Реализация репозитория номеров в памяти."""

    model_class = Room

    def list_by_availability(self, available: bool) -> List[Room]:
        return self._select(lambda room: room.available == available)

    def list_by_type(self, room_type: str) -> List[Room]:
        return self._select(lambda room: room.room_type == room_type)

    def find_by_code(self, code: str) -> Optional[Room]:
        matches = self._select(lambda room: room.code == code)
        return matches[0] if matches else None


class InMemorySeasonRepository(InMemoryRepository[Season], ISeasonRepository):
    """Реализация репозитория сезонов в памяти."""

    model_class = Season

    def find_covering(self, day: date) -> List[Season]:
        """Возвращает все сезоны, в диапазон которых входит дата."""
        return self._select(lambda season: season.covers(day))


class JsonFileRoomRepository(JsonFileRepository[Room], InMemoryRoomRepository):
    """Репозиторий номеров, сохраняемый в JSON-файл."""


class JsonFileSeasonRepository(JsonFileRepository[Season], InMemorySeasonRepository):
    """Репозиторий сезонов, сохраняемый в JSON-файл."""
