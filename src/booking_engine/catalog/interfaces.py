"""
Интерфейсы (порты) для каталога номеров и сезонов.
"""

from __future__ import annotations

from datetime import date
from typing import Any, ContextManager, List, Optional, Protocol

from ..shared_kernel import EntityId
from ..shared_kernel.interfaces import IEventBus
from .domain import Room, Season


class IRoomRepository(Protocol):
    """Интерфейс репозитория для номеров."""

    def get_by_id(self, room_id: EntityId) -> Optional[Room]: ...
    def save(self, room: Room) -> Room: ...
    def delete_by_id(self, room_id: EntityId) -> None: ...
    def list_all(self) -> List[Room]: ...
    def list_by_availability(self, available: bool) -> List[Room]: ...
    def list_by_type(self, room_type: str) -> List[Room]: ...
    def find_by_code(self, code: str) -> Optional[Room]: ...


class ISeasonRepository(Protocol):
    """Интерфейс репозитория для сезонов."""

    def get_by_id(self, season_id: EntityId) -> Optional[Season]: ...
    def save(self, season: Season) -> Season: ...
    def delete_by_id(self, season_id: EntityId) -> None: ...
    def list_all(self) -> List[Season]: ...
    def find_covering(self, day: date) -> List[Season]: ...


class ICatalogUnitOfWork(Protocol):
    """Интерфейс Unit of Work для каталога."""

    @property
    def rooms(self) -> IRoomRepository: ...
    @property
    def seasons(self) -> ISeasonRepository: ...
    @property
    def event_bus(self) -> IEventBus: ...

    def __enter__(self) -> ICatalogUnitOfWork: ...
    def __exit__(self, exc_type, exc_val, exc_tb) -> None: ...
    def reading(self) -> ContextManager[Any]: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
