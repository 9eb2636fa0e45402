"""
Интерфейсы (порты) для расчета стоимости.

Расчету нужны только чтение номера и поиск сезонов на дату.
"""

from __future__ import annotations

from datetime import date
from typing import Any, ContextManager, List, Optional, Protocol

from ..catalog.domain import Room, Season
from ..shared_kernel import EntityId
from ..shared_kernel.interfaces import IEventBus


class IRoomLookup(Protocol):
    def get_by_id(self, room_id: EntityId) -> Optional[Room]: ...


class ISeasonLookup(Protocol):
    def find_covering(self, day: date) -> List[Season]: ...


class IPricingUnitOfWork(Protocol):
    """Хранилища, из которых читает расчет стоимости."""

    @property
    def rooms(self) -> IRoomLookup: ...
    @property
    def seasons(self) -> ISeasonLookup: ...
    @property
    def event_bus(self) -> IEventBus: ...

    def reading(self) -> ContextManager[Any]: ...
