"""
Доменная модель каталога: номера и сезоны.

Сезон задает коэффициент к базовой цене номера на диапазон дат.
Сезоны могут пересекаться; правило выбора одного сезона на дату
описано в ``select_applicable_season``.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, Field, model_validator

from ..shared_kernel import DomainEvent, EntityId, generate_id


class Room(BaseModel):
    """Номер в отеле."""

    id: EntityId = Field(default_factory=generate_id)
    code: str  # Уникальный код номера (например, "101", "202A")
    room_type: str
    base_price: Decimal  # Базовая цена за ночь
    capacity: int
    description: str = ""
    # Ручной флаг "в продаже", не зависит от бронирований
    available: bool = True


class Season(BaseModel):
    """Сезон: именованный диапазон дат с ценовым коэффициентом."""

    id: EntityId = Field(default_factory=generate_id)
    name: str
    start_date: date  # включительно
    end_date: date  # включительно
    coefficient: Decimal = Field(..., gt=0)

    @model_validator(mode="after")
    def end_date_not_before_start_date(self) -> "Season":
        if self.end_date < self.start_date:
            raise ValueError("Дата окончания сезона не может быть раньше даты начала")
        return self

    def covers(self, day: date) -> bool:
        """Проверяет, входит ли дата в сезон."""
        return self.start_date <= day <= self.end_date


class RoomCreated(DomainEvent):
    """Событие создания номера."""

    room_id: EntityId
    code: str
    room_type: str
    base_price: Decimal


class SeasonCreated(DomainEvent):
    """Событие создания сезона."""

    season_id: EntityId
    name: str
    start_date: date
    end_date: date
    coefficient: Decimal


def select_applicable_season(candidates: Iterable[Season]) -> Optional[Season]:
    """Выбирает один сезон из нескольких, покрывающих одну дату.

    Побеждает сезон с самой поздней датой начала (более узкий сезон
    внутри широкого), при равенстве - с наименьшим идентификатором.
    """
    seasons = list(candidates)
    if not seasons:
        return None
    return min(seasons, key=lambda s: (-s.start_date.toordinal(), s.id))
