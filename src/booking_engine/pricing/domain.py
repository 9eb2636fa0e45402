"""
Доменная модель расчета стоимости проживания.

Стоимость считается по ночам: для каждой ночи периода берется
коэффициент действующего сезона (или 1, если сезона нет) и
умножается на базовую цену номера.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict

from ..catalog.domain import Room, Season
from ..shared_kernel import DateRange, DomainEvent, EntityId, round_half_up

NEUTRAL_COEFFICIENT = Decimal("1")

SeasonLookup = Callable[[date], Optional[Season]]


class NightlyRate(BaseModel):
    """Цена одной ночи."""

    model_config = ConfigDict(frozen=True)

    night: date
    season_name: str
    coefficient: Decimal
    price: Decimal  # округлена до 2 знаков


class PricedStay(BaseModel):
    """Результат расчета стоимости проживания."""

    model_config = ConfigDict(frozen=True)

    room_id: EntityId
    room_code: str
    room_type: str
    check_in: date
    check_out: date
    nights: int
    base_price: Decimal
    average_coefficient: Decimal
    total_price: Decimal
    nightly_rates: List[NightlyRate]


class PriceCalculated(DomainEvent):
    """Событие расчета стоимости проживания."""

    room_id: EntityId
    room_code: str
    room_type: str
    check_in: date
    check_out: date
    nights: int
    total_price: Decimal


class StayPricer:
    """Доменный сервис расчета стоимости по ночам."""

    def __init__(self, season_lookup: SeasonLookup, off_season_label: str):
        self._season_lookup = season_lookup
        self._off_season_label = off_season_label

    def price(self, room: Room, period: DateRange) -> PricedStay:
        rates: List[NightlyRate] = []
        # Итог считается по неокругленным ценам и округляется один раз
        raw_total = Decimal("0")
        coefficient_sum = Decimal("0")

        for night in period.each_night():
            season = self._season_lookup(night)
            coefficient = season.coefficient if season else NEUTRAL_COEFFICIENT
            nightly = room.base_price * coefficient

            raw_total += nightly
            coefficient_sum += coefficient
            rates.append(
                NightlyRate(
                    night=night,
                    season_name=season.name if season else self._off_season_label,
                    coefficient=coefficient,
                    price=round_half_up(nightly),
                )
            )

        return PricedStay(
            room_id=room.id,
            room_code=room.code,
            room_type=room.room_type,
            check_in=period.check_in,
            check_out=period.check_out,
            nights=period.nights,
            base_price=room.base_price,
            average_coefficient=round_half_up(coefficient_sum / period.nights),
            total_price=round_half_up(raw_total),
            nightly_rates=rates,
        )
