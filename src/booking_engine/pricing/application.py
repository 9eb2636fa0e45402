"""
Прикладной слой расчета стоимости.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from ..catalog.domain import Room, Season, select_applicable_season
from ..logger import get_logger
from ..shared_kernel import Clock, DateRange, EntityId, EntityNotFoundException, now
from ..shared_kernel.infrastructure import safe_publish
from ..shared_kernel.interfaces import ILogger
from .domain import PriceCalculated, PricedStay, StayPricer
from .interfaces import IPricingUnitOfWork

DEFAULT_OFF_SEASON_LABEL = "Off season"


class PricingService:
    """Сервис приложения для расчета стоимости проживания."""

    def __init__(
        self,
        uow: IPricingUnitOfWork,
        off_season_label: str = DEFAULT_OFF_SEASON_LABEL,
        clock: Clock = now,
        logger: Optional[ILogger] = None,
    ):
        self._uow = uow
        self._clock = clock
        self._logger = logger or get_logger(__name__)
        self._pricer = StayPricer(self._season_for, off_season_label)

    def compute_stay_price(
        self, room_id: EntityId, check_in: date, check_out: date
    ) -> PricedStay:
        """Рассчитывает стоимость проживания с разбивкой по ночам.

        Args:
            room_id: Идентификатор номера
            check_in: Дата заезда (первая ночь)
            check_out: Дата выезда (не входит в период)

        Raises:
            InvalidDateRangeException: Если check_in >= check_out
            EntityNotFoundException: Если номер не найден
        """
        priced = self._price(room_id, check_in, check_out)

        safe_publish(
            self._uow.event_bus,
            PriceCalculated(
                occurred_on=self._clock(),
                room_id=priced.room_id,
                room_code=priced.room_code,
                room_type=priced.room_type,
                check_in=priced.check_in,
                check_out=priced.check_out,
                nights=priced.nights,
                total_price=priced.total_price,
            ),
            self._logger,
        )
        return priced

    def calculate_total(
        self, room_id: EntityId, check_in: date, check_out: date
    ) -> Decimal:
        """Возвращает только итоговую стоимость, без публикации события."""
        return self._price(room_id, check_in, check_out).total_price

    def _price(self, room_id: EntityId, check_in: date, check_out: date) -> PricedStay:
        period = DateRange.of(check_in, check_out)
        with self._uow.reading():
            room = self._get_room(room_id)
            priced = self._pricer.price(room, period)
        self._logger.debug(
            "Stay priced",
            room_id=str(room_id),
            nights=priced.nights,
            total_price=str(priced.total_price),
        )
        return priced

    def _get_room(self, room_id: EntityId) -> Room:
        room = self._uow.rooms.get_by_id(room_id)
        if room is None:
            raise EntityNotFoundException("Room", room_id)
        return room

    def _season_for(self, day: date) -> Optional[Season]:
        return select_applicable_season(self._uow.seasons.find_covering(day))
