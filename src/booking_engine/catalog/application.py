"""
Прикладной слой каталога.

Сервисы приложения для управления номерами и сезонами.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from ..logger import get_logger
from ..shared_kernel import (
    Clock,
    DuplicateRoomCodeException,
    EntityId,
    EntityNotFoundException,
    now,
)
from ..shared_kernel.interfaces import ILogger
from ..shared_kernel.infrastructure import safe_publish
from .domain import Room, RoomCreated, Season, SeasonCreated, select_applicable_season
from .interfaces import ICatalogUnitOfWork

# DTO для входящих данных


class UpdateRoomRequest(BaseModel):
    """Запрос на изменение номера. Непереданные поля не меняются."""

    code: Optional[str] = None
    room_type: Optional[str] = None
    base_price: Optional[Decimal] = None
    capacity: Optional[int] = None
    description: Optional[str] = None
    available: Optional[bool] = None


class UpdateSeasonRequest(BaseModel):
    """Запрос на изменение сезона. Непереданные поля не меняются."""

    name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    coefficient: Optional[Decimal] = Field(None, gt=0)


# Сервисы приложения


class RoomCatalogService:
    """Сервис приложения для работы с номерами."""

    def __init__(
        self,
        uow: ICatalogUnitOfWork,
        clock: Clock = now,
        logger: Optional[ILogger] = None,
    ):
        self._uow = uow
        self._clock = clock
        self._logger = logger or get_logger(__name__)

    def create_room(
        self,
        code: str,
        room_type: str,
        base_price: Decimal,
        capacity: int,
        description: str = "",
        available: bool = True,
    ) -> Room:
        """Создает новый номер."""
        room = Room(
            code=code,
            room_type=room_type,
            base_price=base_price,
            capacity=capacity,
            description=description,
            available=available,
        )

        with self._uow:
            self._ensure_code_is_free(room.code)
            self._uow.rooms.save(room)
            self._uow.commit()

        safe_publish(
            self._uow.event_bus,
            RoomCreated(
                occurred_on=self._clock(),
                room_id=room.id,
                code=room.code,
                room_type=room.room_type,
                base_price=room.base_price,
            ),
            self._logger,
        )
        return room

    def update_room(self, room_id: EntityId, request: UpdateRoomRequest) -> Room:
        """Изменяет существующий номер."""
        with self._uow:
            existing = self._uow.rooms.get_by_id(room_id)
            if existing is None:
                raise EntityNotFoundException("Room", room_id)

            changes = request.model_dump(exclude_none=True)
            room = Room.model_validate({**existing.model_dump(), **changes, "id": room_id})

            if room.code != existing.code:
                self._ensure_code_is_free(room.code, exclude_id=room_id)

            self._uow.rooms.save(room)
            self._uow.commit()

        return room

    def delete_room(self, room_id: EntityId) -> None:
        """Удаляет номер.

        Ссылающиеся на номер бронирования не проверяются - это
        ответственность вызывающего кода.
        """
        with self._uow:
            if self._uow.rooms.get_by_id(room_id) is None:
                raise EntityNotFoundException("Room", room_id)
            self._uow.rooms.delete_by_id(room_id)
            self._uow.commit()

    def get_room(self, room_id: EntityId) -> Room:
        """Возвращает номер по идентификатору."""
        with self._uow.reading():
            room = self._uow.rooms.get_by_id(room_id)
        if room is None:
            raise EntityNotFoundException("Room", room_id)
        return room

    def list_rooms(self) -> List[Room]:
        with self._uow.reading():
            return self._uow.rooms.list_all()

    def list_available_rooms(self) -> List[Room]:
        return self.list_rooms_by_availability(True)

    def list_rooms_by_availability(self, available: bool) -> List[Room]:
        with self._uow.reading():
            return self._uow.rooms.list_by_availability(available)

    def list_rooms_by_type(self, room_type: str) -> List[Room]:
        with self._uow.reading():
            return self._uow.rooms.list_by_type(room_type)

    def _ensure_code_is_free(
        self, code: str, exclude_id: Optional[EntityId] = None
    ) -> None:
        holder = self._uow.rooms.find_by_code(code)
        if holder is not None and holder.id != exclude_id:
            raise DuplicateRoomCodeException(code)


class SeasonCatalogService:
    """Сервис приложения для работы с сезонами."""

    def __init__(
        self,
        uow: ICatalogUnitOfWork,
        clock: Clock = now,
        logger: Optional[ILogger] = None,
    ):
        self._uow = uow
        self._clock = clock
        self._logger = logger or get_logger(__name__)

    def create_season(
        self, name: str, start_date: date, end_date: date, coefficient: Decimal
    ) -> Season:
        """Создает новый сезон."""
        season = Season(
            name=name,
            start_date=start_date,
            end_date=end_date,
            coefficient=coefficient,
        )

        with self._uow:
            self._uow.seasons.save(season)
            self._uow.commit()

        safe_publish(
            self._uow.event_bus,
            SeasonCreated(
                occurred_on=self._clock(),
                season_id=season.id,
                name=season.name,
                start_date=season.start_date,
                end_date=season.end_date,
                coefficient=season.coefficient,
            ),
            self._logger,
        )
        return season

    def update_season(self, season_id: EntityId, request: UpdateSeasonRequest) -> Season:
        """Изменяет существующий сезон."""
        with self._uow:
            existing = self._uow.seasons.get_by_id(season_id)
            if existing is None:
                raise EntityNotFoundException("Season", season_id)

            changes = request.model_dump(exclude_none=True)
            season = Season.model_validate(
                {**existing.model_dump(), **changes, "id": season_id}
            )

            self._uow.seasons.save(season)
            self._uow.commit()

        return season

    def delete_season(self, season_id: EntityId) -> None:
        """Удаляет сезон."""
        with self._uow:
            if self._uow.seasons.get_by_id(season_id) is None:
                raise EntityNotFoundException("Season", season_id)
            self._uow.seasons.delete_by_id(season_id)
            self._uow.commit()

    def get_season(self, season_id: EntityId) -> Season:
        """Возвращает сезон по идентификатору."""
        with self._uow.reading():
            season = self._uow.seasons.get_by_id(season_id)
        if season is None:
            raise EntityNotFoundException("Season", season_id)
        return season

    def list_seasons(self) -> List[Season]:
        with self._uow.reading():
            return self._uow.seasons.list_all()

    def find_season_covering(self, day: date) -> Optional[Season]:
        """Возвращает сезон, действующий на указанную дату, или None."""
        with self._uow.reading():
            return select_applicable_season(self._uow.seasons.find_covering(day))
