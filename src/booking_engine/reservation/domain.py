"""
Доменная модель бронирования.

Бронирование занимает номер на ночи [check_in, check_out).
Статусы меняются только по допустимым переходам жизненного цикла:
PENDING -> CONFIRMED -> COMPLETED, а из PENDING и CONFIRMED можно
перейти в CANCELLED. Из COMPLETED и CANCELLED переходов нет.
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional

from pydantic import BaseModel, Field, model_validator

from ..shared_kernel import (
    DateRange,
    DomainEvent,
    EntityId,
    InvalidStatusTransitionException,
    generate_id,
    now,
)


class ReservationStatus(str, Enum):
    """Статусы бронирования."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.COMPLETED, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}


class Reservation(BaseModel):
    """Бронирование номера гостем."""

    id: EntityId = Field(default_factory=generate_id)
    room_id: EntityId
    guest_id: EntityId
    check_in: date
    check_out: date
    status: ReservationStatus = ReservationStatus.PENDING
    created_at: datetime = Field(default_factory=now)
    # Устанавливается один раз, при переходе в CANCELLED
    cancelled_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_out_after_check_in(self) -> "Reservation":
        if self.check_out <= self.check_in:
            raise ValueError("Дата выезда должна быть позже даты заезда")
        return self

    @property
    def period(self) -> DateRange:
        return DateRange(check_in=self.check_in, check_out=self.check_out)

    @property
    def is_cancelled(self) -> bool:
        return self.status == ReservationStatus.CANCELLED

    def can_transition_to(self, target: ReservationStatus) -> bool:
        return target in _TRANSITIONS[self.status]

    def transition_to(self, target: ReservationStatus, at: datetime) -> None:
        """Переводит бронирование в новый статус.

        Переход в текущий статус ничего не меняет.

        Raises:
            InvalidStatusTransitionException: Если переход недопустим
        """
        if target == self.status:
            return
        if not self.can_transition_to(target):
            raise InvalidStatusTransitionException("Reservation", self.status, target)

        self.status = target
        if target == ReservationStatus.CANCELLED and self.cancelled_at is None:
            self.cancelled_at = at

    def confirm(self, at: datetime) -> None:
        """Подтверждает бронирование."""
        self.transition_to(ReservationStatus.CONFIRMED, at=at)

    def complete(self, at: datetime) -> None:
        """Завершает бронирование (гость выехал)."""
        self.transition_to(ReservationStatus.COMPLETED, at=at)

    def cancel(self, at: datetime) -> None:
        """Отменяет бронирование.

        Повторная отмена допустима и сохраняет время первой отмены.
        """
        self.transition_to(ReservationStatus.CANCELLED, at=at)


class ReservationCreated(DomainEvent):
    """Событие создания бронирования."""

    reservation_id: EntityId
    room_id: EntityId
    guest_id: EntityId
    check_in: date
    check_out: date
    status: ReservationStatus


class ReservationCancelled(DomainEvent):
    """Событие отмены бронирования."""

    reservation_id: EntityId
    reason: str


def billable_nights(period: DateRange) -> int:
    """Количество ночей для автоматического платежа (не меньше одной)."""
    return max(1, period.nights)


def blocking_reservations(
    candidates: Iterable[Reservation], cancelled_block_room: bool
) -> List[Reservation]:
    """Оставляет бронирования, которые занимают номер.

    Отмененные бронирования учитываются, только если так настроено.
    """
    return [
        reservation
        for reservation in candidates
        if cancelled_block_room or not reservation.is_cancelled
    ]
