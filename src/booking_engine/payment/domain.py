"""
Доменная модель платежей.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet

from pydantic import BaseModel, Field

from ..shared_kernel import (
    DomainEvent,
    EntityId,
    InvalidStatusTransitionException,
    generate_id,
    now,
)


class PaymentStatus(str, Enum):
    """Статусы платежа."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset(
        {PaymentStatus.CONFIRMED, PaymentStatus.CANCELLED, PaymentStatus.REFUNDED}
    ),
    PaymentStatus.CONFIRMED: frozenset(
        {PaymentStatus.CANCELLED, PaymentStatus.REFUNDED}
    ),
    PaymentStatus.CANCELLED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}


class Payment(BaseModel):
    """Платеж по бронированию."""

    id: EntityId = Field(default_factory=generate_id)
    reservation_id: EntityId
    amount: Decimal = Field(..., ge=0)
    payment_method: str  # произвольная метка, например "CARD"
    status: PaymentStatus = PaymentStatus.PENDING
    payment_date: datetime = Field(default_factory=now)

    @property
    def voids_reservation(self) -> bool:
        """Отмененный или возвращенный платеж отменяет бронирование."""
        return self.status in (PaymentStatus.CANCELLED, PaymentStatus.REFUNDED)

    def transition_to(self, target: PaymentStatus) -> None:
        if target == self.status:
            return
        if target not in _TRANSITIONS[self.status]:
            raise InvalidStatusTransitionException("Payment", self.status, target)
        self.status = target


class PaymentCreated(DomainEvent):
    """Событие создания платежа."""

    payment_id: EntityId
    reservation_id: EntityId
    amount: Decimal
    payment_method: str
    status: PaymentStatus


class PaymentStatusChanged(DomainEvent):
    """Событие смены статуса платежа."""

    payment_id: EntityId
    reservation_id: EntityId
    old_status: PaymentStatus
    new_status: PaymentStatus
