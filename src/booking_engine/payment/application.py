"""
Прикладной слой контекста платежей.

Смена статуса платежа синхронизирует статус бронирования:
подтвержденный платеж подтверждает ожидающее бронирование,
отмененный или возвращенный платеж отменяет бронирование.
Обратной синхронизации нет.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from ..logger import get_logger
from ..reservation.domain import ReservationCancelled, ReservationStatus
from ..shared_kernel import (
    Clock,
    EntityId,
    EntityNotFoundException,
    NegativeAmountException,
    now,
)
from ..shared_kernel.infrastructure import safe_publish
from ..shared_kernel.interfaces import ILogger
from .domain import Payment, PaymentCreated, PaymentStatus, PaymentStatusChanged
from .interfaces import IPaymentUnitOfWork

_CANCEL_REASONS = {
    PaymentStatus.CANCELLED: "Payment cancelled",
    PaymentStatus.REFUNDED: "Payment refunded",
}

# DTO для входящих данных


class UpdatePaymentRequest(BaseModel):
    """Запрос на изменение платежа. Непереданные поля не меняются."""

    amount: Optional[Decimal] = Field(None, ge=0)
    payment_method: Optional[str] = None
    status: Optional[PaymentStatus] = None
    payment_date: Optional[datetime] = None


# Сервисы приложения


class PaymentApplicationService:
    """Сервис приложения для управления платежами."""

    def __init__(
        self,
        uow: IPaymentUnitOfWork,
        clock: Clock = now,
        logger: Optional[ILogger] = None,
    ):
        self._uow = uow
        self._clock = clock
        self._logger = logger or get_logger(__name__)

    def create_payment(
        self,
        reservation_id: EntityId,
        amount: Decimal,
        payment_method: str,
        payment_date: Optional[datetime] = None,
    ) -> Payment:
        """Создает платеж в статусе PENDING.

        Raises:
            EntityNotFoundException: Если бронирование не найдено
            NegativeAmountException: Если сумма отрицательна
        """
        if amount < 0:
            raise NegativeAmountException(amount)

        with self._uow:
            if not self._uow.reservations.exists_by_id(reservation_id):
                raise EntityNotFoundException("Reservation", reservation_id)

            payment = Payment(
                reservation_id=reservation_id,
                amount=amount,
                payment_method=payment_method,
                status=PaymentStatus.PENDING,
                payment_date=payment_date or self._clock(),
            )
            self._uow.payments.save(payment)
            self._uow.commit()

        safe_publish(
            self._uow.event_bus,
            PaymentCreated(
                occurred_on=self._clock(),
                payment_id=payment.id,
                reservation_id=payment.reservation_id,
                amount=payment.amount,
                payment_method=payment.payment_method,
                status=payment.status,
            ),
            self._logger,
        )
        return payment

    def update_payment(
        self, payment_id: EntityId, request: UpdatePaymentRequest
    ) -> Payment:
        """Изменяет платеж и при смене статуса синхронизирует бронирование.

        Raises:
            EntityNotFoundException: Если платеж не найден
            InvalidStatusTransitionException: Если переход статуса недопустим
        """
        with self._uow:
            existing = self._get_payment(payment_id)
            old_status = existing.status

            changes = request.model_dump(exclude_none=True, exclude={"status"})
            payment = Payment.model_validate(
                {
                    **existing.model_dump(),
                    **changes,
                    "id": payment_id,
                    "reservation_id": existing.reservation_id,
                }
            )
            if request.status is not None:
                payment.transition_to(request.status)

            self._uow.payments.save(payment)
            self._uow.commit()

            if payment.status != old_status:
                safe_publish(
                    self._uow.event_bus,
                    PaymentStatusChanged(
                        occurred_on=self._clock(),
                        payment_id=payment.id,
                        reservation_id=payment.reservation_id,
                        old_status=old_status,
                        new_status=payment.status,
                    ),
                    self._logger,
                )
                self._sync_reservation(payment)

        return payment

    def delete_payment(self, payment_id: EntityId) -> None:
        with self._uow:
            self._get_payment(payment_id)
            self._uow.payments.delete_by_id(payment_id)
            self._uow.commit()

    def get_payment(self, payment_id: EntityId) -> Payment:
        with self._uow.reading():
            return self._get_payment(payment_id)

    def list_payments(self) -> List[Payment]:
        with self._uow.reading():
            return self._uow.payments.list_all()

    def list_by_reservation(self, reservation_id: EntityId) -> List[Payment]:
        with self._uow.reading():
            return self._uow.payments.list_by_reservation(reservation_id)

    def _get_payment(self, payment_id: EntityId) -> Payment:
        payment = self._uow.payments.get_by_id(payment_id)
        if payment is None:
            raise EntityNotFoundException("Payment", payment_id)
        return payment

    def _sync_reservation(self, payment: Payment) -> None:
        reservation = self._uow.reservations.get_by_id(payment.reservation_id)
        if reservation is None:
            self._logger.warning(
                "Reservation for payment not found",
                payment_id=str(payment.id),
                reservation_id=str(payment.reservation_id),
            )
            return

        if payment.status == PaymentStatus.CONFIRMED:
            if reservation.status != ReservationStatus.PENDING:
                return
            reservation.transition_to(ReservationStatus.CONFIRMED, at=self._clock())
            self._uow.reservations.save(reservation)
            self._uow.commit()
            self._logger.info(
                "Reservation confirmed by payment",
                reservation_id=str(reservation.id),
                payment_id=str(payment.id),
            )
            return

        if not payment.voids_reservation or reservation.is_cancelled:
            return
        if reservation.status == ReservationStatus.COMPLETED:
            self._logger.warning(
                "Completed reservation left unchanged",
                reservation_id=str(reservation.id),
                payment_id=str(payment.id),
                payment_status=payment.status.value,
            )
            return

        reason = _CANCEL_REASONS[payment.status]
        reservation.cancel(at=self._clock())
        self._uow.reservations.save(reservation)
        self._uow.commit()
        self._logger.info(
            "Reservation cancelled by payment",
            reservation_id=str(reservation.id),
            payment_id=str(payment.id),
            reason=reason,
        )
        safe_publish(
            self._uow.event_bus,
            ReservationCancelled(
                occurred_on=self._clock(),
                reservation_id=reservation.id,
                reason=reason,
            ),
            self._logger,
        )
