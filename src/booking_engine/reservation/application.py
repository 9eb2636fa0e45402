"""
Прикладной слой контекста бронирования.

Сервис приложения проверяет даты, доступность номера и пересечения
с другими бронированиями, сохраняет бронирование и создает для него
платеж в статусе ожидания.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel

from ..catalog.domain import Room
from ..logger import get_logger
from ..shared_kernel import (
    Clock,
    DateRange,
    DoubleBookingException,
    EntityId,
    EntityNotFoundException,
    InvalidDateRangeException,
    NegativeAmountException,
    RoomUnavailableException,
    now,
)
from ..shared_kernel.infrastructure import KeyedLock, safe_publish
from ..shared_kernel.interfaces import ILogger
from .domain import (
    Reservation,
    ReservationCancelled,
    ReservationCreated,
    ReservationStatus,
    billable_nights,
    blocking_reservations,
)
from .interfaces import IPaymentCreator, IReservationUnitOfWork

DEFAULT_PAYMENT_METHOD = "UNDEFINED"
DELETION_REASON = "Deletion"
STATUS_UPDATE_REASON = "Status update"

# DTO для входящих данных


class UpdateReservationRequest(BaseModel):
    """Запрос на изменение бронирования. Непереданные поля не меняются."""

    room_id: Optional[EntityId] = None
    guest_id: Optional[EntityId] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    status: Optional[ReservationStatus] = None


# Сервисы приложения


class ReservationApplicationService:
    """Сервис приложения для управления бронированиями."""

    def __init__(
        self,
        uow: IReservationUnitOfWork,
        payment_service: IPaymentCreator,
        default_payment_method: str = DEFAULT_PAYMENT_METHOD,
        cancelled_reservations_block_room: bool = True,
        clock: Clock = now,
        logger: Optional[ILogger] = None,
    ):
        self._uow = uow
        self._payment_service = payment_service
        self._default_payment_method = default_payment_method
        self._cancelled_block_room = cancelled_reservations_block_room
        self._clock = clock
        self._logger = logger or get_logger(__name__)
        self._room_locks = KeyedLock()

    def create_reservation(
        self,
        room_id: EntityId,
        guest_id: EntityId,
        check_in: date,
        check_out: date,
        payment_method: Optional[str] = None,
    ) -> Reservation:
        """Создает бронирование и платеж к нему.

        Args:
            room_id: Идентификатор номера
            guest_id: Идентификатор гостя
            check_in: Дата заезда
            check_out: Дата выезда (ночь выезда не бронируется)
            payment_method: Способ оплаты; по умолчанию берется из настроек

        Returns:
            Созданное бронирование в статусе PENDING

        Raises:
            InvalidDateRangeException: Если check_in >= check_out
            EntityNotFoundException: Если номер не найден
            RoomUnavailableException: Если номер выведен из продажи
            DoubleBookingException: Если номер занят на эти даты
            NegativeAmountException: Если сумма платежа получается отрицательной
        """
        period = DateRange.of(check_in, check_out)

        with self._room_locks.hold(room_id), self._uow:
            room = self._get_room(room_id)
            if not room.available:
                self._logger.warning("Room is not available", room_id=str(room_id))
                raise RoomUnavailableException(room_id)

            self._ensure_no_conflicts(room_id, period)

            # Сумма платежа не учитывает сезоны: базовая цена * число ночей
            amount = room.base_price * billable_nights(period)
            if amount < 0:
                self._logger.warning(
                    "Negative payment amount rejected",
                    room_id=str(room_id),
                    amount=str(amount),
                )
                raise NegativeAmountException(amount)

            reservation = Reservation(
                room_id=room_id,
                guest_id=guest_id,
                check_in=period.check_in,
                check_out=period.check_out,
                status=ReservationStatus.PENDING,
                created_at=self._clock(),
            )
            self._uow.reservations.save(reservation)
            self._uow.commit()

            safe_publish(
                self._uow.event_bus,
                ReservationCreated(
                    occurred_on=self._clock(),
                    reservation_id=reservation.id,
                    room_id=reservation.room_id,
                    guest_id=reservation.guest_id,
                    check_in=reservation.check_in,
                    check_out=reservation.check_out,
                    status=reservation.status,
                ),
                self._logger,
            )

            self._payment_service.create_payment(
                reservation.id,
                amount,
                payment_method or self._default_payment_method,
            )

        self._logger.info(
            "Reservation created",
            reservation_id=str(reservation.id),
            room_id=str(room_id),
            nights=period.nights,
        )
        return reservation

    def update_reservation(
        self, reservation_id: EntityId, request: UpdateReservationRequest
    ) -> Reservation:
        """Изменяет бронирование.

        При смене номера или дат заново проверяются пересечения
        (само бронирование не считается конфликтом).
        """
        current = self.get_reservation(reservation_id)
        target_room_id = request.room_id or current.room_id

        with self._room_locks.hold(current.room_id, target_room_id), self._uow:
            existing = self._uow.reservations.get_by_id(reservation_id)
            if existing is None:
                raise EntityNotFoundException("Reservation", reservation_id)

            changes = request.model_dump(exclude_none=True)
            period = DateRange.of(
                changes.get("check_in", existing.check_in),
                changes.get("check_out", existing.check_out),
            )
            room_changed = target_room_id != existing.room_id
            dates_changed = period != existing.period

            if room_changed:
                self._get_room(target_room_id)
            if room_changed or dates_changed:
                self._ensure_no_conflicts(
                    target_room_id, period, exclude_id=reservation_id
                )

            reservation = existing.model_copy(
                update={
                    "room_id": target_room_id,
                    "guest_id": request.guest_id or existing.guest_id,
                    "check_in": period.check_in,
                    "check_out": period.check_out,
                }
            )
            if request.status is not None:
                reservation.transition_to(request.status, at=self._clock())

            self._uow.reservations.save(reservation)
            self._uow.commit()

        if reservation.is_cancelled and not existing.is_cancelled:
            self._publish_cancelled(reservation, STATUS_UPDATE_REASON)
        return reservation

    def cancel_reservation(self, reservation_id: EntityId, reason: str) -> Reservation:
        """Отменяет бронирование.

        Повторная отмена не меняет время первой отмены, но событие
        публикуется снова.
        """
        with self._uow:
            reservation = self._uow.reservations.get_by_id(reservation_id)
            if reservation is None:
                raise EntityNotFoundException("Reservation", reservation_id)

            reservation.cancel(at=self._clock())
            self._uow.reservations.save(reservation)
            self._uow.commit()

        self._logger.info(
            "Reservation cancelled",
            reservation_id=str(reservation_id),
            reason=reason,
        )
        self._publish_cancelled(reservation, reason)
        return reservation

    def delete_reservation(self, reservation_id: EntityId) -> None:
        """Удаляет бронирование.

        Если бронирование не было отменено, перед удалением
        публикуется событие отмены с причиной "Deletion".
        """
        with self._uow:
            reservation = self._uow.reservations.get_by_id(reservation_id)
            if reservation is None:
                raise EntityNotFoundException("Reservation", reservation_id)

            if not reservation.is_cancelled:
                self._publish_cancelled(reservation, DELETION_REASON)

            self._uow.reservations.delete_by_id(reservation_id)
            self._uow.commit()

    def check_availability(
        self, room_id: EntityId, check_in: date, check_out: date
    ) -> bool:
        """Проверяет, свободен ли номер на даты.

        В отличие от создания бронирования, здесь допускается
        check_in == check_out.
        """
        if check_in > check_out:
            raise InvalidDateRangeException(
                check_in,
                check_out,
                f"Дата выезда {check_out} не может быть раньше даты заезда {check_in}",
            )
        return not self.find_conflicting_reservations(room_id, check_in, check_out)

    def find_conflicting_reservations(
        self, room_id: EntityId, check_in: date, check_out: date
    ) -> List[Reservation]:
        """Бронирования, которые занимают номер на указанные даты."""
        with self._uow.reading():
            candidates = self._uow.reservations.find_conflicting(
                room_id, check_in, check_out
            )
        return blocking_reservations(candidates, self._cancelled_block_room)

    def get_reservation(self, reservation_id: EntityId) -> Reservation:
        with self._uow.reading():
            reservation = self._uow.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise EntityNotFoundException("Reservation", reservation_id)
        return reservation

    def list_reservations(self) -> List[Reservation]:
        with self._uow.reading():
            return self._uow.reservations.list_all()

    def list_by_status(self, status: ReservationStatus) -> List[Reservation]:
        with self._uow.reading():
            return self._uow.reservations.list_by_status(status)

    def list_by_room(self, room_id: EntityId) -> List[Reservation]:
        with self._uow.reading():
            return self._uow.reservations.list_by_room(room_id)

    def list_by_guest(self, guest_id: EntityId) -> List[Reservation]:
        with self._uow.reading():
            return self._uow.reservations.list_by_guest(guest_id)

    def _get_room(self, room_id: EntityId) -> Room:
        room = self._uow.rooms.get_by_id(room_id)
        if room is None:
            raise EntityNotFoundException("Room", room_id)
        return room

    def _ensure_no_conflicts(
        self,
        room_id: EntityId,
        period: DateRange,
        exclude_id: Optional[EntityId] = None,
    ) -> None:
        conflicts = blocking_reservations(
            self._uow.reservations.find_conflicting(
                room_id, period.check_in, period.check_out, exclude_id=exclude_id
            ),
            self._cancelled_block_room,
        )
        if conflicts:
            self._logger.warning(
                "Double booking rejected",
                room_id=str(room_id),
                check_in=period.check_in.isoformat(),
                check_out=period.check_out.isoformat(),
                conflicts=len(conflicts),
            )
            raise DoubleBookingException(room_id, [r.id for r in conflicts])

    def _publish_cancelled(self, reservation: Reservation, reason: str) -> None:
        safe_publish(
            self._uow.event_bus,
            ReservationCancelled(
                occurred_on=self._clock(),
                reservation_id=reservation.id,
                reason=reason,
            ),
            self._logger,
        )
