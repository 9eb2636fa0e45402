"""
Основные доменные типы и утилиты общего ядра.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterator, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field

# Общие типы идентификаторов
EntityId = UUID

Clock = Callable[[], datetime]

TWO_PLACES = Decimal("0.01")


def generate_id() -> UUID:
    """Генерирует новый UUID."""
    return uuid4()


def round_half_up(value: Decimal, places: Decimal = TWO_PLACES) -> Decimal:
    """Округляет до двух знаков, половина округляется от нуля."""
    return Decimal(value).quantize(places, rounding=ROUND_HALF_UP)


class DomainEvent(BaseModel):
    """Базовый класс для всех доменных событий."""

    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(default_factory=uuid4)
    occurred_on: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field  # type: ignore[misc]
    @property
    def event_type(self) -> str:
        return type(self).__name__


class DateRange(BaseModel):
    """Период проживания [check_in, check_out): ночь выезда не входит."""

    model_config = ConfigDict(frozen=True)

    check_in: date
    check_out: date

    @classmethod
    def of(cls, check_in: date, check_out: date) -> "DateRange":
        """Создает период; дата выезда должна быть строго позже даты заезда."""
        if check_out <= check_in:
            raise InvalidDateRangeException(check_in, check_out)
        return cls(check_in=check_in, check_out=check_out)

    @property
    def nights(self) -> int:
        """Количество ночей."""
        return (self.check_out - self.check_in).days

    def each_night(self) -> Iterator[date]:
        """Перебирает даты ночей периода."""
        day = self.check_in
        while day < self.check_out:
            yield day
            day += timedelta(days=1)

    def overlaps(self, check_in: date, check_out: date) -> bool:
        """Пересечение полуоткрытых интервалов."""
        return self.check_in < check_out and self.check_out > check_in


# Общие исключения
class DomainException(Exception):
    """Базовое исключение для доменных ошибок."""

    pass


class EntityNotFoundException(DomainException):
    """Сущность с указанным идентификатором не найдена."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} не найден(а) с id: {entity_id}")


class BusinessRuleValidationException(DomainException):
    """Исключение при нарушении бизнес-правил."""

    pass


class InvalidDateRangeException(BusinessRuleValidationException):
    """Некорректный диапазон дат (дата выезда не позже даты заезда)."""

    def __init__(self, check_in: date, check_out: date, message: Optional[str] = None):
        self.check_in = check_in
        self.check_out = check_out
        super().__init__(
            message
            or f"Дата выезда {check_out} должна быть позже даты заезда {check_in}"
        )


class RoomUnavailableException(BusinessRuleValidationException):
    """Номер выведен из продажи (hors service)."""

    def __init__(self, room_id: EntityId):
        self.room_id = room_id
        super().__init__(
            f"Номер {room_id} недоступен для бронирования (выведен из продажи)"
        )


class DoubleBookingException(BusinessRuleValidationException):
    """Номер уже забронирован на пересекающиеся даты."""

    def __init__(self, room_id: EntityId, conflicting_ids: list):
        self.room_id = room_id
        self.conflicting_ids = list(conflicting_ids)
        super().__init__(
            f"Номер {room_id} уже забронирован на выбранные даты "
            f"(конфликтующих бронирований: {len(self.conflicting_ids)})"
        )


class InvalidStatusTransitionException(BusinessRuleValidationException):
    """Недопустимый переход статуса."""

    def __init__(self, entity: str, current: Any, target: Any):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(
            f"Недопустимый переход статуса {entity}: {current} -> {target}"
        )


class DuplicateRoomCodeException(BusinessRuleValidationException):
    """Номер комнаты с таким кодом уже существует."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Номер с кодом {code!r} уже существует")


class NegativeAmountException(BusinessRuleValidationException):
    """Сумма платежа отрицательна."""

    def __init__(self, amount: Decimal):
        self.amount = amount
        super().__init__(f"Сумма платежа не может быть отрицательной: {amount}")


# Общие утилиты
def now() -> datetime:
    """Возвращает текущую дату и время (UTC)."""
    return datetime.now(timezone.utc)
