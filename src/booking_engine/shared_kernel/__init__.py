"""
Общее ядро (Shared Kernel) движка бронирования.

Содержит общие типы данных, исключения и утилиты, используемые
в различных ограниченных контекстах.
"""

from .domain import (
    BusinessRuleValidationException,
    Clock,
    DateRange,
    DomainEvent,
    # Исключения
    DomainException,
    DoubleBookingException,
    DuplicateRoomCodeException,
    # Базовые типы
    EntityId,
    EntityNotFoundException,
    InvalidDateRangeException,
    InvalidStatusTransitionException,
    NegativeAmountException,
    RoomUnavailableException,
    generate_id,
    # Утилиты
    now,
    round_half_up,
)

__all__ = [
    # Базовые типы
    "EntityId",
    "Clock",
    "DateRange",
    "generate_id",
    "DomainEvent",
    # Исключения
    "DomainException",
    "EntityNotFoundException",
    "BusinessRuleValidationException",
    "InvalidDateRangeException",
    "RoomUnavailableException",
    "DoubleBookingException",
    "InvalidStatusTransitionException",
    "DuplicateRoomCodeException",
    "NegativeAmountException",
    # Утилиты
    "now",
    "round_half_up",
]
