"""
Модуль бронирования (Reservation Context).

Отвечает за жизненный цикл бронирований:
- Проверка дат, доступности номера и пересечений
- Создание, изменение, отмена и удаление бронирований
- Создание платежа в статусе ожидания для нового бронирования
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
