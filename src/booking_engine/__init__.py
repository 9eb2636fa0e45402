"""
Движок бронирования отеля.

Ограниченные контексты:
- catalog: номера и сезоны
- pricing: расчет стоимости проживания по ночам
- reservation: жизненный цикл бронирований
- payment: платежи и синхронизация статуса бронирования
"""

from .bootstrap import bootstrap_app

__version__ = "0.1.0"

__all__ = ["bootstrap_app", "__version__"]
