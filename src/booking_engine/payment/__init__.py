"""
Модуль платежей (Payment Context).

Отвечает за платежи по бронированиям и синхронизацию
статуса бронирования со статусом платежа.
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
