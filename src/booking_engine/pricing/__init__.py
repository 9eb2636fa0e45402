"""
Модуль расчета стоимости (Pricing Context).

Считает стоимость проживания по ночам с учетом сезонных коэффициентов.
"""

from . import application, domain, interfaces

__all__ = [
    "domain",
    "application",
    "interfaces",
]
