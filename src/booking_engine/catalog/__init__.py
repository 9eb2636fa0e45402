"""
Модуль каталога (Catalog Context).

Отвечает за номера и сезоны:
- Создание, изменение и удаление номеров и сезонов
- Выборки номеров по доступности и типу
- Поиск сезона, действующего на дату
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
