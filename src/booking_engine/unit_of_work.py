"""
Единицы работы (Unit of Work) движка бронирования.

Одна единица работы держит хранилища всех контекстов и шину событий,
поэтому каждый контекст видит ее через свой интерфейс
(ICatalogUnitOfWork, IReservationUnitOfWork, IPaymentUnitOfWork).
"""

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .catalog.infrastructure import (
    InMemoryRoomRepository,
    InMemorySeasonRepository,
    JsonFileRoomRepository,
    JsonFileSeasonRepository,
)
from .logger import get_logger
from .payment.infrastructure import (
    InMemoryPaymentRepository,
    JsonFilePaymentRepository,
)
from .reservation.infrastructure import (
    InMemoryReservationRepository,
    JsonFileReservationRepository,
)
from .shared_kernel.infrastructure import InMemoryEventBus
from .shared_kernel.interfaces import IEventBus, ILogger


class InMemoryUnitOfWork:
    """Единица работы над хранилищами в памяти.

    Повторно входимая: вложенный ``with`` (например, создание платежа
    внутри создания бронирования) работает в той же транзакции.
    Внешний ``with`` захватывает блокировку и делает снимок хранилищ;
    ``commit`` фиксирует текущее состояние как новую точку отката,
    исключение откатывает изменения к последней фиксации.
    """

    def __init__(
        self,
        rooms: Optional[InMemoryRoomRepository] = None,
        seasons: Optional[InMemorySeasonRepository] = None,
        reservations: Optional[InMemoryReservationRepository] = None,
        payments: Optional[InMemoryPaymentRepository] = None,
        event_bus: Optional[IEventBus] = None,
        logger: Optional[ILogger] = None,
    ):
        self._rooms = rooms if rooms is not None else InMemoryRoomRepository()
        self._seasons = seasons if seasons is not None else InMemorySeasonRepository()
        self._reservations = (
            reservations if reservations is not None else InMemoryReservationRepository()
        )
        self._payments = payments if payments is not None else InMemoryPaymentRepository()
        self._logger = logger or get_logger(__name__)
        self._event_bus = event_bus or InMemoryEventBus(logger=self._logger)

        self._lock = threading.RLock()
        self._depth = 0
        self._snapshots: Optional[List[Dict[Any, Any]]] = None

    @property
    def rooms(self) -> InMemoryRoomRepository:
        return self._rooms

    @property
    def seasons(self) -> InMemorySeasonRepository:
        return self._seasons

    @property
    def reservations(self) -> InMemoryReservationRepository:
        return self._reservations

    @property
    def payments(self) -> InMemoryPaymentRepository:
        return self._payments

    @property
    def event_bus(self) -> IEventBus:
        return self._event_bus

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def _repositories(self) -> list:
        return [self._rooms, self._seasons, self._reservations, self._payments]

    def _take_snapshot(self) -> List[Dict[Any, Any]]:
        return [repo.snapshot() for repo in self._repositories()]

    def _persist(self) -> None:
        """Сохраняет изменения во внешнее хранилище, если оно есть."""

    def commit(self) -> None:
        """Фиксирует все изменения."""
        self._persist()
        if self._depth > 0:
            self._snapshots = self._take_snapshot()
        self._logger.debug("Unit of work committed", depth=self._depth)

    def rollback(self) -> None:
        """Откатывает изменения к последней фиксации."""
        if self._snapshots is not None:
            for repo, snapshot in zip(self._repositories(), self._snapshots):
                repo.restore(snapshot)
            self._snapshots = self._take_snapshot()
        self._logger.warning("Unit of work rolled back", depth=self._depth)

    @contextmanager
    def reading(self) -> Iterator["InMemoryUnitOfWork"]:
        """Чтение без снимка: дожидается конца чужой транзакции."""
        with self._lock:
            yield self

    def __enter__(self) -> "InMemoryUnitOfWork":
        self._lock.acquire()
        if self._depth == 0:
            self._snapshots = self._take_snapshot()
        self._depth += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if self._depth == 1:
                if exc_type is None:
                    self.commit()
                else:
                    self.rollback()
                self._snapshots = None
        finally:
            self._depth -= 1
            self._lock.release()
        return False  # Пробрасываем исключение дальше, если оно было


class JsonFileUnitOfWork(InMemoryUnitOfWork):
    """Единица работы, которая хранит данные в JSON-файлах каталога ``data_dir``.

    Файлы читаются при создании и перезаписываются при каждой фиксации.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        event_bus: Optional[IEventBus] = None,
        logger: Optional[ILogger] = None,
    ):
        self._data_dir = Path(data_dir)
        super().__init__(
            rooms=JsonFileRoomRepository(self._data_dir / "rooms.json"),
            seasons=JsonFileSeasonRepository(self._data_dir / "seasons.json"),
            reservations=JsonFileReservationRepository(
                self._data_dir / "reservations.json"
            ),
            payments=JsonFilePaymentRepository(self._data_dir / "payments.json"),
            event_bus=event_bus,
            logger=logger,
        )

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _persist(self) -> None:
        for repo in self._repositories():
            repo.flush()
