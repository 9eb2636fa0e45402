"""
Инфраструктурные компоненты общего ядра.

Базовые репозитории в памяти и в JSON-файлах, шины событий
и блокировки по ключу, которые используются всеми контекстами.
"""

import json
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import (
    Callable,
    ClassVar,
    Dict,
    Generic,
    Hashable,
    Iterator,
    List,
    Optional,
    Type,
    TypeVar,
    Union,
)

from pydantic import BaseModel

from ..logger import get_logger
from .domain import DomainEvent, EntityId
from .interfaces import IEventBus, ILogger

T = TypeVar("T", bound=BaseModel)


class InMemoryRepository(Generic[T]):
    """Базовый репозиторий в памяти.

    Хранит копии моделей: изменения сущности попадают в хранилище
    только через ``save``. Все обращения к словарю идут под блокировкой,
    поэтому чтение из одного потока безопасно при записи из другого.
    """

    model_class: ClassVar[Type[BaseModel]]

    def __init__(self) -> None:
        self._items: Dict[EntityId, T] = {}
        self._lock = threading.RLock()

    def get_by_id(self, entity_id: EntityId) -> Optional[T]:
        with self._lock:
            item = self._items.get(entity_id)
            return item.model_copy(deep=True) if item is not None else None

    def save(self, entity: T) -> T:
        with self._lock:
            self._items[entity.id] = entity.model_copy(deep=True)  # type: ignore[attr-defined]
        return entity

    def delete_by_id(self, entity_id: EntityId) -> None:
        with self._lock:
            self._items.pop(entity_id, None)

    def list_all(self) -> List[T]:
        return self._select(lambda item: True)

    def exists_by_id(self, entity_id: EntityId) -> bool:
        with self._lock:
            return entity_id in self._items

    def _select(self, predicate: Callable[[T], bool]) -> List[T]:
        with self._lock:
            items = list(self._items.values())
        return [item.model_copy(deep=True) for item in items if predicate(item)]

    def snapshot(self) -> Dict[EntityId, T]:
        """Снимок состояния для отката единицы работы."""
        with self._lock:
            return {key: item.model_copy(deep=True) for key, item in self._items.items()}

    def restore(self, snapshot: Dict[EntityId, T]) -> None:
        """Восстанавливает состояние из снимка."""
        with self._lock:
            self._items = snapshot


class JsonFileRepository(InMemoryRepository[T]):
    """Базовый класс для репозиториев, работающих с JSON-файлами.

    Данные держатся в памяти и записываются в файл методом ``flush``
    (его вызывает единица работы при фиксации).
    """

    def __init__(self, file_path: Union[str, Path]):
        """
        Инициализирует репозиторий.

        Args:
            file_path: Путь к JSON-файлу с данными
        """
        super().__init__()
        self._file_path = Path(file_path)
        self._load_data()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def _load_data(self) -> None:
        """Загружает данные из JSON-файла."""
        if not self._file_path.exists():
            self._items = {}
            return

        raw_data = self._file_path.read_text(encoding="utf-8")
        if not raw_data.strip():
            self._items = {}
            return

        items = [self.model_class.model_validate(item) for item in json.loads(raw_data)]
        self._items = {item.id: item for item in items}  # type: ignore[attr-defined]

    def flush(self) -> None:
        """Сохраняет данные в JSON-файл."""
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        data = [item.model_dump(mode="json") for item in self.list_all()]

        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self._file_path)


class InMemoryEventBus(IEventBus):
    """Реализация шины событий в памяти."""

    def __init__(self, logger: Optional[ILogger] = None):
        self._subscribers: Dict[Type[DomainEvent], list] = {}
        self._logger = logger or get_logger(__name__)
        self.published: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        """Публикует событие."""
        event_type = type(event)
        self.published.append(event)
        self._logger.info(
            "Publishing event",
            event_type=event_type.__name__,
            payload=event.model_dump(mode="json"),
        )

        for handler in self._subscribers.get(event_type, []):
            try:
                handler(event)
            except Exception as e:
                self._logger.error(
                    "Error in event handler",
                    event_type=event_type.__name__,
                    error=str(e),
                )

    def subscribe(self, event_type: Type[DomainEvent], handler) -> None:
        """Подписывает обработчик на события указанного типа."""
        self._subscribers.setdefault(event_type, []).append(handler)
        self._logger.debug("Subscribed handler", event_type=event_type.__name__)

    def events_of(self, event_type: Type[DomainEvent]) -> List[DomainEvent]:
        """Возвращает опубликованные события указанного типа."""
        return [event for event in self.published if isinstance(event, event_type)]


class LoggingEventBus(IEventBus):
    """Шина, которая сериализует событие в JSON и пишет его в лог."""

    def __init__(self, logger: Optional[ILogger] = None):
        self._logger = logger or get_logger("booking_engine.events")

    def publish(self, event: DomainEvent) -> None:
        self._logger.info(
            "Event published",
            event_type=type(event).__name__,
            payload=event.model_dump_json(),
        )

    def subscribe(self, event_type: Type[DomainEvent], handler) -> None:
        # Обработчики не вызываются: события только пишутся в лог
        self._logger.warning(
            "Subscription ignored by logging event bus",
            event_type=event_type.__name__,
        )


class NullEventBus(IEventBus):
    """Шина, которая отбрасывает все события."""

    def publish(self, event: DomainEvent) -> None:
        return None

    def subscribe(self, event_type: Type[DomainEvent], handler) -> None:
        return None


def safe_publish(bus: IEventBus, event: DomainEvent, logger: ILogger) -> None:
    """Публикует событие; ошибка публикации логируется и не пробрасывается."""
    try:
        bus.publish(event)
    except Exception as e:
        logger.error(
            "Failed to publish event",
            event_type=type(event).__name__,
            event_id=str(event.event_id),
            error=str(e),
        )


class KeyedLock:
    """Набор блокировок, по одной на ключ (например, на номер).

    Блокировка ключа существует, пока ее кто-то держит или ждет.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._users: Dict[Hashable, int] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, keys: List[Hashable]) -> List[threading.Lock]:
        with self._guard:
            for key in keys:
                self._users[key] = self._users.get(key, 0) + 1
            return [self._locks.setdefault(key, threading.Lock()) for key in keys]

    def _checkin(self, keys: List[Hashable]) -> None:
        with self._guard:
            for key in keys:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        """Захватывает блокировки всех ключей в фиксированном порядке."""
        ordered = sorted(set(keys), key=str)
        locks = self._checkout(ordered)
        acquired: List[threading.Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            self._checkin(ordered)
