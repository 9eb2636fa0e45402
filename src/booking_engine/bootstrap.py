from typing import Any, Dict, Optional

from .catalog.application import RoomCatalogService, SeasonCatalogService
from .config import Settings, get_settings
from .logger import get_logger, setup_logging
from .payment.application import PaymentApplicationService
from .pricing.application import PricingService
from .reservation.application import ReservationApplicationService
from .shared_kernel import Clock, now
from .shared_kernel.infrastructure import InMemoryEventBus, LoggingEventBus, NullEventBus
from .shared_kernel.interfaces import IEventBus, ILogger
from .unit_of_work import InMemoryUnitOfWork, JsonFileUnitOfWork


def create_event_bus(event_sink: str, logger: ILogger) -> IEventBus:
    """Создает шину событий по имени приемника из настроек."""
    if event_sink == "log":
        return LoggingEventBus()
    if event_sink == "null":
        return NullEventBus()
    return InMemoryEventBus(logger=logger)


def create_unit_of_work(settings: Settings, event_bus: IEventBus) -> InMemoryUnitOfWork:
    if settings.storage == "json":
        return JsonFileUnitOfWork(settings.data_dir, event_bus=event_bus)
    return InMemoryUnitOfWork(event_bus=event_bus)


def bootstrap_app(
    settings: Optional[Settings] = None, clock: Clock = now
) -> Dict[str, Any]:
    """Создает и настраивает все компоненты приложения."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("booking_engine")

    # 1. Одна единица работы на все контексты
    event_bus = create_event_bus(settings.event_sink, logger)
    uow = create_unit_of_work(settings, event_bus)

    # 2. Создаем сервисы, передавая им зависимости
    payment_service = PaymentApplicationService(uow, clock=clock)
    reservation_service = ReservationApplicationService(
        uow,
        payment_service=payment_service,
        default_payment_method=settings.default_payment_method,
        cancelled_reservations_block_room=settings.cancelled_reservations_block_room,
        clock=clock,
    )

    logger.info(
        "Booking engine bootstrapped",
        storage=settings.storage,
        event_sink=settings.event_sink,
    )

    # Возвращаем настроенные компоненты
    return {
        "settings": settings,
        "uow": uow,
        "event_bus": event_bus,
        "room_service": RoomCatalogService(uow, clock=clock),
        "season_service": SeasonCatalogService(uow, clock=clock),
        "pricing_service": PricingService(
            uow, off_season_label=settings.off_season_label, clock=clock
        ),
        "reservation_service": reservation_service,
        "payment_service": payment_service,
    }
