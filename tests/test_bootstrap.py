"""
Тесты для настроек и сборки приложения.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

import pytest
from pydantic import ValidationError

from booking_engine.bootstrap import bootstrap_app
from booking_engine.config import Settings
from booking_engine.shared_kernel.infrastructure import (
    InMemoryEventBus,
    LoggingEventBus,
    NullEventBus,
)
from booking_engine.unit_of_work import JsonFileUnitOfWork

from conftest import FakeClock


class TestSettings:
    """Тесты для Settings."""

    def test_defaults(self, monkeypatch):
        for name in ("STORAGE", "EVENT_SINK", "LOG_LEVEL", "DEFAULT_PAYMENT_METHOD"):
            monkeypatch.delenv(f"BOOKING_ENGINE_{name}", raising=False)

        settings = Settings(_env_file=None)

        assert settings.log_level == "INFO"
        assert settings.storage == "memory"
        assert settings.event_sink == "memory"
        assert settings.default_payment_method == "UNDEFINED"
        assert settings.off_season_label == "Off season"
        assert settings.cancelled_reservations_block_room is True

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BOOKING_ENGINE_STORAGE", "json")
        monkeypatch.setenv("BOOKING_ENGINE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("BOOKING_ENGINE_LOG_LEVEL", "debug")
        monkeypatch.setenv("BOOKING_ENGINE_CANCELLED_RESERVATIONS_BLOCK_ROOM", "false")

        settings = Settings(_env_file=None)

        assert settings.storage == "json"
        assert settings.data_dir == Path(tmp_path)
        assert settings.log_level == "DEBUG"
        assert settings.cancelled_reservations_block_room is False

    def test_rejects_unknown_storage(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, storage="postgres")

    def test_rejects_blank_payment_method(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, default_payment_method="  ")


class TestBootstrap:
    """Тесты для bootstrap_app."""

    @pytest.mark.parametrize(
        "sink, bus_class",
        [
            ("memory", InMemoryEventBus),
            ("log", LoggingEventBus),
            ("null", NullEventBus),
        ],
    )
    def test_event_sink_selection(self, sink, bus_class):
        app = bootstrap_app(Settings(_env_file=None, event_sink=sink))

        assert isinstance(app["event_bus"], bus_class)
        assert app["uow"].event_bus is app["event_bus"]

    def test_json_storage(self, tmp_path):
        app = bootstrap_app(Settings(_env_file=None, storage="json", data_dir=tmp_path))

        assert isinstance(app["uow"], JsonFileUnitOfWork)
        assert app["uow"].data_dir == tmp_path

    def test_end_to_end_booking_flow(self):
        clock = FakeClock()
        app = bootstrap_app(
            Settings(_env_file=None, default_payment_method="CARD"), clock=clock
        )
        rooms = app["room_service"]
        seasons = app["season_service"]
        pricing = app["pricing_service"]
        reservations = app["reservation_service"]
        payments = app["payment_service"]

        room = rooms.create_room(
            code="A1", room_type="suite", base_price=Decimal("100.0"), capacity=2
        )
        seasons.create_season("High", date(2024, 6, 1), date(2024, 8, 31), Decimal("1.5"))

        priced = pricing.compute_stay_price(room.id, date(2024, 5, 30), date(2024, 6, 2))
        assert priced.total_price == Decimal("350.00")

        reservation = reservations.create_reservation(
            room.id, uuid4(), date(2026, 3, 1), date(2026, 3, 4)
        )
        [payment] = payments.list_by_reservation(reservation.id)
        assert payment.amount == Decimal("300.00")
        assert payment.payment_method == "CARD"

        event_types = [event.event_type for event in app["event_bus"].published]
        assert event_types == [
            "RoomCreated",
            "SeasonCreated",
            "PriceCalculated",
            "ReservationCreated",
            "PaymentCreated",
        ]
