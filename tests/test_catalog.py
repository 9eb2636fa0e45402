"""
Тесты для контекста каталога: номера и сезоны.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from booking_engine.catalog.application import UpdateRoomRequest, UpdateSeasonRequest
from booking_engine.catalog.domain import (
    RoomCreated,
    Season,
    SeasonCreated,
    select_applicable_season,
)
from booking_engine.shared_kernel import (
    DuplicateRoomCodeException,
    EntityNotFoundException,
)

from conftest import FIXED_NOW


class TestRoomCatalogService:
    """Тесты для RoomCatalogService."""

    def test_create_room_publishes_event(self, room_service, event_bus):
        room = room_service.create_room(
            code="201", room_type="suite", base_price=Decimal("250.00"), capacity=4
        )

        assert room_service.get_room(room.id) == room
        assert room.available is True
        events = event_bus.events_of(RoomCreated)
        assert len(events) == 1
        assert events[0].room_id == room.id
        assert events[0].code == "201"
        assert events[0].base_price == Decimal("250.00")
        assert events[0].occurred_on == FIXED_NOW

    def test_create_room_with_duplicate_code_fails(self, room_service, room):
        with pytest.raises(DuplicateRoomCodeException):
            room_service.create_room(
                code=room.code, room_type="single", base_price=Decimal("50"), capacity=1
            )
        assert len(room_service.list_rooms()) == 1

    def test_update_room_changes_only_given_fields(self, room_service, room):
        updated = room_service.update_room(
            room.id, UpdateRoomRequest(available=False, description="Ремонт")
        )

        assert updated.available is False
        assert updated.description == "Ремонт"
        assert updated.base_price == room.base_price
        assert room_service.get_room(room.id).available is False

    def test_update_room_to_taken_code_fails(self, room_service, room):
        other = room_service.create_room(
            code="102", room_type="double", base_price=Decimal("90"), capacity=2
        )
        with pytest.raises(DuplicateRoomCodeException):
            room_service.update_room(other.id, UpdateRoomRequest(code=room.code))

    def test_update_missing_room_fails(self, room_service):
        with pytest.raises(EntityNotFoundException):
            room_service.update_room(uuid4(), UpdateRoomRequest(capacity=3))

    def test_delete_room(self, room_service, room):
        room_service.delete_room(room.id)

        with pytest.raises(EntityNotFoundException):
            room_service.get_room(room.id)
        with pytest.raises(EntityNotFoundException):
            room_service.delete_room(room.id)

    def test_list_by_availability_and_type(self, room_service, room):
        closed = room_service.create_room(
            code="301",
            room_type="single",
            base_price=Decimal("60"),
            capacity=1,
            available=False,
        )

        assert [r.id for r in room_service.list_available_rooms()] == [room.id]
        assert [r.id for r in room_service.list_rooms_by_availability(False)] == [
            closed.id
        ]
        assert [r.id for r in room_service.list_rooms_by_type("single")] == [closed.id]
        # Совпадение типа только точное
        assert room_service.list_rooms_by_type("Single") == []

    def test_returned_room_is_a_copy(self, room_service, room):
        fetched = room_service.get_room(room.id)
        fetched.available = False

        assert room_service.get_room(room.id).available is True


class TestSeasonCatalogService:
    """Тесты для SeasonCatalogService."""

    def test_create_season_publishes_event(self, season_service, event_bus):
        season = season_service.create_season(
            "High", date(2024, 6, 1), date(2024, 8, 31), Decimal("1.5")
        )

        assert season_service.get_season(season.id).name == "High"
        events = event_bus.events_of(SeasonCreated)
        assert [e.season_id for e in events] == [season.id]
        assert events[0].occurred_on == FIXED_NOW

    @pytest.mark.parametrize(
        "start, end, coefficient",
        [
            (date(2024, 6, 2), date(2024, 6, 1), Decimal("1.2")),
            (date(2024, 6, 1), date(2024, 6, 30), Decimal("0")),
            (date(2024, 6, 1), date(2024, 6, 30), Decimal("-1")),
        ],
    )
    def test_create_invalid_season_fails(self, season_service, start, end, coefficient):
        with pytest.raises(ValidationError):
            season_service.create_season("Bad", start, end, coefficient)
        assert season_service.list_seasons() == []

    def test_single_day_season_is_allowed(self, season_service):
        season = season_service.create_season(
            "Holiday", date(2024, 12, 31), date(2024, 12, 31), Decimal("2")
        )
        assert season_service.find_season_covering(date(2024, 12, 31)) == season

    def test_find_season_covering_is_inclusive(self, season_service):
        season = season_service.create_season(
            "High", date(2024, 6, 1), date(2024, 8, 31), Decimal("1.5")
        )

        assert season_service.find_season_covering(date(2024, 6, 1)) == season
        assert season_service.find_season_covering(date(2024, 8, 31)) == season
        assert season_service.find_season_covering(date(2024, 5, 31)) is None
        assert season_service.find_season_covering(date(2024, 9, 1)) is None

    def test_overlapping_seasons_latest_start_wins(self, season_service):
        season_service.create_season(
            "Summer", date(2024, 6, 1), date(2024, 8, 31), Decimal("1.5")
        )
        peak = season_service.create_season(
            "Peak", date(2024, 7, 10), date(2024, 7, 20), Decimal("2.0")
        )

        assert season_service.find_season_covering(date(2024, 7, 15)) == peak
        assert season_service.find_season_covering(date(2024, 7, 25)).name == "Summer"

    def test_update_and_delete_season(self, season_service):
        season = season_service.create_season(
            "Low", date(2024, 1, 10), date(2024, 2, 10), Decimal("0.8")
        )

        updated = season_service.update_season(
            season.id, UpdateSeasonRequest(coefficient=Decimal("0.7"))
        )
        assert updated.coefficient == Decimal("0.7")
        assert updated.start_date == date(2024, 1, 10)

        season_service.delete_season(season.id)
        with pytest.raises(EntityNotFoundException):
            season_service.get_season(season.id)

    def test_update_season_with_inverted_dates_fails(self, season_service):
        season = season_service.create_season(
            "Low", date(2024, 1, 10), date(2024, 2, 10), Decimal("0.8")
        )
        with pytest.raises(ValidationError):
            season_service.update_season(
                season.id, UpdateSeasonRequest(end_date=date(2024, 1, 1))
            )
        assert season_service.get_season(season.id).end_date == date(2024, 2, 10)


class TestSeasonSelection:
    """Тесты правила выбора одного сезона из нескольких."""

    def test_no_candidates(self):
        assert select_applicable_season([]) is None

    def test_equal_start_dates_lowest_id_wins(self):
        first = Season(
            name="A",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
            coefficient=Decimal("1.1"),
        )
        second = Season(
            name="B",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 15),
            coefficient=Decimal("1.3"),
        )
        expected = min(first, second, key=lambda s: s.id)

        assert select_applicable_season([first, second]) == expected
        assert select_applicable_season([second, first]) == expected
