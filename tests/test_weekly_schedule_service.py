"""
Tests for the WeeklyScheduleService orchestration layer.
"""

import asyncio
from datetime import date, time
from typing import Dict, List, Optional

import pendulum
import pytest

from shelterschedule.config import SchedulingConfig
from shelterschedule.domain.exceptions import (
    AnimalNotFoundError,
    InvalidShelterHoursError,
    ScheduleRequestError,
)
from shelterschedule.domain.models import (
    Animal,
    Shelter,
    Slot,
    activity_slot,
    shelter_unavailability_slot,
)
from shelterschedule.services.weekly_schedule import WeeklyScheduleService

TZ = "Europe/Lisbon"
MONDAY = date(2025, 1, 6)
ANIMAL_ID = "a4f2e8c0-1b3d-4e5f-8a9b-c0d1e2f3a4b5"
UNKNOWN_ID = "0c9d8e7f-6a5b-4c3d-9e2f-1a0b9c8d7e6f"


class StubSlotRepository:
    """Minimal stub matching SlotRepositoryProtocol."""

    def __init__(
        self,
        animal: Optional[Animal],
        reserved: Optional[List[Slot]] = None,
        unavailable: Optional[List[Slot]] = None,
    ):
        self._animal = animal
        self._reserved = reserved or []
        self._unavailable = unavailable or []
        self.calls: List[Dict[str, str]] = []

    async def get_animal(self, animal_id):
        self.calls.append({"method": "get_animal", "animal_id": animal_id})
        if self._animal is None or self._animal.id != animal_id:
            return None
        return self._animal

    async def get_reserved_slots(self, animal, week_start, week_end):
        self.calls.append(
            {
                "method": "get_reserved_slots",
                "start": week_start.to_datetime_string(),
                "end": week_end.to_datetime_string(),
            }
        )
        return self._reserved

    async def get_unavailable_slots(self, shelter, week_start, week_end):
        self.calls.append(
            {
                "method": "get_unavailable_slots",
                "start": week_start.to_datetime_string(),
                "end": week_end.to_datetime_string(),
            }
        )
        return self._unavailable


def _animal(opening: time = time(9, 0), closing: time = time(18, 0), animal_id: str = ANIMAL_ID) -> Animal:
    shelter = Shelter(id="shelter-1", name="Abrigo Porto", opening_time=opening, closing_time=closing)
    return Animal(id=animal_id, name="Bolinhas", shelter_id=shelter.id, shelter=shelter)


def _build_service(repository: StubSlotRepository, **settings) -> WeeklyScheduleService:
    return WeeklyScheduleService(
        repository,
        settings=SchedulingConfig(**settings),
        timezone=TZ,
        today=lambda: date(2025, 1, 1),
    )


def _slot_times(slots):
    return [(s.start.format("HH:mm"), s.end.format("HH:mm")) for s in slots]


def _block_times(blocks):
    return [(b.start, b.end) for b in blocks]


def test_weekly_schedule_end_to_end():
    """Reservations and a multi-day closure flow through the whole pipeline."""
    reservation = activity_slot(
        pendulum.parse("2025-01-06 10:00", tz=TZ),
        pendulum.parse("2025-01-06 12:00", tz=TZ),
        activity_id="act-1",
        reserved_by="Maria Silva",
    )
    closure = shelter_unavailability_slot(
        pendulum.parse("2025-01-08 16:00", tz=TZ),
        pendulum.parse("2025-01-09 11:00", tz=TZ),
        shelter_id="shelter-1",
        reason="Staff training",
    )
    service = _build_service(StubSlotRepository(_animal(), [reservation], [closure]))

    schedule = asyncio.run(service.get_animal_weekly_schedule(ANIMAL_ID, MONDAY))

    assert schedule.animal.name == "Bolinhas"
    assert schedule.shelter.name == "Abrigo Porto"
    assert len(schedule.week_schedule) == 7

    monday, tuesday, wednesday, thursday = schedule.week_schedule[:4]

    assert monday.reserved_slots == [reservation]
    assert _block_times(monday.available_slots) == [(time(9), time(10)), (time(12), time(18))]

    assert _block_times(tuesday.available_slots) == [(time(9), time(18))]

    assert _slot_times(wednesday.unavailable_slots) == [("16:00", "18:00")]
    assert _block_times(wednesday.available_slots) == [(time(9), time(16))]

    assert _slot_times(thursday.unavailable_slots) == [("09:00", "11:00")]
    assert _block_times(thursday.available_slots) == [(time(11), time(18))]

    for daily in schedule.week_schedule[4:]:
        assert daily.reserved_slots == []
        assert daily.unavailable_slots == []
        assert _block_times(daily.available_slots) == [(time(9), time(18))]


def test_repository_receives_week_window():
    """Slots are fetched for [start 00:00, start + 7 days)."""
    repository = StubSlotRepository(_animal())
    service = _build_service(repository)

    asyncio.run(service.get_animal_weekly_schedule(ANIMAL_ID, MONDAY))

    fetches = [call for call in repository.calls if call["method"] != "get_animal"]
    assert len(fetches) == 2
    for call in fetches:
        assert call["start"] == "2025-01-06 00:00:00"
        assert call["end"] == "2025-01-13 00:00:00"


def test_rejects_start_date_that_is_not_monday():
    service = _build_service(StubSlotRepository(_animal()))

    with pytest.raises(ScheduleRequestError, match="Monday"):
        asyncio.run(service.get_animal_weekly_schedule(ANIMAL_ID, date(2025, 1, 7)))


def test_accepts_any_weekday_when_monday_not_required():
    service = _build_service(StubSlotRepository(_animal()), require_monday=False)

    schedule = asyncio.run(service.get_animal_weekly_schedule(ANIMAL_ID, date(2025, 1, 8)))

    assert schedule.week_schedule[0].date == date(2025, 1, 8)
    assert schedule.week_schedule[-1].date == date(2025, 1, 14)


def test_rejects_start_date_too_far_ahead():
    service = _build_service(StubSlotRepository(_animal()))

    with pytest.raises(ScheduleRequestError, match="between 2024-12-01 and 2026-01-01"):
        asyncio.run(service.get_animal_weekly_schedule(ANIMAL_ID, date(2026, 2, 2)))


def test_rejects_start_date_too_far_back():
    service = _build_service(StubSlotRepository(_animal()))

    with pytest.raises(ScheduleRequestError):
        asyncio.run(service.get_animal_weekly_schedule(ANIMAL_ID, date(2024, 11, 25)))


def test_rejects_blank_animal_id():
    repository = StubSlotRepository(_animal())
    service = _build_service(repository)

    with pytest.raises(ScheduleRequestError, match="Animal ID is required"):
        asyncio.run(service.get_animal_weekly_schedule("   ", MONDAY))

    assert repository.calls == []


@pytest.mark.parametrize(
    "animal_id",
    [
        "not-a-valid-guid",
        "a4f2e8c0-1b3d-4e5f",
        "a4f2e8c0-1b3d-4e5f-8a9b-c0d1e2f3a4b5-extra",
        "a4f2e8c0-1b3d-4e5f-8a9b-c0d1e2f3a4bz",
    ],
)
def test_rejects_animal_id_that_is_not_a_guid(animal_id):
    """Malformed ids are a bad request, not a missing animal."""
    repository = StubSlotRepository(_animal())
    service = _build_service(repository)

    with pytest.raises(ScheduleRequestError, match="Animal ID must be a valid GUID"):
        asyncio.run(service.get_animal_weekly_schedule(animal_id, MONDAY))

    assert repository.calls == []


def test_accepts_uppercase_guid():
    upper_id = ANIMAL_ID.upper()
    service = _build_service(StubSlotRepository(_animal(animal_id=upper_id)))

    schedule = asyncio.run(service.get_animal_weekly_schedule(upper_id, MONDAY))

    assert schedule.animal.id == upper_id


def test_unknown_animal_raises_not_found():
    service = _build_service(StubSlotRepository(_animal()))

    with pytest.raises(AnimalNotFoundError, match=UNKNOWN_ID):
        asyncio.run(service.get_animal_weekly_schedule(UNKNOWN_ID, MONDAY))


def test_animal_without_shelter_raises_not_found():
    orphan = Animal(id=ANIMAL_ID, name="Bolinhas", shelter_id="gone")
    service = _build_service(StubSlotRepository(orphan))

    with pytest.raises(AnimalNotFoundError):
        asyncio.run(service.get_animal_weekly_schedule(ANIMAL_ID, MONDAY))


def test_invalid_shelter_hours_are_rejected_before_fetching_slots():
    repository = StubSlotRepository(_animal(opening=time(18), closing=time(9)))
    service = _build_service(repository)

    with pytest.raises(InvalidShelterHoursError):
        asyncio.run(service.get_animal_weekly_schedule(ANIMAL_ID, MONDAY))

    assert [call["method"] for call in repository.calls] == ["get_animal"]


def test_build_weekly_schedule_without_repository_data():
    """Already-loaded slots can be assembled directly."""
    service = _build_service(StubSlotRepository(None))

    schedule = service.build_weekly_schedule(
        animal=_animal(),
        reserved=[],
        unavailable=[],
        start_date=MONDAY,
    )

    assert all(_block_times(d.available_slots) == [(time(9), time(18))] for d in schedule.week_schedule)


def test_week_window_uses_given_timezone():
    week_start, week_end = WeeklyScheduleService.week_window(MONDAY, "Europe/Lisbon")

    assert week_start.timezone_name == "Europe/Lisbon"
    assert week_start.to_datetime_string() == "2025-01-06 00:00:00"
    assert week_end.to_datetime_string() == "2025-01-13 00:00:00"
