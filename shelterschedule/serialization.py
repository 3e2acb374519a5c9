"""
JSON-ready representation of weekly schedules.

Dates are ISO calendar dates, times of day ISO ``HH:MM:SS`` and slot
timestamps full ISO 8601 strings. The three per-day lists are always arrays.
"""

from typing import Any, Dict, Optional

from .domain.models import (
    Animal,
    AnimalWeeklySchedule,
    DailySchedule,
    Shelter,
    Slot,
    SlotKind,
    TimeBlock,
)


def time_block_to_dict(block: TimeBlock) -> Dict[str, Any]:
    return {
        "date": block.date.isoformat(),
        "start": block.start.isoformat(),
        "end": block.end.isoformat(),
    }


def slot_to_dict(slot: Slot) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": slot.id,
        "type": slot.kind.value,
        "startDateTime": slot.start.to_iso8601_string(),
        "endDateTime": slot.end.to_iso8601_string(),
        "status": slot.status.value,
    }

    if slot.kind is SlotKind.ACTIVITY:
        data["activityId"] = slot.activity_id
        data["reservedBy"] = slot.reserved_by
    elif slot.kind is SlotKind.SHELTER_UNAVAILABLE:
        data["reason"] = slot.reason

    return data


def daily_schedule_to_dict(daily: DailySchedule) -> Dict[str, Any]:
    return {
        "date": daily.date.isoformat(),
        "availableSlots": [time_block_to_dict(block) for block in daily.available_slots],
        "reservedSlots": [slot_to_dict(slot) for slot in daily.reserved_slots],
        "unavailableSlots": [slot_to_dict(slot) for slot in daily.unavailable_slots],
    }


def _animal_to_dict(animal: Animal) -> Dict[str, Any]:
    return {"id": animal.id, "name": animal.name}


def _shelter_to_dict(shelter: Optional[Shelter]) -> Optional[Dict[str, Any]]:
    if shelter is None:
        return None
    return {
        "id": shelter.id,
        "name": shelter.name,
        "openingTime": shelter.opening_time.isoformat(),
        "closingTime": shelter.closing_time.isoformat(),
    }


def weekly_schedule_to_dict(schedule: AnimalWeeklySchedule) -> Dict[str, Any]:
    """Serialize a weekly schedule for an API response."""
    return {
        "animal": _animal_to_dict(schedule.animal),
        "shelter": _shelter_to_dict(schedule.shelter),
        "startDate": schedule.start_date.isoformat(),
        "days": [daily_schedule_to_dict(daily) for daily in schedule.week_schedule],
    }
