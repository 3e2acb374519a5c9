"""
Parsing of raw API / JSON records into domain models.

Record keys follow the backend's camelCase JSON, e.g.::

    {"id": "...", "activityId": "...", "status": "Reserved",
     "startDateTime": "2025-01-06T10:00:00", "endDateTime": "..."}
"""

from datetime import time
from typing import Any, Dict, Optional

import pendulum
from pendulum import DateTime

from ..domain.models import (
    ActivityStatus,
    Animal,
    Shelter,
    Slot,
    SlotStatus,
    activity_slot,
    shelter_unavailability_slot,
)

Record = Dict[str, Any]


def parse_datetime(value: str, timezone: str) -> DateTime:
    """
    Parse an ISO 8601 timestamp into a DateTime in ``timezone``.

    Naive timestamps are taken as shelter-local time.

    Raises:
        ValueError: If the value is not a full timestamp
    """
    parsed = pendulum.parse(value, tz=timezone)
    if isinstance(parsed, DateTime):
        return parsed.in_timezone(timezone)
    raise ValueError(f"Could not parse datetime: {value}")


def parse_time_of_day(value: str) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a time of day."""
    try:
        return time.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Could not parse time of day: {value}") from exc


def _enum_value(value: Optional[str]) -> Optional[str]:
    # Backend serializes enums by name ("Reserved", "ShelterUnavailable")
    if value is None:
        return None
    if value.isupper() or value.islower():
        return value.lower()
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in value).lstrip("_").lower()


def parse_shelter(record: Record) -> Shelter:
    return Shelter(
        id=str(record["id"]),
        name=record.get("name", ""),
        opening_time=parse_time_of_day(record["openingTime"]),
        closing_time=parse_time_of_day(record["closingTime"]),
        timezone=record.get("timezone"),
    )


def parse_animal(record: Record, shelter: Optional[Shelter] = None) -> Animal:
    return Animal(
        id=str(record["id"]),
        name=record.get("name", ""),
        shelter_id=str(record["shelterId"]),
        shelter=shelter,
    )


def parse_activity_slot(record: Record, timezone: str) -> Slot:
    """
    Parse a reservation slot record.

    Raises:
        KeyError: If a required field is missing
        ValueError: If a timestamp or enum value is invalid
    """
    return activity_slot(
        start=parse_datetime(record["startDateTime"], timezone),
        end=parse_datetime(record["endDateTime"], timezone),
        activity_id=str(record["activityId"]),
        reserved_by=record.get("reservedBy"),
        activity_status=ActivityStatus(_enum_value(record.get("activityStatus", "Active"))),
        slot_id=record.get("id"),
    )


def parse_unavailability_slot(record: Record, timezone: str) -> Slot:
    """
    Parse a shelter closure slot record.

    Raises:
        KeyError: If a required field is missing
        ValueError: If a timestamp or enum value is invalid
    """
    return shelter_unavailability_slot(
        start=parse_datetime(record["startDateTime"], timezone),
        end=parse_datetime(record["endDateTime"], timezone),
        shelter_id=str(record["shelterId"]),
        reason=record.get("reason"),
        status=SlotStatus(_enum_value(record.get("status", "Unavailable"))),
        slot_id=record.get("id"),
    )
