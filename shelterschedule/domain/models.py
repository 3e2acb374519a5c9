"""
Domain models for shelter availability scheduling.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from pendulum import DateTime


class SlotKind(str, Enum):
    """Discriminator for the slot variants."""

    ACTIVITY = "activity"
    SHELTER_UNAVAILABLE = "shelter_unavailable"


class SlotStatus(str, Enum):
    """Availability state of a slot."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    RESERVED = "reserved"


class ActivityStatus(str, Enum):
    """Lifecycle state of the activity that owns a reservation slot."""

    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


def _new_slot_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Slot:
    """
    A typed time interval: either a reserved activity or a shelter closure.

    Consumers switch on ``kind``. Fields that only make sense for one
    variant are left as ``None`` on the other.

    No ordering check is made here; raw records with ``start >= end`` are
    dropped by the normalizer instead.
    """
    kind: SlotKind
    status: SlotStatus
    start: DateTime
    end: DateTime
    id: str = field(default_factory=_new_slot_id)

    # ACTIVITY payload
    activity_id: Optional[str] = None
    activity_status: ActivityStatus = ActivityStatus.ACTIVE
    reserved_by: Optional[str] = None

    # SHELTER_UNAVAILABLE payload
    shelter_id: Optional[str] = None
    reason: Optional[str] = None

    @property
    def date(self) -> date:
        """Calendar date the slot starts on."""
        return self.start.date()

    @property
    def is_reservation(self) -> bool:
        return self.kind is SlotKind.ACTIVITY

    @property
    def is_shelter_unavailability(self) -> bool:
        return self.kind is SlotKind.SHELTER_UNAVAILABLE

    def overlaps_window(self, window_start: datetime, window_end: datetime) -> bool:
        """Check if the slot intersects the half-open window."""
        return self.start < window_end and self.end > window_start

    def __str__(self) -> str:
        return (
            f"{self.kind.value} {self.start.format('DD.MM.YYYY HH:mm')}"
            f" - {self.end.format('DD.MM.YYYY HH:mm')}"
        )


def activity_slot(
    start: DateTime,
    end: DateTime,
    *,
    activity_id: str,
    reserved_by: Optional[str] = None,
    activity_status: ActivityStatus = ActivityStatus.ACTIVE,
    slot_id: Optional[str] = None,
) -> Slot:
    """Build a reservation slot. Always ``ACTIVITY`` / ``RESERVED``."""
    return Slot(
        kind=SlotKind.ACTIVITY,
        status=SlotStatus.RESERVED,
        start=start,
        end=end,
        id=slot_id or _new_slot_id(),
        activity_id=activity_id,
        activity_status=activity_status,
        reserved_by=reserved_by,
    )


def shelter_unavailability_slot(
    start: DateTime,
    end: DateTime,
    *,
    shelter_id: str,
    reason: Optional[str] = None,
    status: SlotStatus = SlotStatus.UNAVAILABLE,
    slot_id: Optional[str] = None,
) -> Slot:
    """Build a shelter closure slot."""
    return Slot(
        kind=SlotKind.SHELTER_UNAVAILABLE,
        status=status,
        start=start,
        end=end,
        id=slot_id or _new_slot_id(),
        shelter_id=shelter_id,
        reason=reason,
    )


@dataclass(frozen=True)
class TimeBlock:
    """
    A free interval within operating hours on a given date.

    Invariant: start must be before end.
    """
    date: date
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        start = datetime.combine(self.date, self.start)
        end = datetime.combine(self.date, self.end)
        return int((end - start).total_seconds() / 60)

    def __str__(self) -> str:
        return f"{self.date.strftime('%d.%m.%Y')} {self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"


@dataclass(frozen=True)
class NormalizedSlots:
    """Slots split to single days, clamped to operating hours and sorted."""
    slots: Tuple[Slot, ...] = ()

    def reserved(self) -> List[Slot]:
        return [slot for slot in self.slots if slot.is_reservation]

    def unavailable(self) -> List[Slot]:
        return [slot for slot in self.slots if slot.is_shelter_unavailability]

    def __iter__(self) -> Iterator[Slot]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)


@dataclass
class Shelter:
    """Shelter reference with its daily operating window."""
    id: str
    name: str
    opening_time: time
    closing_time: time
    timezone: Optional[str] = None

    def has_valid_hours(self) -> bool:
        return self.opening_time < self.closing_time


@dataclass
class Animal:
    """Animal reference. ``shelter`` is attached by the repository."""
    id: str
    name: str
    shelter_id: str
    shelter: Optional[Shelter] = None


@dataclass
class DailySchedule:
    """Availability breakdown for one calendar date."""
    date: date
    available_slots: List[TimeBlock] = field(default_factory=list)
    reserved_slots: List[Slot] = field(default_factory=list)
    unavailable_slots: List[Slot] = field(default_factory=list)

    @property
    def is_fully_booked(self) -> bool:
        return not self.available_slots


@dataclass
class AnimalWeeklySchedule:
    """Seven consecutive daily schedules for one animal."""
    animal: Animal
    shelter: Optional[Shelter]
    start_date: date
    week_schedule: List[DailySchedule] = field(default_factory=list)

    @property
    def end_date(self) -> date:
        """Last day covered (inclusive)."""
        return self.week_schedule[-1].date if self.week_schedule else self.start_date
