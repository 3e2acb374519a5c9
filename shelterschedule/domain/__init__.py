"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .exceptions import (
    AnimalNotFoundError,
    InvalidShelterHoursError,
    ScheduleError,
    ScheduleRequestError,
    SlotSourceError,
)
from .models import (
    ActivityStatus,
    Animal,
    AnimalWeeklySchedule,
    DailySchedule,
    NormalizedSlots,
    Shelter,
    Slot,
    SlotKind,
    SlotStatus,
    TimeBlock,
    activity_slot,
    shelter_unavailability_slot,
)
from .schedule_assembler import ScheduleAssembler
from .slot_normalizer import SlotNormalizer
from .time_range_calculator import TimeRangeCalculator

__all__ = [
    "ActivityStatus",
    "Animal",
    "AnimalNotFoundError",
    "AnimalWeeklySchedule",
    "DailySchedule",
    "InvalidShelterHoursError",
    "NormalizedSlots",
    "ScheduleAssembler",
    "ScheduleError",
    "ScheduleRequestError",
    "Shelter",
    "Slot",
    "SlotKind",
    "SlotNormalizer",
    "SlotSourceError",
    "SlotStatus",
    "TimeBlock",
    "TimeRangeCalculator",
    "activity_slot",
    "shelter_unavailability_slot",
]
