"""
File-backed slot repository for running schedules without a backend.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pendulum import DateTime

from ..domain.exceptions import SlotSourceError
from ..domain.models import ActivityStatus, Animal, Shelter, Slot, SlotStatus
from .records import (
    parse_activity_slot,
    parse_animal,
    parse_shelter,
    parse_unavailability_slot,
)

logger = logging.getLogger(__name__)


class JsonSlotRepository:
    """
    Repository that serves animals, shelters and slots from a JSON document.

    Expected layout::

        {
            "shelters": [{"id", "name", "openingTime", "closingTime"}],
            "animals": [{"id", "name", "shelterId"}],
            "activitySlots": [{"id", "animalId", "activityId", "activityStatus",
                               "startDateTime", "endDateTime", "reservedBy"}],
            "unavailabilitySlots": [{"id", "shelterId", "status", "reason",
                                     "startDateTime", "endDateTime"}]
        }

    Applies the same filters as the production queries: only active
    reservations, only ``Unavailable`` closures, and only slots overlapping
    the requested window.
    """

    def __init__(self, data: Dict[str, Any], timezone: str = "UTC"):
        """
        Args:
            data: Parsed JSON document
            timezone: Default timezone for naive timestamps
        """
        self.timezone = timezone
        self._data = data
        self._shelters: Dict[str, Shelter] = {}

        for record in data.get("shelters", []):
            try:
                shelter = parse_shelter(record)
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping invalid shelter record %r: %s", record.get("id"), exc)
                continue
            self._shelters[shelter.id] = shelter

    @classmethod
    def from_file(cls, data_file: Path, timezone: str = "UTC") -> "JsonSlotRepository":
        """
        Load the repository from a JSON file.

        Raises:
            SlotSourceError: If the file is missing or not valid JSON
        """
        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise SlotSourceError(f"Slot data file not found: {data_file}") from exc
        except json.JSONDecodeError as exc:
            raise SlotSourceError(f"Invalid JSON in {data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise SlotSourceError("Slot data file must contain an object at the root level.")

        return cls(data, timezone=timezone)

    async def get_animal(self, animal_id: str) -> Optional[Animal]:
        for record in self._data.get("animals", []):
            if str(record.get("id")) != animal_id:
                continue
            try:
                animal = parse_animal(record)
            except KeyError as exc:
                logger.warning("Animal record %s is missing %s", animal_id, exc)
                return None
            animal.shelter = self._shelters.get(animal.shelter_id)
            return animal
        return None

    async def get_reserved_slots(
        self,
        animal: Animal,
        week_start: DateTime,
        week_end: DateTime,
    ) -> List[Slot]:
        slots: List[Slot] = []

        for record in self._data.get("activitySlots", []):
            if str(record.get("animalId")) != animal.id:
                continue

            try:
                slot = parse_activity_slot(record, self._timezone_for(animal.shelter))
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping invalid activity slot %r: %s", record.get("id"), exc)
                continue

            if slot.activity_status is not ActivityStatus.ACTIVE:
                continue

            if slot.overlaps_window(week_start, week_end):
                slots.append(slot)

        return slots

    async def get_unavailable_slots(
        self,
        shelter: Shelter,
        week_start: DateTime,
        week_end: DateTime,
    ) -> List[Slot]:
        slots: List[Slot] = []

        for record in self._data.get("unavailabilitySlots", []):
            if str(record.get("shelterId")) != shelter.id:
                continue

            try:
                slot = parse_unavailability_slot(record, self._timezone_for(shelter))
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping invalid unavailability slot %r: %s", record.get("id"), exc)
                continue

            if slot.status is not SlotStatus.UNAVAILABLE:
                continue

            if slot.overlaps_window(week_start, week_end):
                slots.append(slot)

        return slots

    def _timezone_for(self, shelter: Optional[Shelter]) -> str:
        if shelter is not None and shelter.timezone:
            return shelter.timezone
        return self.timezone
