"""
Application service for building an animal's weekly availability schedule.

The service loads the animal and its raw slots through a repository adapter
and runs them through the domain pipeline: ``SlotNormalizer`` ->
``TimeRangeCalculator`` -> ``ScheduleAssembler``. The repository dependency
is a simple protocol so tests and the CLI can plug in any data source.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Callable, List, Optional, Protocol, Sequence

import pendulum
from pendulum import DateTime

from ..config import SchedulingConfig
from ..domain.exceptions import (
    AnimalNotFoundError,
    InvalidShelterHoursError,
    ScheduleRequestError,
)
from ..domain.models import Animal, AnimalWeeklySchedule, Shelter, Slot
from ..domain.schedule_assembler import ScheduleAssembler
from ..domain.slot_normalizer import SlotNormalizer
from ..domain.time_range_calculator import DAYS_IN_WEEK, TimeRangeCalculator

logger = logging.getLogger(__name__)


class SlotRepositoryProtocol(Protocol):
    """Protocol describing the data access needed by the service."""

    async def get_animal(self, animal_id: str) -> Optional[Animal]:
        """Return the animal with its shelter attached, or None."""

    async def get_reserved_slots(
        self,
        animal: Animal,
        week_start: DateTime,
        week_end: DateTime,
    ) -> List[Slot]:
        """Return active reservation slots of the animal overlapping the window."""

    async def get_unavailable_slots(
        self,
        shelter: Shelter,
        week_start: DateTime,
        week_end: DateTime,
    ) -> List[Slot]:
        """Return the shelter's closure slots overlapping the window."""


class WeeklyScheduleService:
    """
    Orchestrates slot retrieval and weekly schedule computation.
    """

    def __init__(
        self,
        slot_repository: SlotRepositoryProtocol,
        normalizer: Optional[SlotNormalizer] = None,
        calculator: Optional[TimeRangeCalculator] = None,
        assembler: Optional[ScheduleAssembler] = None,
        *,
        settings: Optional[SchedulingConfig] = None,
        timezone: str = "UTC",
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self._slot_repository = slot_repository
        self._normalizer = normalizer or SlotNormalizer()
        self._calculator = calculator or TimeRangeCalculator()
        self._assembler = assembler or ScheduleAssembler()
        self._settings = settings or SchedulingConfig()
        self._timezone = timezone
        self._today = today or (lambda: pendulum.today(self._timezone).date())

    async def get_animal_weekly_schedule(
        self,
        animal_id: str,
        start_date: date,
    ) -> AnimalWeeklySchedule:
        """
        Load an animal's slots for the week and build its schedule.

        Raises:
            ScheduleRequestError: If the id is blank or not a GUID, or the start date is rejected
            AnimalNotFoundError: If the repository has no such animal
            InvalidShelterHoursError: If the shelter does not open before it closes
        """
        if not animal_id or not animal_id.strip():
            raise ScheduleRequestError("Animal ID is required.")

        try:
            uuid.UUID(animal_id)
        except ValueError:
            raise ScheduleRequestError("Animal ID must be a valid GUID.") from None

        self.validate_start_date(start_date)

        animal = await self._slot_repository.get_animal(animal_id)
        if animal is None or animal.shelter is None:
            logger.warning("Weekly schedule requested for unknown animal %s", animal_id)
            raise AnimalNotFoundError(f"Animal not found: {animal_id}")

        shelter = animal.shelter
        self._ensure_valid_hours(shelter)

        week_start, week_end = self.week_window(start_date, shelter.timezone or self._timezone)
        logger.debug("Fetching slots for animal %s between %s and %s", animal.id, week_start, week_end)

        reserved = await self._slot_repository.get_reserved_slots(animal, week_start, week_end)
        unavailable = await self._slot_repository.get_unavailable_slots(shelter, week_start, week_end)

        return self.build_weekly_schedule(
            animal=animal,
            reserved=reserved,
            unavailable=unavailable,
            start_date=start_date,
        )

    def build_weekly_schedule(
        self,
        *,
        animal: Animal,
        reserved: Sequence[Slot],
        unavailable: Sequence[Slot],
        start_date: date,
    ) -> AnimalWeeklySchedule:
        """Run already-loaded slots through normalize -> calculate -> assemble."""
        shelter = animal.shelter
        if shelter is None:
            raise AnimalNotFoundError(f"Animal {animal.id} has no shelter attached")
        self._ensure_valid_hours(shelter)

        opening = shelter.opening_time
        closing = shelter.closing_time

        normalized = self._normalizer.normalize([*reserved, *unavailable], opening, closing)

        available = self._calculator.calculate_weekly_available_ranges(
            normalized.slots,
            opening,
            closing,
            start_date,
        )

        logger.debug(
            "Animal %s: %d reserved, %d unavailable, %d free block(s)",
            animal.id,
            len(normalized.reserved()),
            len(normalized.unavailable()),
            len(available),
        )

        return self._assembler.assemble_week_schedule(
            normalized.reserved(),
            normalized.unavailable(),
            available,
            animal,
            start_date,
        )

    def validate_start_date(self, start_date: date) -> None:
        """
        Reject start dates outside the accepted window or not on a Monday.

        Raises:
            ScheduleRequestError: If the date is rejected
        """
        today = self._today()
        earliest = pendulum.date(today.year, today.month, today.day).subtract(
            months=self._settings.past_window_months
        )
        latest = pendulum.date(today.year, today.month, today.day).add(
            years=self._settings.future_window_years
        )

        if not earliest <= start_date <= latest:
            logger.warning("Rejected weekly schedule start date %s", start_date)
            raise ScheduleRequestError(
                f"Start date must be between {earliest.isoformat()} and {latest.isoformat()}."
            )

        if self._settings.require_monday and start_date.weekday() != pendulum.MONDAY:
            logger.warning("Rejected weekly schedule start date %s (not a Monday)", start_date)
            raise ScheduleRequestError("Start date must be a Monday.")

    @staticmethod
    def week_window(start_date: date, timezone: str = "UTC") -> tuple[DateTime, DateTime]:
        """Return [start_date 00:00, start_date + 7 days 00:00) in ``timezone``."""
        week_start = pendulum.datetime(start_date.year, start_date.month, start_date.day, tz=timezone)
        return week_start, week_start.add(days=DAYS_IN_WEEK)

    @staticmethod
    def _ensure_valid_hours(shelter: Shelter) -> None:
        if not shelter.has_valid_hours():
            raise InvalidShelterHoursError(
                f"Shelter '{shelter.id}' has invalid hours: opening time ({shelter.opening_time}) "
                f"must be before closing time ({shelter.closing_time})."
            )
