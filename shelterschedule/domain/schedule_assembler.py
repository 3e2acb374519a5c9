"""
Assembly of the per-animal weekly schedule.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, TypeVar

from .models import Animal, AnimalWeeklySchedule, DailySchedule, Slot, TimeBlock
from .time_range_calculator import DAYS_IN_WEEK

T = TypeVar("T")


class ScheduleAssembler:
    """
    Combines reserved, unavailable and available intervals into 7 days.

    Pure aggregation: nothing is filtered, sorted or validated here.
    """

    def assemble_week_schedule(
        self,
        reserved_slots: Iterable[Slot],
        unavailable_slots: Iterable[Slot],
        available_slots: Iterable[TimeBlock],
        animal: Animal,
        start_date: date,
    ) -> AnimalWeeklySchedule:
        """
        Build the weekly schedule for ``animal`` starting on ``start_date``.

        Always yields exactly 7 DailySchedule entries in ascending date
        order, each with three (possibly empty) lists.
        """
        available_by_day = self._group_by_day(available_slots, lambda block: block.date)
        reserved_by_day = self._group_by_day(reserved_slots, lambda slot: slot.date)
        unavailable_by_day = self._group_by_day(unavailable_slots, lambda slot: slot.date)

        schedule = AnimalWeeklySchedule(
            animal=animal,
            shelter=animal.shelter,
            start_date=start_date,
        )

        for offset in range(DAYS_IN_WEEK):
            day = start_date + timedelta(days=offset)
            schedule.week_schedule.append(
                DailySchedule(
                    date=day,
                    available_slots=available_by_day.get(day, []),
                    reserved_slots=reserved_by_day.get(day, []),
                    unavailable_slots=unavailable_by_day.get(day, []),
                )
            )

        return schedule

    @staticmethod
    def _group_by_day(items: Iterable[T], day_of) -> Dict[date, List[T]]:
        grouped: Dict[date, List[T]] = {}
        for item in items:
            grouped.setdefault(day_of(item), []).append(item)
        return grouped
