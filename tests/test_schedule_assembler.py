"""
Tests for weekly schedule assembly.
"""

import pendulum
from datetime import date, time

from shelterschedule.domain.models import (
    Animal,
    Shelter,
    TimeBlock,
    activity_slot,
    shelter_unavailability_slot,
)
from shelterschedule.domain.schedule_assembler import ScheduleAssembler

TZ = "Europe/Lisbon"


def _animal(with_shelter: bool = True) -> Animal:
    shelter = Shelter(id="s1", name="Abrigo", opening_time=time(9), closing_time=time(18)) if with_shelter else None
    return Animal(id="a1", name="Bolinhas", shelter_id="s1", shelter=shelter)


class TestScheduleAssembler:
    """Tests for ScheduleAssembler."""

    def setup_method(self):
        self.assembler = ScheduleAssembler()

    def test_empty_inputs_produce_seven_empty_days(self):
        """Test the week always has 7 consecutive days."""
        schedule = self.assembler.assemble_week_schedule([], [], [], _animal(), date(2025, 1, 6))

        assert len(schedule.week_schedule) == 7
        assert [d.date for d in schedule.week_schedule] == [date(2025, 1, 6 + i) for i in range(7)]
        for daily in schedule.week_schedule:
            assert daily.available_slots == []
            assert daily.reserved_slots == []
            assert daily.unavailable_slots == []

    def test_groups_items_by_date(self):
        reserved = activity_slot(
            pendulum.parse("2025-01-07 10:00", tz=TZ),
            pendulum.parse("2025-01-07 11:00", tz=TZ),
            activity_id="act",
        )
        closed = shelter_unavailability_slot(
            pendulum.parse("2025-01-09 09:00", tz=TZ),
            pendulum.parse("2025-01-09 12:00", tz=TZ),
            shelter_id="s1",
        )
        free = [
            TimeBlock(date=date(2025, 1, 7), start=time(9), end=time(10)),
            TimeBlock(date=date(2025, 1, 7), start=time(11), end=time(18)),
        ]

        schedule = self.assembler.assemble_week_schedule([reserved], [closed], free, _animal(), date(2025, 1, 6))

        tuesday = schedule.week_schedule[1]
        thursday = schedule.week_schedule[3]

        assert tuesday.reserved_slots == [reserved]
        assert tuesday.available_slots == free
        assert thursday.unavailable_slots == [closed]
        assert schedule.week_schedule[0].reserved_slots == []

    def test_items_outside_week_are_not_placed(self):
        stray = TimeBlock(date=date(2025, 1, 20), start=time(9), end=time(10))

        schedule = self.assembler.assemble_week_schedule([], [], [stray], _animal(), date(2025, 1, 6))

        assert all(d.available_slots == [] for d in schedule.week_schedule)

    def test_shelter_is_taken_from_animal(self):
        animal = _animal()

        schedule = self.assembler.assemble_week_schedule([], [], [], animal, date(2025, 1, 6))

        assert schedule.animal is animal
        assert schedule.shelter is animal.shelter
        assert schedule.start_date == date(2025, 1, 6)

    def test_missing_shelter_is_kept_as_none(self):
        schedule = self.assembler.assemble_week_schedule([], [], [], _animal(with_shelter=False), date(2025, 1, 6))

        assert schedule.shelter is None
        assert len(schedule.week_schedule) == 7
