"""
Normalization of raw slots into day-bounded, in-hours segments.

Pure domain logic: no I/O, no shared state. Malformed records are dropped
rather than reported, so a single bad row never hides a whole week.
"""

import logging
import uuid
from dataclasses import replace
from datetime import time
from typing import Iterable, Iterator, List

from pendulum import DateTime

from .models import NormalizedSlots, Slot

logger = logging.getLogger(__name__)


class SlotNormalizer:
    """
    Adjusts raw slots so each one fits a single day's operating window.

    Algorithm:
    1. Split slots spanning several calendar days into one segment per day
    2. Clamp each segment to [opening, closing] on its own date
    3. Drop segments left empty (or inverted) by the clamp
    4. Sort by date, then start time; equal starts keep input order
    """

    def normalize(
        self,
        slots: Iterable[Slot],
        opening: time,
        closing: time,
    ) -> NormalizedSlots:
        """
        Normalize slots against the shelter's daily opening hours.

        Args:
            slots: Raw slots, in any order, possibly spanning several days
            opening: Daily opening time of the shelter
            closing: Daily closing time of the shelter

        Returns:
            NormalizedSlots whose segments all satisfy
            ``start.date() == end.date()`` and lie within the window
        """
        segments: List[Slot] = []
        received = 0

        for slot in slots:
            received += 1
            for segment in self._split_multi_day(slot):
                clamped = self._clamp(segment, opening, closing)
                if clamped.start < clamped.end:
                    segments.append(clamped)

        # sorted() is stable, which gives the input-order tie-break
        ordered = sorted(segments, key=lambda s: (s.start.date(), s.start.time()))

        logger.debug("Normalized %d raw slot(s) into %d segment(s)", received, len(ordered))
        return NormalizedSlots(slots=tuple(ordered))

    def _split_multi_day(self, slot: Slot) -> Iterator[Slot]:
        """
        Yield one segment per calendar day touched by the slot.

        Single-day slots are yielded unchanged. Split segments get new ids;
        the first keeps the original start, later ones start at midnight,
        and all but the last end at the end of their day.
        """
        start_day = slot.start.date()
        end_day = slot.end.date()

        if start_day == end_day:
            yield slot
            return

        current_start = slot.start

        while current_start.date() <= end_day:
            if current_start.date() == end_day:
                segment_end = slot.end
            else:
                segment_end = current_start.end_of("day")

            yield replace(slot, id=str(uuid.uuid4()), start=current_start, end=segment_end)

            current_start = current_start.add(days=1).start_of("day")

    def _clamp(self, slot: Slot, opening: time, closing: time) -> Slot:
        """Clamp start/end to the operating window on the slot's start date."""
        opens_at = self._at(slot.start, opening)
        closes_at = self._at(slot.start, closing)

        clamped_start = max(slot.start, opens_at)
        clamped_end = min(slot.end, closes_at)

        if clamped_start == slot.start and clamped_end == slot.end:
            return slot

        return replace(slot, start=clamped_start, end=clamped_end)

    @staticmethod
    def _at(day: DateTime, time_of_day: time) -> DateTime:
        return day.set(
            hour=time_of_day.hour,
            minute=time_of_day.minute,
            second=time_of_day.second,
            microsecond=time_of_day.microsecond,
        )
