"""
Calculation of free time blocks from occupied slots.

This is the gap-filling half of the scheduling engine: given what is already
taken on each day, work out what is left inside the operating window.
"""

import logging
from datetime import date, time, timedelta
from typing import Dict, Iterable, List, Set, Tuple

from .models import Slot, SlotStatus, TimeBlock

logger = logging.getLogger(__name__)

DAYS_IN_WEEK = 7

Interval = Tuple[time, time]


class TimeRangeCalculator:
    """
    Computes the free time blocks of a week within shelter opening hours.

    Expects slots that already went through ``SlotNormalizer`` (single-day,
    clamped); they are not re-normalized here.
    """

    def calculate_weekly_available_ranges(
        self,
        occupied: Iterable[Slot],
        opening: time,
        closing: time,
        week_start: date,
    ) -> List[TimeBlock]:
        """
        Calculate every free block for the 7 days starting at ``week_start``.

        Slots with ``AVAILABLE`` status do not occupy time, and slots dated
        outside the week are ignored.

        Returns:
            TimeBlocks ordered by date, then start time. A day without
            occupied slots gets one block covering the whole window; a fully
            booked day gets none.
        """
        week_days = [week_start + timedelta(days=offset) for offset in range(DAYS_IN_WEEK)]
        occupied_by_day = self._group_occupied_by_day(occupied, set(week_days))

        blocks: List[TimeBlock] = []

        for day in week_days:
            blocks.extend(
                self._free_blocks_for_day(
                    day=day,
                    occupied=occupied_by_day.get(day, []),
                    opening=opening,
                    closing=closing,
                )
            )

        logger.debug(
            "Calculated %d free block(s) for week of %s (%d busy day(s))",
            len(blocks),
            week_start,
            len(occupied_by_day),
        )
        return blocks

    def _group_occupied_by_day(
        self,
        occupied: Iterable[Slot],
        week_days: Set[date],
    ) -> Dict[date, List[Interval]]:
        by_day: Dict[date, List[Interval]] = {}

        for slot in occupied:
            if slot.status is SlotStatus.AVAILABLE:
                continue

            day = slot.date
            if day not in week_days:
                continue

            by_day.setdefault(day, []).append((slot.start.time(), slot.end.time()))

        return by_day

    def _free_blocks_for_day(
        self,
        day: date,
        occupied: List[Interval],
        opening: time,
        closing: time,
    ) -> List[TimeBlock]:
        """
        Walk the day's occupied intervals and collect the gaps between them.

        Example:
        Window: 08:00 - 18:00
        Occupied: [09:00-11:00, 10:00-12:00]
        Result: [08:00-09:00, 12:00-18:00]
        """
        if opening >= closing:
            return []

        free: List[TimeBlock] = []
        cursor = opening

        in_window = [
            (start, end) for start, end in occupied
            if end > opening and start < closing
        ]

        for start, end in sorted(in_window, key=lambda interval: interval[0]):
            if start > cursor:
                free.append(TimeBlock(date=day, start=cursor, end=start))

            # Overlapping intervals merge here
            cursor = max(cursor, end)

        if cursor < closing:
            free.append(TimeBlock(date=day, start=cursor, end=closing))

        return free
