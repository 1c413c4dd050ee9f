"""Gap finding over a day's occupied intervals."""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from daywise.logger import get_logger

from .config import SchedulingConfig
from .core import Interval, SlotKind, SlotMatch
from .timeutils import format_iso_datetime, minutes_between

logger = get_logger()


@dataclass(frozen=True)
class FreeWindow:
    """A reportable free span inside the working window."""

    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> int:
        return math.floor(minutes_between(self.start, self.end))

    def to_payload(self) -> dict[str, Any]:
        return {
            "startTime": format_iso_datetime(self.start),
            "endTime": format_iso_datetime(self.end),
            "durationMinutes": self.duration_minutes,
        }


def find_first_fit(  # noqa: PLR0913 - mirrors the per-day inputs of the placement loop
    day_intervals: Iterable[Interval],
    work_start: datetime,
    work_end: datetime,
    duration: timedelta,
    buffer: timedelta,
    earliest: datetime | None = None,
) -> SlotMatch | None:
    """Find the earliest gap on one day that holds ``duration``.

    Walks the intervals in start order with a cursor that begins at the later of
    ``work_start`` and ``earliest``. Each gap runs from the cursor to the next
    interval's start minus ``buffer`` (never past ``work_end``). The cursor then
    jumps to that interval's end plus ``buffer`` and never moves backwards, so
    nested or overlapping intervals cannot reopen occupied time.

    Args:
        day_intervals: Occupied intervals filed under this day
        work_start: Start of the working window
        work_end: End of the working window
        duration: Length of the task to place
        buffer: Minimum gap kept on both sides of every occupied interval
        earliest: Optional lower bound for the task start on this day

    Returns:
        The chosen slot (task placed at the start of the gap), or None
    """
    cursor = work_start if earliest is None else max(work_start, earliest)
    ordered = sorted(day_intervals, key=lambda interval: interval.start)

    if not ordered:
        if cursor + duration <= work_end:
            return SlotMatch(
                start=cursor,
                end=cursor + duration,
                kind=SlotKind.START_OF_DAY,
                available_minutes=math.floor(minutes_between(cursor, work_end)),
            )
        return None

    for interval in ordered:
        gap_end = min(interval.start - buffer, work_end)
        if gap_end - cursor >= duration:
            return SlotMatch(
                start=cursor,
                end=cursor + duration,
                kind=SlotKind.GAP_BEFORE_EVENT,
                available_minutes=math.floor(minutes_between(cursor, gap_end)),
                before_title=interval.title,
            )
        logger.debug(
            f"      gap before '{interval.title}' too short "
            f"({minutes_between(cursor, gap_end):.0f} min)"
        )
        cursor = max(cursor, interval.end + buffer)

    if cursor + duration <= work_end:
        return SlotMatch(
            start=cursor,
            end=cursor + duration,
            kind=SlotKind.AFTER_LAST_EVENT,
            available_minutes=math.floor(minutes_between(cursor, work_end)),
        )
    return None


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """Merge overlapping or touching intervals into a sorted, disjoint list."""
    ordered = sorted(intervals, key=lambda interval: interval.start)
    if not ordered:
        return []

    merged: list[Interval] = [ordered[0]]
    for interval in ordered[1:]:
        last = merged[-1]
        if interval.start <= last.end:
            merged[-1] = Interval(last.start, max(last.end, interval.end), last.title)
        else:
            merged.append(interval)
    return merged


def find_free_windows(
    work_start: datetime,
    work_end: datetime,
    buffer: timedelta,
    intervals: Iterable[Interval],
    min_minutes: int | None = None,
) -> list[FreeWindow]:
    """Report free windows in one working window.

    Busy intervals that do not touch the window are ignored; the rest are merged
    before gaps are measured. Windows shorter than ``min_minutes`` are dropped;
    it defaults to ``SchedulingConfig.min_free_window_minutes``.
    """
    if min_minutes is None:
        min_minutes = SchedulingConfig().min_free_window_minutes
    minimum = timedelta(minutes=min_minutes)
    busy = merge_intervals(
        interval
        for interval in intervals
        if interval.start < work_end and interval.end > work_start
    )

    windows: list[FreeWindow] = []
    cursor = work_start
    for interval in busy:
        free_end = interval.start - buffer
        if free_end - cursor >= minimum:
            windows.append(FreeWindow(cursor, free_end))
        cursor = max(cursor, interval.end + buffer)

    if work_end - cursor >= minimum:
        windows.append(FreeWindow(cursor, work_end))
    return windows
