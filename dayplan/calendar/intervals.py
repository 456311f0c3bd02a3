"""Time-interval primitive shared by plan blocks and actual sessions.

All clock arithmetic for the calendar lives here:
- TimeInterval: the shape of a plan block or an actual session
- duration_minutes: length of one interval
- intervals_overlap: boolean overlap predicate used by the conflict guard
- overlap_minutes: overlap magnitude used by the statistics engine

Pure functions, no database access.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import StrEnum


class IntervalKind(StrEnum):
    """Which day-scoped collection an interval belongs to."""

    PLAN = "plan"
    ACTUAL = "actual"


@dataclass(frozen=True)
class TimeInterval:
    """A labelled time range on a single calendar day.

    Plan blocks and actual sessions share this shape. Same-kind intervals on
    the same date must be disjoint; a plan block and an actual session are
    expected to overlap.
    """

    date: date | None
    start: time | None
    end: time | None
    label: str | None
    kind: IntervalKind = IntervalKind.PLAN
    category: str | None = None
    linked_task_id: int | None = None
    id: int | None = None

    @property
    def duration_minutes(self) -> int:
        return duration_minutes(self.start, self.end)

    def with_id(self, interval_id: int) -> TimeInterval:
        return replace(self, id=interval_id)

    def time_range(self) -> str:
        """Render as HH:MM - HH:MM."""
        return f"{_format_time(self.start)} - {_format_time(self.end)}"

    def calendar_line(self) -> str:
        """Render as HH:MM-HH:MM: label (insight payload format)."""
        return f"{_format_time(self.start)}-{_format_time(self.end)}: {self.label}"


def _format_time(value: time | None) -> str:
    if value is None:
        return "--:--"
    return value.strftime("%H:%M")


def _minutes_between(start: time, end: time) -> int:
    # Anchor both on the same day; whole minutes, truncated toward zero.
    delta = datetime.combine(date.min, end) - datetime.combine(date.min, start)
    return int(delta.total_seconds() / 60)


def duration_minutes(start: time | None, end: time | None) -> int:
    """Length of [start, end) in whole minutes.

    0 when either bound is missing or the range is inverted.
    """
    if start is None or end is None:
        return 0
    return max(0, _minutes_between(start, end))


def ranges_overlap(start1: time, end1: time, start2: time, end2: time) -> bool:
    """Check if two half-open time ranges overlap.

    Ranges that merely touch (end1 == start2) are adjacent, not overlapping.
    """
    return start1 < end2 and start2 < end1


def intervals_overlap(first: TimeInterval, second: TimeInterval) -> bool:
    """Overlap predicate for two intervals on the same date."""
    if first.date != second.date:
        return False
    if first.start is None or first.end is None or second.start is None or second.end is None:
        return False
    return ranges_overlap(first.start, first.end, second.start, second.end)


def overlap_minutes(first: TimeInterval, second: TimeInterval) -> int:
    """Minutes during which both intervals hold, 0 when they do not overlap."""
    if not intervals_overlap(first, second):
        return 0
    overlap_start = max(first.start, second.start)  # type: ignore[type-var]
    overlap_end = min(first.end, second.end)  # type: ignore[type-var]
    return max(0, _minutes_between(overlap_start, overlap_end))
