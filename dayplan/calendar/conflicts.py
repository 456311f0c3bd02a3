"""Conflict detection for day-scoped interval collections.

Keeps the plan collection and the actual collection each free of overlaps
per date. Plan blocks are never checked against actual sessions; that overlap
is what the statistics engine measures.

Pure functions, no database mutation. The check-then-insert sequence done by
callers is not atomic; one writer per date is assumed.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from dayplan.calendar.errors import IntervalConflictError
from dayplan.calendar.intervals import TimeInterval, intervals_overlap


def find_conflict(
    candidate: TimeInterval,
    existing: Iterable[TimeInterval],
    exclude_id: int | None = None,
) -> TimeInterval | None:
    """Return the first existing interval overlapping the candidate.

    Two intervals [s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1.
    Touching intervals are adjacent and accepted. Intervals on another date
    never conflict.

    Args:
        candidate: Interval to check (shape already validated)
        existing: Same-kind intervals already committed for the candidate's date
        exclude_id: ID to skip, so an interval can move without hitting its
            own prior position (update path)

    Returns:
        First conflicting interval in scan order, or None
    """
    for other in existing:
        if exclude_id is not None and other.id == exclude_id:
            continue
        if intervals_overlap(candidate, other):
            return other
    return None


def check_no_conflict(
    candidate: TimeInterval,
    existing: Iterable[TimeInterval],
    exclude_id: int | None = None,
) -> None:
    """Raise if the candidate overlaps an existing same-kind interval.

    Raises:
        IntervalConflictError: Carrying the first offending interval
    """
    conflicting = find_conflict(candidate, existing, exclude_id=exclude_id)
    if conflicting is None:
        return

    logger.info(
        f"[CONFLICT] kind={candidate.kind.value} date={candidate.date} "
        f"candidate={candidate.time_range()} existing_id={conflicting.id} "
        f"existing={conflicting.time_range()}"
    )
    raise IntervalConflictError(candidate, conflicting)
