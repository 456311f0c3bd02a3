"""Shape validation for plan blocks and actual sessions.

Runs before the conflict guard is consulted.
"""

from __future__ import annotations

from dayplan.calendar.errors import IntervalShapeError, kind_nouns
from dayplan.calendar.intervals import TimeInterval


def validate_interval_shape(interval: TimeInterval) -> None:
    """Validate date, time range and label of an interval.

    Args:
        interval: Candidate plan block or actual session

    Raises:
        IntervalShapeError: If the date or times are missing, end is not after
            start, or the label is blank
    """
    subject, _ = kind_nouns(interval.kind)

    if interval.date is None:
        raise IntervalShapeError("MISSING_DATE", f"{subject} date is required")
    if interval.start is None or interval.end is None:
        raise IntervalShapeError("MISSING_TIMES", f"{subject} start and end times are required")
    if not interval.end > interval.start:
        raise IntervalShapeError("INVALID_RANGE", "End time must be after start time")
    if interval.label is None or not interval.label.strip():
        raise IntervalShapeError("MISSING_LABEL", f"{subject} title is required")
