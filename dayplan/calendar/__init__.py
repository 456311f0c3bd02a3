"""Calendar interval model, shape validation and conflict guard.

Plan blocks and actual sessions share the TimeInterval shape; each kind is
kept overlap-free per date by the conflict guard.
"""

from dayplan.calendar.conflicts import check_no_conflict, find_conflict
from dayplan.calendar.errors import (
    IntervalConflictError,
    IntervalShapeError,
    IntervalValidationError,
    RecordNotFoundError,
)
from dayplan.calendar.intervals import (
    IntervalKind,
    TimeInterval,
    duration_minutes,
    intervals_overlap,
    overlap_minutes,
)
from dayplan.calendar.validation import validate_interval_shape

__all__ = [
    "IntervalConflictError",
    "IntervalKind",
    "IntervalShapeError",
    "IntervalValidationError",
    "RecordNotFoundError",
    "TimeInterval",
    "check_no_conflict",
    "duration_minutes",
    "find_conflict",
    "intervals_overlap",
    "overlap_minutes",
    "validate_interval_shape",
]
