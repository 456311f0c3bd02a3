"""Calendar validation errors.

Both errors are local validation failures, not transient faults: re-submitting
the same interval yields the same error, so callers never retry them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dayplan.calendar.intervals import IntervalKind, TimeInterval

_KIND_NOUNS = {
    "plan": ("Plan block", "block"),
    "actual": ("Session", "session"),
}


def kind_nouns(kind: IntervalKind | str) -> tuple[str, str]:
    """Return (subject, object) nouns used in messages for an interval kind."""
    return _KIND_NOUNS.get(str(kind), ("Interval", "interval"))


class IntervalValidationError(ValueError):
    """Base class for interval validation failures."""


class IntervalShapeError(IntervalValidationError):
    """Raised when an interval is malformed (missing fields, bad range, blank label).

    Attributes:
        code: Machine-readable reason (MISSING_DATE, MISSING_TIMES, INVALID_RANGE, MISSING_LABEL)
        message: Human-readable message
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(self.message)


class IntervalConflictError(IntervalValidationError):
    """Raised when a candidate overlaps an existing same-kind interval.

    Attributes:
        candidate: Interval that was rejected
        conflicting: First existing interval found to overlap the candidate
    """

    def __init__(self, candidate: TimeInterval, conflicting: TimeInterval):
        self.candidate = candidate
        self.conflicting = conflicting
        subject, obj = kind_nouns(conflicting.kind)
        self.message = (
            f"{subject} overlaps with existing {obj}: {conflicting.label} ({conflicting.time_range()})"
        )
        super().__init__(self.message)


class RecordNotFoundError(LookupError):
    """Raised when an interval id does not exist in the record store."""

    def __init__(self, kind: IntervalKind | str, record_id: int | None):
        self.kind = kind
        self.record_id = record_id
        subject, _ = kind_nouns(kind)
        self.message = f"{subject} not found: id={record_id}"
        super().__init__(self.message)
