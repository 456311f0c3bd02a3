"""Plan block and actual session management with validation.

ScheduleService manages the plan calendar, TrackingService the actual
calendar. Both validate shape, then run the conflict guard against the
same-kind intervals of the date before anything is written.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from loguru import logger

from dayplan.calendar.conflicts import check_no_conflict
from dayplan.calendar.errors import RecordNotFoundError
from dayplan.calendar.intervals import IntervalKind, TimeInterval
from dayplan.calendar.validation import validate_interval_shape
from dayplan.db.interval_repository import IntervalRepository


class IntervalService:
    """Create, update and delete intervals of one kind without overlaps."""

    kind: IntervalKind
    log_prefix: str

    def __init__(self, repository: IntervalRepository) -> None:
        if repository.kind != self.kind:
            raise ValueError(f"{type(self).__name__} needs a {self.kind.value} repository, got {repository.kind.value}")
        self.repository = repository

    def create(self, interval: TimeInterval) -> TimeInterval:
        """Validate and persist a new interval.

        Returns:
            The saved interval carrying its generated id

        Raises:
            IntervalShapeError: If the interval is malformed
            IntervalConflictError: If it overlaps an existing same-kind interval
        """
        candidate = replace(interval, kind=self.kind, id=None)
        validate_interval_shape(candidate)
        check_no_conflict(candidate, self.repository.find_by_date(candidate.date))
        saved = self.repository.save(candidate)
        logger.info(f"[{self.log_prefix}] created id={saved.id} date={saved.date} range={saved.time_range()}")
        return saved

    def update(self, interval: TimeInterval) -> TimeInterval:
        """Validate and persist changes to an existing interval.

        The interval's own prior position is excluded from the conflict check.

        Raises:
            RecordNotFoundError: If the id is missing or unknown
            IntervalShapeError: If the interval is malformed
            IntervalConflictError: If it overlaps another same-kind interval
        """
        if interval.id is None or self.repository.find_by_id(interval.id) is None:
            raise RecordNotFoundError(self.kind, interval.id)

        candidate = replace(interval, kind=self.kind)
        validate_interval_shape(candidate)
        check_no_conflict(candidate, self.repository.find_by_date(candidate.date), exclude_id=candidate.id)
        self.repository.update(candidate)
        logger.info(f"[{self.log_prefix}] updated id={candidate.id} date={candidate.date} range={candidate.time_range()}")
        return candidate

    def get(self, interval_id: int) -> TimeInterval | None:
        return self.repository.find_by_id(interval_id)

    def list_for_date(self, day: date) -> list[TimeInterval]:
        return self.repository.find_by_date(day)

    def delete(self, interval_id: int) -> None:
        self.repository.delete(interval_id)
        logger.info(f"[{self.log_prefix}] deleted id={interval_id}")


class ScheduleService(IntervalService):
    """Plan blocks: when the user intends to do something."""

    kind = IntervalKind.PLAN
    log_prefix = "SCHEDULE"


class TrackingService(IntervalService):
    """Actual sessions: what the user really did."""

    kind = IntervalKind.ACTUAL
    log_prefix = "TRACKING"
