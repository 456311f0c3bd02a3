"""Record store for plan blocks and actual sessions.

Services depend on the IntervalRepository protocol; SqlIntervalRepository is
the SQLAlchemy implementation backed by either interval table. Rows are
converted to immutable TimeInterval snapshots at this boundary so the
calendar engine never sees ORM objects.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from dayplan.calendar.errors import RecordNotFoundError
from dayplan.calendar.intervals import IntervalKind, TimeInterval
from dayplan.db.models import ActualSession, PlanBlock

IntervalRow = PlanBlock | ActualSession

_MODEL_BY_KIND: dict[IntervalKind, type[IntervalRow]] = {
    IntervalKind.PLAN: PlanBlock,
    IntervalKind.ACTUAL: ActualSession,
}


class IntervalRepository(Protocol):
    """Capabilities the interval services need from a record store."""

    kind: IntervalKind

    def find_by_date(self, day: date) -> list[TimeInterval]: ...

    def find_by_id(self, interval_id: int) -> TimeInterval | None: ...

    def save(self, interval: TimeInterval) -> TimeInterval: ...

    def update(self, interval: TimeInterval) -> None: ...

    def delete(self, interval_id: int) -> None: ...


def row_to_interval(row: IntervalRow, kind: IntervalKind) -> TimeInterval:
    return TimeInterval(
        id=row.id,
        date=row.date,
        start=row.start_time,
        end=row.end_time,
        label=row.title,
        kind=kind,
        category=row.category,
        linked_task_id=row.linked_task_id,
    )


def _apply_interval(row: IntervalRow, interval: TimeInterval) -> None:
    row.date = interval.date
    row.start_time = interval.start
    row.end_time = interval.end
    row.title = interval.label
    row.category = interval.category
    row.linked_task_id = interval.linked_task_id


class SqlIntervalRepository:
    """SQLAlchemy-backed interval store for one kind (plan or actual)."""

    def __init__(self, session: Session, kind: IntervalKind) -> None:
        self.session = session
        self.kind = kind
        self.model = _MODEL_BY_KIND[kind]

    def find_by_date(self, day: date) -> list[TimeInterval]:
        """All intervals of this kind on a date, ordered by start time."""
        rows = self.session.execute(
            select(self.model).where(self.model.date == day).order_by(self.model.start_time, self.model.id)
        ).scalars()
        return [row_to_interval(row, self.kind) for row in rows]

    def find_by_id(self, interval_id: int) -> TimeInterval | None:
        row = self.session.get(self.model, interval_id)
        if row is None:
            return None
        return row_to_interval(row, self.kind)

    def save(self, interval: TimeInterval) -> TimeInterval:
        """Insert a new row and return the interval with its generated id."""
        row = self.model()
        _apply_interval(row, interval)
        self.session.add(row)
        self.session.flush()
        logger.debug(f"Saved {self.kind.value} interval id={row.id} date={row.date}")
        return interval.with_id(row.id)

    def update(self, interval: TimeInterval) -> None:
        row = self.session.get(self.model, interval.id) if interval.id is not None else None
        if row is None:
            raise RecordNotFoundError(self.kind, interval.id)
        _apply_interval(row, interval)
        self.session.flush()

    def delete(self, interval_id: int) -> None:
        row = self.session.get(self.model, interval_id)
        if row is None:
            raise RecordNotFoundError(self.kind, interval_id)
        self.session.delete(row)
        self.session.flush()
