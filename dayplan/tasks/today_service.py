"""Ordered Today list of tasks per date."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dayplan.db.models import Task, TodayTask
from dayplan.tasks.errors import TodayListError


class TodayService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _entry(self, task_id: int, day: date) -> TodayTask | None:
        return self.session.execute(
            select(TodayTask).where(TodayTask.task_id == task_id, TodayTask.date == day)
        ).scalar_one_or_none()

    def is_task_in_today(self, task_id: int, day: date) -> bool:
        return self._entry(task_id, day) is not None

    def add_task(self, task_id: int, day: date) -> TodayTask:
        """Append a task at the end of the date's Today list.

        Raises:
            TodayListError: If the task does not exist or is already listed
                for that date
        """
        if self.session.get(Task, task_id) is None:
            raise TodayListError(f"Task not found: id={task_id}")
        if self.is_task_in_today(task_id, day):
            raise TodayListError()

        max_order = self.session.scalar(select(func.max(TodayTask.display_order)).where(TodayTask.date == day))
        entry = TodayTask(task_id=task_id, date=day, display_order=(max_order or 0) + 1)
        self.session.add(entry)
        self.session.flush()
        logger.info(f"[TASKS] added task id={task_id} to today date={day} order={entry.display_order}")
        return entry

    def remove_task(self, task_id: int, day: date) -> None:
        entry = self._entry(task_id, day)
        if entry is not None:
            self.session.delete(entry)
            self.session.flush()

    def get_tasks(self, day: date) -> list[Task]:
        """Tasks listed for a date, in display order. Deleted tasks are skipped."""
        rows = self.session.execute(
            select(Task)
            .join(TodayTask, TodayTask.task_id == Task.id)
            .where(TodayTask.date == day)
            .order_by(TodayTask.display_order, TodayTask.id)
        ).scalars()
        return list(rows)

    def update_order(self, day: date, task_ids: Sequence[int]) -> None:
        """Renumber the date's entries following task_ids (1-based)."""
        for position, task_id in enumerate(task_ids, start=1):
            entry = self._entry(task_id, day)
            if entry is not None:
                entry.display_order = position
        self.session.flush()
