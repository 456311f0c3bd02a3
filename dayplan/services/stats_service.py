"""Loads a day's interval snapshots and hands them to the statistics engine."""

from __future__ import annotations

from datetime import date

from dayplan.calendar.intervals import IntervalKind, TimeInterval
from dayplan.db.interval_repository import IntervalRepository
from dayplan.metrics.daily_statistics import (
    DailyStatistics,
    TaskStats,
    compute_daily_statistics,
    compute_task_statistics,
)


class StatsService:
    """Plan-vs-actual statistics for a date, read from the record store."""

    def __init__(self, plan_repository: IntervalRepository, actual_repository: IntervalRepository) -> None:
        if plan_repository.kind != IntervalKind.PLAN or actual_repository.kind != IntervalKind.ACTUAL:
            raise ValueError("StatsService needs a plan repository and an actual repository")
        self.plan_repository = plan_repository
        self.actual_repository = actual_repository

    def get_plan_blocks(self, day: date) -> list[TimeInterval]:
        return self.plan_repository.find_by_date(day)

    def get_actual_sessions(self, day: date) -> list[TimeInterval]:
        return self.actual_repository.find_by_date(day)

    def compute_daily_stats(self, day: date) -> DailyStatistics:
        return compute_daily_statistics(
            day,
            tuple(self.get_plan_blocks(day)),
            tuple(self.get_actual_sessions(day)),
        )

    def compute_task_stats(self, day: date) -> dict[int, TaskStats]:
        return compute_task_statistics(
            tuple(self.get_plan_blocks(day)),
            tuple(self.get_actual_sessions(day)),
        )
