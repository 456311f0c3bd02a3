"""Plan-vs-actual reconciliation statistics.

Compares a day's plan blocks with its actual sessions and produces:
- planned, actual and overlap minutes
- quantitative accuracy: completed volume vs planned volume, ignoring timing
- temporal accuracy: share of planned windows actually covered

Day-level and per linked task. Read-only and deterministic: the same inputs
always produce equal results.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from datetime import date as date_type

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from dayplan.calendar.intervals import TimeInterval, overlap_minutes


class DailyStatistics(BaseModel):
    """Reconciliation statistics for one calendar day."""

    model_config = ConfigDict(frozen=True)

    date: date_type
    planned_minutes: int = Field(default=0, ge=0)
    actual_minutes: int = Field(default=0, ge=0)
    overlap_minutes: int = Field(default=0, ge=0)
    quantitative_accuracy: float = Field(default=0.0, ge=0.0)
    # Not capped: a value above 1.0 signals overlapping same-kind input.
    temporal_accuracy: float = Field(default=0.0, ge=0.0)


class TaskStats(BaseModel):
    """Reconciliation statistics restricted to one linked task."""

    model_config = ConfigDict(frozen=True)

    planned_minutes: int = Field(default=0, ge=0)
    actual_minutes: int = Field(default=0, ge=0)
    overlap_minutes: int = Field(default=0, ge=0)


def total_minutes(intervals: Sequence[TimeInterval]) -> int:
    return sum(interval.duration_minutes for interval in intervals)


def total_overlap_minutes(plan_blocks: Sequence[TimeInterval], actual_sessions: Sequence[TimeInterval]) -> int:
    """All-pairs overlap sum between plan blocks and actual sessions.

    An actual session spanning several plan blocks contributes once per block.
    Pairs on different dates contribute nothing.
    """
    return sum(overlap_minutes(block, session) for block in plan_blocks for session in actual_sessions)


def quantitative_accuracy(planned: int, actual: int) -> float:
    if planned == 0:
        return 0.0
    return min(actual, planned) / planned


def temporal_accuracy(planned: int, overlap: int) -> float:
    if planned == 0:
        return 0.0
    return overlap / planned


def compute_daily_statistics(
    day: date_type,
    plan_blocks: Sequence[TimeInterval],
    actual_sessions: Sequence[TimeInterval],
) -> DailyStatistics:
    """Reconcile a day's plan collection against its actual collection.

    Args:
        day: Calendar day the statistics belong to
        plan_blocks: All plan blocks for the day
        actual_sessions: All actual sessions for the day

    Returns:
        DailyStatistics; all zeros when nothing was planned or tracked
    """
    planned = total_minutes(plan_blocks)
    actual = total_minutes(actual_sessions)
    overlap = total_overlap_minutes(plan_blocks, actual_sessions)

    stats = DailyStatistics(
        date=day,
        planned_minutes=planned,
        actual_minutes=actual,
        overlap_minutes=overlap,
        quantitative_accuracy=quantitative_accuracy(planned, actual),
        temporal_accuracy=temporal_accuracy(planned, overlap),
    )

    if stats.temporal_accuracy > 1.0:
        logger.warning(
            f"[STATS] date={day} temporal_accuracy={stats.temporal_accuracy:.2f} exceeds 1.0; "
            "same-kind intervals overlap in the input"
        )

    logger.debug(
        f"[STATS] date={day} planned={planned} actual={actual} overlap={overlap} "
        f"quantitative={stats.quantitative_accuracy:.2f} temporal={stats.temporal_accuracy:.2f}"
    )
    return stats


def compute_task_statistics(
    plan_blocks: Sequence[TimeInterval],
    actual_sessions: Sequence[TimeInterval],
) -> dict[int, TaskStats]:
    """Per-task statistics for intervals linked to a task.

    Unlinked intervals are dropped. Overlap is counted only between a task's
    own plan blocks and its own actual sessions.

    Returns:
        Mapping of task ID to TaskStats, one entry per task referenced by at
        least one plan block or actual session
    """
    plans_by_task: dict[int, list[TimeInterval]] = defaultdict(list)
    actuals_by_task: dict[int, list[TimeInterval]] = defaultdict(list)

    for block in plan_blocks:
        if block.linked_task_id is not None:
            plans_by_task[block.linked_task_id].append(block)
    for session in actual_sessions:
        if session.linked_task_id is not None:
            actuals_by_task[session.linked_task_id].append(session)

    task_ids = list(plans_by_task)
    task_ids.extend(task_id for task_id in actuals_by_task if task_id not in plans_by_task)

    return {
        task_id: TaskStats(
            planned_minutes=total_minutes(plans_by_task.get(task_id, [])),
            actual_minutes=total_minutes(actuals_by_task.get(task_id, [])),
            overlap_minutes=total_overlap_minutes(plans_by_task.get(task_id, []), actuals_by_task.get(task_id, [])),
        )
        for task_id in task_ids
    }
