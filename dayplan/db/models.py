from __future__ import annotations

from datetime import date as date_type
from datetime import datetime, timezone
from datetime import time as time_type

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text, Time, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class TaskFolder(Base):
    """Folder in the task tree.

    Root folders have no parent_folder_id.
    """

    __tablename__ = "task_folders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_folder_id: Mapped[int | None] = mapped_column(ForeignKey("task_folders.id"), nullable=True, index=True)


class Task(Base):
    """Task that plan blocks and actual sessions can be linked to."""

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    folder_id: Mapped[int] = mapped_column(ForeignKey("task_folders.id"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="TODO")  # TODO, DOING, DONE
    color_tag: Mapped[str | None] = mapped_column(String(50), nullable=True)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="MEDIUM")  # LOW, MEDIUM, HIGH, URGENT
    deadline: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    estimate_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))


class TodayTask(Base):
    """Entry of a task in the ordered Today list of a date."""

    __tablename__ = "today_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(ForeignKey("tasks.id"), nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (UniqueConstraint("task_id", "date", name="uq_today_tasks_task_date"),)


class PlanBlock(Base):
    """Planned time block on the plan calendar."""

    __tablename__ = "plan_blocks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    start_time: Mapped[time_type] = mapped_column(Time, nullable=False)
    end_time: Mapped[time_type] = mapped_column(Time, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    linked_task_id: Mapped[int | None] = mapped_column(ForeignKey("tasks.id"), nullable=True)

    __table_args__ = (Index("idx_plan_blocks_date_start", "date", "start_time"),)


class ActualSession(Base):
    """Recorded activity session on the actual calendar."""

    __tablename__ = "actual_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    start_time: Mapped[time_type] = mapped_column(Time, nullable=False)
    end_time: Mapped[time_type] = mapped_column(Time, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    linked_task_id: Mapped[int | None] = mapped_column(ForeignKey("tasks.id"), nullable=True)

    __table_args__ = (Index("idx_actual_sessions_date_start", "date", "start_time"),)
