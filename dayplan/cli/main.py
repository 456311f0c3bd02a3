"""dayplan CLI.

Plan the day, track what actually happened, and reconcile the two.
Tasks live in folders; plan blocks and sessions can link to a task, and each
date has an ordered Today list of tasks.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from dayplan.calendar.errors import IntervalValidationError, RecordNotFoundError
from dayplan.calendar.intervals import IntervalKind, TimeInterval
from dayplan.core.logger import setup_logger
from dayplan.db.interval_repository import SqlIntervalRepository
from dayplan.db.models import Task
from dayplan.db.session import get_session, init_db
from dayplan.integrations.insights.client import InsightsClient
from dayplan.services.interval_service import IntervalService, ScheduleService, TrackingService
from dayplan.services.stats_service import StatsService
from dayplan.tasks.errors import FolderNotEmptyError, TaskValidationError, TodayListError
from dayplan.tasks.folder_service import FolderService
from dayplan.tasks.task_service import Priority, TaskService, TaskStatus
from dayplan.tasks.today_service import TodayService

console = Console()

app = typer.Typer(
    name="dayplan",
    help="Reconcile planned time blocks against actual sessions",
    add_completion=False,
)
plan_app = typer.Typer(help="Manage plan blocks")
track_app = typer.Typer(help="Manage actual sessions")
folder_app = typer.Typer(help="Manage task folders")
task_app = typer.Typer(help="Manage tasks")
today_app = typer.Typer(help="Manage the Today list of a date")
app.add_typer(plan_app, name="plan")
app.add_typer(track_app, name="track")
app.add_typer(folder_app, name="folder")
app.add_typer(task_app, name="task")
app.add_typer(today_app, name="today")

_SERVICES: dict[IntervalKind, Callable[[SqlIntervalRepository], IntervalService]] = {
    IntervalKind.PLAN: ScheduleService,
    IntervalKind.ACTUAL: TrackingService,
}


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Loguru level (defaults to LOG_LEVEL)"),
) -> None:
    setup_logger(level=log_level)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value!r}") from e


def _parse_time(value: str) -> time:
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError as e:
        raise typer.BadParameter(f"Expected HH:MM, got {value!r}") from e


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(code=1)


def _build_interval(
    kind: IntervalKind,
    day: str,
    start: str,
    end: str,
    title: str,
    category: str | None,
    task_id: int | None,
    interval_id: int | None = None,
) -> TimeInterval:
    return TimeInterval(
        date=_parse_date(day),
        start=_parse_time(start),
        end=_parse_time(end),
        label=title,
        kind=kind,
        category=category,
        linked_task_id=task_id,
        id=interval_id,
    )


def _add_interval(kind: IntervalKind, interval: TimeInterval) -> None:
    try:
        with get_session() as session:
            saved = _SERVICES[kind](SqlIntervalRepository(session, kind)).create(interval)
    except IntervalValidationError as e:
        _fail(str(e))
    else:
        console.print(f"[green]Saved[/green] #{saved.id} {saved.date} {saved.time_range()} {saved.label}")


def _update_interval(kind: IntervalKind, interval: TimeInterval) -> None:
    try:
        with get_session() as session:
            updated = _SERVICES[kind](SqlIntervalRepository(session, kind)).update(interval)
    except (IntervalValidationError, RecordNotFoundError) as e:
        _fail(str(e))
    else:
        console.print(f"[green]Updated[/green] #{updated.id} {updated.date} {updated.time_range()} {updated.label}")


def _list_intervals(kind: IntervalKind, day: str) -> None:
    with get_session() as session:
        intervals = _SERVICES[kind](SqlIntervalRepository(session, kind)).list_for_date(_parse_date(day))

    table = Table(title=f"{'Plan' if kind == IntervalKind.PLAN else 'Actual'} calendar {day}")
    table.add_column("ID", justify="right")
    table.add_column("Time")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Task", justify="right")
    for interval in intervals:
        table.add_row(
            str(interval.id),
            interval.time_range(),
            interval.label or "",
            interval.category or "",
            "" if interval.linked_task_id is None else str(interval.linked_task_id),
        )
    console.print(table)


def _delete_interval(kind: IntervalKind, interval_id: int) -> None:
    try:
        with get_session() as session:
            _SERVICES[kind](SqlIntervalRepository(session, kind)).delete(interval_id)
    except RecordNotFoundError as e:
        _fail(str(e))
    else:
        console.print(f"[green]Deleted[/green] #{interval_id}")


@app.command("init-db")
def init_db_command() -> None:
    """Create database tables."""
    init_db()
    console.print("[green]Database ready[/green]")


@plan_app.command("add")
def plan_add(
    day: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    start: str = typer.Argument(..., help="Start time (HH:MM)"),
    end: str = typer.Argument(..., help="End time (HH:MM)"),
    title: str = typer.Argument(..., help="Block title"),
    category: str | None = typer.Option(None, "--category", "-c"),
    task_id: int | None = typer.Option(None, "--task-id", "-t", help="Linked task ID"),
) -> None:
    """Add a plan block."""
    _add_interval(IntervalKind.PLAN, _build_interval(IntervalKind.PLAN, day, start, end, title, category, task_id))


@plan_app.command("update")
def plan_update(
    interval_id: int = typer.Argument(..., help="Plan block ID"),
    day: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    start: str = typer.Argument(..., help="Start time (HH:MM)"),
    end: str = typer.Argument(..., help="End time (HH:MM)"),
    title: str = typer.Argument(..., help="Block title"),
    category: str | None = typer.Option(None, "--category", "-c"),
    task_id: int | None = typer.Option(None, "--task-id", "-t", help="Linked task ID"),
) -> None:
    """Move or rename a plan block."""
    interval = _build_interval(IntervalKind.PLAN, day, start, end, title, category, task_id, interval_id)
    _update_interval(IntervalKind.PLAN, interval)


@plan_app.command("list")
def plan_list(day: str = typer.Argument(..., help="Date (YYYY-MM-DD)")) -> None:
    """List plan blocks for a date."""
    _list_intervals(IntervalKind.PLAN, day)


@plan_app.command("delete")
def plan_delete(interval_id: int = typer.Argument(..., help="Plan block ID")) -> None:
    """Delete a plan block."""
    _delete_interval(IntervalKind.PLAN, interval_id)


@track_app.command("add")
def track_add(
    day: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    start: str = typer.Argument(..., help="Start time (HH:MM)"),
    end: str = typer.Argument(..., help="End time (HH:MM)"),
    title: str = typer.Argument(..., help="Session title"),
    category: str | None = typer.Option(None, "--category", "-c"),
    task_id: int | None = typer.Option(None, "--task-id", "-t", help="Linked task ID"),
) -> None:
    """Record an actual session."""
    _add_interval(IntervalKind.ACTUAL, _build_interval(IntervalKind.ACTUAL, day, start, end, title, category, task_id))


@track_app.command("update")
def track_update(
    interval_id: int = typer.Argument(..., help="Session ID"),
    day: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    start: str = typer.Argument(..., help="Start time (HH:MM)"),
    end: str = typer.Argument(..., help="End time (HH:MM)"),
    title: str = typer.Argument(..., help="Session title"),
    category: str | None = typer.Option(None, "--category", "-c"),
    task_id: int | None = typer.Option(None, "--task-id", "-t", help="Linked task ID"),
) -> None:
    """Correct a recorded session."""
    interval = _build_interval(IntervalKind.ACTUAL, day, start, end, title, category, task_id, interval_id)
    _update_interval(IntervalKind.ACTUAL, interval)


@track_app.command("list")
def track_list(day: str = typer.Argument(..., help="Date (YYYY-MM-DD)")) -> None:
    """List actual sessions for a date."""
    _list_intervals(IntervalKind.ACTUAL, day)


@track_app.command("delete")
def track_delete(interval_id: int = typer.Argument(..., help="Session ID")) -> None:
    """Delete an actual session."""
    _delete_interval(IntervalKind.ACTUAL, interval_id)


@folder_app.command("add")
def folder_add(
    name: str = typer.Argument(..., help="Folder name"),
    parent: int | None = typer.Option(None, "--parent", "-p", help="Parent folder ID"),
) -> None:
    """Create a folder, at the root or under a parent."""
    try:
        with get_session() as session:
            folder = FolderService(session).create_folder(name, parent_folder_id=parent)
            folder_id, folder_name = folder.id, folder.name
    except TaskValidationError as e:
        _fail(str(e))
    else:
        console.print(f"[green]Created folder[/green] #{folder_id} {folder_name}")


@folder_app.command("list")
def folder_list(
    parent: int | None = typer.Option(None, "--parent", "-p", help="List subfolders of this folder"),
) -> None:
    """List root folders, or the subfolders of a parent."""
    with get_session() as session:
        service = FolderService(session)
        folders = service.get_root_folders() if parent is None else service.get_subfolders(parent)
        rows = [(str(folder.id), folder.name) for folder in folders]

    table = Table(title="Folders" if parent is None else f"Subfolders of #{parent}")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    for row in rows:
        table.add_row(*row)
    console.print(table)


@folder_app.command("delete")
def folder_delete(folder_id: int = typer.Argument(..., help="Folder ID")) -> None:
    """Delete an empty folder."""
    try:
        with get_session() as session:
            FolderService(session).delete_folder(folder_id)
    except FolderNotEmptyError as e:
        _fail(str(e))
    else:
        console.print(f"[green]Deleted folder[/green] #{folder_id}")


@task_app.command("add")
def task_add(
    title: str = typer.Argument(..., help="Task title"),
    folder_id: int = typer.Option(..., "--folder", "-f", help="Folder ID"),
    priority: Priority = typer.Option(Priority.MEDIUM, "--priority", case_sensitive=False),
    deadline: str | None = typer.Option(None, "--deadline", help="Deadline (YYYY-MM-DD)"),
    estimate: int | None = typer.Option(None, "--estimate", help="Estimated minutes"),
    description: str | None = typer.Option(None, "--description", "-d"),
) -> None:
    """Create a task in a folder."""
    task = Task(
        title=title,
        folder_id=folder_id,
        priority=priority.value,
        deadline=_parse_date(deadline) if deadline else None,
        estimate_minutes=estimate,
        description=description,
    )
    try:
        with get_session() as session:
            saved = TaskService(session).create_task(task)
            task_id = saved.id
    except TaskValidationError as e:
        _fail(str(e))
    else:
        console.print(f"[green]Created task[/green] #{task_id} {title}")


def _task_table(title: str, tasks: list[Task]) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("Deadline")
    for task in tasks:
        table.add_row(
            str(task.id),
            task.title,
            task.status,
            task.priority,
            task.deadline.isoformat() if task.deadline else "",
        )
    return table


@task_app.command("list")
def task_list(folder_id: int = typer.Argument(..., help="Folder ID")) -> None:
    """List the tasks of a folder, newest first."""
    with get_session() as session:
        table = _task_table(f"Tasks in folder #{folder_id}", TaskService(session).get_tasks_by_folder(folder_id))
    console.print(table)


@task_app.command("status")
def task_status(
    task_id: int = typer.Argument(..., help="Task ID"),
    status: TaskStatus = typer.Argument(..., case_sensitive=False, help="TODO, DOING or DONE"),
) -> None:
    """Change the status of a task."""
    try:
        with get_session() as session:
            TaskService(session).update_task_status(task_id, status)
    except TaskValidationError as e:
        _fail(str(e))
    else:
        console.print(f"[green]Task[/green] #{task_id} is now {status.value}")


@task_app.command("delete")
def task_delete(task_id: int = typer.Argument(..., help="Task ID")) -> None:
    """Delete a task."""
    with get_session() as session:
        service = TaskService(session)
        if service.get_task(task_id) is None:
            _fail(f"Task not found: id={task_id}")
        service.delete_task(task_id)
    console.print(f"[green]Deleted task[/green] #{task_id}")


@today_app.command("add")
def today_add(
    task_id: int = typer.Argument(..., help="Task ID"),
    day: str | None = typer.Argument(None, help="Date (YYYY-MM-DD), defaults to today"),
) -> None:
    """Append a task to the Today list."""
    target = _parse_date(day) if day else date.today()
    try:
        with get_session() as session:
            entry = TodayService(session).add_task(task_id, target)
            position = entry.display_order
    except TodayListError as e:
        _fail(str(e))
    else:
        console.print(f"[green]Added[/green] task #{task_id} to {target.isoformat()} at position {position}")


@today_app.command("list")
def today_list(day: str | None = typer.Argument(None, help="Date (YYYY-MM-DD), defaults to today")) -> None:
    """Show the Today list in display order."""
    target = _parse_date(day) if day else date.today()
    with get_session() as session:
        table = _task_table(f"Today {target.isoformat()}", TodayService(session).get_tasks(target))
    console.print(table)


@today_app.command("remove")
def today_remove(
    task_id: int = typer.Argument(..., help="Task ID"),
    day: str | None = typer.Argument(None, help="Date (YYYY-MM-DD), defaults to today"),
) -> None:
    """Remove a task from the Today list."""
    target = _parse_date(day) if day else date.today()
    with get_session() as session:
        TodayService(session).remove_task(task_id, target)
    console.print(f"[green]Removed[/green] task #{task_id} from {target.isoformat()}")


@today_app.command("reorder")
def today_reorder(
    day: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    task_ids: list[int] = typer.Argument(..., help="Task IDs in the new order"),
) -> None:
    """Set the display order of the Today list."""
    target = _parse_date(day)
    with get_session() as session:
        TodayService(session).update_order(target, task_ids)
    console.print(f"[green]Reordered[/green] {len(task_ids)} task(s) for {target.isoformat()}")


def _stats_service(session) -> StatsService:
    return StatsService(
        SqlIntervalRepository(session, IntervalKind.PLAN),
        SqlIntervalRepository(session, IntervalKind.ACTUAL),
    )


@app.command("stats")
def stats_command(day: str = typer.Argument(..., help="Date (YYYY-MM-DD)")) -> None:
    """Show plan-vs-actual statistics for a date."""
    target = _parse_date(day)
    with get_session() as session:
        service = _stats_service(session)
        daily = service.compute_daily_stats(target)
        per_task = service.compute_task_stats(target)

    summary = Table(title=f"Daily statistics {target.isoformat()}")
    summary.add_column("Metric")
    summary.add_column("Value", justify="right")
    summary.add_row("Planned minutes", str(daily.planned_minutes))
    summary.add_row("Actual minutes", str(daily.actual_minutes))
    summary.add_row("Overlap minutes", str(daily.overlap_minutes))
    summary.add_row("Quantitative accuracy", f"{daily.quantitative_accuracy:.0%}")
    summary.add_row("Temporal accuracy", f"{daily.temporal_accuracy:.0%}")
    console.print(summary)

    if per_task:
        tasks = Table(title="Per task")
        tasks.add_column("Task", justify="right")
        tasks.add_column("Planned", justify="right")
        tasks.add_column("Actual", justify="right")
        tasks.add_column("Overlap", justify="right")
        for task_id, task in sorted(per_task.items()):
            tasks.add_row(str(task_id), str(task.planned_minutes), str(task.actual_minutes), str(task.overlap_minutes))
        console.print(tasks)


@app.command("insights")
def insights_command(day: str = typer.Argument(..., help="Date (YYYY-MM-DD)")) -> None:
    """Ask the insight service about a date."""
    target = _parse_date(day)
    try:
        with get_session() as session:
            text = InsightsClient().generate_insights(target, _stats_service(session))
    except SQLAlchemyError as e:
        _fail(f"Could not read records for {target.isoformat()}: {e}")
    else:
        console.print(Panel(text, title=f"Insights {target.isoformat()}"))


if __name__ == "__main__":
    app()
