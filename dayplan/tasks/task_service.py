"""Task management with field validation."""

from __future__ import annotations

from enum import StrEnum

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from dayplan.db.models import Task, TaskFolder
from dayplan.tasks.errors import TaskValidationError


class TaskStatus(StrEnum):
    TODO = "TODO"
    DOING = "DOING"
    DONE = "DONE"


class Priority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


def validate_task(task: Task) -> None:
    """Check required task fields.

    Raises:
        TaskValidationError: If title is blank, folder is missing, or status /
            priority are missing or unknown
    """
    if task.title is None or not task.title.strip():
        raise TaskValidationError("title", "Task title is required")
    if task.folder_id is None:
        raise TaskValidationError("folder_id", "Task folder is required")
    if task.status is None:
        raise TaskValidationError("status", "Task status is required")
    if task.status not in TaskStatus.__members__:
        raise TaskValidationError("status", f"Unknown task status: {task.status}")
    if task.priority is None:
        raise TaskValidationError("priority", "Task priority is required")
    if task.priority not in Priority.__members__:
        raise TaskValidationError("priority", f"Unknown task priority: {task.priority}")


class TaskService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create_task(self, task: Task) -> Task:
        # Column defaults only apply at flush; validate the effective values.
        if task.status is None:
            task.status = TaskStatus.TODO.value
        if task.priority is None:
            task.priority = Priority.MEDIUM.value
        validate_task(task)
        if self.session.get(TaskFolder, task.folder_id) is None:
            raise TaskValidationError("folder_id", f"Task folder not found: id={task.folder_id}")
        self.session.add(task)
        self.session.flush()
        logger.info(f"[TASKS] created task id={task.id} folder_id={task.folder_id}")
        return task

    def update_task(self, task: Task) -> None:
        validate_task(task)
        self.session.flush()

    def update_task_status(self, task_id: int, status: TaskStatus | str) -> None:
        if str(status) not in TaskStatus.__members__:
            raise TaskValidationError("status", f"Unknown task status: {status}")
        task = self.get_task(task_id)
        if task is None:
            raise TaskValidationError("id", f"Task not found: id={task_id}")
        task.status = str(status)
        self.session.flush()

    def get_task(self, task_id: int) -> Task | None:
        return self.session.get(Task, task_id)

    def get_tasks_by_folder(self, folder_id: int) -> list[Task]:
        """Tasks in a folder, newest first."""
        return list(
            self.session.execute(
                select(Task).where(Task.folder_id == folder_id).order_by(Task.created_at.desc(), Task.id.desc())
            ).scalars()
        )

    def delete_task(self, task_id: int) -> None:
        task = self.get_task(task_id)
        if task is not None:
            self.session.delete(task)
            self.session.flush()
            logger.info(f"[TASKS] deleted task id={task_id}")
