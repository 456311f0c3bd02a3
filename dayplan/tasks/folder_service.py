"""Task folder tree management."""

from __future__ import annotations

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dayplan.db.models import Task, TaskFolder
from dayplan.tasks.errors import FolderNotEmptyError, TaskValidationError


class FolderService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create_folder(self, name: str, parent_folder_id: int | None = None) -> TaskFolder:
        if not name or not name.strip():
            raise TaskValidationError("name", "Folder name is required")
        if parent_folder_id is not None and self.get_folder(parent_folder_id) is None:
            raise TaskValidationError("parent_folder_id", f"Parent folder not found: id={parent_folder_id}")
        folder = TaskFolder(name=name.strip(), parent_folder_id=parent_folder_id)
        self.session.add(folder)
        self.session.flush()
        logger.info(f"[TASKS] created folder id={folder.id} parent={parent_folder_id}")
        return folder

    def get_folder(self, folder_id: int) -> TaskFolder | None:
        return self.session.get(TaskFolder, folder_id)

    def get_root_folders(self) -> list[TaskFolder]:
        return list(
            self.session.execute(
                select(TaskFolder).where(TaskFolder.parent_folder_id.is_(None)).order_by(TaskFolder.name)
            ).scalars()
        )

    def get_subfolders(self, parent_folder_id: int) -> list[TaskFolder]:
        return list(
            self.session.execute(
                select(TaskFolder).where(TaskFolder.parent_folder_id == parent_folder_id).order_by(TaskFolder.name)
            ).scalars()
        )

    def delete_folder(self, folder_id: int) -> None:
        """Delete an empty folder.

        Raises:
            FolderNotEmptyError: If the folder still holds tasks or subfolders
        """
        task_count = self.session.scalar(select(func.count()).select_from(Task).where(Task.folder_id == folder_id))
        if task_count:
            raise FolderNotEmptyError(folder_id, task_count, 0)

        subfolder_count = len(self.get_subfolders(folder_id))
        if subfolder_count:
            raise FolderNotEmptyError(folder_id, 0, subfolder_count)

        folder = self.get_folder(folder_id)
        if folder is not None:
            self.session.delete(folder)
            self.session.flush()
            logger.info(f"[TASKS] deleted folder id={folder_id}")
