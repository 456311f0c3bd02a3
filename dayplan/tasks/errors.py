"""Task, folder and Today list errors."""


class TaskValidationError(ValueError):
    """Raised when a task is missing a required field or has an unknown value."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(self.message)


class FolderNotEmptyError(RuntimeError):
    """Raised when deleting a folder that still holds tasks or subfolders."""

    def __init__(self, folder_id: int, task_count: int, subfolder_count: int):
        self.folder_id = folder_id
        self.task_count = task_count
        self.subfolder_count = subfolder_count
        if task_count:
            self.message = (
                f"Cannot delete folder: it contains {task_count} task(s). Please delete or move tasks first."
            )
        else:
            self.message = (
                f"Cannot delete folder: it contains {subfolder_count} subfolder(s). "
                "Please delete or move subfolders first."
            )
        super().__init__(self.message)


class TodayListError(RuntimeError):
    """Raised when a Today list change is not allowed (e.g. duplicate entry)."""

    def __init__(self, message: str = "Task is already in Today list for this date."):
        self.message = message
        super().__init__(self.message)
