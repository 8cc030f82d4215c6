import logging
from typing import Optional, Union

from application.events import TaskEvents
from application.notifications import Notifier
from domain.entities import Task, TaskStatus
from infrastructure.database import StoreError, TaskStore

logger = logging.getLogger(__name__)


def normalize_description(description: Optional[str]) -> Optional[str]:
    return description or None


class TaskEditForm:
    """Modal form bound to one task. Submits title, description and status."""

    def __init__(self, task: Task, store: TaskStore, events: TaskEvents, notifier: Notifier):
        self.store = store
        self.events = events
        self.notifier = notifier
        self.is_open = False
        self.updating = False
        self.task: Optional[Task] = None
        self.bind(task)

    def bind(self, task: Task) -> None:
        """Re-initializes the fields when a different task snapshot is bound."""
        if task == self.task:
            return
        self.task = task
        self.title = task.title
        self.description = task.description or ""
        self.status = task.status

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    @property
    def submit_label(self) -> str:
        return "Updating..." if self.updating else "Update Task"

    def update_fields(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Union[TaskStatus, str, None] = None,
    ) -> None:
        if title is not None:
            self.title = title
        if description is not None:
            self.description = description
        if status is not None:
            self.status = TaskStatus(status)

    async def submit(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Union[TaskStatus, str, None] = None,
    ) -> bool:
        if self.updating:
            logger.debug(f"Update of task {self.task.id} already in flight")
            return False
        self.update_fields(title, description, status)
        if not self.title:
            raise ValueError("title is required")

        self.updating = True
        try:
            await self.store.update_task(
                self.task.id,
                {
                    "title": self.title,
                    "description": normalize_description(self.description),
                    "status": self.status,
                },
            )
            self.notifier.success("Task updated successfully")
            await self.events.emit()
            self.close()
            return True
        except StoreError as e:
            self.notifier.error("Error updating task")
            logger.error(f"Error updating task {self.task.id}: {e}")
            return False
        finally:
            self.updating = False
