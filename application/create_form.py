import logging
from typing import Optional, Union

from application.edit_form import normalize_description
from application.events import TaskEvents
from application.notifications import Notifier
from domain.entities import TaskStatus, Viewer
from infrastructure.database import StoreError, TaskStore

logger = logging.getLogger(__name__)


class TaskCreateForm:
    def __init__(self, viewer: Viewer, store: TaskStore, events: TaskEvents, notifier: Notifier):
        self.viewer = viewer
        self.store = store
        self.events = events
        self.notifier = notifier
        self.is_open = False
        self.creating = False
        self.reset()

    def reset(self) -> None:
        self.title = ""
        self.description = ""
        self.status = TaskStatus.NOT_STARTED

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    @property
    def submit_label(self) -> str:
        return "Creating..." if self.creating else "Create Task"

    async def submit(
        self,
        title: str,
        description: Optional[str] = None,
        status: Union[TaskStatus, str, None] = None,
    ) -> bool:
        if self.creating:
            logger.debug("Task creation already in flight")
            return False
        self.title = title
        self.description = description or ""
        self.status = TaskStatus(status) if status is not None else TaskStatus.NOT_STARTED
        if not self.title:
            raise ValueError("title is required")

        self.creating = True
        try:
            await self.store.create_task(
                self.title,
                owner_id=self.viewer.user_id,
                description=normalize_description(self.description),
                status=self.status,
            )
            self.notifier.success("Task created successfully")
            self.reset()
            self.close()
            await self.events.emit()
            return True
        except StoreError as e:
            self.notifier.error("Error creating task")
            logger.error(f"Error creating task: {e}")
            return False
        finally:
            self.creating = False
