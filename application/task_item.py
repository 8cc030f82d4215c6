import logging

from application.edit_form import TaskEditForm
from application.events import TaskEvents
from application.notifications import Notifier
from domain.entities import Task, Viewer, can_edit
from infrastructure.database import StoreError, TaskStore

logger = logging.getLogger(__name__)


class TaskItemView:
    """One task card: summary, edit dialog and delete confirmation."""

    def __init__(self, task: Task, viewer: Viewer, store: TaskStore, events: TaskEvents, notifier: Notifier):
        self.task = task
        self.viewer = viewer
        self.store = store
        self.events = events
        self.notifier = notifier
        self.edit_form = TaskEditForm(task, store, events, notifier)
        self.delete_prompt_open = False
        self.deleting = False

    def bind(self, task: Task, viewer: Viewer) -> None:
        self.task = task
        self.viewer = viewer
        self.edit_form.bind(task)

    @property
    def can_edit(self) -> bool:
        return can_edit(self.task, self.viewer)

    @property
    def status_label(self) -> str:
        return self.task.status.label

    @property
    def status_color(self) -> str:
        return self.task.status.color

    @property
    def show_description(self) -> bool:
        return self.task.description is not None

    @property
    def delete_prompt(self) -> str:
        return f'Are you sure you want to delete "{self.task.title}"? This action cannot be undone.'

    @property
    def delete_label(self) -> str:
        return "Deleting..." if self.deleting else "Delete"

    def _check_permission(self) -> None:
        if not self.can_edit:
            raise PermissionError(f"{self.viewer.user_id} cannot modify task {self.task.id}")

    def open_edit(self) -> TaskEditForm:
        self._check_permission()
        self.edit_form.open()
        return self.edit_form

    def request_delete(self) -> None:
        self._check_permission()
        self.delete_prompt_open = True

    def cancel_delete(self) -> None:
        self.delete_prompt_open = False

    async def confirm_delete(self) -> bool:
        self._check_permission()
        if self.deleting:
            logger.debug(f"Delete of task {self.task.id} already in flight")
            return False

        self.deleting = True
        deleted = False
        try:
            await self.store.delete_task(self.task.id)
            deleted = True
        except StoreError as e:
            self.notifier.error("Error deleting task")
            logger.error(f"Error deleting task {self.task.id}: {e}")
        finally:
            self.deleting = False
            self.delete_prompt_open = False

        if deleted:
            self.notifier.success("Task deleted successfully")
            await self.events.emit()
        return deleted
