import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from application.create_form import TaskCreateForm
from application.events import TaskEvents
from application.notifications import Notifier
from application.task_item import TaskItemView
from domain.entities import Task, TaskFilter, TaskStatus, Viewer
from infrastructure.database import StoreError, TaskStore

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No tasks found"
LOADING_MESSAGE = "Loading tasks..."


@dataclass(frozen=True)
class FilterOption:
    filter: TaskFilter
    label: str
    count: int
    selected: bool


@dataclass(frozen=True)
class TaskListSnapshot:
    loading: bool
    filter: TaskFilter
    options: List[FilterOption]
    items: List[TaskItemView]
    empty_message: Optional[str]


class TaskCollectionView:
    """Owns the task list of one signed-in session.

    The list is only ever replaced by a full read from the store: on the first
    bind, on every page entry (`mount`), when the viewer's identity or admin
    flag changes, and after every "tasks-changed" signal. Filtering never touches the store.
    """

    def __init__(self, store: TaskStore, events: Optional[TaskEvents] = None, notifier: Optional[Notifier] = None):
        self.store = store
        self.events = events or TaskEvents()
        self.notifier = notifier or Notifier()
        self.viewer: Optional[Viewer] = None
        self.create_form: Optional[TaskCreateForm] = None
        self.tasks: List[Task] = []
        self.filter = TaskFilter.ALL
        self.loading = True
        self.closed = False
        self._items: Dict[str, TaskItemView] = {}
        self._unsubscribe = self.events.subscribe(self.fetch_tasks)

    async def bind_viewer(self, viewer: Viewer) -> bool:
        """Reads the list when the viewer is new or changed. Returns whether a read happened."""
        changed = self.viewer is None or self.viewer.identity != viewer.identity
        self.viewer = viewer
        if viewer.access_token:
            self.store.access_token = viewer.access_token
        if not changed:
            return False
        logger.info(f"Loading tasks for {viewer.user_id} (admin={viewer.is_admin})")
        self.create_form = TaskCreateForm(viewer, self.store, self.events, self.notifier)
        self.loading = True
        await self.fetch_tasks()
        return True

    async def mount(self, viewer: Viewer) -> None:
        """Page entry: always exactly one full read."""
        if not await self.bind_viewer(viewer):
            await self.fetch_tasks()

    async def fetch_tasks(self) -> None:
        try:
            tasks = await self.store.list_tasks()
        except StoreError as e:
            logger.error(f"Error loading tasks: {e}")
            if not self.closed:
                self.notifier.error("Error loading tasks")
            tasks = None
        finally:
            self.loading = False

        if self.closed:
            logger.debug("Task list closed before the read finished, discarding result")
            return
        if tasks is not None:
            self._replace(tasks)

    def _replace(self, tasks: List[Task]) -> None:
        items: Dict[str, TaskItemView] = {}
        for task in tasks:
            item = self._items.get(task.id)
            if item is None:
                item = TaskItemView(task, self.viewer, self.store, self.events, self.notifier)
            else:
                item.bind(task, self.viewer)
            items[task.id] = item
        self.tasks = list(tasks)
        self._items = items

    def select_filter(self, value: Union[TaskFilter, str]) -> TaskFilter:
        self.filter = TaskFilter(value)
        return self.filter

    def counts(self) -> Dict[TaskFilter, int]:
        counts = {TaskFilter.ALL: len(self.tasks)}
        for status in TaskStatus:
            counts[TaskFilter(status.value)] = sum(1 for t in self.tasks if t.status is status)
        return counts

    def filtered_tasks(self) -> List[Task]:
        return [t for t in self.tasks if self.filter.matches(t)]

    def visible_items(self) -> List[TaskItemView]:
        return [self._items[t.id] for t in self.filtered_tasks()]

    def item(self, task_id: str) -> TaskItemView:
        return self._items[task_id]

    def snapshot(self) -> TaskListSnapshot:
        counts = self.counts()
        items = self.visible_items()
        return TaskListSnapshot(
            loading=self.loading,
            filter=self.filter,
            options=[FilterOption(f, f.label, counts[f], f is self.filter) for f in TaskFilter],
            items=items,
            empty_message=None if items else EMPTY_MESSAGE,
        )

    def close(self) -> None:
        self.closed = True
        self._unsubscribe()
