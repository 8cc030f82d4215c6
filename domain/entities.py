
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TaskStatus(str, Enum):
    NOT_STARTED = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "done"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def color(self) -> str:
        return STATUS_COLORS[self]


STATUS_LABELS = {
    TaskStatus.NOT_STARTED: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.COMPLETED: "Done",
}

# css classes for the status badge
STATUS_COLORS = {
    TaskStatus.NOT_STARTED: "badge-muted",
    TaskStatus.IN_PROGRESS: "badge-yellow",
    TaskStatus.COMPLETED: "badge-green",
}


class TaskFilter(str, Enum):
    ALL = "all"
    NOT_STARTED = TaskStatus.NOT_STARTED.value
    IN_PROGRESS = TaskStatus.IN_PROGRESS.value
    COMPLETED = TaskStatus.COMPLETED.value

    @property
    def label(self) -> str:
        if self is TaskFilter.ALL:
            return "All"
        return STATUS_LABELS[TaskStatus(self.value)]

    def matches(self, task: "Task") -> bool:
        return self is TaskFilter.ALL or task.status.value == self.value


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    status: TaskStatus
    owner_id: str
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None


@dataclass(frozen=True)
class Viewer:
    user_id: str
    is_admin: bool = False
    email: Optional[str] = None
    access_token: Optional[str] = None
    expires_at: Optional[float] = None

    @property
    def identity(self) -> tuple:
        return (self.user_id, self.is_admin)


def can_edit(task: Task, viewer: Viewer) -> bool:
    """Whether edit/delete controls are offered for a task.

    Advisory only: the store's row-level policies decide what actually goes through.
    """
    return task.owner_id == viewer.user_id or viewer.is_admin
