from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.entities import TaskFilter, TaskStatus


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.NOT_STARTED


class TaskUpdate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: TaskStatus


class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str]
    status: TaskStatus
    status_label: str
    owner_id: str
    created_at: datetime
    updated_at: datetime
    can_edit: bool


class FilterCount(BaseModel):
    filter: TaskFilter
    label: str
    count: int
    selected: bool


class NotificationResponse(BaseModel):
    level: str
    message: str


class TaskListResponse(BaseModel):
    loading: bool
    filter: TaskFilter
    counts: List[FilterCount]
    tasks: List[TaskResponse]
    empty_message: Optional[str] = None
    notifications: List[NotificationResponse] = []


class MutationResponse(BaseModel):
    ok: bool
    notifications: List[NotificationResponse] = []


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: Optional[str]
    token_type: str = "bearer"
