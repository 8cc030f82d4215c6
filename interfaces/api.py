# interfaces/api.py
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from application.notifications import Notifier
from application.task_item import TaskItemView
from application.task_list import TaskCollectionView
from domain.entities import Task, TaskFilter, Viewer, can_edit
from infrastructure.auth import AuthError
from interfaces.auth import COOKIE_NAME, close_session, extract_token, get_current_viewer, get_task_list
from schemas.task import (
    FilterCount,
    LoginRequest,
    MutationResponse,
    NotificationResponse,
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
    TokenResponse,
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def task_to_response(task: Task, viewer: Viewer) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        status_label=task.status.label,
        owner_id=task.owner_id,
        created_at=task.created_at,
        updated_at=task.updated_at,
        can_edit=can_edit(task, viewer),
    )


def drain(notifier: Notifier) -> list[NotificationResponse]:
    return [NotificationResponse(level=n.level, message=n.message) for n in notifier.drain()]


def find_item(task_list: TaskCollectionView, task_id: str) -> TaskItemView:
    try:
        item = task_list.item(task_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Task not found")
    if not item.can_edit:
        raise HTTPException(status_code=403, detail="Not allowed to modify this task")
    return item


@router.post("/auth/login", response_model=TokenResponse)
async def login(credentials: LoginRequest, request: Request, response: Response):
    try:
        access_token = await request.app.state.auth.sign_in(credentials.email, credentials.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    response.set_cookie(COOKIE_NAME, access_token, httponly=True, samesite="lax", secure=request.app.state.settings.cookie_secure)
    return TokenResponse(access_token=access_token)


@router.post("/auth/signup", response_model=TokenResponse)
async def signup(credentials: LoginRequest, request: Request, response: Response):
    try:
        access_token = await request.app.state.auth.sign_up(credentials.email, credentials.password)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=f"Registration failed: {e}")
    if access_token:
        response.set_cookie(COOKIE_NAME, access_token, httponly=True, samesite="lax", secure=request.app.state.settings.cookie_secure)
    return TokenResponse(access_token=access_token)


@router.post("/auth/logout")
async def logout(request: Request, response: Response):
    close_session(request, extract_token(request.cookies.get(COOKIE_NAME), request.headers.get("authorization")))
    response.delete_cookie(COOKIE_NAME, path="/")
    return {"message": "Logout successful"}


@router.get("/tasks", response_model=TaskListResponse)
async def list_tasks(
    request: Request,
    filter: TaskFilter | None = None,
    refresh: bool = False,
    viewer: Viewer = Depends(get_current_viewer),
):
    """Without a filter (or with `refresh=1`) this is a page entry and re-reads the store."""
    task_list = await request.app.state.sessions.open(viewer, mount=filter is None or refresh)
    if filter is not None:
        task_list.select_filter(filter)
    snapshot = task_list.snapshot()
    return TaskListResponse(
        loading=snapshot.loading,
        filter=snapshot.filter,
        counts=[
            FilterCount(filter=o.filter, label=o.label, count=o.count, selected=o.selected)
            for o in snapshot.options
        ],
        tasks=[task_to_response(item.task, task_list.viewer) for item in snapshot.items],
        empty_message=snapshot.empty_message,
        notifications=drain(task_list.notifier),
    )


@router.post("/tasks", response_model=MutationResponse)
async def create_task(task: TaskCreate, response: Response, task_list: TaskCollectionView = Depends(get_task_list)):
    form = task_list.create_form
    if form.creating:
        raise HTTPException(status_code=409, detail="Task creation already in progress")
    form.open()
    ok = await form.submit(task.title, task.description, task.status)
    if not ok:
        response.status_code = 502
    else:
        response.status_code = 201
    return MutationResponse(ok=ok, notifications=drain(task_list.notifier))


@router.put("/tasks/{task_id}", response_model=MutationResponse)
async def update_task(task_id: str, task: TaskUpdate, response: Response, task_list: TaskCollectionView = Depends(get_task_list)):
    item = find_item(task_list, task_id)
    if item.edit_form.updating:
        raise HTTPException(status_code=409, detail="Update already in progress")
    form = item.open_edit()
    ok = await form.submit(task.title, task.description or "", task.status)
    if not ok:
        response.status_code = 502
    return MutationResponse(ok=ok, notifications=drain(task_list.notifier))


@router.delete("/tasks/{task_id}", response_model=MutationResponse)
async def delete_task(task_id: str, response: Response, task_list: TaskCollectionView = Depends(get_task_list)):
    item = find_item(task_list, task_id)
    if item.deleting:
        raise HTTPException(status_code=409, detail="Delete already in progress")
    item.request_delete()
    ok = await item.confirm_delete()
    if not ok:
        response.status_code = 502
    return MutationResponse(ok=ok, notifications=drain(task_list.notifier))
