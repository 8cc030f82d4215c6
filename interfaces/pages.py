# interfaces/pages.py
from pathlib import Path

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from application.task_item import TaskItemView
from application.task_list import LOADING_MESSAGE, TaskCollectionView
from domain.entities import TaskFilter, TaskStatus, Viewer
from infrastructure.auth import AuthError
from interfaces.auth import COOKIE_NAME, close_session, get_optional_viewer
import logging

logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


async def get_page_task_list(request: Request, viewer: Viewer | None = Depends(get_optional_viewer)) -> TaskCollectionView | None:
    if viewer is None:
        return None
    return await request.app.state.sessions.open(viewer)


def to_auth() -> RedirectResponse:
    return RedirectResponse(url="/auth", status_code=303)


def to_dashboard(task_list: TaskCollectionView) -> RedirectResponse:
    return RedirectResponse(url=f"/dashboard?filter={task_list.filter.value}", status_code=303)


def find_item(task_list: TaskCollectionView, task_id: str) -> TaskItemView:
    try:
        return task_list.item(task_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Task not found")


def render_dashboard(request: Request, task_list: TaskCollectionView, status_code: int = 200) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "viewer": task_list.viewer,
            "snapshot": task_list.snapshot(),
            "create_form": task_list.create_form,
            "statuses": list(TaskStatus),
            "loading_message": LOADING_MESSAGE,
            "notifications": task_list.notifier.drain(),
        },
        status_code=status_code,
    )


def set_session_cookie(request: Request, response: RedirectResponse, access_token: str) -> None:
    response.set_cookie(COOKIE_NAME, access_token, httponly=True, samesite="lax", secure=request.app.state.settings.cookie_secure)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, viewer: Viewer | None = Depends(get_optional_viewer)):
    """Landing page."""
    return templates.TemplateResponse(request, "index.html", {"viewer": viewer})


@router.get("/auth", response_class=HTMLResponse)
async def auth_page(request: Request, viewer: Viewer | None = Depends(get_optional_viewer)):
    """Sign in / sign up page."""
    if viewer is not None:
        return RedirectResponse(url="/dashboard", status_code=303)
    return templates.TemplateResponse(request, "auth.html", {"error": None, "message": None})


@router.post("/auth/login")
async def handle_login(request: Request, email: str = Form(...), password: str = Form(...)):
    try:
        access_token = await request.app.state.auth.sign_in(email, password)
    except AuthError as e:
        logger.warning(f"Sign-in failed for {email}: {e}")
        return templates.TemplateResponse(request, "auth.html", {"error": "Invalid email or password", "message": None}, status_code=401)
    response = RedirectResponse(url="/dashboard", status_code=303)
    set_session_cookie(request, response, access_token)
    return response


@router.post("/auth/signup")
async def handle_signup(request: Request, email: str = Form(...), password: str = Form(...)):
    try:
        access_token = await request.app.state.auth.sign_up(email, password)
    except AuthError as e:
        return templates.TemplateResponse(request, "auth.html", {"error": f"Registration failed: {e}", "message": None}, status_code=400)
    if not access_token:
        return templates.TemplateResponse(
            request, "auth.html", {"error": None, "message": "Check your email to confirm your account."}
        )
    response = RedirectResponse(url="/dashboard", status_code=303)
    set_session_cookie(request, response, access_token)
    return response


@router.get("/logout")
async def logout(request: Request):
    close_session(request, request.cookies.get(COOKIE_NAME))
    response = RedirectResponse(url="/", status_code=303)
    response.delete_cookie(COOKIE_NAME, path="/")
    return response


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(request: Request, filter: TaskFilter | None = None, viewer: Viewer | None = Depends(get_optional_viewer)):
    if viewer is None:
        return to_auth()
    # a plain visit is a page entry and re-reads; tab switches carry a filter and do not
    task_list = await request.app.state.sessions.open(viewer, mount=filter is None)
    if filter is not None:
        task_list.select_filter(filter)
    return render_dashboard(request, task_list)


@router.post("/tasks")
async def create_task(
    request: Request,
    title: str = Form(...),
    description: str = Form(""),
    status: TaskStatus = Form(TaskStatus.NOT_STARTED),
    task_list: TaskCollectionView | None = Depends(get_page_task_list),
):
    if task_list is None:
        return to_auth()
    form = task_list.create_form
    if form.creating:
        return render_dashboard(request, task_list, status_code=409)
    form.open()
    if await form.submit(title, description, status):
        return to_dashboard(task_list)
    return render_dashboard(request, task_list, status_code=502)


@router.get("/tasks/{task_id}/edit", response_class=HTMLResponse)
async def open_edit(request: Request, task_id: str, task_list: TaskCollectionView | None = Depends(get_page_task_list)):
    if task_list is None:
        return to_auth()
    item = find_item(task_list, task_id)
    try:
        item.open_edit()
    except PermissionError:
        raise HTTPException(status_code=403, detail="Not allowed to modify this task")
    return render_dashboard(request, task_list)


@router.post("/tasks/{task_id}/edit")
async def submit_edit(
    request: Request,
    task_id: str,
    title: str = Form(...),
    description: str = Form(""),
    status: TaskStatus = Form(...),
    task_list: TaskCollectionView | None = Depends(get_page_task_list),
):
    if task_list is None:
        return to_auth()
    item = find_item(task_list, task_id)
    try:
        form = item.open_edit()
    except PermissionError:
        raise HTTPException(status_code=403, detail="Not allowed to modify this task")
    if form.updating:
        return render_dashboard(request, task_list, status_code=409)
    if await form.submit(title, description, status):
        return to_dashboard(task_list)
    return render_dashboard(request, task_list, status_code=502)


@router.post("/tasks/{task_id}/edit/close")
async def close_edit(task_id: str, task_list: TaskCollectionView | None = Depends(get_page_task_list)):
    if task_list is None:
        return to_auth()
    find_item(task_list, task_id).edit_form.close()
    return to_dashboard(task_list)


@router.get("/tasks/{task_id}/delete", response_class=HTMLResponse)
async def open_delete(request: Request, task_id: str, task_list: TaskCollectionView | None = Depends(get_page_task_list)):
    if task_list is None:
        return to_auth()
    item = find_item(task_list, task_id)
    try:
        item.request_delete()
    except PermissionError:
        raise HTTPException(status_code=403, detail="Not allowed to modify this task")
    return render_dashboard(request, task_list)


@router.post("/tasks/{task_id}/delete")
async def confirm_delete(request: Request, task_id: str, task_list: TaskCollectionView | None = Depends(get_page_task_list)):
    if task_list is None:
        return to_auth()
    item = find_item(task_list, task_id)
    if item.deleting:
        return render_dashboard(request, task_list, status_code=409)
    try:
        deleted = await item.confirm_delete()
    except PermissionError:
        raise HTTPException(status_code=403, detail="Not allowed to modify this task")
    if deleted:
        return to_dashboard(task_list)
    return render_dashboard(request, task_list, status_code=502)


@router.post("/tasks/{task_id}/delete/cancel")
async def cancel_delete(task_id: str, task_list: TaskCollectionView | None = Depends(get_page_task_list)):
    if task_list is None:
        return to_auth()
    find_item(task_list, task_id).cancel_delete()
    return to_dashboard(task_list)
