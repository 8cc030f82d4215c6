# tests/conftest.py

from __future__ import annotations

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from application.task_list import TaskCollectionView
from config import Settings
from domain.entities import Viewer
from infrastructure.database import TaskStore
from main import create_app

from .fakes import API_KEY, BASE_URL, JWT_SECRET, FakeSupabase, make_row, make_token


@pytest.fixture()
def fake() -> FakeSupabase:
    """
    Backend seeded with three tasks of u1 and one of u2, newest first:
    t4 (u2, done), t3 (u1, in-progress), t2 (u1, todo), t1 (u1, done).
    """
    return FakeSupabase(
        [
            make_row("t1", "u1", "done", title="Write report", minute=1),
            make_row("t2", "u1", "todo", title="Plan sprint", minute=2, description="Backlog grooming"),
            make_row("t3", "u1", "in-progress", title="Fix login", minute=3),
            make_row("t4", "u2", "done", title="Ship release", minute=4),
        ]
    )


@pytest.fixture()
def make_store(fake: FakeSupabase):
    def factory(access_token: str | None = None) -> TaskStore:
        return TaskStore(BASE_URL, API_KEY, access_token=access_token, transport=fake.transport)

    return factory


@pytest.fixture()
def viewer() -> Viewer:
    return Viewer(user_id="u1", is_admin=False, access_token=make_token("u1"))


@pytest_asyncio.fixture()
async def task_list(make_store, viewer: Viewer) -> TaskCollectionView:
    view = TaskCollectionView(make_store(viewer.access_token))
    await view.bind_viewer(viewer)
    return view


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        supabase_url=BASE_URL,
        supabase_anon_key=API_KEY,
        supabase_jwt_secret=JWT_SECRET,
        cors_origins=["http://localhost:5173"],
    )


@pytest.fixture()
def client(settings: Settings, fake: FakeSupabase) -> TestClient:
    return TestClient(create_app(settings, transport=fake.transport))


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token('u1', 'u1@example.com')}"}
