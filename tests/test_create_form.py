# tests/test_create_form.py

from __future__ import annotations

import json

import pytest

from application.task_list import TaskCollectionView
from domain.entities import TaskStatus

from .fakes import FakeSupabase


@pytest.mark.asyncio
async def test_create_defaults_and_refresh(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    form = task_list.create_form
    form.open()

    assert await form.submit("Brand new", description="") is True

    body = json.loads(fake.calls("POST")[0].content)
    assert body == {"title": "Brand new", "description": None, "status": "todo", "owner_id": "u1"}
    assert task_list.tasks[0].title == "Brand new"
    assert task_list.counts()[task_list.filter] == 5
    assert (form.title, form.is_open) == ("", False)
    assert [n.message for n in task_list.notifier.drain()] == ["Task created successfully"]


@pytest.mark.asyncio
async def test_create_failure_keeps_fields(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    fake.fail.add(("POST", "tasks"))
    form = task_list.create_form
    form.open()

    assert await form.submit("Lost", description="notes", status=TaskStatus.COMPLETED) is False

    assert (form.title, form.description, form.status, form.is_open) == ("Lost", "notes", TaskStatus.COMPLETED, True)
    assert len(task_list.tasks) == 4
    assert [n.message for n in task_list.notifier.drain()] == ["Error creating task"]


@pytest.mark.asyncio
async def test_create_requires_title(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    with pytest.raises(ValueError):
        await task_list.create_form.submit("")
    assert fake.calls("POST") == []
