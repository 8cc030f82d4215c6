# tests/test_task_list.py

from __future__ import annotations

import asyncio

import pytest

from application.task_list import EMPTY_MESSAGE, TaskCollectionView
from domain.entities import TaskFilter, Viewer

from .fakes import FakeSupabase, make_token


@pytest.mark.asyncio
async def test_first_bind_loads_everything(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    assert task_list.loading is False
    assert [t.id for t in task_list.tasks] == ["t4", "t3", "t2", "t1"]
    assert len(fake.calls("GET")) == 1


@pytest.mark.asyncio
async def test_counts_come_from_the_full_list(task_list: TaskCollectionView) -> None:
    task_list.select_filter(TaskFilter.COMPLETED)
    counts = task_list.counts()

    assert counts[TaskFilter.ALL] == 4
    assert counts[TaskFilter.NOT_STARTED] == 1
    assert counts[TaskFilter.IN_PROGRESS] == 1
    assert counts[TaskFilter.COMPLETED] == 2
    assert counts[TaskFilter.ALL] == sum(counts[f] for f in TaskFilter if f is not TaskFilter.ALL)


@pytest.mark.asyncio
async def test_filter_switch_never_reads(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    task_list.select_filter("done")
    assert [i.task.id for i in task_list.visible_items()] == ["t4", "t1"]

    task_list.select_filter("all")
    assert [i.task.id for i in task_list.visible_items()] == ["t4", "t3", "t2", "t1"]

    assert len(fake.calls("GET")) == 1


@pytest.mark.asyncio
async def test_snapshot_marks_selected_option_and_empty_state(make_store, viewer: Viewer) -> None:
    view = TaskCollectionView(make_store(viewer.access_token))
    await view.bind_viewer(viewer)
    view.select_filter(TaskFilter.IN_PROGRESS)
    snapshot = view.snapshot()

    assert [o.selected for o in snapshot.options] == [False, False, True, False]
    assert [(o.label, o.count) for o in snapshot.options] == [
        ("All", 4),
        ("To Do", 1),
        ("In Progress", 1),
        ("Done", 2),
    ]
    assert snapshot.empty_message is None


@pytest.mark.asyncio
async def test_empty_filtered_subset_renders_empty_message(make_store, fake: FakeSupabase, viewer: Viewer) -> None:
    fake.rows = {k: v for k, v in fake.rows.items() if v["status"] != "in-progress"}
    view = TaskCollectionView(make_store(viewer.access_token))
    await view.bind_viewer(viewer)
    view.select_filter(TaskFilter.IN_PROGRESS)

    snapshot = view.snapshot()
    assert snapshot.items == []
    assert snapshot.empty_message == EMPTY_MESSAGE


@pytest.mark.asyncio
async def test_rebinding_same_identity_does_not_read(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    await task_list.bind_viewer(Viewer("u1", access_token=make_token("u1")))
    assert len(fake.calls("GET")) == 1


@pytest.mark.asyncio
async def test_identity_or_admin_change_reads_again(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    await task_list.bind_viewer(Viewer("u1", is_admin=True, access_token=make_token("u1")))
    assert len(fake.calls("GET")) == 2
    assert task_list.item("t4").can_edit

    await task_list.bind_viewer(Viewer("u2", access_token=make_token("u2")))
    assert len(fake.calls("GET")) == 3
    assert not task_list.item("t3").can_edit


@pytest.mark.asyncio
async def test_tasks_changed_triggers_full_refresh(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    fake.rows["t2"]["title"] = "Changed elsewhere"
    await task_list.events.emit()

    assert len(fake.calls("GET")) == 2
    assert task_list.item("t2").task.title == "Changed elsewhere"


@pytest.mark.asyncio
async def test_item_views_survive_refresh(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    item = task_list.item("t2")
    item.open_edit()
    del fake.rows["t1"]

    await task_list.fetch_tasks()

    assert task_list.item("t2") is item
    assert item.edit_form.is_open
    with pytest.raises(KeyError):
        task_list.item("t1")


@pytest.mark.asyncio
async def test_first_load_failure_leaves_list_empty(make_store, fake: FakeSupabase, viewer: Viewer) -> None:
    fake.fail.add(("GET", "tasks"))
    view = TaskCollectionView(make_store(viewer.access_token))

    await view.bind_viewer(viewer)

    assert view.loading is False
    assert view.tasks == []
    assert [n.message for n in view.notifier.drain()] == ["Error loading tasks"]
    assert len(fake.calls("GET")) == 1


@pytest.mark.asyncio
async def test_refresh_failure_keeps_previous_list(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    fake.fail.add(("GET", "tasks"))

    await task_list.fetch_tasks()

    assert len(task_list.tasks) == 4
    assert [n.level for n in task_list.notifier.drain()] == ["error"]


@pytest.mark.asyncio
async def test_loading_until_first_read_completes(make_store, fake: FakeSupabase, viewer: Viewer) -> None:
    fake.read_gate = asyncio.Event()
    view = TaskCollectionView(make_store(viewer.access_token))

    pending = asyncio.create_task(view.bind_viewer(viewer))
    await asyncio.sleep(0)
    assert view.loading is True
    assert view.snapshot().loading is True

    fake.read_gate.set()
    await pending
    assert view.loading is False


@pytest.mark.asyncio
async def test_read_finishing_after_close_is_discarded(make_store, fake: FakeSupabase, viewer: Viewer) -> None:
    fake.read_gate = asyncio.Event()
    view = TaskCollectionView(make_store(viewer.access_token))

    pending = asyncio.create_task(view.bind_viewer(viewer))
    await asyncio.sleep(0)
    view.close()
    fake.read_gate.set()
    await pending

    assert view.tasks == []
    assert view.notifier.drain() == []


@pytest.mark.asyncio
async def test_closed_view_ignores_tasks_changed(task_list: TaskCollectionView, fake: FakeSupabase) -> None:
    task_list.close()
    await task_list.events.emit()

    assert len(fake.calls("GET")) == 1


@pytest.mark.asyncio
async def test_mount_rereads_for_the_same_viewer(task_list: TaskCollectionView, viewer: Viewer, fake: FakeSupabase) -> None:
    fake.rows.pop("t1")

    await task_list.mount(viewer)

    assert len(fake.calls("GET")) == 2
    assert [t.id for t in task_list.tasks] == ["t4", "t3", "t2"]
