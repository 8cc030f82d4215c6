import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from domain.entities import Task, TaskStatus

logger = logging.getLogger(__name__)

TASK_COLUMNS = ("title", "description", "status")


class StoreError(Exception):
    """A remote store operation failed (network, authorization or validation)."""


def row_to_task(row: Dict[str, Any]) -> Task:
    try:
        return Task(
            id=str(row["id"]),
            title=row["title"],
            description=row.get("description"),
            status=TaskStatus(row["status"]),
            owner_id=str(row["owner_id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise StoreError(f"Malformed task row: {e}") from e


class TaskStore:
    """Client for the hosted "tasks" table (PostgREST).

    Requests are made with the viewer's access token so row-level policies
    are evaluated for that user.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.rest_url = base_url.rstrip("/") + "/rest/v1"
        self.api_key = api_key
        self.access_token = access_token
        self.timeout = timeout
        self.transport = transport

    def _headers(self, **extra: str) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }
        headers.update(extra)
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(method, f"{self.rest_url}/{path}", **kwargs)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                logger.error(f"{method} {path} failed: {e.response.status_code} - {e.response.text}")
                raise StoreError(f"{method} {path} returned {e.response.status_code}") from e
            except httpx.RequestError as e:
                logger.error(f"{method} {path} failed: {str(e)}")
                raise StoreError(f"{method} {path} could not reach the store") from e

    async def list_tasks(self) -> List[Task]:
        response = await self._request(
            "GET",
            "tasks",
            params={"select": "*", "order": "created_at.desc"},
            headers=self._headers(),
        )
        try:
            rows = response.json()
        except ValueError as e:
            raise StoreError("Store returned invalid JSON") from e
        tasks = [row_to_task(row) for row in rows or []]
        logger.debug(f"Fetched {len(tasks)} tasks")
        return tasks

    async def create_task(
        self, title: str, owner_id: str, description: Optional[str] = None, status: TaskStatus = TaskStatus.NOT_STARTED
    ) -> Task:
        response = await self._request(
            "POST",
            "tasks",
            json={"title": title, "description": description, "status": status.value, "owner_id": owner_id},
            headers=self._headers(Prefer="return=representation"),
        )
        try:
            rows = response.json()
        except ValueError as e:
            raise StoreError("Store returned invalid JSON") from e
        if not rows:
            raise StoreError("Store did not return the created task")
        task = row_to_task(rows[0])
        logger.info(f"Task {task.id} created by {owner_id}")
        return task

    async def update_task(self, task_id: str, changes: Dict[str, Any]) -> None:
        payload = {key: changes[key] for key in TASK_COLUMNS if key in changes}
        if "status" in payload:
            payload["status"] = TaskStatus(payload["status"]).value
        await self._request(
            "PATCH",
            "tasks",
            params={"id": f"eq.{task_id}"},
            json=payload,
            headers=self._headers(),
        )
        logger.info(f"Task {task_id} updated: {sorted(payload)}")

    async def delete_task(self, task_id: str) -> None:
        await self._request(
            "DELETE",
            "tasks",
            params={"id": f"eq.{task_id}"},
            headers=self._headers(),
        )
        logger.info(f"Task {task_id} deleted")
