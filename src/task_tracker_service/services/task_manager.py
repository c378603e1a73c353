"""Task Mutation Service: owner-scoped create, update and delete."""

from __future__ import annotations

import asyncio
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from service_commons.exceptions import NotFound

from task_tracker_service.logging import get_logger
from task_tracker_service.services.input_validator import format_timestamp
from task_tracker_service.services.models import DEFAULT_PRIORITY, DEFAULT_STATUS
from task_tracker_service.services.ownership_guard import TASK_NOT_FOUND_MESSAGE
from task_tracker_service.services.task_query import task_to_response

if TYPE_CHECKING:
    from collections.abc import Callable

    from task_tracker_service.services.models import (
        ResolvedIdentity,
        TaskCreateInput,
        TaskUpdateInput,
    )
    from task_tracker_service.services.ownership_guard import OwnershipGuard
    from task_tracker_service.services.task_store import TaskStore


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TaskManager:
    """
    Write side of the task API.

    Owner is always the resolved identity and is never taken from the
    payload. Update and delete go through the ownership guard, then
    repeat the owner predicate in the write itself.
    """

    def __init__(
        self,
        store: TaskStore,
        guard: OwnershipGuard,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._guard = guard
        self._clock = clock
        self._logger = get_logger(__name__)

    def _now_iso(self) -> str:
        return format_timestamp(self._clock())

    async def create_task(
        self, identity: ResolvedIdentity, payload: TaskCreateInput
    ) -> dict[str, Any]:
        now = self._now_iso()
        task: dict[str, Any] = {
            "task_id": f"t-{uuid.uuid4()}",
            "owner_id": identity.account_id,
            "title": payload.title,
            "description": payload.description,
            "status": payload.status if payload.status is not None else DEFAULT_STATUS,
            "priority": payload.priority if payload.priority is not None else DEFAULT_PRIORITY,
            "due_date": payload.due_date,
            "created_at": now,
            "updated_at": now,
        }
        await asyncio.to_thread(self._store.insert_task, task)

        self._logger.info(
            "Task created",
            extra={"account_id": identity.account_id, "task_id": task["task_id"]},
        )
        return task_to_response(task)

    async def update_task(
        self,
        identity: ResolvedIdentity,
        task_id: str,
        payload: TaskUpdateInput,
    ) -> dict[str, Any]:
        """Apply a partial update. An empty update returns the task unchanged."""
        task = await self._guard.load_owned(identity, task_id)
        if payload.is_empty:
            return task_to_response(task)

        updates = dict(payload.changes)
        updates["updated_at"] = self._now_iso()

        affected = await asyncio.to_thread(
            self._store.update_task, task_id, identity.account_id, updates
        )
        if affected == 0:
            # Deleted between the guard check and the write
            raise NotFound(TASK_NOT_FOUND_MESSAGE)

        updated = await asyncio.to_thread(
            self._store.get_owned_task, task_id, identity.account_id
        )
        if updated is None:
            raise NotFound(TASK_NOT_FOUND_MESSAGE)
        return task_to_response(updated)

    async def delete_task(self, identity: ResolvedIdentity, task_id: str) -> None:
        await self._guard.load_owned(identity, task_id)

        affected = await asyncio.to_thread(
            self._store.delete_task, task_id, identity.account_id
        )
        if affected == 0:
            raise NotFound(TASK_NOT_FOUND_MESSAGE)

        self._logger.info(
            "Task deleted",
            extra={"account_id": identity.account_id, "task_id": task_id},
        )
