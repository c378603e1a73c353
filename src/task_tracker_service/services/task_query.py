"""Task Query Engine: owner-scoped listing, single reads and statistics."""

from __future__ import annotations

import asyncio
import math
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from task_tracker_service.services.input_validator import format_timestamp
from task_tracker_service.services.models import (
    TASK_PRIORITIES,
    TASK_STATUSES,
    QueryDescriptor,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from task_tracker_service.services.models import ResolvedIdentity, TaskQueryInput
    from task_tracker_service.services.ownership_guard import OwnershipGuard
    from task_tracker_service.services.task_store import TaskStore


def _utc_now() -> datetime:
    return datetime.now(UTC)


def task_to_response(row: dict[str, Any]) -> dict[str, Any]:
    """Convert a stored task row to its outward JSON shape."""
    return {
        "id": row["task_id"],
        "userId": row["owner_id"],
        "title": row["title"],
        "description": row["description"],
        "status": row["status"],
        "priority": row["priority"],
        "dueDate": row["due_date"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


class TaskQueryEngine:
    """
    Read side of the task API.

    Every operation takes the resolved identity and scopes the store
    query to it. Caller-supplied filters narrow that scope and never
    replace it.
    """

    def __init__(
        self,
        store: TaskStore,
        guard: OwnershipGuard,
        default_limit: int,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._guard = guard
        self._default_limit = default_limit
        self._clock = clock

    def build_descriptor(
        self, identity: ResolvedIdentity, query: TaskQueryInput
    ) -> QueryDescriptor:
        limit = query.limit if query.limit is not None else self._default_limit
        return QueryDescriptor(
            owner_id=identity.account_id,
            status=query.status,
            priority=query.priority,
            search=query.search,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
            page=query.page,
            limit=limit,
        )

    async def list_tasks(
        self, identity: ResolvedIdentity, query: TaskQueryInput
    ) -> dict[str, Any]:
        """
        Return one page of the owner's tasks plus pagination metadata.

        A page past the end yields an empty ``tasks`` list with the same
        ``total`` and ``pages`` as any other page.
        """
        descriptor = self.build_descriptor(identity, query)

        total = await asyncio.to_thread(
            self._store.count_matching,
            descriptor.owner_id,
            status=descriptor.status,
            priority=descriptor.priority,
            search=descriptor.search,
        )
        # Pages past the end never reach the store; their offset can exceed SQLite's range
        rows: list[dict[str, Any]] = []
        if descriptor.offset < total:
            rows = await asyncio.to_thread(
                self._store.query_tasks,
                descriptor.owner_id,
                status=descriptor.status,
                priority=descriptor.priority,
                search=descriptor.search,
                sort_by=descriptor.sort_by,
                sort_order=descriptor.sort_order,
                limit=descriptor.limit,
                offset=descriptor.offset,
            )

        return {
            "tasks": [task_to_response(row) for row in rows],
            "total": total,
            "page": descriptor.page,
            "limit": descriptor.limit,
            "pages": math.ceil(total / descriptor.limit),
        }

    async def get_task(self, identity: ResolvedIdentity, task_id: str) -> dict[str, Any]:
        task = await self._guard.load_owned(identity, task_id)
        return task_to_response(task)

    async def get_stats(self, identity: ResolvedIdentity) -> dict[str, Any]:
        """Count the owner's tasks by status, by priority, overdue and in total."""
        owner_id = identity.account_id
        now_iso = format_timestamp(self._clock())

        by_status = await asyncio.to_thread(self._store.count_by_status, owner_id)
        by_priority = await asyncio.to_thread(self._store.count_by_priority, owner_id)
        overdue = await asyncio.to_thread(self._store.count_overdue, owner_id, now_iso)

        return {
            "total": sum(by_status.values()),
            "byStatus": {status: by_status.get(status, 0) for status in TASK_STATUSES},
            "byPriority": {
                priority: by_priority.get(priority, 0) for priority in TASK_PRIORITIES
            },
            "overdue": overdue,
        }
