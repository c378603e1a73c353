"""Per-owner access check for single-task operations."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from service_commons.exceptions import InvalidInput, NotFound

from task_tracker_service.logging import get_logger
from task_tracker_service.services.models import TASK_ID_RE

if TYPE_CHECKING:
    from task_tracker_service.services.models import ResolvedIdentity
    from task_tracker_service.services.task_store import TaskStore

TASK_NOT_FOUND_MESSAGE = "Task not found"


def check_task_id(task_id: str) -> None:
    """Reject identifiers that are not syntactically task references."""
    if TASK_ID_RE.match(task_id) is None:
        raise InvalidInput("Invalid task ID format")


class OwnershipGuard:
    """
    Loads a task on behalf of a resolved identity.

    A task owned by someone else is reported exactly like a task that
    does not exist, so callers cannot discover other owners' ids.
    """

    def __init__(self, store: TaskStore) -> None:
        self._store = store
        self._logger = get_logger(__name__)

    async def load_owned(self, identity: ResolvedIdentity, task_id: str) -> dict[str, Any]:
        check_task_id(task_id)

        task = await asyncio.to_thread(self._store.get_task, task_id)
        if task is None:
            raise NotFound(TASK_NOT_FOUND_MESSAGE)

        if task["owner_id"] != identity.account_id:
            self._logger.warning(
                "Cross-owner task access denied",
                extra={"account_id": identity.account_id, "task_id": task_id},
            )
            raise NotFound(TASK_NOT_FOUND_MESSAGE)

        return task
