"""Resolve a verified credential subject to a live account."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from service_commons.exceptions import Unauthenticated

from task_tracker_service.services.models import ACCOUNT_ID_RE, ResolvedIdentity

if TYPE_CHECKING:
    from task_tracker_service.services.account_store import AccountStore


class IdentityResolver:
    """
    Turns the subject of a verified token into a ResolvedIdentity.

    A malformed subject or one naming an account that no longer exists
    fails the same way a bad token does.
    """

    def __init__(self, store: AccountStore) -> None:
        self._store = store

    async def resolve(self, subject: str) -> ResolvedIdentity:
        if ACCOUNT_ID_RE.match(subject) is None:
            raise Unauthenticated()

        account = await asyncio.to_thread(self._store.get_by_id, subject)
        if account is None:
            raise Unauthenticated()

        return ResolvedIdentity(account_id=account["account_id"])
