"""Validated request shapes and value objects shared by the services layer."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal

TASK_STATUSES: tuple[str, ...] = ("pending", "in_progress", "completed")
TASK_PRIORITIES: tuple[str, ...] = ("low", "medium", "high")
SORT_KEYS: tuple[str, ...] = ("createdAt", "updatedAt", "dueDate", "priority")
SORT_ORDERS: tuple[str, ...] = ("asc", "desc")

DEFAULT_STATUS = "pending"
DEFAULT_PRIORITY = "medium"
DEFAULT_SORT_KEY = "createdAt"
DEFAULT_SORT_ORDER = "desc"
DEFAULT_PAGE = 1

# Identifier formats: a-<uuid4> for accounts, t-<uuid4> for tasks
ACCOUNT_ID_RE = re.compile(
    r"^a-[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
TASK_ID_RE = re.compile(
    r"^t-[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

SortKey = Literal["createdAt", "updatedAt", "dueDate", "priority"]
SortOrder = Literal["asc", "desc"]


@dataclass(frozen=True)
class ResolvedIdentity:
    """The authenticated account for one request. Never carries the credential."""

    account_id: str


@dataclass(frozen=True)
class RegistrationInput:
    name: str
    email: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class TaskCreateInput:
    title: str
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    due_date: str | None = None


@dataclass(frozen=True)
class TaskUpdateInput:
    """Partial update. ``changes`` holds only the fields present in the payload."""

    changes: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return len(self.changes) == 0


@dataclass(frozen=True)
class TaskQueryInput:
    """Validated list-query parameters. Page size is resolved by the query engine."""

    status: str | None = None
    priority: str | None = None
    search: str | None = None
    page: int = DEFAULT_PAGE
    limit: int | None = None
    sort_by: SortKey = "createdAt"
    sort_order: SortOrder = "desc"


ValidatedRequest = (
    RegistrationInput | LoginInput | TaskCreateInput | TaskUpdateInput | TaskQueryInput
)


@dataclass(frozen=True)
class QueryDescriptor:
    """
    One list operation, fully resolved.

    ``owner_id`` is mandatory and always becomes a predicate of the query;
    none of the optional filters can replace it.
    """

    owner_id: str
    status: str | None
    priority: str | None
    search: str | None
    sort_by: SortKey
    sort_order: SortOrder
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
