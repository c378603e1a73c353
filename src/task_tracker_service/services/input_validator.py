"""Schema checks and normalization for untrusted request input."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from service_commons.exceptions import InvalidInput

from task_tracker_service.services.models import (
    DEFAULT_PAGE,
    SORT_KEYS,
    SORT_ORDERS,
    TASK_PRIORITIES,
    TASK_STATUSES,
    LoginInput,
    RegistrationInput,
    TaskCreateInput,
    TaskQueryInput,
    TaskUpdateInput,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 254
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
SEARCH_MAX_LENGTH = 200

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_HTML_TAG_RE = re.compile(r"<[^>]*>")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")

_UPDATE_COLUMN_BY_FIELD: dict[str, str] = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "dueDate": "due_date",
}


def format_timestamp(value: datetime) -> str:
    """Render a datetime as UTC ``YYYY-MM-DDTHH:MM:SS.ffffffZ``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _require_string(data: Mapping[str, Any], field_name: str) -> str:
    if field_name not in data or data[field_name] is None:
        raise InvalidInput(f"{field_name} is required")
    value = data[field_name]
    if not isinstance(value, str):
        raise InvalidInput(f"{field_name} must be a string")
    return value


def _check_title(value: object) -> str:
    if not isinstance(value, str):
        raise InvalidInput("title must be a string")
    title = value.strip()
    if not title:
        raise InvalidInput("title must not be empty")
    if len(title) > TITLE_MAX_LENGTH:
        raise InvalidInput(f"title must be at most {TITLE_MAX_LENGTH} characters")
    if _HTML_TAG_RE.search(title) is not None:
        raise InvalidInput("title must not contain HTML markup")
    return title


def _check_description(value: object) -> str:
    if not isinstance(value, str):
        raise InvalidInput("description must be a string")
    description = value.strip()
    if not description:
        raise InvalidInput("description must not be empty")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise InvalidInput(f"description must be at most {DESCRIPTION_MAX_LENGTH} characters")
    if _HTML_TAG_RE.search(description) is not None:
        raise InvalidInput("description must not contain HTML markup")
    return description


def _check_member(field_name: str, value: object, allowed: tuple[str, ...]) -> str:
    if not isinstance(value, str) or value not in allowed:
        raise InvalidInput(f"{field_name} must be one of: {', '.join(allowed)}")
    return value


def _check_due_date(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("dueDate must be a valid ISO 8601 date")
    try:
        return format_timestamp(datetime.fromisoformat(value.strip()))
    except (ValueError, OverflowError) as exc:
        # Offsets can push dates at the calendar edges out of range when moved to UTC
        raise InvalidInput("dueDate must be a valid ISO 8601 date") from exc


class InputValidator:
    """
    Validates request payloads into the shapes in ``models``.

    Each method checks fields in declaration order and raises
    ``InvalidInput`` for the first violation. Keys outside a shape's
    allow-list are dropped and never reach the mutation or query layer.
    """

    def __init__(self, max_limit: int) -> None:
        self._max_limit = max_limit

    def validate_registration(self, data: Mapping[str, Any]) -> RegistrationInput:
        name = _require_string(data, "name").strip()
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            raise InvalidInput(
                f"name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
            )

        email = _require_string(data, "email").strip().lower()
        if len(email) > EMAIL_MAX_LENGTH or _EMAIL_RE.match(email) is None:
            raise InvalidInput("email must be a valid email address")

        password = _require_string(data, "password")
        if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
            raise InvalidInput(
                f"password must be between {PASSWORD_MIN_LENGTH} and "
                f"{PASSWORD_MAX_LENGTH} characters"
            )

        return RegistrationInput(name=name, email=email, password=password)

    def validate_login(self, data: Mapping[str, Any]) -> LoginInput:
        email = _require_string(data, "email").strip().lower()
        if not email:
            raise InvalidInput("email is required")
        password = _require_string(data, "password")
        if not password:
            raise InvalidInput("password is required")
        return LoginInput(email=email, password=password)

    def validate_task_create(self, data: Mapping[str, Any]) -> TaskCreateInput:
        if "title" not in data or data["title"] is None:
            raise InvalidInput("title is required")
        title = _check_title(data["title"])

        description = None
        if "description" in data:
            description = _check_description(data["description"])

        status = None
        if "status" in data:
            status = _check_member("status", data["status"], TASK_STATUSES)

        priority = None
        if "priority" in data:
            priority = _check_member("priority", data["priority"], TASK_PRIORITIES)

        due_date = None
        if "dueDate" in data:
            due_date = _check_due_date(data["dueDate"])

        return TaskCreateInput(
            title=title,
            description=description,
            status=status,
            priority=priority,
            due_date=due_date,
        )

    def validate_task_update(self, data: Mapping[str, Any]) -> TaskUpdateInput:
        """Validate a partial update. ``dueDate: null`` clears the due date."""
        changes: dict[str, Any] = {}
        for field_name, column in _UPDATE_COLUMN_BY_FIELD.items():
            if field_name not in data:
                continue
            value = data[field_name]
            if field_name == "title":
                changes[column] = _check_title(value)
            elif field_name == "description":
                changes[column] = _check_description(value)
            elif field_name == "status":
                changes[column] = _check_member("status", value, TASK_STATUSES)
            elif field_name == "priority":
                changes[column] = _check_member("priority", value, TASK_PRIORITIES)
            else:
                changes[column] = None if value is None else _check_due_date(value)
        return TaskUpdateInput(changes=changes)

    def validate_query(self, params: Mapping[str, str]) -> TaskQueryInput:
        """Validate list query parameters. Unknown parameters are ignored."""
        status = params.get("status")
        if status is not None:
            _check_member("status", status, TASK_STATUSES)

        priority = params.get("priority")
        if priority is not None:
            _check_member("priority", priority, TASK_PRIORITIES)

        page = DEFAULT_PAGE
        page_raw = params.get("page")
        if page_raw is not None:
            if _INTEGER_RE.match(page_raw.strip()) is None:
                raise InvalidInput("page must be an integer")
            page = int(page_raw)
            if page < 1:
                raise InvalidInput("page must be at least 1")

        limit = None
        limit_raw = params.get("limit")
        if limit_raw is not None:
            if _INTEGER_RE.match(limit_raw.strip()) is None:
                raise InvalidInput("limit must be an integer")
            limit = int(limit_raw)
            if not 1 <= limit <= self._max_limit:
                raise InvalidInput(f"limit must be between 1 and {self._max_limit}")

        sort_by = params.get("sortBy", "createdAt")
        _check_member("sortBy", sort_by, SORT_KEYS)

        sort_order = params.get("sortOrder", "desc")
        _check_member("sortOrder", sort_order, SORT_ORDERS)

        search = params.get("search")
        if search is not None:
            search = search.strip()
            if len(search) > SEARCH_MAX_LENGTH:
                raise InvalidInput(f"search must be at most {SEARCH_MAX_LENGTH} characters")
            if not search:
                search = None

        return TaskQueryInput(
            status=status,
            priority=priority,
            search=search,
            page=page,
            limit=limit,
            sort_by=sort_by,  # type: ignore[arg-type]
            sort_order=sort_order,  # type: ignore[arg-type]
        )
