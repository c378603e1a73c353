"""Application state management."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from task_tracker_service.services.account_service import AccountService
    from task_tracker_service.services.account_store import AccountStore
    from task_tracker_service.services.identity_resolver import IdentityResolver
    from task_tracker_service.services.input_validator import InputValidator
    from task_tracker_service.services.task_manager import TaskManager
    from task_tracker_service.services.task_query import TaskQueryEngine
    from task_tracker_service.services.task_store import TaskStore
    from task_tracker_service.services.token_validator import TokenValidator


@dataclass
class AppState:
    """Runtime application state."""

    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    account_store: AccountStore | None = None
    task_store: TaskStore | None = None
    token_validator: TokenValidator | None = None
    identity_resolver: IdentityResolver | None = None
    input_validator: InputValidator | None = None
    account_service: AccountService | None = None
    task_query: TaskQueryEngine | None = None
    task_manager: TaskManager | None = None
    expose_stack_traces: bool = False

    @property
    def uptime_seconds(self) -> float:
        """Calculate uptime in seconds."""
        return (datetime.now(UTC) - self.start_time).total_seconds()

    @property
    def started_at(self) -> str:
        """ISO format start time."""
        return self.start_time.isoformat(timespec="seconds").replace("+00:00", "Z")


# Global application state container
_state_container: dict[str, AppState | None] = {"app_state": None}


def get_app_state() -> AppState:
    """Get the current application state."""
    app_state = _state_container["app_state"]
    if app_state is None:
        msg = "Application state not initialized"
        raise RuntimeError(msg)
    return app_state


def find_app_state() -> AppState | None:
    """Get the current application state, or None outside the lifespan."""
    return _state_container["app_state"]


def init_app_state() -> AppState:
    """Initialize application state. Called during startup."""
    app_state = AppState()
    _state_container["app_state"] = app_state
    return app_state


def reset_app_state() -> None:
    """Reset application state. Used in testing."""
    _state_container["app_state"] = None
