"""Service layer components."""

from task_tracker_service.services.account_service import AccountService
from task_tracker_service.services.identity_resolver import IdentityResolver
from task_tracker_service.services.input_validator import InputValidator
from task_tracker_service.services.ownership_guard import OwnershipGuard
from task_tracker_service.services.task_manager import TaskManager
from task_tracker_service.services.task_query import TaskQueryEngine
from task_tracker_service.services.token_validator import TokenValidator

__all__ = [
    "AccountService",
    "IdentityResolver",
    "InputValidator",
    "OwnershipGuard",
    "TaskManager",
    "TaskQueryEngine",
    "TokenValidator",
]
