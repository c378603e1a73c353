"""Application lifecycle management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from task_tracker_service.config import get_settings
from task_tracker_service.core.state import init_app_state
from task_tracker_service.logging import get_logger, setup_logging
from task_tracker_service.services.account_service import AccountService
from task_tracker_service.services.account_store import AccountStore
from task_tracker_service.services.identity_resolver import IdentityResolver
from task_tracker_service.services.input_validator import InputValidator
from task_tracker_service.services.ownership_guard import OwnershipGuard
from task_tracker_service.services.password_hasher import PasswordHasher
from task_tracker_service.services.task_manager import TaskManager
from task_tracker_service.services.task_query import TaskQueryEngine
from task_tracker_service.services.task_store import TaskStore
from task_tracker_service.services.token_validator import TokenValidator

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    # === STARTUP ===
    settings = get_settings()

    setup_logging(settings.logging.level, settings.service.name, settings.logging.directory)
    logger = get_logger(__name__)

    state = init_app_state()
    state.expose_stack_traces = settings.diagnostics.expose_stack_traces

    db_path = settings.database.path
    account_store = AccountStore(db_path=db_path)
    task_store = TaskStore(db_path=db_path)
    state.account_store = account_store
    state.task_store = task_store

    token_validator = TokenValidator(
        secret=settings.auth.jwt_secret,
        token_ttl_seconds=settings.auth.token_ttl_seconds,
    )
    state.token_validator = token_validator
    state.identity_resolver = IdentityResolver(store=account_store)
    state.input_validator = InputValidator(max_limit=settings.pagination.max_limit)

    hasher = PasswordHasher(
        time_cost=settings.password.time_cost,
        memory_cost=settings.password.memory_cost,
        parallelism=settings.password.parallelism,
    )
    state.account_service = AccountService(
        store=account_store,
        hasher=hasher,
        token_validator=token_validator,
    )

    guard = OwnershipGuard(store=task_store)
    state.task_query = TaskQueryEngine(
        store=task_store,
        guard=guard,
        default_limit=settings.pagination.default_limit,
    )
    state.task_manager = TaskManager(store=task_store, guard=guard)

    logger.info(
        "Service starting",
        extra={
            "service_name": settings.service.name,
            "version": settings.service.version,
            "port": settings.server.port,
            "db_path": db_path,
        },
    )

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Service shutting down", extra={"uptime_seconds": state.uptime_seconds})

    task_store.close()
    account_store.close()
