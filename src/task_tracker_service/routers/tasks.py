"""Task endpoints. Every route authenticates before reading its input."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from task_tracker_service.core.state import get_app_state
from task_tracker_service.routers.validation import parse_json_body, require_identity
from task_tracker_service.schemas import (
    MessageResponse,
    TaskListResponse,
    TaskResponse,
    TaskStatsResponse,
)
from task_tracker_service.services.ownership_guard import check_task_id

router = APIRouter(prefix="/api/tasks")


# ---------------------------------------------------------------------------
# GET /api/tasks/stats/summary (MUST be before GET /api/tasks/{task_id})
# ---------------------------------------------------------------------------


@router.get("/stats/summary")
async def task_stats(request: Request) -> JSONResponse:
    """Counts of the caller's tasks by status and priority, plus overdue and total."""
    identity = await require_identity(request)

    state = get_app_state()
    if state.task_query is None:
        msg = "TaskQueryEngine not initialized"
        raise RuntimeError(msg)

    result = await state.task_query.get_stats(identity)
    response = TaskStatsResponse.model_validate(result)
    return JSONResponse(content=response.model_dump(by_alias=True))


# ---------------------------------------------------------------------------
# GET /api/tasks: filtered, sorted, paginated listing
# ---------------------------------------------------------------------------


@router.get("")
async def list_tasks(request: Request) -> JSONResponse:
    """List the caller's tasks."""
    identity = await require_identity(request)

    state = get_app_state()
    if state.input_validator is None or state.task_query is None:
        msg = "TaskQueryEngine not initialized"
        raise RuntimeError(msg)

    query = state.input_validator.validate_query(request.query_params)
    result = await state.task_query.list_tasks(identity, query)
    response = TaskListResponse.model_validate(result)
    return JSONResponse(content=response.model_dump(by_alias=True))


@router.post("", status_code=201)
async def create_task(request: Request) -> JSONResponse:
    """Create a task owned by the caller."""
    identity = await require_identity(request)
    data = parse_json_body(await request.body())

    state = get_app_state()
    if state.input_validator is None or state.task_manager is None:
        msg = "TaskManager not initialized"
        raise RuntimeError(msg)

    payload = state.input_validator.validate_task_create(data)
    result = await state.task_manager.create_task(identity, payload)
    response = TaskResponse.model_validate(result)
    return JSONResponse(status_code=201, content=response.model_dump(by_alias=True))


# ---------------------------------------------------------------------------
# Single-task routes
# ---------------------------------------------------------------------------


@router.get("/{task_id}")
async def get_task(task_id: str, request: Request) -> JSONResponse:
    """Fetch one of the caller's tasks."""
    identity = await require_identity(request)

    state = get_app_state()
    if state.task_query is None:
        msg = "TaskQueryEngine not initialized"
        raise RuntimeError(msg)

    result = await state.task_query.get_task(identity, task_id)
    response = TaskResponse.model_validate(result)
    return JSONResponse(content=response.model_dump(by_alias=True))


@router.put("/{task_id}")
async def update_task(task_id: str, request: Request) -> JSONResponse:
    """Partially update one of the caller's tasks."""
    identity = await require_identity(request)
    check_task_id(task_id)
    data = parse_json_body(await request.body())

    state = get_app_state()
    if state.input_validator is None or state.task_manager is None:
        msg = "TaskManager not initialized"
        raise RuntimeError(msg)

    payload = state.input_validator.validate_task_update(data)
    result = await state.task_manager.update_task(identity, task_id, payload)
    response = TaskResponse.model_validate(result)
    return JSONResponse(content=response.model_dump(by_alias=True))


@router.delete("/{task_id}")
async def delete_task(task_id: str, request: Request) -> JSONResponse:
    """Delete one of the caller's tasks."""
    identity = await require_identity(request)

    state = get_app_state()
    if state.task_manager is None:
        msg = "TaskManager not initialized"
        raise RuntimeError(msg)

    await state.task_manager.delete_task(identity, task_id)
    response = MessageResponse(message="Task deleted successfully")
    return JSONResponse(content=response.model_dump())
