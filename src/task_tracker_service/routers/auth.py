"""Account registration and login endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from task_tracker_service.core.state import get_app_state
from task_tracker_service.routers.validation import parse_json_body
from task_tracker_service.schemas import AuthResponse

router = APIRouter()


@router.post("/api/auth/register", status_code=201)
async def register(request: Request) -> JSONResponse:
    """Create an account and return a bearer token for it."""
    data = parse_json_body(await request.body())

    state = get_app_state()
    if state.input_validator is None or state.account_service is None:
        msg = "AccountService not initialized"
        raise RuntimeError(msg)

    payload = state.input_validator.validate_registration(data)
    result = await state.account_service.register(payload)
    response = AuthResponse.model_validate(result)
    return JSONResponse(status_code=201, content=response.model_dump())


@router.post("/api/auth/login")
async def login(request: Request) -> JSONResponse:
    """Exchange email and password for a bearer token."""
    data = parse_json_body(await request.body())

    state = get_app_state()
    if state.input_validator is None or state.account_service is None:
        msg = "AccountService not initialized"
        raise RuntimeError(msg)

    payload = state.input_validator.validate_login(data)
    result = await state.account_service.login(payload)
    response = AuthResponse.model_validate(result)
    return JSONResponse(content=response.model_dump())
