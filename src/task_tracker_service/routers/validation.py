"""Shared request helpers for the task tracker routers."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from service_commons.exceptions import InvalidInput

from task_tracker_service.core.state import get_app_state

if TYPE_CHECKING:
    from fastapi import Request

    from task_tracker_service.services.models import ResolvedIdentity


def parse_json_body(raw_body: bytes) -> dict[str, Any]:
    """Parse JSON body, raising InvalidInput on failure. An empty body is ``{}``."""
    if raw_body.strip() == b"":
        return {}

    try:
        data = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidInput("Request body is not valid JSON") from exc

    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")

    # JSON escapes can smuggle lone surrogates, which no UTF-8 store can hold
    try:
        json.dumps(data, ensure_ascii=False).encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidInput("Request body is not valid JSON") from exc

    return data


async def require_identity(request: Request) -> ResolvedIdentity:
    """
    Authenticate the request from its ``Authorization`` header.

    Runs before any path or body validation so that an unauthenticated
    caller always gets 401.
    """
    state = get_app_state()
    if state.token_validator is None or state.identity_resolver is None:
        msg = "Authentication components not initialized"
        raise RuntimeError(msg)

    subject = state.token_validator.verify_bearer(request.headers.get("authorization"))
    return await state.identity_resolver.resolve(subject)
