"""ASGI middleware guarding the transport boundary."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, cast

from fastapi.responses import JSONResponse

from task_tracker_service.logging import get_logger

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

_BODY_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class RequestValidationMiddleware:
    """
    ASGI middleware that rejects oversized request bodies with 413.

    Runs before FastAPI routes, so an oversized body never reaches
    authentication or input validation. A declared Content-Length over
    the limit is rejected without reading the body.
    """

    def __init__(self, app: ASGIApp, max_body_size: int) -> None:
        self.app = app
        self.max_body_size = max_body_size

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(status_code=413, content={"error": "Request body too large"})
        await response(scope, receive, send)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = cast("str", scope.get("method", "GET"))
        if method not in _BODY_METHODS:
            await self.app(scope, receive, send)
            return

        raw_headers = cast("list[tuple[bytes, bytes]]", scope.get("headers", []))
        headers: dict[bytes, bytes] = dict(raw_headers)
        declared_length = headers.get(b"content-length", b"").decode()
        if declared_length.isdigit() and int(declared_length) > self.max_body_size:
            await self._reject(scope, receive, send)
            return

        # Read and buffer body, checking size
        body_parts: list[bytes] = []
        body_size = 0

        while True:
            message = cast("dict[str, Any]", await receive())
            if message["type"] == "http.disconnect":
                return
            chunk = cast("bytes", message.get("body", b""))
            body_parts.append(chunk)
            body_size += len(chunk)

            if body_size > self.max_body_size:
                await self._reject(scope, receive, send)
                return

            if not message.get("more_body", False):
                break

        # Replay buffered body for downstream app
        full_body = b"".join(body_parts)
        body_sent = False

        async def buffered_receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": full_body, "more_body": False}
            return {"type": "http.disconnect"}

        await self.app(scope, buffered_receive, send)


class RequestTimeoutMiddleware:
    """
    ASGI middleware that aborts requests running past a deadline.

    The in-flight handler is cancelled and, if no response has started,
    the client receives the generic 500 body.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float) -> None:
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, tracking_send), self.timeout_seconds)
        except TimeoutError:
            logger = get_logger(__name__)
            logger.error(
                "Request deadline exceeded",
                extra={
                    "path": cast("str", scope.get("path", "")),
                    "timeout_seconds": self.timeout_seconds,
                },
            )
            if response_started:
                return
            response = JSONResponse(status_code=500, content={"error": "Internal server error"})
            await response(scope, receive, send)
