"""
Service error taxonomy and exception handler registration.

Every failure that crosses a layer boundary is a ``ServiceError``. The
subclasses pin the error code and HTTP status so call sites only supply the
human-readable message.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import FastAPI, Request
    from fastapi.responses import JSONResponse
    from starlette.types import ExceptionHandler


class ServiceError(Exception):
    """Base error carrying an error code, a client-safe message and a status."""

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.message = message
        self.status_code = status_code
        self.details: dict[str, Any] = details if details is not None else {}


class InvalidInput(ServiceError):
    """Malformed or missing fields, malformed identifiers."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__("INVALID_INPUT", message, 400, details)


class Unauthenticated(ServiceError):
    """Missing, invalid or expired credential, or unresolvable identity."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__("UNAUTHENTICATED", message, 401)


class Forbidden(ServiceError):
    """Valid identity acting on a resource it does not own."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__("FORBIDDEN", message, 403)


class NotFound(ServiceError):
    """Well-formed reference with no matching record."""

    def __init__(self, message: str) -> None:
        super().__init__("NOT_FOUND", message, 404)


class Duplicate(ServiceError):
    """Unique-constraint violation."""

    def __init__(self, message: str) -> None:
        super().__init__("DUPLICATE", message, 400)


class ServerError(ServiceError):
    """Unexpected internal failure."""

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__("SERVER_ERROR", message, 500)


def register_exception_handlers(
    app: FastAPI,
    error_type: type[ServiceError],
    service_error_handler: Callable[[Request, Any], Awaitable[JSONResponse]],
    unhandled_exception_handler: Callable[[Request, Exception], Awaitable[JSONResponse]],
) -> None:
    """Attach the service error handler and the catch-all handler to an app."""
    app.add_exception_handler(error_type, cast("ExceptionHandler", service_error_handler))
    app.add_exception_handler(Exception, cast("ExceptionHandler", unhandled_exception_handler))
