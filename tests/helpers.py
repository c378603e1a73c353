"""Shared test helpers for configuration, accounts and bearer tokens."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from joserfc import jwt
from joserfc.jwk import OctKey

if TYPE_CHECKING:
    from pathlib import Path

    from httpx import AsyncClient, Response

TEST_JWT_SECRET = "test-secret-that-is-at-least-32-characters-long"
DEFAULT_PASSWORD = "secret123"


def make_config_yaml(
    db_path: Path | str,
    *,
    jwt_secret: str = TEST_JWT_SECRET,
    token_ttl_seconds: int = 3600,
    default_limit: int = 20,
    max_limit: int = 100,
    max_body_size: int = 1048576,
    timeout_seconds: float = 10,
    expose_stack_traces: bool = False,
    log_directory: str | None = None,
) -> str:
    """Render a complete config.yaml with cheap argon2 parameters for tests."""
    directory = "null" if log_directory is None else f'"{log_directory}"'
    stack_traces = "true" if expose_stack_traces else "false"
    return f"""\
service:
  name: "task-tracker"
  version: "0.1.0"
server:
  host: "127.0.0.1"
  port: 8080
  log_level: "info"
logging:
  level: "WARNING"
  directory: {directory}
database:
  path: "{db_path}"
auth:
  jwt_secret: "{jwt_secret}"
  token_ttl_seconds: {token_ttl_seconds}
password:
  time_cost: 1
  memory_cost: 8
  parallelism: 1
pagination:
  default_limit: {default_limit}
  max_limit: {max_limit}
request:
  max_body_size: {max_body_size}
  timeout_seconds: {timeout_seconds}
diagnostics:
  expose_stack_traces: {stack_traces}
"""


def make_account_id() -> str:
    """Generate a well-formed account ID."""
    return f"a-{uuid.uuid4()}"


def make_task_id() -> str:
    """Generate a well-formed task ID."""
    return f"t-{uuid.uuid4()}"


def make_token(
    claims: dict[str, Any],
    *,
    secret: str = TEST_JWT_SECRET,
    algorithm: str = "HS256",
) -> str:
    """Sign arbitrary claims, for tokens the service itself would never issue."""
    key = OctKey.import_key(secret.encode())
    return jwt.encode({"alg": algorithm}, claims, key, algorithms=[algorithm])


def auth_header(token: str) -> dict[str, str]:
    """Build the Authorization header for a bearer token."""
    return {"Authorization": f"Bearer {token}"}


async def register_user(
    client: AsyncClient,
    *,
    name: str = "Test User",
    email: str | None = None,
    password: str = DEFAULT_PASSWORD,
) -> Response:
    """Register an account via POST /api/auth/register and return the response."""
    if email is None:
        email = f"user-{uuid.uuid4().hex[:12]}@example.com"
    return await client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )


async def register_and_get_token(client: AsyncClient, **kwargs: Any) -> str:
    """Register an account and return its bearer token."""
    response = await register_user(client, **kwargs)
    assert response.status_code == 201, response.text
    return str(response.json()["token"])


async def create_task(client: AsyncClient, token: str, **fields: Any) -> Response:
    """Create a task via POST /api/tasks. Defaults the title when not given."""
    payload: dict[str, Any] = {"title": "Test task"}
    payload.update(fields)
    return await client.post("/api/tasks", json=payload, headers=auth_header(token))
