"""Router test fixtures driving the real app through its lifespan."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient

from task_tracker_service.app import create_app
from task_tracker_service.config import clear_settings_cache
from task_tracker_service.core.lifespan import lifespan
from task_tracker_service.core.state import reset_app_state
from tests.helpers import make_config_yaml, register_and_get_token

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path


@pytest.fixture
def config_overrides() -> dict[str, Any]:
    """Override individual config values for one test module or test."""
    return {}


@pytest.fixture
async def app(tmp_path: Path, config_overrides: dict[str, Any]) -> AsyncIterator[Any]:
    """Create a test app with a temp config file and temp database."""
    db_path = tmp_path / "test.db"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(make_config_yaml(db_path, **config_overrides))

    old_config = os.environ.get("CONFIG_PATH")
    os.environ["CONFIG_PATH"] = str(config_path)

    clear_settings_cache()
    reset_app_state()

    test_app = create_app()
    async with lifespan(test_app):
        yield test_app

    reset_app_state()
    clear_settings_cache()
    if old_config is None:
        os.environ.pop("CONFIG_PATH", None)
    else:
        os.environ["CONFIG_PATH"] = old_config


@pytest.fixture
async def client(app: Any) -> AsyncIterator[AsyncClient]:
    """Create an async HTTP client for the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def alice_token(client: AsyncClient) -> str:
    """Register Alice and return their bearer token."""
    return await register_and_get_token(client, name="Alice", email="alice@example.com")


@pytest.fixture
async def bob_token(client: AsyncClient) -> str:
    """Register Bob and return their bearer token."""
    return await register_and_get_token(client, name="Bob", email="bob@example.com")
