"""Architecture test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from pytestarch import EvaluableArchitecture, LayeredArchitecture, get_evaluable_architecture

# tests/architecture/conftest.py -> tests/ -> repository root
_TESTS_DIR = Path(__file__).resolve().parent.parent
_REPO_ROOT = _TESTS_DIR.parent
_SERVICE_PKG = _REPO_ROOT / "src" / "task_tracker_service"


@pytest.fixture(scope="session")
def evaluable() -> EvaluableArchitecture:
    """Build the evaluable architecture graph for task_tracker_service.

    Uses the package as both root and module path so module names are
    clean (e.g. 'task_tracker_service.routers.tasks').
    """
    return get_evaluable_architecture(str(_SERVICE_PKG), str(_SERVICE_PKG))


@pytest.fixture(scope="session")
def layered_arch() -> LayeredArchitecture:
    """Define the service's layered architecture.

    Layers (top to bottom):
        routers   - HTTP endpoint handlers
        core      - App state, lifespan, middleware, exception handlers
        services  - Validation, ownership, queries and mutations (no FastAPI imports)
    """
    return (
        LayeredArchitecture()
        .layer("routers")
        .containing_modules(["task_tracker_service.routers"])
        .layer("core")
        .containing_modules(["task_tracker_service.core"])
        .layer("services")
        .containing_modules(["task_tracker_service.services"])
    )
