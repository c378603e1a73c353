"""Unit test fixtures: clear cached settings and app state between tests."""

import pytest

from task_tracker_service.config import clear_settings_cache
from task_tracker_service.core.state import reset_app_state


@pytest.fixture(autouse=True)
def _clear_caches():
    """Clear settings cache and app state between tests."""
    clear_settings_cache()
    reset_app_state()
    yield
    clear_settings_cache()
    reset_app_state()
