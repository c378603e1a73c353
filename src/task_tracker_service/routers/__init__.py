"""API routers."""

from task_tracker_service.routers import auth, health, tasks

__all__ = ["auth", "health", "tasks"]
