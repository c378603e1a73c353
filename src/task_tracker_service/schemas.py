"""Pydantic response models for the API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Response model for GET /health."""

    model_config = ConfigDict(extra="forbid")
    status: Literal["OK"]
    timestamp: str
    uptime_seconds: float
    started_at: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    model_config = ConfigDict(extra="forbid")
    error: str
    stack: str | None = None


class UserResponse(BaseModel):
    """Public account fields. The password hash is never part of this model."""

    model_config = ConfigDict(extra="forbid")
    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    """Response model for register and login."""

    model_config = ConfigDict(extra="forbid")
    message: str
    token: str
    user: UserResponse


class TaskResponse(BaseModel):
    """Single task as returned by every task endpoint."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)
    id: str
    user_id: str = Field(alias="userId")
    title: str
    description: str | None
    status: str
    priority: str
    due_date: str | None = Field(alias="dueDate")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class TaskListResponse(BaseModel):
    """Response model for GET /api/tasks."""

    model_config = ConfigDict(extra="forbid")
    tasks: list[TaskResponse]
    total: int
    page: int
    limit: int
    pages: int


class StatusCounts(BaseModel):
    model_config = ConfigDict(extra="forbid")
    pending: int
    in_progress: int
    completed: int


class PriorityCounts(BaseModel):
    model_config = ConfigDict(extra="forbid")
    low: int
    medium: int
    high: int


class TaskStatsResponse(BaseModel):
    """Response model for GET /api/tasks/stats/summary."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)
    total: int
    by_status: StatusCounts = Field(alias="byStatus")
    by_priority: PriorityCounts = Field(alias="byPriority")
    overdue: int


class MessageResponse(BaseModel):
    """Plain confirmation body."""

    model_config = ConfigDict(extra="forbid")
    message: str
