"""Task schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class TaskEventResponse(BaseModel):
    task_id: str
    task_name: str
    status: str
    progress: float
    message: str | None = None
    error: dict[str, Any] | None = None


class TaskStatusResponse(BaseModel):
    """Schema for process builder run progress."""

    run_id: str
    status: str
    process_id: str | None = None
    current_task_id: str | None = None
    current_task_name: str | None = None
    completed_tasks: int = 0
    total_tasks: int | None = None
    progress_percent: float | None = None
    error_message: str | None = None
    tasks: dict[str, TaskEventResponse] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
