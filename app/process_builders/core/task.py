"""Base class for process builder tasks."""

from __future__ import annotations

from abc import ABC, abstractmethod

from app.process_builders.core.errors import TaskError
from app.process_builders.core.types import TaskContext, TaskResult, ValidationResult


class ProcessBuilderTask(ABC):
    """Abstract base class for one pipeline task.

    Each task should:
    1. Define id, name and description
    2. Implement execute, returning a TaskResult instead of raising
    3. Optionally override validate and the lifecycle hooks
    4. Optionally declare a retry or timeout policy

    Tasks only raise from execute for conditions a retry can fix; the
    executor turns anything that escapes into a failed result.
    """

    id: str
    name: str
    description: str = ""

    retryable: bool = False
    max_retries: int = 0
    retry_delay: float = 1.0
    timeout: float | None = None

    @abstractmethod
    async def execute(self, context: TaskContext) -> TaskResult:
        """Override with task-specific logic."""

    async def validate(self, context: TaskContext) -> ValidationResult:
        return ValidationResult(valid=True)

    async def on_start(self, context: TaskContext) -> None:
        return None

    async def on_success(self, result: TaskResult, context: TaskContext) -> None:
        return None

    async def on_error(self, error: TaskError, context: TaskContext) -> None:
        return None

    async def on_complete(self, result: TaskResult, context: TaskContext) -> None:
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"
