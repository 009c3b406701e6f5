"""Structured failure model shared by every process builder task."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from app.core.exceptions import ContentStudioError

# Executor-level codes; task-specific codes live next to the task that raises them.
VALIDATION_FAILED = "VALIDATION_FAILED"
EXECUTION_ERROR = "EXECUTION_ERROR"
TASK_TIMEOUT = "TASK_TIMEOUT"
TASK_EXECUTION_FAILED = "TASK_EXECUTION_FAILED"
RATE_LIMITED = "429"


@dataclass(frozen=True, slots=True)
class TaskError:
    """One structured error attached to a task result or progress event."""

    code: str
    message: str
    task_id: str | None = None
    details: Any = None
    retryable: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.task_id is not None:
            payload["task_id"] = self.task_id
        if self.details is not None:
            payload["details"] = self.details
        if self.retryable is not None:
            payload["retryable"] = self.retryable
        return payload


class ProcessBuilderError(ContentStudioError):
    """Exception form of `TaskError`, raised inside tasks and the executor."""

    def __init__(
        self,
        message: str,
        code: str = "PROCESS_BUILDER_ERROR",
        task_id: str | None = None,
        details: Any = None,
        retryable: bool | None = None,
    ) -> None:
        self.code = code
        self.task_id = task_id
        self.retryable = retryable
        super().__init__(message)
        # ContentStudioError normalizes details to a dict; keep the raw payload.
        self.details = details

    def to_task_error(self) -> TaskError:
        return TaskError(
            code=self.code,
            message=self.message,
            task_id=self.task_id,
            details=self.details,
            retryable=self.retryable,
        )


class TaskValidationError(ProcessBuilderError):
    """A task's pre-flight validation rejected the current context."""

    def __init__(self, task_id: str, reason: str | None) -> None:
        super().__init__(
            f"Task {task_id} validation failed: {reason or 'no reason given'}",
            code=VALIDATION_FAILED,
            task_id=task_id,
        )


class TaskTimeoutError(ProcessBuilderError):
    """A task did not finish inside its declared timeout."""

    def __init__(self, task_id: str, timeout: float) -> None:
        super().__init__(
            f"Task {task_id} timed out after {timeout:g}s",
            code=TASK_TIMEOUT,
            task_id=task_id,
            details={"timeout_seconds": timeout},
            retryable=True,
        )


class AIRateLimitError(ProcessBuilderError):
    """The text-generation service asked us to back off."""

    def __init__(self, message: str, task_id: str | None = None) -> None:
        super().__init__(message, code=RATE_LIMITED, task_id=task_id, retryable=True)


def task_error_from_exception(
    error: BaseException,
    task_id: str | None = None,
    *,
    default_code: str = TASK_EXECUTION_FAILED,
) -> TaskError:
    """Convert any exception into the structured error shape."""
    if isinstance(error, ProcessBuilderError):
        task_error = error.to_task_error()
        if task_error.task_id is None and task_id is not None:
            return TaskError(
                code=task_error.code,
                message=task_error.message,
                task_id=task_id,
                details=task_error.details,
                retryable=task_error.retryable,
            )
        return task_error

    return TaskError(
        code=default_code,
        message=str(error) or type(error).__name__,
        task_id=task_id,
        details={"exception_type": type(error).__name__},
    )
