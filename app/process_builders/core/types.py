"""Core process builder types.

Generic system types only. Pipeline-specific payloads live next to the
pipeline that produces them.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Literal

from pydantic import BaseModel

from app.process_builders.core.errors import ProcessBuilderError, TaskError

RuleType = Literal["string", "number", "boolean", "array", "object"]
TaskStatus = Literal["pending", "running", "completed", "failed", "retrying"]
PipelineStatus = Literal["success", "partial", "error"]

ProgressCallback = Callable[["TaskProgress"], Awaitable[None] | None]


@dataclass(frozen=True, slots=True)
class Goal:
    """Free-text intent for one pipeline run."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Rule:
    """A named, typed caller input.

    Build rules with the typed constructors (`Rule.number("questionCount", 10)`).
    `Rule.infer` exists for untyped JSON input only.
    """

    key: str
    value: Any
    type: RuleType

    @classmethod
    def string(cls, key: str, value: str) -> Rule:
        if not isinstance(value, str):
            raise TypeError(f"Rule {key} expects a string, got {type(value).__name__}")
        return cls(key=key, value=value, type="string")

    @classmethod
    def number(cls, key: str, value: int | float) -> Rule:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise TypeError(f"Rule {key} expects a number, got {type(value).__name__}")
        return cls(key=key, value=value, type="number")

    @classmethod
    def boolean(cls, key: str, value: bool) -> Rule:
        if not isinstance(value, bool):
            raise TypeError(f"Rule {key} expects a boolean, got {type(value).__name__}")
        return cls(key=key, value=value, type="boolean")

    @classmethod
    def array(cls, key: str, value: list[Any] | tuple[Any, ...]) -> Rule:
        if not isinstance(value, list | tuple):
            raise TypeError(f"Rule {key} expects an array, got {type(value).__name__}")
        return cls(key=key, value=list(value), type="array")

    @classmethod
    def object(cls, key: str, value: Mapping[str, Any]) -> Rule:
        if not isinstance(value, Mapping):
            raise TypeError(f"Rule {key} expects an object, got {type(value).__name__}")
        return cls(key=key, value=dict(value), type="object")

    @classmethod
    def infer(cls, key: str, value: Any) -> Rule:
        """Wrap an untyped value, defaulting to `string` for anything unrecognized."""
        if isinstance(value, str):
            return cls(key=key, value=value, type="string")
        if isinstance(value, bool):
            return cls(key=key, value=value, type="boolean")
        if isinstance(value, int | float):
            return cls(key=key, value=value, type="number")
        if isinstance(value, list | tuple):
            return cls(key=key, value=list(value), type="array")
        if isinstance(value, Mapping):
            return cls(key=key, value=dict(value), type="object")
        return cls(key=key, value=value, type="string")


Rules = dict[str, Rule]


def rule_value(rules: Mapping[str, Rule], key: str, default: Any = None) -> Any:
    """Return the raw value of a rule, or `default` when absent or null."""
    rule = rules.get(key)
    if rule is None or rule.value is None:
        return default
    return rule.value


@dataclass(frozen=True, slots=True)
class RuleLimit:
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True, slots=True)
class PipelineMetadata:
    """Static, versioned descriptor of one pipeline."""

    id: str
    name: str
    description: str
    version: str
    tasks: tuple[str, ...]
    required_rules: tuple[str, ...]
    optional_rules: tuple[str, ...] = ()
    defaults: Mapping[str, Any] = field(default_factory=dict)
    limits: Mapping[str, RuleLimit] = field(default_factory=dict)
    deprecated_versions: tuple[str, ...] = ()


@dataclass(slots=True)
class ProcessBuilderOptions:
    """Caller options for one run.

    `use_cache` is accepted and carried through but no task reads it yet.
    """

    allow_partial_results: bool = False
    use_cache: bool = False
    dry_run: bool = False
    on_progress: ProgressCallback | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    error: str | None = None


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Outcome of one task execution."""

    success: bool
    data: Any = None
    errors: list[TaskError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(
        cls,
        data: Any = None,
        *,
        warnings: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> TaskResult:
        return cls(
            success=True,
            data=data,
            warnings=list(warnings or []),
            metadata=dict(metadata or {}),
        )

    @classmethod
    def failed(
        cls,
        task_id: str,
        code: str,
        message: str,
        *,
        details: Any = None,
        retryable: bool | None = None,
        warnings: list[str] | None = None,
    ) -> TaskResult:
        return cls(
            success=False,
            errors=[
                TaskError(
                    code=code,
                    message=message,
                    task_id=task_id,
                    details=details,
                    retryable=retryable,
                )
            ],
            warnings=list(warnings or []),
        )

    @classmethod
    def from_errors(
        cls,
        errors: list[TaskError],
        *,
        warnings: list[str] | None = None,
    ) -> TaskResult:
        return cls(success=False, errors=list(errors), warnings=list(warnings or []))

    @property
    def first_error(self) -> TaskError | None:
        return self.errors[0] if self.errors else None


@dataclass(frozen=True, slots=True)
class TaskProgress:
    """One observable lifecycle event of a task."""

    task_id: str
    task_name: str
    status: TaskStatus
    progress: float
    message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: TaskError | None = None


@dataclass(slots=True)
class TaskContext:
    """Mutable state threaded through one pipeline run.

    Results are recorded once per task and looked up by task id, so inserting
    or reordering tasks never shifts what a downstream task reads.
    """

    goal: Goal
    rules: Rules
    options: ProcessBuilderOptions = field(default_factory=ProcessBuilderOptions)
    metadata: dict[str, Any] = field(default_factory=dict)
    _results: dict[str, TaskResult] = field(default_factory=dict, repr=False)

    @property
    def results(self) -> Mapping[str, TaskResult]:
        return MappingProxyType(self._results)

    @property
    def previous_results(self) -> list[TaskResult]:
        """Recorded results in execution order."""
        return list(self._results.values())

    def record_result(self, task_id: str, result: TaskResult) -> None:
        if task_id in self._results:
            raise ProcessBuilderError(
                f"Result for task {task_id} already recorded",
                code="DUPLICATE_TASK_RESULT",
                task_id=task_id,
            )
        self._results[task_id] = result
        if result.metadata:
            self.metadata.update(result.metadata)

    def result_for(self, task_id: str) -> TaskResult | None:
        return self._results.get(task_id)

    def data_for(self, task_id: str) -> Any:
        """Data of a successful result for `task_id`, else None."""
        result = self._results.get(task_id)
        if result is None or not result.success:
            return None
        return result.data

    def rule_value(self, key: str, default: Any = None) -> Any:
        return rule_value(self.rules, key, default)

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run


@dataclass(slots=True)
class PipelineResult:
    """Terminal aggregate of one pipeline run."""

    status: PipelineStatus
    process_id: str
    process_name: str
    results: list[TaskResult]
    task_progress: list[TaskProgress]
    execution_time_ms: int
    run_id: str | None = None
    final_result: Any = None
    errors: list[TaskError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation for the API and CLI."""
        return {
            "status": self.status,
            "process_id": self.process_id,
            "process_name": self.process_name,
            "run_id": self.run_id,
            "results": [to_jsonable(result) for result in self.results],
            "task_progress": [to_jsonable(event) for event in self.task_progress],
            "final_result": to_jsonable(self.final_result),
            "errors": [error.to_dict() for error in self.errors],
            "warnings": list(self.warnings),
            "execution_time_ms": self.execution_time_ms,
            "metadata": to_jsonable(self.metadata),
        }


def to_jsonable(value: Any) -> Any:
    """Recursively convert task payloads (models, dataclasses, datetimes) to JSON types."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, TaskError):
        return value.to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: to_jsonable(getattr(value, item.name))
            for item in dataclasses.fields(value)
            if not item.name.startswith("_")
        }
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, list | tuple | set):
        return [to_jsonable(item) for item in value]
    return value
