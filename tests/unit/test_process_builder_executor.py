"""Unit tests for the sequential process builder executor."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from app.process_builders.core.errors import (
    EXECUTION_ERROR,
    TASK_EXECUTION_FAILED,
    TASK_TIMEOUT,
    VALIDATION_FAILED,
    ProcessBuilderError,
    TaskError,
)
from app.process_builders.core.executor import ProcessBuilderExecutor
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import (
    Goal,
    ProcessBuilderOptions,
    Rule,
    TaskContext,
    TaskProgress,
    TaskResult,
    ValidationResult,
)

GOAL = Goal(text="Hockey legends")


class _RecordingTask(ProcessBuilderTask):
    def __init__(
        self,
        task_id: str,
        *,
        succeed: bool = True,
        data: Any = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.id = task_id
        self.name = task_id.title()
        self.succeed = succeed
        self.data = data if data is not None else task_id
        self.metadata = metadata
        self.calls = 0
        self.seen_results: list[str] = []

    async def execute(self, context: TaskContext) -> TaskResult:
        self.calls += 1
        self.seen_results = list(context.results)
        if not self.succeed:
            return TaskResult.failed(self.id, "BOOM", f"{self.id} failed")
        return TaskResult.ok(self.data, warnings=[f"{self.id} warning"], metadata=self.metadata)


class _FlakyTask(ProcessBuilderTask):
    id = "flaky"
    name = "Flaky"
    retryable = True
    max_retries = 2
    retry_delay = 0.01

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.attempts = 0

    async def execute(self, context: TaskContext) -> TaskResult:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise ProcessBuilderError("upstream busy", code="429", retryable=True)
        return TaskResult.ok({"attempts": self.attempts})


class _SlowTask(ProcessBuilderTask):
    id = "slow"
    name = "Slow"
    timeout = 0.05

    def __init__(self) -> None:
        self.finished = False

    async def execute(self, context: TaskContext) -> TaskResult:
        await asyncio.sleep(0.2)
        self.finished = True
        return TaskResult.ok("late")


class _InvalidTask(_RecordingTask):
    async def validate(self, context: TaskContext) -> ValidationResult:
        return ValidationResult(valid=False, error="needs upstream data")


class _HookFailingTask(_RecordingTask):
    async def on_start(self, context: TaskContext) -> None:
        raise RuntimeError("hook exploded")


class _RaisingTask(_RecordingTask):
    async def execute(self, context: TaskContext) -> TaskResult:
        self.calls += 1
        raise KeyError("missing")


class _ErrorHookTask(_RecordingTask):
    def __init__(self, task_id: str) -> None:
        super().__init__(task_id, succeed=False)
        self.hook_errors: list[TaskError] = []

    async def on_error(self, error: TaskError, context: TaskContext) -> None:
        self.hook_errors.append(error)


@pytest.mark.asyncio
async def test_results_are_recorded_in_task_order() -> None:
    tasks = [_RecordingTask(f"task-{index}") for index in range(4)]
    executor = ProcessBuilderExecutor(tasks, process_id="demo", process_name="Demo")

    result = await executor.execute(GOAL, {})

    assert result.status == "success"
    assert [item.data for item in result.results] == ["task-0", "task-1", "task-2", "task-3"]
    assert tasks[3].seen_results == ["task-0", "task-1", "task-2"]
    assert result.final_result == "task-3"
    assert result.warnings == [f"task-{index} warning" for index in range(4)]
    assert result.process_id == "demo"
    assert result.run_id and result.run_id.startswith("run_")


@pytest.mark.asyncio
async def test_failed_task_halts_run() -> None:
    first, second, third = (
        _RecordingTask("one"),
        _RecordingTask("two", succeed=False),
        _RecordingTask("three"),
    )
    executor = ProcessBuilderExecutor([first, second, third])

    result = await executor.execute(GOAL, {})

    assert result.status == "error"
    assert third.calls == 0
    assert len(result.results) == 2
    assert [error.code for error in result.errors] == ["BOOM"]


@pytest.mark.asyncio
async def test_partial_results_continue_past_failure() -> None:
    third = _RecordingTask("three")
    executor = ProcessBuilderExecutor(
        [_RecordingTask("one"), _RecordingTask("two", succeed=False), third]
    )

    result = await executor.execute(GOAL, {}, ProcessBuilderOptions(allow_partial_results=True))

    assert result.status == "partial"
    assert third.calls == 1
    assert len(result.results) == 3
    assert result.errors[0].task_id == "two"


@pytest.mark.asyncio
async def test_retry_succeeds_on_third_attempt() -> None:
    task = _FlakyTask(failures=2)
    events: list[TaskProgress] = []
    executor = ProcessBuilderExecutor([task], on_progress=events.append)

    result = await executor.execute(GOAL, {})

    assert task.attempts == 3
    assert result.status == "success"
    assert result.results[0].data == {"attempts": 3}
    retrying = [event for event in events if event.status == "retrying"]
    assert len(retrying) == 2
    assert retrying[0].message == "Attempt 1 failed; retrying in 0.01s"
    assert retrying[1].message == "Attempt 2 failed; retrying in 0.02s"


@pytest.mark.asyncio
async def test_retry_backoff_doubles_each_attempt(monkeypatch: pytest.MonkeyPatch) -> None:
    waits: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        waits.append(seconds)

    monkeypatch.setattr("app.process_builders.core.executor.asyncio.sleep", fake_sleep)
    task = _FlakyTask(failures=10)
    task.max_retries = 3

    result = await ProcessBuilderExecutor([task]).execute(GOAL, {})

    assert result.status == "error"
    assert task.attempts == 4
    assert waits == [0.01, 0.02, 0.04]


@pytest.mark.asyncio
async def test_retry_exhaustion_yields_failed_result() -> None:
    task = _FlakyTask(failures=10)
    executor = ProcessBuilderExecutor([task])

    result = await executor.execute(GOAL, {})

    assert task.attempts == 3
    assert result.status == "error"
    assert result.results[0].success is False
    assert result.errors[0].code == "429"
    assert result.errors[0].task_id == "flaky"


@pytest.mark.asyncio
async def test_timeout_fails_task_even_if_work_finishes_later() -> None:
    task = _SlowTask()
    executor = ProcessBuilderExecutor([task])

    result = await executor.execute(GOAL, {})

    assert result.status == "error"
    assert result.results[0].success is False
    assert result.errors[0].code == TASK_TIMEOUT
    assert len(executor._late_tasks) == 1
    await asyncio.sleep(0.25)
    assert task.finished is True
    assert executor._late_tasks == set()
    assert len(result.results) == 1


@pytest.mark.asyncio
async def test_validation_failure_stops_before_execute() -> None:
    first = _RecordingTask("first")
    second = _InvalidTask("second")
    events: list[TaskProgress] = []
    executor = ProcessBuilderExecutor([first, second], on_progress=events.append)

    result = await executor.execute(GOAL, {})

    assert result.status == "error"
    assert second.calls == 0
    assert result.errors[0].code == VALIDATION_FAILED
    assert "needs upstream data" in result.errors[0].message
    failed = [event for event in events if event.status == "failed"]
    assert failed[-1].task_id == "second"
    assert failed[-1].progress == 0


@pytest.mark.asyncio
async def test_hook_exception_becomes_execution_error() -> None:
    executor = ProcessBuilderExecutor([_HookFailingTask("hooked")])

    result = await executor.execute(GOAL, {})

    assert result.status == "error"
    assert result.errors[0].code == EXECUTION_ERROR
    assert result.errors[0].message == "hook exploded"
    assert result.final_result is None


@pytest.mark.asyncio
async def test_exception_in_execute_becomes_failed_result() -> None:
    task = _RaisingTask("raiser")
    executor = ProcessBuilderExecutor([task])

    result = await executor.execute(GOAL, {})

    assert result.results[0].success is False
    assert result.errors[0].code == TASK_EXECUTION_FAILED
    assert result.errors[0].details == {"exception_type": "KeyError"}


@pytest.mark.asyncio
async def test_on_error_hook_receives_first_error() -> None:
    task = _ErrorHookTask("broken")
    executor = ProcessBuilderExecutor([task])

    await executor.execute(GOAL, {})

    assert [error.code for error in task.hook_errors] == ["BOOM"]


@pytest.mark.asyncio
async def test_progress_events_follow_lifecycle_order() -> None:
    events: list[tuple[str, str]] = []

    async def async_sink(event: TaskProgress) -> None:
        events.append((event.task_id, event.status))

    executor = ProcessBuilderExecutor([_RecordingTask("a"), _RecordingTask("b")])

    await executor.execute(GOAL, {}, ProcessBuilderOptions(on_progress=async_sink))

    assert events == [
        ("a", "pending"),
        ("a", "running"),
        ("a", "completed"),
        ("b", "pending"),
        ("b", "running"),
        ("b", "completed"),
    ]


@pytest.mark.asyncio
async def test_failing_progress_sink_is_ignored() -> None:
    seen: list[str] = []

    def broken_sink(event: TaskProgress) -> None:
        raise RuntimeError("sink down")

    executor = ProcessBuilderExecutor(
        [_RecordingTask("a")],
        on_progress=broken_sink,
    )

    result = await executor.execute(
        GOAL,
        {},
        ProcessBuilderOptions(on_progress=lambda event: seen.append(event.status)),
    )

    assert result.status == "success"
    assert seen == ["pending", "running", "completed"]
    assert [event.status for event in result.task_progress] == ["pending", "running", "completed"]


@pytest.mark.asyncio
async def test_result_metadata_is_merged_into_run_metadata() -> None:
    executor = ProcessBuilderExecutor(
        [
            _RecordingTask("a", metadata={"candidate_count": 12}),
            _RecordingTask("b", metadata={"selected_count": 5}),
        ],
        process_id="demo",
    )

    result = await executor.execute(GOAL, {"theme": Rule.string("theme", "hockey")}, run_id="run_fixed")

    assert result.run_id == "run_fixed"
    assert result.metadata == {
        "process_id": "demo",
        "run_id": "run_fixed",
        "candidate_count": 12,
        "selected_count": 5,
    }


def test_duplicate_task_ids_are_rejected() -> None:
    with pytest.raises(ValueError, match="Duplicate task ids: same"):
        ProcessBuilderExecutor([_RecordingTask("same"), _RecordingTask("same")])


@pytest.mark.asyncio
async def test_result_serializes_to_json_types() -> None:
    executor = ProcessBuilderExecutor([_RecordingTask("a", data={"items": (1, 2)})])

    payload = (await executor.execute(GOAL, {})).to_dict()

    assert payload["status"] == "success"
    assert payload["final_result"] == {"items": [1, 2]}
    assert payload["results"][0]["success"] is True
    assert isinstance(payload["task_progress"][1]["started_at"], str)
