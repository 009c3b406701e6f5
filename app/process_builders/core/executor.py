"""Sequential task executor with retry, timeout and progress tracking."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from app.core.ids import generate_run_id
from app.process_builders.core.errors import (
    EXECUTION_ERROR,
    TASK_EXECUTION_FAILED,
    TaskError,
    TaskTimeoutError,
    TaskValidationError,
    task_error_from_exception,
)
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import (
    Goal,
    PipelineResult,
    PipelineStatus,
    ProcessBuilderOptions,
    ProgressCallback,
    Rules,
    TaskContext,
    TaskProgress,
    TaskResult,
    TaskStatus,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ProcessBuilderExecutor:
    """Run an ordered list of tasks once against a single shared context.

    Per task: pending, validate, on_start, running, execute (retry loop,
    timeout race or direct call), record result, hooks, then completed or
    failed. The run stops at the first failed task unless the caller allowed
    partial results.
    """

    def __init__(
        self,
        tasks: Sequence[ProcessBuilderTask],
        *,
        process_id: str = "unknown",
        process_name: str = "unknown",
        on_progress: ProgressCallback | None = None,
    ) -> None:
        task_ids = [task.id for task in tasks]
        duplicates = sorted({task_id for task_id in task_ids if task_ids.count(task_id) > 1})
        if duplicates:
            raise ValueError(f"Duplicate task ids: {', '.join(duplicates)}")

        self.tasks = list(tasks)
        self.process_id = process_id
        self.process_name = process_name
        self._on_progress = on_progress
        self._progress: list[TaskProgress] = []
        self._sinks: list[ProgressCallback] = []
        self._late_tasks: set[asyncio.Future[TaskResult]] = set()

    async def execute(
        self,
        goal: Goal,
        rules: Rules,
        options: ProcessBuilderOptions | None = None,
        *,
        run_id: str | None = None,
    ) -> PipelineResult:
        options = options or ProcessBuilderOptions()
        run_id = run_id or generate_run_id()
        started = time.perf_counter()

        self._progress = []
        self._sinks = [sink for sink in (self._on_progress, options.on_progress) if sink]

        context = TaskContext(
            goal=goal,
            rules=dict(rules),
            options=options,
            metadata={"process_id": self.process_id, "run_id": run_id},
        )
        log_context = {"process_id": self.process_id, "run_id": run_id}
        logger.info(
            "Pipeline started",
            extra={**log_context, "task_count": len(self.tasks), "dry_run": options.dry_run},
        )

        try:
            for task in self.tasks:
                result = await self._run_task(task, context, log_context)
                if not result.success and not options.allow_partial_results:
                    logger.info(
                        "Pipeline halted after failed task",
                        extra={**log_context, "task_id": task.id},
                    )
                    break
        except Exception as exc:
            error = task_error_from_exception(exc, default_code=EXECUTION_ERROR)
            logger.warning(
                "Pipeline aborted",
                extra={**log_context, "error_code": error.code, "error": error.message},
            )
            return self._build_result(
                status="error",
                context=context,
                run_id=run_id,
                started=started,
                errors=[error],
                final_result=None,
            )

        results = context.previous_results
        status = self._resolve_status(results, options.allow_partial_results)
        pipeline_result = self._build_result(
            status=status,
            context=context,
            run_id=run_id,
            started=started,
            errors=[error for result in results for error in result.errors],
            final_result=results[-1].data if results else None,
        )
        logger.info(
            "Pipeline finished",
            extra={
                **log_context,
                "status": status,
                "tasks_run": len(results),
                "duration_ms": pipeline_result.execution_time_ms,
            },
        )
        return pipeline_result

    async def _run_task(
        self,
        task: ProcessBuilderTask,
        context: TaskContext,
        log_context: dict[str, Any],
    ) -> TaskResult:
        task_info = {**log_context, "task_id": task.id}
        await self._emit(task, "pending", 0)

        validation = await task.validate(context)
        if not validation.valid:
            error = TaskValidationError(task.id, validation.error)
            await self._emit(task, "failed", 0, error=error.to_task_error())
            raise error

        await task.on_start(context)

        started_at = _now()
        await self._emit(task, "running", 0, started_at=started_at)
        logger.info("Task started", extra=task_info)

        task_started = time.perf_counter()
        try:
            if task.retryable and task.max_retries > 0:
                result = await self._execute_with_retry(task, context, started_at)
            elif task.timeout:
                result = await self._execute_with_timeout(task, context)
            else:
                result = await task.execute(context)
        except Exception as exc:
            error = task_error_from_exception(exc, task.id)
            logger.warning(
                "Task raised",
                extra={**task_info, "error_code": error.code, "error": error.message},
            )
            result = TaskResult.from_errors([error])
        duration_ms = int((time.perf_counter() - task_started) * 1000)

        context.record_result(task.id, result)

        if result.success:
            await task.on_success(result, context)
        else:
            await task.on_error(
                result.first_error
                or TaskError(code=TASK_EXECUTION_FAILED, message="Task failed", task_id=task.id),
                context,
            )
        await task.on_complete(result, context)

        await self._emit(
            task,
            "completed" if result.success else "failed",
            100,
            started_at=started_at,
            completed_at=_now(),
            error=result.first_error,
        )
        if result.success:
            logger.info(
                "Task completed",
                extra={**task_info, "duration_ms": duration_ms, "warnings": len(result.warnings)},
            )
        else:
            first = result.first_error
            logger.warning(
                "Task failed",
                extra={
                    **task_info,
                    "duration_ms": duration_ms,
                    "error_code": first.code if first else None,
                    "error": first.message if first else None,
                },
            )
        return result

    async def _execute_with_retry(
        self,
        task: ProcessBuilderTask,
        context: TaskContext,
        started_at: datetime,
    ) -> TaskResult:
        attempt = 0
        while True:
            try:
                return await task.execute(context)
            except Exception as exc:
                if attempt >= task.max_retries:
                    raise
                wait_seconds = task.retry_delay * (2**attempt)
                error = task_error_from_exception(exc, task.id)
                logger.warning(
                    "Task attempt failed; retrying",
                    extra={
                        "process_id": self.process_id,
                        "task_id": task.id,
                        "attempt": attempt + 1,
                        "max_retries": task.max_retries,
                        "wait_seconds": wait_seconds,
                        "error": error.message,
                    },
                )
                await self._emit(
                    task,
                    "retrying",
                    0,
                    message=f"Attempt {attempt + 1} failed; retrying in {wait_seconds:g}s",
                    started_at=started_at,
                    error=error,
                )
                await asyncio.sleep(wait_seconds)
                attempt += 1

    async def _execute_with_timeout(
        self,
        task: ProcessBuilderTask,
        context: TaskContext,
    ) -> TaskResult:
        """Race execute against the task timeout.

        The execution keeps running after the timer wins; its late outcome
        is consumed and logged, never recorded.
        """
        timeout = float(task.timeout or 0)
        execution = asyncio.ensure_future(task.execute(context))
        done, _ = await asyncio.wait({execution}, timeout=timeout)
        if execution in done:
            return execution.result()

        self._late_tasks.add(execution)
        execution.add_done_callback(self._discard_late_outcome(task.id))
        raise TaskTimeoutError(task.id, timeout)

    def _discard_late_outcome(self, task_id: str):
        def _callback(future: asyncio.Future[TaskResult]) -> None:
            self._late_tasks.discard(future)
            if future.cancelled():
                return
            error = future.exception()
            logger.debug(
                "Discarded late outcome of timed-out task",
                extra={
                    "process_id": self.process_id,
                    "task_id": task_id,
                    "late_error": str(error) if error else None,
                },
            )

        return _callback

    async def _emit(
        self,
        task: ProcessBuilderTask,
        status: TaskStatus,
        progress: float,
        *,
        message: str | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        error: TaskError | None = None,
    ) -> None:
        event = TaskProgress(
            task_id=task.id,
            task_name=task.name,
            status=status,
            progress=progress,
            message=message,
            started_at=started_at,
            completed_at=completed_at,
            error=error,
        )
        self._progress.append(event)

        for sink in self._sinks:
            try:
                outcome = sink(event)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception(
                    "Progress sink failed",
                    extra={"process_id": self.process_id, "task_id": task.id, "status": status},
                )

    @staticmethod
    def _resolve_status(results: list[TaskResult], allow_partial: bool) -> PipelineStatus:
        if all(result.success for result in results):
            return "success"
        return "partial" if allow_partial else "error"

    def _build_result(
        self,
        *,
        status: PipelineStatus,
        context: TaskContext,
        run_id: str,
        started: float,
        errors: list[TaskError],
        final_result: Any,
    ) -> PipelineResult:
        results = context.previous_results
        return PipelineResult(
            status=status,
            process_id=self.process_id,
            process_name=self.process_name,
            run_id=run_id,
            results=results,
            task_progress=list(self._progress),
            final_result=final_result,
            errors=errors,
            warnings=[warning for result in results for warning in result.warnings],
            execution_time_ms=int((time.perf_counter() - started) * 1000),
            metadata=dict(context.metadata),
        )

