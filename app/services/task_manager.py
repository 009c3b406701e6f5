"""Run progress store backed by Redis."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from redis.asyncio import Redis

from app.config import settings
from app.core.redis import get_redis_client
from app.process_builders.core.types import PipelineResult, TaskProgress

logger = logging.getLogger(__name__)

TASK_KEY_PREFIX = "process_run"
UNSET: object = object()


class TaskManager:
    """Store and fetch process builder run progress from Redis."""

    def __init__(self, redis_client: Redis | None = None) -> None:
        self.redis = redis_client or get_redis_client()
        self.ttl_seconds = settings.cache_ttl_seconds

    async def get_task_status(self, run_id: str) -> dict[str, Any] | None:
        """Get run progress by run ID."""
        raw = await self.redis.get(self._task_key(run_id))
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Invalid run payload in Redis", extra={"run_id": run_id})
            return None

    async def set_task_state(
        self,
        run_id: str,
        *,
        status: str | None = None,
        process_id: str | None = None,
        current_task_id: str | None = None,
        current_task_name: str | None = None,
        completed_tasks: int | None = None,
        total_tasks: int | None = None,
        progress_percent: float | None = None,
        task_event: dict[str, Any] | None = None,
        error_message: str | None | object = UNSET,
    ) -> dict[str, Any]:
        """Create or update run state."""
        now = self._now_iso()
        payload = await self.get_task_status(run_id) or {
            "run_id": run_id,
            "created_at": now,
            "tasks": {},
        }
        payload["updated_at"] = now

        updates = {
            "status": status,
            "process_id": process_id,
            "current_task_id": current_task_id,
            "current_task_name": current_task_name,
            "completed_tasks": completed_tasks,
            "total_tasks": total_tasks,
            "progress_percent": progress_percent,
        }
        for key, value in updates.items():
            if value is not None:
                payload[key] = value
        if task_event is not None:
            payload.setdefault("tasks", {})[task_event["task_id"]] = task_event
        if error_message is not UNSET:
            payload["error_message"] = error_message

        await self.redis.set(
            self._task_key(run_id),
            json.dumps(payload),
            ex=self.ttl_seconds,
        )
        return payload

    @staticmethod
    def _task_key(run_id: str) -> str:
        return f"{TASK_KEY_PREFIX}:{run_id}"

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()


class ProgressMirror:
    """`on_progress` sink that copies each task event into the run payload."""

    def __init__(
        self,
        manager: TaskManager,
        *,
        run_id: str,
        process_id: str,
        total_tasks: int,
    ) -> None:
        self.manager = manager
        self.run_id = run_id
        self.process_id = process_id
        self.total_tasks = total_tasks
        self._completed: set[str] = set()

    async def start(self) -> None:
        await self.manager.set_task_state(
            self.run_id,
            status="running",
            process_id=self.process_id,
            completed_tasks=0,
            total_tasks=self.total_tasks,
            progress_percent=0.0,
            error_message=None,
        )

    async def __call__(self, event: TaskProgress) -> None:
        if event.status in ("completed", "failed"):
            self._completed.add(event.task_id)
        progress_percent = (
            round(len(self._completed) / self.total_tasks * 100, 2) if self.total_tasks else None
        )
        await self.manager.set_task_state(
            self.run_id,
            current_task_id=event.task_id,
            current_task_name=event.task_name,
            completed_tasks=len(self._completed),
            progress_percent=progress_percent,
            task_event={
                "task_id": event.task_id,
                "task_name": event.task_name,
                "status": event.status,
                "progress": event.progress,
                "message": event.message,
                "error": event.error.to_dict() if event.error else None,
            },
        )

    async def finish(self, result: PipelineResult) -> None:
        first_error = result.errors[0].message if result.errors else None
        await self.manager.set_task_state(
            self.run_id,
            status=result.status,
            error_message=first_error,
        )
