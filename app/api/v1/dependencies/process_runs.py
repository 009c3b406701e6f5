"""Dependencies for process builder runs."""

from typing import Annotated, Any

from fastapi import Depends

from app.config import settings
from app.services.task_manager import TaskManager


def get_task_manager() -> TaskManager | None:
    """Redis-backed run progress store, or None when mirroring is off."""
    if not settings.progress_mirror_enabled:
        return None
    return TaskManager()


def get_pipeline_collaborators() -> dict[str, Any]:
    """Extra keyword arguments for pipeline functions; the defaults build their own."""
    return {}


RunTaskManager = Annotated[TaskManager | None, Depends(get_task_manager)]
PipelineCollaborators = Annotated[dict[str, Any], Depends(get_pipeline_collaborators)]
