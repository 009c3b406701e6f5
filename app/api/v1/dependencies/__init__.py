"""Reusable API dependencies shared across v1 routes."""

from app.api.v1.dependencies.process_runs import (
    PipelineCollaborators,
    RunTaskManager,
    get_pipeline_collaborators,
    get_task_manager,
)

__all__ = [
    "PipelineCollaborators",
    "RunTaskManager",
    "get_pipeline_collaborators",
    "get_task_manager",
]
