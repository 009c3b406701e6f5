"""Task API endpoints."""

from fastapi import APIRouter, HTTPException, status

from app.api.v1.dependencies import RunTaskManager
from app.api.v1.tasks.constants import PROGRESS_DISABLED_DETAIL, TASK_NOT_FOUND_DETAIL
from app.schemas.task import TaskStatusResponse

router = APIRouter()


@router.get("/{run_id}", response_model=TaskStatusResponse)
async def get_task_status(run_id: str, task_manager: RunTaskManager) -> TaskStatusResponse:
    """Get run progress from Redis."""
    if task_manager is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=PROGRESS_DISABLED_DETAIL,
        )

    task_status = await task_manager.get_task_status(run_id)
    if task_status is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=TASK_NOT_FOUND_DETAIL,
        )

    return TaskStatusResponse.model_validate(task_status)
