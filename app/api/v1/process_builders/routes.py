"""Process builder API endpoints."""

import logging
from collections.abc import Awaitable

from fastapi import APIRouter, HTTPException, status
from redis.exceptions import RedisError

from app.api.v1.dependencies import PipelineCollaborators, RunTaskManager
from app.api.v1.process_builders.constants import PROCESS_BUILDER_NOT_FOUND_DETAIL
from app.core.exceptions import ProcessBuilderNotFoundError, ValidationError
from app.core.ids import generate_run_id
from app.process_builders.registry import (
    get_process_builder,
    list_process_builders,
    run_process_builder,
)
from app.schemas.process_builder import (
    ProcessBuilderResponse,
    ProcessBuilderRunRequest,
    ProcessBuilderRunResponse,
)
from app.services.task_manager import ProgressMirror

logger = logging.getLogger(__name__)

router = APIRouter()


async def _mirror_quietly(operation: Awaitable[object], run_id: str) -> None:
    try:
        await operation
    except RedisError as exc:
        logger.warning("Run progress mirror failed", extra={"run_id": run_id, "error": str(exc)})


@router.get(
    "/",
    response_model=list[ProcessBuilderResponse],
    summary="List process builders",
)
async def list_builders() -> list[ProcessBuilderResponse]:
    return [ProcessBuilderResponse.from_metadata(metadata) for metadata in list_process_builders()]


@router.get(
    "/{process_id}",
    response_model=ProcessBuilderResponse,
    summary="Get process builder",
)
async def get_builder(process_id: str) -> ProcessBuilderResponse:
    try:
        builder = get_process_builder(process_id)
    except ProcessBuilderNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=PROCESS_BUILDER_NOT_FOUND_DETAIL,
        ) from exc
    return ProcessBuilderResponse.from_metadata(builder.metadata)


@router.post(
    "/{process_id}/run",
    response_model=ProcessBuilderRunResponse,
    summary="Run process builder",
    description=(
        "Validate goal and rules against the builder's metadata, run every task in order "
        "and return the aggregated result. Progress is mirrored to /tasks/{run_id}."
    ),
)
async def run_builder(
    process_id: str,
    request: ProcessBuilderRunRequest,
    task_manager: RunTaskManager,
    collaborators: PipelineCollaborators,
) -> ProcessBuilderRunResponse:
    try:
        builder = get_process_builder(process_id)
    except ProcessBuilderNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=PROCESS_BUILDER_NOT_FOUND_DETAIL,
        ) from exc

    run_id = generate_run_id()
    options = request.options.to_options()
    mirror: ProgressMirror | None = None
    if task_manager is not None:
        mirror = ProgressMirror(
            task_manager,
            run_id=run_id,
            process_id=process_id,
            total_tasks=len(builder.metadata.tasks),
        )
        options.on_progress = mirror
        await _mirror_quietly(mirror.start(), run_id)

    logger.info(
        "Process builder run requested",
        extra={"process_id": process_id, "run_id": run_id, "dry_run": options.dry_run},
    )
    try:
        result = await run_process_builder(
            process_id,
            request.goal,
            request.rules,
            options,
            run_id=run_id,
            **collaborators,
        )
    except ValidationError as exc:
        if mirror is not None:
            await _mirror_quietly(
                mirror.manager.set_task_state(run_id, status="error", error_message=exc.message),
                run_id,
            )
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.message,
        ) from exc

    if mirror is not None:
        await _mirror_quietly(mirror.finish(result), run_id)

    return ProcessBuilderRunResponse.model_validate(result.to_dict())
