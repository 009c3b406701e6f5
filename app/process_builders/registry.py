"""Lookup and validated entry point for every registered process builder."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from app.core.exceptions import ProcessBuilderNotFoundError
from app.process_builders.build_trivia_set import METADATA as BUILD_TRIVIA_SET
from app.process_builders.build_trivia_set import build_trivia_set
from app.process_builders.core.types import PipelineMetadata, PipelineResult, ProcessBuilderOptions
from app.process_builders.core.validation import (
    apply_rule_defaults,
    check_rule_limits,
    validate_goal,
    validate_rules,
)
from app.process_builders.ingest_source_content import METADATA as INGEST_SOURCE_CONTENT
from app.process_builders.ingest_source_content import ingest_source_content

logger = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[PipelineResult]]


@dataclass(frozen=True, slots=True)
class ProcessBuilder:
    metadata: PipelineMetadata
    run: Runner


_REGISTRY: dict[str, ProcessBuilder] = {
    builder.metadata.id: builder
    for builder in (
        ProcessBuilder(INGEST_SOURCE_CONTENT, ingest_source_content),
        ProcessBuilder(BUILD_TRIVIA_SET, build_trivia_set),
    )
}


def get_process_builder(process_id: str) -> ProcessBuilder:
    builder = _REGISTRY.get(process_id)
    if builder is None:
        raise ProcessBuilderNotFoundError(process_id)
    return builder


def list_process_builders() -> list[PipelineMetadata]:
    return [builder.metadata for builder in _REGISTRY.values()]


async def run_process_builder(
    process_id: str,
    goal: Any,
    rules: Any,
    options: ProcessBuilderOptions | None = None,
    **collaborators: Any,
) -> PipelineResult:
    """Validate inputs against the builder's metadata, then run it.

    Raises GoalValidationError or RuleValidationError before any task
    runs; `collaborators` (store, generator, rng, run_id) pass straight
    through to the pipeline function.
    """
    builder = get_process_builder(process_id)
    metadata = builder.metadata

    validated_goal = validate_goal(goal)
    validated_rules = apply_rule_defaults(validate_rules(rules, metadata), metadata)
    check_rule_limits(validated_rules, metadata)

    logger.info(
        "Running process builder",
        extra={
            "process_id": process_id,
            "version": metadata.version,
            "rules": sorted(validated_rules),
        },
    )
    return await builder.run(validated_goal, validated_rules, options, **collaborators)
