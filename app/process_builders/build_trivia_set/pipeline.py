"""build-trivia-set pipeline definition."""

from __future__ import annotations

import random

from app.process_builders.build_trivia_set.tasks.assemble_data import AssembleDataTask
from app.process_builders.build_trivia_set.tasks.create_record import CreateTriviaSetRecordTask
from app.process_builders.build_trivia_set.tasks.generate_metadata import GenerateMetadataTask
from app.process_builders.build_trivia_set.tasks.query_questions import QueryQuestionsTask
from app.process_builders.build_trivia_set.tasks.select_balance import SelectBalanceTask
from app.process_builders.build_trivia_set.tasks.validate_finalize import ValidateFinalizeTask
from app.process_builders.core.executor import ProcessBuilderExecutor
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import (
    Goal,
    PipelineMetadata,
    PipelineResult,
    ProcessBuilderOptions,
    RuleLimit,
    Rules,
)
from app.services.record_store import RecordStore

METADATA = PipelineMetadata(
    id="build-trivia-set",
    name="Build Trivia Set",
    description="Creates a curated trivia set from existing questions",
    version="1.0.0",
    tasks=(
        "query-questions",
        "select-balance",
        "generate-metadata",
        "assemble-data",
        "create-record",
        "validate-finalize",
    ),
    required_rules=("questionTypes", "questionCount"),
    optional_rules=("distributionStrategy", "theme", "cooldownDays", "allowPartialSets"),
    defaults={
        "distributionStrategy": "weighted",
        "cooldownDays": 30,
        "allowPartialSets": False,
    },
    limits={"questionCount": RuleLimit(min=1, max=100)},
)


def build_tasks(store: RecordStore, rng: random.Random | None = None) -> list[ProcessBuilderTask]:
    """Task list in execution order; one `rng` drives every random choice."""
    rng = rng or random.Random()
    return [
        QueryQuestionsTask(store),
        SelectBalanceTask(rng),
        GenerateMetadataTask(),
        AssembleDataTask(rng),
        CreateTriviaSetRecordTask(store),
        ValidateFinalizeTask(),
    ]


async def build_trivia_set(
    goal: Goal,
    rules: Rules,
    options: ProcessBuilderOptions | None = None,
    *,
    store: RecordStore | None = None,
    rng: random.Random | None = None,
    run_id: str | None = None,
) -> PipelineResult:
    """Run the pipeline. Rules are expected to be validated already."""
    if store is None:
        from app.services.record_store import SqlAlchemyRecordStore

        store = SqlAlchemyRecordStore()

    executor = ProcessBuilderExecutor(
        build_tasks(store, rng),
        process_id=METADATA.id,
        process_name=METADATA.name,
    )
    return await executor.execute(goal, rules, options, run_id=run_id)
