"""ingest-source-content pipeline definition."""

from __future__ import annotations

from app.agents.content_generator import ContentGeneratorProtocol
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
from app.process_builders.ingest_source_content.tasks.create_record import (
    CreateSourceContentRecordTask,
)
from app.process_builders.ingest_source_content.tasks.extract_metadata import ExtractMetadataTask
from app.process_builders.ingest_source_content.tasks.generate_summary import GenerateSummaryTask
from app.process_builders.ingest_source_content.tasks.generate_title_key_phrases import (
    GenerateTitleKeyPhrasesTask,
)
from app.process_builders.ingest_source_content.tasks.process_content import ProcessContentTask
from app.process_builders.ingest_source_content.tasks.validate_completeness import (
    ValidateCompletenessTask,
)
from app.services.record_store import RecordStore

METADATA = PipelineMetadata(
    id="ingest-source-content",
    name="Ingest Source Content",
    description=(
        "Processes source content through workflow with AI-powered metadata "
        "extraction and enrichment"
    ),
    version="1.0.0",
    tasks=(
        "process-content",
        "extract-metadata",
        "generate-summary",
        "generate-title-key-phrases",
        "validate-completeness",
        "create-record",
    ),
    required_rules=("contentText",),
    optional_rules=("title", "skipAIExtraction", "isAlreadyProcessed"),
    defaults={"skipAIExtraction": False, "isAlreadyProcessed": False},
    limits={"contentText": RuleLimit(min=10, max=50000)},
)


def build_tasks(store: RecordStore, generator: ContentGeneratorProtocol) -> list[ProcessBuilderTask]:
    return [
        ProcessContentTask(),
        ExtractMetadataTask(store, generator),
        GenerateSummaryTask(store, generator),
        GenerateTitleKeyPhrasesTask(store, generator),
        ValidateCompletenessTask(),
        CreateSourceContentRecordTask(store),
    ]


async def ingest_source_content(
    goal: Goal,
    rules: Rules,
    options: ProcessBuilderOptions | None = None,
    *,
    store: RecordStore | None = None,
    generator: ContentGeneratorProtocol | None = None,
    run_id: str | None = None,
) -> PipelineResult:
    """Run the pipeline. Rules are expected to be validated already."""
    if store is None:
        from app.services.record_store import SqlAlchemyRecordStore

        store = SqlAlchemyRecordStore()
    if generator is None:
        from app.agents.content_generator import ContentGenerator

        generator = ContentGenerator()

    executor = ProcessBuilderExecutor(
        build_tasks(store, generator),
        process_id=METADATA.id,
        process_name=METADATA.name,
    )
    return await executor.execute(goal, rules, options, run_id=run_id)
