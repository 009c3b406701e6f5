"""Task 6: persist the enriched source content."""

from __future__ import annotations

import logging
from typing import Any

from app.config import settings
from app.process_builders.core.errors import ProcessBuilderError
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import TaskContext, TaskResult
from app.process_builders.ingest_source_content.tasks.extract_metadata import EXTRACT_METADATA
from app.process_builders.ingest_source_content.tasks.generate_summary import GENERATE_SUMMARY
from app.process_builders.ingest_source_content.tasks.generate_title_key_phrases import (
    GENERATE_TITLE_KEY_PHRASES,
)
from app.process_builders.ingest_source_content.tasks.process_content import PROCESS_CONTENT
from app.process_builders.ingest_source_content.types import (
    SOURCE_CONTENT_TABLE,
    ExtractedMetadata,
    GeneratedSummary,
    IngestedRecord,
    ProcessedContent,
    TitleKeyPhrases,
)
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)

CREATE_RECORD = "create-record"


class CreateSourceContentRecordTask(ProcessBuilderTask):
    """Write one `source_content_ingested` row.

    Store failures are raised so the retry policy applies; the last one
    surfaces as a `DATABASE_ERROR` result.
    """

    id = CREATE_RECORD
    name = "Create Record"
    description = "Creates the source_content_ingested record in the database"
    retryable = True
    max_retries = settings.record_task_max_retries
    retry_delay = settings.record_task_retry_delay_seconds
    timeout = settings.record_task_timeout_seconds

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def execute(self, context: TaskContext) -> TaskResult:
        processed = context.data_for(PROCESS_CONTENT)
        if not isinstance(processed, ProcessedContent):
            return TaskResult.failed(
                self.id,
                "MISSING_PROCESSED_CONTENT",
                "Processed content is required to create record",
            )

        metadata = context.data_for(EXTRACT_METADATA)
        if not isinstance(metadata, ExtractedMetadata) or not metadata.theme:
            return TaskResult.failed(self.id, "MISSING_THEME", "Theme is required to create record")

        summary = context.data_for(GENERATE_SUMMARY)
        title_key_phrases = context.data_for(GENERATE_TITLE_KEY_PHRASES)

        record: dict[str, Any] = {
            "content_text": processed.content_text,
            "word_count": processed.word_count,
            "char_count": processed.char_count,
            "theme": metadata.theme,
            "tags": metadata.tags,
            "category": metadata.category,
            "summary": summary.summary if isinstance(summary, GeneratedSummary) else None,
            "title": title_key_phrases.title if isinstance(title_key_phrases, TitleKeyPhrases) else None,
            "key_phrases": (
                title_key_phrases.key_phrases if isinstance(title_key_phrases, TitleKeyPhrases) else []
            ),
            "ingestion_status": "complete",
            "ingestion_process_id": context.metadata.get("run_id"),
        }

        if context.dry_run:
            logger.info("Dry run; source content not written", extra={"theme": metadata.theme})
            return TaskResult.ok(
                IngestedRecord(record=record, dry_run=True),
                warnings=[f"Dry run: source content was not written to {SOURCE_CONTENT_TABLE}"],
                metadata={"dry_run": True},
            )

        outcome = await self.store.insert_returning(SOURCE_CONTENT_TABLE, record)
        if not outcome.success:
            raise ProcessBuilderError(
                f"Failed to create record: {outcome.error}",
                code="DATABASE_ERROR",
                task_id=self.id,
                details={"table": SOURCE_CONTENT_TABLE},
                retryable=True,
            )
        if not outcome.data:
            return TaskResult.failed(
                self.id, "NO_DATA_RETURNED", "Database insert succeeded but no data returned"
            )

        created = dict(outcome.data)
        return TaskResult.ok(
            IngestedRecord(record=created),
            metadata={"record_id": created.get("id"), "created_at": created.get("created_at")},
        )
