"""Task 5: required pieces present before the record is written."""

from __future__ import annotations

from app.process_builders.core.errors import TaskError
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import TaskContext, TaskResult
from app.process_builders.ingest_source_content.tasks.extract_metadata import EXTRACT_METADATA
from app.process_builders.ingest_source_content.tasks.generate_summary import GENERATE_SUMMARY
from app.process_builders.ingest_source_content.tasks.generate_title_key_phrases import (
    GENERATE_TITLE_KEY_PHRASES,
)
from app.process_builders.ingest_source_content.tasks.process_content import PROCESS_CONTENT
from app.process_builders.ingest_source_content.types import ExtractedMetadata, ValidatedContent

VALIDATE_COMPLETENESS = "validate-completeness"


class ValidateCompletenessTask(ProcessBuilderTask):
    id = VALIDATE_COMPLETENESS
    name = "Validate Completeness"
    description = "Validates that all required fields are present and complete"

    async def execute(self, context: TaskContext) -> TaskResult:
        errors: list[str] = []
        warnings: list[str] = []

        if context.data_for(PROCESS_CONTENT) is None:
            errors.append("Processed content is missing")

        metadata = context.data_for(EXTRACT_METADATA)
        if metadata is None:
            errors.append("Metadata extraction failed")
        elif not isinstance(metadata, ExtractedMetadata) or not metadata.theme:
            errors.append("Theme is required but missing")

        if context.data_for(GENERATE_SUMMARY) is None:
            warnings.append("Summary generation failed or skipped")
        if context.data_for(GENERATE_TITLE_KEY_PHRASES) is None:
            warnings.append("Title/key phrases generation failed or skipped")

        if errors:
            return TaskResult.from_errors(
                [TaskError(code="VALIDATION_ERROR", message=message, task_id=self.id) for message in errors],
                warnings=warnings,
            )

        return TaskResult.ok(
            ValidatedContent(),
            warnings=warnings,
            metadata={"errors_count": 0, "warnings_count": len(warnings)},
        )
