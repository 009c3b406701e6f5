"""Task 2: theme, tags and category from the stored extraction prompt."""

from __future__ import annotations

from pydantic import ValidationError

from app.process_builders.core.types import TaskContext, TaskResult
from app.process_builders.ingest_source_content.tasks.ai_task import AIEnrichmentTask
from app.process_builders.ingest_source_content.types import ExtractedMetadata

EXTRACT_METADATA = "extract-metadata"


class ExtractMetadataTask(AIEnrichmentTask):
    id = EXTRACT_METADATA
    name = "Extract Metadata"
    description = "Uses AI to extract theme, tags, and category from content"
    prompt_type = "metadata_extraction"

    async def execute(self, context: TaskContext) -> TaskResult:
        processed = self.processed_content(context)
        if processed is None:
            return TaskResult.failed(
                self.id,
                "MISSING_PREVIOUS_RESULT",
                "Process Content task must complete successfully before metadata extraction",
            )

        prompt = await self.prompt()
        if prompt is None:
            return TaskResult.failed(
                self.id,
                "PROMPT_NOT_FOUND",
                "Metadata extraction prompt not found in database. Please create an active prompt.",
            )

        outcome = await self.generate(prompt, processed.normalized_text, "json")
        if not outcome.success or not outcome.data:
            return TaskResult.failed(
                self.id,
                "AI_EXTRACTION_FAILED",
                outcome.error or "Failed to extract metadata from AI",
            )

        response = outcome.data
        theme = response.get("theme")
        if not isinstance(theme, str) or not theme.strip():
            return TaskResult.failed(
                self.id, "MISSING_THEME", "AI response missing required theme field"
            )

        try:
            extracted = ExtractedMetadata.model_validate(
                {
                    "theme": theme.strip(),
                    "tags": response.get("tags"),
                    "category": response.get("category") or None,
                }
            )
        except ValidationError as exc:
            return TaskResult.failed(
                self.id,
                "AI_EXTRACTION_FAILED",
                "AI response did not match the metadata shape",
                details=exc.errors(include_url=False),
            )

        return TaskResult.ok(
            extracted,
            metadata={
                "theme": extracted.theme,
                "tags_count": len(extracted.tags),
                "has_category": extracted.category is not None,
            },
        )
