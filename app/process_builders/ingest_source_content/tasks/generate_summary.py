"""Task 3: prose summary of the source."""

from __future__ import annotations

from app.process_builders.core.types import TaskContext, TaskResult
from app.process_builders.ingest_source_content.prompts import SUMMARY_INSTRUCTION
from app.process_builders.ingest_source_content.tasks.ai_task import AIEnrichmentTask
from app.process_builders.ingest_source_content.types import GeneratedSummary

GENERATE_SUMMARY = "generate-summary"


class GenerateSummaryTask(AIEnrichmentTask):
    id = GENERATE_SUMMARY
    name = "Generate Summary"
    description = "Uses AI to generate a summary of the content"
    prompt_type = "content_enrichment"

    async def execute(self, context: TaskContext) -> TaskResult:
        if context.rule_value("skipAIExtraction", False):
            return TaskResult.ok(
                None,
                warnings=["Summary generation skipped (skipAIExtraction)"],
                metadata={"summary_skipped": True},
            )

        processed = self.processed_content(context)
        if processed is None:
            return TaskResult.failed(
                self.id,
                "MISSING_PREVIOUS_RESULT",
                "Process Content task must complete successfully before summary generation",
            )

        prompt = await self.prompt()
        if prompt is None:
            return TaskResult.failed(
                self.id,
                "PROMPT_NOT_FOUND",
                "Content enrichment prompt not found in database. Please create an active prompt.",
            )

        outcome = await self.generate(f"{prompt}{SUMMARY_INSTRUCTION}", processed.normalized_text, "text")
        summary = outcome.data.strip() if outcome.success and isinstance(outcome.data, str) else ""
        if not summary:
            return TaskResult.failed(
                self.id,
                "AI_SUMMARY_FAILED",
                outcome.error or "Failed to generate summary from AI",
            )

        return TaskResult.ok(
            GeneratedSummary(summary=summary),
            metadata={"summary_length": len(summary)},
        )
