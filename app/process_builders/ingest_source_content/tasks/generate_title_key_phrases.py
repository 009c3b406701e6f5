"""Task 4: title and key phrases."""

from __future__ import annotations

from typing import Any

from app.process_builders.core.types import TaskContext, TaskResult
from app.process_builders.ingest_source_content.prompts import TITLE_KEY_PHRASES_INSTRUCTION
from app.process_builders.ingest_source_content.tasks.ai_task import AIEnrichmentTask
from app.process_builders.ingest_source_content.types import TitleKeyPhrases

GENERATE_TITLE_KEY_PHRASES = "generate-title-key-phrases"


def _phrases(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(phrase).strip() for phrase in value if str(phrase).strip()]


class GenerateTitleKeyPhrasesTask(AIEnrichmentTask):
    """A non-blank `title` rule always wins over the generated title."""

    id = GENERATE_TITLE_KEY_PHRASES
    name = "Generate Title & Key Phrases"
    description = "Uses AI to generate title and extract key phrases from content"
    prompt_type = "content_enrichment"

    async def execute(self, context: TaskContext) -> TaskResult:
        manual_title = context.rule_value("title")
        if not isinstance(manual_title, str) or not manual_title.strip():
            manual_title = None

        if context.rule_value("skipAIExtraction", False):
            data = TitleKeyPhrases(title=manual_title.strip(), manual_title=True) if manual_title else None
            return TaskResult.ok(
                data,
                warnings=["Title/key phrase generation skipped (skipAIExtraction)"],
                metadata={"title_key_phrases_skipped": True},
            )

        processed = self.processed_content(context)
        if processed is None:
            return TaskResult.failed(
                self.id,
                "MISSING_PREVIOUS_RESULT",
                "Process Content task must complete successfully before title/key phrase generation",
            )

        prompt = await self.prompt()
        if prompt is None:
            return TaskResult.failed(
                self.id,
                "PROMPT_NOT_FOUND",
                "Content enrichment prompt not found in database. Please create an active prompt.",
            )

        outcome = await self.generate(
            f"{prompt}{TITLE_KEY_PHRASES_INSTRUCTION}", processed.normalized_text, "json"
        )
        if not outcome.success or not outcome.data:
            return TaskResult.failed(
                self.id,
                "AI_TITLE_KEY_PHRASES_FAILED",
                outcome.error or "Failed to generate title and key phrases from AI",
            )

        generated_title = outcome.data.get("title")
        if not isinstance(generated_title, str) or not generated_title.strip():
            generated_title = None

        result = TitleKeyPhrases(
            title=manual_title.strip() if manual_title else generated_title and generated_title.strip(),
            key_phrases=_phrases(outcome.data.get("key_phrases")),
            manual_title=manual_title is not None,
        )
        return TaskResult.ok(
            result,
            metadata={
                "has_title": result.title is not None,
                "key_phrases_count": len(result.key_phrases),
                "manual_title": result.manual_title,
            },
        )
