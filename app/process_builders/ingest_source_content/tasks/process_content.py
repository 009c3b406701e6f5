"""Task 1: normalize the submitted text."""

from __future__ import annotations

from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import TaskContext, TaskResult
from app.process_builders.ingest_source_content.text_processing import count_words, process_text
from app.process_builders.ingest_source_content.types import ProcessedContent

PROCESS_CONTENT = "process-content"


class ProcessContentTask(ProcessBuilderTask):
    id = PROCESS_CONTENT
    name = "Process Content"
    description = "Normalizes and validates content, calculates word/character counts"

    async def execute(self, context: TaskContext) -> TaskResult:
        content_text = context.rule_value("contentText")
        if not isinstance(content_text, str) or not content_text:
            return TaskResult.failed(
                self.id,
                "INVALID_CONTENT",
                "contentText rule is required and must be a string",
            )

        if context.rule_value("isAlreadyProcessed", False):
            word_count = count_words(content_text)
            return TaskResult.ok(
                ProcessedContent(
                    content_text=content_text,
                    word_count=word_count,
                    char_count=len(content_text),
                    normalized_text=content_text,
                    chunks=[content_text],
                ),
                metadata={
                    "word_count": word_count,
                    "char_count": len(content_text),
                    "skipped_processing": True,
                },
            )

        try:
            processed = process_text(content_text)
        except (ValueError, TypeError) as exc:
            return TaskResult.failed(self.id, "PROCESS_FAILED", str(exc))

        return TaskResult.ok(
            ProcessedContent(
                content_text=processed.processed_text,
                word_count=processed.word_count,
                char_count=processed.char_count,
                normalized_text=processed.processed_text,
                chunks=processed.chunks,
            ),
            metadata={
                "word_count": processed.word_count,
                "char_count": processed.char_count,
                "chunk_count": len(processed.chunks),
                "processing_time_ms": processed.processing_time_ms,
            },
        )
