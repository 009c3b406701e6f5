"""Shared plumbing for the prompt-driven enrichment tasks."""

from __future__ import annotations

import logging

from app.agents.content_generator import (
    ContentGeneratorProtocol,
    GenerationResult,
    ResponseShape,
)
from app.config import settings
from app.process_builders.core.errors import RATE_LIMITED, AIRateLimitError
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import TaskContext
from app.process_builders.ingest_source_content.prompts import load_prompt
from app.process_builders.ingest_source_content.tasks.process_content import PROCESS_CONTENT
from app.process_builders.ingest_source_content.types import ProcessedContent, PromptType
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)


class AIEnrichmentTask(ProcessBuilderTask):
    """Base for tasks that run a stored prompt through the content generator.

    Subclasses should:
    1. Set prompt_type to the prompt row they read
    2. Implement execute, using processed_content, prompt and generate

    Rate limits are raised so the executor's retry policy applies; every
    other generator failure is left for the subclass to report.
    """

    retryable = True
    max_retries = settings.ai_task_max_retries
    retry_delay = settings.ai_task_retry_delay_seconds
    timeout = settings.ai_task_timeout_seconds
    prompt_type: PromptType

    def __init__(self, store: RecordStore, generator: ContentGeneratorProtocol) -> None:
        self.store = store
        self.generator = generator

    @staticmethod
    def processed_content(context: TaskContext) -> ProcessedContent | None:
        data = context.data_for(PROCESS_CONTENT)
        return data if isinstance(data, ProcessedContent) else None

    async def prompt(self) -> str | None:
        return await load_prompt(self.store, self.prompt_type)

    async def generate(
        self,
        prompt_text: str,
        source_text: str,
        response_shape: ResponseShape,
    ) -> GenerationResult:
        outcome = await self.generator.generate(prompt_text, source_text, response_shape)
        if not outcome.success and outcome.error_code == RATE_LIMITED:
            logger.warning(
                "Generator asked to back off",
                extra={"task_id": self.id, "error_code": outcome.error_code},
            )
            raise AIRateLimitError(outcome.error or "Rate limited", task_id=self.id)
        return outcome
