"""Stored extraction prompt lookup."""

from __future__ import annotations

import logging

from app.process_builders.ingest_source_content.types import PROMPTS_TABLE, PromptType
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)

SUMMARY_INSTRUCTION = (
    "\n\nPlease generate a comprehensive summary (3-5 sentences, 100-150 words) "
    "of the source content."
)

TITLE_KEY_PHRASES_INSTRUCTION = (
    "\n\nPlease generate:\n"
    "1. A concise title (5-15 words) for this content\n"
    "2. Key phrases (5-10 multi-word phrases) that represent important concepts\n\n"
    'Return as JSON: { "title": "...", "key_phrases": ["...", "..."] }'
)


async def load_prompt(store: RecordStore, prompt_type: PromptType) -> str | None:
    """Content of the first active prompt of this type, or None.

    Lookup failures are logged and treated as a missing prompt.
    """
    outcome = await store.select_filtered(
        PROMPTS_TABLE,
        {"prompt_type": prompt_type, "is_active": True},
    )
    if not outcome.success:
        logger.warning(
            "Prompt lookup failed",
            extra={"prompt_type": prompt_type, "error": outcome.error},
        )
        return None

    for row in outcome.data or []:
        content = row.get("prompt_content")
        if isinstance(content, str) and content.strip():
            return content
    return None
