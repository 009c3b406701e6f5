"""Payload models for the ingest-source-content pipeline."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

PromptType = Literal["metadata_extraction", "content_enrichment"]

SOURCE_CONTENT_TABLE = "source_content_ingested"
PROMPTS_TABLE = "ai_extraction_prompts"


class ProcessedContent(BaseModel):
    content_text: str
    word_count: int
    char_count: int
    normalized_text: str
    chunks: list[str] = Field(default_factory=list)


class ExtractedMetadata(BaseModel):
    theme: str
    tags: list[str] = Field(default_factory=list)
    category: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_as_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(",") if tag.strip()]
        return value


class GeneratedSummary(BaseModel):
    summary: str


class TitleKeyPhrases(BaseModel):
    title: str | None = None
    key_phrases: list[str] = Field(default_factory=list)
    manual_title: bool = False


class ValidatedContent(BaseModel):
    validated: bool = True


class IngestedRecord(BaseModel):
    record: dict[str, Any]
    dry_run: bool = False
