"""Ingested source content and AI extraction prompt models."""

from __future__ import annotations

from typing import Literal

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, BigIntIdMixin, TimestampMixin

IngestionStatus = Literal["pending", "processing", "complete", "failed"]
PromptType = Literal["metadata_extraction", "content_enrichment", "title_generation"]


class SourceContentIngested(Base, BigIntIdMixin, TimestampMixin):
    """Normalized source text plus AI-extracted metadata."""

    __tablename__ = "source_content_ingested"

    content_text: Mapped[str] = mapped_column(Text, nullable=False)
    word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    char_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    theme: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    tags: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    key_phrases: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)

    ingestion_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    ingestion_process_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<SourceContentIngested {self.id} {self.theme}>"


class AIExtractionPrompt(Base, BigIntIdMixin, TimestampMixin):
    """Editable prompt used by the ingest pipeline's AI tasks."""

    __tablename__ = "ai_extraction_prompts"
    __table_args__ = (Index("ix_ai_extraction_prompts_type_active", "prompt_type", "is_active"),)

    prompt_name: Mapped[str] = mapped_column(String(255), nullable=False)
    prompt_type: Mapped[str] = mapped_column(String(50), nullable=False)
    prompt_content: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<AIExtractionPrompt {self.prompt_type}:{self.prompt_name}>"
