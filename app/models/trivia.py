"""Trivia question and trivia set models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, BigIntIdMixin, TimestampMixin

QuestionStatus = Literal["draft", "published", "archived"]
SetStatus = Literal["draft", "scheduled", "published"]
SetVisibility = Literal["Public", "Unlisted", "Private"]


class _QuestionColumns(BigIntIdMixin, TimestampMixin):
    """Columns shared by the three question library tables."""

    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    theme: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    difficulty: Mapped[str | None] = mapped_column(String(20), nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    attribution: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True, default="draft", index=True)
    used_in: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    source_content_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class TriviaMultipleChoice(Base, _QuestionColumns):
    __tablename__ = "trivia_multiple_choice"

    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    wrong_answers: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)


class TriviaTrueFalse(Base, _QuestionColumns):
    __tablename__ = "trivia_true_false"

    is_true: Mapped[bool] = mapped_column(Boolean, nullable=False)


class TriviaWhoAmI(Base, _QuestionColumns):
    __tablename__ = "trivia_who_am_i"

    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)


class _SetColumns(BigIntIdMixin, TimestampMixin):
    """Columns shared by the three trivia set tables."""

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    theme: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    difficulty: Mapped[str | None] = mapped_column(String(20), nullable=True)
    question_data: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False)
    question_count: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    visibility: Mapped[str] = mapped_column(String(20), nullable=False, default="Private")
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    scheduled_for: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class SetTriviaMultipleChoice(Base, _SetColumns):
    __tablename__ = "sets_trivia_multiple_choice"
    __table_args__ = (
        CheckConstraint("question_count > 0", name="ck_sets_tmc_question_count"),
    )


class SetTriviaTrueFalse(Base, _SetColumns):
    __tablename__ = "sets_trivia_true_false"
    __table_args__ = (
        CheckConstraint("question_count > 0", name="ck_sets_tft_question_count"),
    )


class SetTriviaWhoAmI(Base, _SetColumns):
    __tablename__ = "sets_trivia_who_am_i"
    __table_args__ = (
        CheckConstraint("question_count > 0", name="ck_sets_wai_question_count"),
    )
