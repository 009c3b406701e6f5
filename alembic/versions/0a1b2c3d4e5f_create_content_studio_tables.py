"""create source content, prompt, question and trivia set tables

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0a1b2c3d4e5f"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

QUESTION_TABLES = ("trivia_multiple_choice", "trivia_true_false", "trivia_who_am_i")
SET_TABLES = {
    "sets_trivia_multiple_choice": "ck_sets_tmc_question_count",
    "sets_trivia_true_false": "ck_sets_tft_question_count",
    "sets_trivia_who_am_i": "ck_sets_wai_question_count",
}


def _id_and_timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _question_columns() -> list[sa.Column]:
    return [
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("theme", sa.String(length=100), nullable=True),
        sa.Column("difficulty", sa.String(length=20), nullable=True),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("attribution", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=True),
        sa.Column("used_in", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("source_content_id", sa.BigInteger(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _set_columns() -> list[sa.Column]:
    return [
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("theme", sa.String(length=255), nullable=True),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("difficulty", sa.String(length=20), nullable=True),
        sa.Column("question_data", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("question_count", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("visibility", sa.String(length=20), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "source_content_ingested",
        sa.Column("content_text", sa.Text(), nullable=False),
        sa.Column("word_count", sa.Integer(), nullable=False),
        sa.Column("char_count", sa.Integer(), nullable=False),
        sa.Column("theme", sa.String(length=100), nullable=False),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column("key_phrases", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("ingestion_status", sa.String(length=20), nullable=False),
        sa.Column("ingestion_process_id", sa.String(length=64), nullable=True),
        *_id_and_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_source_content_ingested_theme"), "source_content_ingested", ["theme"]
    )
    op.create_index(
        op.f("ix_source_content_ingested_category"), "source_content_ingested", ["category"]
    )

    op.create_table(
        "ai_extraction_prompts",
        sa.Column("prompt_name", sa.String(length=255), nullable=False),
        sa.Column("prompt_type", sa.String(length=50), nullable=False),
        sa.Column("prompt_content", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_id_and_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_ai_extraction_prompts_type_active",
        "ai_extraction_prompts",
        ["prompt_type", "is_active"],
    )

    op.create_table(
        "trivia_multiple_choice",
        *_question_columns(),
        sa.Column("correct_answer", sa.Text(), nullable=False),
        sa.Column("wrong_answers", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        *_id_and_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "trivia_true_false",
        *_question_columns(),
        sa.Column("is_true", sa.Boolean(), nullable=False),
        *_id_and_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "trivia_who_am_i",
        *_question_columns(),
        sa.Column("correct_answer", sa.Text(), nullable=False),
        *_id_and_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    for table in QUESTION_TABLES:
        op.create_index(op.f(f"ix_{table}_theme"), table, ["theme"])
        op.create_index(op.f(f"ix_{table}_status"), table, ["status"])

    for table, check_name in SET_TABLES.items():
        op.create_table(
            table,
            *_set_columns(),
            *_id_and_timestamps(),
            sa.CheckConstraint("question_count > 0", name=check_name),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f(f"ix_{table}_slug"), table, ["slug"])


def downgrade() -> None:
    for table in SET_TABLES:
        op.drop_index(op.f(f"ix_{table}_slug"), table_name=table)
        op.drop_table(table)

    for table in QUESTION_TABLES:
        op.drop_index(op.f(f"ix_{table}_status"), table_name=table)
        op.drop_index(op.f(f"ix_{table}_theme"), table_name=table)
        op.drop_table(table)

    op.drop_index("ix_ai_extraction_prompts_type_active", table_name="ai_extraction_prompts")
    op.drop_table("ai_extraction_prompts")

    op.drop_index(
        op.f("ix_source_content_ingested_category"), table_name="source_content_ingested"
    )
    op.drop_index(op.f("ix_source_content_ingested_theme"), table_name="source_content_ingested")
    op.drop_table("source_content_ingested")
