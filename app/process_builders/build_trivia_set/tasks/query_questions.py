"""Task 1: query published candidate questions."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from app.process_builders.build_trivia_set.types import (
    SOURCE_TABLES,
    QueryResult,
    QuestionCandidate,
    QuestionType,
    normalize_question_types,
)
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import TaskContext, TaskResult
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)

QUERY_QUESTIONS = "query-questions"


def candidate_from_row(row: Mapping[str, Any], question_type: QuestionType) -> QuestionCandidate:
    """Map a question library row onto the common candidate shape."""
    if question_type == "true-false":
        correct_answer = "true" if row.get("is_true") else "false"
        wrong_answers: list[str] = []
    elif question_type == "who-am-i":
        correct_answer = row.get("correct_answer") or ""
        wrong_answers = []
    else:
        correct_answer = row.get("correct_answer") or ""
        wrong_answers = list(row.get("wrong_answers") or [])

    return QuestionCandidate.model_validate(
        {
            **row,
            "question_type": question_type,
            "source_table": SOURCE_TABLES[question_type],
            "correct_answer": correct_answer,
            "wrong_answers": wrong_answers,
            "tags": list(row.get("tags") or []),
        }
    )


def matches_theme(candidate: QuestionCandidate, theme: str) -> bool:
    needle = theme.lower()
    haystacks = (
        candidate.question_text.lower(),
        (candidate.theme or "").lower(),
        " ".join(candidate.tags).lower(),
    )
    return any(needle in haystack for haystack in haystacks)


def filter_by_theme(candidates: Sequence[QuestionCandidate], theme: str | None) -> list[QuestionCandidate]:
    if not theme or not theme.strip():
        return list(candidates)
    return [candidate for candidate in candidates if matches_theme(candidate, theme.strip())]


class QueryQuestionsTask(ProcessBuilderTask):
    id = QUERY_QUESTIONS
    name = "Query Source Questions"
    description = "Fetches published questions matching the theme and requested types"

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def execute(self, context: TaskContext) -> TaskResult:
        raw_types = context.rule_value("questionTypes")
        if not isinstance(raw_types, list) or not raw_types:
            return TaskResult.failed(
                self.id,
                "INVALID_RULES",
                "questionTypes rule is required and must be a non-empty array",
            )

        question_types = normalize_question_types(raw_types)
        if not question_types:
            return TaskResult.failed(
                self.id,
                "INVALID_RULES",
                f"questionTypes contains no supported question type: {raw_types}",
            )

        theme = context.rule_value("theme") or context.goal.text
        candidates: list[QuestionCandidate] = []
        for question_type in question_types:
            table = SOURCE_TABLES[question_type]
            outcome = await self.store.select_filtered(table, {"status": "published"})
            if not outcome.success:
                return TaskResult.failed(
                    self.id,
                    "QUERY_ERROR",
                    f"Failed to query {table}: {outcome.error}",
                )
            try:
                candidates.extend(
                    candidate_from_row(row, question_type) for row in outcome.data or []
                )
            except ValidationError as exc:
                return TaskResult.failed(
                    self.id,
                    "QUERY_FAILED",
                    f"Malformed row in {table}",
                    details=exc.errors(include_url=False),
                )

        filtered = filter_by_theme(candidates, theme)
        logger.info(
            "Candidate questions loaded",
            extra={
                "question_types": question_types,
                "total_candidates": len(candidates),
                "candidate_count": len(filtered),
            },
        )
        return TaskResult.ok(
            QueryResult(candidates=filtered),
            metadata={
                "candidate_count": len(filtered),
                "total_candidates": len(candidates),
                "theme": theme or "all",
            },
        )
