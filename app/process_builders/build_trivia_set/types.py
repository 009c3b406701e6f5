"""Payload models for the build-trivia-set pipeline."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

QuestionType = Literal["multiple-choice", "true-false", "who-am-i"]
SourceTable = Literal["trivia_multiple_choice", "trivia_true_false", "trivia_who_am_i"]
DistributionStrategy = Literal["even", "weighted", "custom"]
SetDifficulty = Literal["easy", "medium", "hard"]

# Fixed priority order; also the order remainders are handed out in.
QUESTION_TYPES: tuple[QuestionType, ...] = ("multiple-choice", "true-false", "who-am-i")

QUESTION_TYPE_ALIASES: dict[str, QuestionType] = {
    "TMC": "multiple-choice",
    "TFT": "true-false",
    "WAI": "who-am-i",
    "multiple-choice": "multiple-choice",
    "true-false": "true-false",
    "who-am-i": "who-am-i",
}

SOURCE_TABLES: dict[QuestionType, SourceTable] = {
    "multiple-choice": "trivia_multiple_choice",
    "true-false": "trivia_true_false",
    "who-am-i": "trivia_who_am_i",
}

SET_TABLES: dict[QuestionType, str] = {
    "multiple-choice": "sets_trivia_multiple_choice",
    "true-false": "sets_trivia_true_false",
    "who-am-i": "sets_trivia_who_am_i",
}


def normalize_question_types(values: list[Any]) -> list[QuestionType]:
    """Resolve aliases, drop unknown values and return types in priority order."""
    requested = {
        QUESTION_TYPE_ALIASES[value]
        for value in values
        if isinstance(value, str) and value in QUESTION_TYPE_ALIASES
    }
    return [question_type for question_type in QUESTION_TYPES if question_type in requested]


class QuestionCandidate(BaseModel):
    """A published question eligible for a set. Read-only once fetched."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | str
    question_text: str
    question_type: QuestionType
    correct_answer: str = ""
    wrong_answers: list[str] = Field(default_factory=list)
    is_true: bool | None = None
    explanation: str | None = None
    theme: str | None = None
    tags: list[str] = Field(default_factory=list)
    difficulty: str | None = None
    source_table: SourceTable
    relevance_score: float | None = None


class QueryResult(BaseModel):
    candidates: list[QuestionCandidate]


class QuestionSelectionResult(BaseModel):
    """Candidate pool, selected subset and realized per-type counts."""

    candidates: list[QuestionCandidate]
    selected: list[QuestionCandidate]
    distribution: dict[str, int]


class TriviaSetMetadata(BaseModel):
    title: str
    slug: str
    description: str | None = None
    category: str | None = None
    theme: str | None = None
    tags: list[str] = Field(default_factory=list)
    difficulty: SetDifficulty = "medium"
    estimated_duration: int | None = None
    sub_themes: list[str] = Field(default_factory=list)


class TriviaQuestionData(BaseModel):
    """One question as stored inside a set's `question_data` column."""

    question_id: str
    source_id: int | str
    question_text: str
    question_type: QuestionType
    correct_answer: str
    wrong_answers: list[str] = Field(default_factory=list)
    explanation: str | None = None
    tags: list[str] = Field(default_factory=list)
    difficulty: int = 2
    points: int = 20
    time_limit: int = 30


class AssembledQuestions(BaseModel):
    question_data: list[TriviaQuestionData]


class CreatedTriviaSet(BaseModel):
    id: int | str | None = None
    table_name: str
    trivia_set: dict[str, Any]
    dry_run: bool = False


class FinalizedTriviaSet(BaseModel):
    validated: bool = True
    trivia_set_id: int | str | None = None
    trivia_set: dict[str, Any]
