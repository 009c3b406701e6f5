"""Task 6: structural and answer-set checks on the created set."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.process_builders.build_trivia_set.tasks.create_record import CREATE_RECORD
from app.process_builders.build_trivia_set.types import CreatedTriviaSet, FinalizedTriviaSet
from app.process_builders.core.errors import TaskError
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import TaskContext, TaskResult

VALIDATE_FINALIZE = "validate-finalize"


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def check_question(question: Mapping[str, Any], number: int) -> list[tuple[str, str]]:
    """Problems with one stored question as (code, message) pairs."""
    problems: list[tuple[str, str]] = []
    if _blank(question.get("question_text")):
        problems.append(("INVALID_QUESTION", f"Question {number}: Missing question_text"))
    if not question.get("question_type"):
        problems.append(("INVALID_QUESTION", f"Question {number}: Missing question_type"))
    if not question.get("correct_answer"):
        problems.append(("INVALID_QUESTION", f"Question {number}: Missing correct_answer"))

    question_type = question.get("question_type")
    if question_type == "multiple-choice":
        wrong_answers = question.get("wrong_answers")
        if not isinstance(wrong_answers, list) or len(wrong_answers) < 2:
            problems.append(
                (
                    "INSUFFICIENT_OPTIONS",
                    f"Question {number}: Multiple choice must have at least 2 wrong answers",
                )
            )
            wrong_answers = wrong_answers if isinstance(wrong_answers, list) else []
        answers = [str(answer).strip().lower() for answer in [question.get("correct_answer"), *wrong_answers]]
        if len(set(answers)) != len(answers):
            problems.append(
                ("DUPLICATE_ANSWERS", f"Question {number}: Duplicate answer options found")
            )
    elif question_type == "true-false":
        if str(question.get("correct_answer")).lower() not in ("true", "false"):
            problems.append(
                (
                    "INVALID_ANSWER",
                    f"Question {number}: True/False question must have 'true' or 'false' "
                    "as correct answer",
                )
            )
    return problems


class ValidateFinalizeTask(ProcessBuilderTask):
    id = VALIDATE_FINALIZE
    name = "Validate & Finalize"
    description = "Validates the created trivia set"

    async def execute(self, context: TaskContext) -> TaskResult:
        created = context.data_for(CREATE_RECORD)
        if not isinstance(created, CreatedTriviaSet):
            return TaskResult.failed(self.id, "NO_TRIVIA_SET", "No trivia set from previous task")

        trivia_set = created.trivia_set
        problems: list[tuple[str, str]] = []
        warnings: list[str] = []

        requested = context.rule_value("questionCount")
        question_count = trivia_set.get("question_count") or 0
        if requested is not None and question_count != requested:
            warnings.append(
                f"Question count mismatch: requested {requested}, got {question_count}"
            )

        if _blank(trivia_set.get("title")):
            problems.append(("MISSING_TITLE", "Title is required"))
        if _blank(trivia_set.get("slug")):
            problems.append(("MISSING_SLUG", "Slug is required"))
        if question_count <= 0:
            problems.append(("INVALID_QUESTION_COUNT", "question_count must be greater than 0"))

        question_data = trivia_set.get("question_data")
        if not isinstance(question_data, list):
            problems.append(("INVALID_QUESTION_DATA", "question_data must be an array"))
            question_data = []

        for number, question in enumerate(question_data, start=1):
            problems.extend(check_question(question, number))

        texts = [str(question.get("question_text") or "").strip().lower() for question in question_data]
        if len(set(texts)) != len(texts):
            warnings.append("Duplicate questions found in set")

        if problems:
            return TaskResult.from_errors(
                [TaskError(code=code, message=message, task_id=self.id) for code, message in problems],
                warnings=warnings,
            )

        return TaskResult.ok(
            FinalizedTriviaSet(trivia_set_id=created.id, trivia_set=trivia_set),
            warnings=warnings,
            metadata={"question_count": question_count, "validation_passed": True},
        )
