"""Task 4: assemble the per-question payload stored on the set."""

from __future__ import annotations

import random
from collections import Counter

from app.process_builders.build_trivia_set.selection import shuffled
from app.process_builders.build_trivia_set.tasks.select_balance import SELECT_BALANCE
from app.process_builders.build_trivia_set.types import (
    AssembledQuestions,
    QuestionCandidate,
    QuestionSelectionResult,
    TriviaQuestionData,
)
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import TaskContext, TaskResult

ASSEMBLE_DATA = "assemble-data"

DEFAULT_TIME_LIMIT_SECONDS = 30
POINTS_PER_DIFFICULTY = 10
_DIFFICULTY_NUMBERS = {"easy": 1, "medium": 2, "hard": 3}


def difficulty_to_number(difficulty: str | None) -> int:
    """easy=1, medium=2, hard=3; anything else is medium."""
    if not difficulty:
        return 2
    return _DIFFICULTY_NUMBERS.get(difficulty.lower(), 2)


def to_question_data(
    question: QuestionCandidate,
    index: int,
    rng: random.Random,
) -> TriviaQuestionData:
    difficulty = difficulty_to_number(question.difficulty)
    wrong_answers = list(question.wrong_answers)
    if question.question_type == "multiple-choice" and wrong_answers:
        wrong_answers = shuffled(wrong_answers, rng)

    return TriviaQuestionData(
        question_id=f"q-{question.id}-{index}",
        source_id=question.id,
        question_text=question.question_text,
        question_type=question.question_type,
        correct_answer=question.correct_answer,
        wrong_answers=wrong_answers,
        explanation=question.explanation,
        tags=list(question.tags),
        difficulty=difficulty,
        points=difficulty * POINTS_PER_DIFFICULTY,
        time_limit=DEFAULT_TIME_LIMIT_SECONDS,
    )


class AssembleDataTask(ProcessBuilderTask):
    id = ASSEMBLE_DATA
    name = "Assemble Question Data"
    description = "Assembles selected questions into the stored set format"

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    async def execute(self, context: TaskContext) -> TaskResult:
        selection = context.data_for(SELECT_BALANCE)
        if not isinstance(selection, QuestionSelectionResult):
            return TaskResult.failed(
                self.id, "NO_SELECTED_QUESTIONS", "No selected questions from previous task"
            )

        questions = [
            to_question_data(question, index, self.rng)
            for index, question in enumerate(selection.selected)
        ]
        questions = shuffled(questions, self.rng)
        type_counts = Counter(question.question_type for question in questions)

        return TaskResult.ok(
            AssembledQuestions(question_data=questions),
            metadata={
                "question_count": len(questions),
                "question_types": {
                    "multiple_choice": type_counts["multiple-choice"],
                    "true_false": type_counts["true-false"],
                    "who_am_i": type_counts["who-am-i"],
                },
            },
        )
