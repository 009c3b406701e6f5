"""Task 2: select and balance questions across types."""

from __future__ import annotations

import random
from typing import Any

from app.process_builders.build_trivia_set.selection import SelectionError, select_and_balance
from app.process_builders.build_trivia_set.tasks.query_questions import QUERY_QUESTIONS
from app.process_builders.build_trivia_set.types import QueryResult, normalize_question_types
from app.process_builders.core.errors import task_error_from_exception
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import TaskContext, TaskResult

SELECT_BALANCE = "select-balance"


def coerce_count(value: Any) -> int:
    """Whole-number question count, or 0 when the rule is not one."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


class SelectBalanceTask(ProcessBuilderTask):
    id = SELECT_BALANCE
    name = "Select & Balance Questions"
    description = "Selects and balances questions based on the distribution strategy"

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    async def execute(self, context: TaskContext) -> TaskResult:
        query = context.data_for(QUERY_QUESTIONS)
        if not isinstance(query, QueryResult):
            return TaskResult.failed(self.id, "NO_CANDIDATES", "No candidates from previous task")

        raw_types = context.rule_value("questionTypes")
        question_count = coerce_count(context.rule_value("questionCount"))
        strategy = str(context.rule_value("distributionStrategy", "weighted"))

        try:
            selection = select_and_balance(
                query.candidates,
                question_count=question_count,
                question_types=normalize_question_types(raw_types if isinstance(raw_types, list) else []),
                strategy=strategy,
                allow_partial=bool(context.rule_value("allowPartialSets", False)),
                rng=self.rng,
            )
        except SelectionError as exc:
            return TaskResult.from_errors([task_error_from_exception(exc, self.id)])

        return TaskResult.ok(
            selection.result,
            warnings=selection.warnings,
            metadata={
                "total_candidates": len(selection.result.candidates),
                "selected_count": len(selection.result.selected),
                "requested_count": selection.requested,
                "distribution_strategy": selection.strategy,
            },
        )
