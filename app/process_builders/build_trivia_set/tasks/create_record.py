"""Task 5: persist the trivia set as a draft record."""

from __future__ import annotations

import logging
from typing import Any

from app.config import settings
from app.process_builders.build_trivia_set.tasks.assemble_data import ASSEMBLE_DATA
from app.process_builders.build_trivia_set.tasks.generate_metadata import GENERATE_METADATA
from app.process_builders.build_trivia_set.types import (
    SET_TABLES,
    AssembledQuestions,
    CreatedTriviaSet,
    TriviaSetMetadata,
)
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import TaskContext, TaskResult
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)

CREATE_RECORD = "create-record"


class CreateTriviaSetRecordTask(ProcessBuilderTask):
    """Insert the set into the table matching its first question's type.

    Sets start as `draft` with `Private` visibility; nothing downstream
    publishes them, so a failed run never leaves a live set behind.
    """

    id = CREATE_RECORD
    name = "Create Trivia Set Record"
    description = "Creates the trivia set record in the database"
    timeout = settings.record_task_timeout_seconds

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def execute(self, context: TaskContext) -> TaskResult:
        metadata = context.data_for(GENERATE_METADATA)
        if not isinstance(metadata, TriviaSetMetadata):
            return TaskResult.failed(self.id, "NO_METADATA", "No metadata from previous task")

        assembled = context.data_for(ASSEMBLE_DATA)
        if not isinstance(assembled, AssembledQuestions):
            return TaskResult.failed(
                self.id, "NO_QUESTION_DATA", "No question data from previous task"
            )

        questions = assembled.question_data
        if not questions:
            return TaskResult.failed(
                self.id, "INVALID_QUESTION_COUNT", "Question count must be greater than 0"
            )

        first_type = questions[0].question_type
        table = SET_TABLES[first_type]
        record: dict[str, Any] = {
            "title": metadata.title,
            "slug": metadata.slug,
            "description": metadata.description,
            "category": metadata.category,
            "theme": metadata.theme,
            "tags": metadata.tags,
            "difficulty": metadata.difficulty,
            "question_count": len(questions),
            "question_data": [question.model_dump() for question in questions],
            "status": "draft",
            "visibility": "Private",
        }

        if context.dry_run:
            logger.info("Dry run; trivia set not written", extra={"table": table})
            return TaskResult.ok(
                CreatedTriviaSet(table_name=table, trivia_set=record, dry_run=True),
                warnings=[f"Dry run: trivia set was not written to {table}"],
                metadata={"table_name": table, "question_type": first_type, "dry_run": True},
            )

        outcome = await self.store.insert_returning(table, record)
        if not outcome.success:
            return TaskResult.failed(
                self.id,
                "DATABASE_ERROR",
                f"Failed to create trivia set: {outcome.error}",
                details={"table": table},
                retryable=True,
            )
        if not outcome.data:
            return TaskResult.failed(
                self.id, "NO_DATA_RETURNED", "Database insert succeeded but no data returned"
            )

        created = dict(outcome.data)
        return TaskResult.ok(
            CreatedTriviaSet(id=created.get("id"), table_name=table, trivia_set=created),
            metadata={
                "trivia_set_id": created.get("id"),
                "slug": created.get("slug"),
                "table_name": table,
                "question_type": first_type,
            },
        )
