"""Table-scoped record store used by process builder tasks."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session_context
from app.core.db_retry import run_with_transient_db_retry
from app.core.exceptions import UnknownTableError
from app.models.base import Base
from app.models.content import AIExtractionPrompt, SourceContentIngested
from app.models.trivia import (
    SetTriviaMultipleChoice,
    SetTriviaTrueFalse,
    SetTriviaWhoAmI,
    TriviaMultipleChoice,
    TriviaTrueFalse,
    TriviaWhoAmI,
)

logger = logging.getLogger(__name__)

SessionFactory = Callable[..., AbstractAsyncContextManager[AsyncSession]]

TABLE_MODELS: dict[str, type[Base]] = {
    model.__tablename__: model
    for model in (
        SourceContentIngested,
        AIExtractionPrompt,
        TriviaMultipleChoice,
        TriviaTrueFalse,
        TriviaWhoAmI,
        SetTriviaMultipleChoice,
        SetTriviaTrueFalse,
        SetTriviaWhoAmI,
    )
}


@dataclass(frozen=True, slots=True)
class StoreResult:
    """Outcome of one store call; `data` is a row dict or a list of row dicts."""

    success: bool
    data: Any = None
    error: str | None = None


class RecordStore(Protocol):
    async def insert_returning(self, table: str, record: Mapping[str, Any]) -> StoreResult: ...

    async def select_filtered(self, table: str, filters: Mapping[str, Any]) -> StoreResult: ...


def _model_for(table: str) -> type[Base]:
    model = TABLE_MODELS.get(table)
    if model is None:
        raise UnknownTableError(table)
    return model


class SqlAlchemyRecordStore:
    """RecordStore over the async SQLAlchemy models."""

    def __init__(self, session_factory: SessionFactory = get_session_context) -> None:
        self._session_factory = session_factory

    async def insert_returning(self, table: str, record: Mapping[str, Any]) -> StoreResult:
        try:
            model = _model_for(table)
        except UnknownTableError as exc:
            return StoreResult(success=False, error=exc.message)

        async def _insert() -> dict[str, Any]:
            async with self._session_factory() as session:
                row = model(**dict(record))
                session.add(row)
                await session.flush()
                await session.refresh(row)
                return row.to_dict()

        try:
            data = await run_with_transient_db_retry(
                _insert,
                operation_name=f"insert:{table}",
                log_context={"table": table},
            )
        except (SQLAlchemyError, TypeError) as exc:
            logger.warning("Record insert failed", extra={"table": table, "error": str(exc)})
            return StoreResult(success=False, error=str(exc))

        return StoreResult(success=True, data=data)

    async def select_filtered(self, table: str, filters: Mapping[str, Any]) -> StoreResult:
        try:
            model = _model_for(table)
        except UnknownTableError as exc:
            return StoreResult(success=False, error=exc.message)

        statement = select(model)
        for key, value in filters.items():
            column = getattr(model, key, None)
            if column is None:
                return StoreResult(success=False, error=f"Unknown column for {table}: {key}")
            if isinstance(value, list | tuple | set):
                statement = statement.where(column.in_(list(value)))
            else:
                statement = statement.where(column == value)

        async def _select() -> list[dict[str, Any]]:
            async with self._session_factory(commit_on_exit=False) as session:
                rows = (await session.execute(statement)).scalars().all()
                return [row.to_dict() for row in rows]

        try:
            data = await run_with_transient_db_retry(
                _select,
                operation_name=f"select:{table}",
                log_context={"table": table},
            )
        except SQLAlchemyError as exc:
            logger.warning("Record select failed", extra={"table": table, "error": str(exc)})
            return StoreResult(success=False, error=str(exc))

        return StoreResult(success=True, data=data)
