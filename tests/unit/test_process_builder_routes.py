"""Unit tests for the process builder and run progress endpoints."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.api.v1.dependencies import get_pipeline_collaborators, get_task_manager
from app.config import settings
from app.main import create_app
from app.services.record_store import StoreResult
from app.services.task_manager import TaskManager


class _FakeRedis:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.values[key] = value
        return True


class _FakeStore:
    def __init__(self, questions: int) -> None:
        self.rows = [
            {
                "id": index + 1,
                "question_text": f"Who scored goal number {index}?",
                "correct_answer": f"Player {index}",
                "wrong_answers": ["A", "B", "C"],
                "theme": "hockey",
                "tags": ["goals"],
                "difficulty": "medium",
                "status": "published",
            }
            for index in range(questions)
        ]
        self.inserted: list[dict[str, Any]] = []

    async def select_filtered(self, table: str, filters: Mapping[str, Any]) -> StoreResult:
        if table != "trivia_multiple_choice":
            return StoreResult(success=True, data=[])
        return StoreResult(success=True, data=list(self.rows))

    async def insert_returning(self, table: str, record: Mapping[str, Any]) -> StoreResult:
        created = {"id": 42, **record}
        self.inserted.append(created)
        return StoreResult(success=True, data=created)


@pytest.fixture
def redis() -> _FakeRedis:
    return _FakeRedis()


@pytest.fixture
def store() -> _FakeStore:
    return _FakeStore(questions=8)


@pytest.fixture
def client(redis: _FakeRedis, store: _FakeStore) -> Iterator[TestClient]:
    original_environment = settings.environment
    settings.environment = "production"
    app = create_app()
    app.dependency_overrides[get_task_manager] = lambda: TaskManager(redis_client=redis)  # type: ignore[arg-type]
    app.dependency_overrides[get_pipeline_collaborators] = lambda: {"store": store}
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        settings.environment = original_environment


def _url(path: str) -> str:
    return f"{settings.api_v1_prefix}{path}"


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_and_get_process_builders(client: TestClient) -> None:
    listing = client.get(_url("/process-builders/"))
    single = client.get(_url("/process-builders/build-trivia-set"))
    missing = client.get(_url("/process-builders/unknown"))

    assert listing.status_code == 200
    assert [item["id"] for item in listing.json()] == ["ingest-source-content", "build-trivia-set"]
    assert single.json()["required_rules"] == ["questionTypes", "questionCount"]
    assert single.json()["limits"]["questionCount"] == {"min": 1.0, "max": 100.0}
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Process builder not found"


def test_run_builds_trivia_set_and_mirrors_progress(
    client: TestClient, redis: _FakeRedis, store: _FakeStore
) -> None:
    response = client.post(
        _url("/process-builders/build-trivia-set/run"),
        json={
            "goal": {"text": "Hockey"},
            "rules": {"questionTypes": ["TMC"], "questionCount": {"value": 5, "type": "number"}},
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "success", payload["errors"]
    assert payload["final_result"]["trivia_set_id"] == 42
    assert len(store.inserted) == 1

    run_id = payload["run_id"]
    progress = client.get(_url(f"/tasks/{run_id}"))
    assert progress.status_code == 200
    body = progress.json()
    assert body["status"] == "success"
    assert body["process_id"] == "build-trivia-set"
    assert body["completed_tasks"] == 6
    assert body["total_tasks"] == 6
    assert body["progress_percent"] == 100.0
    assert body["tasks"]["create-record"]["status"] == "completed"


def test_dry_run_option_is_forwarded(client: TestClient, store: _FakeStore) -> None:
    response = client.post(
        _url("/process-builders/build-trivia-set/run"),
        json={
            "goal": {"text": "Hockey"},
            "rules": {"questionTypes": ["TMC"], "questionCount": 5},
            "options": {"dry_run": True},
        },
    )

    assert response.json()["status"] == "success"
    assert store.inserted == []


def test_invalid_rules_return_422_and_mark_run_failed(client: TestClient, redis: _FakeRedis) -> None:
    response = client.post(
        _url("/process-builders/build-trivia-set/run"),
        json={"goal": {"text": "Hockey"}, "rules": {"questionTypes": ["TMC"]}},
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Missing required rule: questionCount"
    assert len(redis.values) == 1
    (stored,) = redis.values.values()
    assert '"status": "error"' in stored


def test_unknown_run_returns_404(client: TestClient) -> None:
    response = client.get(_url("/tasks/run_missing"))

    assert response.status_code == 404
    assert response.json()["detail"] == "Run not found"


def test_run_for_unknown_builder_returns_404(client: TestClient) -> None:
    response = client.post(
        _url("/process-builders/nope/run"),
        json={"goal": {"text": "Hockey"}, "rules": {}},
    )

    assert response.status_code == 404
