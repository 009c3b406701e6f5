"""Unit tests for the content generator response handling."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic_ai.exceptions import ModelHTTPError

from app.agents.content_generator import (
    GENERATION_FAILED,
    INVALID_RESPONSE,
    RATE_LIMIT_MESSAGE,
    ContentGenerator,
    GenerationRequest,
    build_full_prompt,
    clean_json_text,
    result_from_exception,
)


def _generator_returning(outcome: Any) -> tuple[ContentGenerator, list[GenerationRequest]]:
    generator = ContentGenerator(model_override="test")
    seen: list[GenerationRequest] = []

    async def fake_run(input_data: GenerationRequest, context: dict[str, Any] | None = None) -> Any:
        seen.append(input_data)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    generator.run = fake_run  # type: ignore[method-assign]
    return generator, seen


def test_clean_json_text_strips_fences_and_chatter() -> None:
    assert clean_json_text('```json\n{"theme": "Hockey"}\n```') == '{"theme": "Hockey"}'
    assert clean_json_text('Sure! Here it is: {"a": {"b": 1}} hope that helps') == '{"a": {"b": 1}}'
    assert clean_json_text("no json here") == "no json here"


def test_full_prompt_appends_source_content() -> None:
    assert build_full_prompt("Summarize.", "Text") == "Summarize.\n\nSource Content:\nText"
    request = GenerationRequest(prompt_text="Summarize.", source_text="Text")
    assert ContentGenerator(model_override="test")._build_prompt(request) == build_full_prompt(
        "Summarize.", "Text"
    )


def test_rate_limits_map_to_retryable_429() -> None:
    from_status = result_from_exception(ModelHTTPError(status_code=429, model_name="gemini"))
    from_message = result_from_exception(RuntimeError("RESOURCE_EXHAUSTED: quota"))

    for outcome in (from_status, from_message):
        assert outcome.success is False
        assert outcome.error_code == "429"
        assert outcome.error == RATE_LIMIT_MESSAGE
        assert outcome.retryable is True


def test_server_errors_are_retryable_but_client_errors_are_not() -> None:
    server = result_from_exception(ModelHTTPError(status_code=503, model_name="gemini"))
    client = result_from_exception(ModelHTTPError(status_code=400, model_name="gemini"))

    assert server.error_code == "503" and server.retryable is True
    assert client.error_code == "400" and client.retryable is False


def test_digits_inside_larger_numbers_are_not_rate_limits() -> None:
    message = "Prompt too long: 14290 tokens exceeds limit (request 84290)"

    outcome = result_from_exception(ValueError(message))

    assert outcome.error_code == GENERATION_FAILED
    assert outcome.error == message
    assert outcome.retryable is False
    assert result_from_exception(RuntimeError("HTTP 429 Too Many Requests")).error_code == "429"


def test_other_exceptions_become_generation_failures() -> None:
    outcome = result_from_exception(ValueError("bad things"))

    assert outcome.error_code == GENERATION_FAILED
    assert outcome.error == "bad things"
    assert outcome.retryable is False


@pytest.mark.asyncio
async def test_generate_parses_json_object() -> None:
    generator, seen = _generator_returning('```json\n{"theme": "Hockey", "tags": ["nhl"]}\n```')

    outcome = await generator.generate("Extract.", "Source text")

    assert outcome.success is True
    assert outcome.data == {"theme": "Hockey", "tags": ["nhl"]}
    assert seen[0].response_shape == "json"


@pytest.mark.asyncio
async def test_generate_returns_trimmed_text() -> None:
    generator, _ = _generator_returning("  A short summary.  \n")

    outcome = await generator.generate("Summarize.", "Source text", "text")

    assert outcome.success is True
    assert outcome.data == "A short summary."


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ("", "Gemini returned empty response"),
        ("{not json}", "Failed to parse JSON response"),
        ("[1, 2]", "Expected a JSON object in the response"),
    ],
)
async def test_generate_reports_invalid_responses(raw: str, message: str) -> None:
    generator, _ = _generator_returning(raw)

    outcome = await generator.generate("Extract.", "Source text")

    assert outcome.success is False
    assert outcome.error_code == INVALID_RESPONSE
    assert outcome.error.startswith(message)


@pytest.mark.asyncio
async def test_generate_requires_prompt_and_content() -> None:
    generator, seen = _generator_returning("{}")

    missing_prompt = await generator.generate("  ", "Source text")
    missing_content = await generator.generate("Extract.", "")

    assert missing_prompt.error == "Prompt is required"
    assert missing_content.error == "Content is required"
    assert seen == []


@pytest.mark.asyncio
async def test_generate_never_raises_on_model_errors() -> None:
    generator, _ = _generator_returning(ModelHTTPError(status_code=429, model_name="gemini"))

    outcome = await generator.generate("Extract.", "Source text")

    assert outcome.success is False
    assert outcome.error_code == "429"
