"""Prompt-driven generator for source content enrichment."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from pydantic import BaseModel
from pydantic_ai.exceptions import ModelHTTPError

from app.agents.base_agent import BaseAgent
from app.process_builders.core.errors import RATE_LIMITED

logger = logging.getLogger(__name__)

ResponseShape = Literal["json", "text"]

RATE_LIMIT_MESSAGE = (
    "Gemini API rate limit exceeded. Please wait a few moments and try again. "
    "The service is temporarily unavailable due to high demand."
)
GENERATION_FAILED = "GENERATION_FAILED"
INVALID_RESPONSE = "INVALID_RESPONSE"

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_RATE_LIMIT_TOKEN = re.compile(r"\b(?:429|RESOURCE_EXHAUSTED)\b")


@dataclass(frozen=True, slots=True)
class GenerationResult:
    success: bool
    data: Any = None
    error: str | None = None
    error_code: str | None = None
    retryable: bool = False


class ContentGeneratorProtocol(Protocol):
    async def generate(
        self,
        prompt_text: str,
        source_text: str,
        response_shape: ResponseShape = "json",
    ) -> GenerationResult: ...


class GenerationRequest(BaseModel):
    prompt_text: str
    source_text: str
    response_shape: ResponseShape = "json"


def build_full_prompt(prompt_text: str, source_text: str) -> str:
    return f"{prompt_text}\n\nSource Content:\n{source_text}"


def clean_json_text(raw: str) -> str:
    """Strip markdown fences and any chatter around the outermost JSON object."""
    cleaned = _CODE_FENCE.sub("", raw.strip()).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        return cleaned[start : end + 1]
    return cleaned


def is_rate_limit_error(error: BaseException) -> bool:
    if isinstance(error, ModelHTTPError) and error.status_code == 429:
        return True
    return _RATE_LIMIT_TOKEN.search(str(error)) is not None


def result_from_exception(error: BaseException) -> GenerationResult:
    if is_rate_limit_error(error):
        return GenerationResult(
            success=False,
            error=RATE_LIMIT_MESSAGE,
            error_code=RATE_LIMITED,
            retryable=True,
        )
    if isinstance(error, ModelHTTPError):
        return GenerationResult(
            success=False,
            error=str(error),
            error_code=str(error.status_code),
            retryable=error.status_code >= 500,
        )
    return GenerationResult(
        success=False,
        error=str(error) or type(error).__name__,
        error_code=GENERATION_FAILED,
    )


class ContentGenerator(BaseAgent[GenerationRequest, str]):
    """Runs a stored extraction prompt against source content.

    The prompt text comes from the database, so the agent asks for plain
    text and parses JSON itself when a structured response is wanted.
    """

    temperature = 0.4

    @property
    def system_prompt(self) -> str:
        return (
            "You are a content analyst preparing source material for a trivia studio. "
            "Follow the instructions exactly. When asked for JSON, reply with a single "
            "JSON object and nothing else."
        )

    @property
    def output_type(self) -> type[str]:
        return str

    def _build_prompt(self, input_data: GenerationRequest) -> str:
        return build_full_prompt(input_data.prompt_text, input_data.source_text)

    async def generate(
        self,
        prompt_text: str,
        source_text: str,
        response_shape: ResponseShape = "json",
    ) -> GenerationResult:
        """Never raises; failures come back with `success=False`."""
        if not prompt_text or not prompt_text.strip():
            return GenerationResult(success=False, error="Prompt is required", error_code=GENERATION_FAILED)
        if not source_text or not source_text.strip():
            return GenerationResult(success=False, error="Content is required", error_code=GENERATION_FAILED)

        request = GenerationRequest(
            prompt_text=prompt_text,
            source_text=source_text,
            response_shape=response_shape,
        )
        try:
            raw = await self.run(request, {"response_shape": response_shape})
        except Exception as exc:
            logger.warning(
                "Content generation failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return result_from_exception(exc)

        text = (raw or "").strip()
        if not text:
            return GenerationResult(
                success=False,
                error="Gemini returned empty response",
                error_code=INVALID_RESPONSE,
            )
        if response_shape == "text":
            return GenerationResult(success=True, data=text)

        try:
            parsed = json.loads(clean_json_text(text))
        except json.JSONDecodeError as exc:
            return GenerationResult(
                success=False,
                error=f"Failed to parse JSON response: {exc.msg}",
                error_code=INVALID_RESPONSE,
            )
        if not isinstance(parsed, dict):
            return GenerationResult(
                success=False,
                error="Expected a JSON object in the response",
                error_code=INVALID_RESPONSE,
            )
        return GenerationResult(success=True, data=parsed)
