"""Source text normalization and chunking."""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field

CHUNK_TARGET_WORDS = 500
CHUNK_MIN_WORDS = 600
SENTENCES_PER_PSEUDO_PARAGRAPH = 4

_BULLETS = re.compile(r"[•●○◦▪▫]")
_BOXES_AND_ARROWS = re.compile(r"[□■◻◼►▸▹◄◂]")
_DASHES = re.compile(r"[—–]")
_TYPOGRAPHIC_MARKS = re.compile(r"[†‡§¶]")
_INVISIBLE = re.compile(r"[\u200b-\u200d\ufeff\u00ad]")
_DOUBLE_QUOTES = re.compile(r"[“”„«»]")
_SINGLE_QUOTES = re.compile(r"[‘’‚‹›]")
_LONG_CAPS = re.compile(r"\b([A-Z]{5,})\b")
_NEWLINES = re.compile(r"\n+")
_MULTI_SPACE = re.compile(r"\s{2,}")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([.,!?;:])")
_MISSING_SPACE_AFTER_PUNCT = re.compile(r"([.,!?;:])([A-Za-z])")
_LONG_ELLIPSIS = re.compile(r"\.{4,}")
_STACKED_PERIODS = re.compile(r"\.{2,}\s")
_PARAGRAPH_BREAK = re.compile(r"\n\n+")
_SENTENCE = re.compile(r"[^.!?]+[.!?]+")


def count_words(text: str) -> int:
    return len(text.split())


def _line_endings(text: str) -> str:
    return text.replace("\r\n", "\n")


def _remove_decorators(text: str) -> str:
    # Bullets become sentence breaks so list items do not run together.
    text = _BULLETS.sub(". ", text)
    text = _BOXES_AND_ARROWS.sub("", text)
    text = _DASHES.sub("-", text)
    return _TYPOGRAPHIC_MARKS.sub("", text)


def _remove_invisible(text: str) -> str:
    return _INVISIBLE.sub("", text)


def _straighten_quotes(text: str) -> str:
    return _SINGLE_QUOTES.sub("'", _DOUBLE_QUOTES.sub('"', text))


def _normalize_caps(text: str) -> str:
    # Runs of 2-4 capitals are treated as acronyms and left alone.
    return _LONG_CAPS.sub(lambda match: match.group(1)[0] + match.group(1)[1:].lower(), text)


def _join_sentences(text: str) -> str:
    return _NEWLINES.sub(" ", text)


def _fix_spacing(text: str) -> str:
    text = _MULTI_SPACE.sub(" ", text)
    text = _SPACE_BEFORE_PUNCT.sub(r"\1", text)
    text = _MISSING_SPACE_AFTER_PUNCT.sub(r"\1 \2", text)
    return _LONG_ELLIPSIS.sub("...", text)


def _final_cleanup(text: str) -> str:
    text = text.strip()
    text = _STACKED_PERIODS.sub(". ", text)
    return _MULTI_SPACE.sub(" ", text)


PROCESSING_STEPS: tuple[tuple[str, str, Callable[[str], str]], ...] = (
    ("line-endings", "Normalize line endings", _line_endings),
    ("remove-decorators", "Remove visual decorators", _remove_decorators),
    ("remove-unicode", "Clean invisible characters", _remove_invisible),
    ("smart-quotes", "Normalize quotes", _straighten_quotes),
    ("normalize-caps", "Normalize capitalization", _normalize_caps),
    ("join-sentences", "Join broken sentences", _join_sentences),
    ("fix-spacing", "Fix spacing issues", _fix_spacing),
    ("final-cleanup", "Final cleanup", _final_cleanup),
)


@dataclass(slots=True)
class ProcessingResult:
    original_text: str
    processed_text: str
    chunks: list[str]
    word_count: int
    char_count: int
    processing_time_ms: int
    steps: list[str] = field(default_factory=list)


def process_text(text: str) -> ProcessingResult:
    """Run every normalization step in order, then count and chunk."""
    started = time.perf_counter()
    processed = text
    completed: list[str] = []
    for step_id, _name, apply in PROCESSING_STEPS:
        processed = apply(processed)
        completed.append(step_id)

    return ProcessingResult(
        original_text=text,
        processed_text=processed,
        chunks=smart_chunk(processed),
        word_count=count_words(processed),
        char_count=len(processed),
        processing_time_ms=int((time.perf_counter() - started) * 1000),
        steps=completed,
    )


def _pseudo_paragraphs(text: str) -> list[str]:
    sentences: list[str] = []
    end = 0
    for match in _SENTENCE.finditer(text):
        sentences.append(match.group())
        end = match.end()
    # Text after the last terminal punctuation is still content.
    if text[end:].strip():
        sentences.append(text[end:])
    paragraphs: list[str] = []
    for start in range(0, len(sentences), SENTENCES_PER_PSEUDO_PARAGRAPH):
        group = " ".join(sentence.strip() for sentence in sentences[start : start + SENTENCES_PER_PSEUDO_PARAGRAPH])
        if group.strip():
            paragraphs.append(group.strip())
    return paragraphs


def smart_chunk(
    text: str,
    target_words: int = CHUNK_TARGET_WORDS,
    min_words_to_chunk: int = CHUNK_MIN_WORDS,
) -> list[str]:
    """Split long text into paragraph-aligned chunks of about `target_words`.

    Text under `min_words_to_chunk` words comes back as a single chunk.
    Normalized text has no paragraph breaks left, so groups of sentences
    stand in for paragraphs.
    """
    if count_words(text) < min_words_to_chunk:
        return [text]

    paragraphs = [part for part in _PARAGRAPH_BREAK.split(text) if part.strip()]
    if len(paragraphs) <= 1:
        paragraphs = _pseudo_paragraphs(text)

    chunks: list[str] = []
    current: list[str] = []
    current_words = 0
    for paragraph in paragraphs:
        words = count_words(paragraph)
        if current and current_words + words > target_words:
            chunks.append("\n\n".join(current))
            current, current_words = [paragraph], words
        else:
            current.append(paragraph)
            current_words += words

    if current:
        chunks.append("\n\n".join(current))
    return chunks or [text]
