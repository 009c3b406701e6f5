"""Unit tests for source text normalization and chunking."""

from __future__ import annotations

from app.process_builders.ingest_source_content.text_processing import (
    PROCESSING_STEPS,
    count_words,
    process_text,
    smart_chunk,
)


def test_process_text_normalizes_decorations_and_quotes() -> None:
    raw = "\u201cGOALIES\u201d stop pucks\u2014mostly.\u200b\r\nThey train \u2022 daily"

    result = process_text(raw)

    assert result.processed_text == '"Goalies" stop pucks-mostly. They train. daily'
    assert result.original_text == raw
    assert result.steps == [step_id for step_id, _, _ in PROCESSING_STEPS]
    assert result.word_count == count_words(result.processed_text)
    assert result.char_count == len(result.processed_text)
    assert result.chunks == [result.processed_text]


def test_short_acronyms_are_preserved() -> None:
    result = process_text("The NHL and the AHL merged rosters. CANADA won")

    assert "NHL" in result.processed_text
    assert "AHL" in result.processed_text
    assert "Canada" in result.processed_text


def test_spacing_and_punctuation_are_repaired() -> None:
    result = process_text("Wait ,what?Yes.....   really")

    assert result.processed_text == "Wait, what? Yes. really"


def test_short_text_is_a_single_chunk() -> None:
    text = "word " * 100

    assert smart_chunk(text.strip()) == [text.strip()]


def test_long_text_is_chunked_by_sentence_groups() -> None:
    sentence = "The captain lifted the cup after a long season of hockey games."
    text = " ".join([sentence] * 120)

    chunks = smart_chunk(text)

    assert len(chunks) > 1
    assert all(count_words(chunk) <= 500 for chunk in chunks)
    assert sum(count_words(chunk) for chunk in chunks) == count_words(text)


def test_unterminated_tail_is_kept_in_last_chunk() -> None:
    sentence = "The captain lifted the cup after a long season of hockey games."
    text = " ".join([sentence] * 60) + " and the parade went on"

    chunks = smart_chunk(text)

    assert chunks[-1].endswith("and the parade went on")
    assert sum(count_words(chunk) for chunk in chunks) == count_words(text)


def test_paragraph_breaks_are_respected_when_present() -> None:
    paragraph = " ".join(["skate"] * 300)
    text = "\n\n".join([paragraph, paragraph, paragraph])

    chunks = smart_chunk(text)

    assert chunks == [paragraph, paragraph, paragraph]
