"""Unit tests for trivia question selection and balancing."""

from __future__ import annotations

import random
from itertools import count

import pytest

from app.process_builders.build_trivia_set.selection import (
    INSUFFICIENT_QUESTIONS,
    INVALID_COUNT,
    NO_MATCHING_CANDIDATES,
    SelectionError,
    calculate_distribution,
    group_by_difficulty,
    select_and_balance,
    select_diverse,
)
from app.process_builders.build_trivia_set.types import (
    SOURCE_TABLES,
    QuestionCandidate,
    QuestionType,
    normalize_question_types,
)

_ids = count(1)


def _candidates(question_type: QuestionType, amount: int, difficulty: str | None = None) -> list[QuestionCandidate]:
    return [
        QuestionCandidate(
            id=next(_ids),
            question_text=f"{question_type} question {index}",
            question_type=question_type,
            correct_answer="true" if question_type == "true-false" else f"answer {index}",
            wrong_answers=["a", "b", "c"] if question_type == "multiple-choice" else [],
            difficulty=difficulty,
            source_table=SOURCE_TABLES[question_type],
        )
        for index in range(amount)
    ]


def _type_counts(candidates: list[QuestionCandidate]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for candidate in candidates:
        counts[candidate.question_type] = counts.get(candidate.question_type, 0) + 1
    return counts


def test_weighted_selection_is_proportional_to_pool() -> None:
    pool = _candidates("multiple-choice", 10) + _candidates("true-false", 5)

    selection = select_and_balance(
        pool,
        question_count=9,
        question_types=["multiple-choice", "true-false"],
        rng=random.Random(7),
    )

    assert len(selection.result.selected) == 9
    assert selection.result.distribution == {"multiple-choice": 6, "true-false": 3}
    assert _type_counts(selection.result.selected) == {"multiple-choice": 6, "true-false": 3}
    assert selection.warnings == []


def test_insufficient_pool_fails_without_partial_sets() -> None:
    pool = _candidates("who-am-i", 3)

    with pytest.raises(SelectionError) as exc_info:
        select_and_balance(pool, question_count=10, question_types=["who-am-i"])

    error = exc_info.value
    assert error.code == INSUFFICIENT_QUESTIONS
    assert "Need 10, but only 3 found" in error.message
    assert error.details == {"requested": 10, "available": 3}


def test_partial_sets_select_everything_available() -> None:
    pool = _candidates("who-am-i", 3)

    selection = select_and_balance(
        pool,
        question_count=10,
        question_types=["who-am-i"],
        allow_partial=True,
        rng=random.Random(1),
    )

    assert len(selection.result.selected) == 3
    assert selection.warnings == [
        "Created partial set: Requested 10 questions, but only 3 available."
    ]


@pytest.mark.parametrize("strategy", ["weighted", "even", "custom"])
@pytest.mark.parametrize(
    ("pool_sizes", "total"),
    [
        ({"multiple-choice": 7, "true-false": 2, "who-am-i": 4}, 13),
        ({"multiple-choice": 1, "true-false": 1, "who-am-i": 1}, 2),
        ({"multiple-choice": 30, "true-false": 1, "who-am-i": 3}, 10),
        ({"multiple-choice": 5, "true-false": 5, "who-am-i": 5}, 7),
    ],
)
def test_distribution_sums_to_total_within_availability(
    strategy: str, pool_sizes: dict[QuestionType, int], total: int
) -> None:
    question_types: list[QuestionType] = ["multiple-choice", "true-false", "who-am-i"]

    targets = calculate_distribution(pool_sizes, total, question_types, strategy)

    assert sum(targets.values()) == total
    assert all(targets[question_type] <= pool_sizes[question_type] for question_type in question_types)


def test_even_strategy_gives_remainder_to_earliest_types() -> None:
    targets = calculate_distribution(
        {"multiple-choice": 20, "true-false": 20, "who-am-i": 20},
        10,
        ["multiple-choice", "true-false", "who-am-i"],
        "even",
    )

    assert targets == {"multiple-choice": 4, "true-false": 3, "who-am-i": 3}


def test_even_strategy_tops_up_from_types_with_room() -> None:
    targets = calculate_distribution(
        {"multiple-choice": 2, "true-false": 10},
        8,
        ["multiple-choice", "true-false"],
        "even",
    )

    assert targets == {"multiple-choice": 2, "true-false": 6}


def test_custom_strategy_matches_weighted() -> None:
    available = {"multiple-choice": 9, "true-false": 3}
    types: list[QuestionType] = ["multiple-choice", "true-false"]

    assert calculate_distribution(available, 8, types, "custom") == calculate_distribution(
        available, 8, types, "weighted"
    )


def test_select_diverse_spreads_across_difficulties() -> None:
    pool = (
        _candidates("multiple-choice", 4, "easy")
        + _candidates("multiple-choice", 4, "medium")
        + _candidates("multiple-choice", 4, "hard")
    )

    picked = select_diverse(pool, 6, random.Random(3))

    assert len(picked) == 6
    assert len({candidate.id for candidate in picked}) == 6
    assert {candidate.difficulty for candidate in picked} == {"easy", "medium", "hard"}


def test_group_by_difficulty_treats_unknown_values_as_unknown() -> None:
    pool = _candidates("true-false", 2, "Expert") + _candidates("true-false", 1, "EASY")

    grouped = group_by_difficulty(pool)

    assert len(grouped["unknown"]) == 2
    assert len(grouped["easy"]) == 1
    assert grouped["medium"] == [] and grouped["hard"] == []


def test_seeded_rng_makes_selection_reproducible() -> None:
    pool = _candidates("multiple-choice", 20, "easy") + _candidates("true-false", 20, "hard")
    kwargs = {"question_count": 12, "question_types": ["multiple-choice", "true-false"]}

    first = select_and_balance(pool, rng=random.Random(42), **kwargs)
    second = select_and_balance(pool, rng=random.Random(42), **kwargs)

    assert [c.id for c in first.result.selected] == [c.id for c in second.result.selected]


def test_invalid_requests_raise_selection_errors() -> None:
    pool = _candidates("multiple-choice", 3)

    with pytest.raises(SelectionError) as exc_info:
        select_and_balance(pool, question_count=0, question_types=["multiple-choice"])
    assert exc_info.value.code == INVALID_COUNT

    with pytest.raises(SelectionError) as exc_info:
        select_and_balance(pool, question_count=2, question_types=["true-false"])
    assert exc_info.value.code == NO_MATCHING_CANDIDATES


def test_normalize_question_types_resolves_aliases_in_priority_order() -> None:
    assert normalize_question_types(["WAI", "TMC", "true-false", "TMC", "bogus", 3]) == [
        "multiple-choice",
        "true-false",
        "who-am-i",
    ]
