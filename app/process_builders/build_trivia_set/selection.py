"""Question selection and balancing.

Pure functions over a candidate pool. All randomness goes through the
`random.Random` passed in, so a seeded instance gives reproducible sets.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from app.process_builders.build_trivia_set.types import (
    QuestionCandidate,
    QuestionSelectionResult,
    QuestionType,
)
from app.process_builders.core.errors import ProcessBuilderError

logger = logging.getLogger(__name__)

DIFFICULTY_KEYS = ("easy", "medium", "hard", "unknown")

INVALID_COUNT = "INVALID_COUNT"
NO_TYPES = "NO_TYPES"
NO_MATCHING_CANDIDATES = "NO_MATCHING_CANDIDATES"
INSUFFICIENT_QUESTIONS = "INSUFFICIENT_QUESTIONS"
SELECTION_FAILED = "SELECTION_FAILED"


class SelectionError(ProcessBuilderError):
    """Selection cannot produce a set for the given pool and request."""

    def __init__(self, code: str, message: str, details: dict | None = None) -> None:
        super().__init__(message, code=code, details=details, retryable=False)


@dataclass(slots=True)
class BalancedSelection:
    result: QuestionSelectionResult
    requested: int
    strategy: str
    warnings: list[str] = field(default_factory=list)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def shuffled(items: Sequence, rng: random.Random) -> list:
    """Fisher-Yates shuffle of a copy."""
    copy = list(items)
    rng.shuffle(copy)
    return copy


def difficulty_key(candidate: QuestionCandidate) -> str:
    raw = (candidate.difficulty or "unknown").strip().lower()
    return raw if raw in DIFFICULTY_KEYS else "unknown"


def group_by_difficulty(candidates: Sequence[QuestionCandidate]) -> dict[str, list[QuestionCandidate]]:
    """Bucket candidates by difficulty; every bucket exists even when empty."""
    grouped: dict[str, list[QuestionCandidate]] = {key: [] for key in DIFFICULTY_KEYS}
    for candidate in candidates:
        grouped[difficulty_key(candidate)].append(candidate)
    return grouped


def calculate_distribution(
    available: Mapping[QuestionType, int],
    total: int,
    question_types: Sequence[QuestionType],
    strategy: str,
) -> dict[QuestionType, int]:
    """Target count per requested type.

    `even` splits evenly with the remainder going to the earliest types;
    `weighted` apportions by each type's share of the pool. Both clamp to
    availability before rounding drift is reconciled.
    """
    if not question_types or total <= 0:
        return {question_type: 0 for question_type in question_types}

    if strategy == "even":
        base, remainder = divmod(total, len(question_types))
        targets = {
            question_type: min(base + (1 if index < remainder else 0), available.get(question_type, 0))
            for index, question_type in enumerate(question_types)
        }
    else:
        if strategy != "weighted":
            logger.info(
                "Distribution strategy falls back to weighted",
                extra={"distribution_strategy": strategy},
            )
        total_available = sum(available.get(question_type, 0) for question_type in question_types)
        targets = {}
        for question_type in question_types:
            type_available = available.get(question_type, 0)
            if total_available <= 0 or type_available <= 0:
                targets[question_type] = 0
                continue
            share = _round_half_up(total * type_available / total_available)
            targets[question_type] = min(share, type_available)

    return _reconcile(targets, available, total, question_types)


def _reconcile(
    targets: dict[QuestionType, int],
    available: Mapping[QuestionType, int],
    total: int,
    question_types: Sequence[QuestionType],
) -> dict[QuestionType, int]:
    current = sum(targets.values())
    if current > total:
        ratio = total / current
        targets = {question_type: math.floor(count * ratio) for question_type, count in targets.items()}
        current = sum(targets.values())

    remaining = total - current
    for question_type in question_types:
        if remaining <= 0:
            break
        room = available.get(question_type, 0) - targets[question_type]
        if room <= 0:
            continue
        added = min(room, remaining)
        targets[question_type] += added
        remaining -= added

    return targets


def select_diverse(
    candidates: Sequence[QuestionCandidate],
    count: int,
    rng: random.Random,
) -> list[QuestionCandidate]:
    """Pick `count` candidates spread across difficulty buckets."""
    if count <= 0:
        return []
    if len(candidates) <= count:
        return list(candidates)

    buckets = group_by_difficulty(candidates)
    keys = sorted(buckets)
    selected: list[QuestionCandidate] = []
    taken: set[int] = set()

    remaining = count
    for position, key in enumerate(keys):
        if remaining <= 0:
            break
        pool = buckets[key]
        if not pool:
            continue
        take = min(math.ceil(remaining / (len(keys) - position)), len(pool), remaining)
        for candidate in shuffled(pool, rng)[:take]:
            selected.append(candidate)
            taken.add(id(candidate))
        remaining -= take

    if remaining > 0:
        leftovers = [candidate for candidate in candidates if id(candidate) not in taken]
        selected.extend(rng.sample(leftovers, min(remaining, len(leftovers))))

    return selected


def select_questions(
    candidates: Sequence[QuestionCandidate],
    distribution: Mapping[QuestionType, int],
    rng: random.Random,
) -> list[QuestionCandidate]:
    selected: list[QuestionCandidate] = []
    for question_type, target in distribution.items():
        if target <= 0:
            continue
        pool = [candidate for candidate in candidates if candidate.question_type == question_type]
        selected.extend(select_diverse(pool, target, rng))
    return selected


def select_and_balance(
    candidates: Sequence[QuestionCandidate],
    *,
    question_count: int,
    question_types: Sequence[QuestionType],
    strategy: str = "weighted",
    allow_partial: bool = False,
    rng: random.Random | None = None,
) -> BalancedSelection:
    """Run sufficiency check, distribution, diverse sampling and final shuffle.

    Raises SelectionError with one of the module's error codes.
    """
    rng = rng or random.Random()

    if question_count <= 0:
        raise SelectionError(INVALID_COUNT, "questionCount must be greater than 0")
    if not question_types:
        raise SelectionError(NO_TYPES, "At least one question type is required")

    pool = [candidate for candidate in candidates if candidate.question_type in question_types]
    if not pool:
        raise SelectionError(
            NO_MATCHING_CANDIDATES, "No candidates match the requested question types"
        )

    available_count = len(pool)
    if available_count < question_count and not allow_partial:
        raise SelectionError(
            INSUFFICIENT_QUESTIONS,
            f"Not enough questions available. Need {question_count}, but only "
            f"{available_count} found. Enable \"Allow Partial Sets\" to create a set "
            "with fewer questions.",
            details={"requested": question_count, "available": available_count},
        )

    working_total = min(question_count, available_count)
    available = {
        question_type: sum(1 for candidate in pool if candidate.question_type == question_type)
        for question_type in question_types
    }
    distribution = calculate_distribution(available, working_total, question_types, strategy)

    selected = shuffled(select_questions(pool, distribution, rng), rng)
    if not selected:
        raise SelectionError(SELECTION_FAILED, "Failed to select questions")

    realized = {
        question_type: sum(1 for candidate in selected if candidate.question_type == question_type)
        for question_type in question_types
    }

    warnings: list[str] = []
    if len(selected) < question_count:
        warnings.append(
            f"Created partial set: Requested {question_count} questions, "
            f"but only {len(selected)} available."
        )

    return BalancedSelection(
        result=QuestionSelectionResult(candidates=pool, selected=selected, distribution=realized),
        requested=question_count,
        strategy=strategy,
        warnings=warnings,
    )
