"""Task 3: derive title, slug, description and tags for the set."""

from __future__ import annotations

import math
import re
from collections import Counter
from collections.abc import Sequence

from app.process_builders.build_trivia_set.tasks.select_balance import SELECT_BALANCE
from app.process_builders.build_trivia_set.types import (
    QuestionCandidate,
    QuestionSelectionResult,
    SetDifficulty,
    TriviaSetMetadata,
)
from app.process_builders.core.task import ProcessBuilderTask
from app.process_builders.core.types import TaskContext, TaskResult

GENERATE_METADATA = "generate-metadata"

_DIFFICULTY_SCORES = {"easy": 1, "medium": 2, "hard": 3}
_DIFFICULTY_LABELS = {"easy": "beginner-friendly", "medium": "intermediate", "hard": "challenging"}

_SPORTS_WORDS = ("hockey", "nhl", "sport")
_SEASONAL_WORDS = frozenset(
    {
        "christmas",
        "winter",
        "january",
        "february",
        "march",
        "april",
        "may",
        "june",
        "july",
        "august",
        "september",
        "october",
        "november",
        "december",
    }
)

MAX_TAGS = 10
MAX_SUB_THEMES = 5
MINUTES_PER_QUESTION = 0.5


def generate_title(theme: str) -> str:
    words = [word[:1].upper() + word[1:].lower() for word in theme.split(" ")]
    return " ".join(words) + " Trivia"


def generate_slug(theme: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", theme.lower().strip())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")
    return f"{slug}-trivia"


def calculate_difficulty(questions: Sequence[QuestionCandidate]) -> SetDifficulty:
    """Average of easy=1, medium=2, hard=3; unrated questions count as medium."""
    scores = [
        _DIFFICULTY_SCORES[level]
        for level in ((question.difficulty or "medium").lower() for question in questions)
        if level in _DIFFICULTY_SCORES
    ]
    if not scores:
        return "medium"

    average = sum(scores) / len(scores)
    if average <= 1.3:
        return "easy"
    if average <= 2.3:
        return "medium"
    return "hard"


def generate_description(theme: str, questions: Sequence[QuestionCandidate]) -> str:
    label = _DIFFICULTY_LABELS[calculate_difficulty(questions)]
    return (
        f"Test your knowledge with this {label} {theme} trivia set featuring "
        f"{len(questions)} carefully curated questions."
    )


def determine_category(theme: str) -> str:
    lowered = theme.lower()
    words = set(re.findall(r"[a-z]+", lowered))

    if any(word in lowered for word in _SPORTS_WORDS):
        return "Sports"
    if words & _SEASONAL_WORDS:
        return "Seasonal"
    if "history" in lowered:
        return "History"
    if "player" in lowered or "team" in lowered:
        return "Players & Teams"
    return "General"


def extract_tags(questions: Sequence[QuestionCandidate], theme: str) -> list[str]:
    tags: dict[str, None] = {theme: None}
    for question in questions:
        for tag in question.tags:
            tags.setdefault(tag, None)
        if question.theme:
            tags.setdefault(question.theme, None)
    return list(tags)[:MAX_TAGS]


def extract_sub_themes(questions: Sequence[QuestionCandidate]) -> list[str]:
    counts: Counter[str] = Counter()
    for question in questions:
        counts.update(question.tags)
        if question.theme:
            counts[question.theme] += 1
    return [name for name, _ in counts.most_common(MAX_SUB_THEMES)]


class GenerateMetadataTask(ProcessBuilderTask):
    id = GENERATE_METADATA
    name = "Generate Metadata"
    description = "Generates title, slug, description and tags for the trivia set"

    async def execute(self, context: TaskContext) -> TaskResult:
        selection = context.data_for(SELECT_BALANCE)
        if not isinstance(selection, QuestionSelectionResult):
            return TaskResult.failed(
                self.id, "NO_SELECTED_QUESTIONS", "No selected questions from previous task"
            )

        theme = context.goal.text.strip()
        selected = selection.selected
        difficulty = calculate_difficulty(selected)
        sub_themes = extract_sub_themes(selected)

        metadata = TriviaSetMetadata(
            title=generate_title(theme),
            slug=generate_slug(theme),
            description=generate_description(theme, selected),
            category=determine_category(theme),
            theme=theme,
            tags=extract_tags(selected, theme),
            difficulty=difficulty,
            estimated_duration=math.floor(len(selected) * MINUTES_PER_QUESTION + 0.5),
            sub_themes=sub_themes,
        )
        return TaskResult.ok(
            metadata,
            metadata={
                "question_count": len(selected),
                "difficulty": difficulty,
                "sub_theme_count": len(sub_themes),
            },
        )
