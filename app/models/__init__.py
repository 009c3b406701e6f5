"""SQLAlchemy database models."""
from dotenv import load_dotenv
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


load_dotenv()

__all__ = [
    "Base",
    "SourceContentIngested",
    "AIExtractionPrompt",
    "TriviaMultipleChoice",
    "TriviaTrueFalse",
    "TriviaWhoAmI",
    "SetTriviaMultipleChoice",
    "SetTriviaTrueFalse",
    "SetTriviaWhoAmI",
]
