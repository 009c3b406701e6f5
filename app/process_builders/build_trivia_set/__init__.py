"""Build a curated trivia set from published questions."""

from app.process_builders.build_trivia_set.pipeline import METADATA, build_tasks, build_trivia_set

__all__ = ["METADATA", "build_tasks", "build_trivia_set"]
