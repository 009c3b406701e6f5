"""Normalize, enrich and store raw source content."""

from app.process_builders.ingest_source_content.pipeline import (
    METADATA,
    build_tasks,
    ingest_source_content,
)

__all__ = ["METADATA", "build_tasks", "ingest_source_content"]
