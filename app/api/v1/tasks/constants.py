"""Constants for task routes."""

TASK_NOT_FOUND_DETAIL = "Run not found"
PROGRESS_DISABLED_DETAIL = "Run progress mirroring is disabled"
