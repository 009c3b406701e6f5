"""Constants for process builder routes."""

PROCESS_BUILDER_NOT_FOUND_DETAIL = "Process builder not found"
