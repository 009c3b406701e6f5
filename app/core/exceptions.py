"""Custom exception classes for the application."""

from typing import Any


class ContentStudioError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Process builder input errors
class ValidationError(ContentStudioError):
    """Data validation failed."""

    pass


class GoalValidationError(ValidationError):
    """Process builder goal is missing or malformed."""

    def __init__(self, message: str = "Goal.text is required and must be a non-empty string") -> None:
        super().__init__(message)


class RuleValidationError(ValidationError):
    """Process builder rules failed validation."""

    def __init__(self, message: str, rule: str | None = None) -> None:
        self.rule = rule
        super().__init__(message, details={"rule": rule} if rule else None)


class MissingRuleError(RuleValidationError):
    """A rule listed as required by the pipeline metadata is absent."""

    def __init__(self, rule: str) -> None:
        super().__init__(f"Missing required rule: {rule}", rule=rule)


class ProcessBuilderNotFoundError(ContentStudioError):
    """No process builder registered under this id."""

    def __init__(self, process_id: str) -> None:
        super().__init__(f"Process builder not found: {process_id}")


# Persistence Errors
class UnknownTableError(ContentStudioError):
    """Record store was asked for a table it does not map."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Unknown table: {table}")
