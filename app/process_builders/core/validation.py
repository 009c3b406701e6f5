"""Goal and rule validation against pipeline metadata."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, get_args

from app.core.exceptions import GoalValidationError, MissingRuleError, RuleValidationError
from app.process_builders.core.types import Goal, PipelineMetadata, Rule, Rules, RuleType

_RULE_TYPES = frozenset(get_args(RuleType))


def validate_goal(goal: Any) -> Goal:
    """Return a `Goal` or raise `GoalValidationError` for missing/blank text."""
    if isinstance(goal, Goal):
        text, metadata = goal.text, goal.metadata
    elif isinstance(goal, Mapping):
        text, metadata = goal.get("text"), goal.get("metadata")
    else:
        raise GoalValidationError("Goal must be an object")

    if not isinstance(text, str) or not text.strip():
        raise GoalValidationError()
    if metadata is not None and not isinstance(metadata, Mapping):
        raise GoalValidationError("Goal.metadata must be an object")

    return Goal(text=text, metadata=dict(metadata or {}))


def _normalize_rule(key: str, value: Any) -> Rule:
    if isinstance(value, Rule):
        return value if value.key == key else Rule(key=key, value=value.value, type=value.type)

    if isinstance(value, Mapping) and "value" in value:
        declared = value.get("type")
        if declared is None:
            return Rule.infer(key, value["value"])
        if declared not in _RULE_TYPES:
            raise RuleValidationError(f"Unknown type for rule {key}: {declared}", rule=key)
        return Rule(key=key, value=value["value"], type=declared)

    return Rule.infer(key, value)


def validate_rules(rules: Any, metadata: PipelineMetadata) -> Rules:
    """Normalize caller rules into typed `Rule`s and check required names.

    Defaults are not injected here; see `apply_rule_defaults`.
    """
    if not isinstance(rules, Mapping):
        raise RuleValidationError("Rules must be an object")

    validated: Rules = {str(key): _normalize_rule(str(key), value) for key, value in rules.items()}

    for required in metadata.required_rules:
        if required not in validated:
            raise MissingRuleError(required)

    return validated


def apply_rule_defaults(rules: Rules, metadata: PipelineMetadata) -> Rules:
    """Return a copy of `rules` with metadata defaults filled in for absent rules."""
    merged = dict(rules)
    for key, default in metadata.defaults.items():
        if key not in merged:
            merged[key] = Rule.infer(key, default)
    return merged


def check_rule_limits(rules: Rules, metadata: PipelineMetadata) -> None:
    """Enforce numeric limits; string rules are measured by length."""
    for key, limit in metadata.limits.items():
        rule = rules.get(key)
        if rule is None or rule.value is None:
            continue

        value = rule.value
        if isinstance(value, str):
            measured: float = len(value)
            unit = " characters"
        elif isinstance(value, int | float) and not isinstance(value, bool):
            measured = value
            unit = ""
        else:
            raise RuleValidationError(f"Rule {key} must be a number or string", rule=key)

        if limit.min is not None and measured < limit.min:
            raise RuleValidationError(
                f"Rule {key} must be at least {limit.min:g}{unit}", rule=key
            )
        if limit.max is not None and measured > limit.max:
            raise RuleValidationError(
                f"Rule {key} must be at most {limit.max:g}{unit}", rule=key
            )
