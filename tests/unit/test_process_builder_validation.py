"""Unit tests for goal/rule validation and the process builder registry."""

from __future__ import annotations

import pytest

from app.core.exceptions import (
    GoalValidationError,
    MissingRuleError,
    ProcessBuilderNotFoundError,
    RuleValidationError,
)
from app.process_builders.build_trivia_set import METADATA as TRIVIA_METADATA
from app.process_builders.core.types import Goal, Rule, rule_value
from app.process_builders.core.validation import (
    apply_rule_defaults,
    check_rule_limits,
    validate_goal,
    validate_rules,
)
from app.process_builders.ingest_source_content import METADATA as INGEST_METADATA
from app.process_builders.registry import (
    get_process_builder,
    list_process_builders,
    run_process_builder,
)


def test_validate_goal_accepts_mapping_and_goal() -> None:
    assert validate_goal({"text": "Hockey", "metadata": {"source": "ui"}}) == Goal(
        text="Hockey", metadata={"source": "ui"}
    )
    assert validate_goal(Goal(text="Hockey")).text == "Hockey"


@pytest.mark.parametrize("goal", [{"text": ""}, {"text": "   "}, {}, {"text": 42}])
def test_validate_goal_rejects_blank_text(goal: dict) -> None:
    with pytest.raises(GoalValidationError, match="Goal.text is required"):
        validate_goal(goal)


def test_validate_goal_rejects_non_object_metadata() -> None:
    with pytest.raises(GoalValidationError, match="Goal.metadata must be an object"):
        validate_goal({"text": "ok", "metadata": ["x"]})
    with pytest.raises(GoalValidationError, match="Goal must be an object"):
        validate_goal("just text")


def test_validate_rules_normalizes_raw_and_tagged_values() -> None:
    rules = validate_rules(
        {
            "questionTypes": ["TMC", "TFT"],
            "questionCount": {"value": 10, "type": "number"},
            "theme": {"value": "hockey"},
            "allowPartialSets": Rule.boolean("allowPartialSets", True),
        },
        TRIVIA_METADATA,
    )

    assert rules["questionTypes"] == Rule(key="questionTypes", value=["TMC", "TFT"], type="array")
    assert rules["questionCount"].type == "number"
    assert rules["theme"].type == "string"
    assert rules["allowPartialSets"].value is True


def test_validate_rules_reports_missing_required_rule() -> None:
    with pytest.raises(MissingRuleError) as exc_info:
        validate_rules({"questionTypes": ["TMC"]}, TRIVIA_METADATA)

    assert exc_info.value.rule == "questionCount"
    assert exc_info.value.message == "Missing required rule: questionCount"


def test_validate_rules_rejects_unknown_declared_type() -> None:
    with pytest.raises(RuleValidationError, match="Unknown type for rule theme"):
        validate_rules({"contentText": "x" * 20, "theme": {"value": 1, "type": "date"}}, INGEST_METADATA)
    with pytest.raises(RuleValidationError, match="Rules must be an object"):
        validate_rules(["contentText"], INGEST_METADATA)


def test_apply_rule_defaults_keeps_caller_values() -> None:
    rules = apply_rule_defaults(
        {"distributionStrategy": Rule.string("distributionStrategy", "even")},
        TRIVIA_METADATA,
    )

    assert rule_value(rules, "distributionStrategy") == "even"
    assert rule_value(rules, "cooldownDays") == 30
    assert rules["allowPartialSets"] == Rule.boolean("allowPartialSets", False)


def test_check_rule_limits_measures_numbers_and_string_length() -> None:
    check_rule_limits({"questionCount": Rule.number("questionCount", 100)}, TRIVIA_METADATA)

    with pytest.raises(RuleValidationError, match="questionCount must be at most 100"):
        check_rule_limits({"questionCount": Rule.number("questionCount", 101)}, TRIVIA_METADATA)
    with pytest.raises(RuleValidationError, match="questionCount must be at least 1"):
        check_rule_limits({"questionCount": Rule.number("questionCount", 0)}, TRIVIA_METADATA)
    with pytest.raises(RuleValidationError, match="contentText must be at least 10 characters"):
        check_rule_limits({"contentText": Rule.string("contentText", "short")}, INGEST_METADATA)


def test_typed_rule_constructors_reject_wrong_types() -> None:
    with pytest.raises(TypeError):
        Rule.number("questionCount", True)
    with pytest.raises(TypeError):
        Rule.string("theme", 5)  # type: ignore[arg-type]
    assert Rule.infer("flag", False).type == "boolean"


def test_registry_lists_both_builders() -> None:
    ids = [metadata.id for metadata in list_process_builders()]

    assert ids == ["ingest-source-content", "build-trivia-set"]
    assert get_process_builder("build-trivia-set").metadata is TRIVIA_METADATA
    with pytest.raises(ProcessBuilderNotFoundError):
        get_process_builder("nope")


@pytest.mark.asyncio
async def test_run_process_builder_validates_before_running() -> None:
    with pytest.raises(MissingRuleError):
        await run_process_builder("build-trivia-set", {"text": "Hockey"}, {"questionCount": 5})
    with pytest.raises(GoalValidationError):
        await run_process_builder("ingest-source-content", {"text": ""}, {"contentText": "x" * 50})
