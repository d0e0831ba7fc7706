from __future__ import annotations

import math

import pytest

from progressiveforms.conditions import MISSING, evaluate, resolve_path
from progressiveforms.typing.enums import ConditionOperator
from progressiveforms.typing.models import TriggerCondition


def _condition(operator: ConditionOperator, value: object = None) -> TriggerCondition:
    return TriggerCondition(operator=operator, value=value)


def test_resolve_path_reads_nested_mappings_and_list_indexes() -> None:
    data = {"budget": {"total": 1200, "lines": [{"amount": 5}, {"amount": 7}]}}

    assert resolve_path(data, "budget.total") == 1200
    assert resolve_path(data, "budget.lines.1.amount") == 7


def test_resolve_path_returns_missing_for_absent_segments() -> None:
    data = {"budget": {"total": None}, "items": [1]}

    assert resolve_path(data, "budget.currency") is MISSING
    assert resolve_path(data, "budget.total.amount") is MISSING
    assert resolve_path(data, "items.3") is MISSING
    assert resolve_path(data, "items.first") is MISSING


def test_missing_sentinel_is_a_falsy_singleton() -> None:
    assert not MISSING
    assert repr(MISSING) == "MISSING"
    assert type(MISSING)() is MISSING


def test_resolve_path_keeps_explicit_none() -> None:
    assert resolve_path({"project_type": None}, "project_type") is None


@pytest.mark.parametrize(
    ("value", "expected", "result"),
    [
        ("research", "research", True),
        ("Research", "research", False),
        (1, 1.0, True),
        (True, 1, False),
        (1, True, False),
        (False, False, True),
        (["a", "b"], ["a", "b"], True),
        (None, None, True),
    ],
)
def test_equals_is_strict(value: object, expected: object, result: bool) -> None:
    assert evaluate(value, _condition(ConditionOperator.EQUALS, expected)) is result


def test_not_equals_negates_equals() -> None:
    assert evaluate("commercial", _condition(ConditionOperator.NOT_EQUALS, "research")) is True
    assert evaluate("research", _condition(ConditionOperator.NOT_EQUALS, "research")) is False
    assert evaluate(True, _condition(ConditionOperator.NOT_EQUALS, 1)) is True


@pytest.mark.parametrize(
    ("value", "expected", "result"),
    [
        (500000, 250000, True),
        ("500000", 250000, True),
        (" 12.5 ", "12", True),
        (100, 100, False),
        ("lots", 10, False),
        (None, 10, False),
        ("", 0, False),
        (math.nan, 0, False),
        ([1, 2], 0, False),
        (10, "abc", False),
    ],
)
def test_greater_than_coerces_numbers_and_fails_closed(value: object, expected: object, result: bool) -> None:
    assert evaluate(value, _condition(ConditionOperator.GREATER_THAN, expected)) is result


def test_less_than_compares_numerically() -> None:
    assert evaluate(5, _condition(ConditionOperator.LESS_THAN, 10)) is True
    assert evaluate("9", _condition(ConditionOperator.LESS_THAN, "10")) is True
    assert evaluate(10, _condition(ConditionOperator.LESS_THAN, 10)) is False
    assert evaluate("n/a", _condition(ConditionOperator.LESS_THAN, 10)) is False


@pytest.mark.parametrize(
    ("value", "expected", "result"),
    [
        ("Environmental Research", "environment", True),
        ("health", "environment", False),
        (["green", "Environment"], "environment", True),
        (True, "TRU", True),
        (None, "null", True),
        (12345, 234, True),
    ],
)
def test_contains_is_case_insensitive_on_stringified_values(value: object, expected: object, result: bool) -> None:
    assert evaluate(value, _condition(ConditionOperator.CONTAINS, expected)) is result


def test_in_array_requires_a_list_and_strict_membership() -> None:
    assert evaluate("b", _condition(ConditionOperator.IN_ARRAY, ["a", "b"])) is True
    assert evaluate("c", _condition(ConditionOperator.IN_ARRAY, ["a", "b"])) is False
    assert evaluate(1, _condition(ConditionOperator.IN_ARRAY, [True])) is False
    assert evaluate("a", _condition(ConditionOperator.IN_ARRAY, "abc")) is False


@pytest.mark.parametrize("operator", list(ConditionOperator))
def test_missing_value_never_matches(operator: ConditionOperator) -> None:
    assert evaluate(MISSING, _condition(operator, ["x"])) is False


def test_raw_mapping_conditions_are_accepted() -> None:
    assert evaluate(3, {"operator": "greater_than", "value": 2}) is True


@pytest.mark.parametrize(
    "condition",
    [
        {"operator": "matches_regex", "value": ".*"},
        {"value": 1},
        {},
        "equals",
        None,
    ],
)
def test_unusable_conditions_are_non_matches(condition: object) -> None:
    assert evaluate("anything", condition) is False  # type: ignore[arg-type]


def test_evaluate_is_total_over_mixed_operands() -> None:
    values = [None, 0, 1, -2.5, math.nan, "", "x", "10", True, False, [], [1, "a"], {"k": 1}, object()]
    for operator in ConditionOperator:
        for value in values:
            for expected in values:
                assert isinstance(evaluate(value, _condition(operator, expected)), bool)


def test_huge_integers_compare_as_infinity() -> None:
    huge = 10**400

    assert evaluate(huge, _condition(ConditionOperator.GREATER_THAN, 5)) is True
    assert evaluate(-huge, _condition(ConditionOperator.LESS_THAN, 5)) is True
    assert evaluate(5, _condition(ConditionOperator.GREATER_THAN, huge)) is False


@pytest.mark.parametrize("value", ["1_000", "１０", "²"])
def test_numeric_strings_outside_plain_notation_are_not_numbers(value: str) -> None:
    assert evaluate(value, _condition(ConditionOperator.GREATER_THAN, 0)) is False
    assert evaluate(value, _condition(ConditionOperator.LESS_THAN, 10**6)) is False


@pytest.mark.parametrize("path", ["items.²", "items.١", "items.-1"])
def test_resolve_path_rejects_non_ascii_and_signed_indexes(path: str) -> None:
    assert resolve_path({"items": ["a", "b"]}, path) is MISSING
