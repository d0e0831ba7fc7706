"""Trigger condition evaluation.

`evaluate` never raises. A condition that cannot be evaluated, an unknown
operator, or a trigger value that is absent from the form all come out as a
non-match.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Final

from progressiveforms.typing.enums import ConditionOperator
from progressiveforms.typing.models import TriggerCondition


class _Missing:
    """Marker for a dot path that does not exist in the form data."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


def resolve_path(data: object, path: str) -> Any:
    """Look up a dot path in nested form data.

    Mapping keys and list indexes are both supported. A `None` met halfway
    down the path ends the lookup.

    Args:
        data (object): Form data.
        path (str): Dot-separated path, e.g. ``"budget.total"``.

    Returns:
        Any: Resolved value, or ``MISSING`` when the path does not exist.
    """
    current: Any = data
    for key in path.split("."):
        if isinstance(current, Mapping):
            if key not in current:
                return MISSING
            current = current[key]
        elif isinstance(current, (list, tuple)) and key.isdecimal() and key.isascii():
            index = int(key)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def _strict_equals(left: object, right: object) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    try:
        return bool(left == right)
    except Exception:
        return False


def _to_number(value: object) -> float | None:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int):
        try:
            number = float(value)
        except OverflowError:
            number = math.inf if value > 0 else -math.inf
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str) and value.isascii() and value.strip() and "_" not in value:
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def _stringify(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(item) for item in value)
    return str(value)


def _compare_numbers(value: object, expected: object, operator: ConditionOperator) -> bool:
    left = _to_number(value)
    right = _to_number(expected)
    if left is None or right is None:
        return False
    if operator == ConditionOperator.GREATER_THAN:
        return left > right
    return left < right


def _split_condition(condition: TriggerCondition | Mapping[str, Any]) -> tuple[ConditionOperator | None, Any]:
    if isinstance(condition, TriggerCondition):
        return condition.operator, condition.value
    if not isinstance(condition, Mapping):
        return None, None
    raw_operator = condition.get("operator")
    try:
        operator = ConditionOperator(raw_operator)
    except ValueError:
        return None, None
    return operator, condition.get("value")


def evaluate(value: object, condition: TriggerCondition | Mapping[str, Any]) -> bool:
    """Return whether a trigger value satisfies a condition.

    Args:
        value (object): Value found at the rule's trigger path.
        condition (TriggerCondition | Mapping[str, Any]): Operator and expected value.

    Returns:
        bool: True when the condition matches.
    """
    if value is MISSING:
        return False
    operator, expected = _split_condition(condition)
    if operator is None:
        return False

    match operator:
        case ConditionOperator.EQUALS:
            return _strict_equals(value, expected)
        case ConditionOperator.NOT_EQUALS:
            return not _strict_equals(value, expected)
        case ConditionOperator.GREATER_THAN | ConditionOperator.LESS_THAN:
            return _compare_numbers(value, expected, operator)
        case ConditionOperator.CONTAINS:
            return _stringify(expected).lower() in _stringify(value).lower()
        case ConditionOperator.IN_ARRAY:
            if not isinstance(expected, (list, tuple)):
                return False
            return any(_strict_equals(value, item) for item in expected)
    return False
