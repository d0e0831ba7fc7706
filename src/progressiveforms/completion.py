"""Completion estimate."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from progressiveforms.conditions import MISSING
from progressiveforms.typing.models import VisibilityMap


def is_filled(value: object) -> bool:
    """Return whether a form value counts as filled in.

    Missing values, None, empty strings and numeric zero (including False)
    are not filled. Anything else is.

    Args:
        value (object): Form value.

    Returns:
        bool: True when the value is filled.
    """
    if value is MISSING or value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (bool, int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    return True


def count_completed_fields(form_data: Mapping[str, Any]) -> int:
    """Count filled top-level form values."""
    return sum(1 for value in form_data.values() if is_filled(value))


def estimate(form_data: Mapping[str, Any], visibility: VisibilityMap) -> int:
    """Estimate completion as the share of visible required fields that are filled.

    Args:
        form_data (Mapping[str, Any]): Current form values.
        visibility (VisibilityMap): Computed visibility.

    Returns:
        int: Percentage in [0, 100]; 100 when nothing is required.
    """
    required = [name for name, entry in visibility.items() if entry.is_visible and entry.is_required]
    if not required:
        return 100
    completed = sum(1 for name in required if is_filled(form_data.get(name, MISSING)))
    return math.floor(100 * completed / len(required) + 0.5)
