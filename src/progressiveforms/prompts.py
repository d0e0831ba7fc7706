"""Prompt builders for field recommendations."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from progressiveforms.typing.enums import RecommendationType
from progressiveforms.typing.models import RecommendationContext

_TRUNCATION_MARKER = "...[truncated]"
_MAX_LISTED_FIELDS = 100


def _bounded_snapshot(form_data: Mapping[str, Any], max_chars: int) -> str:
    snapshot = json.dumps(form_data, indent=2, sort_keys=True, default=str, ensure_ascii=False)
    if len(snapshot) <= max_chars:
        return snapshot
    keep = max(max_chars - len(_TRUNCATION_MARKER), 0)
    return snapshot[:keep] + _TRUNCATION_MARKER


def build_recommendation_context(
    session_id: str,
    form_data: Mapping[str, Any],
    *,
    completed_fields: list[str],
    pending_fields: list[str],
    max_chars: int,
) -> RecommendationContext:
    """Build the bounded context sent to the recommendation backend.

    Args:
        session_id (str): Form session id.
        form_data (Mapping[str, Any]): Current form values.
        completed_fields (list[str]): Filled field names.
        pending_fields (list[str]): Visible field names still empty.
        max_chars (int): Upper bound on the serialized form data.

    Returns:
        RecommendationContext: Context payload.
    """
    return RecommendationContext(
        session_id=session_id,
        completed_fields=completed_fields[:_MAX_LISTED_FIELDS],
        pending_fields=pending_fields[:_MAX_LISTED_FIELDS],
        form_data_snapshot=_bounded_snapshot(form_data, max_chars),
    )


def build_recommendation_prompt(context: RecommendationContext) -> str:
    """Build the prompt asking for next-field recommendations.

    Args:
        context (RecommendationContext): Bounded form context.

    Returns:
        str: Prompt text.
    """
    types = "|".join(member.value for member in RecommendationType)
    return (
        "Analyze this grant application form progress and recommend the next best fields to complete.\n\n"
        f"Completed fields: {', '.join(context.completed_fields)}\n"
        f"Pending visible fields: {', '.join(context.pending_fields)}\n"
        f"Current form data: {context.form_data_snapshot}\n\n"
        "Please suggest:\n"
        "1. The next most logical field to complete\n"
        "2. Fields that can be skipped for now\n"
        "3. Fields that need help/guidance\n"
        "4. Any validation suggestions\n\n"
        "Respond in JSON format:\n"
        '{"recommendations": [{"fieldName": "field_name", '
        f'"type": "{types}", "text": "recommendation text", "confidence": 0.85}}]}}'
    )
