"""Recommendation and AI call models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from progressiveforms.typing.enums import AIInteractionStatus, RecommendationAction, RecommendationType
from progressiveforms.typing.models.session import utc_now


class FieldRecommendation(BaseModel):
    """AI suggestion about a field to act on."""

    model_config = ConfigDict(extra="forbid")

    id: str
    session_id: str
    field_name: str
    recommendation_type: RecommendationType
    recommendation_text: str = ""
    confidence_score: float = Field(ge=0.0, le=1.0)
    ai_model_used: str
    user_action: RecommendationAction | None = None
    shown_at: datetime = Field(default_factory=utc_now)
    acted_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class RecommendationContext(BaseModel):
    """Bounded request sent to the recommendation backend."""

    model_config = ConfigDict(extra="forbid")

    session_id: str
    completed_fields: list[str] = Field(default_factory=list)
    pending_fields: list[str] = Field(default_factory=list)
    form_data_snapshot: str = "{}"


class RecommendationResult(BaseModel):
    """Raw backend answer, before validation."""

    model_config = ConfigDict(extra="forbid")

    content: str
    model: str
    input_tokens: int | None = None
    output_tokens: int | None = None


class AIInteractionRecord(BaseModel):
    """Audit trail entry for one AI call."""

    model_config = ConfigDict(extra="forbid")

    id: str
    session_id: str
    interaction_type: str = "form_field_recommendation"
    prompt_text: str
    model_used: str
    status: AIInteractionStatus = AIInteractionStatus.PROCESSING
    response_text: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    error: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None
