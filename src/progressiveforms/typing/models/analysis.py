"""Visibility and analysis result models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from progressiveforms.typing.enums import VisibilityReason
from progressiveforms.typing.models.recommendation import FieldRecommendation


class FieldVisibility(BaseModel):
    """Computed show/require state of one field."""

    model_config = ConfigDict(extra="forbid")

    field_name: str
    is_visible: bool
    is_required: bool
    visibility_reason: VisibilityReason = VisibilityReason.DEFAULT
    rule_id: str | None = None
    recommendation_id: str | None = None


VisibilityMap = dict[str, FieldVisibility]


class FormAnalysis(BaseModel):
    """Result of one analysis pass. Never persisted as such."""

    model_config = ConfigDict(extra="forbid")

    recommended_fields: list[str] = Field(default_factory=list)
    optional_fields: list[str] = Field(default_factory=list)
    field_visibility: VisibilityMap = Field(default_factory=dict)
    next_suggested_field: str | None = None
    completion_estimate: int = Field(ge=0, le=100)
    recommendations: list[FieldRecommendation] = Field(default_factory=list)


class SessionProgress(BaseModel):
    """Progress written back to the session after an analysis."""

    model_config = ConfigDict(extra="forbid")

    completion_percentage: int = Field(ge=0, le=100)
    fields_completed: int = Field(ge=0)
