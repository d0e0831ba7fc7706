"""Core domain model exports."""

from progressiveforms.typing.models.analysis import FieldVisibility, FormAnalysis, SessionProgress, VisibilityMap
from progressiveforms.typing.models.recommendation import (
    AIInteractionRecord,
    FieldRecommendation,
    RecommendationContext,
    RecommendationResult,
)
from progressiveforms.typing.models.requests import (
    AnalyzeRequest,
    RecommendationActionRequest,
    TrackInteractionRequest,
    parse_request,
)
from progressiveforms.typing.models.rules import DisclosureRule, TriggerCondition
from progressiveforms.typing.models.session import (
    FieldInteraction,
    FormSession,
    InteractionSummary,
    NewSession,
    SessionPatch,
)

__all__ = [
    "AIInteractionRecord",
    "AnalyzeRequest",
    "DisclosureRule",
    "FieldInteraction",
    "FieldRecommendation",
    "FieldVisibility",
    "FormAnalysis",
    "FormSession",
    "InteractionSummary",
    "NewSession",
    "RecommendationActionRequest",
    "RecommendationContext",
    "RecommendationResult",
    "SessionPatch",
    "SessionProgress",
    "TrackInteractionRequest",
    "TriggerCondition",
    "VisibilityMap",
    "parse_request",
]
