"""Typing-centric domain modules."""

from progressiveforms.typing.enums import (
    AIInteractionStatus,
    ConditionLogic,
    ConditionOperator,
    InteractionType,
    RecommendationAction,
    RecommendationType,
    RuleAction,
    SessionStatus,
    VisibilityReason,
)
from progressiveforms.typing.models import (
    AIInteractionRecord,
    DisclosureRule,
    FieldInteraction,
    FieldRecommendation,
    FieldVisibility,
    FormAnalysis,
    FormSession,
    NewSession,
    SessionPatch,
    SessionProgress,
    TriggerCondition,
    VisibilityMap,
)
from progressiveforms.typing.protocol import FormStore, RecommendationBackend

__all__ = [
    "AIInteractionRecord",
    "AIInteractionStatus",
    "ConditionLogic",
    "ConditionOperator",
    "DisclosureRule",
    "FieldInteraction",
    "FieldRecommendation",
    "FieldVisibility",
    "FormAnalysis",
    "FormSession",
    "FormStore",
    "InteractionType",
    "NewSession",
    "RecommendationAction",
    "RecommendationBackend",
    "RecommendationType",
    "RuleAction",
    "SessionPatch",
    "SessionProgress",
    "SessionStatus",
    "TriggerCondition",
    "VisibilityMap",
    "VisibilityReason",
]
