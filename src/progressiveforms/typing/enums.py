"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class ConditionOperator(_EnumMixin):
    """Comparison applied by a trigger condition."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    IN_ARRAY = "in_array"


class ConditionLogic(_EnumMixin):
    """Combinator stored with a condition. Not interpreted by the engine."""

    AND = "and"
    OR = "or"


class RuleAction(_EnumMixin):
    """Effect of a disclosure rule on its target fields."""

    SHOW = "show"
    HIDE = "hide"
    REQUIRE = "require"
    OPTIONAL = "optional"


class VisibilityReason(_EnumMixin):
    """Why a field has its current visibility."""

    DEFAULT = "default"
    RULE_TRIGGERED = "rule_triggered"


class SessionStatus(_EnumMixin):
    """Lifecycle state of a form session."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class InteractionType(_EnumMixin):
    """User action recorded on a single field."""

    FOCUS = "focus"
    BLUR = "blur"
    CHANGE = "change"
    SUBMIT = "submit"
    VALIDATION_ERROR = "validation_error"
    AI_ASSIST = "ai_assist"


class RecommendationType(_EnumMixin):
    """Kind of AI suggestion made for a field."""

    SHOW_NEXT = "show_next"
    SKIP_OPTIONAL = "skip_optional"
    PROVIDE_HELP = "provide_help"
    SUGGEST_VALUE = "suggest_value"
    VALIDATE_INPUT = "validate_input"


class RecommendationAction(_EnumMixin):
    """User feedback on a recommendation."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    IGNORED = "ignored"


class AIInteractionStatus(_EnumMixin):
    """State of an audited AI call."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
