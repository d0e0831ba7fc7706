"""Caller-facing request payloads and their validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from progressiveforms.exceptions import InvalidRequestError
from progressiveforms.typing.enums import InteractionType, RecommendationAction
from progressiveforms.typing.models.session import FieldInteraction


class _RequestModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


class AnalyzeRequest(_RequestModel):
    """Request to analyze the current state of a form."""

    session_id: str = Field(min_length=1)
    form_data: dict[str, Any]
    grant_scheme_id: str | None = None


class TrackInteractionRequest(_RequestModel):
    """Request to record a field interaction."""

    session_id: str = Field(min_length=1)
    field_name: str = Field(min_length=1)
    interaction_type: InteractionType
    field_type: str = "text"
    field_value: str | None = None
    time_spent_seconds: int = Field(default=0, ge=0)
    validation_errors: list[str] = Field(default_factory=list)
    ai_suggestions_shown: bool = False
    ai_assistance_used: bool = False
    interaction_order: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_interaction(self) -> FieldInteraction:
        """Build the interaction event carried by this request.

        Returns:
            FieldInteraction: Event ready to be stored.
        """
        return FieldInteraction(**self.model_dump())


class RecommendationActionRequest(_RequestModel):
    """Request to record user feedback on a recommendation."""

    action: RecommendationAction


def parse_request[T: BaseModel](model: type[T], payload: object) -> T:
    """Validate a raw payload into a request model.

    Args:
        model (type[T]): Request model class.
        payload (object): Raw decoded payload.

    Raises:
        InvalidRequestError: If the payload is missing or fails validation.

    Returns:
        T: Validated request.
    """
    if not isinstance(payload, dict):
        raise InvalidRequestError(message=f"{model.__name__} payload must be a JSON object")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or None
        raise InvalidRequestError(message=f"Invalid {model.__name__}: {first['msg']}", field=location) from exc
