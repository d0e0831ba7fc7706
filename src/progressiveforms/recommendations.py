"""AI field recommendations layered on top of rule-based visibility."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from progressiveforms import logger
from progressiveforms.completion import is_filled
from progressiveforms.exceptions import InvalidRequestError
from progressiveforms.prompts import build_recommendation_context, build_recommendation_prompt
from progressiveforms.typing.enums import AIInteractionStatus, RecommendationAction, RecommendationType
from progressiveforms.typing.models import AIInteractionRecord, FieldRecommendation, VisibilityMap
from progressiveforms.typing.models.session import utc_now

if TYPE_CHECKING:
    from progressiveforms.typing.protocol import FormStore, RecommendationBackend

DEFAULT_CONTEXT_CHARS = 4000


class _RecommendationItem(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    field_name: str = Field(alias="fieldName", min_length=1)
    type: RecommendationType
    text: str
    confidence: float = Field(ge=0.0, le=1.0)


class _RecommendationsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    recommendations: list[_RecommendationItem]


def parse_recommendations_response(content: str) -> list[_RecommendationItem]:
    """Decode and validate the model's JSON answer.

    Args:
        content (str): Raw message content.

    Raises:
        json.JSONDecodeError: If the content is not JSON.
        pydantic.ValidationError: If the JSON does not have the expected shape.

    Returns:
        list[_RecommendationItem]: Validated entries.
    """
    return _RecommendationsResponse.model_validate(json.loads(content)).recommendations


def split_fields(form_data: Mapping[str, Any], visibility: VisibilityMap) -> tuple[list[str], list[str]]:
    """Return completed form fields and visible fields still pending.

    Args:
        form_data (Mapping[str, Any]): Current form values.
        visibility (VisibilityMap): Computed visibility.

    Returns:
        tuple[list[str], list[str]]: Completed field names, pending visible field names.
    """
    completed = [name for name, value in form_data.items() if is_filled(value)]
    done = set(completed)
    pending = [name for name, entry in visibility.items() if entry.is_visible and name not in done]
    return completed, pending


class RecommendationOrchestrator:
    """Generates, stores and tracks AI field recommendations.

    Generation is best effort: whatever goes wrong between building the
    context and storing the results, `recommend` logs it and returns an
    empty list.
    """

    def __init__(
        self,
        store: FormStore,
        backend: RecommendationBackend | None,
        *,
        max_context_chars: int = DEFAULT_CONTEXT_CHARS,
        enabled: bool = True,
    ) -> None:
        """Initialize orchestrator.

        Args:
            store (FormStore): Record store.
            backend (RecommendationBackend | None): AI collaborator, None to disable.
            max_context_chars (int): Bound on the serialized form data sent to the model.
            enabled (bool): Whether recommendations are generated at all.
        """
        self._store = store
        self._backend = backend
        self._max_context_chars = max_context_chars
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        """Return whether a generation pass will call the backend."""
        return self._enabled and self._backend is not None

    def recommend(
        self,
        session_id: str,
        form_data: Mapping[str, Any],
        visibility: VisibilityMap,
    ) -> list[FieldRecommendation]:
        """Generate and store recommendations for the current form state.

        Args:
            session_id (str): Form session id.
            form_data (Mapping[str, Any]): Current form values.
            visibility (VisibilityMap): Computed visibility.

        Returns:
            list[FieldRecommendation]: Stored recommendations, empty on any failure.
        """
        if not self.enabled or self._backend is None:
            return []

        audit: AIInteractionRecord | None = None
        try:
            completed, pending = split_fields(form_data, visibility)
            context = build_recommendation_context(
                session_id,
                form_data,
                completed_fields=completed,
                pending_fields=pending,
                max_chars=self._max_context_chars,
            )
            audit = AIInteractionRecord(
                id=str(uuid4()),
                session_id=session_id,
                prompt_text=build_recommendation_prompt(context),
                model_used=getattr(self._backend, "model", "unknown"),
            )
            self._store.save_ai_interaction(audit)

            result = self._backend.generate(context)
            items = parse_recommendations_response(result.content)

            recommendations: list[FieldRecommendation] = []
            for item in items:
                recommendation = FieldRecommendation(
                    id=str(uuid4()),
                    session_id=session_id,
                    field_name=item.field_name,
                    recommendation_type=item.type,
                    recommendation_text=item.text,
                    confidence_score=item.confidence,
                    ai_model_used=result.model,
                )
                self._store.insert_recommendation(recommendation)
                recommendations.append(recommendation)
        except Exception as exc:
            logger.warning(
                "Failed to generate AI field recommendations",
                extra={"session_id": session_id, "error": str(exc), "error_type": type(exc).__name__},
            )
            self._mark_failed(audit, exc)
            return []

        try:
            self._store.save_ai_interaction(
                audit.model_copy(
                    update={
                        "status": AIInteractionStatus.COMPLETED,
                        "model_used": result.model,
                        "response_text": result.content,
                        "input_tokens": result.input_tokens,
                        "output_tokens": result.output_tokens,
                        "completed_at": utc_now(),
                    },
                ),
            )
        except Exception as exc:
            logger.warning(
                "Failed to close AI interaction record",
                extra={"ai_interaction_id": audit.id, "error": str(exc), "error_type": type(exc).__name__},
            )

        logger.info(
            "AI field recommendations stored",
            extra={"session_id": session_id, "recommendations": len(recommendations)},
        )
        return recommendations

    def _mark_failed(self, audit: AIInteractionRecord | None, exc: Exception) -> None:
        """Close the audit record of a failed call (best effort)."""
        if audit is None:
            return
        try:
            self._store.save_ai_interaction(
                audit.model_copy(
                    update={"status": AIInteractionStatus.FAILED, "error": str(exc), "completed_at": utc_now()},
                ),
            )
        except Exception:
            logger.warning("Failed to update AI interaction record", extra={"ai_interaction_id": audit.id})

    def pending(self, session_id: str) -> list[FieldRecommendation]:
        """Return recommendations the user has not acted on, newest first."""
        return self._store.get_pending_recommendations(session_id)

    def record_action(self, recommendation_id: str, action: RecommendationAction | str) -> None:
        """Store user feedback on a recommendation.

        A previously recorded action is overwritten.

        Args:
            recommendation_id (str): Recommendation id.
            action (RecommendationAction | str): accepted, rejected or ignored.

        Raises:
            InvalidRequestError: If the id is blank or the action is not supported.
        """
        if not recommendation_id:
            raise InvalidRequestError(message="Recommendation id is required", field="recommendation_id")
        try:
            parsed = RecommendationAction(action)
        except ValueError as exc:
            raise InvalidRequestError(
                message="Valid action required (accepted, rejected, ignored)",
                field="action",
            ) from exc

        previous = self._store.set_recommendation_action(recommendation_id, parsed)
        if previous.user_action is not None:
            logger.info(
                "Recommendation action overwritten",
                extra={
                    "recommendation_id": recommendation_id,
                    "previous_action": previous.user_action.value,
                    "action": parsed.value,
                },
            )
