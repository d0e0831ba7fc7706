"""Storage and backend interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from progressiveforms.typing.enums import RecommendationAction
    from progressiveforms.typing.models import (
        AIInteractionRecord,
        DisclosureRule,
        FieldInteraction,
        FieldRecommendation,
        FormSession,
        RecommendationContext,
        RecommendationResult,
        VisibilityMap,
    )


class FormStore(Protocol):
    """Record store consumed by the session, recommendation and analysis services."""

    def create_session(self, session: FormSession) -> str:
        """Persist a new session.

        Args:
            session: Session to insert.

        Returns:
            str: Session id.
        """

    def get_session(self, session_id: str) -> FormSession | None:
        """Return a session, or None when unknown."""

    def patch_session(self, session_id: str, updates: dict[str, Any]) -> FormSession:
        """Write only the supplied session fields.

        Args:
            session_id: Session id.
            updates: Field values to overwrite.

        Returns:
            FormSession: Updated session.
        """

    def insert_interaction(self, interaction: FieldInteraction) -> str:
        """Append an interaction event.

        Args:
            interaction: Event to append.

        Returns:
            str: Interaction id.
        """

    def list_interactions(self, session_id: str) -> list[FieldInteraction]:
        """Return a session's interactions in insertion order."""

    def get_active_rules(self, scheme_id: str | None = None) -> list[DisclosureRule]:
        """Return global and scheme rules that are active, by descending priority."""

    def replace_visibility_snapshot(self, session_id: str, visibility: VisibilityMap) -> None:
        """Replace the stored visibility snapshot of a session."""

    def get_visibility_snapshot(self, session_id: str) -> VisibilityMap:
        """Return the stored visibility snapshot of a session."""

    def insert_recommendation(self, recommendation: FieldRecommendation) -> str:
        """Persist a recommendation.

        Args:
            recommendation: Recommendation to insert.

        Returns:
            str: Recommendation id.
        """

    def get_pending_recommendations(self, session_id: str) -> list[FieldRecommendation]:
        """Return recommendations without a user action, newest first."""

    def set_recommendation_action(
        self,
        recommendation_id: str,
        action: RecommendationAction,
    ) -> FieldRecommendation:
        """Store user feedback on a recommendation.

        Args:
            recommendation_id: Recommendation id.
            action: Chosen action.

        Returns:
            FieldRecommendation: Recommendation as it was before the update.
        """

    def save_ai_interaction(self, record: AIInteractionRecord) -> None:
        """Insert or replace an AI call audit record."""


class RecommendationBackend(Protocol):
    """AI collaborator producing field recommendations."""

    def generate(self, context: RecommendationContext) -> RecommendationResult:
        """Ask the model for recommendations.

        Args:
            context: Bounded form context.

        Returns:
            RecommendationResult: Raw JSON text and call metadata.
        """
