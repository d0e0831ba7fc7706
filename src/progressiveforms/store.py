"""In-memory implementation of the form record store."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from typing import Any
from uuid import uuid4

from progressiveforms.disclosure import select_active_rules
from progressiveforms.exceptions import RecommendationNotFoundError, SessionNotFoundError
from progressiveforms.typing.enums import RecommendationAction
from progressiveforms.typing.models import (
    AIInteractionRecord,
    DisclosureRule,
    FieldInteraction,
    FieldRecommendation,
    FormSession,
    VisibilityMap,
)
from progressiveforms.typing.models.session import utc_now


class InMemoryFormStore:
    """Dictionary-backed `FormStore`.

    Suitable for tests, the CLI and single-process deployments. Records are
    kept as validated pydantic models and copied on the way out.
    """

    def __init__(self, rules: Iterable[DisclosureRule] = ()) -> None:
        """Initialize store.

        Args:
            rules (Iterable[DisclosureRule]): Disclosure rules known to the store.
        """
        self._rules: list[DisclosureRule] = list(rules)
        self._sessions: dict[str, FormSession] = {}
        self._interactions: dict[str, list[FieldInteraction]] = defaultdict(list)
        self._visibility: dict[str, VisibilityMap] = {}
        self._recommendations: dict[str, FieldRecommendation] = {}
        self._ai_interactions: dict[str, AIInteractionRecord] = {}

    def add_rule(self, rule: DisclosureRule) -> None:
        """Register a disclosure rule."""
        self._rules.append(rule)

    def replace_rules(self, rules: Iterable[DisclosureRule]) -> None:
        """Swap the full rule set."""
        self._rules = list(rules)

    def create_session(self, session: FormSession) -> str:
        self._sessions[session.id] = session.model_copy(deep=True)
        return session.id

    def get_session(self, session_id: str) -> FormSession | None:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    def patch_session(self, session_id: str, updates: dict[str, Any]) -> FormSession:
        current = self._sessions.get(session_id)
        if current is None:
            raise SessionNotFoundError(session_id=session_id)
        patched = FormSession.model_validate({**current.model_dump(), **updates})
        self._sessions[session_id] = patched
        return patched.model_copy(deep=True)

    def insert_interaction(self, interaction: FieldInteraction) -> str:
        interaction_id = interaction.id or str(uuid4())
        self._interactions[interaction.session_id].append(interaction.model_copy(update={"id": interaction_id}))
        return interaction_id

    def list_interactions(self, session_id: str) -> list[FieldInteraction]:
        return list(self._interactions.get(session_id, []))

    def get_active_rules(self, scheme_id: str | None = None) -> list[DisclosureRule]:
        return select_active_rules(self._rules, scheme_id)

    def replace_visibility_snapshot(self, session_id: str, visibility: VisibilityMap) -> None:
        self._visibility[session_id] = {name: entry.model_copy() for name, entry in visibility.items()}

    def get_visibility_snapshot(self, session_id: str) -> VisibilityMap:
        return dict(self._visibility.get(session_id, {}))

    def insert_recommendation(self, recommendation: FieldRecommendation) -> str:
        self._recommendations[recommendation.id] = recommendation.model_copy(deep=True)
        return recommendation.id

    def get_pending_recommendations(self, session_id: str) -> list[FieldRecommendation]:
        pending = [
            rec.model_copy(deep=True)
            for rec in self._recommendations.values()
            if rec.session_id == session_id and rec.user_action is None
        ]
        return sorted(pending, key=lambda rec: rec.shown_at, reverse=True)

    def set_recommendation_action(
        self,
        recommendation_id: str,
        action: RecommendationAction,
    ) -> FieldRecommendation:
        previous = self._recommendations.get(recommendation_id)
        if previous is None:
            raise RecommendationNotFoundError(recommendation_id=recommendation_id)
        self._recommendations[recommendation_id] = previous.model_copy(
            update={"user_action": action, "acted_at": utc_now()},
        )
        return previous.model_copy(deep=True)

    def get_recommendation(self, recommendation_id: str) -> FieldRecommendation | None:
        """Return a recommendation regardless of its action state."""
        rec = self._recommendations.get(recommendation_id)
        return rec.model_copy(deep=True) if rec else None

    def save_ai_interaction(self, record: AIInteractionRecord) -> None:
        self._ai_interactions[record.id] = record.model_copy(deep=True)

    def list_ai_interactions(self, session_id: str) -> list[AIInteractionRecord]:
        """Return the AI call audit trail of a session."""
        return [record for record in self._ai_interactions.values() if record.session_id == session_id]
