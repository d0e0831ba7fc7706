"""Form analysis: rules, recommendations and completion in one call."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from progressiveforms import logger
from progressiveforms.backends.openai_recommender import OpenAIRecommendationBackend
from progressiveforms.completion import count_completed_fields, estimate
from progressiveforms.disclosure import compute_visibility, partition_visible_fields
from progressiveforms.exceptions import InvalidRequestError
from progressiveforms.logging import session_context
from progressiveforms.recommendations import RecommendationOrchestrator
from progressiveforms.sessions import SessionService
from progressiveforms.settings import DEFAULT_FIELDS
from progressiveforms.typing.models import DisclosureRule, FormAnalysis, SessionProgress

if TYPE_CHECKING:
    from progressiveforms.settings import Settings
    from progressiveforms.typing.protocol import FormStore


class FormAnalyzer:
    """Composes the rule engine, the completion estimate and AI recommendations."""

    def __init__(
        self,
        store: FormStore,
        recommender: RecommendationOrchestrator,
        *,
        default_fields: Iterable[str] = DEFAULT_FIELDS,
    ) -> None:
        """Initialize analyzer.

        Args:
            store (FormStore): Record store.
            recommender (RecommendationOrchestrator): Recommendation orchestrator.
            default_fields (Iterable[str]): Fields visible and required by default.
        """
        self._store = store
        self._recommender = recommender
        self._default_fields = tuple(default_fields)
        self._sessions = SessionService(store)

    def _active_rules(self, scheme_id: str | None) -> list[DisclosureRule]:
        """Fetch rules, falling back to none when the store fails."""
        try:
            return self._store.get_active_rules(scheme_id)
        except Exception as exc:
            logger.warning(
                "Failed to get disclosure rules",
                extra={"scheme_id": scheme_id, "error": str(exc), "error_type": type(exc).__name__},
            )
            return []

    def analyze(
        self,
        session_id: str,
        form_data: Mapping[str, Any] | None,
        scheme_id: str | None = None,
    ) -> FormAnalysis:
        """Analyze the current state of a form.

        The visibility snapshot of the session is replaced as a side effect.

        Args:
            session_id (str): Form session id.
            form_data (Mapping[str, Any] | None): Current form values.
            scheme_id (str | None): Grant scheme whose rules apply besides global ones.

        Raises:
            InvalidRequestError: If the session id or form data is missing.

        Returns:
            FormAnalysis: Visibility, recommendations and completion estimate.
        """
        if not session_id or form_data is None:
            raise InvalidRequestError(message="Session ID and form data are required")
        if not isinstance(form_data, Mapping):
            raise InvalidRequestError(message="Form data must be an object", field="form_data")

        with session_context(session_id):
            rules = self._active_rules(scheme_id)
            visibility = compute_visibility(form_data, rules, self._default_fields, scheme_id=scheme_id)
            recommendations = self._recommender.recommend(session_id, form_data, visibility)
            completion = estimate(form_data, visibility)
            recommended, optional = partition_visible_fields(visibility)

            self._store.replace_visibility_snapshot(session_id, visibility)
            logger.info(
                "Form analyzed",
                extra={
                    "scheme_id": scheme_id,
                    "rules": len(rules),
                    "completion_estimate": completion,
                    "recommendations": len(recommendations),
                },
            )

        return FormAnalysis(
            recommended_fields=recommended,
            optional_fields=optional,
            field_visibility=visibility,
            next_suggested_field=recommendations[0].field_name if recommendations else None,
            completion_estimate=completion,
            recommendations=recommendations,
        )

    def analyze_and_record(
        self,
        session_id: str,
        form_data: Mapping[str, Any] | None,
        scheme_id: str | None = None,
    ) -> tuple[FormAnalysis, SessionProgress]:
        """Analyze a form and write the resulting progress onto its session.

        The two writes are not atomic: a failure after the analysis leaves the
        session counters as they were.

        Args:
            session_id (str): Form session id.
            form_data (Mapping[str, Any] | None): Current form values.
            scheme_id (str | None): Grant scheme id.

        Returns:
            tuple[FormAnalysis, SessionProgress]: Analysis and the progress written.
        """
        self._sessions.require_session(session_id)
        analysis = self.analyze(session_id, form_data, scheme_id)
        progress = SessionProgress(
            completion_percentage=analysis.completion_estimate,
            fields_completed=count_completed_fields(form_data or {}),
        )
        self._sessions.record_progress(
            session_id,
            completion_percentage=progress.completion_percentage,
            fields_completed=progress.fields_completed,
        )
        return analysis, progress


def build_form_analyzer(store: FormStore, settings: Settings) -> FormAnalyzer:
    """Wire an analyzer with the OpenAI backend described by settings.

    Args:
        store (FormStore): Record store.
        settings (Settings): Runtime settings.

    Returns:
        FormAnalyzer: Ready-to-use analyzer.
    """
    backend = OpenAIRecommendationBackend(settings) if settings.recommendations_enabled else None
    recommender = RecommendationOrchestrator(
        store,
        backend,
        max_context_chars=settings.recommendation_context_chars,
        enabled=settings.recommendations_enabled,
    )
    return FormAnalyzer(store, recommender, default_fields=settings.default_fields)
