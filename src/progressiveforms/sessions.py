"""Form session lifecycle and interaction tracking.

The interaction stream is append-only and is the record of truth. The
progress counters on a session are a convenience view that callers update
explicitly, so a session can lag behind its interactions.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from progressiveforms import logger
from progressiveforms.exceptions import InvalidRequestError, SessionNotFoundError, SessionStateError
from progressiveforms.typing.enums import InteractionType, SessionStatus
from progressiveforms.typing.models import (
    FieldInteraction,
    FormSession,
    InteractionSummary,
    NewSession,
    SessionPatch,
)
from progressiveforms.typing.models.session import utc_now

if TYPE_CHECKING:
    from progressiveforms.typing.protocol import FormStore

_TIMESTAMP_BY_STATUS = {
    SessionStatus.COMPLETED: "completed_at",
    SessionStatus.ABANDONED: "abandoned_at",
}


def transition(session: FormSession, target: SessionStatus, at: datetime | None = None) -> dict[str, Any]:
    """Return the field updates that move a session to a terminal status.

    Args:
        session (FormSession): Current session.
        target (SessionStatus): Requested terminal status.
        at (datetime | None): Transition time, defaults to now.

    Raises:
        SessionStateError: If the session is already terminal or the target is not terminal.

    Returns:
        dict[str, Any]: Updates for ``status`` and the matching timestamp.
    """
    if target not in _TIMESTAMP_BY_STATUS or session.is_terminal:
        raise SessionStateError(session_id=session.id, current=session.status.value, requested=target.value)
    return {"status": target, _TIMESTAMP_BY_STATUS[target]: at or utc_now()}


def summarize_interactions(interactions: list[FieldInteraction]) -> InteractionSummary:
    """Aggregate a session's interaction stream.

    Args:
        interactions (list[FieldInteraction]): Interactions in insertion order.

    Returns:
        InteractionSummary: Totals derived from the stream.
    """
    touched: dict[str, None] = {}
    for interaction in interactions:
        touched.setdefault(interaction.field_name)
    return InteractionSummary(
        interactions=len(interactions),
        time_spent_seconds=sum(interaction.time_spent_seconds for interaction in interactions),
        fields_touched=list(touched),
        validation_errors=sum(
            1 for interaction in interactions if interaction.interaction_type == InteractionType.VALIDATION_ERROR
        ),
        ai_assists=sum(1 for interaction in interactions if interaction.ai_assistance_used),
    )


class SessionService:
    """Create, read and update form sessions and record their interactions."""

    def __init__(self, store: FormStore) -> None:
        """Initialize service.

        Args:
            store (FormStore): Record store.
        """
        self._store = store

    def create_session(self, request: NewSession) -> str:
        """Open a new form session.

        Args:
            request (NewSession): Creation payload.

        Returns:
            str: Generated session id.
        """
        session = FormSession(id=str(uuid4()), **request.model_dump())
        session_id = self._store.create_session(session)
        logger.info("Form session created", extra={"session_id": session_id, "user_id": session.user_id})
        return session_id

    def get_session(self, session_id: str) -> FormSession | None:
        """Return a session, or None when unknown."""
        return self._store.get_session(session_id)

    def require_session(self, session_id: str) -> FormSession:
        """Return a session.

        Args:
            session_id (str): Session id.

        Raises:
            SessionNotFoundError: If the session does not exist.

        Returns:
            FormSession: Stored session.
        """
        session = self._store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id=session_id)
        return session

    def patch_session(self, session_id: str, patch: SessionPatch) -> FormSession:
        """Apply a partial update, including an optional terminal transition.

        Args:
            session_id (str): Session id.
            patch (SessionPatch): Supplied changes.

        Raises:
            SessionStateError: If the patch asks for both terminal states or leaves a terminal one.

        Returns:
            FormSession: Updated session.
        """
        updates = patch.field_updates()
        if patch.completed and patch.abandoned:
            raise SessionStateError(session_id=session_id, current="patch", requested="completed+abandoned")
        if patch.completed or patch.abandoned:
            target = SessionStatus.COMPLETED if patch.completed else SessionStatus.ABANDONED
            updates.update(transition(self.require_session(session_id), target))

        if not updates:
            return self.require_session(session_id)

        session = self._store.patch_session(session_id, updates)
        logger.info("Form session updated", extra={"session_id": session_id, "fields": sorted(updates)})
        return session

    def complete_session(self, session_id: str) -> FormSession:
        """Mark a session as completed."""
        return self.patch_session(session_id, SessionPatch(completed=True))

    def abandon_session(self, session_id: str) -> FormSession:
        """Mark a session as abandoned."""
        return self.patch_session(session_id, SessionPatch(abandoned=True))

    def record_progress(self, session_id: str, *, completion_percentage: int, fields_completed: int) -> FormSession:
        """Write analysis progress counters onto the session."""
        return self.patch_session(
            session_id,
            SessionPatch(completion_percentage=completion_percentage, fields_completed=fields_completed),
        )

    def track_interaction(self, interaction: FieldInteraction) -> str:
        """Append a field interaction.

        Args:
            interaction (FieldInteraction): Event to record.

        Raises:
            InvalidRequestError: If the event has no session id or field name.

        Returns:
            str: Interaction id.
        """
        if not interaction.session_id or not interaction.field_name:
            raise InvalidRequestError(message="Session ID, field name, and interaction type are required")
        interaction_id = self._store.insert_interaction(interaction)
        logger.debug(
            "Field interaction tracked",
            extra={
                "session_id": interaction.session_id,
                "field_name": interaction.field_name,
                "interaction_type": interaction.interaction_type.value,
            },
        )
        return interaction_id

    def list_interactions(self, session_id: str) -> list[FieldInteraction]:
        """Return a session's interactions in insertion order."""
        return self._store.list_interactions(session_id)

    def refresh_from_interactions(self, session_id: str) -> FormSession:
        """Rebuild the session's time counter from its interaction stream.

        Args:
            session_id (str): Session id.

        Returns:
            FormSession: Updated session.
        """
        summary = summarize_interactions(self._store.list_interactions(session_id))
        return self.patch_session(session_id, SessionPatch(time_spent_seconds=summary.time_spent_seconds))
