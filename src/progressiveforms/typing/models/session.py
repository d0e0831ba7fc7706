"""Form session and field interaction models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from progressiveforms.typing.enums import InteractionType, SessionStatus

DEFAULT_SESSION_TYPE = "application_form"


def utc_now() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(UTC)


class FormSession(BaseModel):
    """One attempt at filling a form."""

    model_config = ConfigDict(extra="forbid")

    id: str
    user_id: str
    grant_id: str | None = None
    application_id: str | None = None
    session_type: str = DEFAULT_SESSION_TYPE
    status: SessionStatus = SessionStatus.ACTIVE
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None
    abandoned_at: datetime | None = None
    completion_percentage: int = Field(default=0, ge=0, le=100)
    time_spent_seconds: int = Field(default=0, ge=0)
    fields_completed: int = Field(default=0, ge=0)
    fields_total: int = Field(default=0, ge=0)
    user_agent: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        """Return whether the session has been completed or abandoned."""
        return self.status != SessionStatus.ACTIVE


class NewSession(BaseModel):
    """Payload used to open a form session."""

    model_config = ConfigDict(extra="forbid")

    user_id: str = Field(min_length=1)
    grant_id: str | None = None
    application_id: str | None = None
    session_type: str = DEFAULT_SESSION_TYPE
    fields_total: int = Field(default=0, ge=0)
    user_agent: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class SessionPatch(BaseModel):
    """Partial session update. Only supplied values are written."""

    model_config = ConfigDict(extra="forbid")

    completion_percentage: int | None = Field(default=None, ge=0, le=100)
    time_spent_seconds: int | None = Field(default=None, ge=0)
    fields_completed: int | None = Field(default=None, ge=0)
    metadata: dict[str, Any] | None = None
    completed: bool = False
    abandoned: bool = False

    def field_updates(self) -> dict[str, Any]:
        """Return the plain field updates carried by this patch.

        Returns:
            dict[str, Any]: Supplied non-null values, without transition flags.
        """
        supplied = self.model_dump(exclude_unset=True, exclude={"completed", "abandoned"})
        return {key: value for key, value in supplied.items() if value is not None}


class FieldInteraction(BaseModel):
    """Append-only record of one user action on one field."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str | None = None
    session_id: str = Field(min_length=1)
    field_name: str = Field(min_length=1)
    field_type: str = "text"
    interaction_type: InteractionType
    field_value: str | None = None
    time_spent_seconds: int = Field(default=0, ge=0)
    validation_errors: list[str] = Field(default_factory=list)
    ai_suggestions_shown: bool = False
    ai_assistance_used: bool = False
    interaction_order: int = 0
    recorded_at: datetime = Field(default_factory=utc_now)
    metadata: dict[str, Any] = Field(default_factory=dict)


class InteractionSummary(BaseModel):
    """Aggregate derived from a session's interaction stream."""

    model_config = ConfigDict(extra="forbid")

    interactions: int = 0
    time_spent_seconds: int = 0
    fields_touched: list[str] = Field(default_factory=list)
    validation_errors: int = 0
    ai_assists: int = 0
