"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass(frozen=True)
class InvalidRequestError(PackageError):
    """Raised when a caller payload is rejected before reaching the engine."""

    message: str
    field: str | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message} ({self.field})" if self.field else self.message


@dataclass(frozen=True)
class SessionNotFoundError(PackageError):
    """Raised when a form session id is unknown to the store."""

    session_id: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Form session not found: {self.session_id}"


@dataclass(frozen=True)
class RecommendationNotFoundError(PackageError):
    """Raised when a recommendation id is unknown to the store."""

    recommendation_id: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Field recommendation not found: {self.recommendation_id}"


@dataclass(frozen=True)
class SessionStateError(PackageError):
    """Raised when a session status transition is not allowed."""

    session_id: str
    current: str
    requested: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Cannot move session {self.session_id} from '{self.current}' to '{self.requested}'"


@dataclass
class RuleLoadError(PackageError):
    """Raised when disclosure rules cannot be read or fail validation."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class BackendError(PackageError):
    """Raised when the recommendation backend call fails."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message
