"""ProgressiveForms package."""

from progressiveforms.exceptions import (
    BackendError,
    DependencyError,
    InvalidRequestError,
    PackageError,
    RecommendationNotFoundError,
    RuleLoadError,
    SessionNotFoundError,
    SessionStateError,
    SettingsError,
)
from progressiveforms.logging import configure_logging, get_logger
from progressiveforms.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("progressiveforms")

__all__ = [
    "BackendError",
    "DependencyError",
    "InvalidRequestError",
    "PackageError",
    "RecommendationNotFoundError",
    "RuleLoadError",
    "SessionNotFoundError",
    "SessionStateError",
    "Settings",
    "SettingsError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
]
