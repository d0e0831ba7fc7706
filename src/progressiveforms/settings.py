"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import logging
import ssl
from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import certifi
import httpx
from pydantic import Field, PrivateAttr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from progressiveforms.exceptions import SettingsError

logger = logging.getLogger(__name__)

DEFAULT_FIELDS = (
    "project_title",
    "project_description",
    "requested_amount",
    "project_duration",
    "organization_info",
)
_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_name: str = "progressiveforms"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    http_proxy: str | None = Field(default=None, validation_alias="HTTP_PROXY", description="HTTP proxy URL.")
    https_proxy: str | None = Field(
        default=None,
        validation_alias="HTTPS_PROXY",
        description="HTTPS proxy URL.",
    )
    cert_path: str | None = Field(
        default=None,
        validation_alias="CERT_PATH",
        description="Path to SSL certificate bundle.",
    )
    timeout: float = Field(
        default=30.0,
        validation_alias="TIMEOUT",
        description="Request timeout in seconds, also bounds recommendation calls.",
    )
    max_connections: int = Field(
        default=20,
        validation_alias="MAX_CONNECTIONS",
        description="Maximum number of concurrent connections.",
    )

    openai_base_url: str | None = Field(
        default=None,
        validation_alias="OPENAI_BASE_URL",
        description="Base URL for the OpenAI-compatible API.",
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
        description="API key for the OpenAI-compatible API.",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        validation_alias="OPENAI_MODEL",
        description="Model used for field recommendations.",
    )
    openai_temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        validation_alias="OPENAI_TEMPERATURE",
        description="Sampling temperature for field recommendations.",
    )

    recommendations_enabled: bool = Field(
        default=True,
        validation_alias="RECOMMENDATIONS_ENABLED",
        description="Call the AI backend during analysis.",
    )
    recommendation_context_chars: int = Field(
        default=4000,
        gt=0,
        validation_alias="RECOMMENDATION_CONTEXT_CHARS",
        description="Upper bound on the form data snapshot sent to the model.",
    )
    default_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FIELDS),
        validation_alias="DEFAULT_FIELDS",
        description="Fields that are visible and required unless a rule overrides them (JSON list).",
    )
    rules_path: str = Field(
        default="rules/disclosure_rules.json",
        validation_alias="RULES_PATH",
        description="Disclosure rules file used by the CLI.",
    )

    _http_client: httpx.Client | None = PrivateAttr(default=None)

    @field_validator("openai_base_url")
    @classmethod
    def _validate_openai_base_url(cls, value: str | None) -> str | None:
        """Require https for remote endpoints.

        Args:
            value (str | None): Raw base URL.

        Raises:
            ValueError: If a non-local endpoint does not use https.

        Returns:
            str | None: Validated base URL.
        """
        if not value:
            return value
        parsed = urlparse(value)
        if parsed.scheme == "https":
            return value
        if parsed.scheme == "http" and (parsed.hostname or "") in _LOCAL_HOSTS:
            return value
        raise ValueError("OPENAI_BASE_URL must use https outside local development")  # noqa: TRY003

    def http_client(self) -> httpx.Client:
        """Return the shared HTTPX client, creating it on first use.

        Returns:
            httpx.Client: Client configured with TLS, proxy and timeout settings.
        """
        if self._http_client is None:
            self._http_client = httpx.Client(
                **build_httpx_client_kwargs(self),
                limits=httpx.Limits(max_connections=self.max_connections),
            )
        return self._http_client

    def close_http_client(self) -> None:
        """Close the shared HTTPX client (best effort)."""
        client = self._http_client
        self._http_client = None
        if client is None:
            return
        try:
            client.close()
        except Exception:
            logger.warning("Failed to close HTTPX client")


def build_ssl_context(settings: Settings) -> ssl.SSLContext:
    """Build a strict SSL context from settings.

    Falls back to the certifi bundle when no CERT_PATH is set and the host
    trust store is empty, as in slim containers.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        ssl.SSLContext: Configured TLS context.
    """
    ssl_context = ssl.create_default_context(cafile=settings.cert_path)
    if not settings.cert_path and not _cert_store_has_ca(ssl_context):
        ssl_context = ssl.create_default_context(cafile=_get_certifi_cafile())
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    return ssl_context


def _cert_store_has_ca(ssl_context: ssl.SSLContext) -> bool:
    return ssl_context.cert_store_stats().get("x509_ca", 0) > 0


def _get_certifi_cafile() -> str:
    return certifi.where()


def build_httpx_client_kwargs(settings: Settings) -> dict[str, Any]:
    """Build kwargs used for `httpx.Client`.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        dict[str, Any]: Arguments for the client constructor.
    """
    kwargs: dict[str, Any] = {
        "verify": build_ssl_context(settings),
        "timeout": settings.timeout,
    }
    proxy_url = settings.https_proxy or settings.http_proxy
    if proxy_url:
        kwargs["proxy"] = proxy_url
    return kwargs


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        if _is_missing_settings_error(exc):
            ensure_env_file_exists()
            try:
                return Settings()
            except Exception as retry_exc:
                raise SettingsError(exc=retry_exc) from retry_exc
        raise SettingsError(exc=exc) from exc


def ensure_env_file_exists(
    *,
    env_path: Path = Path(".env"),
    template_path: Path = Path(".env.template"),
) -> None:
    """Create `.env` from template when missing.

    Args:
        env_path (Path): Target environment file path.
        template_path (Path): Template file path.
    """
    if env_path.exists() or not template_path.exists():
        return
    env_path.write_text(template_path.read_text(encoding="utf-8"), encoding="utf-8")
    logger.info(
        "Created environment file from template",
        extra={"env_path": str(env_path), "template_path": str(template_path)},
    )


def _is_missing_settings_error(exc: Exception) -> bool:
    """Return whether the settings failure is due to missing values.

    Args:
        exc (Exception): Caught settings initialization error.

    Returns:
        bool: True when the error represents missing settings values.
    """
    if not isinstance(exc, ValidationError):
        return False
    return any(error.get("type") == "missing" for error in exc.errors())
