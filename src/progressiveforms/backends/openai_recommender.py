"""OpenAI-compatible recommendation backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from progressiveforms import logger
from progressiveforms.exceptions import BackendError
from progressiveforms.prompts import build_recommendation_prompt
from progressiveforms.typing.models import RecommendationContext, RecommendationResult

if TYPE_CHECKING:
    from progressiveforms.settings import Settings


class OpenAIRecommendationBackend:
    """Recommendation backend against OpenAI-compatible chat completion endpoints."""

    def __init__(self, settings: Settings) -> None:
        """Initialize backend.

        Args:
            settings (Settings): Runtime settings.
        """
        self._settings = settings

    @property
    def model(self) -> str:
        """Return the model identifier used for calls."""
        return self._settings.openai_model

    def _client(self) -> OpenAI:
        """Build an SDK client over the shared HTTPX client.

        Raises:
            BackendError: If the endpoint is not configured.

        Returns:
            OpenAI: SDK client.
        """
        if not self._settings.openai_base_url:
            raise BackendError(message="OPENAI_BASE_URL is required for recommendations")
        if not self._settings.openai_api_key:
            raise BackendError(message="OPENAI_API_KEY is required for recommendations")
        return OpenAI(
            api_key=self._settings.openai_api_key,
            base_url=self._settings.openai_base_url,
            http_client=self._settings.http_client(),
            max_retries=0,
        )

    def _post_chat_completions(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one completion request.

        Args:
            payload (dict[str, Any]): Request payload.

        Raises:
            BackendError: If the request fails.

        Returns:
            dict[str, Any]: Completion as a JSON-compatible dict.
        """
        client = self._client()
        try:
            completion = client.chat.completions.create(**payload)
        except APIStatusError as exc:
            raise BackendError(message=f"Chat completion request failed with status {exc.status_code}") from exc
        except APITimeoutError as exc:
            raise BackendError(message="Chat completion request timed out") from exc
        except APIConnectionError as exc:
            raise BackendError(message=f"Chat completion request failed: {exc}") from exc
        return completion.model_dump(mode="json")

    def generate(self, context: RecommendationContext) -> RecommendationResult:
        """Ask the model for field recommendations.

        Args:
            context (RecommendationContext): Bounded form context.

        Raises:
            BackendError: If the response carries no message content.

        Returns:
            RecommendationResult: Raw JSON text with model and token usage.
        """
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": build_recommendation_prompt(context)}],
            "temperature": self._settings.openai_temperature,
            "response_format": {"type": "json_object"},
        }
        data = self._post_chat_completions(payload)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise BackendError(message="Chat completion response has no message content") from exc
        if not isinstance(content, str):
            raise BackendError(message="Chat completion response has no message content")

        usage = data.get("usage") or {}
        logger.debug("Recommendations generated", extra={"session_id": context.session_id})
        return RecommendationResult(
            content=content,
            model=data.get("model") or self.model,
            input_tokens=usage.get("prompt_tokens"),
            output_tokens=usage.get("completion_tokens"),
        )
