"""Providers backed by the OpenAI API.

Failures are classified here, once, from the SDK's exception types. Nothing
downstream inspects provider error messages.
"""

from __future__ import annotations

import logging
from typing import Any, Tuple

import openai
from openai import OpenAI

from ragdesk.errors import ConfigurationError, ProviderError, ProviderErrorKind, UnknownProviderError
from ragdesk.models import Generation

LOGGER = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_CHAT_MODEL = "gpt-4o-mini"


def classify_openai_error(exc: BaseException) -> ProviderErrorKind:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ProviderErrorKind.AUTH
    if isinstance(exc, openai.RateLimitError):
        return ProviderErrorKind.RATE_LIMIT
    if isinstance(exc, openai.APITimeoutError):
        return ProviderErrorKind.TIMEOUT
    return ProviderErrorKind.UNKNOWN


def to_provider_error(exc: BaseException, operation: str) -> ProviderError:
    kind = classify_openai_error(exc)
    LOGGER.warning("OpenAI %s failed (%s): %s", operation, kind.value, exc)
    return ProviderError.for_kind(kind, f"OpenAI {operation} failed: {exc}")


def build_client(
    api_key: str | None,
    *,
    base_url: str | None = None,
    timeout_seconds: float = 30.0,
) -> OpenAI:
    if not api_key:
        raise ConfigurationError("An OpenAI API key is required for the openai provider")
    # Retries are the caller's policy, never the provider adapter's.
    return OpenAI(api_key=api_key, base_url=base_url, timeout=timeout_seconds, max_retries=0)


class OpenAIEmbeddingProvider:
    def __init__(
        self,
        client: Any,
        *,
        model: str = DEFAULT_EMBEDDING_MODEL,
        dimension: int = 1536,
    ) -> None:
        self._client = client
        self._model = model
        self.dimension = dimension

    def embed(self, text: str) -> Tuple[float, ...]:
        request: dict[str, Any] = {"model": self._model, "input": text}
        # Only the text-embedding-3 family can shorten its output.
        if self._model.startswith("text-embedding-3"):
            request["dimensions"] = self.dimension
        try:
            response = self._client.embeddings.create(**request)
        except openai.OpenAIError as exc:
            raise to_provider_error(exc, "embedding") from exc
        vector = tuple(float(value) for value in response.data[0].embedding)
        if len(vector) != self.dimension:
            raise UnknownProviderError(
                f"OpenAI model {self._model} returned {len(vector)} values, expected {self.dimension}"
            )
        return vector


class OpenAIGenerationProvider:
    def __init__(self, client: Any, *, model: str = DEFAULT_CHAT_MODEL) -> None:
        self._client = client
        self._model = model

    def generate(self, prompt: str, *, temperature: float, max_tokens: int) -> Generation:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as exc:
            raise to_provider_error(exc, "generation") from exc
        text = response.choices[0].message.content or ""
        usage = response.usage
        return Generation(
            text=text,
            prompt_tokens=(usage.prompt_tokens or 0) if usage else 0,
            completion_tokens=(usage.completion_tokens or 0) if usage else 0,
        )
