"""Capability interfaces consumed by ingestion and the chat pipeline."""

from __future__ import annotations

from typing import Protocol, Tuple

from ragdesk.models import Generation


class EmbeddingProvider(Protocol):
    """Turns text into a fixed-length vector."""

    dimension: int

    def embed(self, text: str) -> Tuple[float, ...]:
        """Return the embedding vector for ``text``.

        Raises a :class:`ragdesk.errors.ProviderError` subclass on failure.
        """


class GenerationProvider(Protocol):
    """Completes a prompt and reports token usage."""

    def generate(self, prompt: str, *, temperature: float, max_tokens: int) -> Generation:
        """Return generated text for ``prompt``.

        Raises a :class:`ragdesk.errors.ProviderError` subclass on failure.
        """
