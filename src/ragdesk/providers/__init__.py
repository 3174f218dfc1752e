"""Embedding and generation providers."""

from __future__ import annotations

from ragdesk.config import Settings

from .base import EmbeddingProvider, GenerationProvider
from .local import HuggingFaceEmbeddingProvider, TransformersGenerationProvider
from .offline import HashEmbeddingProvider, TemplateGenerationProvider
from .openai_provider import OpenAIEmbeddingProvider, OpenAIGenerationProvider, build_client


def build_embedding_provider(settings: Settings) -> EmbeddingProvider:
    if settings.embedding_provider == "openai":
        client = build_client(
            settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout_seconds=settings.provider_timeout_seconds,
        )
        return OpenAIEmbeddingProvider(client, model=settings.openai_embedding_model, dimension=settings.embedding_dim)
    if settings.embedding_provider == "huggingface":
        return HuggingFaceEmbeddingProvider(settings.embedding_model, dimension=settings.embedding_dim)
    return HashEmbeddingProvider(settings.embedding_dim)


def build_generation_provider(settings: Settings) -> GenerationProvider:
    if settings.generation_provider == "openai":
        client = build_client(
            settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout_seconds=settings.provider_timeout_seconds,
        )
        return OpenAIGenerationProvider(client, model=settings.openai_chat_model)
    if settings.generation_provider == "transformers":
        return TransformersGenerationProvider(settings.generator_model)
    return TemplateGenerationProvider()


__all__ = [
    "EmbeddingProvider",
    "GenerationProvider",
    "HashEmbeddingProvider",
    "HuggingFaceEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "OpenAIGenerationProvider",
    "TemplateGenerationProvider",
    "TransformersGenerationProvider",
    "build_embedding_provider",
    "build_generation_provider",
]
