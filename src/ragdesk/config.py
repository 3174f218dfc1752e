"""Runtime configuration for the ragdesk services."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FALLBACK_REPLY = (
    "I'm sorry, I couldn't find relevant information in my knowledge base to answer your question. "
    "For more help, please contact our support team at support@company.com."
)
DEFAULT_INSUFFICIENT_CONTEXT_REPLY = (
    "I don't have enough information in my knowledge base to answer that question accurately. "
    "Please contact support for further help."
)


class Settings(BaseSettings):
    """Environment-backed configuration model."""

    model_config = SettingsConfigDict(env_prefix="ragdesk_", env_file=".env", case_sensitive=False)

    environment: Literal["dev", "test", "prod"] = "dev"
    documents_path: Path = Path("./data/docs.json")
    vector_store_path: Path = Path("./data/vector_store.json")

    # Providers
    embedding_provider: Literal["hash", "huggingface", "openai"] = "hash"
    embedding_model: str = "BAAI/bge-small-en-v1.5"
    openai_embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = 384

    generation_provider: Literal["template", "transformers", "openai"] = "template"
    generator_model: str = "Qwen/Qwen2.5-1.8B-Instruct"
    openai_chat_model: str = "gpt-4o-mini"
    generator_max_new_tokens: int = 1024
    generator_temperature: float = 0.2

    openai_api_key: str | None = None
    openai_base_url: str | None = None
    provider_timeout_seconds: float = 30.0

    # Retrieval policy
    top_k: int = 3
    similarity_threshold: float = 0.65
    score_precision: int = 4

    # Ingestion
    chunk_size: int = 1500
    chunk_overlap: int = 200
    ingestion_delay_seconds: float = 0.1

    # Conversation
    max_history_pairs: int = 5
    max_question_chars: int = 2000
    fallback_reply: str = DEFAULT_FALLBACK_REPLY
    insufficient_context_reply: str = DEFAULT_INSUFFICIENT_CONTEXT_REPLY


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return Settings()


def get_settings(override: Optional[dict[str, object]] = None) -> Settings:
    """Return settings, optionally overriding values without mutating cache."""

    if override:
        return Settings(**override)
    return _cached_settings()
