"""Entry points offered to transports: chat exchanges and session lifecycle."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ragdesk.config import Settings, get_settings
from ragdesk.errors import ValidationError
from ragdesk.metrics.observability import (
    PipelineMetrics,
    bind_correlation_id,
    clear_correlation_id,
    get_logger,
)
from ragdesk.models import PipelineResult
from ragdesk.providers import build_embedding_provider, build_generation_provider
from ragdesk.services.pipeline import PipelineConfig, RAGPipeline
from ragdesk.services.prompt import PromptComposer, PromptComposerConfig
from ragdesk.services.sessions import SessionHistoryStore
from ragdesk.store.vector_store import VectorStore

DEFAULT_MAX_QUESTION_CHARS = 2000


class AssistantService:
    """Validates requests and routes them through the pipeline."""

    def __init__(
        self,
        pipeline: RAGPipeline,
        sessions: SessionHistoryStore,
        *,
        max_question_chars: int = DEFAULT_MAX_QUESTION_CHARS,
    ) -> None:
        self._pipeline = pipeline
        self._sessions = sessions
        self._max_question_chars = max_question_chars
        self._logger = get_logger("assistant")

    def run_pipeline(self, question: str, session_id: str) -> PipelineResult:
        """Answer ``question`` within ``session_id``.

        Raises :class:`ValidationError` for bad input before any provider is
        called, and a classified :class:`ProviderError` on provider failure.
        Falling back for lack of evidence is a normal result, not an error.
        """

        if not isinstance(session_id, str) or not session_id.strip():
            raise ValidationError("sessionId is required and must be a non-empty string.")
        if not isinstance(question, str):
            raise ValidationError("message is required and must be a string.")
        trimmed = question.strip()
        if not trimmed:
            raise ValidationError("message cannot be empty.")
        if len(trimmed) > self._max_question_chars:
            raise ValidationError(f"message is too long (max {self._max_question_chars} characters).")

        if not self._sessions.exists(session_id):
            self._sessions.create(session_id)
            self._logger.info("session.auto_created", session_id=session_id)

        bind_correlation_id(session_id)
        try:
            return self._pipeline.run(trimmed, session_id)
        finally:
            clear_correlation_id()

    def new_session(self) -> str:
        session_id = self._sessions.create()
        PipelineMetrics.set_active_sessions(self._sessions.count())
        self._logger.info("session.created", session_id=session_id)
        return session_id

    def reset_session(self, session_id: str) -> bool:
        cleared = self._sessions.reset(session_id)
        self._logger.info("session.reset", session_id=session_id, existed=cleared)
        return cleared

    def get_active_session_count(self) -> int:
        return self._sessions.count()

    def health(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "chunks": len(self._pipeline.store),
            "activeSessions": self._sessions.count(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def build_assistant(
    settings: Settings | None = None,
    *,
    store: VectorStore | None = None,
) -> AssistantService:
    """Wire settings, the persisted store and providers into a service.

    Raises :class:`ConfigurationError` when the store or a provider cannot be
    set up; the process should not serve traffic in that case.
    """

    settings = settings or get_settings()
    if store is None:
        store = VectorStore.load(settings.vector_store_path)
    sessions = SessionHistoryStore(max_pairs=settings.max_history_pairs)
    pipeline = RAGPipeline(
        embedder=build_embedding_provider(settings),
        generator=build_generation_provider(settings),
        store=store,
        sessions=sessions,
        config=PipelineConfig(
            top_k=settings.top_k,
            similarity_threshold=settings.similarity_threshold,
            temperature=settings.generator_temperature,
            max_tokens=settings.generator_max_new_tokens,
            score_precision=settings.score_precision,
            fallback_reply=settings.fallback_reply,
        ),
        composer=PromptComposer(
            PromptComposerConfig(insufficient_context_reply=settings.insufficient_context_reply),
        ),
    )
    get_logger("assistant").info(
        "assistant.ready",
        chunk_count=len(store),
        threshold=settings.similarity_threshold,
        embedding_provider=settings.embedding_provider,
        generation_provider=settings.generation_provider,
    )
    return AssistantService(pipeline, sessions, max_question_chars=settings.max_question_chars)
