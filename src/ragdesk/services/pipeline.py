"""Chat pipeline: embed, retrieve, then fall back or compose and generate."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

from ragdesk.config import DEFAULT_FALLBACK_REPLY
from ragdesk.errors import ProviderError, UnknownProviderError
from ragdesk.metrics.observability import PipelineMetrics, TimedSection, get_logger
from ragdesk.models import Generation, PipelineResult, ScoredChunk, ScoreSummary
from ragdesk.providers.base import EmbeddingProvider, GenerationProvider
from ragdesk.retrieval.similarity import retrieve_top_k
from ragdesk.services.prompt import PromptComposer
from ragdesk.services.sessions import SessionHistoryStore
from ragdesk.store.vector_store import VectorStore

EMBEDDING_ERROR = "embedding-error"
GENERATION_ERROR = "generation-error"


class PipelineState(str, Enum):
    EMBEDDING_QUERY = "embedding_query"
    RETRIEVING = "retrieving"
    FALLBACK = "fallback"
    COMPOSING = "composing"
    GENERATING = "generating"
    RECORDING = "recording"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineConfig:
    """Retrieval and generation policy for one pipeline instance."""

    top_k: int = 3
    # Minimum cosine similarity for a chunk to count as evidence.
    similarity_threshold: float = 0.65
    temperature: float = 0.2
    max_tokens: int = 1024
    score_precision: int = 4
    fallback_reply: str = DEFAULT_FALLBACK_REPLY


class RAGPipeline:
    """Answers questions from the vector store, recording each exchange.

    When no chunk clears the similarity threshold the pipeline replies with
    ``config.fallback_reply`` and never calls the generation provider.
    Provider failures raise a :class:`ProviderError` tagged with the failing
    stage and leave the session untouched.
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        generator: GenerationProvider,
        store: VectorStore,
        sessions: SessionHistoryStore,
        config: PipelineConfig | None = None,
        composer: PromptComposer | None = None,
    ) -> None:
        self._embedder = embedder
        self._generator = generator
        self._store = store
        self._sessions = sessions
        self._config = config or PipelineConfig()
        self._composer = composer or PromptComposer()
        self._logger = get_logger("pipeline")

    @property
    def store(self) -> VectorStore:
        return self._store

    def run(self, question: str, session_id: str) -> PipelineResult:
        start = time.perf_counter()

        self._enter(PipelineState.EMBEDDING_QUERY, session_id)
        query_vector = self._embed(question)

        self._enter(PipelineState.RETRIEVING, session_id)
        chunks = self._retrieve(query_vector)

        if not chunks:
            self._enter(PipelineState.FALLBACK, session_id)
            PipelineMetrics.observe_fallback()
            reply = self._config.fallback_reply
            tokens_used = 0
        else:
            self._enter(PipelineState.COMPOSING, session_id)
            prompt = self._composer.compose(chunks, self._sessions.get_history(session_id), question)
            self._enter(PipelineState.GENERATING, session_id)
            generation = self._generate(prompt)
            reply = generation.text
            tokens_used = generation.total_tokens

        self._enter(PipelineState.RECORDING, session_id)
        self._sessions.record_exchange(session_id, question, reply)
        PipelineMetrics.set_active_sessions(self._sessions.count())

        latency_ms = (time.perf_counter() - start) * 1000
        result = PipelineResult(
            reply=reply,
            tokens_used=tokens_used,
            retrieved_chunk_count=len(chunks),
            scores=self._summarize(chunks),
            used_fallback=not chunks,
            latency_ms=latency_ms,
        )
        self._enter(PipelineState.DONE, session_id)
        self._logger.info(
            "pipeline.complete",
            session_id=session_id,
            chunk_count=result.retrieved_chunk_count,
            tokens=result.tokens_used,
            latency_ms=latency_ms,
            fallback=result.used_fallback,
        )
        return result

    def _embed(self, question: str) -> Tuple[float, ...]:
        try:
            vector = tuple(self._embedder.embed(question))
        except Exception as exc:
            raise self._fail(EMBEDDING_ERROR, exc) from exc
        if self._store.dimension and len(vector) != self._store.dimension:
            self._logger.warning(
                "retrieval.dimension_mismatch",
                query_dimension=len(vector),
                store_dimension=self._store.dimension,
            )
        return vector

    def _retrieve(self, query_vector: Sequence[float]) -> Sequence[ScoredChunk]:
        with TimedSection() as timer:
            chunks = retrieve_top_k(
                query_vector,
                self._store,
                k=self._config.top_k,
                threshold=self._config.similarity_threshold,
            )
        PipelineMetrics.observe_retrieval(timer.duration, len(chunks), (chunk.score for chunk in chunks))
        self._logger.info(
            "retrieval.complete",
            chunk_count=len(chunks),
            duration_seconds=timer.duration,
            threshold=self._config.similarity_threshold,
        )
        return chunks

    def _generate(self, prompt: str) -> Generation:
        with TimedSection() as timer:
            try:
                generation = self._generator.generate(
                    prompt,
                    temperature=self._config.temperature,
                    max_tokens=self._config.max_tokens,
                )
            except Exception as exc:
                raise self._fail(GENERATION_ERROR, exc) from exc
        PipelineMetrics.observe_generation(timer.duration, generation.total_tokens)
        return generation

    def _fail(self, stage: str, exc: Exception) -> ProviderError:
        if isinstance(exc, ProviderError):
            error = exc.with_stage(stage)
        else:
            error = UnknownProviderError(f"{type(exc).__name__}: {exc}", stage=stage)
        self._logger.error(
            "pipeline.failed",
            state=PipelineState.FAILED.value,
            stage=stage,
            kind=error.kind.value,
            detail=str(exc),
        )
        PipelineMetrics.observe_provider_error(stage, error.kind.value)
        return error

    def _summarize(self, chunks: Sequence[ScoredChunk]) -> Sequence[ScoreSummary]:
        return [
            ScoreSummary(title=chunk.title, score=round(chunk.score, self._config.score_precision))
            for chunk in chunks
        ]

    def _enter(self, state: PipelineState, session_id: str) -> None:
        self._logger.debug("pipeline.state", state=state.value, session_id=session_id)
