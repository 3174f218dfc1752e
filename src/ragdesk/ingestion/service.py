"""Offline construction of the vector store from raw documents."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Sequence

from ragdesk.errors import IngestionError, ProviderError
from ragdesk.ingestion.chunker import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE, chunk_document, validate_chunk_parameters
from ragdesk.ingestion.loaders import load_documents
from ragdesk.metrics.observability import PipelineMetrics, get_logger
from ragdesk.models import Document, EmbeddedChunk
from ragdesk.providers.base import EmbeddingProvider
from ragdesk.store.vector_store import VectorStore


@dataclass(frozen=True)
class IngestionConfig:
    """Configuration for vector store construction."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
    # Pause between embedding calls; only a courtesy to provider quotas.
    delay_seconds: float = 0.0


class VectorStoreBuilder:
    """Chunks and embeds documents into a complete :class:`VectorStore`.

    A run is all-or-nothing: any embedding failure aborts it with
    :class:`IngestionError` and nothing is returned.
    """

    _logger = get_logger("ingestion")

    def __init__(
        self,
        embedder: EmbeddingProvider,
        config: IngestionConfig | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._embedder = embedder
        self._config = config or IngestionConfig()
        self._sleep = sleep
        validate_chunk_parameters(self._config.chunk_size, self._config.chunk_overlap)

    def build(self, documents: Sequence[Document]) -> VectorStore:
        if not documents:
            raise IngestionError("No documents to ingest")

        start = time.perf_counter()
        records: List[EmbeddedChunk] = []
        dimension: int | None = None
        calls = 0
        for document in documents:
            if not document.content.strip():
                self._logger.warning("ingestion.document_skipped", doc_id=document.id, reason="empty content")
                continue
            chunks = chunk_document(document, self._config.chunk_size, self._config.chunk_overlap)
            self._logger.info("ingestion.document", doc_id=document.id, title=document.title, chunk_count=len(chunks))
            for chunk in chunks:
                if calls and self._config.delay_seconds > 0:
                    self._sleep(self._config.delay_seconds)
                calls += 1
                try:
                    vector = tuple(self._embedder.embed(chunk.content))
                except ProviderError as exc:
                    self._logger.error(
                        "ingestion.embedding_failed",
                        chunk_id=chunk.chunk_id,
                        kind=exc.kind.value,
                        detail=str(exc),
                    )
                    raise IngestionError(f"Failed to embed chunk {chunk.chunk_id}: {exc}") from exc
                except Exception as exc:
                    self._logger.error("ingestion.embedding_failed", chunk_id=chunk.chunk_id, detail=str(exc))
                    raise IngestionError(f"Failed to embed chunk {chunk.chunk_id}: {exc}") from exc
                if not vector:
                    raise IngestionError(f"Embedding provider returned an empty vector for {chunk.chunk_id}")
                if dimension is None:
                    dimension = len(vector)
                elif len(vector) != dimension:
                    raise IngestionError(
                        f"Embedding for {chunk.chunk_id} has dimension {len(vector)}, expected {dimension}"
                    )
                records.append(EmbeddedChunk(chunk=chunk, embedding=vector))

        if not records:
            raise IngestionError("Ingestion produced no chunks")

        duration = time.perf_counter() - start
        PipelineMetrics.observe_ingestion(duration, len(records))
        self._logger.info(
            "ingestion.complete",
            document_count=len(documents),
            chunk_count=len(records),
            dimension=dimension,
            duration_seconds=duration,
        )
        return VectorStore(records)


def ingest_documents(
    documents: Sequence[Document],
    embedder: EmbeddingProvider,
    *,
    config: IngestionConfig | None = None,
) -> VectorStore:
    """Convenience helper for tests and ad-hoc ingestion."""

    return VectorStoreBuilder(embedder, config=config).build(documents)


def ingest_path(
    documents_path: Path,
    output_path: Path,
    embedder: EmbeddingProvider,
    *,
    config: IngestionConfig | None = None,
) -> VectorStore:
    """Load documents from disk, build the store and persist it."""

    documents = load_documents(documents_path)
    store = ingest_documents(documents, embedder, config=config)
    store.save(output_path)
    return store
