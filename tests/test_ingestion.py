"""Tests for document loading and vector store construction."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ragdesk.errors import ConfigurationError, IngestionError, RateLimitError
from ragdesk.ingestion import IngestionConfig, VectorStoreBuilder, ingest_documents, ingest_path, load_documents
from ragdesk.models import Document
from ragdesk.providers import HashEmbeddingProvider
from ragdesk.store import VectorStore


class CountingEmbedder:
    def __init__(self, dimension: int = 8, fail_on: int | None = None) -> None:
        self.dimension = dimension
        self.calls: list[str] = []
        self._fail_on = fail_on

    def embed(self, text: str) -> tuple[float, ...]:
        self.calls.append(text)
        if self._fail_on is not None and len(self.calls) == self._fail_on:
            raise RateLimitError("quota exhausted")
        return tuple(float(len(text) + offset) for offset in range(self.dimension))


def _documents() -> list[Document]:
    return [
        Document(id="billing", title="Billing", content="abcdefghijklmnopqrstuvwxyz"),
        Document(id="reset", title="Password Reset", content="ABCDEFGHIJKLMNOPQRSTUVWXYZ"),
    ]


def test_round_trip_two_documents_three_chunks_each(tmp_path: Path) -> None:
    embedder = CountingEmbedder(dimension=12)
    config = IngestionConfig(chunk_size=10, chunk_overlap=2)
    path = tmp_path / "vector_store.json"

    ingest_documents(_documents(), embedder, config=config).save(path)
    loaded = VectorStore.load(path)

    assert len(loaded) == 6
    assert loaded.dimension == embedder.dimension
    assert [item.chunk_id for item in loaded] == [
        "billing-chunk-1",
        "billing-chunk-2",
        "billing-chunk-3",
        "reset-chunk-1",
        "reset-chunk-2",
        "reset-chunk-3",
    ]
    assert len(embedder.calls) == 6


def test_embedding_failure_aborts_whole_run() -> None:
    embedder = CountingEmbedder(fail_on=4)

    with pytest.raises(IngestionError) as excinfo:
        ingest_documents(_documents(), embedder, config=IngestionConfig(chunk_size=10, chunk_overlap=2))

    assert isinstance(excinfo.value.__cause__, RateLimitError)
    assert len(embedder.calls) == 4


def test_failed_run_does_not_write_store(tmp_path: Path) -> None:
    docs_path = tmp_path / "docs.json"
    docs_path.write_text(
        json.dumps([{"id": d.id, "title": d.title, "content": d.content} for d in _documents()]),
        encoding="utf-8",
    )
    output = tmp_path / "vector_store.json"

    with pytest.raises(IngestionError):
        ingest_path(docs_path, output, CountingEmbedder(fail_on=1), config=IngestionConfig(chunk_size=10, chunk_overlap=2))

    assert not output.exists()


def test_delay_between_embedding_calls() -> None:
    pauses: list[float] = []
    builder = VectorStoreBuilder(
        CountingEmbedder(),
        IngestionConfig(chunk_size=10, chunk_overlap=2, delay_seconds=0.25),
        sleep=pauses.append,
    )

    builder.build(_documents())

    assert pauses == [0.25] * 5


def test_dimension_change_mid_run_aborts() -> None:
    class DriftingEmbedder(CountingEmbedder):
        def embed(self, text: str) -> tuple[float, ...]:
            vector = super().embed(text)
            return vector if len(self.calls) == 1 else vector + (1.0,)

    with pytest.raises(IngestionError):
        ingest_documents(_documents(), DriftingEmbedder(), config=IngestionConfig(chunk_size=10, chunk_overlap=2))


def test_blank_documents_are_skipped() -> None:
    documents = [Document(id="empty", title="Empty", content="   "), *_documents()]

    store = ingest_documents(documents, CountingEmbedder(), config=IngestionConfig(chunk_size=100, chunk_overlap=10))

    assert store.document_ids() == ["billing", "reset"]


def test_no_documents_is_an_error() -> None:
    with pytest.raises(IngestionError):
        ingest_documents([], CountingEmbedder())


def test_invalid_chunk_parameters_rejected_before_embedding() -> None:
    embedder = CountingEmbedder()

    with pytest.raises(ConfigurationError):
        VectorStoreBuilder(embedder, IngestionConfig(chunk_size=100, chunk_overlap=100))

    assert embedder.calls == []


def test_hash_embeddings_match_declared_dimension() -> None:
    embedder = HashEmbeddingProvider(32)

    store = ingest_documents(_documents(), embedder, config=IngestionConfig(chunk_size=10, chunk_overlap=2))

    assert store.dimension == embedder.dimension == 32


def test_load_documents_from_catalogue(tmp_path: Path) -> None:
    path = tmp_path / "docs.json"
    path.write_text(
        json.dumps([{"id": "faq-1", "title": "Shipping", "content": "We ship worldwide.", "tags": ["x"]}]),
        encoding="utf-8",
    )

    documents = load_documents(path)

    assert documents == [Document(id="faq-1", title="Shipping", content="We ship worldwide.")]


def test_load_documents_from_directory(tmp_path: Path) -> None:
    (tmp_path / "password-reset.txt").write_text("Open   Settings\nthen Security.", encoding="utf-8")
    (tmp_path / "billing_faq.md").write_text("# Billing\nInvoices are monthly.", encoding="utf-8")
    (tmp_path / "notes.csv").write_text("a,b", encoding="utf-8")

    documents = load_documents(tmp_path)

    assert [doc.id for doc in documents] == ["billing_faq", "password-reset"]
    assert [doc.title for doc in documents] == ["Billing Faq", "Password Reset"]
    assert documents[1].content == "Open Settings then Security."


def test_catalogue_with_duplicate_ids_rejected(tmp_path: Path) -> None:
    path = tmp_path / "docs.json"
    path.write_text(
        json.dumps([{"id": "a", "title": "A", "content": "x"}, {"id": "a", "title": "B", "content": "y"}]),
        encoding="utf-8",
    )

    with pytest.raises(IngestionError):
        load_documents(path)


def test_malformed_catalogue_rejected(tmp_path: Path) -> None:
    path = tmp_path / "docs.json"
    path.write_text(json.dumps([{"title": "No id"}]), encoding="utf-8")

    with pytest.raises(IngestionError):
        load_documents(path)


def test_missing_documents_path(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_documents(tmp_path / "nope.json")


def test_unreadable_catalogue_is_configuration_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "docs.json"
    path.write_text("[]", encoding="utf-8")

    def _deny(self: Path) -> bytes:
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", _deny)

    with pytest.raises(ConfigurationError, match="unreadable"):
        load_documents(path)
