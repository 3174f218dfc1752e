from __future__ import annotations

import json
from pathlib import Path

import pytest

from ragdesk.errors import ConfigurationError
from ragdesk.models import Chunk, EmbeddedChunk
from ragdesk.store import VectorStore


def _embedded(doc_id: str, index: int, vector: tuple[float, ...]) -> EmbeddedChunk:
    chunk = Chunk(
        chunk_id=f"{doc_id}-chunk-{index + 1}",
        doc_id=doc_id,
        title=doc_id.title(),
        chunk_index=index,
        content=f"{doc_id} text {index}",
    )
    return EmbeddedChunk(chunk=chunk, embedding=vector)


def test_save_and_load_preserves_records(tmp_path: Path) -> None:
    store = VectorStore([_embedded("billing", 0, (0.1, 0.2, 0.3)), _embedded("billing", 1, (0.3, 0.2, 0.1))])
    path = tmp_path / "nested" / "vector_store.json"

    store.save(path)
    loaded = VectorStore.load(path)

    assert list(loaded) == list(store)
    assert loaded.dimension == 3
    assert loaded.document_ids() == ["billing"]


def test_saved_file_uses_camel_case_fields(tmp_path: Path) -> None:
    path = tmp_path / "vector_store.json"
    VectorStore([_embedded("faq", 0, (1.0, 0.0))]).save(path)

    payload = json.loads(path.read_text(encoding="utf-8"))

    assert payload == [
        {
            "id": "faq-chunk-1",
            "docId": "faq",
            "title": "Faq",
            "chunkIndex": 0,
            "content": "faq text 0",
            "embedding": [1.0, 0.0],
        },
    ]


def test_inconsistent_dimensions_rejected() -> None:
    with pytest.raises(ConfigurationError):
        VectorStore([_embedded("a", 0, (1.0, 0.0)), _embedded("b", 0, (1.0, 0.0, 0.0))])


def test_load_rejects_inconsistent_file(tmp_path: Path) -> None:
    path = tmp_path / "vector_store.json"
    records = [
        {"id": "a-chunk-1", "docId": "a", "title": "A", "chunkIndex": 0, "content": "a", "embedding": [1.0, 0.0]},
        {"id": "b-chunk-1", "docId": "b", "title": "B", "chunkIndex": 0, "content": "b", "embedding": [1.0]},
    ]
    path.write_text(json.dumps(records), encoding="utf-8")

    with pytest.raises(ConfigurationError):
        VectorStore.load(path)


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "{}",
        "[]",
        '[{"id": "x", "title": "X", "content": "x", "embedding": [1.0]}]',
        '[{"id": "x", "docId": "d", "title": "X", "chunkIndex": 0, "content": "x", "embedding": []}]',
    ],
)
def test_load_rejects_corrupt_or_empty_file(tmp_path: Path, content: str) -> None:
    path = tmp_path / "vector_store.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        VectorStore.load(path)


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        VectorStore.load(tmp_path / "missing.json")


def test_load_directory_path_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="unreadable"):
        VectorStore.load(tmp_path)
