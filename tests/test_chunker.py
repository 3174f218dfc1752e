from __future__ import annotations

import pytest

from ragdesk.errors import ConfigurationError
from ragdesk.ingestion.chunker import chunk_document, chunk_spans, chunk_text
from ragdesk.models import Document

SAMPLE = (
    "To reset your password, open Settings and choose Security. "
    "Click 'Forgot password' and follow the link we email you. "
    "Links expire after 30 minutes, so request a new one if needed."
)


def _reconstruct(text: str, spans: list[tuple[int, int]], overlap: int) -> str:
    first_start, first_end = spans[0]
    assert first_start == 0
    rebuilt = text[first_start:first_end]
    previous_end = first_end
    for start, end in spans[1:]:
        assert start == previous_end - overlap
        rebuilt += text[previous_end:end]
        previous_end = end
    return rebuilt


@pytest.mark.parametrize(
    ("size", "overlap"),
    [(10, 3), (25, 5), (40, 39), (7, 0), (1000, 200), (len(SAMPLE), 1)],
)
def test_spans_cover_text_exactly(size: int, overlap: int) -> None:
    spans = chunk_spans(SAMPLE, size, overlap)

    assert spans, "non-empty text must produce at least one chunk"
    assert spans[-1][1] == len(SAMPLE)
    assert all(end - start <= size for start, end in spans)
    assert _reconstruct(SAMPLE, spans, overlap) == SAMPLE


def test_chunk_text_trims_window_whitespace() -> None:
    chunks = chunk_text("  alpha beta   gamma delta  ", size=10, overlap=2)

    assert chunks[0] == "alpha be"
    assert all(chunk == chunk.strip() for chunk in chunks)


def test_short_text_yields_single_chunk() -> None:
    assert chunk_text("hello", size=1500, overlap=200) == ["hello"]


def test_empty_text_yields_no_chunks() -> None:
    assert chunk_text("", size=10, overlap=2) == []


def test_last_chunk_may_be_shorter() -> None:
    spans = chunk_spans("x" * 26, size=10, overlap=2)

    assert spans == [(0, 10), (8, 18), (16, 26)]


def test_zero_overlap_gives_adjacent_windows() -> None:
    assert chunk_spans("x" * 25, size=10, overlap=0) == [(0, 10), (10, 20), (20, 25)]


@pytest.mark.parametrize(("size", "overlap"), [(10, 10), (10, 11), (0, 0), (-5, 1), (10, -1)])
def test_invalid_parameters_fail_fast(size: int, overlap: int) -> None:
    with pytest.raises(ConfigurationError):
        chunk_spans(SAMPLE, size, overlap)


def test_chunk_document_assigns_ids_and_indices() -> None:
    document = Document(id="pw-reset", title="Password Reset", content="x" * 26)

    chunks = chunk_document(document, size=10, overlap=2)

    assert [chunk.chunk_index for chunk in chunks] == [0, 1, 2]
    assert [chunk.chunk_id for chunk in chunks] == ["pw-reset-chunk-1", "pw-reset-chunk-2", "pw-reset-chunk-3"]
    assert {chunk.title for chunk in chunks} == {"Password Reset"}
    assert {chunk.doc_id for chunk in chunks} == {"pw-reset"}
