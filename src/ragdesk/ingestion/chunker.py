"""Fixed-size, overlapping character windows over document text."""

from __future__ import annotations

from typing import List, Tuple

from ragdesk.errors import ConfigurationError
from ragdesk.models import Chunk, Document

DEFAULT_CHUNK_SIZE = 1500
DEFAULT_CHUNK_OVERLAP = 200


def validate_chunk_parameters(size: int, overlap: int) -> None:
    """Require ``0 <= overlap < size``; zero overlap yields adjacent windows."""

    if size <= 0:
        raise ConfigurationError(f"chunk size must be positive, got {size}")
    if overlap < 0:
        raise ConfigurationError(f"chunk overlap must not be negative, got {overlap}")
    if overlap >= size:
        raise ConfigurationError(f"chunk overlap ({overlap}) must be smaller than chunk size ({size})")


def chunk_spans(text: str, size: int, overlap: int) -> List[Tuple[int, int]]:
    """Return the untrimmed ``(start, end)`` offsets of every window.

    Consecutive windows share exactly ``overlap`` characters and the final
    window always ends at ``len(text)``.
    """

    validate_chunk_parameters(size, overlap)
    spans: List[Tuple[int, int]] = []
    step = size - overlap
    start = 0
    length = len(text)
    while start < length:
        end = min(start + size, length)
        spans.append((start, end))
        if end == length:
            break
        start += step
    return spans


def chunk_text(
    text: str,
    size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> List[str]:
    return [text[start:end].strip() for start, end in chunk_spans(text, size, overlap)]


def chunk_document(
    document: Document,
    size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> List[Chunk]:
    return [
        Chunk(
            chunk_id=f"{document.id}-chunk-{index + 1}",
            doc_id=document.id,
            title=document.title,
            chunk_index=index,
            content=content,
        )
        for index, content in enumerate(chunk_text(document.content, size, overlap))
    ]
