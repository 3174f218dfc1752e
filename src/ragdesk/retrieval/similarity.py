"""Exact cosine-similarity ranking over the in-memory vector store."""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

from ragdesk.models import EmbeddedChunk, ScoredChunk


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between ``a`` and ``b``.

    Degenerate input (empty or mismatched vectors, a zero vector, a non-finite
    result) scores exactly 0.0 so one bad vector cannot break a ranking.
    """

    if not a or not b or len(a) != len(b):
        return 0.0
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    denominator = math.sqrt(norm_a) * math.sqrt(norm_b)
    if denominator == 0.0 or not math.isfinite(denominator):
        return 0.0
    score = dot / denominator
    if not math.isfinite(score):
        return 0.0
    return max(-1.0, min(1.0, score))


def _score_all(query_vector: Sequence[float], store: Iterable[EmbeddedChunk]) -> List[ScoredChunk]:
    return [
        ScoredChunk(
            chunk_id=item.chunk_id,
            title=item.title,
            content=item.content,
            score=cosine_similarity(query_vector, item.embedding),
        )
        for item in store
    ]


def retrieve_top_k(
    query_vector: Sequence[float],
    store: Iterable[EmbeddedChunk],
    k: int = 3,
    threshold: float = 0.65,
) -> List[ScoredChunk]:
    """Return at most ``k`` chunks scoring ``>= threshold``, best first.

    The sort is stable, so equal scores keep the store's order.
    """

    if k <= 0:
        return []
    matches = [scored for scored in _score_all(query_vector, store) if scored.score >= threshold]
    matches.sort(key=lambda scored: scored.score, reverse=True)
    return matches[:k]


def rank_all(
    query_vector: Sequence[float],
    store: Iterable[EmbeddedChunk],
    limit: int | None = None,
) -> List[ScoredChunk]:
    """Rank every stored chunk without a threshold, for diagnostics."""

    ranked = sorted(_score_all(query_vector, store), key=lambda scored: scored.score, reverse=True)
    return ranked if limit is None else ranked[: max(limit, 0)]
