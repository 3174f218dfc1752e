"""Shared domain models used across the ragdesk pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Sequence, Tuple


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Document:
    """Raw knowledge base document supplied to ingestion."""

    id: str
    title: str
    content: str


@dataclass(frozen=True)
class Chunk:
    """Contiguous window of one document's text, the unit of retrieval."""

    chunk_id: str
    doc_id: str
    title: str
    chunk_index: int
    content: str


@dataclass(frozen=True)
class EmbeddedChunk:
    """Chunk paired with its embedding vector."""

    chunk: Chunk
    embedding: Tuple[float, ...]

    @property
    def chunk_id(self) -> str:
        return self.chunk.chunk_id

    @property
    def title(self) -> str:
        return self.chunk.title

    @property
    def content(self) -> str:
        return self.chunk.content

    @property
    def dimension(self) -> int:
        return len(self.embedding)


@dataclass(frozen=True)
class ScoredChunk:
    """Chunk returned by the ranker for a single query."""

    chunk_id: str
    title: str
    content: str
    score: float


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """One message in a conversation."""

    role: Role
    content: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class Generation:
    """Text produced by a generation provider together with token usage."""

    text: str
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass(frozen=True)
class ScoreSummary:
    title: str
    score: float


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of one chat exchange."""

    reply: str
    tokens_used: int
    retrieved_chunk_count: int
    scores: Sequence[ScoreSummary]
    used_fallback: bool
    latency_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            "reply": self.reply,
            "tokensUsed": self.tokens_used,
            "retrievedChunks": self.retrieved_chunk_count,
            "scores": [{"title": item.title, "score": item.score} for item in self.scores],
            "fallback": self.used_fallback,
            "latencyMs": self.latency_ms,
        }
