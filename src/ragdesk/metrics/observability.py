"""Observability helpers for ragdesk."""

from __future__ import annotations

import logging
import time
from typing import Iterable

import structlog
from prometheus_client import Counter, Gauge, Histogram

_logger_configured = False


def configure_logging(level: int = logging.INFO) -> None:
    global _logger_configured  # noqa: PLW0603 - module-level guard
    if _logger_configured:
        return
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _logger_configured = True


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_correlation_id() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str = "ragdesk") -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


def _clamp_score(score: float) -> float:
    if score < 0.0:
        return 0.0
    if score > 1.0:
        return 1.0
    return score


class PipelineMetrics:
    """Prometheus metrics for pipeline stages."""

    ingestion_latency = Histogram(
        "ragdesk_ingestion_duration_seconds",
        "Time spent building the vector store.",
        buckets=(0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0),
    )
    ingestion_chunks = Histogram(
        "ragdesk_ingestion_chunk_count",
        "Chunks embedded per ingestion run.",
        buckets=(0, 1, 5, 10, 50, 100, 500),
    )
    retrieval_latency = Histogram(
        "ragdesk_retrieval_duration_seconds",
        "Time spent ranking stored chunks against a query.",
        buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
    )
    retrieved_chunk_count = Histogram(
        "ragdesk_retrieved_chunk_count",
        "Number of chunks that cleared the similarity threshold.",
        buckets=(0, 1, 2, 3, 5, 8),
    )
    grounding_score = Histogram(
        "ragdesk_grounding_score",
        "Cosine similarity of chunks used to ground answers.",
        buckets=(0.0, 0.25, 0.5, 0.65, 0.75, 0.9, 1.0),
    )
    generation_latency = Histogram(
        "ragdesk_generation_duration_seconds",
        "Time spent generating answers.",
        buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
    )
    fallback_total = Counter(
        "ragdesk_fallback_total",
        "Exchanges answered with the fixed fallback reply.",
    )
    provider_errors_total = Counter(
        "ragdesk_provider_errors_total",
        "Provider failures by pipeline stage and classified kind.",
        ["stage", "kind"],
    )
    tokens_total = Counter(
        "ragdesk_tokens_total",
        "Prompt plus completion tokens reported by the generation provider.",
    )
    active_sessions = Gauge(
        "ragdesk_active_sessions",
        "Number of sessions held in memory.",
    )

    @classmethod
    def observe_ingestion(cls, duration_seconds: float, chunk_count: int) -> None:
        cls.ingestion_latency.observe(duration_seconds)
        cls.ingestion_chunks.observe(chunk_count)

    @classmethod
    def observe_retrieval(
        cls,
        duration_seconds: float,
        chunk_count: int,
        scores: Iterable[float],
    ) -> None:
        cls.retrieval_latency.observe(duration_seconds)
        cls.retrieved_chunk_count.observe(chunk_count)
        for score in scores:
            cls.grounding_score.observe(_clamp_score(score))

    @classmethod
    def observe_generation(cls, duration_seconds: float, tokens: int) -> None:
        cls.generation_latency.observe(duration_seconds)
        cls.tokens_total.inc(tokens)

    @classmethod
    def observe_fallback(cls) -> None:
        cls.fallback_total.inc()

    @classmethod
    def observe_provider_error(cls, stage: str, kind: str) -> None:
        cls.provider_errors_total.labels(stage=stage, kind=kind).inc()

    @classmethod
    def set_active_sessions(cls, count: int) -> None:
        cls.active_sessions.set(count)


class TimedSection:
    """Context manager capturing elapsed time for metrics."""

    def __init__(self) -> None:
        self._start = 0.0
        self.duration = 0.0

    def __enter__(self) -> "TimedSection":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        self.duration = time.perf_counter() - self._start


__all__ = [
    "PipelineMetrics",
    "TimedSection",
    "bind_correlation_id",
    "clear_correlation_id",
    "configure_logging",
    "get_logger",
]
