"""Immutable in-memory collection of embedded chunks."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from ragdesk.errors import ConfigurationError
from ragdesk.metrics.observability import get_logger
from ragdesk.models import EmbeddedChunk
from ragdesk.store.schemas import STORE_FILE, EmbeddedChunkRecord

_logger = get_logger("store")


class VectorStore:
    """Read-only sequence of :class:`EmbeddedChunk` sharing one dimensionality.

    The store is built once (by ingestion or :meth:`load`) and never mutated,
    so a single instance can be shared by concurrent requests without locking.
    """

    def __init__(self, records: Iterable[EmbeddedChunk]) -> None:
        items: Tuple[EmbeddedChunk, ...] = tuple(records)
        dimensions = {item.dimension for item in items}
        if len(dimensions) > 1:
            raise ConfigurationError(
                f"Vector store embeddings have inconsistent dimensions: {sorted(dimensions)}"
            )
        if 0 in dimensions:
            raise ConfigurationError("Vector store contains an empty embedding")
        self._records = items
        self._dimension = dimensions.pop() if dimensions else 0

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[EmbeddedChunk]:
        return iter(self._records)

    @property
    def records(self) -> Sequence[EmbeddedChunk]:
        return self._records

    @property
    def dimension(self) -> int:
        return self._dimension

    def document_ids(self) -> List[str]:
        seen: dict[str, None] = {}
        for item in self._records:
            seen.setdefault(item.chunk.doc_id, None)
        return list(seen)

    def save(self, path: Path) -> None:
        """Write the store as a JSON array, replacing ``path`` atomically."""

        payload = STORE_FILE.dump_json(
            [EmbeddedChunkRecord.from_embedded_chunk(item) for item in self._records],
            by_alias=True,
            indent=2,
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        _logger.info("store.saved", path=str(path), chunk_count=len(self), dimension=self.dimension)

    @classmethod
    def load(cls, path: Path) -> "VectorStore":
        if not path.exists():
            raise ConfigurationError(f"Vector store not found at {path}; run the ingest command first")
        try:
            payload = path.read_bytes()
        except OSError as exc:
            raise ConfigurationError(f"Vector store at {path} is unreadable: {exc}") from exc
        try:
            records = STORE_FILE.validate_json(payload)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Vector store at {path} is corrupt: {exc}") from exc
        if not records:
            raise ConfigurationError(f"Vector store at {path} is empty")
        store = cls(record.to_embedded_chunk() for record in records)
        _logger.info("store.loaded", path=str(path), chunk_count=len(store), dimension=store.dimension)
        return store
