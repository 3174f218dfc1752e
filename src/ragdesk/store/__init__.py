"""Vector store persistence."""

from .schemas import EmbeddedChunkRecord
from .vector_store import VectorStore

__all__ = ["EmbeddedChunkRecord", "VectorStore"]
