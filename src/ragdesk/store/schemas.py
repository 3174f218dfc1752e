"""Pydantic models for the persisted vector store file."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from ragdesk.models import Chunk, EmbeddedChunk


class EmbeddedChunkRecord(BaseModel):
    """One element of the ``vector_store.json`` array."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Chunk identifier")
    doc_id: str = Field(..., alias="docId")
    title: str
    chunk_index: int = Field(..., alias="chunkIndex", ge=0)
    content: str
    embedding: List[float] = Field(..., min_length=1)

    @classmethod
    def from_embedded_chunk(cls, item: EmbeddedChunk) -> "EmbeddedChunkRecord":
        return cls(
            id=item.chunk.chunk_id,
            doc_id=item.chunk.doc_id,
            title=item.chunk.title,
            chunk_index=item.chunk.chunk_index,
            content=item.chunk.content,
            embedding=list(item.embedding),
        )

    def to_embedded_chunk(self) -> EmbeddedChunk:
        chunk = Chunk(
            chunk_id=self.id,
            doc_id=self.doc_id,
            title=self.title,
            chunk_index=self.chunk_index,
            content=self.content,
        )
        return EmbeddedChunk(chunk=chunk, embedding=tuple(self.embedding))


STORE_FILE = TypeAdapter(List[EmbeddedChunkRecord])
