"""Document loading, chunking and vector store construction."""

from .chunker import chunk_document, chunk_spans, chunk_text
from .loaders import load_documents
from .service import IngestionConfig, VectorStoreBuilder, ingest_documents, ingest_path

__all__ = [
    "IngestionConfig",
    "VectorStoreBuilder",
    "chunk_document",
    "chunk_spans",
    "chunk_text",
    "ingest_documents",
    "ingest_path",
    "load_documents",
]
