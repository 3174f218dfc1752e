"""Read knowledge base documents from a JSON catalogue or a directory of files."""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path
from typing import List, Mapping, Sequence

from langchain_community.document_loaders import BSHTMLLoader, Docx2txtLoader, PyPDFLoader, TextLoader
from langchain_community.document_loaders.base import BaseLoader
from langchain_core.documents import Document as LCDocument
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ragdesk.errors import ConfigurationError, IngestionError
from ragdesk.metrics.observability import get_logger
from ragdesk.models import Document


class DocumentRecord(BaseModel):
    """One entry of a ``docs.json`` catalogue."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    title: str = ""
    content: str


_DOCUMENT_LIST = TypeAdapter(List[DocumentRecord])

_LOADERS: Mapping[str, type[BaseLoader]] = {
    ".pdf": PyPDFLoader,
    ".docx": Docx2txtLoader,
    ".txt": TextLoader,
    ".md": TextLoader,
    ".html": BSHTMLLoader,
    ".htm": BSHTMLLoader,
}

_logger = get_logger("ingestion.loaders")


def _normalize_text(raw: str) -> str:
    normalized = unicodedata.normalize("NFKC", raw)
    normalized = normalized.replace("\u00a0", " ")
    normalized = re.sub(r"\s+", " ", normalized)
    return normalized.strip()


def _title_from_stem(stem: str) -> str:
    words = re.split(r"[-_\s]+", stem)
    return " ".join(word.capitalize() for word in words if word)


def load_documents(path: Path, *, encoding: str = "utf-8") -> Sequence[Document]:
    """Load documents from ``path``.

    A ``.json`` file must hold an array of ``{id, title, content}`` objects.
    A directory is scanned (non-recursively, sorted by name) for supported
    file types, each file becoming one document.
    """

    if not path.exists():
        raise ConfigurationError(f"Documents path not found: {path}")
    if path.is_dir():
        documents = _load_directory(path, encoding=encoding)
    elif path.suffix.lower() == ".json":
        documents = _load_catalogue(path)
    else:
        documents = [_load_file(path, encoding=encoding)]

    seen: set[str] = set()
    for document in documents:
        if document.id in seen:
            raise IngestionError(f"Duplicate document id: {document.id}")
        seen.add(document.id)
    _logger.info("documents.loaded", path=str(path), document_count=len(documents))
    return documents


def _load_catalogue(path: Path) -> List[Document]:
    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Document catalogue {path} is unreadable: {exc}") from exc
    try:
        records = _DOCUMENT_LIST.validate_json(payload)
    except PydanticValidationError as exc:
        raise IngestionError(f"Invalid document catalogue {path}: {exc}") from exc
    return [Document(id=record.id, title=record.title, content=record.content) for record in records]


def _load_directory(path: Path, *, encoding: str) -> List[Document]:
    try:
        entries = sorted(path.iterdir())
    except OSError as exc:
        raise ConfigurationError(f"Documents directory {path} is unreadable: {exc}") from exc
    documents: List[Document] = []
    for candidate in entries:
        if not candidate.is_file():
            continue
        if candidate.suffix.lower() not in _LOADERS:
            _logger.warning("documents.skipped", path=str(candidate), reason="unsupported type")
            continue
        documents.append(_load_file(candidate, encoding=encoding))
    return documents


def _load_file(path: Path, *, encoding: str) -> Document:
    suffix = path.suffix.lower()
    loader_cls = _LOADERS.get(suffix)
    if loader_cls is None:
        raise IngestionError(f"Unsupported document type: {suffix or '<none>'}")
    try:
        loader = _build_loader(loader_cls, path, encoding=encoding)
        pages: Sequence[LCDocument] = loader.load()
    except Exception as exc:  # pragma: no cover - loader specific errors
        raise IngestionError(f"Failed to load {path}: {exc}") from exc

    content = _normalize_text("\n\n".join(page.page_content for page in pages))
    title = ""
    for page in pages:
        candidate = page.metadata.get("title")
        if isinstance(candidate, str) and candidate.strip():
            title = candidate.strip()
            break
    return Document(id=path.stem, title=title or _title_from_stem(path.stem), content=content)


def _build_loader(loader_cls: type[BaseLoader], path: Path, *, encoding: str) -> BaseLoader:
    if loader_cls is TextLoader:
        return loader_cls(str(path), encoding=encoding)
    return loader_cls(str(path))

