"""Command line entry point: build the store, inspect retrieval, ask questions."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

from ragdesk.config import Settings, get_settings
from ragdesk.errors import ConfigurationError, IngestionError, ProviderError, ValidationError
from ragdesk.ingestion import IngestionConfig, ingest_path
from ragdesk.metrics.observability import get_logger
from ragdesk.providers import build_embedding_provider
from ragdesk.retrieval import rank_all
from ragdesk.services import build_assistant
from ragdesk.store import VectorStore

EXIT_OK = 0
EXIT_SETUP_ERROR = 1
EXIT_PROVIDER_ERROR = 2


def _ingest(args: argparse.Namespace, settings: Settings) -> int:
    config = IngestionConfig(
        chunk_size=args.chunk_size if args.chunk_size is not None else settings.chunk_size,
        chunk_overlap=args.chunk_overlap if args.chunk_overlap is not None else settings.chunk_overlap,
        delay_seconds=args.delay if args.delay is not None else settings.ingestion_delay_seconds,
    )
    documents_path = args.documents or settings.documents_path
    output_path = args.output or settings.vector_store_path
    store = ingest_path(documents_path, output_path, build_embedding_provider(settings), config=config)
    print(
        json.dumps(
            {
                "documents": len(store.document_ids()),
                "chunks": len(store),
                "dimension": store.dimension,
                "output": str(output_path),
            },
            indent=2,
        ),
    )
    return EXIT_OK


def _diagnose(args: argparse.Namespace, settings: Settings) -> int:
    store = VectorStore.load(args.store or settings.vector_store_path)
    embedder = build_embedding_provider(settings)
    ranked = rank_all(embedder.embed(args.query), store, limit=args.limit)
    print(f'Diagnosing query: "{args.query}"')
    print(f"Top {len(ranked)} similarity scores (threshold {settings.similarity_threshold}):")
    for index, scored in enumerate(ranked, start=1):
        marker = "*" if scored.score >= settings.similarity_threshold else " "
        print(f"{marker}{index}. {scored.title} [{scored.chunk_id}]: {scored.score:.4f}")
    return EXIT_OK


def _ask(args: argparse.Namespace, settings: Settings) -> int:
    assistant = build_assistant(settings)
    session_id = args.session_id or assistant.new_session()
    for question in args.questions:
        result = assistant.run_pipeline(question, session_id)
        payload = {"sessionId": session_id, "question": question, **result.to_dict()}
        print(json.dumps(payload, indent=2))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ragdesk", description="Grounded support assistant tooling.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Chunk and embed documents into a vector store file.")
    ingest.add_argument("--documents", type=Path, default=None, help="docs.json catalogue or directory of files")
    ingest.add_argument("--output", type=Path, default=None, help="Where to write the vector store JSON")
    ingest.add_argument("--chunk-size", type=int, default=None, help="Characters per chunk")
    ingest.add_argument("--chunk-overlap", type=int, default=None, help="Characters shared by consecutive chunks")
    ingest.add_argument("--delay", type=float, default=None, help="Seconds to pause between embedding calls")
    ingest.set_defaults(handler=_ingest)

    diagnose = subparsers.add_parser("diagnose", help="Show unfiltered similarity scores for a query.")
    diagnose.add_argument("query", help="Query text to embed and rank")
    diagnose.add_argument("--limit", type=int, default=5, help="Number of scores to show")
    diagnose.add_argument("--store", type=Path, default=None, help="Vector store JSON to load")
    diagnose.set_defaults(handler=_diagnose)

    ask = subparsers.add_parser("ask", help="Run questions through the chat pipeline in one session.")
    ask.add_argument("questions", nargs="+", help="Questions to ask, in order")
    ask.add_argument("--session-id", default=None, help="Reuse an explicit session id")
    ask.set_defaults(handler=_ask)
    return parser


def main(argv: Sequence[str] | None = None, *, settings: Settings | None = None) -> int:
    args = build_parser().parse_args(argv if argv is not None else sys.argv[1:])
    settings = settings or get_settings()
    logger = get_logger("cli")
    try:
        return args.handler(args, settings)
    except (ConfigurationError, IngestionError, ValidationError) as exc:
        logger.error("cli.failed", command=args.command, detail=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_SETUP_ERROR
    except ProviderError as exc:
        logger.error("cli.provider_error", command=args.command, kind=exc.kind.value, stage=exc.stage)
        print(f"Error: {exc.public_message}", file=sys.stderr)
        return EXIT_PROVIDER_ERROR


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
