from __future__ import annotations

import json
from pathlib import Path

from ragdesk.cli import main
from ragdesk.config import Settings
from ragdesk.store import VectorStore


def _settings(tmp_path: Path) -> Settings:
    docs = tmp_path / "docs.json"
    docs.write_text(
        json.dumps(
            [
                {"id": "pw", "title": "Password Reset", "content": "Open Settings, then Security, then reset. " * 5},
                {"id": "ship", "title": "Shipping", "content": "Orders ship within two business days."},
            ],
        ),
        encoding="utf-8",
    )
    return Settings(
        environment="test",
        documents_path=docs,
        vector_store_path=tmp_path / "out" / "vector_store.json",
        embedding_dim=256,
        chunk_size=100,
        chunk_overlap=20,
        ingestion_delay_seconds=0.0,
    )


def test_ingest_writes_vector_store(tmp_path: Path, capsys) -> None:
    settings = _settings(tmp_path)

    assert main(["ingest"], settings=settings) == 0

    store = VectorStore.load(settings.vector_store_path)
    summary = json.loads(capsys.readouterr().out)
    assert summary["chunks"] == len(store) == 4
    assert summary["documents"] == 2
    assert summary["dimension"] == 16


def test_diagnose_prints_scores(tmp_path: Path, capsys) -> None:
    settings = _settings(tmp_path)
    main(["ingest"], settings=settings)
    capsys.readouterr()

    assert main(["diagnose", "reset my password", "--limit", "2"], settings=settings) == 0

    out = capsys.readouterr().out
    assert 'Diagnosing query: "reset my password"' in out
    assert out.count("]: ") == 2


def test_ask_runs_questions_in_one_session(tmp_path: Path, capsys) -> None:
    settings = _settings(tmp_path)
    main(["ingest"], settings=settings)
    capsys.readouterr()

    assert main(["ask", "first question", "second question", "--session-id", "cli"], settings=settings) == 0

    out = capsys.readouterr().out
    assert out.count('"sessionId": "cli"') == 2
    assert out.count('"fallback": true') == 2


def test_missing_store_is_setup_error(tmp_path: Path, capsys) -> None:
    settings = _settings(tmp_path)

    assert main(["diagnose", "anything"], settings=settings) == 1
    assert "Vector store not found" in capsys.readouterr().err


def test_invalid_chunk_parameters_exit_nonzero(tmp_path: Path) -> None:
    settings = _settings(tmp_path)

    assert main(["ingest", "--chunk-size", "10", "--chunk-overlap", "10"], settings=settings) == 1
    assert not settings.vector_store_path.exists()


def test_unrelated_question_with_default_threshold_falls_back(tmp_path: Path, capsys) -> None:
    settings = _settings(tmp_path)
    main(["ingest"], settings=settings)
    capsys.readouterr()

    assert main(["ask", "What is the capital of France?"], settings=settings) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["fallback"] is True
    assert payload["retrievedChunks"] == 0
    assert payload["tokensUsed"] == 0


def test_unreadable_store_is_setup_error(tmp_path: Path, capsys) -> None:
    settings = _settings(tmp_path)
    settings.vector_store_path.mkdir(parents=True)

    assert main(["diagnose", "anything"], settings=settings) == 1
    assert "unreadable" in capsys.readouterr().err
