"""Unit tests for the KFP ingestion components.

Each test exercises the *Python function* behind the ``@dsl.component``
decorator (``component.python_func``), so no Kubeflow cluster is needed.

Structured JSON contract flowing between components:

  fetch  → {path, content, objectId, size, fetchedAt, sourceUrl}
  chunk  → {id, content, metadata: {filePath, fileObjectId, chunkIndex,
            totalChunksForFile, previousChunkId, nextChunkId}}
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from unittest.mock import patch

import pytest

from docs_ingest.github.client import RepositoryFetchError
from docs_ingest.models import RawFile, RepositoryRef, TreeEntry


# ──────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────


class _FakeArtifact:
    """Minimal stand-in for ``dsl.Dataset`` / ``dsl.Metrics``."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.metadata: dict = {}
        self._metrics: dict = {}

    def log_metric(self, name: str, value) -> None:
        self._metrics[name] = value


def _write_jsonl(path: str, records: list[dict]) -> None:
    with open(path, "w") as fh:
        for rec in records:
            fh.write(json.dumps(rec) + "\n")


def _read_jsonl(path: str) -> list[dict]:
    with open(path) as fh:
        return [json.loads(line) for line in fh if line.strip()]


_TREE = [
    TreeEntry(path="README.md", size=40, object_id="1111111111aa"),
    TreeEntry(path="docs/usage.md", size=80, object_id="2222222222bb"),
    TreeEntry(path="docs/broken.md", size=80, object_id="3333333333cc"),
    TreeEntry(path="src/__tests__/notes.md", size=10, object_id="4444444444dd"),
    TreeEntry(path="node_modules/x/readme.md", size=10, object_id="5555555555ee"),
]

_CONTENTS = {
    "README.md": "# Widgets   \n\nThe    toolkit.",
    "docs/usage.md": "## Usage\n\n```py\nx =    1\n```",
    "src/__tests__/notes.md": "internal",
}


class _FakeGitHubClient:
    """Replaces :class:`GitHubClient` inside the fetch component."""

    fail_tree = False

    def __init__(self, *args, **kwargs) -> None:
        self.kwargs = kwargs

    def fetch_tree(self, ref: RepositoryRef) -> list[TreeEntry]:
        if self.fail_tree:
            raise RepositoryFetchError(ref, RuntimeError("404 Not Found"))
        return _TREE

    def fetch_files(self, entries: Sequence[TreeEntry], ref: RepositoryRef) -> list[RawFile]:
        return [
            RawFile(path=e.path, content=_CONTENTS[e.path], object_id=e.object_id, size=e.size or 0)
            for e in entries
            if e.path in _CONTENTS
        ]


# ──────────────────────────────────────────────────────────────────────
# fetch_repository_docs
# ──────────────────────────────────────────────────────────────────────


class TestFetchRepositoryDocs:
    """Tests for ``pipelines.components.fetch.fetch_repository_docs``."""

    def _run(self, tmp_path: Path, **kwargs) -> tuple[str, _FakeArtifact, _FakeArtifact]:
        from pipelines.components.fetch import fetch_repository_docs

        artifact = _FakeArtifact(str(tmp_path / "raw.jsonl"))
        metrics = _FakeArtifact(str(tmp_path / "metrics"))
        with patch("docs_ingest.github.client.GitHubClient", _FakeGitHubClient):
            result = fetch_repository_docs.python_func(
                repository_url="https://github.com/acme/widgets",
                raw_files=artifact,
                metrics=metrics,
                **kwargs,
            )
        return result, artifact, metrics

    def test_emits_ranked_normalised_files(self, tmp_path: Path) -> None:
        result, artifact, metrics = self._run(tmp_path)

        records = _read_jsonl(artifact.path)
        assert [r["path"] for r in records] == ["README.md", "docs/usage.md"]
        for rec in records:
            assert set(rec) == {"path", "content", "objectId", "size", "fetchedAt", "sourceUrl"}
        assert records[0]["content"] == "# Widgets\n\nThe toolkit."
        assert records[1]["content"] == "## Usage\n\n```py\nx =    1\n```"

        assert artifact.metadata["repository"] == "acme/widgets@main"
        assert artifact.metadata["num_files"] == 2
        assert metrics._metrics["tree_entries"] == 5
        assert metrics._metrics["candidates"] == 5
        assert metrics._metrics["fetch_failures"] == 1
        assert metrics._metrics["files_kept"] == 2
        assert "Kept 2 files" in result

    def test_max_files_truncates(self, tmp_path: Path) -> None:
        _, artifact, metrics = self._run(tmp_path, max_files=1)

        assert [r["path"] for r in _read_jsonl(artifact.path)] == ["README.md"]
        assert metrics._metrics["dropped_by_limit"] == 3

    def test_invalid_max_files(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="max_files"):
            self._run(tmp_path, max_files=0)

    def test_invalid_repository_url(self, tmp_path: Path) -> None:
        from pipelines.components.fetch import fetch_repository_docs

        with pytest.raises(ValueError, match="github.com"):
            fetch_repository_docs.python_func(
                repository_url="acme/widgets",
                raw_files=_FakeArtifact(str(tmp_path / "raw.jsonl")),
                metrics=_FakeArtifact(str(tmp_path / "metrics")),
            )

    def test_tree_failure_propagates(self, tmp_path: Path) -> None:
        with patch.object(_FakeGitHubClient, "fail_tree", True):
            with pytest.raises(RepositoryFetchError, match="acme/widgets@main"):
                self._run(tmp_path)


# ──────────────────────────────────────────────────────────────────────
# chunk_documents
# ──────────────────────────────────────────────────────────────────────


class TestChunkDocuments:
    """Tests for ``pipelines.components.chunk.chunk_documents``."""

    @staticmethod
    def _make_file_record(content: str, path: str = "docs/a.md") -> dict:
        """Create a record matching the fetch output contract."""
        return {
            "path": path,
            "content": content,
            "objectId": "abcdef0123456789",
            "size": len(content),
            "fetchedAt": "2026-02-12T00:00:00+00:00",
            "sourceUrl": f"https://github.com/acme/widgets/blob/main/{path}",
        }

    def test_chunks_long_document(self, tmp_path: Path) -> None:
        in_path = str(tmp_path / "raw.jsonl")
        out_path = str(tmp_path / "chunks.jsonl")
        metrics = _FakeArtifact(str(tmp_path / "metrics"))
        _write_jsonl(in_path, [self._make_file_record("word " * 500)])

        from pipelines.components.chunk import chunk_documents

        out_art = _FakeArtifact(out_path)
        result = chunk_documents.python_func(
            raw_files=_FakeArtifact(in_path),
            chunks=out_art,
            metrics=metrics,
            chunk_size=256,
            chunk_overlap=32,
        )

        chunks = _read_jsonl(out_path)
        assert len(chunks) > 1
        for i, c in enumerate(chunks):
            assert c["id"] == f"docs/a-md-abcdef01-{i}"
            assert c["metadata"]["filePath"] == "docs/a.md"
            assert c["metadata"]["chunkIndex"] == i
            assert c["metadata"]["totalChunksForFile"] == len(chunks)
            assert len(c["content"]) <= 256
        assert chunks[0]["metadata"]["previousChunkId"] is None
        assert chunks[0]["metadata"]["nextChunkId"] == chunks[1]["id"]
        assert chunks[-1]["metadata"]["nextChunkId"] is None
        assert out_art.metadata["num_chunks"] == len(chunks)
        assert metrics._metrics["files_processed"] == 1
        assert result == f"Produced {len(chunks)} chunks from 1 files"

    def test_skips_malformed_lines(self, tmp_path: Path) -> None:
        in_path = tmp_path / "raw.jsonl"
        out_path = str(tmp_path / "chunks.jsonl")
        good = json.dumps(self._make_file_record("Short.", path="ok.md"))
        in_path.write_text("not json\n" + '{"path": "x.md"}\n' + good + "\n")

        from pipelines.components.chunk import chunk_documents

        chunk_documents.python_func(
            raw_files=_FakeArtifact(str(in_path)),
            chunks=_FakeArtifact(out_path),
            metrics=_FakeArtifact(str(tmp_path / "metrics")),
        )

        chunks = _read_jsonl(out_path)
        assert [c["metadata"]["filePath"] for c in chunks] == ["ok.md"]

    def test_empty_input(self, tmp_path: Path) -> None:
        in_path = str(tmp_path / "raw.jsonl")
        out_path = str(tmp_path / "chunks.jsonl")
        Path(in_path).write_text("")

        from pipelines.components.chunk import chunk_documents

        out_art = _FakeArtifact(out_path)
        chunk_documents.python_func(
            raw_files=_FakeArtifact(in_path),
            chunks=out_art,
            metrics=_FakeArtifact(str(tmp_path / "metrics")),
        )

        assert _read_jsonl(out_path) == []
        assert out_art.metadata["num_chunks"] == 0

    def test_overlap_gte_chunk_size_raises(self, tmp_path: Path) -> None:
        in_path = str(tmp_path / "raw.jsonl")
        _write_jsonl(in_path, [self._make_file_record("Hello")])

        from pipelines.components.chunk import chunk_documents

        with pytest.raises(ValueError, match="chunk_overlap.*must be"):
            chunk_documents.python_func(
                raw_files=_FakeArtifact(in_path),
                chunks=_FakeArtifact(str(tmp_path / "chunks.jsonl")),
                metrics=_FakeArtifact(str(tmp_path / "metrics")),
                chunk_size=100,
                chunk_overlap=100,
            )
