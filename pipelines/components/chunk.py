"""KFP v2 component — Chunk normalised documentation files.

Step 2 of the docs ingestion pipeline.  Reads the JSON-Lines Dataset
produced by ``fetch_repository_docs`` and splits each file into
overlapping, markdown-aware chunks linked to their neighbours.

Structured output contract (one JSON object per line)::

    {
      "id":       "docs/intro-md-a1b2c3d4-0",
      "content":  "<chunk text>",
      "metadata": {
        "filePath":           "docs/intro.md",
        "fileObjectId":       "a1b2c3d4...",
        "chunkIndex":         0,
        "totalChunksForFile": 3,
        "previousChunkId":    null,
        "nextChunkId":        "docs/intro-md-a1b2c3d4-1"
      }
    }

Local testing
-------------
    from pipelines.components.chunk import chunk_documents
    chunk_documents.python_func(
        raw_files=_FakeArtifact("/tmp/raw.jsonl"),
        chunks=_FakeArtifact("/tmp/chunks.jsonl"),
        metrics=_FakeArtifact("/tmp/metrics"),
    )
"""

from kfp import dsl


@dsl.component(
    base_image="python:3.11-slim",
    packages_to_install=["docs-ingest"],
)
def chunk_documents(
    raw_files: dsl.Input[dsl.Dataset],
    chunks: dsl.Output[dsl.Dataset],
    metrics: dsl.Output[dsl.Metrics],
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
) -> str:
    """Split normalised files into overlapping chunks.

    Parameters
    ----------
    raw_files:
        Input Dataset — JSON-Lines produced by ``fetch_repository_docs``.
    chunks:
        Output Dataset — JSON-Lines, one record per chunk (see module docstring).
    metrics:
        Output Metrics artifact with chunking statistics.
    chunk_size:
        Maximum character length of each chunk.
    chunk_overlap:
        Number of overlapping characters between consecutive chunks.

    Returns
    -------
    str
        Summary, e.g. ``"Produced 256 chunks from 42 files"``.
    """
    import json
    import logging
    from pathlib import Path

    from pydantic import ValidationError

    from docs_ingest.ingestion.chunker import chunk
    from docs_ingest.models import RawFile

    logging.basicConfig(level=logging.INFO)
    log = logging.getLogger("chunk_documents")

    # ── validate params ───────────────────────────────────────────
    if chunk_overlap >= chunk_size:
        raise ValueError(
            f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})"
        )

    # ── read files ────────────────────────────────────────────────
    files: list[RawFile] = []
    with open(raw_files.path) as fh:
        for lineno, line in enumerate(fh, 1):
            line = line.strip()
            if not line:
                continue
            try:
                files.append(RawFile.model_validate_json(line))
            except ValidationError as exc:
                log.warning("Skipping malformed line %d: %s", lineno, exc)

    log.info("Read %d files from input artifact", len(files))

    # ── chunk ─────────────────────────────────────────────────────
    produced = chunk(files, chunk_size=chunk_size, chunk_overlap=chunk_overlap)

    # ── write output ──────────────────────────────────────────────
    out_path = Path(chunks.path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w") as fh:
        for c in produced:
            fh.write(json.dumps(c.to_record(), ensure_ascii=False) + "\n")

    # artifact metadata
    total_chars = sum(len(c.content) for c in produced)
    chunks.metadata["num_chunks"] = len(produced)
    chunks.metadata["num_files"] = len(files)
    chunks.metadata["chunk_size"] = chunk_size
    chunks.metadata["chunk_overlap"] = chunk_overlap
    chunks.metadata["total_chars"] = total_chars

    # KFP Metrics
    metrics.log_metric("chunks_produced", len(produced))
    metrics.log_metric("files_processed", len(files))
    metrics.log_metric("avg_chunk_chars", total_chars / len(produced) if produced else 0)

    msg = f"Produced {len(produced)} chunks from {len(files)} files"
    log.info(msg)
    return msg
