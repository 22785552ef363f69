"""KFP v2 pipeline — Repository documentation ingestion workflow.

This pipeline decomposes docs ingestion into two stages connected by KFP
Dataset artifacts:

    fetch (select → rank → fetch → normalise) → chunk

The resulting chunk Dataset is the hand-off to whatever embedding and
indexing workflow the host runs.

Compile
-------
    python -m pipelines.ingestion_pipeline --compile
"""

from kfp import compiler, dsl

from pipelines.components.chunk import chunk_documents
from pipelines.components.fetch import fetch_repository_docs


# ──────────────────────────────────────────────────────────────────────
# Pipeline definition
# ──────────────────────────────────────────────────────────────────────


@dsl.pipeline(
    name="docs-ingestion-pipeline",
    description=(
        "Repository docs ingestion: select and rank documentation files, "
        "fetch and normalise them, then split into linked chunks."
    ),
)
def docs_ingestion_pipeline(
    # ── Source ──────────────────────────────────────────────────────
    repository_url: str,
    branch: str = "main",
    max_files: int = 150,
    max_file_size: int = 1_000_000,
    fetch_concurrency: int = 8,
    request_timeout: int = 30,
    max_retries: int = 3,
    # ── Chunking ───────────────────────────────────────────────────
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
) -> None:
    """Two-step ingestion: fetch → chunk.

    Parameters
    ----------
    repository_url:
        ``https://github.com/<owner>/<repo>``.
    branch:
        Branch to ingest.
    max_files:
        Cap on ranked documentation files.
    max_file_size:
        Largest accepted file size in bytes.
    fetch_concurrency:
        Parallel content fetches.
    request_timeout:
        Per-request timeout in seconds.
    max_retries:
        Retry attempts for transient HTTP errors.
    chunk_size / chunk_overlap:
        Text chunking parameters.
    """
    # Step 1 — Select, rank, fetch and normalise
    fetch_task = fetch_repository_docs(
        repository_url=repository_url,
        branch=branch,
        max_files=max_files,
        max_file_size=max_file_size,
        fetch_concurrency=fetch_concurrency,
        request_timeout=request_timeout,
        max_retries=max_retries,
    )

    # Step 2 — Chunk with overlap
    chunk_documents(
        raw_files=fetch_task.outputs["raw_files"],
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
    )


# ──────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Docs ingestion pipeline")
    parser.add_argument(
        "--compile",
        action="store_true",
        help="Compile pipeline to YAML",
    )
    parser.add_argument(
        "--output",
        default="pipelines/compiled/docs_ingestion_pipeline.yaml",
        help="Output path for compiled YAML",
    )
    args = parser.parse_args()

    if args.compile:
        compiler.Compiler().compile(docs_ingestion_pipeline, args.output)
        print(f"Pipeline compiled → {args.output}")
