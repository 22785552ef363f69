"""
Ingestion — turn a repository listing into retrieval-ready chunks.

Stages run strictly in order, each a pure function over immutable models:

    select_candidates → rank → (fetch) → normalize → chunk

Public surface
--------------
- :func:`select_candidates` — keep documentation blobs of acceptable size.
- :class:`Ranker` / :func:`rank` — additive rule scoring and truncation.
- :func:`normalize` — drop stub files, clean markdown structure-aware.
- :func:`chunk` — overlapping markdown-aware windows with sibling links.
- :class:`IngestionPipeline` — the stages wired to the GitHub transport.
"""

from docs_ingest.ingestion.chunker import chunk, make_chunk_id
from docs_ingest.ingestion.normalizer import clean_content, normalize
from docs_ingest.ingestion.pipeline import IngestionPipeline, IngestionResult, IngestionStats, ingest_repository
from docs_ingest.ingestion.ranker import Ranker, rank
from docs_ingest.ingestion.rules import DEFAULT_RULES, PriorityRule
from docs_ingest.ingestion.selector import select_candidates

__all__ = [
    "DEFAULT_RULES",
    "IngestionPipeline",
    "IngestionResult",
    "IngestionStats",
    "PriorityRule",
    "Ranker",
    "chunk",
    "clean_content",
    "ingest_repository",
    "make_chunk_id",
    "normalize",
    "rank",
    "select_candidates",
]
