"""End-to-end ingestion for one repository branch.

    tree → select → rank → fetch → normalize → chunk

Only an invalid repository URL or a failure to list the tree aborts a run;
individual files that cannot be fetched are omitted and logged.

Usage::

    from docs_ingest.ingestion.pipeline import ingest_repository

    result = ingest_repository("https://github.com/facebook/react")
    print(result.stats)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from docs_ingest.config import Settings, settings
from docs_ingest.github.client import GitHubClient, parse_repository_url
from docs_ingest.ingestion.chunker import chunk
from docs_ingest.ingestion.normalizer import normalize
from docs_ingest.ingestion.ranker import Ranker
from docs_ingest.ingestion.selector import select_candidates
from docs_ingest.models import Chunk, RepositoryRef

logger = logging.getLogger(__name__)


@dataclass
class IngestionStats:
    """Per-stage counts of one run."""

    tree_entries: int = 0
    candidates: int = 0
    ranked: int = 0
    dropped_by_limit: int = 0
    fetched: int = 0
    fetch_failures: int = 0
    normalized: int = 0
    chunks: int = 0

    def to_dict(self) -> dict[str, int]:
        return dict(self.__dict__)


@dataclass
class IngestionResult:
    """Chunks produced for a repository together with run statistics."""

    repository: RepositoryRef
    chunks: list[Chunk] = field(default_factory=list)
    stats: IngestionStats = field(default_factory=IngestionStats)


class IngestionPipeline:
    """Wire the GitHub transport to the four ingestion stages.

    Parameters
    ----------
    client:
        Transport; defaults to a :class:`GitHubClient` built from *config*.
    ranker:
        Priority ranker; defaults to :meth:`Ranker.from_settings`.
    config:
        Settings supplying size limits, normalization and chunking options.
    """

    def __init__(
        self,
        client: GitHubClient | None = None,
        *,
        ranker: Ranker | None = None,
        config: Settings = settings,
    ) -> None:
        self._client = client or GitHubClient(
            config.github_token,
            api_url=config.github_api_url,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            max_workers=config.fetch_concurrency,
        )
        self._ranker = ranker or Ranker.from_settings(config)
        self._config = config

    def run(self, repository_url: str, branch: str = "main") -> IngestionResult:
        """Ingest the documentation of *repository_url* at *branch*.

        Raises
        ------
        InvalidRepositoryError
            If *repository_url* is not a GitHub repository URL.
        RepositoryFetchError
            If the repository tree cannot be listed.
        """
        ref = parse_repository_url(repository_url, branch)
        stats = IngestionStats()

        tree = self._client.fetch_tree(ref)
        stats.tree_entries = len(tree)

        candidates = select_candidates(
            tree,
            max_file_size=self._config.max_file_size,
            extensions=self._config.doc_extensions,
        )
        stats.candidates = len(candidates)

        scored = self._ranker.scored(candidates)
        ranked = self._ranker.top(scored)
        stats.ranked = len(ranked)
        stats.dropped_by_limit = len(scored) - len(ranked)

        raw_files = self._client.fetch_files([c.entry for c in ranked], ref)
        stats.fetched = len(raw_files)
        stats.fetch_failures = len(ranked) - len(raw_files)

        cleaned = normalize(
            raw_files,
            low_value_segments=self._config.low_value_segments,
            placeholder_threshold=self._config.placeholder_threshold,
        )
        stats.normalized = len(cleaned)

        chunks = chunk(
            cleaned,
            chunk_size=self._config.chunk_size,
            chunk_overlap=self._config.chunk_overlap,
        )
        stats.chunks = len(chunks)

        logger.info("Ingested %s: %s", ref.slug, stats.to_dict())
        return IngestionResult(repository=ref, chunks=chunks, stats=stats)


def ingest_repository(repository_url: str, branch: str = "main") -> IngestionResult:
    """Run :class:`IngestionPipeline` with default settings."""
    return IngestionPipeline().run(repository_url, branch)
