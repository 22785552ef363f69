"""
GitHub transport — list a repository tree and fetch raw file contents.

The ingestion core never talks to the network; everything it needs from
the hosting provider goes through :class:`GitHubClient`.
"""

from docs_ingest.github.client import (
    FileFetchError,
    GitHubClient,
    InvalidRepositoryError,
    RepositoryFetchError,
    parse_repository_url,
)

__all__ = [
    "FileFetchError",
    "GitHubClient",
    "InvalidRepositoryError",
    "RepositoryFetchError",
    "parse_repository_url",
]
