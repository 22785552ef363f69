"""Candidate selection — reduce a repository listing to documentation files."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from docs_ingest.config import settings
from docs_ingest.models import EntryKind, TreeEntry

logger = logging.getLogger(__name__)


def is_candidate(
    entry: TreeEntry,
    *,
    max_file_size: int = settings.max_file_size,
    extensions: Sequence[str] = tuple(settings.doc_extensions),
) -> bool:
    """Return ``True`` when *entry* is an indexable documentation file."""
    if entry.kind is not EntryKind.BLOB:
        return False
    if not entry.size or entry.size > max_file_size:
        return False
    path = entry.path.lower()
    return any(path.endswith(ext.lower()) for ext in extensions)


def select_candidates(
    tree: Iterable[TreeEntry],
    *,
    max_file_size: int = settings.max_file_size,
    extensions: Sequence[str] = tuple(settings.doc_extensions),
) -> list[TreeEntry]:
    """Filter *tree* down to documentation blobs, preserving input order.

    Parameters
    ----------
    tree:
        Flat repository listing.
    max_file_size:
        Largest accepted size in bytes (inclusive).
    extensions:
        Accepted path suffixes, compared case-insensitively.

    Returns
    -------
    list[TreeEntry]
        Surviving entries.  Directories, empty or oversized files and
        non-documentation files are dropped silently.
    """
    entries = list(tree)
    candidates = [
        e for e in entries if is_candidate(e, max_file_size=max_file_size, extensions=extensions)
    ]
    logger.debug("Selected %d of %d tree entries", len(candidates), len(entries))
    return candidates
