"""Structure-aware text chunking with stable ids and sibling links."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from langchain_text_splitters import RecursiveCharacterTextSplitter

from docs_ingest.config import settings
from docs_ingest.models import Chunk, ChunkMetadata, RawFile

logger = logging.getLogger(__name__)

# Coarse → fine.  Each separator is kept at the start of the window that
# follows it, so headings stay with their section and fences open a window.
MARKDOWN_SEPARATORS: list[str] = [
    "\n```",
    "\n## ",
    "\n### ",
    "\n#### ",
    "\n\n",
    "\n",
    ". ",
    " ",
    "",
]

_UNSAFE_PATH_CHARS = re.compile(r"[^a-zA-Z0-9/-]")


def make_chunk_id(file_path: str, object_id: str, index: int) -> str:
    """Return the deterministic id of chunk *index* of a file version.

    Format: ``{safe_path}-{object_id[:8]}-{index}``, e.g.
    ``docs/intro-md-a1b2c3d4-0``.

    The mapping is lossy: ``a_b.md`` and ``a-b.md`` with identical content
    (same blob SHA) yield the same ids.  :func:`chunk` logs such collisions.
    """
    safe_path = _UNSAFE_PATH_CHARS.sub("-", file_path)
    return f"{safe_path}-{object_id[:8]}-{index}"


def build_splitter(
    chunk_size: int = settings.chunk_size,
    chunk_overlap: int = settings.chunk_overlap,
) -> RecursiveCharacterTextSplitter:
    """Return the markdown-aware recursive splitter.

    Raises
    ------
    ValueError
        If ``chunk_overlap`` is not smaller than ``chunk_size``.
    """
    if chunk_overlap >= chunk_size:
        raise ValueError(
            f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})"
        )
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
        separators=MARKDOWN_SEPARATORS,
        keep_separator="start",
    )


def chunk_file(file: RawFile, splitter: RecursiveCharacterTextSplitter) -> list[Chunk]:
    """Split one file into linked chunks."""
    windows = splitter.split_text(file.content)
    total = len(windows)
    ids = [make_chunk_id(file.path, file.object_id, i) for i in range(total)]

    return [
        Chunk(
            id=ids[i],
            content=window,
            metadata=ChunkMetadata(
                file_path=file.path,
                file_object_id=file.object_id,
                chunk_index=i,
                total_chunks_for_file=total,
                previous_chunk_id=ids[i - 1] if i > 0 else None,
                next_chunk_id=ids[i + 1] if i < total - 1 else None,
            ),
        )
        for i, window in enumerate(windows)
    ]


def chunk(
    files: Iterable[RawFile],
    *,
    chunk_size: int = settings.chunk_size,
    chunk_overlap: int = settings.chunk_overlap,
) -> list[Chunk]:
    """Split *files* into overlapping chunks for embedding.

    Parameters
    ----------
    files:
        Normalised documentation files.
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of characters shared by consecutive chunks of a file.

    Returns
    -------
    list[Chunk]
        Flat list; file order follows *files*, chunk order follows the split.
    """
    splitter = build_splitter(chunk_size, chunk_overlap)
    chunks: list[Chunk] = []
    seen: dict[str, str] = {}
    n_files = 0
    for f in files:
        for c in chunk_file(f, splitter):
            if c.id in seen:
                logger.warning("Duplicate chunk id %s from %s and %s", c.id, seen[c.id], f.path)
            else:
                seen[c.id] = f.path
            chunks.append(c)
        n_files += 1
    logger.info("Produced %d chunks from %d files", len(chunks), n_files)
    return chunks
