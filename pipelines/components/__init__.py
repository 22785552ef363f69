"""KFP v2 components — each file exports one @dsl.component."""

from pipelines.components.chunk import chunk_documents
from pipelines.components.fetch import fetch_repository_docs

__all__ = [
    "chunk_documents",
    "fetch_repository_docs",
]
