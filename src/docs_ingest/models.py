"""Domain models flowing between the ingestion stages.

Every model is frozen: each stage builds new instances and never mutates
its input.  Serialised with ``by_alias=True`` the models use the camelCase
field names of the outbound chunk contract (``filePath``, ``chunkIndex``,
``previousChunkId`` …), which downstream indexes depend on.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class EntryKind(str, Enum):
    """Kind of a repository tree entry."""

    BLOB = "blob"
    TREE = "tree"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> EntryKind:
        """Map a raw provider type (``blob``, ``tree``, ``commit`` …) to a kind."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class RepositoryRef(BaseModel):
    """Identifies one branch of a hosted repository."""

    model_config = _MODEL_CONFIG

    owner: str
    repo: str
    branch: str = "main"

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}@{self.branch}"


class TreeEntry(BaseModel):
    """One entry of a repository file listing.

    Attributes
    ----------
    path:
        Repository-relative, ``/``-separated path.
    kind:
        ``blob``, ``tree`` or ``other``.
    size:
        Size in bytes; ``None`` when the provider does not report one
        (directories, submodules).
    object_id:
        Content-addressed identifier (the git blob SHA).
    """

    model_config = _MODEL_CONFIG

    path: str
    kind: EntryKind = EntryKind.BLOB
    size: int | None = None
    object_id: str = ""


class ScoredCandidate(BaseModel):
    """A candidate entry together with its priority score."""

    model_config = _MODEL_CONFIG

    entry: TreeEntry
    score: int
    matched_rules: tuple[str, ...] = ()

    @property
    def path(self) -> str:
        return self.entry.path


class RawFile(BaseModel):
    """A fetched document.

    Attributes
    ----------
    path:
        Repository-relative path of the file.
    content:
        Full decoded text.
    object_id:
        Content-addressed identifier of the fetched version.
    size:
        Size in bytes as reported by the provider.
    fetched_at:
        UTC timestamp of the fetch.
    source_url:
        Browsable URL of the file (empty when unknown).
    """

    model_config = _MODEL_CONFIG

    path: str
    content: str
    object_id: str
    size: int = 0
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source_url: str = ""

    def with_content(self, content: str) -> RawFile:
        """Return a copy carrying *content*; identity fields are untouched."""
        return self.model_copy(update={"content": content})


class ChunkMetadata(BaseModel):
    """Provenance and sibling links of a chunk.

    Attributes
    ----------
    file_path:
        Path of the source file.
    file_object_id:
        Object id of the source file version the chunk was cut from.
    chunk_index:
        Zero-based ordinal of the chunk within its file.
    total_chunks_for_file:
        Number of chunks the file produced.
    previous_chunk_id / next_chunk_id:
        Ids of the adjacent chunks of the same file, ``None`` at the ends.
    """

    model_config = _MODEL_CONFIG

    file_path: str
    file_object_id: str
    chunk_index: int
    total_chunks_for_file: int
    previous_chunk_id: str | None = None
    next_chunk_id: str | None = None


class Chunk(BaseModel):
    """The unit handed to embedding."""

    model_config = _MODEL_CONFIG

    id: str
    content: str
    metadata: ChunkMetadata

    def to_record(self) -> dict:
        """Serialise using the outbound (camelCase) contract."""
        return self.model_dump(by_alias=True, mode="json")
