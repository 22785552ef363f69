"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from docs_ingest.models import EntryKind, RawFile, TreeEntry


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


@pytest.fixture()
def make_entry() -> Callable[..., TreeEntry]:
    """Factory for blob entries with a plausible size and sha."""

    def _make(path: str, size: int | None = 1024, kind: EntryKind = EntryKind.BLOB) -> TreeEntry:
        return TreeEntry(path=path, kind=kind, size=size, object_id=hashlib.sha1(path.encode()).hexdigest())

    return _make


@pytest.fixture()
def make_file() -> Callable[..., RawFile]:
    """Factory for fetched files."""

    def _make(path: str, content: str, object_id: str = "a1b2c3d4e5f60718") -> RawFile:
        return RawFile(
            path=path,
            content=content,
            object_id=object_id,
            size=len(content.encode()),
            fetched_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            source_url=f"https://github.com/acme/widgets/blob/main/{path}",
        )

    return _make
