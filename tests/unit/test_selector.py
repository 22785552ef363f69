"""Unit tests for candidate selection."""

from __future__ import annotations

import pytest

from docs_ingest.ingestion.selector import is_candidate, select_candidates
from docs_ingest.models import EntryKind, TreeEntry


class TestIsCandidate:
    def test_markdown_blob_is_kept(self, make_entry) -> None:
        assert is_candidate(make_entry("docs/intro.md"))

    def test_mdx_and_uppercase_extensions(self, make_entry) -> None:
        assert is_candidate(make_entry("docs/page.mdx"))
        assert is_candidate(make_entry("README.MD"))

    @pytest.mark.parametrize("kind", [EntryKind.TREE, EntryKind.OTHER])
    def test_non_blob_is_dropped(self, make_entry, kind: EntryKind) -> None:
        assert not is_candidate(make_entry("docs.md", kind=kind))

    @pytest.mark.parametrize("size", [None, 0])
    def test_missing_or_empty_size_is_dropped(self, make_entry, size: int | None) -> None:
        assert not is_candidate(make_entry("docs/intro.md", size=size))

    def test_size_boundary(self, make_entry) -> None:
        assert is_candidate(make_entry("a.md", size=1_000_000))
        assert not is_candidate(make_entry("a.md", size=1_000_001))

    @pytest.mark.parametrize("path", ["src/index.ts", "docs/readme.txt", "docs/md", "notes.markdown"])
    def test_non_doc_extension_is_dropped(self, make_entry, path: str) -> None:
        assert not is_candidate(make_entry(path))

    def test_custom_limits(self, make_entry) -> None:
        entry = make_entry("guide.rst", size=500)
        assert is_candidate(entry, max_file_size=500, extensions=[".rst"])
        assert not is_candidate(entry, max_file_size=499, extensions=[".rst"])


class TestSelectCandidates:
    def test_preserves_input_order(self, make_entry) -> None:
        tree = [
            make_entry("z.md"),
            make_entry("src", kind=EntryKind.TREE, size=None),
            make_entry("a.md"),
            make_entry("m.mdx"),
            make_entry("big.md", size=2_000_000),
        ]
        assert [e.path for e in select_candidates(tree)] == ["z.md", "a.md", "m.mdx"]

    def test_does_not_raise_on_malformed_entries(self) -> None:
        tree = [TreeEntry(path="", size=10), TreeEntry(path="x.md", size=None)]
        assert select_candidates(tree) == []

    def test_empty_input(self) -> None:
        assert select_candidates([]) == []
