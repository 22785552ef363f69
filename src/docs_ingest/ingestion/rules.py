"""Priority rules used to score documentation paths.

A rule is a named ``(weight, predicate)`` pair evaluated against a
pre-parsed :class:`PathInfo`.  Rules are additive: every matching rule
contributes its weight, so a file inside ``packages/foo/docs/`` earns both
the package and the docs bonuses.  New heuristics are added by appending
to :data:`DEFAULT_RULES`; the scoring engine in
:mod:`docs_ingest.ingestion.ranker` never changes.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class PathInfo:
    """Lowercased view of a path, split for rule evaluation.

    Attributes
    ----------
    path:
        Full lowercased path.
    segments:
        All ``/``-delimited segments, filename included.
    directories:
        Segments above the filename.
    filename:
        Last segment.
    stem:
        Filename up to its first ``.``.
    """

    path: str
    segments: tuple[str, ...]
    directories: tuple[str, ...]
    filename: str
    stem: str

    @classmethod
    def parse(cls, path: str) -> PathInfo:
        lowered = path.lower().strip("/")
        segments = tuple(s for s in lowered.split("/") if s)
        filename = segments[-1] if segments else ""
        return cls(
            path=lowered,
            segments=segments,
            directories=segments[:-1],
            filename=filename,
            stem=filename.split(".", 1)[0],
        )

    @property
    def depth(self) -> int:
        return len(self.segments)

    @property
    def stems(self) -> tuple[str, ...]:
        """Directory segments plus the filename stem."""
        return (*self.directories, self.stem)

    @property
    def is_readme(self) -> bool:
        return self.filename.startswith("readme")


@dataclass(frozen=True)
class PriorityRule:
    """A named scoring heuristic."""

    name: str
    weight: int
    predicate: Callable[[PathInfo], bool]

    def matches(self, info: PathInfo) -> bool:
        return self.predicate(info)


DOCS_DIRS = frozenset({"docs", "documentation", "doc"})
API_DIRS = frozenset({"api", "interfaces", "modules", "reference"})
GUIDE_DIRS = frozenset({"guide", "guides", "tutorial", "tutorials", "concepts"})
EXAMPLE_DIRS = frozenset({"example", "examples"})
BLOG_DIRS = frozenset({"blog", "blogs", "article", "articles", "posts"})

_GETTING_STARTED = re.compile(r"getting[-_ ]?started|quick[-_ ]?start|installation")
_MIGRATION = re.compile(r"migrat|upgrad")
_NUMBERED = re.compile(r"\d{2,}[-_]")
_COMMUNITY = re.compile(r"contributing|license|code[-_]of[-_]conduct|security")


def _in_dirs(names: frozenset[str]) -> Callable[[PathInfo], bool]:
    return lambda info: any(d in names for d in info.directories)


def _under_packages(info: PathInfo) -> bool:
    return "packages" in info.directories


def _package_docs(info: PathInfo) -> bool:
    if info.is_readme or "packages" not in info.directories:
        return False
    after_packages = info.directories[info.directories.index("packages") + 1 :]
    return any(d in DOCS_DIRS for d in after_packages)


DEFAULT_RULES: tuple[PriorityRule, ...] = (
    PriorityRule("root_readme", 1500, lambda i: i.depth == 1 and i.is_readme),
    PriorityRule("getting_started", 950, lambda i: bool(_GETTING_STARTED.search(i.path))),
    PriorityRule("package_readme", 900, lambda i: i.is_readme and _under_packages(i)),
    PriorityRule("docs_directory", 800, _in_dirs(DOCS_DIRS)),
    PriorityRule("package_docs", 750, _package_docs),
    PriorityRule("migration_guide", 700, lambda i: bool(_MIGRATION.search(i.path))),
    PriorityRule("api_reference", 650, _in_dirs(API_DIRS)),
    PriorityRule("numbered_page", 625, lambda i: any(_NUMBERED.match(s) for s in i.segments)),
    PriorityRule("guide_directory", 600, _in_dirs(GUIDE_DIRS)),
    PriorityRule("examples_directory", 300, _in_dirs(EXAMPLE_DIRS)),
    PriorityRule("blog_directory", 150, _in_dirs(BLOG_DIRS)),
    PriorityRule(
        "changelog_or_errors", 100, lambda i: any(s in ("changelog", "errors") for s in i.stems)
    ),
    PriorityRule("community_file", 50, lambda i: bool(_COMMUNITY.search(i.path))),
)


def with_weights(
    rules: Iterable[PriorityRule], overrides: Mapping[str, int]
) -> tuple[PriorityRule, ...]:
    """Return *rules* with weights replaced by name from *overrides*.

    Raises
    ------
    ValueError
        If an override names a rule that does not exist.
    """
    rules = tuple(rules)
    unknown = set(overrides) - {r.name for r in rules}
    if unknown:
        raise ValueError(f"Unknown priority rule(s): {', '.join(sorted(unknown))}")
    return tuple(
        replace(r, weight=overrides[r.name]) if r.name in overrides else r for r in rules
    )
