"""Importance ranking — score candidates and keep the most valuable ones.

Scoring for one path::

    hard-excluded segment?  -> exclude_floor (stop)
    + sum of every matching PriorityRule weight
    - low_signal_penalty     (once, if any low-signal segment)
    - depth_penalty * depth

Entries at or below the exclusion floor are dropped; the rest are sorted
by descending score with ties broken by ascending path, then truncated to
``max_files``.

Usage::

    from docs_ingest.ingestion.ranker import Ranker

    ranker = Ranker.from_settings()
    for c in ranker.scored(candidates)[:10]:
        print(c.score, c.path, c.matched_rules)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from docs_ingest.config import Settings, settings
from docs_ingest.ingestion.rules import DEFAULT_RULES, PathInfo, PriorityRule, with_weights
from docs_ingest.models import ScoredCandidate, TreeEntry

logger = logging.getLogger(__name__)

EXCLUDE_FLOOR = -1000


class Ranker:
    """Rule-table driven priority scorer.

    Parameters
    ----------
    rules:
        Ordered rule table; every matching rule adds its weight.
    hard_exclude_dirs:
        Segments that force exclusion regardless of any other signal.
    low_signal_dirs:
        Segments that deprioritise a path (tests, fixtures, CI config).
    low_signal_penalty:
        Subtracted once when any low-signal segment is present.
    depth_penalty:
        Subtracted per path segment.
    max_files:
        Capacity of the ranked output.
    """

    def __init__(
        self,
        rules: Sequence[PriorityRule] = DEFAULT_RULES,
        *,
        hard_exclude_dirs: Iterable[str] = ("node_modules", "vendor", "dist", "build"),
        low_signal_dirs: Iterable[str] = (
            "test",
            "tests",
            "__tests__",
            "fixtures",
            "mocks",
            ".github",
            ".circleci",
            ".gitlab",
        ),
        low_signal_penalty: int = 500,
        depth_penalty: int = 5,
        max_files: int = 150,
    ) -> None:
        if max_files < 0:
            raise ValueError(f"max_files must be >= 0, got {max_files}")
        self.rules = tuple(rules)
        self.hard_exclude_dirs = frozenset(d.lower() for d in hard_exclude_dirs)
        self.low_signal_dirs = frozenset(d.lower() for d in low_signal_dirs)
        self.low_signal_penalty = low_signal_penalty
        self.depth_penalty = depth_penalty
        self.max_files = max_files

    @classmethod
    def from_settings(cls, config: Settings = settings) -> Ranker:
        """Build a ranker from :class:`~docs_ingest.config.Settings`."""
        return cls(
            with_weights(DEFAULT_RULES, config.rule_weights),
            hard_exclude_dirs=config.hard_exclude_dirs,
            low_signal_dirs=config.low_signal_dirs,
            low_signal_penalty=config.low_signal_penalty,
            depth_penalty=config.depth_penalty,
            max_files=config.max_files,
        )

    # -- scoring --------------------------------------------------------------

    def score(self, entry: TreeEntry) -> ScoredCandidate:
        """Score a single entry."""
        info = PathInfo.parse(entry.path)

        if any(s in self.hard_exclude_dirs for s in info.segments):
            return ScoredCandidate(entry=entry, score=EXCLUDE_FLOOR)

        matched = tuple(r for r in self.rules if r.matches(info))
        score = sum(r.weight for r in matched)
        if any(s in self.low_signal_dirs for s in info.segments):
            score -= self.low_signal_penalty
        score -= self.depth_penalty * info.depth

        return ScoredCandidate(entry=entry, score=score, matched_rules=tuple(r.name for r in matched))

    def scored(self, entries: Iterable[TreeEntry]) -> list[ScoredCandidate]:
        """Score *entries*, drop excluded ones and sort best-first (untruncated)."""
        kept = [c for c in map(self.score, entries) if c.score > EXCLUDE_FLOOR]
        kept.sort(key=lambda c: (-c.score, c.path))
        return kept

    # -- public API -----------------------------------------------------------

    def top(self, ranked: Sequence[ScoredCandidate]) -> list[ScoredCandidate]:
        """Truncate an already sorted list to ``max_files``.

        Truncation is a capacity control: the number of dropped entries is
        logged at INFO level and nothing is raised.
        """
        ranked = list(ranked)
        if len(ranked) > self.max_files:
            logger.info(
                "Ranked %d candidates; keeping top %d, dropping %d by priority",
                len(ranked),
                self.max_files,
                len(ranked) - self.max_files,
            )
            ranked = ranked[: self.max_files]
        return ranked

    def rank(self, entries: Iterable[TreeEntry]) -> list[TreeEntry]:
        """Return at most ``max_files`` entries, highest priority first."""
        return [c.entry for c in self.top(self.scored(entries))]


def rank(entries: Iterable[TreeEntry], *, ranker: Ranker | None = None) -> list[TreeEntry]:
    """Rank *entries* with *ranker* (default: built from the global settings)."""
    return (ranker or Ranker.from_settings()).rank(entries)
