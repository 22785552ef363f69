"""Content normalization — clean markdown without corrupting its structure.

Two passes:

1. A global text pass (line endings, zero-width characters, ``<br>`` and
   ``<img>`` markup, runs of blank lines).
2. A line pass driven by :class:`LineMode`.  Fenced code passes through
   verbatim, table rows and headings are only right-trimmed, and every
   other line has runs of 3+ spaces collapsed.

Files under test/fixture/mock directories and lorem-ipsum stubs are
dropped before cleaning.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from enum import Enum

from docs_ingest.config import settings
from docs_ingest.models import RawFile

logger = logging.getLogger(__name__)

_LINE_ENDINGS = re.compile(r"\r\n?")
_ZERO_WIDTH = re.compile(r"[\u200b-\u200d\ufeff]")
_BR_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_IMG_TAG = re.compile(r"<img[^>]*>", re.IGNORECASE)
_EXCESS_NEWLINES = re.compile(r"\n{4,}")
_MULTI_SPACE = re.compile(r" {3,}")

CODE_FENCE = re.compile(r"^\s*```[\w-]*\s*$")
TABLE_ROW = re.compile(r"^\s*\|.*\|\s*$")
HEADING = re.compile(r"^#{1,6}\s+")

PLACEHOLDER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"lorem ipsum", re.IGNORECASE),
    re.compile(r"dolor sit amet", re.IGNORECASE),
    re.compile(r"consectetur adipiscing", re.IGNORECASE),
    re.compile(r"sed do eiusmod", re.IGNORECASE),
    re.compile(r"ut labore et dolore", re.IGNORECASE),
)


class LineMode(Enum):
    """Where the line scanner currently is."""

    PLAIN = "plain"
    CODE = "code"
    TABLE = "table"


# ---------------------------------------------------------------------------
# Exclusion predicates
# ---------------------------------------------------------------------------


def is_low_value_path(
    path: str, segments: Iterable[str] = tuple(settings.low_value_segments)
) -> bool:
    """Return ``True`` when a directory of *path* is a test/fixture/mock dir."""
    wanted = {s.lower() for s in segments}
    directories = path.lower().split("/")[:-1]
    return any(d in wanted for d in directories)


def is_placeholder(content: str, threshold: int = settings.placeholder_threshold) -> bool:
    """Return ``True`` when at least *threshold* distinct placeholder patterns match.

    A single hit is treated as coincidental so that legitimate text quoting
    one stock phrase is kept.
    """
    hits = 0
    for pattern in PLACEHOLDER_PATTERNS:
        if pattern.search(content):
            hits += 1
            if hits >= threshold:
                return True
    return False


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------


def _normalize_text(text: str) -> str:
    text = _LINE_ENDINGS.sub("\n", text)
    text = _ZERO_WIDTH.sub("", text)
    text = _BR_TAG.sub(" ", text)
    text = _IMG_TAG.sub("", text)
    return _EXCESS_NEWLINES.sub("\n\n", text)


def _clean_line(line: str, mode: LineMode) -> tuple[str, LineMode]:
    """Clean one line and return it with the mode for the next line."""
    if CODE_FENCE.match(line):
        next_mode = LineMode.PLAIN if mode is LineMode.CODE else LineMode.CODE
        return line.rstrip(), next_mode

    if mode is LineMode.CODE:
        return line, mode

    if TABLE_ROW.match(line):
        return line.rstrip(), LineMode.TABLE

    if HEADING.match(line):
        return line.rstrip(), LineMode.PLAIN

    return _MULTI_SPACE.sub(" ", line).rstrip(), LineMode.PLAIN


def clean_content(text: str) -> str:
    """Normalise markdown *text*, keeping code blocks, tables and headings intact."""
    mode = LineMode.PLAIN
    output: list[str] = []
    for line in _normalize_text(text).split("\n"):
        cleaned, mode = _clean_line(line, mode)
        output.append(cleaned)
    return "\n".join(output).rstrip()


def normalize(
    files: Iterable[RawFile],
    *,
    low_value_segments: Sequence[str] = tuple(settings.low_value_segments),
    placeholder_threshold: int = settings.placeholder_threshold,
) -> list[RawFile]:
    """Drop low-value files and clean the content of the rest.

    Parameters
    ----------
    files:
        Fetched files.
    low_value_segments:
        Directory names whose files are never indexed.
    placeholder_threshold:
        Number of distinct placeholder patterns that marks a stub document.

    Returns
    -------
    list[RawFile]
        New file objects with cleaned content, input order preserved.
    """
    cleaned: list[RawFile] = []
    for f in files:
        if is_low_value_path(f.path, low_value_segments):
            logger.debug("Skipping %s: low-value path", f.path)
            continue
        if is_placeholder(f.content, placeholder_threshold):
            logger.debug("Skipping %s: placeholder content", f.path)
            continue
        cleaned.append(f.with_content(clean_content(f.content)))
    return cleaned
