"""GitHub REST transport — repository tree listing and file contents.

Usage::

    from docs_ingest.github import GitHubClient, parse_repository_url

    ref    = parse_repository_url("https://github.com/vercel/next.js", branch="canary")
    client = GitHubClient()
    tree   = client.fetch_tree(ref)
    files  = client.fetch_files(tree[:10], ref)
"""

from __future__ import annotations

import base64
import binascii
import logging
import threading
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import requests
from pydantic import ValidationError

from docs_ingest.config import settings
from docs_ingest.models import EntryKind, RawFile, RepositoryRef, TreeEntry

logger = logging.getLogger(__name__)

GITHUB_PREFIX = "https://github.com/"
_RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


class InvalidRepositoryError(ValueError):
    """Raised when a repository URL cannot be parsed."""


class RepositoryFetchError(RuntimeError):
    """Raised when the tree of a repository branch cannot be listed."""

    def __init__(self, ref: RepositoryRef, cause: Exception) -> None:
        super().__init__(f"Failed to fetch tree for {ref.slug}: {cause}")
        self.ref = ref
        self.cause = cause


class FileFetchError(RuntimeError):
    """Raised when one file's content cannot be fetched or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def parse_repository_url(url: str, branch: str = "main") -> RepositoryRef:
    """Parse ``https://github.com/<owner>/<repo>`` into a :class:`RepositoryRef`.

    A trailing slash or ``.git`` suffix is tolerated.

    Raises
    ------
    InvalidRepositoryError
        If the URL is not a GitHub repository URL or the branch is empty.
    """
    if not url.startswith(GITHUB_PREFIX):
        raise InvalidRepositoryError(f"URL must start with {GITHUB_PREFIX!r}, got {url!r}")
    if not branch:
        raise InvalidRepositoryError("Branch must not be empty")

    repo_path = url[len(GITHUB_PREFIX) :].rstrip("/")
    if repo_path.endswith(".git"):
        repo_path = repo_path[: -len(".git")]
    parts = repo_path.split("/")
    if len(parts) != 2 or not all(parts):
        raise InvalidRepositoryError(f'Invalid format. Expected "owner/repo", got {repo_path!r}')
    return RepositoryRef(owner=parts[0], repo=parts[1], branch=branch)


class GitHubClient:
    """Thin ``requests``-based client for the endpoints the pipeline needs.

    Parameters
    ----------
    token:
        Optional access token; sent as ``Authorization: Bearer <token>``.
    api_url:
        REST API root (override for GitHub Enterprise).
    timeout:
        Per-request timeout in seconds.
    max_retries:
        Attempts per request for transient failures (network errors, 429,
        5xx).  Waits ``2 ** attempt`` seconds between attempts.
    max_workers:
        Upper bound on concurrent content fetches.
    session:
        Session shared by every worker thread, so it must be safe for
        concurrent use.  When omitted, each worker thread lazily gets its
        own ``requests.Session``.
    """

    def __init__(
        self,
        token: str = settings.github_token,
        *,
        api_url: str = settings.github_api_url,
        timeout: int = settings.request_timeout,
        max_retries: int = settings.max_retries,
        max_workers: int = settings.fetch_concurrency,
        session: requests.Session | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.max_workers = max(1, max_workers)
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._shared_session = session
        if session is not None:
            session.headers.update(self._headers)
        self._local = threading.local()

    # -- public API -----------------------------------------------------------

    def fetch_tree(self, ref: RepositoryRef) -> list[TreeEntry]:
        """List every entry of *ref*'s branch recursively.

        Raises
        ------
        RepositoryFetchError
            On any network or HTTP failure; the branch is resolved by the
            API, so an unknown branch surfaces here as well.
        """
        url = f"{self.api_url}/repos/{ref.owner}/{ref.repo}/git/trees/{quote(ref.branch, safe='')}"
        try:
            data = self._get_json(url, params={"recursive": "1"})
        except (requests.RequestException, ValueError) as exc:
            raise RepositoryFetchError(ref, exc) from exc

        if data.get("truncated"):
            logger.warning("Tree listing for %s was truncated by the API", ref.slug)

        entries = [
            TreeEntry(
                path=item["path"],
                kind=EntryKind.parse(item.get("type")),
                size=item.get("size"),
                object_id=item.get("sha", ""),
            )
            for item in data.get("tree", [])
            if item.get("path")
        ]
        logger.info("Listed %d tree entries for %s", len(entries), ref.slug)
        return entries

    def fetch_file(self, entry: TreeEntry, ref: RepositoryRef) -> RawFile:
        """Fetch and decode the content of one blob.

        Raises
        ------
        FileFetchError
            If the request fails or the payload is not well-formed base64
            UTF-8 content.
        """
        url = f"{self.api_url}/repos/{ref.owner}/{ref.repo}/contents/{quote(entry.path)}"
        try:
            data = self._get_json(url, params={"ref": ref.branch})
        except (requests.RequestException, ValueError) as exc:
            raise FileFetchError(entry.path, str(exc)) from exc

        if not isinstance(data, dict) or "content" not in data:
            raise FileFetchError(entry.path, "response has no content field")
        if data.get("encoding") != "base64":
            raise FileFetchError(entry.path, f"unexpected encoding {data.get('encoding')!r}")
        try:
            content = base64.b64decode(data["content"]).decode("utf-8")
        except (binascii.Error, TypeError, UnicodeDecodeError) as exc:
            raise FileFetchError(entry.path, f"content is not UTF-8 text: {exc}") from exc

        try:
            return RawFile(
                path=entry.path,
                content=content,
                object_id=entry.object_id or data.get("sha") or "",
                size=data.get("size") or entry.size or 0,
                fetched_at=datetime.now(timezone.utc),
                source_url=data.get("html_url") or "",
            )
        except ValidationError as exc:
            raise FileFetchError(entry.path, f"malformed contents payload: {exc}") from exc

    def fetch_files(self, entries: Sequence[TreeEntry], ref: RepositoryRef) -> list[RawFile]:
        """Fetch *entries* concurrently; failed files are logged and omitted.

        The result keeps the order of *entries*.
        """

        def _fetch(entry: TreeEntry) -> RawFile | None:
            try:
                return self.fetch_file(entry, ref)
            except FileFetchError as exc:
                logger.warning("Failed to fetch %s from %s: %s", entry.path, ref.slug, exc.reason)
                return None

        if not entries:
            return []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(entries))) as pool:
            results = list(pool.map(_fetch, entries))

        files = [f for f in results if f is not None]
        logger.info(
            "Fetched %d/%d files from %s (%d failed)",
            len(files),
            len(entries),
            ref.slug,
            len(entries) - len(files),
        )
        return files

    # -- internals ------------------------------------------------------------

    def _session(self) -> requests.Session:
        """Return the injected session, or this thread's own session."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(self._headers)
            self._local.session = session
        return session

    def _get_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        """GET *url* with retries on transient failures and return the JSON body."""
        last_exc = None
        for attempt in range(1, self.max_retries + 1):
            try:
                resp = self._session().get(url, params=params, timeout=self.timeout)
                if resp.status_code in _RETRY_STATUSES and attempt < self.max_retries:
                    raise requests.HTTPError(f"{resp.status_code} from {url}", response=resp)
                resp.raise_for_status()
                return resp.json()
            except (requests.ConnectionError, requests.Timeout, requests.HTTPError) as exc:
                status = getattr(exc.response, "status_code", None)
                if status is not None and status not in _RETRY_STATUSES:
                    raise
                last_exc = exc
                if attempt < self.max_retries:
                    wait = 2**attempt
                    logger.warning(
                        "Retry %d/%d for %s (wait %ds): %s", attempt, self.max_retries, url, wait, exc
                    )
                    time.sleep(wait)
        else:
            raise requests.exceptions.RetryError(
                f"Failed to fetch {url} after {self.max_retries} attempts: {last_exc}"
            ) from last_exc
