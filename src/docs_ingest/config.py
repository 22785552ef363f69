"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Ingestion settings, populated from env vars or .env file.

    List and dict options accept JSON when set through the environment,
    e.g. ``HARD_EXCLUDE_DIRS='["node_modules", "vendor"]'`` or
    ``RULE_WEIGHTS='{"examples_directory": 400}'``.
    """

    # GitHub transport
    github_token: str = Field(default="", description="Token sent as a Bearer credential (optional)")
    github_api_url: str = "https://api.github.com"
    request_timeout: int = 30
    max_retries: int = 3
    fetch_concurrency: int = Field(default=8, description="Parallel per-file content fetches")

    # Candidate selection
    max_file_size: int = 1_000_000
    doc_extensions: list[str] = [".md", ".mdx"]

    # Ranking
    max_files: int = 150
    hard_exclude_dirs: list[str] = ["node_modules", "vendor", "dist", "build"]
    low_signal_dirs: list[str] = [
        "test",
        "tests",
        "__tests__",
        "fixtures",
        "mocks",
        ".github",
        ".circleci",
        ".gitlab",
    ]
    low_signal_penalty: int = 500
    depth_penalty: int = 5
    rule_weights: dict[str, int] = Field(
        default_factory=dict,
        description="Per-rule weight overrides keyed by rule name",
    )

    # Normalization
    low_value_segments: list[str] = ["__tests__", "fixtures", "mocks"]
    placeholder_threshold: int = 2

    # Chunking
    chunk_size: int = 1000
    chunk_overlap: int = 200

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
