"""FastAPI application exposing the ingestion pipeline as a REST API."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from docs_ingest.github.client import InvalidRepositoryError, RepositoryFetchError
from docs_ingest.ingestion.pipeline import IngestionPipeline

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Docs Ingest API",
    version="0.1.0",
    description="Turn a GitHub repository's documentation into retrieval-ready chunks.",
)


# ── Request / Response schemas ────────────────────────────────────────
class IngestRequest(BaseModel):
    """Repository to ingest."""

    repository_url: str
    branch: str = "main"


class IngestResponse(BaseModel):
    """Chunks (camelCase contract) and per-stage counts."""

    repository: str
    chunks: list[dict[str, Any]] = []
    stats: dict[str, int] = {}


def get_pipeline() -> IngestionPipeline:
    return IngestionPipeline()


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/ingest", response_model=IngestResponse)
def ingest(request: IngestRequest) -> IngestResponse:
    """Run the ingestion pipeline for one repository branch."""
    try:
        result = get_pipeline().run(request.repository_url, request.branch)
    except InvalidRepositoryError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RepositoryFetchError as exc:
        logger.error("Ingestion failed for %s: %s", exc.ref.slug, exc.cause)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return IngestResponse(
        repository=result.repository.slug,
        chunks=[c.to_record() for c in result.chunks],
        stats=result.stats.to_dict(),
    )
