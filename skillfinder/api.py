from __future__ import annotations

"""
FastAPI application for skillfinder.

- ``GET /health``      liveness probe
- ``GET /registries``  configured registries (enabled and disabled)
- ``POST /search``     ranked, deduplicated results across enabled registries

Caller errors (no usable keyword, no enabled registry) become HTTP 400.
A registry that cannot be reached only shrinks the result set.
"""

from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from .aggregate import SearchInputError, run_search
from .config import (
    DEFAULT_THRESHOLD,
    MAX_RESULTS,
    HealthResponse,
    SearchResponse,
    SearchSettings,
    SourceDescriptor,
)
from .registries import enabled_sources, load_registries

app = FastAPI(title="skillfinder")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_registries: Optional[List[SourceDescriptor]] = None


def _get_registries() -> List[SourceDescriptor]:
    global _registries
    if _registries is None:
        _registries = load_registries()
        logger.info("Loaded {} registries", len(_registries))
    return _registries


@app.on_event("startup")
def startup_event() -> None:
    _get_registries()


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.get("/registries", response_model=List[SourceDescriptor])
def registries() -> List[SourceDescriptor]:
    return _get_registries()


class SearchRequest(BaseModel):
    keywords: List[str] = Field(..., min_length=1)
    threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0.0, le=1.0)
    max_results: int = Field(default=MAX_RESULTS, ge=1)
    descriptions: bool = False


@app.post("/search", response_model=SearchResponse)
async def search(req: SearchRequest) -> SearchResponse:
    settings = SearchSettings(threshold=req.threshold, max_results=req.max_results)
    try:
        resp = await run_search(enabled_sources(_get_registries()), req.keywords, settings)
    except SearchInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not req.descriptions:
        resp = resp.model_copy(
            update={"results": [r.model_copy(update={"description": "", "category": ""}) for r in resp.results]}
        )
    return resp
