from __future__ import annotations

"""
Fan-out search across every enabled registry and merge the results.

All registries are searched concurrently over one shared HTTP client.
The merge waits for every branch: a registry whose search raises is
logged and contributes nothing, it never aborts the others.  Merged
results are deduplicated on ``source/name`` (case-insensitive, first
one wins), sorted by score with ties kept in arrival order, and cut to
the global cap.  ``total`` counts the merged results before the cut.
"""

import asyncio
from typing import Iterable, List, Optional, Sequence

import httpx
from loguru import logger

from .config import (
    ScoredResult,
    SearchResponse,
    SearchSettings,
    SourceDescriptor,
    SourceSearchResult,
)
from .fetch import GitHubFetcher, build_client
from .search import search_source


class SearchInputError(ValueError):
    """Raised for caller errors that are rejected before any search runs."""


def clean_keywords(keywords: Iterable[str]) -> List[str]:
    return [k.strip() for k in keywords if k and k.strip()]


def validate_request(keywords: Sequence[str], sources: Sequence[SourceDescriptor]) -> List[SourceDescriptor]:
    """
    Check caller input and return the enabled sources.

    Raises
    ------
    SearchInputError
        When no usable keyword is given or no source is enabled.
    """
    if not clean_keywords(keywords):
        raise SearchInputError("At least one non-empty keyword is required")
    enabled = [s for s in sources if s.enabled]
    if not enabled:
        raise SearchInputError("No enabled registries found")
    return enabled


def merge_results(per_source: Iterable[SourceSearchResult]) -> List[ScoredResult]:
    """Dedup on ``source/name`` (first wins) and stable-sort by score."""
    seen = set()
    merged: List[ScoredResult] = []
    for batch in per_source:
        for r in batch.results:
            key = r.dedup_key
            if key in seen:
                continue
            seen.add(key)
            merged.append(r)
    merged.sort(key=lambda r: -r.score)
    return merged


async def _search_guarded(
    fetcher: GitHubFetcher,
    source: SourceDescriptor,
    keywords: Sequence[str],
    settings: SearchSettings,
) -> SourceSearchResult:
    try:
        return await search_source(fetcher, source, keywords, settings)
    except Exception as e:
        logger.exception("Search failed for {}: {}", source.locator, e)
        return SourceSearchResult(source_id=source.locator, results=[], used_fallback=False)


async def search_sources(
    fetcher: GitHubFetcher,
    sources: Sequence[SourceDescriptor],
    keywords: Sequence[str],
    settings: Optional[SearchSettings] = None,
) -> SearchResponse:
    """Search every enabled source concurrently and merge the ranked results."""
    settings = settings or SearchSettings()
    enabled = validate_request(keywords, sources)
    kws = clean_keywords(keywords)

    per_source = await asyncio.gather(
        *(_search_guarded(fetcher, s, kws, settings) for s in enabled)
    )
    for res in per_source:
        logger.info(
            "{}: {} results{}",
            res.source_id,
            len(res.results),
            " (tree fallback)" if res.used_fallback else "",
        )

    merged = merge_results(per_source)
    return SearchResponse(
        keywords=list(keywords),
        total=len(merged),
        results=merged[: settings.max_results],
    )


async def run_search(
    sources: Sequence[SourceDescriptor],
    keywords: Sequence[str],
    settings: Optional[SearchSettings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> SearchResponse:
    """
    Convenience entry point that owns the HTTP client when none is given.
    """
    settings = settings or SearchSettings()
    validate_request(keywords, sources)
    if client is not None:
        return await search_sources(GitHubFetcher(client, timeout=settings.fetch_timeout), sources, keywords, settings)
    async with build_client(settings.fetch_timeout) as owned:
        return await search_sources(GitHubFetcher(owned, timeout=settings.fetch_timeout), sources, keywords, settings)
