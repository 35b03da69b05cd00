from __future__ import annotations

"""
Per-registry search: README first, repository tree as the fallback.

Primary path: fetch the README (``main`` then ``master``), parse entries,
score each one on its name plus its description and category, keep the
ones at or above the threshold, sort by score and cap.

Fallback path: taken when the README is missing or yields no entries.
The registry's tree is searched for ``SKILL.md`` directories instead
(see :mod:`skillfinder.tree_fallback`) and the result is flagged with
``used_fallback``.

Fetch failures are treated as missing content; nothing here retries.
"""

from typing import List, Sequence

from loguru import logger

from .config import CatalogEntry, ScoredResult, SearchSettings, SourceDescriptor, SourceSearchResult
from .fetch import GitHubFetcher
from .readme_parse import parse_readme
from .scoring import score_entry
from .tree_fallback import search_tree


def _evidence_text(entry: CatalogEntry) -> str:
    """Description and category together form the secondary evidence."""
    return " ".join(part for part in (entry.description, entry.category) if part)


def rank_entries(
    entries: Sequence[CatalogEntry],
    keywords: Sequence[str],
    settings: SearchSettings,
    branch: str,
) -> List[ScoredResult]:
    """Score README entries, filter by threshold, sort descending and cap."""
    results: List[ScoredResult] = []
    for entry in entries:
        score = score_entry(
            keywords,
            entry.name,
            _evidence_text(entry),
            description_weight=settings.description_weight,
        )
        if score < settings.threshold:
            continue
        results.append(
            ScoredResult(
                name=entry.name,
                source_id=entry.source_id,
                score=score,
                locator=entry.locator,
                raw_locator=entry.locator,
                branch=branch,
                description=entry.description,
                category=entry.category,
            )
        )
    # stable: equal scores keep document order
    results.sort(key=lambda r: -r.score)
    return results[: settings.max_results]


async def search_source(
    fetcher: GitHubFetcher,
    source: SourceDescriptor,
    keywords: Sequence[str],
    settings: SearchSettings,
) -> SourceSearchResult:
    """Search one registry and report which extraction path produced the results."""
    readme = await fetcher.fetch_readme(source.locator)
    if readme is not None:
        text, branch = readme
        entries = parse_readme(text, source.locator, branch)
        if entries:
            results = rank_entries(entries, keywords, settings, branch)
            logger.info(
                "README search for {}: {} entries, {} matched",
                source.locator,
                len(entries),
                len(results),
            )
            return SourceSearchResult(source_id=source.locator, results=results, used_fallback=False)
        logger.info("README of {} has no recognizable entries; using tree fallback", source.locator)

    results = await search_tree(fetcher, source, keywords, settings)
    return SourceSearchResult(source_id=source.locator, results=results, used_fallback=True)
