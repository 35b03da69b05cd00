from __future__ import annotations

"""
Repository-tree fallback for registries whose README lists nothing usable.

Many skill collections are indexed only by convention: every skill is a
directory holding a ``SKILL.md``.  This module walks the recursive tree
listing, turns each marker file's parent directory into a candidate,
scores candidates by name, and optionally fetches the ``SKILL.md`` of the
best few to read a ``description:`` out of their front matter.

The enrichment pass is bounded (``ENRICH_LIMIT``) so a large registry
never triggers hundreds of downloads.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from loguru import logger

from .config import (
    GITHUB_WEB_BASE,
    MARKER_FILENAME,
    RESERVED_SKILL_NAMES,
    ROOT_SKILL_NAME,
    ScoredResult,
    SearchSettings,
    SourceDescriptor,
    TreeItem,
)
from .fetch import GitHubFetcher, raw_url
from .normalize import normalize_whitespace
from .scoring import score_entry

MARKER_SUFFIX = "/" + MARKER_FILENAME.upper()
FRONT_MATTER_RE = re.compile(r"^---\s*\n([\s\S]*?)\n---")
DESCRIPTION_LINE_RE = re.compile(r"""^description:\s*["']?(.*?)["']?\s*$""", re.MULTILINE)


@dataclass(frozen=True)
class SkillDir:
    name: str
    path: str  # directory holding SKILL.md, "" for the repo root


def find_skill_dirs(items: Iterable[TreeItem]) -> List[SkillDir]:
    """
    Locate ``SKILL.md`` files (case-insensitive) and return their parent
    directories in listing order.  A name seen twice keeps its first
    position but takes the later path.
    """
    found: Dict[str, str] = {}
    for item in items:
        if item.type != "blob":
            continue
        upper = item.path.upper()
        if upper.endswith(MARKER_SUFFIX):
            dir_path = item.path[: item.path.rfind("/")]
            found[dir_path.rsplit("/", 1)[-1]] = dir_path
        elif upper == MARKER_FILENAME.upper():
            found[ROOT_SKILL_NAME] = ""
    return [SkillDir(name=name, path=path) for name, path in found.items()]


def is_placeholder(name: str) -> bool:
    """Hidden directories and template stand-ins are never real skills."""
    return name.startswith(".") or name in RESERVED_SKILL_NAMES


def extract_description(raw: str) -> str:
    """
    Read ``description:`` from a leading ``---`` front-matter block.

    Returns an empty string when there is no front matter or no
    description line.  Surrounding quotes are stripped.
    """
    if not raw:
        return ""
    m = FRONT_MATTER_RE.match(raw.replace("\r\n", "\n"))
    if not m:
        return ""
    dm = DESCRIPTION_LINE_RE.search(m.group(1))
    if not dm:
        return ""
    return normalize_whitespace(dm.group(1).strip().strip("\"'"))


def skill_urls(repo: str, branch: str, path: str) -> tuple[str, str]:
    """Browsable tree URL and raw ``SKILL.md`` URL for a skill directory."""
    if path:
        return (
            f"{GITHUB_WEB_BASE}/{repo}/tree/{branch}/{path}",
            raw_url(repo, branch, f"{path}/{MARKER_FILENAME}"),
        )
    return f"{GITHUB_WEB_BASE}/{repo}", raw_url(repo, branch, MARKER_FILENAME)


def rank_skill_dirs(
    dirs: Sequence[SkillDir],
    keywords: Sequence[str],
    source: SourceDescriptor,
    branch: str,
    settings: SearchSettings,
) -> List[ScoredResult]:
    """Score candidates by name, drop placeholders and weak hits, sort and cap."""
    results: List[ScoredResult] = []
    for d in dirs:
        if is_placeholder(d.name):
            continue
        score = score_entry(keywords, d.name)
        if score < settings.threshold:
            continue
        url, raw = skill_urls(source.locator, branch, d.path)
        results.append(
            ScoredResult(
                name=d.name,
                source_id=source.locator,
                score=score,
                locator=url,
                raw_locator=raw,
                branch=branch,
                path=d.path,
                used_fallback=True,
            )
        )
    results.sort(key=lambda r: -r.score)
    return results[: settings.max_results]


async def _with_description(fetcher: GitHubFetcher, result: ScoredResult) -> ScoredResult:
    content = await fetcher.fetch_text(result.raw_locator)
    desc = extract_description(content or "")
    if not desc:
        return result
    return result.model_copy(update={"description": desc})


async def enrich_descriptions(
    fetcher: GitHubFetcher, results: List[ScoredResult], limit: int
) -> List[ScoredResult]:
    """Attach front-matter descriptions to the first ``limit`` results only."""
    head, tail = results[:limit], results[limit:]
    if not head:
        return results
    enriched = await asyncio.gather(*(_with_description(fetcher, r) for r in head))
    return list(enriched) + tail


async def search_tree(
    fetcher: GitHubFetcher,
    source: SourceDescriptor,
    keywords: Sequence[str],
    settings: SearchSettings,
) -> List[ScoredResult]:
    """Fallback search of one registry through its repository tree."""
    branch = await fetcher.default_branch(source.locator)
    listing = await fetcher.fetch_tree(source.locator, branch)
    if not listing.items:
        logger.info("Empty tree listing for {}", source.locator)
        return []

    dirs = find_skill_dirs(listing.items)
    results = rank_skill_dirs(dirs, keywords, source, branch, settings)
    logger.info(
        "Tree fallback for {}: {} skill dirs, {} above threshold",
        source.locator,
        len(dirs),
        len(results),
    )
    if settings.enrich_descriptions and settings.enrich_limit:
        results = await enrich_descriptions(fetcher, results, settings.enrich_limit)
    return results
