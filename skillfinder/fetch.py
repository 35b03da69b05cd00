from __future__ import annotations

"""
GitHub content fetcher for registry READMEs, repository trees and
``SKILL.md`` files.

READMEs and skill files are downloaded from raw.githubusercontent.com,
which does not count against the REST API quota.  Only the default
branch lookup and the recursive tree listing go through
api.github.com, optionally authenticated with ``GITHUB_TOKEN`` or
``GH_TOKEN``.

Every method reports absence instead of raising: a timeout, transport
error, HTTP error status or oversized body is logged as a warning and
turns into ``None`` (or an empty listing).  Callers never need to know
why content is missing.  There are no retries here.
"""

from typing import Any, Dict, Optional, Tuple

import httpx
from loguru import logger

from .config import (
    DEFAULT_BRANCH,
    FETCH_TIMEOUT,
    GITHUB_API_BASE,
    GITHUB_RAW_BASE,
    HTTP_MAX_BYTES,
    HTTP_MAX_REDIRECTS,
    HTTP_USER_AGENT,
    README_BRANCHES,
    TreeItem,
    TreeListing,
    github_token,
)


def build_client(timeout: float = FETCH_TIMEOUT) -> httpx.AsyncClient:
    """
    Construct the shared async HTTP client used for one search run.

    ``trust_env=False`` keeps httpx away from proxy environment variables
    such as ALL_PROXY, which would otherwise need optional SOCKS support.
    """
    return httpx.AsyncClient(
        headers={"User-Agent": HTTP_USER_AGENT},
        follow_redirects=True,
        timeout=httpx.Timeout(timeout),
        max_redirects=HTTP_MAX_REDIRECTS,
        trust_env=False,
    )


def raw_url(repo: str, branch: str, path: str) -> str:
    return f"{GITHUB_RAW_BASE}/{repo}/{branch}/{path}"


class GitHubFetcher:
    """Fetches registry content over a caller-owned ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: Optional[str] = None,
        timeout: float = FETCH_TIMEOUT,
    ):
        self.client = client
        self.token = github_token() if token is None else token
        self.timeout = timeout

    def _api_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _get(self, url: str, headers: Optional[Dict[str, str]] = None) -> Optional[httpx.Response]:
        try:
            r = await self.client.get(url, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException:
            logger.warning("Fetch timeout for {}", url)
            return None
        except httpx.HTTPError as e:
            logger.warning("Fetch failed for {}: {}", url, e)
            return None

        if r.status_code >= 400:
            if r.status_code == 403 and url.startswith(GITHUB_API_BASE):
                logger.warning(
                    "GitHub API rate limit reached. Set GITHUB_TOKEN or GH_TOKEN for higher limits."
                )
            else:
                logger.debug("HTTP {} for {}", r.status_code, url)
            return None

        if len(r.content) > HTTP_MAX_BYTES:
            logger.warning("Fetch aborted: {} bytes > {} limit for {}", len(r.content), HTTP_MAX_BYTES, url)
            return None
        return r

    async def fetch_text(self, url: str) -> Optional[str]:
        """Download a raw file; ``None`` when it is unavailable or empty."""
        r = await self._get(url)
        if r is None:
            return None
        return r.text or None

    async def _api_json(self, url: str) -> Optional[Dict[str, Any]]:
        r = await self._get(url, headers=self._api_headers())
        if r is None:
            return None
        try:
            data = r.json()
        except ValueError as e:
            logger.warning("Invalid JSON from {}: {}", url, e)
            return None
        return data if isinstance(data, dict) else None

    async def fetch_readme(self, repo: str) -> Optional[Tuple[str, str]]:
        """Return ``(text, branch)`` for the first README found on main/master."""
        for branch in README_BRANCHES:
            text = await self.fetch_text(raw_url(repo, branch, "README.md"))
            if text:
                return text, branch
        logger.info("No README found for {}", repo)
        return None

    async def default_branch(self, repo: str) -> str:
        data = await self._api_json(f"{GITHUB_API_BASE}/repos/{repo}")
        branch = (data or {}).get("default_branch")
        return branch if isinstance(branch, str) and branch else DEFAULT_BRANCH

    async def fetch_tree(self, repo: str, branch: str) -> TreeListing:
        """Recursive tree listing of ``repo`` at ``branch``; empty on failure."""
        data = await self._api_json(f"{GITHUB_API_BASE}/repos/{repo}/git/trees/{branch}?recursive=1")
        if not data:
            return TreeListing()

        items = []
        for raw in data.get("tree") or []:
            if isinstance(raw, dict) and isinstance(raw.get("path"), str):
                items.append(TreeItem(path=raw["path"], type=str(raw.get("type", "blob"))))

        truncated = bool(data.get("truncated"))
        if truncated:
            logger.warning("Tree for {} was truncated", repo)
        return TreeListing(items=items, truncated=truncated)
