from __future__ import annotations
"""
Configuration for the skillfinder search engine.

Tunables, fixed policy constants and the pydantic record types shared by
the extractor, the scorer, the per-source search and the aggregator.
"""

import os
import re
from pathlib import Path
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Paths
PROJECT_ROOT = Path(__file__).resolve().parents[1]
CONFIG_PATH = Path(os.getenv("SKILLFINDER_CONFIG", str(PROJECT_ROOT / "config.yaml")))
REGISTRIES_PATH = PROJECT_ROOT / "registries.json"
LOCAL_REGISTRIES_PATH = PROJECT_ROOT / "registries.local.json"

# Result policy
MAX_RESULTS = 30
DEFAULT_THRESHOLD = 0.4
DESC_WEIGHT = 0.75

# Fallback enrichment: only the top handful get their SKILL.md fetched
ENRICH_LIMIT = 10

# Install preferences reported when config.yaml sets none
DEFAULT_PREFERENCES = {"install_method": "ask", "install_location": "ask"}

# Keyword scorer constants (ordered evidence, strongest first)
SCORE_EXACT = 1.0
SCORE_TOKEN_EXACT = 0.95
SCORE_SUBSTRING = 0.9
SCORE_TOKEN_CONTAINS = 0.85
SCORE_REVERSE_SUBSTRING = 0.7
SCORE_TOKEN_CONTAINED = 0.65
FUZZY_MIN_SIMILARITY = 0.6
FUZZY_SCALE = 0.75
SCORE_DECIMALS = 3

# Headings that never become a category
GENERIC_HEADING_RE = re.compile(
    r"^(table of contents|contributing|license|acknowledgment|getting started|installation|usage|about)",
    re.IGNORECASE,
)

# Fallback candidates that are template stand-ins, not real entries
RESERVED_SKILL_NAMES = frozenset({"template", "template-skill"})
MARKER_FILENAME = "SKILL.md"
ROOT_SKILL_NAME = "(root)"

# GitHub endpoints
GITHUB_WEB_BASE = "https://github.com"
GITHUB_API_BASE = "https://api.github.com"
GITHUB_RAW_BASE = "https://raw.githubusercontent.com"
DEFAULT_BRANCH = "main"
README_BRANCHES: Tuple[str, ...] = ("main", "master")

# HTTP hardening
FETCH_TIMEOUT = float(os.getenv("SKILLFINDER_FETCH_TIMEOUT", "20"))
HTTP_MAX_REDIRECTS = 5
HTTP_MAX_BYTES = 5_000_000
HTTP_USER_AGENT = "skillfinder/1.0"


def github_token() -> str:
    return os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN") or ""


# Pydantic schemas
class SourceDescriptor(BaseModel):
    """One searchable collection (a GitHub repository)."""

    model_config = ConfigDict(frozen=True)

    id: str
    locator: str  # owner/repo
    name: str
    description: str = ""
    enabled: bool = True


class CatalogEntry(BaseModel):
    """An entry recovered from a README or derived from the repo tree."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    locator: str
    source_id: str
    description: str = ""
    category: str = ""


class ScoredResult(BaseModel):
    name: str
    source_id: str
    score: float = Field(ge=0.0, le=1.0)
    locator: str
    raw_locator: str
    branch: str = DEFAULT_BRANCH
    path: str = ""
    description: str = ""
    category: str = ""
    used_fallback: bool = False

    @property
    def dedup_key(self) -> str:
        return f"{self.source_id}/{self.name}".lower()


class SourceSearchResult(BaseModel):
    source_id: str
    results: List[ScoredResult] = Field(default_factory=list)
    used_fallback: bool = False


class SearchSettings(BaseModel):
    threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0.0, le=1.0)
    max_results: int = Field(default=MAX_RESULTS, ge=1)
    description_weight: float = Field(default=DESC_WEIGHT, ge=0.0, le=1.0)
    fetch_timeout: float = Field(default=FETCH_TIMEOUT, gt=0.0)
    enrich_descriptions: bool = True
    enrich_limit: int = Field(default=ENRICH_LIMIT, ge=0, le=ENRICH_LIMIT)


class SearchResponse(BaseModel):
    keywords: List[str]
    total: int
    results: List[ScoredResult]


class HealthResponse(BaseModel):
    status: str


class TreeItem(BaseModel):
    """One path of a repository tree listing (``blob`` or ``tree``)."""

    path: str
    type: str = "blob"


class TreeListing(BaseModel):
    items: List[TreeItem] = Field(default_factory=list)
    truncated: bool = False
