# skillfinder/cli.py
"""
Command-line search over the configured skill registries.

Prints exactly one JSON document on stdout so the output can be piped
into other tools; logs go to stderr.  Output keys are the public ones
(``source``, ``url``, ``raw_url`` for results, ``repo`` for registries)
rather than the internal model field names.

Examples:
    skillfinder email automation
    skillfinder pdf --descriptions --threshold 0.5
    skillfinder --list-registries
    skillfinder --show-preferences
"""

from __future__ import annotations
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from .aggregate import SearchInputError, run_search
from .config import (
    CONFIG_PATH,
    DEFAULT_PREFERENCES,
    DEFAULT_THRESHOLD,
    MAX_RESULTS,
    SearchResponse,
    SearchSettings,
    SourceDescriptor,
)
from .registries import enabled_sources, load_preferences, load_registries

# (output key, model attribute)
OUTPUT_FIELDS = (
    ("name", "name"),
    ("source", "source_id"),
    ("score", "score"),
    ("url", "locator"),
    ("raw_url", "raw_locator"),
    ("branch", "branch"),
    ("path", "path"),
)
REGISTRY_FIELDS = (
    ("id", "id"),
    ("repo", "locator"),
    ("name", "name"),
    ("description", "description"),
    ("enabled", "enabled"),
)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def render_response(resp: SearchResponse, descriptions: bool) -> Dict[str, Any]:
    """
    Shape the response for output.  Description and category are only
    included with ``--descriptions``; empty values are always omitted.
    """
    results: List[Dict[str, Any]] = []
    for r in resp.results:
        out = {key: getattr(r, attr) for key, attr in OUTPUT_FIELDS}
        if descriptions:
            if r.description:
                out["description"] = r.description
            if r.category:
                out["category"] = r.category
        results.append(out)
    return {"keywords": resp.keywords, "total": resp.total, "results": results}


def render_registries(registries: Sequence[SourceDescriptor]) -> Dict[str, Any]:
    return {"registries": [{key: getattr(r, attr) for key, attr in REGISTRY_FIELDS} for r in registries]}


def render_preferences(config_path: Path) -> Dict[str, Any]:
    prefs = load_preferences(config_path)
    if prefs is None:
        return {"preferences": dict(DEFAULT_PREFERENCES), "source": "defaults"}
    return {"preferences": prefs, "source": config_path.name}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="skillfinder", description="Search GitHub skill registries.")
    ap.add_argument("keywords", nargs="*", help="keywords to match against skill names and descriptions")
    ap.add_argument("--descriptions", action="store_true", help="include descriptions and categories")
    ap.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD, help="minimum score (default 0.4)")
    ap.add_argument("--max-results", type=int, default=MAX_RESULTS, help="result cap (default 30)")
    ap.add_argument("--no-enrich", action="store_true", help="skip SKILL.md description lookups in tree fallback")
    ap.add_argument("--config", type=str, default=None, help="path to config.yaml")
    ap.add_argument("--list-registries", action="store_true", help="print configured registries and exit")
    ap.add_argument("--show-preferences", action="store_true", help="print install preferences and exit")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    config_path = Path(args.config) if args.config else CONFIG_PATH

    if args.list_registries:
        _emit(render_registries(load_registries(config_path=config_path)))
        return 0

    if args.show_preferences:
        _emit(render_preferences(config_path))
        return 0

    try:
        settings = SearchSettings(
            threshold=args.threshold,
            max_results=args.max_results,
            enrich_descriptions=not args.no_enrich,
        )
    except ValueError as e:
        _emit({"error": str(e)})
        return 1

    if not args.keywords:
        _emit({"error": "Usage: skillfinder <keyword1> [keyword2] ... [--descriptions] [--threshold N]"})
        return 1

    registries = load_registries(config_path=config_path)
    try:
        resp = asyncio.run(run_search(enabled_sources(registries), args.keywords, settings))
    except SearchInputError as e:
        _emit({"error": str(e)})
        return 1

    _emit(render_response(resp, args.descriptions))
    return 0


if __name__ == "__main__":
    sys.exit(main())
