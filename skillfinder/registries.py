from __future__ import annotations

"""
Registry list loading (read-only).

``config.yaml`` is the primary source::

    registries:
      - url: https://github.com/ComposioHQ/awesome-claude-skills
        name: Composio Skills
      - url: anthropics/skills
        enabled: false

When it is missing or cannot be parsed the legacy ``registries.json``
is used, with ``registries.local.json`` merged over it by id.  Files
that fail to parse are logged and skipped.  Editing the registry list
is not handled here.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger
from pydantic import ValidationError

from .config import CONFIG_PATH, LOCAL_REGISTRIES_PATH, REGISTRIES_PATH, SourceDescriptor

GITHUB_REPO_RE = re.compile(r"github\.com[/:]([\w-]+)/([\w.-]+)")
GIT_SUFFIX_RE = re.compile(r"\.git$")


def normalize_github_url(url: str) -> str:
    """Reduce a GitHub URL (https or ssh) or ``owner/repo`` to ``owner/repo``."""
    url = (url or "").strip()
    m = GITHUB_REPO_RE.search(url)
    if m:
        repo = GIT_SUFFIX_RE.sub("", m.group(2))
        return f"{m.group(1)}/{repo}"
    if "/" in url and "github.com" not in url:
        return GIT_SUFFIX_RE.sub("", url)
    return url


def registry_id(repo: str) -> str:
    return repo.replace("/", "-").lower()


def _from_yaml_entry(raw: Dict[str, Any]) -> SourceDescriptor:
    repo = normalize_github_url(str(raw.get("url", "")))
    return SourceDescriptor(
        id=registry_id(repo),
        locator=repo,
        name=raw.get("name") or repo,
        description=raw.get("description") or "",
        enabled=raw.get("enabled") is not False,
    )


def _from_json_entry(raw: Dict[str, Any]) -> SourceDescriptor:
    repo = normalize_github_url(str(raw.get("repo", "")))
    return SourceDescriptor(
        id=raw.get("id") or registry_id(repo),
        locator=repo,
        name=raw.get("name") or repo,
        description=raw.get("description") or "",
        enabled=raw.get("enabled") is not False,
    )


def load_yaml_registries(path: Path) -> Optional[List[SourceDescriptor]]:
    """Registries from ``config.yaml``; ``None`` if the file is absent or unusable."""
    if not path.exists():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        entries = data.get("registries") or []
        return [_from_yaml_entry(e) for e in entries if isinstance(e, dict) and e.get("url")]
    except (OSError, yaml.YAMLError, AttributeError, ValidationError) as e:
        logger.warning("Failed to parse {}: {}", path.name, e)
        return None


def load_json_registries(path: Path) -> List[SourceDescriptor]:
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        entries = data.get("registries") or []
        return [_from_json_entry(e) for e in entries if isinstance(e, dict) and e.get("repo")]
    except (OSError, ValueError, AttributeError, ValidationError) as e:
        logger.warning("Failed to parse {}: {}", path.name, e)
        return []


def load_registries(
    config_path: Path = CONFIG_PATH,
    registries_path: Path = REGISTRIES_PATH,
    local_path: Path = LOCAL_REGISTRIES_PATH,
) -> List[SourceDescriptor]:
    """All configured registries, enabled or not, in configuration order."""
    from_yaml = load_yaml_registries(config_path)
    if from_yaml is not None:
        return from_yaml

    merged: Dict[str, SourceDescriptor] = {}
    for reg in load_json_registries(registries_path):
        merged[reg.id] = reg
    for reg in load_json_registries(local_path):
        merged[reg.id] = reg
    return list(merged.values())


def load_preferences(path: Path = CONFIG_PATH) -> Optional[Dict[str, Any]]:
    """The ``preferences`` mapping of ``config.yaml``; ``None`` when unset or unreadable."""
    if not path.exists():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        prefs = data.get("preferences")
    except (OSError, yaml.YAMLError, AttributeError) as e:
        logger.warning("Failed to parse {}: {}", path.name, e)
        return None
    return prefs if isinstance(prefs, dict) and prefs else None


def enabled_sources(registries: List[SourceDescriptor]) -> List[SourceDescriptor]:
    return [r for r in registries if r.enabled]
