from __future__ import annotations

"""
README parser for skill registries.

A registry README lists its skills in one of three shapes:

* a linked bullet with a description:  ``- [name](url) - description``
  (the separator may be ``-``, ``–``, ``—`` or ``:``; ``*`` bullets work too)
* a linked bullet on its own:          ``- [name](url)``
* a table row:                         ``| [name](url) | description |`` or
  ``| description | [name](url) | ...``

The parser is a single forward pass expressed as a fold: ``step`` takes
the current :class:`ParseState` and one line and returns the next state
plus at most one entry.  The only state is the category, i.e. the most
recent heading that is not a generic section such as "Installation".

Shapes are tried in the order listed above and the first one that
matches claims the line, even when its link turns out to be an in-page
anchor (``#section``) and no entry is produced.  Anything else is
skipped silently.
"""

import re
from dataclasses import dataclass, replace
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from loguru import logger

from .config import DEFAULT_BRANCH, GENERIC_HEADING_RE, GITHUB_WEB_BASE, CatalogEntry
from .normalize import LINK_RE, is_anchor, is_separator_cell, strip_emphasis, strip_links

HEADING_RE = re.compile(r"^#{1,4}\s+(.+)")
LIST_LINK_DESC_RE = re.compile(r"^\s*[-*]\s+\[([^\]]+)\]\(([^)]+)\)\s*[-–—:]\s*(.+)")
LIST_LINK_ONLY_RE = re.compile(r"^\s*[-*]\s+\[([^\]]+)\]\(([^)]+)\)\s*$")
TABLE_SEPARATOR_RE = re.compile(r"^\s*\|[\s\-:|]+\|\s*$")

TABLE_DESC_JOINER = " — "


@dataclass(frozen=True)
class ParseState:
    category: str = ""


@dataclass(frozen=True)
class ParseContext:
    """Read-only inputs needed to build entries: where the README came from."""

    source_id: str
    branch: str = DEFAULT_BRANCH


def resolve_url(href: str, source_id: str, branch: str = DEFAULT_BRANCH) -> str:
    """Make a README link absolute.

    ``http(s)://`` links pass through; anything else is a path inside the
    repository and is rewritten to its GitHub tree view.
    """
    if href.startswith("http://") or href.startswith("https://"):
        return href
    clean = href[2:] if href.startswith("./") else href
    return f"{GITHUB_WEB_BASE}/{source_id}/tree/{branch}/{clean}"


# ---------------------------
# Entry shapes
# ---------------------------

# A shape builder returns (claimed, entry).  ``claimed`` stops the
# dispatch even when no entry could be built (anchor links).
ShapeResult = Tuple[bool, Optional[CatalogEntry]]
ShapeBuilder = Callable[[str, ParseState, ParseContext], ShapeResult]

NOT_CLAIMED: ShapeResult = (False, None)
CLAIMED_EMPTY: ShapeResult = (True, None)


def _make_entry(
    name: str, href: str, description: str, state: ParseState, ctx: ParseContext
) -> Optional[CatalogEntry]:
    name = name.strip()
    href = href.strip()
    if not name or is_anchor(href):
        return None
    return CatalogEntry(
        name=name,
        locator=resolve_url(href, ctx.source_id, ctx.branch),
        description=description.strip(),
        category=state.category,
        source_id=ctx.source_id,
    )


def _list_with_description(line: str, state: ParseState, ctx: ParseContext) -> ShapeResult:
    m = LIST_LINK_DESC_RE.match(line)
    if not m:
        return NOT_CLAIMED
    return True, _make_entry(m.group(1), m.group(2), m.group(3), state, ctx)


def _list_link_only(line: str, state: ParseState, ctx: ParseContext) -> ShapeResult:
    m = LIST_LINK_ONLY_RE.match(line)
    if not m:
        return NOT_CLAIMED
    return True, _make_entry(m.group(1), m.group(2), "", state, ctx)


def _describe_cells(cells: Sequence[str]) -> str:
    texts = (strip_links(c) for c in cells)
    return TABLE_DESC_JOINER.join(t for t in texts if t and not is_separator_cell(t))


def _table_row(line: str, state: ParseState, ctx: ParseContext) -> ShapeResult:
    if "|" not in line or TABLE_SEPARATOR_RE.match(line):
        return NOT_CLAIMED

    cells = [c.strip() for c in line.split("|")]
    cells = [c for c in cells if c]
    if len(cells) < 2:
        return CLAIMED_EMPTY

    link_at: Optional[int] = None
    link: Optional[re.Match[str]] = None
    for i, cell in enumerate(cells):
        link = LINK_RE.search(cell)
        if link:
            link_at = i
            break
    if link is None or link_at is None:
        return CLAIMED_EMPTY

    # first link decides; an anchor there means the row is navigation
    others = [c for j, c in enumerate(cells) if j != link_at]
    return True, _make_entry(link.group(1), link.group(2), _describe_cells(others), state, ctx)


# Priority order matters: a later shape never sees a line claimed earlier.
ENTRY_SHAPES: Tuple[Tuple[str, ShapeBuilder], ...] = (
    ("list_with_description", _list_with_description),
    ("list_link_only", _list_link_only),
    ("table_row", _table_row),
)


# ---------------------------
# Fold
# ---------------------------

def _heading_category(line: str) -> Optional[str]:
    """Return the heading text for heading lines, ``None`` otherwise."""
    m = HEADING_RE.match(line)
    if not m:
        return None
    return m.group(1).strip()


def step(state: ParseState, line: str, ctx: ParseContext) -> Tuple[ParseState, Optional[CatalogEntry]]:
    """Consume one line: ``(state, line) -> (new_state, entry or None)``."""
    heading = _heading_category(line)
    if heading is not None:
        if GENERIC_HEADING_RE.match(heading):
            return state, None
        return replace(state, category=strip_emphasis(heading)), None

    for _name, shape in ENTRY_SHAPES:
        claimed, entry = shape(line, state, ctx)
        if claimed:
            return state, entry
    return state, None


def iter_entries(content: str, ctx: ParseContext) -> Iterator[CatalogEntry]:
    state = ParseState()
    for line in content.split("\n"):
        state, entry = step(state, line, ctx)
        if entry is not None:
            yield entry


def parse_readme(content: str, source_id: str, branch: str = DEFAULT_BRANCH) -> List[CatalogEntry]:
    """
    Parse catalog entries from README markdown.

    Parameters
    ----------
    content : str
        Raw README text.
    source_id : str
        ``owner/repo`` of the registry; relative links resolve against it.
    branch : str
        Branch the README was read from, used for relative links.

    Returns
    -------
    list[CatalogEntry]
        Entries in document order.  Identical input always yields the
        identical list.
    """
    if not content:
        return []
    entries = list(iter_entries(content, ParseContext(source_id=source_id, branch=branch)))
    logger.debug("Parsed {} entries from README of {}", len(entries), source_id)
    return entries
