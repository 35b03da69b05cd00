from __future__ import annotations

"""
Text normalization utilities shared by the README extractor and the
keyword scorer.

Scoring compares lowercased text in which ``-`` and ``_`` act as word
separators, so ``sendgrid-automation`` and ``sendgrid automation`` are
the same field.  The markdown helpers reduce link markup and emphasis
to plain text without trying to be a general markdown parser.
"""

import re
from typing import List

# ---------------------------
# Scoring normalization
# ---------------------------

WORD_SEPARATOR_RE = re.compile(r"[-_]")


def normalize_whitespace(text: str) -> str:
    """
    Collapse all whitespace runs into a single space and strip edges.
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def normalize_field(text: str) -> str:
    """
    Lowercase and turn ``-``/``_`` into spaces.  Whitespace is kept
    as-is so substring checks see the text the way the author wrote it.
    """
    if not text:
        return ""
    return WORD_SEPARATOR_RE.sub(" ", text.lower())


def field_tokens(clean: str) -> List[str]:
    """Whitespace tokens of an already normalized field."""
    return clean.split()


def normalize_keyword(keyword: str) -> str:
    return (keyword or "").lower().strip()


# ---------------------------
# Markdown helpers
# ---------------------------

LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
LINK_TEXT_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
EMPHASIS_RE = re.compile(r"[*_`]")
SEPARATOR_CELL_RE = re.compile(r"^[\s\-:|]+$")


def strip_emphasis(text: str) -> str:
    """Drop ``*``, ``_`` and backtick markers (used for headings)."""
    return EMPHASIS_RE.sub("", text)


def strip_links(text: str) -> str:
    """Replace every ``[text](href)`` with ``text``."""
    return LINK_TEXT_RE.sub(r"\1", text).strip()


def is_separator_cell(cell: str) -> bool:
    """True for table cells made only of dashes, colons, pipes and spaces."""
    return bool(SEPARATOR_CELL_RE.match(cell))


def is_anchor(href: str) -> bool:
    """In-document anchors (``#section``) are table-of-contents noise."""
    return href.startswith("#")
