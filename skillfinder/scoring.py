from __future__ import annotations

"""
Lexical fuzzy scoring of catalog entries against user keywords.

Each keyword contributes candidate scores from a fixed ladder of
evidence (exact, substring, reverse substring, per-token checks and
finally edit-distance similarity).  A field's score is the maximum
candidate over every keyword/token pair, so neither keyword order nor
token order can change the result.
"""

import math
from typing import Iterable, Iterator, List, Optional, Sequence

from .config import (
    DESC_WEIGHT,
    FUZZY_MIN_SIMILARITY,
    FUZZY_SCALE,
    SCORE_DECIMALS,
    SCORE_EXACT,
    SCORE_REVERSE_SUBSTRING,
    SCORE_SUBSTRING,
    SCORE_TOKEN_CONTAINED,
    SCORE_TOKEN_CONTAINS,
    SCORE_TOKEN_EXACT,
)
from .normalize import field_tokens, normalize_field, normalize_keyword
from .similarity import similarity


def _round_score(value: float) -> float:
    # half-up, not banker's rounding
    scale = 10 ** SCORE_DECIMALS
    return math.floor(value * scale + 0.5) / scale


def _token_candidates(keyword: str, tokens: Sequence[str]) -> Iterator[float]:
    for token in tokens:
        if keyword == token:
            yield SCORE_TOKEN_EXACT
        elif keyword in token:
            yield SCORE_TOKEN_CONTAINS
        elif token in keyword:
            yield SCORE_TOKEN_CONTAINED
        else:
            sim = similarity(keyword, token)
            if sim > FUZZY_MIN_SIMILARITY:
                yield sim * FUZZY_SCALE


def _keyword_candidates(keyword: str, clean: str, tokens: Sequence[str]) -> Iterator[float]:
    """Candidate scores for one keyword; substring hits skip the token scan."""
    if keyword in clean:
        yield SCORE_SUBSTRING
    elif clean in keyword:
        yield SCORE_REVERSE_SUBSTRING
    else:
        yield from _token_candidates(keyword, tokens)


def score_field(keywords: Iterable[str], text: str) -> float:
    """Score one text field against all keywords, in [0, 1].

    An exact match of any keyword against the whole field returns 1.0
    outright.  Empty keywords are ignored; no keywords scores 0.
    """
    # blank text scores 0, not the reverse-substring score every keyword would give it
    if not text or not text.strip():
        return 0.0

    clean = normalize_field(text)
    lowered = text.lower()
    tokens = field_tokens(clean)
    kws: List[str] = [kw for kw in (normalize_keyword(k) for k in keywords) if kw]

    if any(kw == clean or kw == lowered for kw in kws):
        return SCORE_EXACT

    best = max(
        (score for kw in kws for score in _keyword_candidates(kw, clean, tokens)),
        default=0.0,
    )
    return _round_score(best)


def score_entry(
    keywords: Sequence[str],
    name: str,
    description: Optional[str] = None,
    description_weight: float = DESC_WEIGHT,
) -> float:
    """Best evidence from the name or the (down-weighted) description.

    The description can never outscore what a name match of the same
    strength would achieve, and a weak description never dilutes a
    strong name.
    """
    name_score = score_field(keywords, name)
    if not description:
        return name_score
    desc_score = score_field(keywords, description) * description_weight
    return _round_score(max(name_score, desc_score))
