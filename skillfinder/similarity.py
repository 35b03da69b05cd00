"""Edit-distance string similarity used by the keyword scorer."""

from __future__ import annotations


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost insert/delete/substitute distance.

    Keeps two rows sized by the shorter string, so auxiliary space is
    O(min(len(a), len(b))).
    """
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    curr = [0] * (len(b) + 1)
    for i, ca in enumerate(a, 1):
        curr[0] = i
        for j, cb in enumerate(b, 1):
            cost = 0 if ca == cb else 1
            curr[j] = min(prev[j] + 1, curr[j - 1] + 1, prev[j - 1] + cost)
        prev, curr = curr, prev
    return prev[len(b)]


def similarity(a: str, b: str) -> float:
    """Return ``1 - distance / max(len)`` in [0, 1].

    Identical strings (both empty included) score 1.0; one empty side
    scores 0.0.  Case is the caller's business.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - levenshtein_distance(a, b) / max(len(a), len(b))
