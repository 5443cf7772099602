"""
Restaurant Catalog — Name Similarity

Normalises free-text restaurant names and scores them with a bigram Dice
coefficient.  Both sides of every comparison go through ``normalize_name``
so scores are comparable across calls.
"""

from __future__ import annotations

import re
from collections import Counter


_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_name(name: str | None) -> str:
    """
    Normalize a restaurant name for comparison.

    Lowercases and drops every character outside ``[a-z0-9]``, including
    spaces, so "Jollibee - Makati" becomes "jollibeemakati".
    """
    if not name:
        return ""
    return _NON_ALNUM.sub("", name.lower())


def _bigrams(text: str) -> Counter[str]:
    return Counter(text[i:i + 2] for i in range(len(text) - 1))


# ---------------------------------------------------------------------------
# Scoring functions
# ---------------------------------------------------------------------------


def dice_coefficient(name_a: str | None, name_b: str | None) -> float:
    """
    Sørensen–Dice similarity over character bigrams, in [0.0, 1.0].

    Rules, in order:
        - either raw name missing or empty      → 0.0
        - normalised names identical            → 1.0
        - either normalised name shorter than 2 → 0.0
        - otherwise 2 * shared / (len(a) + len(b) - 2)

    Two names that both normalise to "" (e.g. written entirely in a
    non-Latin script) are identical and score 1.0.

    Shared bigrams use multiset intersection: "aa" appearing twice on both
    sides counts twice.
    """
    if not name_a or not name_b:
        return 0.0

    a = normalize_name(name_a)
    b = normalize_name(name_b)

    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0

    shared = sum((_bigrams(a) & _bigrams(b)).values())
    return 2.0 * shared / (len(a) + len(b) - 2)


def is_containment(name_a: str | None, name_b: str | None) -> bool:
    """True when one normalised name is a substring of the other."""
    if not name_a or not name_b:
        return False
    a = normalize_name(name_a)
    b = normalize_name(name_b)
    return a in b or b in a


def compute_name_similarity(name_a: str | None, name_b: str | None) -> dict[str, object]:
    """
    Every name signal the match policy looks at, for audit output.

    Returns
    -------
    dict with keys:
        - name_a_normalized, name_b_normalized: the cleaned names
        - exact: bool, normalised names equal (raw names non-empty)
        - containment: bool
        - dice: float [0–1]
    """
    norm_a = normalize_name(name_a)
    norm_b = normalize_name(name_b)
    return {
        "name_a_normalized": norm_a,
        "name_b_normalized": norm_b,
        "exact": bool(name_a) and bool(name_b) and norm_a == norm_b,
        "containment": is_containment(name_a, name_b),
        "dice": round(dice_coefficient(name_a, name_b), 4),
    }
