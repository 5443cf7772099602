"""
Restaurant Catalog — Match Policy

Decides whether two records describe the same establishment.

The decision is a ladder, not a blended score.  Distance is a hard gate
because short or generic names ("Cafe", "Jollibee") say little on their
own; after the gate three name tests run from strongest to weakest and the
first one that succeeds decides:

    1. same source and same id          → identity
    2. distance > max_distance_meters   → no match
    3. normalised names equal           → exact_name
    4. one name contains the other and
       distance <= containment_distance → containment
    5. Dice >= name_similarity_threshold → dice
    6. anything else                    → no match

A containment pair farther apart than the containment distance is not a
success at step 4 and still gets its Dice chance at step 5.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..config import DedupeConfig
from ..models import NormalizedRecord
from .geo_math import haversine_m
from .name_similarity import dice_coefficient, is_containment, normalize_name


RULE_IDENTITY = "identity"
RULE_EXACT_NAME = "exact_name"
RULE_CONTAINMENT = "containment"
RULE_DICE = "dice"
RULE_BEYOND_DISTANCE = "beyond_max_distance"
RULE_BELOW_THRESHOLD = "below_threshold"


@dataclass
class MatchResult:
    """Outcome of comparing two records, with the evidence behind it."""

    record_a_key: str
    record_b_key: str
    matched: bool
    rule: str
    distance_m: float | None
    name_score: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_a_key": self.record_a_key,
            "record_b_key": self.record_b_key,
            "matched": self.matched,
            "rule": self.rule,
            "distance_m": self.distance_m,
            "name_score": self.name_score,
        }


def decide(
    record_a: NormalizedRecord,
    record_b: NormalizedRecord,
    config: DedupeConfig | None = None,
) -> MatchResult:
    """
    Run the match ladder on two records.

    Parameters
    ----------
    record_a, record_b : NormalizedRecord
        Records with valid coordinates (the engine rejects the rest).
    config : DedupeConfig, optional
        Distance and similarity thresholds. Uses defaults if not provided.

    Returns
    -------
    MatchResult whose ``rule`` names the rung that decided the outcome.
    """
    if config is None:
        config = DedupeConfig()

    key_a = record_a.key
    key_b = record_b.key

    if record_a.source == record_b.source and record_a.id == record_b.id:
        return MatchResult(key_a, key_b, True, RULE_IDENTITY, None)

    dist = haversine_m(
        record_a.latitude, record_a.longitude,
        record_b.latitude, record_b.longitude,
    )
    dist_r = round(dist, 2)

    if dist > config.max_distance_meters:
        return MatchResult(key_a, key_b, False, RULE_BEYOND_DISTANCE, dist_r)

    norm_a = normalize_name(record_a.name)
    norm_b = normalize_name(record_b.name)

    if norm_a == norm_b:
        return MatchResult(key_a, key_b, True, RULE_EXACT_NAME, dist_r, 1.0)

    if is_containment(record_a.name, record_b.name) and dist <= config.containment_distance_meters:
        return MatchResult(key_a, key_b, True, RULE_CONTAINMENT, dist_r)

    score = dice_coefficient(record_a.name, record_b.name)
    if score >= config.name_similarity_threshold:
        return MatchResult(key_a, key_b, True, RULE_DICE, dist_r, round(score, 4))

    return MatchResult(key_a, key_b, False, RULE_BELOW_THRESHOLD, dist_r, round(score, 4))


def is_match(
    record_a: NormalizedRecord,
    record_b: NormalizedRecord,
    config: DedupeConfig | None = None,
) -> bool:
    """Return True if the two records are the same establishment."""
    return decide(record_a, record_b, config).matched
