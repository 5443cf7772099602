"""
Restaurant Catalog — Cuisine Enrichment

Fills empty ``cuisine_tags`` after deduplication:

    - ``infer_cuisine_tags``: keyword lookup on brand and name, then on the
      coarse category.
    - ``enrich_from_reference``: copy tags from the closest same-named
      record of an older catalog (within 50 m, Dice >= 0.6 by default).
"""

from __future__ import annotations

import logging
from typing import Iterable

from .algorithms.geo_math import haversine_m
from .algorithms.name_similarity import dice_coefficient
from .algorithms.spatial_index import DEFAULT_CELL_SIZE_DEGREES, SpatialIndex
from .models import NormalizedRecord

logger = logging.getLogger(__name__)


# Matched as substrings of the lowercased brand or name, first hit wins.
# Longer keys come before shorter ones they contain ("mang inasal" before "inasal").
BRAND_CUISINE_MAP: dict[str, str] = {
    "jollibee": "filipino",
    "mang inasal": "filipino",
    "chowking": "filipino",
    "max's": "filipino",
    "inasal": "filipino",
    "sisig": "filipino",
    "greenwich": "pizza",
    "red ribbon": "bakery",
    "goldilocks": "bakery",
    "mcdonald": "american",
    "burger king": "american",
    "wendy's": "american",
    "kfc": "chicken",
    "popeyes": "chicken",
    "texas chicken": "chicken",
    "starbucks": "coffee_shop",
    "coffee bean": "coffee_shop",
    "tim hortons": "coffee_shop",
    "dunkin": "coffee_shop",
    "bo's coffee": "coffee_shop",
    "krispy kreme": "donut",
    "pizza hut": "pizza",
    "domino": "pizza",
    "shakey's": "pizza",
    "yellow cab": "pizza",
    "papa john": "pizza",
    "sbarro": "pizza",
    "din tai fung": "chinese",
    "tim ho wan": "chinese",
    "dimsum": "chinese",
    "tokyo tokyo": "japanese",
    "yoshinoya": "japanese",
    "marugame": "japanese",
    "ramen": "japanese",
    "sushi": "japanese",
    "teriyaki": "japanese",
    "samgyeopsal": "korean",
    "samgyup": "korean",
    "bonchon": "korean",
    "minute burger": "burger",
    "angel's burger": "burger",
    "zark": "burger",
    "dampa": "seafood",
    "seafood": "seafood",
    "pad thai": "thai",
    "thai": "thai",
    "masala": "indian",
    "curry": "indian",
    "spaghetti": "italian",
    "pasta": "italian",
    "burrito": "mexican",
    "taco": "mexican",
    "panaderya": "bakery",
    "bakery": "bakery",
    "cake": "bakery",
    "ice cream": "ice_cream",
    "gelato": "ice_cream",
    "tiger sugar": "bubble_tea",
    "gong cha": "bubble_tea",
    "milk tea": "bubble_tea",
    "boba": "bubble_tea",
}

CATEGORY_CUISINE_MAP: dict[str, str] = {
    "cafe": "coffee_shop",
    "bakery": "bakery",
    "fast_food": "fast_food",
}


def infer_cuisine_tags(record: NormalizedRecord) -> NormalizedRecord:
    """
    Return ``record`` with inferred cuisine tags, or unchanged.

    Records that already carry tags are returned as is.
    """
    if record.cuisine_tags:
        return record

    brand = (record.brand or "").lower()
    name = (record.name or "").lower()
    for keyword, cuisine in BRAND_CUISINE_MAP.items():
        if keyword in brand or keyword in name:
            return record.model_copy(update={"cuisine_tags": [cuisine]})

    category = (record.category or "").lower()
    if category in CATEGORY_CUISINE_MAP:
        return record.model_copy(update={"cuisine_tags": [CATEGORY_CUISINE_MAP[category]]})

    return record


def enrich_from_reference(
    records: Iterable[NormalizedRecord],
    reference: Iterable[NormalizedRecord],
    *,
    max_distance_m: float = 50.0,
    min_similarity: float = 0.6,
    cell_size_degrees: float = DEFAULT_CELL_SIZE_DEGREES,
) -> tuple[list[NormalizedRecord], int]:
    """
    Fill empty ``cuisine_tags`` from an older catalog.

    For each record without tags, reference records within
    ``max_distance_m`` that carry tags are scored by Dice similarity; the
    best one at or above ``min_similarity`` donates its tags and its source
    joins the record's provenance.

    Returns
    -------
    (records, enriched_count): a new list, inputs untouched.
    """
    index = SpatialIndex(cell_size_degrees)
    donors = [r for r in reference if r.cuisine_tags]
    for i, donor in enumerate(donors):
        index.insert(i, donor.latitude, donor.longitude)
    logger.info("Reference index: %d records with cuisine tags", len(donors))

    out: list[NormalizedRecord] = []
    enriched = 0
    for record in records:
        if record.cuisine_tags:
            out.append(record)
            continue

        best: NormalizedRecord | None = None
        best_score = 0.0
        for i in index.candidates_near(record.latitude, record.longitude):
            donor = donors[i]
            dist = haversine_m(record.latitude, record.longitude, donor.latitude, donor.longitude)
            if dist > max_distance_m:
                continue
            score = dice_coefficient(record.name, donor.name)
            if score >= min_similarity and score > best_score:
                best, best_score = donor, score

        if best is None:
            out.append(record)
            continue

        out.append(record.model_copy(update={
            "cuisine_tags": list(best.cuisine_tags),
            "provenance": set(record.provenance) | {best.source},
        }))
        enriched += 1

    logger.info("Enriched %d records with cuisine from reference catalog", enriched)
    return out, enriched
