"""
Restaurant Catalog — Record Merger

Combines a kept record with a record it absorbs into one new record.
Pure: neither input is modified, so callers can compare before committing.

Field policy:
    - scalar fields       → kept value, else absorbed value, else default
    - address / contact   → same rule, applied per sub-field
    - cuisine_tags        → kept's tags, then absorbed's tags not yet present
    - provenance          → union
    - feature flags       → logical OR
    - id / source         → always kept's
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from ..models import FEATURE_FLAGS, Address, Contact, NormalizedRecord


# First non-empty wins, kept before absorbed
_FILL_FIELDS = (
    "name",
    "latitude",
    "longitude",
    "category",
    "brand",
    "opening_hours",
    "confidence",
    "rating",
    "rating_count",
    "price_level",
)


def is_empty(value: Any) -> bool:
    """None, blank strings and empty collections count as missing."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def _first_non_empty(kept: Any, absorbed: Any) -> Any:
    if not is_empty(kept):
        return kept
    if not is_empty(absorbed):
        return absorbed
    return kept


def _merge_nested(kept: BaseModel | None, absorbed: BaseModel | None, model: type[BaseModel]) -> BaseModel | None:
    if kept is None and absorbed is None:
        return None
    if kept is None:
        return absorbed.model_copy()
    if absorbed is None:
        return kept.model_copy()
    values = {
        name: _first_non_empty(getattr(kept, name), getattr(absorbed, name))
        for name in model.model_fields
    }
    return model(**values)


def _union(first: list[str], second: list[str]) -> list[str]:
    combined = list(first)
    for item in second:
        if item not in combined:
            combined.append(item)
    return combined


def merge_records(kept: NormalizedRecord, absorbed: NormalizedRecord) -> NormalizedRecord:
    """
    Merge ``absorbed`` into ``kept`` and return the combined record.

    The kept record's id and source survive; the absorbed record's source
    lives on in ``provenance`` and its ``source:id`` key in ``merged_from``.
    Merging a record with itself returns an equal record.
    """
    update: dict[str, Any] = {
        name: _first_non_empty(getattr(kept, name), getattr(absorbed, name))
        for name in _FILL_FIELDS
    }

    update["address"] = _merge_nested(kept.address, absorbed.address, Address)
    update["contact"] = _merge_nested(kept.contact, absorbed.contact, Contact)
    update["cuisine_tags"] = _union(kept.cuisine_tags, absorbed.cuisine_tags)

    for flag in FEATURE_FLAGS:
        update[flag] = bool(getattr(kept, flag) or getattr(absorbed, flag))

    update["provenance"] = set(kept.provenance) | set(absorbed.provenance)

    merged_from = _union(kept.merged_from, absorbed.merged_from)
    if absorbed.key != kept.key and absorbed.key not in merged_from:
        merged_from.append(absorbed.key)
    update["merged_from"] = merged_from

    return kept.model_copy(update=update)
