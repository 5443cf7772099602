"""Restaurant Catalog — spatial-fuzzy deduplication and merge engine."""

from .algorithms import (
    MatchResult,
    SpatialIndex,
    decide,
    dice_coefficient,
    haversine_m,
    is_match,
    merge_records,
    normalize_name,
)
from .config import DedupeConfig
from .engine import DedupeEngine, DedupeResult, EngineState, RunStats, run_dedupe
from .enrichment import enrich_from_reference, infer_cuisine_tags
from .errors import ConfigurationError, DedupeError, EmptyInputError, InvalidRecordError
from .models import Address, Contact, NormalizedRecord, SourceBatch

__all__ = [
    "MatchResult",
    "SpatialIndex",
    "decide",
    "dice_coefficient",
    "haversine_m",
    "is_match",
    "merge_records",
    "normalize_name",
    "DedupeConfig",
    "DedupeEngine",
    "DedupeResult",
    "EngineState",
    "RunStats",
    "run_dedupe",
    "enrich_from_reference",
    "infer_cuisine_tags",
    "ConfigurationError",
    "DedupeError",
    "EmptyInputError",
    "InvalidRecordError",
    "Address",
    "Contact",
    "NormalizedRecord",
    "SourceBatch",
]
