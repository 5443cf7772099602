"""Restaurant Catalog — Deduplication Algorithms."""

# geo_math must load before match_policy (match_policy → config → geo_math)
from .geo_math import (
    BoundingBox,
    Coordinate,
    cell_span_m,
    grid_cell,
    haversine_m,
    is_valid_coordinate,
    min_cell_size_degrees,
)
from .name_similarity import (
    compute_name_similarity,
    dice_coefficient,
    is_containment,
    normalize_name,
)
from .spatial_index import SpatialIndex
from .match_policy import (
    MatchResult,
    decide,
    is_match,
)
from .record_merger import merge_records

__all__ = [
    "BoundingBox",
    "Coordinate",
    "cell_span_m",
    "grid_cell",
    "haversine_m",
    "is_valid_coordinate",
    "min_cell_size_degrees",
    "compute_name_similarity",
    "dice_coefficient",
    "is_containment",
    "normalize_name",
    "SpatialIndex",
    "MatchResult",
    "decide",
    "is_match",
    "merge_records",
]
