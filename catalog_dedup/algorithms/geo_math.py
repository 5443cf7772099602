"""
Restaurant Catalog — Geospatial Math

Great-circle distance, coordinate validity and grid bucketing for the
spatial index.  Pure functions, no state.

No geo libraries needed; stdlib math covers a city-scale grid.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EARTH_RADIUS_M = 6_371_000.0

# Length of one degree of latitude on the sphere above (~111.2 km)
METERS_PER_DEGREE = EARTH_RADIUS_M * math.pi / 180.0


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 coordinate pair."""
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return is_valid_coordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lon box used to keep a run inside one region."""
    south: float
    north: float
    west: float
    east: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.south <= latitude <= self.north
            and self.west <= longitude <= self.east
        )


def is_valid_coordinate(latitude: float | None, longitude: float | None) -> bool:
    """Both values finite and inside the WGS84 ranges."""
    if latitude is None or longitude is None:
        return False
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


# ---------------------------------------------------------------------------
# Core distance calculation
# ---------------------------------------------------------------------------


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Compute the great-circle distance in metres between two WGS84 points
    using the Haversine formula.

    Callers guarantee valid coordinates; there are no error conditions.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


# ---------------------------------------------------------------------------
# Grid bucketing
# ---------------------------------------------------------------------------


def grid_cell(lat: float, lon: float, cell_size_degrees: float) -> tuple[int, int]:
    """Return the (row, col) bucket of a coordinate on a uniform degree grid."""
    return (
        math.floor(lat / cell_size_degrees),
        math.floor(lon / cell_size_degrees),
    )


def cell_span_m(cell_size_degrees: float, latitude: float = 0.0) -> float:
    """
    Smallest side of a grid cell in metres at the given latitude.

    East-west spans shrink with cos(latitude), so away from the equator the
    longitude side is the binding one.
    """
    lat_side = cell_size_degrees * METERS_PER_DEGREE
    lon_side = lat_side * math.cos(math.radians(latitude))
    return min(lat_side, lon_side)


def min_cell_size_degrees(max_distance_m: float, latitude: float = 0.0) -> float:
    """
    Smallest cell size for which a 3x3 neighbourhood still covers every
    point within ``max_distance_m`` of the centre cell at ``latitude``.
    """
    cos_lat = math.cos(math.radians(latitude))
    if cos_lat <= 0:
        raise ValueError(f"no finite cell size covers latitude {latitude}")
    return max_distance_m / (METERS_PER_DEGREE * cos_lat)
