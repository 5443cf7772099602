"""
Restaurant Catalog — Deduplication Configuration

Every tunable of a run lives on ``DedupeConfig``.  Defaults are below;
``dedupe_rules.yaml`` (shipped inside the package) overrides them at runtime and
``with_overrides`` adjusts a single run without touching the file.

Dependencies:
    pip install pyyaml
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .algorithms.geo_math import BoundingBox, cell_span_m
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Defaults (overridden by dedupe_rules.yaml at runtime)
# ---------------------------------------------------------------------------

_DEFAULT_SPATIAL = {
    "cell_size_degrees": 0.001,     # ~100 m at the equator
    "reference_latitude": 0.0,
}

_DEFAULT_MATCH = {
    "max_distance_meters": 100.0,
    "containment_distance_meters": 50.0,
    "name_similarity_threshold": 0.6,
}

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "dedupe_rules.yaml"


_NUMERIC_FIELDS = (
    "cell_size_degrees",
    "reference_latitude",
    "max_distance_meters",
    "containment_distance_meters",
    "name_similarity_threshold",
)


def _as_finite(name: str, value: Any) -> float:
    """Coerce a tunable to a finite float or raise ConfigurationError."""
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    return number


@dataclass
class DedupeConfig:
    """Tunables for one deduplication run."""

    cell_size_degrees: float = _DEFAULT_SPATIAL["cell_size_degrees"]
    reference_latitude: float = _DEFAULT_SPATIAL["reference_latitude"]
    max_distance_meters: float = _DEFAULT_MATCH["max_distance_meters"]
    containment_distance_meters: float = _DEFAULT_MATCH["containment_distance_meters"]
    name_similarity_threshold: float = _DEFAULT_MATCH["name_similarity_threshold"]
    # Source trust order (index 0 = highest priority); unlisted sources follow
    source_priority: list[str] = field(default_factory=list)
    min_confidence: dict[str, float] = field(default_factory=dict)
    region_bounds: BoundingBox | None = None
    infer_cuisine: bool = False

    @classmethod
    def from_yaml(cls, path: str | Path) -> "DedupeConfig":
        """Load configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DedupeConfig":
        """Build a config from the sectioned layout used by the YAML file."""
        spatial = raw.get("spatial_index", {}) or {}
        match = raw.get("match_policy", {}) or {}
        sources = raw.get("sources", {}) or {}
        bounds = raw.get("region_bounds")
        enrichment = raw.get("enrichment", {}) or {}

        region = None
        if bounds:
            try:
                region = BoundingBox(
                    south=float(bounds["south"]),
                    north=float(bounds["north"]),
                    west=float(bounds["west"]),
                    east=float(bounds["east"]),
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise ConfigurationError(f"region_bounds is malformed: {bounds!r}") from exc

        return cls(
            cell_size_degrees=spatial.get("cell_size_degrees", _DEFAULT_SPATIAL["cell_size_degrees"]),
            reference_latitude=spatial.get("reference_latitude", _DEFAULT_SPATIAL["reference_latitude"]),
            max_distance_meters=match.get("max_distance_meters", _DEFAULT_MATCH["max_distance_meters"]),
            containment_distance_meters=match.get(
                "containment_distance_meters", _DEFAULT_MATCH["containment_distance_meters"]
            ),
            name_similarity_threshold=match.get(
                "name_similarity_threshold", _DEFAULT_MATCH["name_similarity_threshold"]
            ),
            source_priority=list(sources.get("priority", []) or []),
            min_confidence=dict(sources.get("min_confidence", {}) or {}),
            region_bounds=region,
            infer_cuisine=bool(enrichment.get("infer_cuisine", False)),
        )

    @classmethod
    def load_default(cls) -> "DedupeConfig":
        """The dedupe_rules.yaml shipped with the package."""
        return cls.from_yaml(DEFAULT_CONFIG_PATH)

    def with_overrides(self, **overrides: Any) -> "DedupeConfig":
        """Copy of this config with some fields replaced, for a single run."""
        return dataclasses.replace(self, **overrides)

    def source_rank(self, source: str) -> int:
        """Lower rank = higher priority."""
        try:
            return self.source_priority.index(source)
        except ValueError:
            return len(self.source_priority)

    def validate(self) -> None:
        """
        Raise ConfigurationError on any out-of-range tunable.

        Numeric tunables are coerced to float in place, so a quoted YAML
        value such as "0.6" is accepted.
        """
        for name in _NUMERIC_FIELDS:
            setattr(self, name, _as_finite(name, getattr(self, name)))
        self.min_confidence = {
            source: _as_finite(f"min_confidence[{source!r}]", floor)
            for source, floor in self.min_confidence.items()
        }

        if self.cell_size_degrees <= 0:
            raise ConfigurationError(f"cell_size_degrees must be > 0, got {self.cell_size_degrees!r}")
        if self.max_distance_meters < 0:
            raise ConfigurationError(f"max_distance_meters must be >= 0, got {self.max_distance_meters!r}")
        if self.containment_distance_meters < 0:
            raise ConfigurationError(
                f"containment_distance_meters must be >= 0, got {self.containment_distance_meters!r}"
            )
        if not 0.0 <= self.name_similarity_threshold <= 1.0:
            raise ConfigurationError(
                f"name_similarity_threshold must be in [0, 1], got {self.name_similarity_threshold!r}"
            )
        for source, floor in self.min_confidence.items():
            if not 0.0 <= floor <= 1.0:
                raise ConfigurationError(f"min_confidence for {source!r} must be in [0, 1], got {floor!r}")
        if self.region_bounds is not None:
            box = self.region_bounds
            for side in ("south", "north", "west", "east"):
                _as_finite(f"region_bounds.{side}", getattr(box, side))
            if box.south > box.north or box.west > box.east:
                raise ConfigurationError(f"region_bounds is inverted: {box!r}")

        if self.containment_distance_meters > self.max_distance_meters:
            logger.warning(
                "containment_distance_meters (%.1f) exceeds max_distance_meters (%.1f); "
                "the distance gate makes the extra slack unreachable",
                self.containment_distance_meters, self.max_distance_meters,
            )

        span = cell_span_m(self.cell_size_degrees, self.reference_latitude)
        if span < self.max_distance_meters:
            logger.warning(
                "Grid cell side %.1f m at latitude %.2f is below max_distance_meters %.1f m; "
                "the 3x3 candidate block can miss matches near cell edges",
                span, self.reference_latitude, self.max_distance_meters,
            )
