"""Record models for the restaurant catalog deduplication engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator


# Flags merged with logical OR: any source asserting True wins over silence.
FEATURE_FLAGS = (
    "has_delivery",
    "has_takeaway",
    "accepts_reservations",
    "outdoor_seating",
    "wheelchair_accessible",
)


class Address(BaseModel):
    formatted: str | None = None
    street: str | None = None
    locality: str | None = None
    city: str | None = None
    postal_code: str | None = None


class Contact(BaseModel):
    phone: str | None = None
    website: str | None = None
    email: str | None = None


class NormalizedRecord(BaseModel):
    """
    One restaurant / point of interest in the shared cross-source schema.

    Ingestion collaborators translate each API's payload into this shape.
    The model only coerces types; name and coordinate checks belong to the
    engine so a bad record is counted and dropped instead of raising.
    """

    id: str = Field(..., description="Stable per-source identifier")
    source: str = Field(..., description="Origin tag: osm, places-index, ratings, merged, ...")
    name: str = Field("", description="Display name")
    latitude: float
    longitude: float
    address: Address | None = None
    contact: Contact | None = None
    cuisine_tags: list[str] = Field(default_factory=list)
    category: str | None = Field(None, description="Coarse type: restaurant, cafe, bakery, ...")
    brand: str | None = None
    opening_hours: str | None = None
    confidence: float | None = Field(None, ge=0.0, le=1.0)

    rating: float | None = None
    rating_count: int | None = None
    price_level: int | None = None

    has_delivery: bool = False
    has_takeaway: bool = False
    accepts_reservations: bool = False
    outdoor_seating: bool = False
    wheelchair_accessible: bool = False

    provenance: set[str] = Field(default_factory=set)
    merged_from: list[str] = Field(
        default_factory=list,
        description="source:id keys of records absorbed into this one",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # OSM node ids arrive as ints
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("cuisine_tags", mode="before")
    @classmethod
    def _normalize_cuisines(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.replace(";", ",").split(",")
        tags: list[str] = []
        for tag in value:
            if not isinstance(tag, str):
                continue
            tag = tag.strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    @model_validator(mode="after")
    def _source_in_provenance(self) -> "NormalizedRecord":
        if self.source and self.source not in self.provenance:
            self.provenance.add(self.source)
        return self

    @field_serializer("provenance", when_used="json")
    def _sorted_provenance(self, value: set[str]) -> list[str]:
        return sorted(value)

    @property
    def key(self) -> str:
        """Globally unique ``source:id`` key."""
        return f"{self.source}:{self.id}"


@dataclass
class SourceBatch:
    """
    One source's records, as handed over by an ingestion collaborator.

    ``records`` may hold NormalizedRecord instances or plain mappings
    (e.g. straight from JSON); mappings without a ``source`` key take
    ``source_name``.  Lower ``priority`` is processed first.
    """

    source_name: str
    records: list[NormalizedRecord | Mapping[str, Any]] = field(default_factory=list)
    priority: int = 0

    def __len__(self) -> int:
        return len(self.records)
