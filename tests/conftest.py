"""Shared fixtures for the catalog deduplication tests."""

import pytest

from catalog_dedup.models import NormalizedRecord, SourceBatch


# Makati CBD, Metro Manila
MAKATI = (14.5547, 121.0244)


@pytest.fixture()
def make_record():
    """Factory for NormalizedRecord with sensible defaults."""

    def _make(rid="r1", name="Test Kitchen", lat=MAKATI[0], lon=MAKATI[1], source="osm", **fields):
        return NormalizedRecord(
            id=rid,
            source=source,
            name=name,
            latitude=lat,
            longitude=lon,
            **fields,
        )

    return _make


@pytest.fixture()
def jollibee_batches():
    """The OSM / places-index Jollibee pair, ~30 m apart."""
    return [
        SourceBatch(
            source_name="osm",
            records=[{"id": "a1", "name": "Jollibee Makati", "latitude": 14.5547, "longitude": 121.0244}],
        ),
        SourceBatch(
            source_name="places",
            records=[{"id": "b1", "name": "Jollibee", "latitude": 14.5549, "longitude": 121.0246}],
        ),
    ]
