"""
Restaurant Catalog — Uniform Grid Spatial Index

Buckets points into square degree cells so that "what was inserted near
here" only has to look at a 3x3 block of cells instead of every record.

The 3x3 block only covers every point within one cell side of the query.
Pick ``cell_size_degrees`` comfortably larger than the largest match
distance at the latitudes being indexed (see
``geo_math.min_cell_size_degrees``); ``DedupeConfig.validate`` warns when
the two drift apart.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterator

from ..errors import ConfigurationError
from .geo_math import grid_cell


DEFAULT_CELL_SIZE_DEGREES = 0.001   # ~111 m north-south, ~108 m east-west at 14°N


def neighbor_cells(cell: tuple[int, int]) -> list[tuple[int, int]]:
    """Return the 3x3 neighbourhood of a grid cell, centre included."""
    row, col = cell
    return [
        (row + d_row, col + d_col)
        for d_row in (-1, 0, 1)
        for d_col in (-1, 0, 1)
    ]


class SpatialIndex:
    """
    Append-only grid index over (lat, lon) points.

    Items are opaque to the index; the engine stores arena slot numbers.
    There is no delete: absorbed records are tracked by the caller.
    """

    def __init__(self, cell_size_degrees: float = DEFAULT_CELL_SIZE_DEGREES):
        if not cell_size_degrees or cell_size_degrees <= 0:
            raise ConfigurationError(
                f"cell_size_degrees must be > 0, got {cell_size_degrees!r}"
            )
        self.cell_size_degrees = float(cell_size_degrees)
        self._cells: dict[tuple[int, int], list[tuple[int, Any]]] = defaultdict(list)
        self._count = 0

    def __len__(self) -> int:
        return self._count

    @property
    def cell_count(self) -> int:
        return len(self._cells)

    def cell_of(self, lat: float, lon: float) -> tuple[int, int]:
        return grid_cell(lat, lon, self.cell_size_degrees)

    def insert(self, item: Any, lat: float, lon: float) -> tuple[int, int]:
        """Place ``item`` in the bucket for (lat, lon). Returns the cell key."""
        cell = self.cell_of(lat, lon)
        self._cells[cell].append((self._count, item))
        self._count += 1
        return cell

    def candidates_near(self, lat: float, lon: float) -> list[Any]:
        """
        Items in the query cell and its 8 neighbours, in insertion order.

        Insertion order keeps "first match wins" deterministic for callers.
        """
        hits: list[tuple[int, Any]] = []
        for cell in neighbor_cells(self.cell_of(lat, lon)):
            bucket = self._cells.get(cell)
            if bucket:
                hits.extend(bucket)
        hits.sort(key=lambda pair: pair[0])
        return [item for _, item in hits]

    def __iter__(self) -> Iterator[Any]:
        entries = [pair for bucket in self._cells.values() for pair in bucket]
        entries.sort(key=lambda pair: pair[0])
        return iter(item for _, item in entries)
