"""Tests for catalog_dedup — geospatial math module."""

import math

import pytest

from catalog_dedup.algorithms.geo_math import (
    BoundingBox,
    Coordinate,
    cell_span_m,
    grid_cell,
    haversine_m,
    is_valid_coordinate,
    min_cell_size_degrees,
)


# ---- Coordinate / validity ---------------------------------------------------


class TestCoordinateValidity:
    def test_manila_is_valid(self):
        assert Coordinate(latitude=14.5995, longitude=120.9842).is_valid()

    def test_extremes_are_valid(self):
        assert is_valid_coordinate(90.0, 180.0)
        assert is_valid_coordinate(-90.0, -180.0)

    def test_out_of_range(self):
        assert not is_valid_coordinate(90.0001, 0.0)
        assert not is_valid_coordinate(0.0, -180.5)

    def test_non_finite(self):
        assert not is_valid_coordinate(math.nan, 121.0)
        assert not is_valid_coordinate(14.5, math.inf)

    def test_missing(self):
        assert not is_valid_coordinate(None, 121.0)
        assert not is_valid_coordinate(14.5, None)

    def test_frozen(self):
        coord = Coordinate(latitude=14.0, longitude=121.0)
        with pytest.raises(AttributeError):
            coord.latitude = 15.0  # type: ignore[misc]


# ---- haversine_m ------------------------------------------------------------


class TestHaversineM:
    def test_same_point_is_zero(self):
        assert haversine_m(14.5547, 121.0244, 14.5547, 121.0244) == 0.0

    def test_one_degree_of_latitude(self):
        assert haversine_m(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_194.93, rel=1e-6)

    def test_symmetry(self):
        pairs = [
            ((14.5547, 121.0244), (14.5549, 121.0246)),
            ((14.55, 121.02), (14.70, 121.10)),
            ((-33.86, 151.21), (51.50, -0.12)),
        ]
        for (lat1, lon1), (lat2, lon2) in pairs:
            assert haversine_m(lat1, lon1, lat2, lon2) == pytest.approx(haversine_m(lat2, lon2, lat1, lon1))

    def test_short_distance_in_makati(self):
        """The Jollibee pair sits ~30 m apart."""
        dist = haversine_m(14.5547, 121.0244, 14.5549, 121.0246)
        assert 20.0 < dist < 40.0

    def test_starbucks_pair_is_about_18km(self):
        dist = haversine_m(14.55, 121.02, 14.70, 121.10)
        assert 18_000.0 < dist < 19_500.0


# ---- grid_cell --------------------------------------------------------------


class TestGridCell:
    def test_floor_division(self):
        assert grid_cell(14.5547, 121.0244, 0.001) == (14554, 121024)

    def test_negative_coordinates_floor_down(self):
        assert grid_cell(-0.0005, -0.0005, 0.001) == (-1, -1)

    def test_origin(self):
        assert grid_cell(0.0, 0.0, 0.001) == (0, 0)

    def test_deterministic(self):
        assert grid_cell(14.6, 121.0, 0.01) == grid_cell(14.6, 121.0, 0.01)


# ---- cell sizing ------------------------------------------------------------


class TestCellSizing:
    def test_span_at_equator(self):
        assert cell_span_m(0.001) == pytest.approx(111.19, abs=0.01)

    def test_span_shrinks_with_latitude(self):
        assert cell_span_m(0.001, 60.0) == pytest.approx(55.6, abs=0.1)

    def test_min_cell_size_round_trips_to_distance(self):
        size = min_cell_size_degrees(100.0, 45.0)
        assert cell_span_m(size, 45.0) == pytest.approx(100.0)

    def test_default_cell_too_small_far_north(self):
        """0.001° cells no longer cover 100 m in longitude above ~26°."""
        assert cell_span_m(0.001, 50.0) < 100.0


# ---- BoundingBox ------------------------------------------------------------


class TestBoundingBox:
    @pytest.fixture()
    def metro_manila(self):
        return BoundingBox(south=14.35, north=14.80, west=120.90, east=121.15)

    def test_inside(self, metro_manila):
        assert metro_manila.contains(14.5547, 121.0244)

    def test_outside(self, metro_manila):
        # Tagaytay
        assert not metro_manila.contains(14.1153, 120.9621)

    def test_edges_inclusive(self, metro_manila):
        assert metro_manila.contains(14.35, 120.90)
