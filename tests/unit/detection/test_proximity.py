"""Tests for proximity helpers."""

import pytest

from wastemap.core.records import Coordinates
from wastemap.detection.proximity import (
    coordinate_haversine,
    degree_distance,
    haversine_distance,
    within_threshold,
)


class TestWithinThreshold:
    """Tests for the degree box test."""

    def test_same_point_within(self):
        """Identical points are within any positive threshold."""
        point = Coordinates(22.6950, 88.3794)
        assert within_threshold(point, point) is True

    def test_just_inside_threshold(self):
        """0.0049 degrees on both axes is within the default box."""
        a = Coordinates(22.0, 88.0)
        b = Coordinates(22.0049, 88.0049)
        assert within_threshold(a, b) is True

    def test_just_outside_latitude(self):
        """0.0051 degrees of latitude is outside the default box."""
        a = Coordinates(22.0, 88.0)
        b = Coordinates(22.0051, 88.0)
        assert within_threshold(a, b) is False

    def test_just_outside_longitude(self):
        """0.0051 degrees of longitude is outside the default box."""
        a = Coordinates(22.0, 88.0)
        b = Coordinates(22.0, 88.0051)
        assert within_threshold(a, b) is False

    def test_both_axes_must_pass(self):
        """Passing on one axis is not enough."""
        a = Coordinates(22.0, 88.0)
        b = Coordinates(22.001, 88.01)
        assert within_threshold(a, b) is False

    def test_custom_thresholds(self):
        """Thresholds are configurable per axis."""
        a = Coordinates(22.0, 88.0)
        b = Coordinates(22.008, 88.0)
        assert within_threshold(a, b) is False
        assert within_threshold(a, b, lat_threshold=0.01) is True

    def test_symmetric(self):
        """Order of arguments does not matter."""
        a = Coordinates(22.0, 88.0)
        b = Coordinates(21.997, 88.002)
        assert within_threshold(a, b) == within_threshold(b, a)


class TestDegreeDistance:
    """Tests for Euclidean degree distance."""

    def test_zero_for_same_point(self):
        point = Coordinates(22.0, 88.0)
        assert degree_distance(point, point) == 0.0

    def test_pythagorean(self):
        """3-4-5 triangle in degree space."""
        a = Coordinates(0.3, 0.4)
        b = Coordinates(0.0, 0.0)
        assert degree_distance(a, b) == pytest.approx(0.5)

    def test_ranks_closer_points_lower(self):
        origin = Coordinates(22.0, 88.0)
        near = Coordinates(22.001, 88.001)
        far = Coordinates(22.003, 88.003)
        assert degree_distance(origin, near) < degree_distance(origin, far)


class TestHaversineDistance:
    """Tests for haversine distance calculation."""

    def test_same_point_zero_distance(self):
        """Same point should return zero distance."""
        distance = haversine_distance(22.6950, 88.3794, 22.6950, 88.3794)
        assert distance == pytest.approx(0.0, abs=0.001)

    def test_known_distance(self):
        """Howrah station to Esplanade is roughly 9-10 km."""
        distance = haversine_distance(22.5958, 88.2636, 22.5648, 88.3512)
        assert 8000 < distance < 11000

    def test_threshold_is_roughly_500m(self):
        """0.005 degrees of latitude is about 556 metres."""
        distance = haversine_distance(22.0, 88.0, 22.005, 88.0)
        assert 540 < distance < 570

    def test_commutative(self):
        """Distance should be same regardless of point order."""
        a = Coordinates(22.6950, 88.3794)
        b = Coordinates(22.5726, 88.3639)
        assert coordinate_haversine(a, b) == pytest.approx(
            coordinate_haversine(b, a), abs=0.001
        )
