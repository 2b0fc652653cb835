"""Tests for coordinate helpers."""

import pytest

from library_entry.core.models import EntryValidationError
from library_entry.scoring import haversine_meters, validate_coordinates


def test_same_point_is_zero():
    assert haversine_meters(37.7749, -122.4194, 37.7749, -122.4194) == 0.0


def test_one_degree_latitude():
    # One degree of latitude on a 6371 km sphere
    assert haversine_meters(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-3)


def test_distance_is_symmetric():
    a = haversine_meters(37.7749, -122.4194, 37.8199, -122.4783)
    b = haversine_meters(37.8199, -122.4783, 37.7749, -122.4194)
    assert a == pytest.approx(b)


def test_validate_full_pair():
    assert validate_coordinates(37.7749, -122.4194) is True


def test_validate_absent_pair():
    assert validate_coordinates(None, None) is False


@pytest.mark.parametrize(
    "latitude,longitude",
    [
        (37.7749, None),
        (None, -122.4194),
        (91.0, 0.0),
        (0.0, -181.0),
    ],
)
def test_validate_rejects_bad_pairs(latitude, longitude):
    with pytest.raises(EntryValidationError):
        validate_coordinates(latitude, longitude)
