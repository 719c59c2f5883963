import math

import pytest

from utils import (
    calculate_bearing,
    calculate_distance,
    calculate_elevation_gain,
    calculate_route_distance,
    format_distance,
    format_duration,
    format_route_summary,
    get_route_statistics,
    is_valid_coordinates,
    parse_pace,
    smooth_array,
)


@pytest.mark.parametrize(
    "a,b",
    [
        ((0.0, 0.0), (0.0, 0.01)),
        ((59.3293, 18.0686), (57.7089, 11.9746)),
        ((-33.86, 151.21), (51.5, -0.12)),
    ],
)
def test_distance_is_symmetric(a, b):
    assert calculate_distance(a, b) == pytest.approx(calculate_distance(b, a))


def test_distance_zero_for_same_point():
    assert calculate_distance((59.3, 18.0), (59.3, 18.0)) == 0


def test_distance_one_hundredth_degree_at_equator():
    assert calculate_distance((0, 0), (0, 0.01)) == pytest.approx(1.11195, rel=1e-4)


def test_distance_propagates_nan():
    assert math.isnan(calculate_distance((float("nan"), 0), (0, 0)))


def test_route_distance_sums_segments():
    route = [(0, 0), (0, 0.01), (0, 0.02)]
    assert calculate_route_distance(route) == pytest.approx(2 * calculate_distance((0, 0), (0, 0.01)))
    assert calculate_route_distance(route[:1]) == 0


def test_bearing_cardinal_directions():
    assert calculate_bearing((0, 0), (1, 0)) == pytest.approx(0)
    assert calculate_bearing((0, 0), (0, 1)) == pytest.approx(90)
    assert calculate_bearing((0, 0), (-1, 0)) == pytest.approx(180)
    assert calculate_bearing((0, 0), (0, -1)) == pytest.approx(270)


def test_bearing_is_normalized():
    for target in [(1, 1), (-1, -1), (1, -1), (-1, 1)]:
        assert 0 <= calculate_bearing((0, 0), target) < 360


def test_validate_coordinates():
    assert is_valid_coordinates(90, 180)
    assert not is_valid_coordinates(91, 0)
    assert not is_valid_coordinates(0, -181)


def test_smooth_array_short_input_unchanged():
    assert smooth_array([1.0, 2.0], 5) == [1.0, 2.0]


def test_smooth_array_window():
    assert smooth_array([0.0, 3.0, 0.0, 3.0], 3) == [1.5, 1.0, 2.0, 1.5]


def test_elevation_gain_ignores_descents():
    assert calculate_elevation_gain([10, 20, 15, 30]) == 25


def test_parse_pace():
    assert parse_pace("5:30") == 5.5
    assert parse_pace("bad") == 5.5


def test_formatting():
    assert format_duration(75) == "01:15"
    assert format_duration(3725) == "01:02:05"
    assert format_distance(0.5) == "500 m"
    assert format_distance(2.345) == "2.35 km"


def test_end_to_end_statistics():
    stats = get_route_statistics([(0, 0), (0, 0.01)], 5.5)
    assert stats["distance_km"] == pytest.approx(1.11195, rel=1e-4)
    assert stats["duration_minutes"] == pytest.approx(stats["distance_km"] * 5.5)
    assert stats["duration_minutes"] == pytest.approx(6.1157, rel=1e-3)
    summary = format_route_summary(stats)
    assert summary["distance"] == "1.1 km"
    assert summary["duration"] == "0:06"
    assert summary["pace"] == "5:30"


def test_statistics_with_elevations():
    stats = get_route_statistics([(0, 0), (0, 0.01), (0, 0.02)], 6, [100, 130, 110])
    assert stats["elevation_gain"] == 30
    assert stats["elevation_loss"] == 20
    assert stats["max_elevation"] == 130
    assert stats["min_elevation"] == 100
