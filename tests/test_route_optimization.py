import pytest

from errors import InvalidInputError
from route_optimization import (
    decimate,
    decimate_indices,
    douglas_peucker,
    generate_route_stats,
    optimize_distance,
    optimize_route,
    optimize_route_multi,
    point_to_line_distance,
    simplify_route,
    smooth_route,
)
from utils import calculate_route_distance

ZIGZAG = [(0.0, 0.0), (1.0, 0.5), (2.0, -0.5), (3.0, 0.7), (4.0, 0.0)]


def test_point_to_line_distance_perpendicular_and_clamped():
    assert point_to_line_distance((1, 1), (0, 0), (2, 0)) == pytest.approx(1)
    # Beyond the segment end the distance is to the endpoint.
    assert point_to_line_distance((3, 0), (0, 0), (2, 0)) == pytest.approx(1)
    # Degenerate segment.
    assert point_to_line_distance((3, 4), (0, 0), (0, 0)) == pytest.approx(5)


def test_douglas_peucker_zero_tolerance_keeps_all_points():
    assert douglas_peucker(ZIGZAG, 0) == ZIGZAG


def test_douglas_peucker_large_tolerance_keeps_endpoints():
    assert douglas_peucker(ZIGZAG, 100) == [ZIGZAG[0], ZIGZAG[-1]]


def test_douglas_peucker_large_tolerance_without_endpoints():
    assert douglas_peucker(ZIGZAG, 100, preserve_endpoints=False) == [ZIGZAG[0]]


def test_douglas_peucker_short_input_unchanged():
    assert douglas_peucker([(0, 0), (1, 1)], 10) == [(0, 0), (1, 1)]


def test_douglas_peucker_drops_collinear_points():
    line = [(0.0, float(i)) for i in range(6)]
    assert douglas_peucker(line, 0.01) == [line[0], line[-1]]


def test_simplify_route_keeps_significant_corner():
    route = [(0.0, 0.0), (0.0, 1.0), (0.00001, 1.5), (0.0, 2.0), (1.0, 2.0)]
    simplified = simplify_route(route, tolerance=0.001)
    assert simplified == [(0.0, 0.0), (0.0, 2.0), (1.0, 2.0)]


@pytest.mark.parametrize("n,k", [(11, 5), (250, 100), (101, 100), (7, 2)])
def test_decimate_returns_exactly_k_points(n, k):
    points = [(float(i), 0.0) for i in range(n)]
    result = decimate(points, k)
    assert len(result) == k
    assert result[0] == points[0]
    assert result[-1] == points[-1]
    assert len(set(result)) == k


def test_decimate_short_input_unchanged():
    points = [(0.0, 0.0), (1.0, 1.0)]
    assert decimate(points, 10) == points


def test_decimate_rejects_tiny_target():
    with pytest.raises(InvalidInputError):
        decimate([(0, 0), (1, 1), (2, 2)], 1)


def test_smooth_route_preserves_endpoints():
    smoothed = smooth_route(ZIGZAG)
    assert smoothed[0] == ZIGZAG[0]
    assert smoothed[-1] == ZIGZAG[-1]
    assert abs(smoothed[1][1]) < abs(ZIGZAG[1][1])


def test_optimize_distance_never_longer():
    route = [(59.300, 18.000), (59.305, 18.010), (59.300, 18.020)]
    optimized = optimize_distance(route, max_iterations=5)
    assert optimized[0] == route[0] and optimized[-1] == route[-1]
    assert calculate_route_distance(optimized) <= calculate_route_distance(route)


def test_optimize_route_dispatch():
    assert optimize_route(ZIGZAG, "simplification", tolerance=100) == [ZIGZAG[0], ZIGZAG[-1]]
    with pytest.raises(InvalidInputError):
        optimize_route(ZIGZAG, "teleport")


def test_optimize_route_multi_chains_algorithms():
    result = optimize_route_multi(ZIGZAG, ["smoothing", "simplification"], {"simplification": {"tolerance": 100}})
    assert result == [ZIGZAG[0], ZIGZAG[-1]]


def test_generate_route_stats():
    stats = generate_route_stats([(0, 0), (0, 0.01), (0, 0.02)])
    assert stats["points"] == 3
    assert stats["average_segment_length"] == pytest.approx(stats["distance"] / 2)


def test_decimate_indices_match_decimate():
    points = [(float(i), 0.0) for i in range(37)]
    indices = decimate_indices(len(points), 10)
    assert [points[i] for i in indices] == decimate(points, 10)
    assert indices == sorted(set(indices))
    assert decimate_indices(4, 10) == [0, 1, 2, 3]
