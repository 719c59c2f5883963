"""
Ruttoptimering: förenkling, decimering, utjämning och distansoptimering
"""

import math
from typing import Callable, Dict, List, Sequence

from config import SMOOTHING_WEIGHT
from errors import InvalidInputError
from models import Coordinate
from utils import calculate_distance, calculate_route_distance


def point_to_line_distance(
    point: Sequence[float],
    line_start: Sequence[float],
    line_end: Sequence[float]
) -> float:
    """
    Avstånd från en punkt till ett linjesegment

    Beräknas i samma enheter som koordinaterna (grader), inte i meter.
    """
    a = point[0] - line_start[0]
    b = point[1] - line_start[1]
    c = line_end[0] - line_start[0]
    d = line_end[1] - line_start[1]

    dot = a * c + b * d
    len_sq = c * c + d * d
    param = dot / len_sq if len_sq != 0 else -1

    if param < 0:
        xx, yy = line_start[0], line_start[1]
    elif param > 1:
        xx, yy = line_end[0], line_end[1]
    else:
        xx = line_start[0] + param * c
        yy = line_start[1] + param * d

    return math.hypot(point[0] - xx, point[1] - yy)


def douglas_peucker(
    points: Sequence[Coordinate],
    tolerance: float,
    preserve_endpoints: bool = True
) -> List[Coordinate]:
    """
    Douglas-Peucker linjeförenkling

    Args:
        points: Punkter att förenkla
        tolerance: Maximalt vinkelrätt avstånd, i koordinatenheter
        preserve_endpoints: Behåll båda ändpunkterna när ett segment kollapsar

    Returns:
        Förenklad lista med punkter
    """
    if len(points) <= 2:
        return list(points)

    start = points[0]
    end = points[-1]

    max_distance = 0.0
    max_index = 0
    for i in range(1, len(points) - 1):
        distance = point_to_line_distance(points[i], start, end)
        if distance > max_distance:
            max_distance = distance
            max_index = i

    if max_distance > tolerance:
        first_line = douglas_peucker(points[:max_index + 1], tolerance, preserve_endpoints)
        second_line = douglas_peucker(points[max_index:], tolerance, preserve_endpoints)
        return first_line[:-1] + second_line

    return [start, end] if preserve_endpoints else [start]


def simplify_route(
    points: Sequence[Coordinate],
    tolerance: float = 0.0001,
    preserve_endpoints: bool = True
) -> List[Coordinate]:
    if len(points) < 3:
        return list(points)
    return douglas_peucker(points, tolerance, preserve_endpoints)


def decimate(points: Sequence[Coordinate], max_points: int) -> List[Coordinate]:
    """
    Välj punkter med fast indexsteg så att exakt max_points återstår

    Args:
        points: Punkter att glesa ut
        max_points: Önskat maxantal (minst 2)

    Returns:
        Punkterna på index round(i * (n-1)/(max_points-1)), alltid med första och sista
    """
    return [points[i] for i in decimate_indices(len(points), max_points)]


def decimate_indices(count: int, max_points: int) -> List[int]:
    """Index som decimate väljer ut för en sekvens med count punkter"""
    if max_points < 2:
        raise InvalidInputError("max_points måste vara minst 2")
    if count <= max_points:
        return list(range(count))

    last = count - 1
    step = last / (max_points - 1)
    indices = [min(last, int(math.floor(i * step + 0.5))) for i in range(max_points)]
    indices[-1] = last
    return indices


def smooth_route(
    points: Sequence[Coordinate],
    smoothing_factor: float = SMOOTHING_WEIGHT,
    preserve_endpoints: bool = True
) -> List[Coordinate]:
    """Dra varje punkt mot mittpunkten mellan grannarna"""
    if len(points) < 3:
        return list(points)

    smoothed = []
    last = len(points) - 1
    for i, curr in enumerate(points):
        if preserve_endpoints and i in (0, last):
            smoothed.append(curr)
            continue

        prev = points[i - 1] if i > 0 else curr
        nxt = points[i + 1] if i < last else curr
        smoothed.append((
            curr[0] * (1 - smoothing_factor) + (prev[0] + nxt[0]) / 2 * smoothing_factor,
            curr[1] * (1 - smoothing_factor) + (prev[1] + nxt[1]) / 2 * smoothing_factor
        ))

    return smoothed


def _find_nearby_points(
    point: Coordinate,
    route: Sequence[Coordinate],
    exclude_index: int,
    search_radius: float = 0.001
) -> List[Coordinate]:
    # search_radius i grader, jämförs mot avstånd i km precis som tidigare
    nearby = []
    for dlat in (-1, 0, 1):
        for dlon in (-1, 0, 1):
            candidate = (point[0] + dlat * search_radius, point[1] + dlon * search_radius)
            too_close = any(
                calculate_distance(candidate, other) < search_radius * 0.5
                for i, other in enumerate(route)
                if i != exclude_index
            )
            if not too_close:
                nearby.append(candidate)
    return nearby


def optimize_distance(
    points: Sequence[Coordinate],
    max_iterations: int = 100
) -> List[Coordinate]:
    """
    Girig lokal sökning som flyttar inre punkter för att korta rutten

    Start- och slutpunkt flyttas aldrig.
    """
    if len(points) < 3:
        return list(points)

    route = list(points)
    best_distance = calculate_route_distance(route)
    improved = True
    iterations = 0

    while improved and iterations < max_iterations:
        improved = False
        iterations += 1
        for i in range(1, len(route) - 1):
            for candidate in _find_nearby_points(route[i], route, i):
                test_route = list(route)
                test_route[i] = candidate
                test_distance = calculate_route_distance(test_route)
                if test_distance < best_distance:
                    route = test_route
                    best_distance = test_distance
                    improved = True

    return route


ALGORITHMS: Dict[str, Callable[..., List[Coordinate]]] = {
    "distance": optimize_distance,
    "smoothing": smooth_route,
    "simplification": simplify_route,
}


def optimize_route(points: Sequence[Coordinate], algorithm: str, **options) -> List[Coordinate]:
    func = ALGORITHMS.get(algorithm)
    if func is None:
        raise InvalidInputError(f"Okänd optimeringsalgoritm: {algorithm!r}")
    return func(points, **options)


def optimize_route_multi(
    points: Sequence[Coordinate],
    algorithms: Sequence[str],
    options: Dict[str, dict] = None
) -> List[Coordinate]:
    """Kör flera optimeringar i följd, med alternativ per algoritm"""
    options = options or {}
    route = list(points)
    for algorithm in algorithms:
        route = optimize_route(route, algorithm, **options.get(algorithm, {}))
    return route


def generate_route_stats(points: Sequence[Coordinate]) -> dict:
    distance = calculate_route_distance(points)
    segments = len(points) - 1
    return {
        "distance": distance,
        "points": len(points),
        "average_segment_length": distance / segments if segments > 0 else 0.0,
    }
