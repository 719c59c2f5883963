"""
Formgenerator: cirkel, hjärta, stjärna och kvadrat kring en mittpunkt
"""

import math
from typing import List, Optional, Tuple

from config import DEFAULT_SHAPE_POINTS, DEFAULT_SHAPE_RADIUS, METERS_PER_DEGREE
from errors import InvalidInputError
from models import Coordinate

# Lokal ekvirektangulär approximation, gäller bara för små radier (< ~1 km)
DEGREES_PER_METER = 1 / METERS_PER_DEGREE


def _offset(center: Tuple[float, float], north_m: float, east_m: float) -> Coordinate:
    return (
        center[0] + north_m * DEGREES_PER_METER,
        center[1] + east_m * DEGREES_PER_METER
    )


def _check(radius: float, points: int, min_points: int) -> None:
    if radius <= 0:
        raise InvalidInputError("Radien måste vara större än 0")
    if points < min_points:
        raise InvalidInputError(f"Minst {min_points} punkter krävs")


def circle(
    center: Tuple[float, float],
    radius: float = DEFAULT_SHAPE_RADIUS,
    points: int = DEFAULT_SHAPE_POINTS
) -> List[Coordinate]:
    """
    Skapa en cirkel

    Args:
        center: Mittpunkt (lat, lon)
        radius: Radie i meter
        points: Antal punkter längs cirkeln

    Returns:
        Sluten lista med koordinater (första punkten upprepas sist)
    """
    _check(radius, points, 3)
    coords = []
    for i in range(points):
        angle = 2 * math.pi * i / points
        coords.append(_offset(center, radius * math.cos(angle), radius * math.sin(angle)))
    coords.append(coords[0])
    return coords


def heart(
    center: Tuple[float, float],
    radius: float = DEFAULT_SHAPE_RADIUS,
    points: int = DEFAULT_SHAPE_POINTS
) -> List[Coordinate]:
    """
    Skapa ett hjärta med den klassiska parametriska kurvan

    Kurvan spänner ungefär 32 enheter i x-led, så radien skalas ned med 16
    för att hjärtat ska få samma storlek som en cirkel med samma radie.
    """
    _check(radius, points, 3)
    scale = radius / 16
    coords = []
    for i in range(points):
        t = 2 * math.pi * i / points
        x = 16 * math.sin(t) ** 3
        y = 13 * math.cos(t) - 5 * math.cos(2 * t) - 2 * math.cos(3 * t) - math.cos(4 * t)
        coords.append(_offset(center, y * scale, x * scale))
    coords.append(coords[0])
    return coords


def star(
    center: Tuple[float, float],
    radius: float = DEFAULT_SHAPE_RADIUS,
    points: int = 5
) -> List[Coordinate]:
    """Skapa en stjärna med `points` uddar; inre hörn ligger på halva radien"""
    _check(radius, points, 2)
    coords = []
    step = math.pi / points
    for i in range(2 * points):
        r = radius if i % 2 == 0 else radius / 2
        angle = i * step
        coords.append(_offset(center, r * math.cos(angle), r * math.sin(angle)))
    coords.append(coords[0])
    return coords


def square(center: Tuple[float, float], radius: float = DEFAULT_SHAPE_RADIUS) -> List[Coordinate]:
    _check(radius, 4, 4)
    south_west = _offset(center, -radius, -radius)
    return [
        south_west,
        _offset(center, -radius, radius),
        _offset(center, radius, radius),
        _offset(center, radius, -radius),
        south_west,
    ]


SHAPES = {
    "circle": circle,
    "heart": heart,
    "star": star,
    "square": square,
}


def generate_shape(
    name: str,
    center: Tuple[float, float],
    radius: float = DEFAULT_SHAPE_RADIUS,
    points: Optional[int] = None
) -> List[Coordinate]:
    """
    Skapa en form utifrån dess namn

    Args:
        name: "circle", "heart", "star" eller "square"
        center: Mittpunkt (lat, lon)
        radius: Radie i meter
        points: Antal punkter (formens standardvärde om None)

    Returns:
        Lista med koordinater
    """
    shape = SHAPES.get(name)
    if shape is None:
        raise InvalidInputError(f"Okänd form: {name!r}")
    if points is None or name == "square":
        return shape(center, radius)
    return shape(center, radius, points)
