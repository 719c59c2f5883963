"""
Hjälpfunktioner för ruttritaren: geometri, formatering och statistik
"""

import math
from typing import List, Optional, Sequence

from config import DEFAULT_PACE_MIN_PER_KM, EARTH_RADIUS_KM
from models import Coordinate


def deg2rad(deg: float) -> float:
    return deg * (math.pi / 180)


def rad2deg(rad: float) -> float:
    return rad * (180 / math.pi)


def calculate_distance(point1: Sequence[float], point2: Sequence[float]) -> float:
    """
    Beräkna avstånd mellan två punkter (Haversine formula)

    Args:
        point1: Startpunkt (lat, lon)
        point2: Slutpunkt (lat, lon)

    Returns:
        Avstånd i kilometer
    """
    lat1, lon1 = point1[0], point1[1]
    lat2, lon2 = point2[0], point2[1]

    dlat = deg2rad(lat2 - lat1)
    dlon = deg2rad(lon2 - lon1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(deg2rad(lat1)) * math.cos(deg2rad(lat2)) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def calculate_route_distance(coordinates: Sequence[Sequence[float]]) -> float:
    """
    Beräkna total distans för en rutt

    Args:
        coordinates: Lista med (lat, lon)

    Returns:
        Total distans i kilometer
    """
    if len(coordinates) < 2:
        return 0.0

    total_distance = 0.0
    for i in range(len(coordinates) - 1):
        total_distance += calculate_distance(coordinates[i], coordinates[i + 1])

    return total_distance


def calculate_bearing(point1: Sequence[float], point2: Sequence[float]) -> float:
    """
    Beräkna bäring mellan två punkter

    Args:
        point1: Startpunkt (lat, lon)
        point2: Slutpunkt (lat, lon)

    Returns:
        Bäring i grader (0-360)
    """
    lat1, lon1 = deg2rad(point1[0]), deg2rad(point1[1])
    lat2, lon2 = deg2rad(point2[0]), deg2rad(point2[1])

    dlon = lon2 - lon1

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)

    bearing = rad2deg(math.atan2(y, x))
    return (bearing + 360) % 360


def is_valid_coordinates(lat: float, lon: float) -> bool:
    """Kontrollera att koordinaterna ligger inom giltiga intervall"""
    return -90 <= lat <= 90 and -180 <= lon <= 180


def interpolate(start: float, end: float, factor: float) -> float:
    return start + (end - start) * factor


def smooth_array(values: List[float], window_size: int = 3) -> List[float]:
    """
    Glidande medelvärde centrerat kring varje punkt

    Args:
        values: Värden att jämna ut
        window_size: Fönsterstorlek

    Returns:
        Utjämnade värden (oförändrade om listan är kortare än fönstret)
    """
    if len(values) < window_size:
        return list(values)

    half_window = window_size // 2
    smoothed = []

    for i in range(len(values)):
        lo = max(0, i - half_window)
        hi = min(len(values) - 1, i + half_window)
        window = values[lo:hi + 1]
        smoothed.append(sum(window) / len(window))

    return smoothed


def calculate_elevation_gain(elevations: Sequence[Optional[float]]) -> float:
    """
    Beräkna total höjdökning

    Args:
        elevations: Höjdvärden i meter, None hoppas över

    Returns:
        Total höjdökning i meter
    """
    total_gain = 0.0
    prev_elevation = None

    for elevation in elevations:
        if elevation is not None:
            if prev_elevation is not None and elevation > prev_elevation:
                total_gain += elevation - prev_elevation
            prev_elevation = elevation

    return total_gain


def parse_pace(pace_str: str) -> float:
    """
    Konvertera tempo-sträng till minuter per km

    Args:
        pace_str: Tempo som "5:30"

    Returns:
        Minuter per km
    """
    try:
        parts = pace_str.split(":")
        if len(parts) == 2:
            minutes = int(parts[0])
            seconds = int(parts[1])
            return minutes + seconds / 60
    except (AttributeError, ValueError):
        pass
    return DEFAULT_PACE_MIN_PER_KM


def format_duration(seconds: float) -> str:
    """
    Formatera tid från sekunder till sträng

    Args:
        seconds: Antal sekunder

    Returns:
        Formaterad tidssträng (HH:MM:SS eller MM:SS)
    """
    hours = int(seconds // 3600)
    mins = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours:02d}:{mins:02d}:{secs:02d}"
    else:
        return f"{mins:02d}:{secs:02d}"


def format_clock(minutes: float) -> str:
    """Formatera minuter som H:MM"""
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    return f"{hours}:{mins:02d}"


def format_distance(distance_km: float) -> str:
    if distance_km < 1:
        return f"{distance_km * 1000:.0f} m"
    return f"{distance_km:.2f} km"


def format_elevation(elevation: float) -> str:
    return f"{elevation:.0f} m"


def get_route_statistics(
    coordinates: Sequence[Coordinate],
    pace_min_per_km: float = DEFAULT_PACE_MIN_PER_KM,
    elevations: Optional[Sequence[float]] = None
) -> dict:
    """
    Beräkna statistik för en rutt

    Args:
        coordinates: Ruttens punkter
        pace_min_per_km: Tempo i minuter per km
        elevations: Höjdvärden per punkt (valfritt)

    Returns:
        Dictionary med statistik
    """
    distance_km = calculate_route_distance(coordinates)
    duration_minutes = distance_km * pace_min_per_km

    stats = {
        "distance_km": distance_km,
        "duration_minutes": duration_minutes,
        "pace": pace_min_per_km,
        "num_points": len(coordinates),
        "elevation_gain": 0.0,
        "elevation_loss": 0.0,
        "max_elevation": None,
        "min_elevation": None,
    }

    if elevations:
        stats["elevation_gain"] = calculate_elevation_gain(elevations)
        stats["max_elevation"] = max(elevations)
        stats["min_elevation"] = min(elevations)

        prev_elevation = None
        for elevation in elevations:
            if prev_elevation is not None and elevation < prev_elevation:
                stats["elevation_loss"] += prev_elevation - elevation
            prev_elevation = elevation

    return stats


def format_route_summary(stats: dict) -> dict:
    """Sammanfattningssträngar för visning och JSON-export"""
    return {
        "distance": f"{stats['distance_km']:.1f} km",
        "duration": format_clock(stats["duration_minutes"]),
        "elevation": format_elevation(stats["elevation_gain"]),
        "pace": format_pace(stats["pace"]),
    }


def format_pace(pace_min_per_km: float) -> str:
    minutes = int(pace_min_per_km)
    seconds = int(round((pace_min_per_km - minutes) * 60))
    if seconds == 60:
        minutes, seconds = minutes + 1, 0
    return f"{minutes}:{seconds:02d}"
