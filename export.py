"""
Export av rutter till GPX, KML och JSON
"""

import json
from datetime import datetime, timezone
from typing import Tuple

import gpxpy
import gpxpy.gpx
import simplekml

from config import DEFAULT_PACE_MIN_PER_KM, EXPORT_CREATOR, MIME_TYPES
from errors import InvalidInputError
from models import Route
from timestamps import parse_timestamp
from utils import format_route_summary, get_route_statistics


def _check_route(route: Route) -> None:
    if len(route.coordinates) < 2:
        raise InvalidInputError("Rita en rutt med minst två punkter först")


def create_gpx(route: Route, name: str = "Route", description: str = "") -> str:
    """
    Skapa GPX-fil från en rutt

    Args:
        route: Rutt med valfria höjder och tidsstämplar
        name: Namn på spåret
        description: Beskrivning

    Returns:
        GPX 1.1 som sträng
    """
    _check_route(route)
    gpx = gpxpy.gpx.GPX()

    # Lägg till metadata
    gpx.creator = EXPORT_CREATOR
    gpx.name = name
    gpx.description = description or None

    # Skapa track
    gpx_track = gpxpy.gpx.GPXTrack()
    gpx_track.name = name
    gpx_track.type = "running"
    gpx.tracks.append(gpx_track)

    # Skapa segment
    gpx_segment = gpxpy.gpx.GPXTrackSegment()
    gpx_track.segments.append(gpx_segment)

    # Lägg till punkter
    for i, (lat, lon) in enumerate(route.coordinates):
        elevation = route.elevations[i] if route.elevations else None
        time = parse_timestamp(route.timestamps[i]) if route.timestamps else None
        gpx_segment.points.append(gpxpy.gpx.GPXTrackPoint(
            lat,
            lon,
            elevation=elevation,
            time=time
        ))

    return gpx.to_xml(version="1.1")


def create_kml(route: Route, name: str = "Route", description: str = "") -> str:
    """Skapa KML 2.2 med en Placemark som innehåller en LineString"""
    _check_route(route)
    kml = simplekml.Kml(name=name)

    # KML använder (longitud, latitud[, höjd])
    if route.elevations:
        coords = [(lon, lat, ele) for (lat, lon), ele in zip(route.coordinates, route.elevations)]
    else:
        coords = [(lon, lat) for lat, lon in route.coordinates]

    line = kml.newlinestring(name=name, description=description, coords=coords)
    if route.elevations:
        line.altitudemode = simplekml.AltitudeMode.absolute
    line.style.linestyle.color = "ff227ee6"
    line.style.linestyle.width = 5

    return kml.kml()


def create_json(
    route: Route,
    name: str = "Route",
    description: str = "",
    pace_min_per_km: float = DEFAULT_PACE_MIN_PER_KM
) -> str:
    """Skapa JSON med koordinater och en sammanfattning"""
    _check_route(route)
    stats = get_route_statistics(route.coordinates, pace_min_per_km, route.elevations)
    summary = format_route_summary(stats)

    payload = {
        "route": [[lat, lon] for lat, lon in route.coordinates],
        "metadata": {
            "name": name,
            "description": description,
            "distance": summary["distance"],
            "duration": summary["duration"],
            "elevation": summary["elevation"],
            "exportDate": datetime.now(timezone.utc).isoformat(),
        },
    }
    if route.elevations:
        payload["elevations"] = list(route.elevations)
    if route.timestamps:
        payload["timestamps"] = list(route.timestamps)

    return json.dumps(payload, indent=2)


def export_route(
    route: Route,
    fmt: str,
    name: str = "Route",
    description: str = "",
    pace_min_per_km: float = DEFAULT_PACE_MIN_PER_KM
) -> Tuple[str, str, str]:
    """
    Exportera en rutt i valt format

    Args:
        route: Rutten att exportera
        fmt: "gpx", "kml" eller "json"
        name: Ruttnamn, används även i filnamnet
        description: Beskrivning
        pace_min_per_km: Tempo för sammanfattningen i JSON

    Returns:
        (innehåll, filnamn, MIME-typ)
    """
    fmt = fmt.lower()
    if fmt not in MIME_TYPES:
        raise InvalidInputError(f"Okänt exportformat: {fmt!r}")

    if fmt == "gpx":
        content = create_gpx(route, name, description)
    elif fmt == "kml":
        content = create_kml(route, name, description)
    else:
        content = create_json(route, name, description, pace_min_per_km)

    filename = f"{(name or 'route').replace(' ', '_')}.{fmt}"
    return content, filename, MIME_TYPES[fmt]
