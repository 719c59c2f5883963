"""
Kartfunktioner för visualisering
"""

import folium
from typing import List, Optional, Sequence

from models import Coordinate

RAW_ROUTE_COLOR = "#e67e22"
SNAPPED_ROUTE_COLOR = "#27ae60"


def create_map(
    center: Sequence[float],
    raw_route: Optional[List[Coordinate]] = None,
    snapped_route: Optional[List[Coordinate]] = None,
    zoom_start: int = 13
) -> folium.Map:
    """
    Skapa Folium-karta med ritad och snappad rutt

    Args:
        center: Kartans centrum [lat, lon]
        raw_route: Den ritade rutten
        snapped_route: Den väganpassade rutten
        zoom_start: Startzoom

    Returns:
        Folium Map-objekt
    """
    m = folium.Map(
        location=list(center),
        zoom_start=zoom_start,
        control_scale=True
    )

    # Rita ritad rutt
    if raw_route:
        folium.PolyLine(
            raw_route,
            color=RAW_ROUTE_COLOR,
            weight=5,
            opacity=0.8
        ).add_to(m)
        for point in raw_route:
            folium.CircleMarker(point, radius=3, color=RAW_ROUTE_COLOR, fill=True).add_to(m)

    # Rita snappad rutt med start- och slutmarkör
    if snapped_route:
        folium.PolyLine(
            snapped_route,
            color=SNAPPED_ROUTE_COLOR,
            weight=6,
            opacity=0.9
        ).add_to(m)

        folium.Marker(
            snapped_route[0],
            popup="Start",
            icon=folium.Icon(color="green", icon="play")
        ).add_to(m)

        folium.Marker(
            snapped_route[-1],
            popup="Mål",
            icon=folium.Icon(color="red", icon="stop")
        ).add_to(m)

    # Anpassa zoom för att visa hela rutten
    route_coords = snapped_route or raw_route
    if route_coords and len(route_coords) > 1:
        bounds = [[min(p[0] for p in route_coords), min(p[1] for p in route_coords)],
                  [max(p[0] for p in route_coords), max(p[1] for p in route_coords)]]
        m.fit_bounds(bounds)

    return m
