"""
Interaktiv session: äger den ritade och den snappade rutten

Tjänsterna (snappning och höjddata) skickas in vid konstruktion. Varje
ändring av rutten räknar upp en generation; ett nätverksresultat sparas bara
om generationen fortfarande är densamma som när förfrågan startade.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from config import GPS_LAT_OFFSET_KEY, GPS_LNG_OFFSET_KEY, SETTINGS_FILE
from elevation import ElevationService
from errors import InvalidInputError
from export import export_route
from models import Coordinate, PipelineConfig, Route, to_coordinates
from route_optimization import optimize_route
from route_templates import TemplateLibrary, generate_loop_route
from routing import RouteSnapper
from shapes import generate_shape
from timestamps import generate_timestamps
from utils import calculate_route_distance, get_route_statistics, is_valid_coordinates

logger = logging.getLogger(__name__)


def load_gps_offsets(path: Path = SETTINGS_FILE) -> Tuple[float, float]:
    """
    Läs sparad GPS-korrigering

    Returns:
        (lat_offset, lng_offset), (0, 0) om filen saknas eller är trasig
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return float(data.get(GPS_LAT_OFFSET_KEY, 0)), float(data.get(GPS_LNG_OFFSET_KEY, 0))
    except FileNotFoundError:
        return 0.0, 0.0
    except (OSError, ValueError, TypeError, AttributeError):
        logger.warning("Kunde inte läsa inställningar från %s", path)
        return 0.0, 0.0


def save_gps_offsets(lat_offset: float, lng_offset: float, path: Path = SETTINGS_FILE) -> None:
    path = Path(path)
    data = {}
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            data = {}
    data[GPS_LAT_OFFSET_KEY] = float(lat_offset)
    data[GPS_LNG_OFFSET_KEY] = float(lng_offset)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class RouteSession:
    """Håller den aktuella rutten och kör pipelinen på den"""

    def __init__(
        self,
        snapper: RouteSnapper,
        elevation_service: ElevationService,
        templates: Optional[TemplateLibrary] = None,
        gps_offsets: Tuple[float, float] = (0.0, 0.0)
    ):
        self.snapper = snapper
        self.elevation_service = elevation_service
        self.templates = templates or TemplateLibrary(storage_path=None)
        self.gps_lat_offset, self.gps_lng_offset = gps_offsets
        self.current_route: List[Coordinate] = []
        self.snapped_route: Optional[List[Coordinate]] = None
        self.generation = 0

    # --- Mutationer -----------------------------------------------------
    def _set_route(self, coordinates: List[Coordinate]) -> None:
        self.current_route = coordinates
        self.snapped_route = None
        self.generation += 1

    def add_point(self, lat: float, lon: float, from_gps: bool = False) -> Coordinate:
        if from_gps:
            lat += self.gps_lat_offset
            lon += self.gps_lng_offset
        if not is_valid_coordinates(lat, lon):
            raise InvalidInputError(f"Ogiltiga koordinater: {lat}, {lon}")
        point = (lat, lon)
        self._set_route(self.current_route + [point])
        return point

    def undo_last_point(self) -> None:
        if self.current_route:
            self._set_route(self.current_route[:-1])

    def clear_route(self) -> None:
        self._set_route([])

    def apply_template(self, key: str) -> str:
        template = self.templates.get_template(key)
        self._set_route(list(template.coordinates))
        return template.name

    def save_as_template(self, name: str) -> str:
        """Spara den aktiva rutten som egen mall"""
        if len(self.active_route) < 2:
            raise InvalidInputError("Rita en rutt först")
        template = self.templates.create_custom_template(
            name,
            self.active_route,
            distance=round(calculate_route_distance(self.active_route), 2)
        )
        self.templates.save_template(template)
        return template.name

    def apply_shape(self, name: str, center: Coordinate, radius: float, points: Optional[int] = None) -> None:
        self._set_route(generate_shape(name, center, radius, points))

    def create_loop(self, config: PipelineConfig) -> List[Coordinate]:
        if len(self.current_route) < 2:
            raise InvalidInputError("Rita en rutt först")
        self._set_route(generate_loop_route(self.current_route, config.loop_type, config.loop))
        return self.current_route

    def optimize(self, algorithm: str) -> List[Coordinate]:
        """Kör en optimering på den aktiva rutten och gör resultatet till ny ritad rutt"""
        if len(self.active_route) < 2:
            raise InvalidInputError("Rita en rutt först")
        self._set_route(optimize_route(self.active_route, algorithm))
        return self.current_route

    def set_gps_offsets(self, lat_offset: float, lng_offset: float) -> None:
        self.gps_lat_offset = lat_offset
        self.gps_lng_offset = lng_offset

    # --- Nätverksbundna steg -------------------------------------------
    def snap_route(self, config: PipelineConfig) -> Optional[List[Coordinate]]:
        """
        Snappa den ritade rutten

        Returns:
            Den snappade rutten, eller None om rutten ändrades under tiden
        """
        if len(self.current_route) < 2:
            raise InvalidInputError("Rita en rutt först")

        generation = self.generation
        snapped = self.snapper.snap_to_roads(self.current_route, config.snap_options())

        if generation != self.generation:
            logger.info("Rutten ändrades under snappning, kastar inaktuellt resultat")
            return None

        self.snapped_route = snapped
        return snapped

    @property
    def active_route(self) -> List[Coordinate]:
        return self.snapped_route if self.snapped_route else self.current_route

    def build_route(self, config: PipelineConfig, with_elevation: bool = True) -> Optional[Route]:
        """
        Bygg den aktiva rutten med höjder och tidsstämplar

        Returns:
            Route, eller None om rutten ändrades medan höjddata hämtades
        """
        coordinates = to_coordinates(self.active_route)
        generation = self.generation

        elevations = self.elevation_service.get_elevation_data(coordinates) if with_elevation else None
        if generation != self.generation:
            logger.info("Rutten ändrades under höjdhämtning, kastar inaktuellt resultat")
            return None

        timestamps = generate_timestamps(coordinates, config.pace_min_per_km, config.start_time)
        return Route(
            coordinates=coordinates,
            elevations=elevations,
            timestamps=timestamps,
            snapped=self.snapped_route is not None
        )

    def statistics(self, config: PipelineConfig, elevations: Optional[List[float]] = None) -> dict:
        return get_route_statistics(self.active_route, config.pace_min_per_km, elevations)

    def export(self, fmt: str, config: PipelineConfig, route: Optional[Route] = None) -> Tuple[str, str, str]:
        if len(self.active_route) < 2:
            raise InvalidInputError("Rita och snappa en rutt först")
        if route is None:
            route = Route(coordinates=self.active_route, snapped=self.snapped_route is not None)
        return export_route(
            route,
            fmt,
            config.route_name,
            config.route_description,
            config.pace_min_per_km
        )
