"""
Vägsnappning som koordinerar routing-providers

Providers provas i tur och ordning. Om alla misslyckas används en lokal
approximation, så snap_to_roads returnerar alltid en rutt.
"""

import logging
import random
from typing import List, Optional, Sequence

from cache import FIFOCache, create_fingerprint
from config import MAX_SNAP_WAYPOINTS, PROFILE_VARIATION, SMOOTHING_WEIGHT, SNAP_CACHE_SIZE
from models import Coordinate, SnapOptions, SnapProfile, to_coordinates
from route_optimization import decimate
from routing_providers import RoutingProvider, build_default_providers
from utils import interpolate

logger = logging.getLogger(__name__)


def reduce_waypoints(
    coordinates: Sequence[Coordinate],
    max_waypoints: int = MAX_SNAP_WAYPOINTS
) -> List[Coordinate]:
    """
    Minska antalet punkter som skickas till providers

    Behåller första och sista punkten plus jämnt fördelade inre punkter.
    """
    if len(coordinates) <= max_waypoints:
        return list(coordinates)

    step = (len(coordinates) - 1) / (max_waypoints - 1)
    reduced = [coordinates[0]]
    for i in range(1, max_waypoints - 1):
        reduced.append(coordinates[int(i * step + 0.5)])
    reduced.append(coordinates[-1])
    return reduced


def smooth_coordinates(coordinates: Sequence[Coordinate], weight: float = SMOOTHING_WEIGHT) -> List[Coordinate]:
    """Viktat glidande medel över tre punkter; ändpunkterna behålls"""
    if len(coordinates) < 3:
        return list(coordinates)

    smoothed = [coordinates[0]]
    for i in range(1, len(coordinates) - 1):
        prev, curr, nxt = coordinates[i - 1], coordinates[i], coordinates[i + 1]
        smoothed.append((
            curr[0] * (1 - 2 * weight) + prev[0] * weight + nxt[0] * weight,
            curr[1] * (1 - 2 * weight) + prev[1] * weight + nxt[1] * weight
        ))
    smoothed.append(coordinates[-1])
    return smoothed


class LocalApproximator:
    """Sista steget i kedjan: lokal approximation utan nätverk"""

    name = "local"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def approximate(self, coordinates: Sequence[Coordinate], options: SnapOptions) -> List[Coordinate]:
        if options.profile == SnapProfile.WALKING:
            return self.optimize_for_walking(coordinates)
        return self.simulate_road_snapping(coordinates, options.profile, options.grid_size)

    def simulate_road_snapping(
        self,
        coordinates: Sequence[Coordinate],
        profile: SnapProfile = SnapProfile.DRIVING,
        grid_size: float = 0.001
    ) -> List[Coordinate]:
        """
        Simulera vägsnappning genom att avrunda till ett rutnät

        Args:
            coordinates: Punkter att snappa
            profile: Färdsätt, styr storleken på slumpvariationen
            grid_size: Rutnätets storlek i grader (~100 m)

        Returns:
            Utjämnade rutnätspunkter
        """
        if len(coordinates) < 2:
            return list(coordinates)

        magnitude = PROFILE_VARIATION[profile.value] * grid_size
        snapped = []
        for lat, lon in coordinates:
            snapped_lat = round(lat / grid_size) * grid_size
            snapped_lon = round(lon / grid_size) * grid_size
            variation = (self.rng.random() - 0.5) * magnitude
            snapped.append((snapped_lat + variation, snapped_lon + variation))

        return smooth_coordinates(snapped)

    def optimize_for_walking(self, coordinates: Sequence[Coordinate]) -> List[Coordinate]:
        return smooth_coordinates(coordinates)

    def optimize_for_cycling(self, coordinates: Sequence[Coordinate]) -> List[Coordinate]:
        optimized = []
        for lat, lon in coordinates:
            variation = (self.rng.random() - 0.5) * 0.0001
            optimized.append((lat + variation, lon + variation))
        return smooth_coordinates(optimized)

    def optimize_for_driving(self, coordinates: Sequence[Coordinate]) -> List[Coordinate]:
        return self.simulate_road_snapping(coordinates, SnapProfile.DRIVING)


class RouteSnapper:
    """Snappar ritade rutter till vägar och cachar resultaten"""

    def __init__(
        self,
        providers: Optional[List[RoutingProvider]] = None,
        approximator: Optional[LocalApproximator] = None,
        max_cache_size: int = SNAP_CACHE_SIZE
    ):
        self.providers = providers if providers is not None else build_default_providers()
        self.approximator = approximator or LocalApproximator()
        self.cache = FIFOCache(max_cache_size)

    def snap_to_roads(
        self,
        coordinates: Sequence[Sequence[float]],
        options: Optional[SnapOptions] = None
    ) -> List[Coordinate]:
        """
        Snappa en rutt till vägar

        Args:
            coordinates: Ritade punkter (lat, lon)
            options: Profil, förenkling och maxantal punkter

        Returns:
            Väganpassade punkter, eller en lokal approximation om alla providers misslyckas
        """
        coordinates = to_coordinates(coordinates)
        if len(coordinates) < 2:
            return coordinates

        options = options or SnapOptions()
        request_coords = reduce_waypoints(coordinates)

        cache_key = create_fingerprint(request_coords, 4, options.as_key_dict())
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Snappning hämtad från cache")
            return list(cached)

        snapped = self._try_providers(request_coords, options.profile)
        if not snapped:
            logger.info("Alla providers misslyckades, använder lokal approximation (%s)", options.profile.value)
            snapped = self.approximator.approximate(coordinates, options)

        if options.simplify and len(snapped) > options.max_points:
            snapped = decimate(snapped, options.max_points)

        self.cache.put(cache_key, list(snapped))
        return snapped

    def _try_providers(self, coordinates: List[Coordinate], profile: SnapProfile) -> Optional[List[Coordinate]]:
        for provider in self.providers:
            if not provider.supports(profile):
                continue
            snapped = provider.attempt_route(coordinates, profile)
            if snapped:
                logger.debug("Rutt snappad via %s (%d punkter)", provider.name, len(snapped))
                return snapped
        return None

    def optimize_for_mode(self, coordinates: Sequence[Coordinate], mode) -> List[Coordinate]:
        profile = SnapProfile.parse(mode)
        if profile == SnapProfile.WALKING:
            return self.approximator.optimize_for_walking(coordinates)
        if profile == SnapProfile.CYCLING:
            return self.approximator.optimize_for_cycling(coordinates)
        return self.approximator.optimize_for_driving(coordinates)

    def clear_cache(self) -> None:
        self.cache.clear()

    def get_cache_stats(self) -> dict:
        return self.cache.stats()


def interpolate_route(coordinates: Sequence[Coordinate], points_per_segment: int = 3) -> List[Coordinate]:
    """Förtäta en rutt med linjärt interpolerade punkter per segment"""
    if len(coordinates) < 2:
        return list(coordinates)

    interpolated = []
    for start, end in zip(coordinates, coordinates[1:]):
        interpolated.append(start)
        for j in range(1, points_per_segment):
            factor = j / points_per_segment
            interpolated.append((
                interpolate(start[0], end[0], factor),
                interpolate(start[1], end[1], factor)
            ))
    interpolated.append(coordinates[-1])
    return interpolated
