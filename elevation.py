"""
Höjddata: Mapbox-terräng, Google Elevation och simulerad reserv
"""

import logging
import math
import random
from typing import List, Optional, Sequence

import requests

from cache import FIFOCache, create_fingerprint
from config import (
    ELEVATION_CACHE_SIZE,
    ELEVATION_SAMPLE_POINTS,
    GOOGLE_ELEVATION_URL,
    MAPBOX_BASE_URL,
    REQUEST_TIMEOUT,
)
from errors import InvalidInputError
from models import Coordinate, to_coordinates
from route_optimization import decimate_indices
from utils import smooth_array

logger = logging.getLogger(__name__)

# Google tillåter upp till 512 punkter per anrop
GOOGLE_BATCH_SIZE = 256


class ElevationService:
    """Hämtar eller simulerar en höjd per punkt och cachar resultaten"""

    def __init__(
        self,
        mapbox_token: Optional[str] = None,
        google_api_key: Optional[str] = None,
        max_cache_size: int = ELEVATION_CACHE_SIZE,
        timeout: float = REQUEST_TIMEOUT,
        rng: Optional[random.Random] = None,
        sample_points: int = ELEVATION_SAMPLE_POINTS
    ):
        self.mapbox_token = mapbox_token
        self.google_api_key = google_api_key
        self.timeout = timeout
        self.sample_points = sample_points
        self.rng = rng or random.Random()
        self.cache = FIFOCache(max_cache_size)

    def get_elevation_data(self, coordinates: Sequence[Sequence[float]]) -> List[float]:
        """
        Hämta höjddata för en rutt

        Args:
            coordinates: Punkter (lat, lon)

        Returns:
            En höjd i meter per punkt, alltid lika många som punkterna
        """
        coordinates = to_coordinates(coordinates)
        if not coordinates:
            return []

        cache_key = create_fingerprint(coordinates, 3, {"points": len(coordinates)})
        cached = self.cache.get(cache_key)
        if cached is not None:
            return list(cached)

        elevations = self.try_mapbox_terrain(coordinates)
        if not elevations:
            elevations = self.try_google_elevation(coordinates)
        if not elevations:
            logger.info("Ingen höjdkälla tillgänglig, simulerar höjdprofil")
            elevations = self.generate_simulated_elevation(coordinates)

        self.cache.put(cache_key, list(elevations))
        return elevations

    def try_mapbox_terrain(self, coordinates: List[Coordinate]) -> Optional[List[float]]:
        """
        Mapbox Tilequery mot terrängens höjdkurvor

        Tilequery tar en punkt per förfrågan, så högst sample_points punkter
        frågas och övriga interpoleras längs rutten.
        """
        if not self.mapbox_token:
            logger.warning("Mapbox-token saknas för höjddata")
            return None

        indices = decimate_indices(len(coordinates), self.sample_points)
        elevations = []
        try:
            for lat, lon in (coordinates[i] for i in indices):
                url = f"{MAPBOX_BASE_URL}/v4/mapbox.mapbox-terrain-v2/tilequery/{lon},{lat}.json"
                params = {
                    "layers": "contour",
                    "limit": 50,
                    "access_token": self.mapbox_token
                }
                response = requests.get(url, params=params, timeout=self.timeout)
                if response.status_code != 200:
                    logger.warning("Mapbox Elevation HTTP %s", response.status_code)
                    return None

                features = response.json().get("features", [])
                heights = [f["properties"]["ele"] for f in features if "ele" in f.get("properties", {})]
                if not heights:
                    logger.warning("Mapbox saknar höjddata för %.5f,%.5f", lat, lon)
                    return None
                elevations.append(float(max(heights)))
        except requests.RequestException as e:
            logger.warning("Mapbox Elevation misslyckades: %s", e)
            return None
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Mapbox Elevation gav ett ogiltigt svar: %s", e)
            return None

        return fill_by_index(indices, elevations, len(coordinates))

    def try_google_elevation(self, coordinates: List[Coordinate]) -> Optional[List[float]]:
        if not self.google_api_key:
            logger.debug("Google Elevation är inte konfigurerad")
            return None

        elevations = []
        try:
            for start in range(0, len(coordinates), GOOGLE_BATCH_SIZE):
                batch = coordinates[start:start + GOOGLE_BATCH_SIZE]
                params = {
                    "locations": "|".join(f"{lat},{lon}" for lat, lon in batch),
                    "key": self.google_api_key
                }
                response = requests.get(GOOGLE_ELEVATION_URL, params=params, timeout=self.timeout)
                if response.status_code != 200:
                    logger.warning("Google Elevation HTTP %s", response.status_code)
                    return None

                data = response.json()
                results = data.get("results", [])
                if data.get("status") != "OK" or len(results) != len(batch):
                    logger.warning("Google Elevation status: %s", data.get("status"))
                    return None
                elevations.extend(float(r["elevation"]) for r in results)
        except requests.RequestException as e:
            logger.warning("Google Elevation misslyckades: %s", e)
            return None
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Google Elevation gav ett ogiltigt svar: %s", e)
            return None

        return elevations

    def generate_simulated_elevation(self, coordinates: Sequence[Coordinate]) -> List[float]:
        """
        Simulera en höjdprofil med kullar, en trend och brus

        Args:
            coordinates: Punkter (används bara för antalet)

        Returns:
            Utjämnade höjder i meter, aldrig negativa
        """
        if not coordinates:
            return []

        base_elevation = 100 + self.rng.random() * 200
        elevations = []
        n = len(coordinates)

        for i in range(n):
            distance = i / n
            terrain_variation = math.sin(distance * math.pi * 4) * 50
            random_variation = (self.rng.random() - 0.5) * 20
            trend = math.sin(distance * math.pi) * 30

            elevation = base_elevation + terrain_variation + random_variation + trend
            elevations.append(max(0.0, elevation))

        return smooth_array(elevations, 5)

    def generate_custom_elevation(
        self,
        coordinates: Sequence[Coordinate],
        base_elevation: float = 100,
        max_elevation: float = 500,
        hill_count: int = 3,
        roughness: float = 0.3
    ) -> List[float]:
        """Höjdprofil med gaussiska kullar jämnt fördelade längs rutten"""
        if not coordinates:
            return []
        if hill_count < 1:
            raise InvalidInputError("Minst en kulle krävs")

        hill_height = max_elevation / hill_count
        hill_width = 0.3 / hill_count
        elevations = []
        n = len(coordinates)

        for i in range(n):
            distance = i / n
            elevation = base_elevation
            for j in range(1, hill_count + 1):
                hill_position = j / (hill_count + 1)
                elevation += math.exp(-((distance - hill_position) / hill_width) ** 2) * hill_height

            elevation += (self.rng.random() - 0.5) * roughness * max_elevation
            elevations.append(max(0.0, elevation))

        return smooth_array(elevations, 3)

    def clear_cache(self) -> None:
        self.cache.clear()

    def get_cache_stats(self) -> dict:
        return self.cache.stats()


def calculate_elevation_stats(elevations: Sequence[float]) -> dict:
    """
    Beräkna höjdökning, höjdförlust, min och max

    Args:
        elevations: Höjder i meter

    Returns:
        Dictionary med gain, loss, min och max
    """
    if len(elevations) < 2:
        return {"gain": 0.0, "loss": 0.0, "min": 0.0, "max": 0.0}

    gain = 0.0
    loss = 0.0
    for prev, curr in zip(elevations, elevations[1:]):
        diff = curr - prev
        if diff > 0:
            gain += diff
        else:
            loss += -diff

    return {"gain": gain, "loss": loss, "min": min(elevations), "max": max(elevations)}


def fill_by_index(indices: Sequence[int], values: Sequence[float], count: int) -> List[float]:
    """
    Fyll ut glest samplade värden till en per punkt

    Args:
        indices: Stigande index där värden finns, första 0 och sista count-1
        values: Värden för respektive index
        count: Totalt antal punkter

    Returns:
        count värden, linjärt interpolerade mellan samplade index
    """
    filled = [0.0] * count
    for (i0, v0), (i1, v1) in zip(zip(indices, values), zip(indices[1:], values[1:])):
        for i in range(i0, i1):
            filled[i] = v0 + (v1 - v0) * (i - i0) / (i1 - i0)
    if indices:
        filled[indices[-1]] = values[-1]
    return filled
