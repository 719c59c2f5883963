"""
Routing-providers: ORS, Mapbox, OSRM och GraphHopper

Alla providers har samma gränssnitt: attempt_route(coordinates, profile)
returnerar en lista med (lat, lon) eller None. Fel loggas och blir None,
de propageras aldrig till anroparen.
"""

import logging
from typing import List, Optional, Sequence

import requests

from config import (
    GRAPHHOPPER_BASE_URL,
    MAPBOX_BASE_URL,
    ORS_BASE_URL,
    OSRM_BASE_URL,
    REQUEST_TIMEOUT,
)
from models import Coordinate, SnapProfile

logger = logging.getLogger(__name__)


class ProviderUnavailable(Exception):
    """Providern kan inte användas just nu (saknad nyckel, HTTP-fel, tomt svar)"""


def _lonlat_to_latlon(coordinates: Sequence[Sequence[float]]) -> List[Coordinate]:
    return [(float(c[1]), float(c[0])) for c in coordinates if len(c) >= 2]


def _format_lonlat_path(coordinates: Sequence[Coordinate]) -> str:
    return ";".join(f"{lon},{lat}" for lat, lon in coordinates)


class RoutingProvider:
    """Basklass för routing-providers"""

    name = "base"
    profiles = tuple(SnapProfile)

    def __init__(self, timeout: float = REQUEST_TIMEOUT):
        self.timeout = timeout

    def supports(self, profile: SnapProfile) -> bool:
        return profile in self.profiles

    def attempt_route(
        self,
        coordinates: Sequence[Coordinate],
        profile: SnapProfile
    ) -> Optional[List[Coordinate]]:
        """
        Försök hämta en väganpassad rutt

        Args:
            coordinates: Punkter (lat, lon) att routa genom
            profile: Färdsätt

        Returns:
            Väganpassade punkter eller None vid fel
        """
        try:
            route = self._fetch(coordinates, profile)
        except ProviderUnavailable as e:
            logger.warning("%s misslyckades: %s", self.name, e)
            return None
        except requests.RequestException as e:
            logger.warning("%s nätverksfel: %s", self.name, e)
            return None
        except (ValueError, KeyError, TypeError, IndexError, AttributeError) as e:
            logger.warning("%s gav ett ogiltigt svar: %s", self.name, e)
            return None

        if not route:
            logger.warning("%s returnerade en tom rutt", self.name)
            return None
        return route

    def _fetch(
        self,
        coordinates: Sequence[Coordinate],
        profile: SnapProfile
    ) -> Optional[List[Coordinate]]:
        raise NotImplementedError

    def _check_response(self, response: requests.Response) -> dict:
        if response.status_code != 200:
            raise ProviderUnavailable(f"HTTP {response.status_code}")
        return response.json()


class OpenRouteServiceProvider(RoutingProvider):
    """OpenRouteService, POST mot directions-API:t (endast gång)"""

    name = "ORS"
    profiles = (SnapProfile.WALKING,)
    ors_profiles = {
        SnapProfile.WALKING: "foot-walking",
        SnapProfile.CYCLING: "cycling-regular",
        SnapProfile.DRIVING: "driving-car",
    }

    def __init__(self, api_key: Optional[str] = None, timeout: float = REQUEST_TIMEOUT):
        super().__init__(timeout)
        self.api_key = api_key

    def _fetch(self, coordinates, profile):
        if not self.api_key:
            raise ProviderUnavailable("ORS_API_KEY saknas")

        url = f"{ORS_BASE_URL}/v2/directions/{self.ors_profiles[profile]}/geojson"
        headers = {
            "Authorization": self.api_key,
            "Content-Type": "application/json"
        }
        body = {
            "coordinates": [[lon, lat] for lat, lon in coordinates],
            "instructions": False
        }

        response = requests.post(url, json=body, headers=headers, timeout=self.timeout)
        data = self._check_response(response)

        if not data.get("features"):
            return None
        return _lonlat_to_latlon(data["features"][0]["geometry"]["coordinates"])


class MapboxDirectionsProvider(RoutingProvider):
    """Mapbox Directions, GET med geojson-geometri"""

    name = "Mapbox"

    def __init__(self, access_token: Optional[str] = None, timeout: float = REQUEST_TIMEOUT):
        super().__init__(timeout)
        self.access_token = access_token

    def _fetch(self, coordinates, profile):
        if not self.access_token:
            raise ProviderUnavailable("MAPBOX_TOKEN saknas")

        url = (
            f"{MAPBOX_BASE_URL}/directions/v5/mapbox/{profile.value}/"
            f"{_format_lonlat_path(coordinates)}"
        )
        params = {
            "geometries": "geojson",
            "overview": "full",
            "access_token": self.access_token
        }

        response = requests.get(url, params=params, timeout=self.timeout)
        data = self._check_response(response)

        if not data.get("routes"):
            return None
        return _lonlat_to_latlon(data["routes"][0]["geometry"]["coordinates"])


class OSRMProvider(RoutingProvider):
    """Publika OSRM-servern, ingen nyckel krävs"""

    name = "OSRM"

    def __init__(self, base_url: str = OSRM_BASE_URL, timeout: float = REQUEST_TIMEOUT):
        super().__init__(timeout)
        self.base_url = base_url

    def _fetch(self, coordinates, profile):
        url = f"{self.base_url}/route/v1/{profile.value}/{_format_lonlat_path(coordinates)}"
        params = {
            "overview": "full",
            "geometries": "geojson"
        }

        response = requests.get(url, params=params, timeout=self.timeout)
        data = self._check_response(response)

        if data.get("code", "Ok") != "Ok":
            raise ProviderUnavailable(data.get("message", data.get("code")))
        if not data.get("routes"):
            return None

        geometry = data["routes"][0].get("geometry") or {}
        return _lonlat_to_latlon(geometry.get("coordinates", []))


class GraphHopperProvider(RoutingProvider):
    """GraphHopper, används bara om en API-nyckel är konfigurerad"""

    name = "GraphHopper"
    vehicles = {
        SnapProfile.WALKING: "foot",
        SnapProfile.CYCLING: "bike",
        SnapProfile.DRIVING: "car",
    }

    def __init__(self, api_key: Optional[str] = None, timeout: float = REQUEST_TIMEOUT):
        super().__init__(timeout)
        self.api_key = api_key

    def _fetch(self, coordinates, profile):
        if not self.api_key:
            raise ProviderUnavailable("GRAPHHOPPER_API_KEY saknas")

        url = f"{GRAPHHOPPER_BASE_URL}/route"
        params = {
            "key": self.api_key,
            "point": [f"{lat},{lon}" for lat, lon in coordinates],
            "vehicle": self.vehicles[profile],
            "points_encoded": "false",
            "instructions": "false"
        }

        response = requests.get(url, params=params, timeout=self.timeout)
        data = self._check_response(response)

        if not data.get("paths"):
            return None
        points_data = data["paths"][0].get("points", {})
        # GraphHopper format: [lon, lat]
        return _lonlat_to_latlon(points_data.get("coordinates", []))


def build_default_providers(
    ors_api_key: Optional[str] = None,
    mapbox_token: Optional[str] = None,
    graphhopper_api_key: Optional[str] = None
) -> List[RoutingProvider]:
    """Providers i den ordning de ska provas"""
    return [
        OpenRouteServiceProvider(ors_api_key),
        MapboxDirectionsProvider(mapbox_token),
        OSRMProvider(),
        GraphHopperProvider(graphhopper_api_key),
    ]
