"""
Konfiguration och konstanter för ruttritaren
"""

from pathlib import Path

# Standardvärden
DEFAULT_PACE = "5:30"
DEFAULT_PACE_MIN_PER_KM = 5.5
DEFAULT_CENTER = [37.7749, -122.4194]  # San Francisco
DEFAULT_PROFILE = "walking"
DEFAULT_LAP_COUNT = 1
DEFAULT_GAP_DISTANCE = 50
DEFAULT_SHAPE_RADIUS = 500
DEFAULT_SHAPE_POINTS = 100

# API URLs
ORS_BASE_URL = "https://api.openrouteservice.org"
MAPBOX_BASE_URL = "https://api.mapbox.com"
OSRM_BASE_URL = "https://router.project-osrm.org"
GRAPHHOPPER_BASE_URL = "https://graphhopper.com/api/1"
GOOGLE_ELEVATION_URL = "https://maps.googleapis.com/maps/api/elevation/json"

REQUEST_TIMEOUT = 30  # sekunder

# Snapping-inställningar
MAX_SNAP_WAYPOINTS = 10
DEFAULT_MAX_POINTS = 100
SNAP_GRID_SIZE = 0.001  # ~100 m
SMOOTHING_WEIGHT = 0.3
PROFILE_VARIATION = {
    "walking": 0.5,
    "cycling": 0.3,
    "driving": 0.1,
}

# Geometri
METERS_PER_DEGREE = 111320.0
EARTH_RADIUS_KM = 6371.0
GAP_STEPS = 3

# Cache-inställningar
SNAP_CACHE_SIZE = 500
ELEVATION_CACHE_SIZE = 1000
# Mapbox Tilequery kräver en förfrågan per punkt
ELEVATION_SAMPLE_POINTS = 100

# Export
MIME_TYPES = {
    "gpx": "application/gpx+xml",
    "kml": "application/vnd.google-earth.kml+xml",
    "json": "application/json",
}
EXPORT_CREATOR = "RunnersRoute"

# Sparade inställningar (GPS-korrigering)
SETTINGS_FILE = Path.home() / ".runners_route" / "settings.json"
GPS_LAT_OFFSET_KEY = "gpsLatOffset"
GPS_LNG_OFFSET_KEY = "gpsLngOffset"
TEMPLATES_FILE = Path.home() / ".runners_route" / "templates.json"
