"""
Ruttmallar och varvgenerering
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from config import GAP_STEPS, TEMPLATES_FILE
from errors import InvalidInputError
from models import Coordinate, LoopConfig, RouteTemplate, to_coordinates

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES = {
    "golden-gate-park": RouteTemplate(
        name="Golden Gate Park Loop",
        description="Scenic loop through San Francisco's famous park",
        coordinates=[
            (37.7694, -122.4862),
            (37.7694, -122.4762),
            (37.7594, -122.4762),
            (37.7594, -122.4862),
            (37.7694, -122.4862),
        ],
        distance=3.2,
        difficulty="Easy",
        surface="Mixed",
        tags=["Scenic", "Flat", "Park"]
    ),
    "embarcadero": RouteTemplate(
        name="Embarcadero Waterfront",
        description="Waterfront route along San Francisco Bay",
        coordinates=[
            (37.8085, -122.4098),
            (37.8085, -122.3898),
            (37.7985, -122.3898),
            (37.7985, -122.4098),
        ],
        distance=4.5,
        difficulty="Easy",
        surface="Pavement",
        tags=["Waterfront", "Flat", "Scenic"]
    ),
    "twin-peaks": RouteTemplate(
        name="Twin Peaks Challenge",
        description="Hill route with city views",
        coordinates=[
            (37.7516, -122.4476),
            (37.7516, -122.4376),
            (37.7416, -122.4376),
            (37.7416, -122.4476),
        ],
        distance=2.8,
        difficulty="Hard",
        surface="Mixed",
        tags=["Hilly", "Scenic", "Challenging"]
    ),
}

# Alla varvtyper använder samma algoritm (växlande riktning med mellanrum)
LOOP_TYPES = {
    "out-and-back": {"name": "Out and Back", "description": "Spring ut och tillbaka samma väg"},
    "circular": {"name": "Circular Loop", "description": "Hel runda"},
    "figure-8": {"name": "Figure 8", "description": "Åtta-mönster"},
    "multiple-waypoints": {"name": "Multiple Waypoints", "description": "Rutt med flera kontrollpunkter"},
}


def create_gap_coords(
    start: Coordinate,
    end: Coordinate,
    steps: int = GAP_STEPS
) -> List[Coordinate]:
    """
    Skapa punkter som binder ihop två varv

    Args:
        start: Sista punkten på föregående varv
        end: Första punkten på nästa varv
        steps: Antal mellanpunkter

    Returns:
        Linjärt interpolerade punkter (exklusive start och slut)
    """
    gap_coords = []
    for i in range(1, steps + 1):
        ratio = i / (steps + 1)
        lat = start[0] + (end[0] - start[0]) * ratio
        lon = start[1] + (end[1] - start[1]) * ratio
        gap_coords.append((lat, lon))
    return gap_coords


def generate_laps_route(
    base_coordinates: Sequence[Sequence[float]],
    config: LoopConfig
) -> List[Coordinate]:
    """
    Upprepa en rutt flera varv med växlande riktning

    Varje udda varv körs baklänges. Om gap_distance_m > 0 läggs tre
    interpolerade punkter in mellan varven.

    Args:
        base_coordinates: Grundrutten
        config: Antal varv och mellanrum

    Returns:
        Den expanderade rutten
    """
    config.validate()
    base = to_coordinates(base_coordinates)
    if not base:
        raise InvalidInputError("Rutten saknar punkter")

    route: List[Coordinate] = []
    for i in range(config.lap_count):
        if i > 0 and config.gap_distance_m > 0:
            entry = base[0] if i % 2 == 0 else base[-1]
            route.extend(create_gap_coords(route[-1], entry))

        if i % 2 == 0:
            route.extend(base)
        else:
            route.extend(reversed(base))

    return route


def generate_loop_route(
    base_coordinates: Sequence[Sequence[float]],
    loop_type: str,
    config: LoopConfig
) -> List[Coordinate]:
    """Expandera en rutt för en namngiven varvtyp"""
    if loop_type not in LOOP_TYPES:
        raise InvalidInputError(f"Okänd varvtyp: {loop_type!r}")
    return generate_laps_route(base_coordinates, config)


def calculate_center(coordinates: Sequence[Coordinate]) -> Coordinate:
    if not coordinates:
        raise InvalidInputError("Rutten saknar punkter")
    lat = sum(c[0] for c in coordinates) / len(coordinates)
    lon = sum(c[1] for c in coordinates) / len(coordinates)
    return (lat, lon)


def interpolate_path(start: Coordinate, end: Coordinate, points: int = 5) -> List[Coordinate]:
    """Rak linje från start till slut med points + 1 punkter"""
    path = []
    for i in range(points + 1):
        ratio = i / points
        path.append((
            start[0] + (end[0] - start[0]) * ratio,
            start[1] + (end[1] - start[1]) * ratio
        ))
    return path


def _slug(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


class TemplateLibrary:
    """Inbyggda mallar plus användarens egna, sparade som JSON"""

    def __init__(self, storage_path: Optional[Path] = TEMPLATES_FILE):
        self.storage_path = storage_path
        self.templates: Dict[str, RouteTemplate] = dict(BUILTIN_TEMPLATES)
        self.templates.update(self.load_saved_templates())

    def get_all_templates(self) -> Dict[str, RouteTemplate]:
        return self.templates

    def get_template(self, key: str) -> RouteTemplate:
        template = self.templates.get(key)
        if template is None:
            raise InvalidInputError(f"Mallen '{key}' finns inte")
        return template

    def create_custom_template(
        self,
        name: str,
        coordinates: Sequence[Sequence[float]],
        description: str = "Custom route",
        distance: float = 0.0,
        difficulty: str = "Medium",
        surface: str = "Mixed",
        tags: Optional[List[str]] = None
    ) -> RouteTemplate:
        """Skapa en egen mall och registrera den under namnets slug"""
        if not name.strip():
            raise InvalidInputError("Mallen måste ha ett namn")
        template = RouteTemplate(
            name=name,
            description=description,
            coordinates=to_coordinates(coordinates),
            distance=distance,
            difficulty=difficulty,
            surface=surface,
            tags=list(tags or [])
        )
        self.templates[_slug(name)] = template
        return template

    def save_template(self, template: RouteTemplate) -> None:
        if self.storage_path is None:
            return
        saved = self._read_storage()
        saved[_slug(template.name)] = {
            "name": template.name,
            "description": template.description,
            "coordinates": [list(c) for c in template.coordinates],
            "distance": template.distance,
            "difficulty": template.difficulty,
            "surface": template.surface,
            "tags": template.tags,
        }
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self.storage_path.write_text(json.dumps(saved, indent=2), encoding="utf-8")

    def load_saved_templates(self) -> Dict[str, RouteTemplate]:
        templates = {}
        for key, data in self._read_storage().items():
            try:
                templates[key] = RouteTemplate(
                    name=data["name"],
                    description=data.get("description", ""),
                    coordinates=to_coordinates(data["coordinates"]),
                    distance=data.get("distance", 0.0),
                    difficulty=data.get("difficulty", "Medium"),
                    surface=data.get("surface", "Mixed"),
                    tags=data.get("tags", [])
                )
            except (KeyError, TypeError, ValueError, IndexError):
                logger.warning("Hoppar över trasig mall %r", key)
        return templates

    def _read_storage(self) -> dict:
        if self.storage_path is None or not self.storage_path.exists():
            return {}
        try:
            data = json.loads(self.storage_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Kunde inte läsa mallfilen %s", self.storage_path)
            return {}
        return data if isinstance(data, dict) else {}
