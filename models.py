"""
Datamodeller för ruttritaren
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union
from datetime import datetime

from config import (
    DEFAULT_GAP_DISTANCE,
    DEFAULT_LAP_COUNT,
    DEFAULT_MAX_POINTS,
    DEFAULT_PACE_MIN_PER_KM,
    SNAP_GRID_SIZE,
)
from errors import InvalidInputError

# (lat, lon) i decimalgrader
Coordinate = Tuple[float, float]


def to_coordinates(points: Sequence[Sequence[float]]) -> List[Coordinate]:
    """Normalisera [[lat, lon], ...] till en lista med tupler"""
    return [(float(p[0]), float(p[1])) for p in points]


class SnapProfile(str, Enum):
    """Färdsätt som styr providerordning och reservbeteende"""
    WALKING = "walking"
    CYCLING = "cycling"
    DRIVING = "driving"

    @classmethod
    def parse(cls, value: Union[str, "SnapProfile"]) -> "SnapProfile":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidInputError(f"Okänd profil: {value!r}") from None


@dataclass
class LoopConfig:
    """Inställningar för varvgenerering"""
    lap_count: int = DEFAULT_LAP_COUNT
    gap_distance_m: float = DEFAULT_GAP_DISTANCE

    def validate(self) -> None:
        if self.lap_count < 1:
            raise InvalidInputError("Antal varv måste vara minst 1")
        if self.gap_distance_m < 0:
            raise InvalidInputError("Mellanrummet kan inte vara negativt")


@dataclass
class SnapOptions:
    """Alternativ för vägsnappning"""
    profile: SnapProfile = SnapProfile.DRIVING
    simplify: bool = True
    max_points: int = DEFAULT_MAX_POINTS
    grid_size: float = SNAP_GRID_SIZE

    def __post_init__(self):
        self.profile = SnapProfile.parse(self.profile)

    def as_key_dict(self) -> dict:
        return {
            "profile": self.profile.value,
            "simplify": self.simplify,
            "max_points": self.max_points,
            "grid_size": self.grid_size,
        }


@dataclass
class PipelineConfig:
    """Explicit konfiguration som UI-lagret fyller i före varje anrop"""
    profile: SnapProfile = SnapProfile.WALKING
    auto_snap: bool = False
    simplify: bool = True
    max_points: int = DEFAULT_MAX_POINTS
    loop: LoopConfig = field(default_factory=LoopConfig)
    loop_type: str = "out-and-back"
    pace_min_per_km: float = DEFAULT_PACE_MIN_PER_KM
    start_time: Optional[Union[str, datetime]] = None
    route_name: str = "Route"
    route_description: str = ""

    def snap_options(self) -> SnapOptions:
        return SnapOptions(
            profile=self.profile,
            simplify=self.simplify,
            max_points=self.max_points
        )


@dataclass
class Route:
    """En rutt: koordinater plus valfria höjder och tidsstämplar per punkt"""
    coordinates: List[Coordinate]
    elevations: Optional[List[float]] = None
    timestamps: Optional[List[str]] = None
    snapped: bool = False

    def __post_init__(self):
        self.coordinates = to_coordinates(self.coordinates)
        n = len(self.coordinates)
        if self.elevations is not None and len(self.elevations) != n:
            raise InvalidInputError(
                f"Antal höjdvärden ({len(self.elevations)}) matchar inte antal punkter ({n})"
            )
        if self.timestamps is not None and len(self.timestamps) != n:
            raise InvalidInputError(
                f"Antal tidsstämplar ({len(self.timestamps)}) matchar inte antal punkter ({n})"
            )

    def __len__(self) -> int:
        return len(self.coordinates)


@dataclass
class RouteTemplate:
    """En sparad eller inbyggd ruttmall"""
    name: str
    description: str
    coordinates: List[Coordinate]
    distance: float = 0.0  # km
    difficulty: str = "Medium"
    surface: str = "Mixed"
    tags: List[str] = field(default_factory=list)
