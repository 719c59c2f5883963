"""
Tidsstämplar per punkt utifrån tempo och starttid
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Union

from models import Coordinate
from utils import calculate_distance

logger = logging.getLogger(__name__)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Tolka en starttid

    Naiva tider tolkas som lokal tid.

    Returns:
        Tidszonsmedveten datetime, eller None om värdet saknas eller inte går att tolka
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Ogiltig starttid %r, använder nuvarande tid", value)
            return None

    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def combine_start_time(date_str: str, time_str: str) -> Optional[datetime]:
    """Slå ihop UI:ts datum- ("2024-05-01") och tidsfält ("07:30")"""
    if not date_str:
        return None
    return parse_timestamp(f"{date_str}T{time_str or '00:00'}")


def generate_timestamps(
    coordinates: Sequence[Coordinate],
    pace_min_per_km: float,
    start_time: Union[str, datetime, None] = None
) -> List[str]:
    """
    Skapa en ISO 8601-tidsstämpel per punkt

    Args:
        coordinates: Ruttens punkter
        pace_min_per_km: Tempo i minuter per km
        start_time: Starttid; nuvarande tid om den saknas eller är ogiltig

    Returns:
        Lista med tidsstämplar, lika lång som coordinates
    """
    start = parse_timestamp(start_time) or datetime.now().astimezone()

    timestamps = []
    elapsed_seconds = 0.0
    for i, point in enumerate(coordinates):
        if i > 0:
            segment_km = calculate_distance(coordinates[i - 1], point)
            elapsed_seconds += segment_km * pace_min_per_km * 60
        timestamps.append((start + timedelta(seconds=elapsed_seconds)).isoformat())

    return timestamps
