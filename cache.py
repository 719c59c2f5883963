"""
Enkel begränsad cache med FIFO-utkastning
"""

import hashlib
import json
import threading
from collections import OrderedDict
from typing import Any, Optional, Sequence

from models import Coordinate


def create_fingerprint(
    coordinates: Sequence[Coordinate],
    precision: int,
    extra: Optional[dict] = None
) -> str:
    """
    Skapa cache-nyckel från första, mittersta och sista punkten

    Args:
        coordinates: Ruttens punkter
        precision: Antal decimaler att avrunda till
        extra: Övriga alternativ som ska ingå i nyckeln

    Returns:
        Nyckel som hex-sträng
    """
    if not coordinates:
        return ""

    first = coordinates[0]
    middle = coordinates[len(coordinates) // 2]
    last = coordinates[-1]

    sampled = "-".join(
        f"{p[0]:.{precision}f},{p[1]:.{precision}f}" for p in (first, middle, last)
    )
    options = json.dumps(extra or {}, sort_keys=True)
    key_str = f"{sampled}-{options}"
    return hashlib.md5(key_str.encode()).hexdigest()


class FIFOCache:
    """Cache med fast storlek där äldsta insatta nyckel tas bort först

    Delas mellan Streamlit-sessioner (en tråd per session), därför sker
    all åtkomst under ett lås.
    """

    def __init__(self, max_size: int):
        self.max_size = max(1, max_size)
        self._store: "OrderedDict[str, Any]" = OrderedDict()
        self._lock = threading.Lock()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, key: str) -> Optional[Any]:
        # Läsning påverkar inte ordningen
        with self._lock:
            return self._store.get(key)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            if key not in self._store and len(self._store) >= self.max_size:
                self._store.popitem(last=False)
            self._store[key] = value

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def stats(self) -> dict:
        with self._lock:
            return {"size": len(self._store), "max_size": self.max_size}
