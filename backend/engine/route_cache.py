"""
Route cache: edge key -> path points.

Values are plain [{"lat": .., "lng": ..}, ...] lists so that a JSON round trip
returns exactly what was stored.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from models.map_models import LatLng

logger = logging.getLogger(__name__)

MIN_PATH_POINTS = 2


def route_cache_key(from_id: str, to_id: str) -> str:
    return f"{from_id}-{to_id}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_path(raw: Any) -> bool:
    """At least two {"lat", "lng"} points with numeric values."""
    if not isinstance(raw, list) or len(raw) < MIN_PATH_POINTS:
        return False
    return all(
        isinstance(point, dict) and _is_number(point.get("lat")) and _is_number(point.get("lng"))
        for point in raw
    )


class RouteCache(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[List[LatLng]]:
        pass

    @abstractmethod
    def set(self, key: str, path: List[LatLng]) -> None:
        pass

    @abstractmethod
    def entries(self) -> Iterator[Tuple[str, List[LatLng]]]:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @contextmanager
    def batch(self):
        """Group writes; durable caches persist once on exit."""
        yield self

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return sum(1 for _ in self.entries())


class InMemoryRouteCache(RouteCache):
    def __init__(self, initial: Optional[Dict[str, List[Dict[str, float]]]] = None):
        self._data: Dict[str, List[Dict[str, float]]] = dict(initial or {})

    def get(self, key: str) -> Optional[List[LatLng]]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return [LatLng(**point) for point in raw]

    def set(self, key: str, path: List[LatLng]) -> None:
        self._data[key] = [{"lat": point.lat, "lng": point.lng} for point in path]

    def entries(self) -> Iterator[Tuple[str, List[LatLng]]]:
        for key in list(self._data):
            yield key, self.get(key)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def to_dict(self) -> Dict[str, List[Dict[str, float]]]:
        return {key: [dict(point) for point in path] for key, path in self._data.items()}


class JsonFileRouteCache(InMemoryRouteCache):
    """
    Durable route cache backed by a JSON file.
    Loaded once on construction, rewritten after every set/clear
    (or once at the end of a batch).
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._batch_depth = 0
        self._dirty = False
        super().__init__(self._load())
        logger.info(f"✅ Route cache rehydrated: {len(self)} entries from {self.path}")

    def _load(self) -> Dict[str, List[Dict[str, float]]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning(f"⚠️ Route cache at {self.path} unreadable, starting empty: {exc}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"⚠️ Route cache at {self.path} is not an object, starting empty")
            return {}

        entries = {}
        for key, raw in data.items():
            if not is_valid_path(raw):
                logger.warning(f"⚠️ Dropping malformed route cache entry {key}")
                continue
            entries[key] = [{"lat": point["lat"], "lng": point["lng"]} for point in raw]
        return entries

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def _persist(self) -> None:
        if self._batch_depth:
            self._dirty = True
            return
        self._save()

    @contextmanager
    def batch(self):
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if not self._batch_depth and self._dirty:
                self._dirty = False
                self._save()

    def set(self, key: str, path: List[LatLng]) -> None:
        super().set(key, path)
        self._persist()

    def clear(self) -> None:
        super().clear()
        self._persist()
