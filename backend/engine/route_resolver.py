import asyncio
import logging
from typing import Dict, Iterable, List, NamedTuple, Optional

from engine.route_cache import MIN_PATH_POINTS, RouteCache, route_cache_key
from models.map_models import Marker
from utils.fetch_timings import timed_call

logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_PROVIDER = "provider"
SOURCE_FALLBACK = "fallback"


class MarkerLink(NamedTuple):
    """An edge with both endpoint markers resolved."""
    from_marker: Marker
    to_marker: Marker

    @property
    def id(self) -> str:
        return route_cache_key(self.from_marker.id, self.to_marker.id)


class ResolvedPath(NamedTuple):
    points: list
    source: str


def straight_line(link: MarkerLink) -> list:
    return [
        link.from_marker.coordinates.to_lat_lng(),
        link.to_marker.coordinates.to_lat_lng(),
    ]


class RouteResolver:
    """
    Walking path per edge: cache -> directions provider -> straight line.

    Provider paths are pinned to the exact marker coordinates and cached.
    Fallback paths are never cached, so a later pass retries the provider.
    Nothing here raises to the caller.
    """

    def __init__(self, cache: RouteCache, directions_client, mode: Optional[str] = None):
        self.cache = cache
        self.directions_client = directions_client
        self.mode = mode
        self._pending = 0

    @property
    def pending(self) -> int:
        return self._pending

    @property
    def is_busy(self) -> bool:
        return self._pending > 0

    def status(self) -> Dict:
        return {"busy": self.is_busy, "pending": self._pending, "cached": len(self.cache)}

    def _cache_get(self, key: str) -> Optional[list]:
        try:
            return self.cache.get(key)
        except Exception as e:
            logger.warning(f"⚠️ Route cache read failed for {key}: {e}")
            return None

    async def _fetch(self, link: MarkerLink) -> Optional[list]:
        """Provider path, or None on any failure."""
        origin = link.from_marker.coordinates.to_lat_lng()
        destination = link.to_marker.coordinates.to_lat_lng()
        self._pending += 1
        try:
            result = await asyncio.to_thread(
                timed_call,
                "directions",
                link.id,
                self.directions_client.get_route,
                origin,
                destination,
                self.mode,
            )
        except Exception as e:
            logger.warning(f"⚠️ Directions failed for {link.id}, using straight line: {e}")
            return None
        finally:
            self._pending -= 1

        if not result.path:
            logger.warning(f"⚠️ Directions returned an empty path for {link.id}, using straight line")
            return None
        return [origin, *result.path, destination]

    async def resolve(self, link: MarkerLink) -> ResolvedPath:
        key = link.id
        cached = self._cache_get(key)
        if cached is not None and len(cached) >= MIN_PATH_POINTS:
            return ResolvedPath(cached, SOURCE_CACHE)

        path = await self._fetch(link)
        if path is None:
            return ResolvedPath(straight_line(link), SOURCE_FALLBACK)

        try:
            self.cache.set(key, path)
        except Exception as e:
            logger.warning(f"⚠️ Route cache write failed for {key}: {e}")
        return ResolvedPath(path, SOURCE_PROVIDER)

    async def resolve_path(self, link: MarkerLink) -> list:
        resolved = await self.resolve(link)
        return resolved.points

    async def resolve_all_paths(self, links: Iterable[MarkerLink]) -> Dict[str, list]:
        """Resolve every link concurrently; each one ends with a real or fallback path."""
        links = list(links)
        if not links:
            return {}

        resolved: List[ResolvedPath] = []
        try:
            # one cache write for the whole batch
            with self.cache.batch():
                resolved = await asyncio.gather(*[self.resolve(link) for link in links])
        except Exception as e:
            logger.warning(f"⚠️ Route cache write failed after batch: {e}")
        fallbacks = sum(1 for item in resolved if item.source == SOURCE_FALLBACK)
        logger.info(f"✅ Resolved {len(links)} paths ({fallbacks} straight-line fallbacks)")
        return {link.id: item.points for link, item in zip(links, resolved)}

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Route cache cleared")


def links_for(edges, markers_by_id: Dict[str, Marker]) -> List[MarkerLink]:
    """Edges -> MarkerLinks, skipping edges whose endpoints are gone."""
    links = []
    for edge in edges:
        from_marker = markers_by_id.get(edge.from_id)
        to_marker = markers_by_id.get(edge.to_id)
        if from_marker is None or to_marker is None:
            continue
        links.append(MarkerLink(from_marker, to_marker))
    return links
