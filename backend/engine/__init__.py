"""
Engine package
- marker dedup (deduplicator)
- chain graph / edge membership (chain_graph)
- route resolution & cache (route_resolver, route_cache)
- highlight composition (highlight)
"""

from .chain_graph import MarkerGraph, ChainValidationError, build_edges, is_edge_highlighted
from .deduplicator import ProximityDeduplicator
from .highlight import compute_highlighted_edges, build_connection_lines
from .route_cache import RouteCache, InMemoryRouteCache, JsonFileRouteCache, route_cache_key
from .route_resolver import RouteResolver, MarkerLink, ResolvedPath, links_for

__all__ = [
    "MarkerGraph",
    "ChainValidationError",
    "build_edges",
    "is_edge_highlighted",
    "ProximityDeduplicator",
    "compute_highlighted_edges",
    "build_connection_lines",
    "RouteCache",
    "InMemoryRouteCache",
    "JsonFileRouteCache",
    "route_cache_key",
    "RouteResolver",
    "MarkerLink",
    "ResolvedPath",
    "links_for",
]
