from typing import Any, Dict, Iterable, List, Optional

from engine.chain_graph import MarkerGraph
from models.map_models import LatLng, Marker


def compute_highlighted_edges(markers: Iterable[Marker], highlighted_ids: Iterable[str]) -> List[str]:
    """Ids of the edges that belong to the highlighted chain."""
    graph = markers if isinstance(markers, MarkerGraph) else MarkerGraph(markers)
    highlighted = set(highlighted_ids)
    if not highlighted:
        return []
    return [edge.id for edge in graph.edges if graph.is_edge_highlighted(edge, highlighted)]


def build_connection_lines(
    markers: Iterable[Marker],
    highlighted_ids: Iterable[str],
    paths: Optional[Dict[str, List[LatLng]]] = None,
) -> Dict[str, Any]:
    """
    GeoJSON FeatureCollection of connection lines ([lng, lat] order).
    Uses the resolved path for an edge when given, the straight segment otherwise.
    """
    graph = markers if isinstance(markers, MarkerGraph) else MarkerGraph(markers)
    highlighted_edges = set(compute_highlighted_edges(graph, highlighted_ids))
    paths = paths or {}

    features = []
    for edge in graph.edges:
        points = paths.get(edge.id)
        if points:
            coordinates = [[point.lng, point.lat] for point in points]
        else:
            start = graph.by_id[edge.from_id].coordinates
            end = graph.by_id[edge.to_id].coordinates
            coordinates = [[start.longitude, start.latitude], [end.longitude, end.latitude]]

        features.append({
            "type": "Feature",
            "geometry": {"type": "LineString", "coordinates": coordinates},
            "properties": {
                "id": edge.id,
                "fromId": edge.from_id,
                "toId": edge.to_id,
                "highlighted": edge.id in highlighted_edges,
            },
        })

    return {"type": "FeatureCollection", "features": features}
