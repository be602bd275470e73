"""
Marker graph built from the sparse `next` lists stored on each marker.

`next` is untrusted: it may reference missing markers (dropped silently),
repeat ids (collapsed) or form cycles (every walk keeps a visited set).
"""

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from models.map_models import Edge, Marker

logger = logging.getLogger(__name__)


class ChainValidationError(ValueError):
    """Chain request references unknown markers or is too short."""


def build_edges(markers: Iterable[Marker]) -> List[Edge]:
    """One edge per (marker, existing successor) pair, in marker / next order."""
    markers = list(markers)
    known_ids = {marker.id for marker in markers}
    edges: List[Edge] = []
    seen: Set[tuple] = set()

    for marker in markers:
        for next_id in marker.content.next:
            if next_id not in known_ids:
                logger.debug(f"Broken edge dropped: {marker.id} -> {next_id}")
                continue
            pair = (marker.id, next_id)
            if pair in seen:
                continue
            seen.add(pair)
            edges.append(Edge(from_id=marker.id, to_id=next_id))
    return edges


def is_edge_highlighted(edge: Edge, highlighted_ids: Set[str], markers_by_id: Dict[str, Marker]) -> bool:
    """
    The destination must be a highlighted chain member and the edge must be real
    (predecessor still lists the destination in its own next).
    """
    if edge.to_id not in highlighted_ids:
        return False
    predecessor = markers_by_id.get(edge.from_id)
    if predecessor is None:
        return False
    return edge.to_id in predecessor.content.next


def _is_contiguous_sub_chain(chain: List[str], other: List[str]) -> bool:
    if len(chain) >= len(other):
        return False
    for start in range(len(other) - len(chain) + 1):
        if other[start:start + len(chain)] == chain:
            return True
    return False


class MarkerGraph:
    """Markers indexed by id plus the edge list, built once per read."""

    def __init__(self, markers: Iterable[Marker]):
        self.markers: List[Marker] = list(markers)
        self.by_id: Dict[str, Marker] = {marker.id: marker for marker in self.markers}
        self.edges: List[Edge] = build_edges(self.markers)
        self._successors: Dict[str, List[str]] = {}
        self._predecessors: Dict[str, List[str]] = {}
        for edge in self.edges:
            self._successors.setdefault(edge.from_id, []).append(edge.to_id)
            self._predecessors.setdefault(edge.to_id, []).append(edge.from_id)

    def get(self, marker_id: str) -> Optional[Marker]:
        return self.by_id.get(marker_id)

    def successors(self, marker_id: str) -> List[str]:
        return list(self._successors.get(marker_id, []))

    def predecessors(self, marker_id: str) -> List[str]:
        return list(self._predecessors.get(marker_id, []))

    def is_edge_highlighted(self, edge: Edge, highlighted_ids: Iterable[str]) -> bool:
        return is_edge_highlighted(edge, set(highlighted_ids), self.by_id)

    def chain_heads(self) -> List[Marker]:
        return [
            marker for marker in self.markers
            if self._successors.get(marker.id) and not self._predecessors.get(marker.id)
        ]

    def _walk(self, marker_id: str, path: List[str], visited: Set[str], chains: List[List[str]]):
        # depth-first; each leaf (or repeat) closes one chain
        path.append(marker_id)
        visited.add(marker_id)
        extended = False
        for next_id in self._successors.get(marker_id, []):
            if next_id in visited:
                continue
            extended = True
            self._walk(next_id, path, visited, chains)
        if not extended:
            chains.append(list(path))
        path.pop()
        visited.discard(marker_id)

    def derive_chains(self) -> List[List[str]]:
        """Maximal paths from every chain head; fan-out yields one chain per branch."""
        chains: List[List[str]] = []
        covered: Set[str] = set()

        for head in self.chain_heads():
            head_chains: List[List[str]] = []
            self._walk(head.id, [], set(), head_chains)
            chains.extend(head_chains)
            for chain in head_chains:
                covered.update(chain)

        # cycles have no head; enter each uncovered one once
        for marker in self.markers:
            if marker.id in covered or not self._successors.get(marker.id):
                continue
            cycle_chains: List[List[str]] = []
            self._walk(marker.id, [], set(), cycle_chains)
            chains.extend(cycle_chains)
            for chain in cycle_chains:
                covered.update(chain)

        return chains

    def chains_from(self, marker_id: str) -> List[List[str]]:
        """
        Breadth-first chains starting at each successor of marker_id.
        Chains that appear contiguously inside a longer chain are dropped.
        """
        chains: List[List[str]] = []

        for first_id in self.successors(marker_id):
            visited = {first_id}
            queue = deque([[first_id]])
            while queue:
                chain = queue.popleft()
                chains.append(chain)
                for next_id in self._successors.get(chain[-1], []):
                    if next_id in visited:
                        continue
                    visited.add(next_id)
                    queue.append(chain + [next_id])

        return [
            chain for index, chain in enumerate(chains)
            if not any(
                index != other_index and _is_contiguous_sub_chain(chain, other)
                for other_index, other in enumerate(chains)
            )
        ]

    def link_sequence(self, marker_ids: List[str]) -> Dict[str, List[str]]:
        """
        New `next` lists that link marker_ids in order (append, never duplicate).
        Only markers whose list changes are returned.
        """
        if len(marker_ids) < 2:
            raise ChainValidationError("A chain needs at least 2 markers")
        unknown = [marker_id for marker_id in marker_ids if marker_id not in self.by_id]
        if unknown:
            raise ChainValidationError(f"Unknown marker ids: {unknown}")

        updates: Dict[str, List[str]] = {}
        for current_id, next_id in zip(marker_ids, marker_ids[1:]):
            current_next = updates.get(current_id, list(self.by_id[current_id].content.next))
            if next_id not in current_next:
                updates[current_id] = current_next + [next_id]
        return updates

    def unlink(self, from_id: str, to_id: str) -> List[str]:
        marker = self.by_id.get(from_id)
        if marker is None:
            raise ChainValidationError(f"Unknown marker id: {from_id}")
        return [next_id for next_id in marker.content.next if next_id != to_id]
