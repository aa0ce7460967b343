"""
Erkennung von Junctions und Sortierung der angeschlossenen Straßen.

Eine Junction ist ein OSM-Knoten, an dem mindestens zwei Ways hängen
(oder ein Way den Knoten mehrfach benutzt). Ways, die durch eine Junction
hindurchlaufen, liefern zwei DirectedEdges (vorwärts und rückwärts).
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial import cKDTree

from .. import config
from ..lanes.model import DirectedEdge


class JunctionIndex:
    """
    Topologie-Index über alle Straßen.

    Beispiel:
        >>> index = JunctionIndex(roads)
        >>> node_id = index.find_node((x, y))
        >>> edges = index.ways_clockwise(node_id)
    """

    def __init__(self, roads):
        self.roads = {road.osm_id: road for road in roads}
        self._node_refs: Dict[int, List[Tuple[int, int]]] = defaultdict(list)  # node -> [(road_id, position)]
        self._node_coords: Dict[int, Tuple[float, float]] = {}

        for road in self.roads.values():
            for position, (node_id, xy) in enumerate(zip(road.nodes, road.coords)):
                self._node_refs[node_id].append((road.osm_id, position))
                self._node_coords.setdefault(node_id, (float(xy[0]), float(xy[1])))

        self.junction_nodes = sorted(node_id for node_id, refs in self._node_refs.items() if len(refs) >= 2)

        self._kdtree = None
        if self.junction_nodes:
            points = np.array([self._node_coords[n] for n in self.junction_nodes])
            self._kdtree = cKDTree(points)

    def node_position(self, node_id: int) -> Tuple[float, float]:
        return self._node_coords[node_id]

    def find_node(self, point, tolerance: Optional[float] = None) -> Optional[int]:
        """
        Sucht den Junction-Knoten nächst point.

        Args:
            point: (x, y) in metrischen Koordinaten
            tolerance: Suchradius in Metern (None = config.JUNCTION_TOLERANCE)

        Returns:
            Knoten-ID oder None
        """
        if self._kdtree is None:
            return None
        if tolerance is None:
            tolerance = config.JUNCTION_TOLERANCE
        distance, idx = self._kdtree.query(np.asarray(point[:2], dtype=float), distance_upper_bound=tolerance)
        if not np.isfinite(distance):
            return None
        return self.junction_nodes[idx]

    def _direction(self, road, position: int, step: int):
        """Richtung vom Knoten an position zum nächsten unterscheidbaren Punkt (step = ±1)."""
        coords = road.coords
        origin = np.asarray(coords[position], dtype=float)
        i = position + step
        while 0 <= i < len(coords):
            direction = np.asarray(coords[i], dtype=float) - origin
            if np.linalg.norm(direction) > config.MIN_SEGMENT_LENGTH:
                return direction
            i += step
        return None

    def edges_at(self, node_id: int) -> List[Tuple[DirectedEdge, np.ndarray]]:
        """Alle DirectedEdges am Knoten mit ihrem Richtungsvektor (unsortiert)."""
        edges = []
        for road_id, position in self._node_refs.get(node_id, []):
            road = self.roads[road_id]
            interior = 0 < position < len(road.nodes) - 1
            for step, forward in ((1, True), (-1, False)):
                direction = self._direction(road, position, step)
                if direction is not None:
                    edges.append((DirectedEdge(road_id, forward, position, interior), direction))
        return edges

    def ways_clockwise(self, node_id: int) -> List[DirectedEdge]:
        """
        DirectedEdges am Knoten im Uhrzeigersinn.

        Sortiert nach absteigendem Winkel (arctan2), beginnend bei der Kante
        mit dem größten Winkel. Bei gleichem Winkel entscheidet die Reihenfolge
        der Ways.
        """
        edges = self.edges_at(node_id)
        if not edges:
            return []
        vectors = np.array([direction for _, direction in edges])
        angles = np.arctan2(vectors[:, 1], vectors[:, 0])
        order = np.argsort(-angles, kind="stable")
        return [edges[i][0] for i in order]

    def ordered_edges_at_junction(self, point, tolerance: Optional[float] = None) -> List[DirectedEdge]:
        """Wie ways_clockwise, aber für eine Koordinate."""
        node_id = self.find_node(point, tolerance)
        if node_id is None:
            return []
        return self.ways_clockwise(node_id)

    def roads_at(self, node_id: int) -> Sequence[int]:
        return sorted({road_id for road_id, _ in self._node_refs.get(node_id, [])})


def analyze_junction_types(index: JunctionIndex):
    """
    Zählt Junctions nach Anzahl angeschlossener Kanten.

    Returns:
        Dict mit 'two_way' (2 Kanten), 'T_junctions' (3), 'X_junctions' (4+)
    """
    stats = {"two_way": 0, "T_junctions": 0, "X_junctions": 0}
    for node_id in index.junction_nodes:
        count = len(index.edges_at(node_id))
        if count == 2:
            stats["two_way"] += 1
        elif count == 3:
            stats["T_junctions"] += 1
        elif count >= 4:
            stats["X_junctions"] += 1
    return stats
