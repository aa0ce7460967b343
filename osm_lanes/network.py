"""
Zentrale Fassade für Spur-Konnektivität eines Straßennetzes.

Hält Straßen, Spur-Tags, Layouts und den Junction-Index und cached die
aufgelösten Junctions, bis sich das Netz ändert.
"""

from typing import Dict, Iterable, List, Optional

from . import config
from .geometry.junctions import JunctionIndex
from .geometry.road_layout import RoadLayout
from .lanes.connectivity import JunctionShape, LaneSplit, classify_and_resolve
from .lanes.model import LaneRef
from .osm.lane_tags import LaneTags
from .osm.parser import build_roads, extract_roads_from_osm


class LaneNetwork:
    """
    Spur-Konnektivität für alle Junctions eines Straßennetzes.

    Beispiel:
        >>> network = LaneNetwork.from_osm_elements(elements)
        >>> split = network.classify_and_resolve((x, y))
        >>> split.get_connections(lane_ref)
    """

    def __init__(self, roads: Iterable = (), right_hand: Optional[bool] = None, lane_width: Optional[float] = None):
        """
        Args:
            roads: Road-Objekte
            right_hand: Rechtsverkehr (None = config.RIGHT_HAND_TRAFFIC)
            lane_width: feste Spurbreite (None = aus Tags bzw. config.LANE_WIDTH)
        """
        self.right_hand = config.RIGHT_HAND_TRAFFIC if right_hand is None else right_hand
        self.lane_width = lane_width
        self.roads = {}
        self.lane_tags: Dict[int, LaneTags] = {}
        self.layouts: Dict[int, RoadLayout] = {}
        for road in roads:
            self._add(road)

        self._index: Optional[JunctionIndex] = None
        self._splits: Dict[int, Optional[LaneSplit]] = {}

    @classmethod
    def from_osm_elements(cls, elements, **kwargs) -> "LaneNetwork":
        """Baut das Netz aus Overpass-Elementen ('out geom')."""
        return cls(build_roads(extract_roads_from_osm(elements)), **kwargs)

    def _add(self, road):
        tags = LaneTags(road.tags)
        self.roads[road.osm_id] = road
        self.lane_tags[road.osm_id] = tags
        self.layouts[road.osm_id] = RoadLayout(road, tags, self.lane_width, self.right_hand)

    @property
    def index(self) -> JunctionIndex:
        if self._index is None:
            self._index = JunctionIndex(self.roads.values())
        return self._index

    # --- Änderungen -----------------------------------------------------------

    def invalidate(self):
        """Verwirft Index und alle aufgelösten Junctions."""
        self._index = None
        self._splits = {}

    def update_road(self, road):
        """Fügt eine Straße hinzu oder ersetzt sie (z.B. nach Tag-Änderung)."""
        self._add(road)
        self.invalidate()

    def remove_road(self, road_id: int):
        self.roads.pop(road_id)
        self.lane_tags.pop(road_id, None)
        self.layouts.pop(road_id, None)
        self.invalidate()

    # --- Auflösung --------------------------------------------------------------

    def resolve_node(self, node_id: int) -> Optional[LaneSplit]:
        """Löst die Junction an einem Knoten auf (gecached)."""
        if node_id in self._splits:
            return self._splits[node_id]

        edges = self.index.ways_clockwise(node_id)
        split = classify_and_resolve(edges, self.lane_tags, self.right_hand, self.layouts) if edges else None
        self._splits[node_id] = split

        if config.VERBOSE:
            if split is None:
                print(f"  [Lanes] Knoten {node_id}: normale Kreuzung ({len(edges)} Kanten)")
            else:
                print(f"  [Lanes] Knoten {node_id}: {split.describe()}")
        return split

    def classify_and_resolve(self, point, tolerance: Optional[float] = None) -> Optional[LaneSplit]:
        """
        Löst die Junction an einer Koordinate auf.

        Returns:
            LaneSplit oder None (kein Knoten gefunden oder normale Kreuzung)
        """
        node_id = self.index.find_node(point, tolerance)
        if node_id is None:
            return None
        return self.resolve_node(node_id)

    def resolve_all(self) -> Dict[int, LaneSplit]:
        """Alle auflösbaren Junctions (Knoten-ID -> LaneSplit)."""
        resolved = {}
        for node_id in self.index.junction_nodes:
            split = self.resolve_node(node_id)
            if split is not None:
                resolved[node_id] = split
        return resolved

    def get_connections(self, node_id: int, lane_ref: LaneRef) -> List[LaneRef]:
        split = self.resolve_node(node_id)
        if split is None:
            return []
        return split.get_connections(lane_ref)

    def junction_offsets(self, node_id: int) -> Dict[int, float]:
        """Placement-Offset pro angeschlossener Straße (road_id -> Meter)."""
        split = self.resolve_node(node_id)
        if split is None:
            return {}
        return {edge.road_id: split.get_placement_offset(edge) for edge in split.connected_edges}

    def summary(self) -> Dict[str, int]:
        """Statistik über alle Junctions."""
        stats = {"junctions": 0, "forks": 0, "merges": 0, "two_way_splits": 0, "unsupported": 0, "anomalies": 0}
        for node_id in self.index.junction_nodes:
            stats["junctions"] += 1
            split = self.resolve_node(node_id)
            if split is None:
                stats["unsupported"] += 1
                continue
            if split.shape is JunctionShape.TWO_WAY_SPLIT:
                stats["two_way_splits"] += 1
            elif split.is_fork:
                stats["forks"] += 1
            else:
                stats["merges"] += 1
            if split.anomaly:
                stats["anomalies"] += 1
        return stats

    def print_summary(self):
        stats = self.summary()
        print(f"  ℹ {stats['junctions']} Junctions untersucht:")
        print(f"      - Forks:                       {stats['forks']}")
        print(f"      - Merges:                      {stats['merges']}")
        print(f"      - Zweirichtungs-Splits:        {stats['two_way_splits']}")
        print(f"      - Normale Kreuzungen:          {stats['unsupported']}")
        if stats["anomalies"]:
            print(f"      - [!] Zuordnungsfehler:        {stats['anomalies']}")
