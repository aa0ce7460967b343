"""
OSM Daten Parser und Datenextraktion.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .. import config
from ..geometry.coordinates import latlon_to_utm


@dataclass
class Road:
    """Ein OSM-Way mit Fahrspuren (Koordinaten metrisch)."""

    osm_id: int
    nodes: List[int]
    coords: List[Tuple[float, float]]
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> Optional[str]:
        return self.tags.get("name")

    @property
    def highway(self) -> Optional[str]:
        return self.tags.get("highway")

    def __post_init__(self):
        if len(self.nodes) != len(self.coords):
            raise ValueError(
                f"Way {self.osm_id}: {len(self.nodes)} Knoten, aber {len(self.coords)} Koordinaten"
            )


def is_vehicle_road(tags) -> bool:
    """True für highway-Ways, auf denen Fahrspuren existieren."""
    highway = tags.get("highway")
    if not highway:
        return False
    return highway not in config.NON_VEHICLE_HIGHWAYS and tags.get("area") != "yes"


def extract_roads_from_osm(osm_elements):
    """Extrahiert nur Strassen-Ways aus allen OSM-Daten."""
    roads = [
        element
        for element in osm_elements
        if element.get("type") == "way"
        and "tags" in element
        and is_vehicle_road(element["tags"])
    ]
    print(
        f"  [->] {len(roads)} Strassensegmente aus {len(osm_elements)} OSM-Elementen extrahiert"
    )
    return roads


def build_roads(ways) -> List[Road]:
    """
    Baut Road-Objekte aus Overpass-Ways ('out geom').

    Erwartet pro Way 'id', 'nodes' (Knoten-IDs) und 'geometry' ([{lat, lon}, ...]).
    Ways ohne Geometrie oder mit weniger als 2 Punkten werden übersprungen.
    """
    roads = []
    skipped = 0

    for way in ways:
        geometry = way.get("geometry")
        nodes = way.get("nodes")
        if not geometry or not nodes or len(geometry) != len(nodes) or len(nodes) < 2:
            skipped += 1
            continue

        xy = latlon_to_utm([p["lat"] for p in geometry], [p["lon"] for p in geometry])
        coords = [(float(x), float(y)) for x, y in xy]
        roads.append(Road(osm_id=way["id"], nodes=list(nodes), coords=coords, tags=dict(way.get("tags", {}))))

    if skipped:
        print(f"  [!] {skipped} Ways ohne verwertbare Geometrie übersprungen")
    return roads
