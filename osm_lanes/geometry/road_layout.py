"""
Quer-Layout einer Straße: Lage der Spuren relativ zur Way-Linie.

Querkoordinate ("lateral") in Metern, positiv = rechts von der
Vorwärtsrichtung des Ways, 0 = Mittellinie zwischen Vorwärts- und
Rückwärtsspuren. Beidseitig befahrbare Spuren (lanes:both_ways) liegen
mittig auf der Mittellinie.
"""

from typing import Dict, Optional, Tuple

import numpy as np
from shapely.geometry import LineString

from .. import config
from ..lanes.model import Placement, to_directed_lane
from ..osm.lane_tags import LaneTags


def parse_width(value) -> Optional[float]:
    """Parst ein width-Tag ('7.5', '7.5 m'). Ungültig -> None."""
    if value is None:
        return None
    try:
        width = float(str(value).lower().replace("m", "").strip())
    except (ValueError, AttributeError):
        return None
    return width if width > 0 else None


class RoadLayout:
    """
    Layout einer Straße für Rendering und Junction-Ausrichtung.

    Args:
        road: Road mit metrischen coords und tags
        lane_tags: LaneTags (None = aus road.tags)
        lane_width: Spurbreite in Metern (None = width-Tag / Spuranzahl oder config.LANE_WIDTH)
        right_hand: Rechtsverkehr (None = config.RIGHT_HAND_TRAFFIC)
    """

    def __init__(self, road, lane_tags: Optional[LaneTags] = None, lane_width=None, right_hand=None):
        self.road = road
        self.lane_tags = lane_tags if lane_tags is not None else LaneTags(road.tags)
        self.right_hand = config.RIGHT_HAND_TRAFFIC if right_hand is None else right_hand
        self.lane_width = lane_width if lane_width is not None else self._calculate_lane_width()
        self.line = LineString(road.coords)

    def _calculate_lane_width(self) -> float:
        width = parse_width(self.road.tags.get("width"))
        total = self.lane_tags.total_lanes
        if width is not None and total > 0:
            return width / total
        return config.LANE_WIDTH

    # --- Querlage -----------------------------------------------------------

    def _center_gap(self) -> float:
        return self.lane_tags.both_ways * self.lane_width / 2.0

    def lane_band(self, directed_lane: int) -> Tuple[float, float]:
        """
        Querbereich (min, max) einer Spur.

        Args:
            directed_lane: Mittellinien-relativer Index (!= 0)
        """
        count = self.lane_tags.get_lane_count(1 if directed_lane > 0 else -1)
        magnitude = abs(directed_lane)
        if not 1 <= magnitude <= count:
            raise ValueError(f"Way {self.road.osm_id} hat keine Spur {directed_lane:+d}")

        inner = self._center_gap() + (magnitude - 1) * self.lane_width
        outer = inner + self.lane_width
        on_right = (directed_lane > 0) == self.right_hand
        return (inner, outer) if on_right else (-outer, -inner)

    def carriageway_edges(self) -> Tuple[float, float]:
        """Linker und rechter Fahrbahnrand (Querkoordinate)."""
        right_count = self.lane_tags.forward if self.right_hand else self.lane_tags.backward
        left_count = self.lane_tags.backward if self.right_hand else self.lane_tags.forward
        gap = self._center_gap()
        return -(gap + left_count * self.lane_width), gap + right_count * self.lane_width

    def anchor_lateral(self, anchor: Placement) -> float:
        """Querkoordinate eines placement-Ankers."""
        count = self.lane_tags.get_lane_count(1 if anchor.forward else -1)
        directed = to_directed_lane(anchor.lane, anchor.forward, count, self.right_hand)
        low, high = self.lane_band(directed)
        if anchor.kind == "middle_of":
            return (low + high) / 2.0
        # Links in Fahrtrichtung: vorwärts die kleinere Querkoordinate
        left, right = (low, high) if anchor.forward else (high, low)
        return left if anchor.kind == "left_of" else right

    def reference_lateral(self, end: Optional[str] = None) -> float:
        """
        Querlage der Way-Linie am Ende end.

        Ohne (gültiges) placement-Tag liegt der Way in der Fahrbahnmitte.
        """
        anchor = self.lane_tags.get_placement(end)
        if anchor is not None:
            try:
                return self.anchor_lateral(anchor)
            except ValueError:
                pass
        left, right = self.carriageway_edges()
        return (left + right) / 2.0

    def placement_offset_from_anchor(self, anchor: Placement, end: Optional[str]) -> float:
        """
        Abstand (Meter, rechts positiv) zwischen Way-Linie und Anker am Ende end.

        Um diesen Betrag muss der Junction-Punkt quer verschoben werden, damit
        eine dort anschließende Straße mit diesem Anker bündig liegt.
        """
        return self.anchor_lateral(anchor) - self.reference_lateral(end)

    # --- Geometrie ------------------------------------------------------------

    def lane_centerlines(self) -> Dict[int, LineString]:
        """
        Mittellinien aller Spuren als LineStrings.

        Returns:
            Dict directed_lane -> LineString
        """
        reference = self.reference_lateral()
        lines = {}
        lanes = [i for i in range(1, self.lane_tags.forward + 1)]
        lanes += [-i for i in range(1, self.lane_tags.backward + 1)]
        for directed in lanes:
            low, high = self.lane_band(directed)
            lateral = (low + high) / 2.0 - reference
            # offset_curve: positive Distanz = links
            lines[directed] = self.line.offset_curve(-lateral) if abs(lateral) > 1e-9 else self.line
        return lines

    def shifted_junction_point(self, end: str, offset: float) -> np.ndarray:
        """
        Verschiebt den Endpunkt der Straße quer zur Fahrtrichtung.

        Args:
            end: 'start' oder 'end'
            offset: Meter, positiv = rechts von der Vorwärtsrichtung
        """
        coords = np.asarray(self.road.coords, dtype=float)
        if end == "start":
            point, direction = coords[0], coords[1] - coords[0]
        else:
            point, direction = coords[-1], coords[-1] - coords[-2]

        norm = np.linalg.norm(direction)
        if norm < config.MIN_SEGMENT_LENGTH:
            return point.copy()
        direction = direction / norm
        right = np.array([direction[1], -direction[0]])
        return point + right * offset
