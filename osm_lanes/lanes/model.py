"""
Datenmodell für Spur-Konnektivität an Junctions.

- DirectedEdge: eine Straße, von einem Junction-Knoten aus in eine Richtung befahren
- LaneRef: vorzeichenbehaftete Spurnummer relativ zur Mittellinie
- Placement: OSM-placement-Anker (left_of:N / middle_of:N / right_of:N)

Spur-Indizes zählen von der Mittellinie nach außen:
+1 = innerste Vorwärtsspur, +2 die daneben, ...
-1 = innerste Rückwärtsspur, -2 ...
0 ist keine gültige Spur.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol, Tuple

PLACEMENT_KINDS = ("left_of", "middle_of", "right_of")


@dataclass(frozen=True)
class DirectedEdge:
    """
    Straße (OSM-Way), vom Junction-Knoten aus befahren.

    Zwei DirectedEdges sind gleich, wenn Straße und Richtung gleich sind.
    node_index und interior werden beim Vergleich ignoriert.
    """

    road_id: int
    forward: bool  # True = in Richtung der gespeicherten Way-Geometrie
    node_index: Optional[int] = field(default=None, compare=False)
    interior: bool = field(default=False, compare=False)  # Junction liegt mitten im Way

    @property
    def end(self) -> Optional[str]:
        """
        Way-Ende, an dem die Junction liegt ('start' oder 'end').

        None, wenn die Junction ein innerer Knoten des Ways ist.
        """
        if self.interior:
            return None
        return "start" if self.forward else "end"

    def lanes_entering(self, lanes: "LaneMetadata") -> int:
        """Spuren, die in die Junction hineinführen."""
        return lanes.get_lane_count(-1 if self.forward else 1)

    def lanes_leaving(self, lanes: "LaneMetadata") -> int:
        """Spuren, die aus der Junction herausführen."""
        return lanes.get_lane_count(1 if self.forward else -1)

    def entering_sign(self) -> int:
        """Vorzeichen der Spur-Indizes, deren Verkehr in die Junction fährt."""
        return -1 if self.forward else 1

    def leaving_sign(self) -> int:
        return 1 if self.forward else -1

    def __repr__(self):
        arrow = "+" if self.forward else "-"
        return f"DirectedEdge({self.road_id}{arrow})"


@dataclass(frozen=True)
class LaneRef:
    """Eine Spur einer DirectedEdge (edge + vorzeichenbehafteter Index)."""

    edge: DirectedEdge
    lane: int

    @property
    def road_id(self) -> int:
        return self.edge.road_id

    @property
    def is_forward(self) -> bool:
        return self.lane > 0

    def inward(self) -> "LaneRef":
        """Eine Spur Richtung Mittellinie."""
        if self.lane > 0:
            return LaneRef(self.edge, self.lane - 1)
        if self.lane < 0:
            return LaneRef(self.edge, self.lane + 1)
        return self

    def outward(self) -> "LaneRef":
        """Eine Spur weg von der Mittellinie."""
        if self.lane > 0:
            return LaneRef(self.edge, self.lane + 1)
        if self.lane < 0:
            return LaneRef(self.edge, self.lane - 1)
        return self

    def shifted(self, offset: int) -> "LaneRef":
        return LaneRef(self.edge, self.lane + offset)

    def __repr__(self):
        return f"LaneRef({self.edge!r}, {self.lane:+d})"


@dataclass(frozen=True)
class Placement:
    """
    OSM-placement-Anker.

    Beispiel: placement:forward=right_of:2 -> Placement("right_of", 2, forward=True)

    lane ist die Tag-Spurnummer (1-basiert, von links in Fahrtrichtung gezählt).
    """

    kind: str
    lane: int
    forward: bool = True

    @classmethod
    def parse(cls, value, forward: bool = True) -> Optional["Placement"]:
        """
        Parst einen placement-Wert ('right_of:2').

        Returns:
            Placement oder None (bei 'transition' oder ungültigem Wert)
        """
        if value is None:
            return None
        parts = str(value).strip().split(":")
        if len(parts) != 2 or parts[0] not in PLACEMENT_KINDS:
            return None
        try:
            lane = int(parts[1])
        except ValueError:
            return None
        if lane < 1:
            return None
        return cls(parts[0], lane, forward)

    @classmethod
    def centered(cls, lane_count: int, forward: bool = True) -> "Placement":
        """Standard-Anker in der Mitte der Fahrbahn."""
        if lane_count < 1:
            raise ValueError(f"Ungültige Spuranzahl: {lane_count}")
        if lane_count % 2 == 1:
            return cls("middle_of", (lane_count + 1) // 2, forward)
        return cls("right_of", lane_count // 2, forward)

    def to_tag(self) -> str:
        return f"{self.kind}:{self.lane}"


class LaneMetadata(Protocol):
    """Spur-Informationen einer Straße (z.B. aus OSM-Tags)."""

    def get_lane_count(self, direction: int) -> int:
        """direction: +1 vorwärts, -1 rückwärts, 0 beidseitig befahrbar."""
        ...

    def get_placement(self, end: Optional[str]) -> Optional[Placement]:
        ...


class PlacementRenderer(Protocol):
    """Straßen-Layout, das einen Anker in einen Querversatz (Meter) umrechnet."""

    def placement_offset_from_anchor(self, anchor: Placement, end: Optional[str]) -> float:
        ...


def to_directed_lane(tag_lane: int, is_forward: bool, lane_count: int, right_hand: bool = True) -> int:
    """
    Rechnet eine Tag-Spurnummer in einen Mittellinien-relativen Index um.

    Im Rechtsverkehr liegt Tag-Spur 1 innen (an der Mittellinie),
    im Linksverkehr außen.

    Args:
        tag_lane: Spurnummer aus dem Tag (1..lane_count)
        is_forward: True für Vorwärtsspuren
        lane_count: Anzahl Spuren in dieser Richtung
        right_hand: Rechtsverkehr

    Returns:
        Index != 0 (positiv vorwärts, negativ rückwärts)
    """
    if not 1 <= tag_lane <= lane_count:
        raise ValueError(f"Spur {tag_lane} außerhalb 1..{lane_count}")
    index = tag_lane if right_hand else lane_count + 1 - tag_lane
    return index if is_forward else -index


def to_tag_lane(directed_lane: int, lane_count: int, right_hand: bool = True) -> Tuple[int, bool]:
    """Umkehrung von to_directed_lane -> (tag_lane, is_forward)."""
    magnitude = abs(directed_lane)
    if not 1 <= magnitude <= lane_count:
        raise ValueError(f"Spur {directed_lane} außerhalb 1..{lane_count}")
    tag_lane = magnitude if right_hand else lane_count + 1 - magnitude
    return tag_lane, directed_lane > 0
