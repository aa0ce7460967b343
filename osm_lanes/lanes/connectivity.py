"""
Spur-Konnektivität an einfachen Junctions.

Erkannt werden zwei Formen:
- Fork/Merge: eine Einbahnstraße teilt sich in mehrere (oder mehrere vereinen sich)
- Zweirichtungs-Split: eine Zweirichtungsstraße geht in Einbahnstraßen über

Alles andere (Kreuzungen, beidseitig befahrbare Spuren, ungleiche Spursummen)
liefert None und wird als normale Kreuzung behandelt.

Gespeichert wird pro angeschlossener Straße nur ihre innerste Spur und der
innerste Spur-Index des zugeordneten Blocks auf der Hauptstraße. Alle weiteren
Spuren des Blocks laufen parallel versetzt mit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .. import config
from .model import (
    DirectedEdge,
    LaneMetadata,
    LaneRef,
    Placement,
    PlacementRenderer,
    to_directed_lane,
    to_tag_lane,
)


class JunctionShape(Enum):
    FORK_MERGE = "fork_merge"
    TWO_WAY_SPLIT = "two_way_split"


@dataclass(frozen=True)
class JunctionClass:
    """Ergebnis der Klassifizierung (Indizes beziehen sich auf die Kantenliste)."""

    shape: JunctionShape
    main: int
    in_ways: Tuple[int, ...]
    out_ways: Tuple[int, ...]
    total_in: int
    total_out: int


def report_anomaly(message: str):
    """Meldet eine Spur-Zuordnung, die nicht aufgeht (nicht fatal)."""
    print(f"  [!] WARNUNG: {message}")


def _clockwise_after(count: int, start: int) -> List[int]:
    """Indizes im Uhrzeigersinn, beginnend direkt nach start."""
    return [(start + i) % count for i in range(1, count)]


# ---------------------------------------------------------------------------
# Klassifizierung
# ---------------------------------------------------------------------------


def classify_junction(edges: Sequence[DirectedEdge], lanes: Mapping[int, LaneMetadata]) -> Optional[JunctionClass]:
    """
    Bestimmt die Form einer Junction.

    Args:
        edges: DirectedEdges im Uhrzeigersinn
        lanes: road_id -> LaneMetadata

    Returns:
        JunctionClass oder None (nicht unterstützt)
    """
    try:
        return _classify(edges, lanes)
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        if config.VERBOSE:
            print(f"  [x] Junction nicht klassifizierbar: {e}")
        return None


def _classify(edges, lanes):
    in_ways = []
    out_ways = []
    in_out_ways = []
    total_in = 0
    total_out = 0

    for i, edge in enumerate(edges):
        road_lanes = lanes[edge.road_id]
        if road_lanes.get_lane_count(0) != 0:
            return None  # lanes:both_ways wird nicht unterstützt
        n_in = edge.lanes_entering(road_lanes)
        n_out = edge.lanes_leaving(road_lanes)
        if n_in > 0 and n_out > 0:
            in_out_ways.append(i)
        elif n_in > 0:
            in_ways.append(i)
            total_in += n_in
        elif n_out > 0:
            out_ways.append(i)
            total_out += n_out

    if total_in == 0 or total_out == 0:
        return None

    # Fork/Merge: nur Einbahnstraßen, eine Seite hat genau eine Straße
    if total_in == total_out and not in_out_ways and (len(in_ways) == 1 or len(out_ways) == 1):
        main = in_ways[0] if len(in_ways) == 1 else out_ways[0]
        return JunctionClass(
            JunctionShape.FORK_MERGE, main, tuple(in_ways), tuple(out_ways), total_in, total_out
        )

    # Zweirichtungs-Split: genau eine Zweirichtungsstraße
    if len(in_out_ways) == 1:
        main = in_out_ways[0]
        main_edge = edges[main]
        main_lanes = lanes[main_edge.road_id]
        if main_edge.lanes_leaving(main_lanes) != total_in or main_edge.lanes_entering(main_lanes) != total_out:
            return None  # Asymmetrische Splits werden nicht modelliert
        return JunctionClass(
            JunctionShape.TWO_WAY_SPLIT, main, tuple(in_ways), tuple(out_ways), total_in, total_out
        )

    return None


# ---------------------------------------------------------------------------
# Spur-Zuordnung
# ---------------------------------------------------------------------------


def allocate_fork_merge(edges, lanes, junction: JunctionClass, right_hand: bool = True, renderers=None):
    """
    Ordnet die abzweigenden Straßen Blöcken der Hauptstraße zu (im Uhrzeigersinn).

    Endet die Hauptstraße an der Junction (rückwärts befahren), bekommt im
    Rechtsverkehr die erste Straße nach der Hauptstraße die äußersten Spuren,
    beginnt sie dort, die innersten. Im Linksverkehr umgekehrt.
    """
    main_edge = edges[junction.main]
    is_fork = junction.main in junction.in_ways
    main_sign = main_edge.entering_sign() if is_fork else main_edge.leaving_sign()
    diverging = junction.out_ways if is_fork else junction.in_ways
    total = junction.total_in

    outside_in = (not right_hand) != (not main_edge.forward)

    blocks = []
    allocated = 0
    for j in _clockwise_after(len(edges), junction.main):
        if j not in diverging:
            continue
        edge = edges[j]
        road_lanes = lanes[edge.road_id]
        if is_fork:
            count = edge.lanes_leaving(road_lanes)
            sign = edge.leaving_sign()
        else:
            count = edge.lanes_entering(road_lanes)
            sign = edge.entering_sign()

        start = total - count - allocated + 1 if outside_in else allocated + 1
        allocated += count
        if start < 1:
            report_anomaly(f"Spurblock für Straße {edge.road_id} liegt außerhalb der Hauptstraße")
            continue
        blocks.append((main_sign * start, LaneRef(edge, sign)))

    anomaly = None
    if allocated != total:
        anomaly = f"Fork/Merge: {allocated} Spuren zugeordnet, Hauptstraße hat {total}"
        report_anomaly(anomaly)

    return LaneSplit(
        main=main_edge,
        blocks=tuple(blocks),
        shape=JunctionShape.FORK_MERGE,
        is_fork=is_fork,
        right_hand=right_hand,
        anomaly=anomaly,
        lanes=lanes,
        renderers=renderers,
    )


def allocate_two_way_split(edges, lanes, junction: JunctionClass, right_hand: bool = True, renderers=None):
    """
    Ordnet Einbahnstraßen den beiden Hälften einer Zweirichtungsstraße zu.

    Die erste Hälfte im Uhrzeigersinn ("linke" Spuren, vom Verkehr zur Junction
    aus gesehen) wird von außen nach innen gefüllt, die zweite von innen nach außen.

    Returns:
        LaneSplit oder None, wenn die Straßen nicht in der erwarteten Reihenfolge liegen
    """
    main_edge = edges[junction.main]
    away_sign = main_edge.leaving_sign()

    if right_hand:
        # Links liegt der Gegenverkehr: Spuren weg von der Junction, gespeist von Zufahrten
        near_sign = away_sign
        left_hand_lanes = junction.total_in
        near_ways, far_ways = junction.in_ways, junction.out_ways
    else:
        near_sign = -away_sign
        left_hand_lanes = junction.total_out
        near_ways, far_ways = junction.out_ways, junction.in_ways

    blocks = []
    allocated = 0
    for j in _clockwise_after(len(edges), junction.main):
        edge = edges[j]
        road_lanes = lanes[edge.road_id]
        n_in = edge.lanes_entering(road_lanes)
        n_out = edge.lanes_leaving(road_lanes)
        if n_in == 0 and n_out == 0:
            continue

        near = allocated < left_hand_lanes
        if j not in (near_ways if near else far_ways):
            return None  # Gegenrichtung an falscher Stelle (Split mitten auf der Straße)

        if j in junction.in_ways:
            count, sign = n_in, edge.entering_sign()
        else:
            count, sign = n_out, edge.leaving_sign()

        if near:
            start = left_hand_lanes - count - allocated + 1
            if start < 1:
                return None  # Block würde über die Mittellinie reichen
            key = near_sign * start
        else:
            key = -near_sign * (allocated - left_hand_lanes + 1)
        blocks.append((key, LaneRef(edge, sign)))
        allocated += count

    anomaly = None
    expected = junction.total_in + junction.total_out
    if allocated != expected:
        anomaly = f"Zweirichtungs-Split: {allocated} Spuren zugeordnet, erwartet {expected}"
        report_anomaly(anomaly)

    return LaneSplit(
        main=main_edge,
        blocks=tuple(blocks),
        shape=JunctionShape.TWO_WAY_SPLIT,
        is_fork=not main_edge.forward,
        right_hand=right_hand,
        anomaly=anomaly,
        lanes=lanes,
        renderers=renderers,
    )


def classify_and_resolve(
    edges: Sequence[DirectedEdge],
    lanes: Mapping[int, LaneMetadata],
    right_hand: Optional[bool] = None,
    renderers: Optional[Mapping[int, PlacementRenderer]] = None,
) -> Optional["LaneSplit"]:
    """
    Einstiegspunkt: klassifiziert eine Junction und berechnet die Spur-Zuordnung.

    Args:
        edges: DirectedEdges im Uhrzeigersinn
        lanes: road_id -> LaneMetadata
        right_hand: Rechtsverkehr (None = config.RIGHT_HAND_TRAFFIC)
        renderers: road_id -> PlacementRenderer (nur für get_placement_offset)

    Returns:
        LaneSplit oder None (normale Kreuzung)
    """
    if right_hand is None:
        right_hand = config.RIGHT_HAND_TRAFFIC
    try:
        junction = classify_junction(edges, lanes)
        if junction is None:
            return None
        if junction.shape is JunctionShape.FORK_MERGE:
            return allocate_fork_merge(edges, lanes, junction, right_hand, renderers)
        return allocate_two_way_split(edges, lanes, junction, right_hand, renderers)
    except Exception as e:
        if config.VERBOSE:
            print(f"  [x] Spur-Zuordnung fehlgeschlagen: {e}")
        return None


# ---------------------------------------------------------------------------
# Ergebnis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LaneSplit:
    """
    Aufgelöste Junction.

    blocks: (innerster Spur-Index auf der Hauptstraße, innerste Spur der
    angeschlossenen Straße), sortiert nach Spur-Index der Hauptstraße.
    """

    main: DirectedEdge
    blocks: Tuple[Tuple[int, LaneRef], ...]
    shape: JunctionShape
    is_fork: bool
    right_hand: bool = True
    anomaly: Optional[str] = None
    lanes: Optional[Mapping[int, LaneMetadata]] = field(default=None, compare=False, repr=False)
    renderers: Optional[Mapping[int, PlacementRenderer]] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "blocks", tuple(sorted(self.blocks, key=lambda block: block[0])))

    @property
    def innermost_lane_to_connected_lane(self) -> Dict[int, LaneRef]:
        return dict(self.blocks)

    @property
    def connected_edges(self) -> List[DirectedEdge]:
        return [lane_ref.edge for _, lane_ref in self.blocks]

    def _boundary(self, main_lane: int) -> Optional[int]:
        """Läuft von main_lane Richtung Mittellinie bis zur nächsten Blockgrenze."""
        table = self.innermost_lane_to_connected_lane
        current = main_lane
        while current != 0:
            if current in table:
                return current
            current = current - 1 if current > 0 else current + 1
        return None

    def get_connections(self, lane_ref: LaneRef) -> List[LaneRef]:
        """
        Spuren, mit denen lane_ref an dieser Junction verbunden ist (0 oder 1 Einträge).
        """
        if lane_ref.lane == 0:
            return []

        if lane_ref.edge == self.main:
            boundary = self._boundary(lane_ref.lane)
            if boundary is None:
                return []
            connected = self.innermost_lane_to_connected_lane[boundary]
            steps = abs(lane_ref.lane) - abs(boundary)
            return [connected.shifted(steps if connected.lane > 0 else -steps)]

        for main_lane, connected in self.blocks:
            if connected.edge != lane_ref.edge:
                continue
            if (lane_ref.lane > 0) != (connected.lane > 0):
                return []
            steps = abs(lane_ref.lane) - abs(connected.lane)
            if steps < 0:
                return []
            candidate = main_lane + (steps if main_lane > 0 else -steps)
            # Spur muss im eigenen Block bleiben
            if self._boundary(candidate) != main_lane:
                return []
            return [LaneRef(self.main, candidate)]
        return []

    def _find_connected(self, connected_road: Union[int, DirectedEdge]) -> Optional[DirectedEdge]:
        for edge in self.connected_edges:
            if isinstance(connected_road, DirectedEdge):
                if edge == connected_road:
                    return edge
            elif edge.road_id == connected_road:
                return edge
        return None

    def get_placement_offset(self, connected_road: Union[int, DirectedEdge]) -> float:
        """
        Querversatz (Meter) der Junction auf der Hauptstraße, damit der
        placement-Anker der angeschlossenen Straße bündig sitzt.

        Bei fehlenden Daten 0.0.
        """
        try:
            edge = self._find_connected(connected_road)
            if edge is None or self.lanes is None or self.renderers is None:
                return 0.0
            road_lanes = self.lanes[edge.road_id]

            anchor = road_lanes.get_placement(edge.end)
            if anchor is None:
                forward = road_lanes.get_lane_count(1) > 0
                anchor = Placement.centered(road_lanes.get_lane_count(1 if forward else -1), forward)

            count = road_lanes.get_lane_count(1 if anchor.forward else -1)
            directed = to_directed_lane(anchor.lane, anchor.forward, count, self.right_hand)
            connections = self.get_connections(LaneRef(edge, directed))
            if not connections:
                return 0.0

            main_lane = connections[0].lane
            main_lanes = self.lanes[self.main.road_id]
            main_count = main_lanes.get_lane_count(1 if main_lane > 0 else -1)
            tag_lane, face_forward = to_tag_lane(main_lane, main_count, self.right_hand)
            main_anchor = Placement(anchor.kind, tag_lane, face_forward)

            renderer = self.renderers[self.main.road_id]
            return float(renderer.placement_offset_from_anchor(main_anchor, self.main.end))
        except Exception as e:
            if config.VERBOSE:
                print(f"  [x] Placement-Offset für {connected_road} nicht berechenbar: {e}")
            return 0.0

    def describe(self) -> str:
        """Kurzbeschreibung für Debug-Ausgaben."""
        kind = "Fork" if self.is_fork else "Merge"
        if self.shape is JunctionShape.TWO_WAY_SPLIT:
            kind = "Split" if self.is_fork else "Join"
        parts = [f"{main_lane:+d} -> {lane_ref!r}" for main_lane, lane_ref in self.blocks]
        return f"{kind} an {self.main!r}: " + ", ".join(parts)
