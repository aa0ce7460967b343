"""
Spur-Informationen aus OSM-Tags.

Ausgewertet werden:
- oneway / junction=roundabout / highway=motorway
- lanes, lanes:forward, lanes:backward, lanes:both_ways
- placement, placement:forward, placement:backward, placement:start, placement:end
"""

from typing import Dict, Optional

from ..lanes.model import Placement

ONEWAY_FORWARD = {"yes", "true", "1"}
ONEWAY_BACKWARD = {"-1", "reverse"}


def _parse_count(value) -> Optional[int]:
    """Parst eine Spuranzahl ('2', ' 3 '). Ungültig/negativ -> None."""
    if value is None:
        return None
    try:
        count = int(str(value).strip())
    except (ValueError, TypeError):
        return None
    if count < 0:
        return None
    return count


def parse_oneway(tags) -> int:
    """
    Bestimmt die Einbahn-Richtung.

    Returns:
        1 = Einbahn vorwärts, -1 = Einbahn rückwärts, 0 = beide Richtungen
    """
    value = str(tags.get("oneway", "")).strip().lower()
    if value in ONEWAY_FORWARD:
        return 1
    if value in ONEWAY_BACKWARD:
        return -1
    if value == "no":
        return 0
    # Implizite Einbahnstraßen
    if tags.get("junction") in ("roundabout", "circular"):
        return 1
    if tags.get("highway") == "motorway":
        return 1
    return 0


class LaneTags:
    """
    Adapter: OSM-Tags -> Spuranzahlen pro Richtung + placement.

    Beispiel:
        >>> lanes = LaneTags({"lanes": "3", "lanes:forward": "2"})
        >>> lanes.get_lane_count(1), lanes.get_lane_count(-1)
        (2, 1)
    """

    def __init__(self, tags: Optional[Dict[str, str]] = None):
        self.tags = dict(tags or {})
        self.oneway = parse_oneway(self.tags)
        self.forward, self.backward, self.both_ways = self._count_lanes()

    def _count_lanes(self):
        tags = self.tags
        total = _parse_count(tags.get("lanes"))
        both = _parse_count(tags.get("lanes:both_ways")) or 0
        fwd = _parse_count(tags.get("lanes:forward"))
        bwd = _parse_count(tags.get("lanes:backward"))

        if self.oneway == 1:
            lanes = fwd if fwd is not None else (total - both if total is not None else 1)
            return max(lanes, 0), 0, both
        if self.oneway == -1:
            lanes = bwd if bwd is not None else (total - both if total is not None else 1)
            return 0, max(lanes, 0), both

        # Zweirichtungsverkehr
        if fwd is not None and bwd is not None:
            return fwd, bwd, both
        if total is None:
            return (fwd if fwd is not None else 1), (bwd if bwd is not None else 1), both

        rest = max(total - both, 0)
        if fwd is not None:
            return fwd, max(rest - fwd, 0), both
        if bwd is not None:
            return max(rest - bwd, 0), bwd, both
        # Ungerader Rest geht auf die Vorwärtsseite
        return rest - rest // 2, rest // 2, both

    def get_lane_count(self, direction: int) -> int:
        """
        Spuranzahl für eine Richtung.

        Args:
            direction: +1 vorwärts, -1 rückwärts, 0 beidseitig befahrbar (lanes:both_ways)
        """
        if direction > 0:
            return self.forward
        if direction < 0:
            return self.backward
        return self.both_ways

    @property
    def total_lanes(self) -> int:
        return self.forward + self.backward + self.both_ways

    def _default_face(self) -> bool:
        # Ohne :forward/:backward zählt placement in Fahrtrichtung der Einbahnstraße
        return self.oneway != -1

    def get_placement(self, end: Optional[str] = None) -> Optional[Placement]:
        """
        placement-Anker am Way-Ende ('start' / 'end').

        placement:<end> hat Vorrang vor placement. 'transition' bedeutet: kein Anker.
        """
        tags = self.tags
        if end is not None:
            key = f"placement:{end}"
            if key in tags:
                return Placement.parse(tags[key], self._default_face())

        value = tags.get("placement")
        if value is not None and value != "transition":
            return Placement.parse(value, self._default_face())
        if "placement:forward" in tags:
            return Placement.parse(tags["placement:forward"], True)
        if "placement:backward" in tags:
            return Placement.parse(tags["placement:backward"], False)
        return None

    def __repr__(self):
        return f"LaneTags(fwd={self.forward}, bwd={self.backward}, both={self.both_ways})"
