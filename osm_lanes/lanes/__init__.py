"""Spur-Modell und Konnektivität."""

from .model import DirectedEdge, LaneRef, Placement, to_directed_lane, to_tag_lane
from .connectivity import JunctionShape, JunctionClass, LaneSplit, classify_junction, classify_and_resolve

__all__ = [
    "DirectedEdge",
    "LaneRef",
    "Placement",
    "to_directed_lane",
    "to_tag_lane",
    "JunctionShape",
    "JunctionClass",
    "LaneSplit",
    "classify_junction",
    "classify_and_resolve",
]
