"""Spur-Konnektivität an OSM-Junctions (Forks, Merges, Zweirichtungs-Splits)."""

from .lanes.connectivity import JunctionShape, LaneSplit, classify_and_resolve
from .lanes.model import DirectedEdge, LaneRef, Placement, to_directed_lane, to_tag_lane
from .network import LaneNetwork

__all__ = [
    "DirectedEdge",
    "LaneRef",
    "Placement",
    "to_directed_lane",
    "to_tag_lane",
    "JunctionShape",
    "LaneSplit",
    "classify_and_resolve",
    "LaneNetwork",
]
