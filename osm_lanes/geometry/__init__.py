"""Geometrie-Module."""

from .junctions import JunctionIndex
from .road_layout import RoadLayout

__all__ = ["JunctionIndex", "RoadLayout"]
