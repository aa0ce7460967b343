"""OSM-Module."""

from .lane_tags import LaneTags
from .parser import Road, build_roads, extract_roads_from_osm

__all__ = ["LaneTags", "Road", "build_roads", "extract_roads_from_osm"]
