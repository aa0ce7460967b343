import numpy as np
import pytest

from osm_lanes.geometry.coordinates import latlon_to_utm, utm_to_latlon
from osm_lanes.osm.parser import Road, build_roads, extract_roads_from_osm, is_vehicle_road


def _way(way_id, nodes, points, **tags):
    return {
        "type": "way",
        "id": way_id,
        "nodes": nodes,
        "geometry": [{"lat": lat, "lon": lon} for lat, lon in points],
        "tags": {"highway": "primary", **tags},
    }


def test_latlon_to_utm_round_trip():
    xy = latlon_to_utm([48.0, 48.001], [9.0, 9.0])
    assert xy.shape == (2, 2)
    # 0.001 degrees latitude is about 111 m
    assert xy[1, 1] - xy[0, 1] == pytest.approx(111.2, abs=0.5)
    lat, lon = utm_to_latlon(xy[0, 0], xy[0, 1])
    assert (lat, lon) == pytest.approx((48.0, 9.0))


@pytest.mark.parametrize(
    "tags, expected",
    [
        ({"highway": "primary"}, True),
        ({"highway": "motorway_link"}, True),
        ({"highway": "footway"}, False),
        ({"highway": "pedestrian", "area": "yes"}, False),
        ({"highway": "service", "area": "yes"}, False),
        ({"building": "yes"}, False),
    ],
)
def test_is_vehicle_road(tags, expected):
    assert is_vehicle_road(tags) == expected


def test_extract_roads_keeps_vehicle_ways(capsys):
    elements = [
        _way(1, [1, 2], [(48.0, 9.0), (48.001, 9.0)]),
        _way(2, [2, 3], [(48.001, 9.0), (48.002, 9.0)], highway="cycleway"),
        {"type": "node", "id": 5, "lat": 48.0, "lon": 9.0},
        {"type": "way", "id": 3, "nodes": [1, 2]},
    ]
    roads = extract_roads_from_osm(elements)
    assert [road["id"] for road in roads] == [1]
    assert "1 Strassensegmente aus 4" in capsys.readouterr().out


def test_build_roads_projects_to_metres():
    roads = build_roads([_way(7, [1, 2], [(48.0, 9.0), (48.001, 9.0)], lanes="2", name="Hauptstraße")])

    assert len(roads) == 1
    road = roads[0]
    assert road.osm_id == 7
    assert road.nodes == [1, 2]
    assert road.name == "Hauptstraße"
    assert road.highway == "primary"
    assert np.hypot(*np.subtract(road.coords[1], road.coords[0])) == pytest.approx(111.2, abs=0.5)


def test_build_roads_skips_unusable_ways(capsys):
    ways = [
        _way(1, [1, 2, 3], [(48.0, 9.0), (48.001, 9.0)]),
        _way(2, [1], [(48.0, 9.0)]),
        {"id": 3, "nodes": [1, 2], "tags": {"highway": "primary"}},
        _way(4, [1, 2], [(48.0, 9.0), (48.001, 9.0)]),
    ]
    roads = build_roads(ways)

    assert [road.osm_id for road in roads] == [4]
    assert "3 Ways" in capsys.readouterr().out


def test_road_rejects_mismatched_nodes_and_coords():
    with pytest.raises(ValueError):
        Road(1, [1, 2], [(0.0, 0.0)])
