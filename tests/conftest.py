"""Shared fixtures: small metric road networks around a junction at (0, 0)."""

import pytest

from osm_lanes import config
from osm_lanes.osm.parser import Road

JUNCTION = 1


def oneway_road(osm_id, nodes, coords, lanes, **tags):
    all_tags = {"highway": "primary", "oneway": "yes", "lanes": str(lanes)}
    all_tags.update(tags)
    return Road(osm_id=osm_id, nodes=nodes, coords=coords, tags=all_tags)


def two_way_road(osm_id, nodes, coords, forward, backward, **tags):
    all_tags = {
        "highway": "primary",
        "lanes": str(forward + backward),
        "lanes:forward": str(forward),
        "lanes:backward": str(backward),
    }
    all_tags.update(tags)
    return Road(osm_id=osm_id, nodes=nodes, coords=coords, tags=all_tags)


@pytest.fixture(autouse=True)
def _default_config(monkeypatch):
    monkeypatch.setattr(config, "RIGHT_HAND_TRAFFIC", True)
    monkeypatch.setattr(config, "VERBOSE", False)
    monkeypatch.setattr(config, "LANE_WIDTH", 3.25)


@pytest.fixture
def fork_roads():
    """
    Right-hand fork: a 3-lane one-way arrives from the north and ends at the
    junction, a 1-lane exit heads SSE and a 2-lane continuation heads south.
    Clockwise from the main road: [main, exit, continuation].
    """
    main = oneway_road(100, [10, JUNCTION], [(0.0, 100.0), (0.0, 0.0)], 3)
    continuation = oneway_road(200, [JUNCTION, 20], [(0.0, 0.0), (0.0, -100.0)], 2)
    exit_road = oneway_road(300, [JUNCTION, 30], [(0.0, 0.0), (50.0, -87.0)], 1)
    return [main, continuation, exit_road]


@pytest.fixture
def left_hand_fork_roads():
    """Mirror image for left-hand traffic: exit heads SSW, order [main, continuation, exit]."""
    main = oneway_road(100, [10, JUNCTION], [(0.0, 100.0), (0.0, 0.0)], 3)
    continuation = oneway_road(200, [JUNCTION, 20], [(0.0, 0.0), (0.0, -100.0)], 2)
    exit_road = oneway_road(300, [JUNCTION, 30], [(0.0, 0.0), (-50.0, -87.0)], 1)
    return [main, continuation, exit_road]


@pytest.fixture
def split_roads():
    """
    Right-hand two-way split: a 3 forward / 2 backward road ends at the junction
    (forward lanes arrive). A 2-lane one-way enters from the east, a 3-lane
    one-way leaves to the west.
    """
    main = two_way_road(100, [10, JUNCTION], [(0.0, 100.0), (0.0, 0.0)], 3, 2)
    entry = oneway_road(400, [40, JUNCTION], [(100.0, -20.0), (0.0, 0.0)], 2)
    exit_road = oneway_road(500, [JUNCTION, 50], [(0.0, 0.0), (-100.0, -20.0)], 3)
    return [main, entry, exit_road]
