from osm_lanes.lanes.connectivity import (
    JunctionClass,
    JunctionShape,
    allocate_fork_merge,
    allocate_two_way_split,
    classify_and_resolve,
)
from osm_lanes.lanes.model import DirectedEdge, LaneRef
from osm_lanes.osm.lane_tags import LaneTags


def oneway(lanes):
    return LaneTags({"oneway": "yes", "lanes": str(lanes)})


def two_way(forward, backward):
    return LaneTags({"lanes:forward": str(forward), "lanes:backward": str(backward)})


MAIN = DirectedEdge(1, False)  # way ends at the junction
EXIT = DirectedEdge(2, True)
CONT = DirectedEdge(3, True)


def test_right_hand_fork_gives_exit_the_outside_block():
    # Clockwise [main, exit, continuation]: the main way ends here, so blocks run outside-in.
    lanes = {1: oneway(3), 2: oneway(1), 3: oneway(2)}
    split = classify_and_resolve([MAIN, EXIT, CONT], lanes, right_hand=True)

    assert split.shape is JunctionShape.FORK_MERGE
    assert split.is_fork
    assert split.innermost_lane_to_connected_lane == {3: LaneRef(EXIT, 1), 1: LaneRef(CONT, 1)}
    assert sum(lanes[connected.road_id].get_lane_count(1) for _, connected in split.blocks) == 3
    assert split.anomaly is None


def test_right_hand_fork_first_clockwise_road_takes_outer_lanes():
    lanes = {1: oneway(3), 2: oneway(1), 3: oneway(2)}
    split = classify_and_resolve([MAIN, CONT, EXIT], lanes, right_hand=True)

    assert split.innermost_lane_to_connected_lane == {2: LaneRef(CONT, 1), 1: LaneRef(EXIT, 1)}


def test_left_hand_fork_allocates_inside_out():
    lanes = {1: oneway(3), 2: oneway(1), 3: oneway(2)}
    split = classify_and_resolve([MAIN, EXIT, CONT], lanes, right_hand=False)

    assert split.innermost_lane_to_connected_lane == {1: LaneRef(EXIT, 1), 2: LaneRef(CONT, 1)}

    split = classify_and_resolve([MAIN, CONT, EXIT], lanes, right_hand=False)
    assert split.innermost_lane_to_connected_lane == {1: LaneRef(CONT, 1), 3: LaneRef(EXIT, 1)}


def test_fork_blocks_cover_main_road_exactly():
    lanes = {1: oneway(3), 2: oneway(1), 3: oneway(2)}
    for right_hand in (True, False):
        for order in ([MAIN, CONT, EXIT], [MAIN, EXIT, CONT], [EXIT, MAIN, CONT]):
            split = classify_and_resolve(order, lanes, right_hand=right_hand)
            covered = []
            for main_lane, connected in split.blocks:
                width = lanes[connected.road_id].get_lane_count(1)
                covered.extend(range(main_lane, main_lane + width))
            assert sorted(covered) == [1, 2, 3]


def test_right_hand_merge_allocates_inside_out():
    main = DirectedEdge(1, True)  # way starts at the junction
    first = DirectedEdge(2, False)
    second = DirectedEdge(3, False)
    lanes = {1: oneway(3), 2: oneway(1), 3: oneway(2)}

    split = classify_and_resolve([main, first, second], lanes, right_hand=True)

    assert not split.is_fork
    assert split.innermost_lane_to_connected_lane == {1: LaneRef(first, 1), 2: LaneRef(second, 1)}


def test_left_hand_merge_allocates_outside_in():
    main = DirectedEdge(1, True)
    first = DirectedEdge(2, False)
    second = DirectedEdge(3, False)
    lanes = {1: oneway(3), 2: oneway(1), 3: oneway(2)}

    split = classify_and_resolve([main, first, second], lanes, right_hand=False)

    assert split.innermost_lane_to_connected_lane == {3: LaneRef(first, 1), 1: LaneRef(second, 1)}


def test_fork_on_reversed_oneway_uses_backward_lanes():
    # oneway=-1 way starting at the junction: its backward lanes arrive here.
    main = DirectedEdge(1, True)
    lanes = {1: LaneTags({"oneway": "-1", "lanes": "2"}), 2: oneway(1), 3: oneway(1)}

    split = classify_and_resolve([main, CONT, EXIT], lanes, right_hand=True)

    assert split.is_fork
    assert [main_lane for main_lane, _ in split.blocks] == [-2, -1]
    assert split.innermost_lane_to_connected_lane[-1] == LaneRef(CONT, 1)


def test_two_way_split_right_hand():
    # 3 forward lanes arrive on the main road, 2 backward lanes leave it.
    entry = DirectedEdge(4, False)
    exit_road = DirectedEdge(5, True)
    lanes = {1: two_way(3, 2), 4: oneway(2), 5: oneway(3)}

    split = classify_and_resolve([MAIN, entry, exit_road], lanes, right_hand=True)

    assert split.shape is JunctionShape.TWO_WAY_SPLIT
    assert split.is_fork
    assert split.blocks == ((-1, LaneRef(entry, 1)), (1, LaneRef(exit_road, 1)))
    assert split.anomaly is None


def test_two_way_split_left_hand():
    exit_road = DirectedEdge(5, True)
    entry = DirectedEdge(4, False)
    lanes = {1: two_way(3, 2), 4: oneway(2), 5: oneway(3)}

    split = classify_and_resolve([MAIN, exit_road, entry], lanes, right_hand=False)

    assert split.blocks == ((-1, LaneRef(entry, 1)), (1, LaneRef(exit_road, 1)))


def test_two_way_split_near_half_stays_inside_its_range():
    # Two 1-lane entries fill the 2-lane near half outside-in; the exit starts at the centre.
    outer_entry = DirectedEdge(4, False)
    inner_entry = DirectedEdge(6, False)
    exit_road = DirectedEdge(5, True)
    lanes = {1: two_way(3, 2), 4: oneway(1), 6: oneway(1), 5: oneway(3)}

    split = classify_and_resolve([MAIN, outer_entry, inner_entry, exit_road], lanes, right_hand=True)

    table = split.innermost_lane_to_connected_lane
    assert table[-2] == LaneRef(outer_entry, 1)
    assert table[-1] == LaneRef(inner_entry, 1)
    assert table[1] == LaneRef(exit_road, 1)
    near = [main_lane for main_lane, connected in split.blocks if connected.edge != exit_road]
    assert all(-2 <= lane <= -1 for lane in near)


def test_two_way_split_near_half_is_sized_by_leaving_lanes():
    # 2 forward lanes arrive, 3 backward lanes leave: the near half holds all 3 leaving lanes.
    outer_entry = DirectedEdge(4, False)
    inner_entry = DirectedEdge(6, False)
    exit_road = DirectedEdge(5, True)
    lanes = {1: two_way(2, 3), 4: oneway(2), 6: oneway(1), 5: oneway(2)}

    split = classify_and_resolve([MAIN, outer_entry, inner_entry, exit_road], lanes, right_hand=True)

    assert split.shape is JunctionShape.TWO_WAY_SPLIT
    assert split.blocks == (
        (-2, LaneRef(outer_entry, 1)),
        (-1, LaneRef(inner_entry, 1)),
        (1, LaneRef(exit_road, 1)),
    )
    assert split.get_connections(LaneRef(MAIN, -3)) == [LaneRef(outer_entry, 2)]
    assert split.get_connections(LaneRef(MAIN, 2)) == [LaneRef(exit_road, 2)]
    assert split.anomaly is None


def test_two_way_split_with_roads_out_of_order_is_unsupported():
    entry = DirectedEdge(4, False)
    exit_road = DirectedEdge(5, True)
    lanes = {1: two_way(3, 2), 4: oneway(2), 5: oneway(3)}

    assert classify_and_resolve([MAIN, exit_road, entry], lanes, right_hand=True) is None


def test_fork_accounting_anomaly_is_reported_but_not_fatal(capsys):
    lanes = {1: oneway(4), 2: oneway(1), 3: oneway(2)}
    junction = JunctionClass(JunctionShape.FORK_MERGE, 0, (0,), (1, 2), 4, 4)

    split = allocate_fork_merge([MAIN, CONT, EXIT], lanes, junction, right_hand=True)

    assert split is not None
    assert split.anomaly is not None
    assert split.innermost_lane_to_connected_lane == {3: LaneRef(CONT, 1), 2: LaneRef(EXIT, 1)}
    assert "WARNUNG" in capsys.readouterr().out


def test_two_way_accounting_anomaly_is_reported_but_not_fatal(capsys):
    entry = DirectedEdge(4, False)
    exit_road = DirectedEdge(5, True)
    lanes = {1: two_way(3, 2), 4: oneway(2), 5: oneway(3)}
    junction = JunctionClass(JunctionShape.TWO_WAY_SPLIT, 0, (1,), (2,), 2, 4)

    split = allocate_two_way_split([MAIN, entry, exit_road], lanes, junction, right_hand=True)

    assert split is not None
    assert "erwartet 6" in split.anomaly
    assert "WARNUNG" in capsys.readouterr().out


def test_resolution_is_idempotent():
    lanes = {1: oneway(3), 2: oneway(1), 3: oneway(2)}
    first = classify_and_resolve([MAIN, CONT, EXIT], lanes, right_hand=True)
    second = classify_and_resolve([MAIN, CONT, EXIT], lanes, right_hand=True)
    assert first == second
    assert first.blocks == second.blocks


def test_handedness_defaults_to_config(monkeypatch):
    from osm_lanes import config

    lanes = {1: oneway(3), 2: oneway(1), 3: oneway(2)}
    monkeypatch.setattr(config, "RIGHT_HAND_TRAFFIC", False)
    split = classify_and_resolve([MAIN, EXIT, CONT], lanes)

    assert not split.right_hand
    assert split.innermost_lane_to_connected_lane[1] == LaneRef(EXIT, 1)
