"""Tests for dead-end pruning."""

import pytest

from patrolplan.footpaths import build_path_graph, prune_dead_ends
from patrolplan.footpaths.helpers import degree_within
from patrolplan.snapshot import parse_ascii_layout


def make_corridor():
    snapshot = parse_ascii_layout(["#########X"], legend={"X": (1, "exit")})
    return build_path_graph(snapshot)


def coords(graph, node_ids):
    return {graph.coord(node_id) for node_id in node_ids}


def test_corridor_peels_back_to_the_exit():
    build = make_corridor()
    result = prune_dead_ends(build.graph, build.valid, build.attractors)

    assert coords(build.graph, result.valid) == {(8, 0), (9, 0)}
    assert result.removed == 8
    assert result.warnings == []


def test_wider_buffer_keeps_a_longer_stub():
    build = make_corridor()
    result = prune_dead_ends(build.graph, build.valid, build.attractors, buffer=2)

    assert coords(build.graph, result.valid) == {(7, 0), (8, 0), (9, 0)}
    assert result.removed == 7


def test_loops_survive_and_spurs_are_removed():
    snapshot = parse_ascii_layout([
        "###..",
        "#.###",
        "###..",
    ])
    build = build_path_graph(snapshot)
    result = prune_dead_ends(build.graph, build.valid, build.attractors)

    assert coords(build.graph, result.valid) == {
        (0, 0), (1, 0), (2, 0),
        (0, 1), (2, 1),
        (0, 2), (1, 2), (2, 2),
    }


@pytest.mark.parametrize("buffer", [1, 2, 3])
def test_every_remaining_leaf_is_protected(buffer):
    snapshot = parse_ascii_layout(
        [
            "E#####....",
            "#....#####",
            "#....#..#.",
            "######..X.",
        ],
        legend={"E": (1, "entrance"), "X": (2, "exit")},
    )
    build = build_path_graph(snapshot)
    result = prune_dead_ends(build.graph, build.valid, build.attractors, buffer=buffer)

    for node_id in result.valid:
        if degree_within(build.graph, node_id, result.valid) <= 1:
            assert node_id in result.protected

    again = prune_dead_ends(build.graph, result.valid, build.attractors, buffer=buffer)
    assert again.valid == result.valid
    assert again.removed == 0


def test_network_without_attractors_prunes_to_nothing():
    build = build_path_graph(parse_ascii_layout(["#####"]))
    result = prune_dead_ends(build.graph, build.valid, build.attractors)

    assert result.valid == frozenset()
    assert result.warnings == [
        "All 5 path tiles were pruned: no ride entrance or exit anchors the network."
    ]
