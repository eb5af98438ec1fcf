"""Tests for footpath graph construction."""

from typing import Optional

from patrolplan.footpaths import TileInfo, build_path_graph, plaza_tiles
from patrolplan.footpaths.schemas import ParkMapState, TileState
from patrolplan.footpaths.helpers import bfs_tree, centroid, reconstruct_path, round_half_up
from patrolplan.snapshot import parse_ascii_layout


def test_queue_and_mixed_tiles_are_not_nodes():
    snapshot = parse_ascii_layout(["#M#Q#"])
    build = build_path_graph(snapshot)

    coords = [node.coord for node in build.graph.nodes]
    assert coords == [(0, 0), (2, 0), (4, 0)]
    assert all(node.degree == 0 for node in build.graph.nodes)
    assert build.valid == frozenset({0, 1, 2})


def test_ids_follow_x_major_scan_and_adjacency_is_symmetric():
    snapshot = parse_ascii_layout(["##", "##"])
    graph = build_path_graph(snapshot).graph

    assert graph.node_at(0, 0) == 0
    assert graph.node_at(0, 1) == 1
    assert graph.node_at(1, 0) == 2
    assert graph.node_at(5, 5) is None

    for node in graph.nodes:
        assert node.degree == 2
        for nb in graph.neighbors(node.id):
            assert node.id in graph.neighbors(nb)


def test_ride_markers_flag_attractors():
    snapshot = parse_ascii_layout(
        ["E##b#X"],
        legend={"E": (1, "entrance"), "X": (2, "exit")},
    )
    build = build_path_graph(snapshot)
    graph = build.graph

    assert build.attractors == frozenset({graph.node_at(0, 0), graph.node_at(5, 0)})
    assert [marker.kind for _, marker in build.ride_markers] == ["entrance", "exit"]
    assert build.soft_attractor_tiles == [(3, 0)]

    with_soft = build_path_graph(snapshot, include_soft_attractors=True)
    assert graph.node_at(3, 0) in with_soft.attractors


class FlakySnapshot:
    width = 3
    height = 1

    def tile_at(self, x: int, y: int) -> Optional[TileInfo]:
        if x == 1:
            raise RuntimeError("tile locked")
        return TileInfo(walkable_path=True)


def test_failing_tile_query_is_skipped_and_noted():
    build = build_path_graph(FlakySnapshot())

    assert len(build.graph) == 2
    assert build.notes == ["Tile query failed for 1 tile(s); first failure at (1, 0): tile locked."]


def test_bfs_and_path_reconstruction():
    snapshot = parse_ascii_layout(["#####"])
    graph = build_path_graph(snapshot).graph
    valid = frozenset(range(len(graph)))

    dist, prev = bfs_tree(graph, 0, valid)
    assert dist[4] == 4
    assert reconstruct_path(prev, 0, 4) == [0, 1, 2, 3, 4]
    assert reconstruct_path(prev, 0, 0) == [0]

    # A blocked tile splits the corridor.
    dist, prev = bfs_tree(graph, 0, valid, admissible=lambda node_id: node_id != 2)
    assert 4 not in dist
    assert reconstruct_path(prev, 0, 4) == []


def test_round_half_up_and_centroid():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2

    graph = build_path_graph(parse_ascii_layout(["##"])).graph
    assert centroid(graph, [0, 1]) == (1, 0)
    assert centroid(graph, []) == (0, 0)


def test_plaza_tiles_are_fully_surrounded():
    snapshot = parse_ascii_layout(["###", "###", "###", "#.."])
    build = build_path_graph(snapshot)
    graph = build.graph

    assert plaza_tiles(graph, build.valid) == frozenset({graph.node_at(1, 1)})


def test_marker_beside_the_path_anchors_adjacent_tile():
    tiles = {(x, 0): TileState(path=True) for x in range(6)}
    tiles[(6, 0)] = TileState(ride_id=1, ride_kind="exit")
    build = build_path_graph(ParkMapState(width=7, height=1, tiles=tiles))
    graph = build.graph

    assert graph.node_at(6, 0) is None
    assert build.attractors == frozenset({graph.node_at(5, 0)})
    assert graph.anchor(6, 0) == graph.node_at(5, 0)
    assert graph.anchor(6, 0, allowed=frozenset()) is None
