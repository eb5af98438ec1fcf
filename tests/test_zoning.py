"""Tests for balanced handyman zoning."""

from patrolplan.footpaths import ParkMapState, TileState, build_path_graph
from patrolplan.settings import PlannerSettings, StaffPolicy
from patrolplan.staffing import StaffOnHand, zone_count
from patrolplan.zoning import assign_leftovers, balanced_flood, partition_zones, pick_seeds


def make_grid(width: int, height: int, extra=()):
    tiles = {(x, y): TileState(path=True) for x in range(width) for y in range(height)}
    for coord in extra:
        tiles[coord] = TileState(path=True)
    size = max([width] + [x + 1 for x, _ in extra])
    return build_path_graph(ParkMapState(width=size, height=max(height, 1), tiles=tiles))


def test_open_grid_splits_into_three_covering_zones():
    build = make_grid(20, 20)
    graph, valid = build.graph, build.valid

    k = zone_count(len(valid), PlannerSettings(), StaffOnHand())
    assert k == 3

    result = partition_zones(graph, valid, zone_count=k, target=180)

    assert len(result.zones) == 3
    assert [zone.name for zone in result.zones] == ["Zone 1", "Zone 2", "Zone 3"]
    assert sum(zone.size for zone in result.zones) == 400
    assert frozenset().union(*(zone.tiles for zone in result.zones)) == valid
    assert result.unassigned == frozenset()
    for i, a in enumerate(result.zones):
        for b in result.zones[i + 1:]:
            assert not a.tiles & b.tiles


def test_seeds_spread_to_far_corners():
    graph = make_grid(20, 20).graph
    seeds = pick_seeds(graph, frozenset(range(len(graph))), 3)

    assert [graph.coord(seed) for seed in seeds] == [(0, 0), (19, 19), (0, 19)]


def test_flood_balances_a_corridor():
    build = make_grid(10, 1)
    seeds = pick_seeds(build.graph, build.valid, 2)
    zones = balanced_flood(build.graph, build.valid, seeds, target=5)

    assert [len(zone) for zone in zones] == [5, 5]
    assert zones[0] == {0, 1, 2, 3, 4}


def test_leftovers_follow_the_moving_centroid():
    build = make_grid(10, 1)
    zones = [{0}, {9}]

    assigned = assign_leftovers(build.graph, build.valid, zones, [0, 9])

    assert assigned == 8
    # Tile 6 is equidistant from both centroids and goes to the first zone.
    assert zones[0] == {0, 1, 2, 3, 4, 5, 6}
    assert zones[1] == {7, 8, 9}


def test_component_without_seed_stays_unassigned():
    build = make_grid(5, 5, extra=[(10, 0), (11, 0), (12, 0)])
    graph, valid = build.graph, build.valid

    result = partition_zones(graph, valid, zone_count=1, target=180)

    assert len(result.zones) == 1
    assert result.zones[0].size == 25
    assert {graph.coord(t) for t in result.unassigned} == {(10, 0), (11, 0), (12, 0)}


def test_rescue_attaches_single_neighbour_tiles():
    build = make_grid(6, 1)
    graph, valid = build.graph, build.valid
    candidates = frozenset(t for t in valid if graph.coord(t)[0] <= 3)

    result = partition_zones(graph, candidates, zone_count=1, target=180, valid=valid)
    zone = result.zones[0]

    assert zone.rescued == frozenset({graph.node_at(4, 0)})
    assert zone.size == 5
    assert result.rescued == 1
    # Rescued tiles come from outside the candidate pool.
    assert not zone.rescued & candidates

    without = partition_zones(graph, candidates, zone_count=1, target=180, valid=valid, rescue=False)
    assert without.zones[0].size == 4
    assert without.zones[0].rescued == frozenset()


def test_zone_count_respects_staff_policy():
    settings = PlannerSettings(staff_insufficient=StaffPolicy.ASSIGN_ONLY_EXISTING)

    assert zone_count(400, settings, StaffOnHand(handymen=2)) == 2
    assert zone_count(400, settings, StaffOnHand(handymen=0)) == 1
    assert zone_count(400, settings, StaffOnHand()) == 3
    assert zone_count(0, settings, StaffOnHand()) == 0
    assert zone_count(400, PlannerSettings(), StaffOnHand(handymen=1)) == 3
