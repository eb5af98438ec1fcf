"""Tests for food court detection."""

from patrolplan.food_courts import collect_stall_points, detect_food_courts, find_seeds
from patrolplan.footpaths import ParkMapState, TileState, build_path_graph


def make_stall_park() -> ParkMapState:
    """A 10x5 plaza with three stalls on its top edge and one lonely stall far away."""

    tiles = {(x, y): TileState(path=True) for x in range(10) for y in range(5)}
    for ride_id, x in ((1, 0), (2, 1), (3, 2)):
        tiles[(x, 0)] = TileState(path=True, ride_id=ride_id, ride_kind="entrance")
    tiles[(20, 20)] = TileState(path=True, ride_id=4, ride_kind="entrance")
    tiles[(20, 19)] = TileState(path=True)
    return ParkMapState(width=21, height=21, tiles=tiles)


def test_seeds_need_enough_neighbouring_stalls():
    points = [(0, 0), (1, 0), (2, 0), (20, 20)]
    assert find_seeds(points, radius=8, threshold=3) == [(0, 0), (1, 0), (2, 0)]
    assert find_seeds(points, radius=8, threshold=4) == []


def test_plaza_becomes_one_food_court():
    build = build_path_graph(make_stall_park())
    notes = []
    points = collect_stall_points(build, lambda ride_id: True, notes)
    assert points == [(0, 0), (1, 0), (2, 0), (20, 20)]

    detection = detect_food_courts(build.graph, build.valid, points, radius=8, threshold=3)

    assert len(detection.courts) == 1
    court = detection.courts[0]
    assert court.name == "Food Court 1"
    assert court.center == (0, 0)
    # Every plaza tile within 8 tiles of the seed stall.
    assert court.size == 40
    assert court.staff_needed == 1
    for node_id in court.tiles:
        x, y = build.graph.coord(node_id)
        assert x * x + y * y <= 64
    assert notes == []


def test_small_growth_is_rejected():
    build = build_path_graph(make_stall_park())
    points = [(20, 20), (20, 19), (20, 20)]

    detection = detect_food_courts(build.graph, build.valid, points, radius=8, threshold=3)

    assert detection.courts == []
    assert detection.rejected == 1


def test_staff_needed_scales_with_size():
    build = build_path_graph(make_stall_park())
    points = [(0, 0), (1, 0), (2, 0)]

    detection = detect_food_courts(
        build.graph, build.valid, points, radius=8, threshold=3, tiles_per_cleaner=30,
    )

    assert detection.courts[0].staff_needed == 2


def test_courts_are_disjoint():
    tiles = {(x, y): TileState(path=True) for x in range(30) for y in range(3)}
    park = ParkMapState(width=30, height=3, tiles=tiles)
    build = build_path_graph(park)
    points = [(0, 0), (1, 0), (2, 0), (27, 0), (28, 0), (29, 0)]

    detection = detect_food_courts(
        build.graph, build.valid, points, radius=8, threshold=3, min_tiles=5,
    )

    assert len(detection.courts) == 2
    first, second = detection.courts
    assert not first.tiles & second.tiles
    assert detection.reserved == first.tiles | second.tiles


def test_classifier_failures_become_notes():
    build = build_path_graph(make_stall_park())
    calls = []

    def classifier(ride_id):
        calls.append(ride_id)
        if ride_id == 2:
            raise RuntimeError("ride list unavailable")
        if ride_id == 4:
            return None
        return True

    notes = []
    points = collect_stall_points(build, classifier, notes)

    assert points == [(0, 0), (2, 0)]
    assert sorted(calls) == [1, 2, 3, 4]
    assert notes == [
        "Ride 2 could not be classified: ride list unavailable",
        "Ride 4 could not be classified.",
    ]


def test_missing_classifier_falls_back_to_seating():
    park = make_stall_park()
    park.tiles[(5, 4)] = TileState(path=True, scenery=["bench"])
    build = build_path_graph(park)

    notes = []
    points = collect_stall_points(build, None, notes, include_seating_bins=True)

    assert points == [(5, 4)]
    assert len(notes) == 1
