"""Mechanic clustering and route trees.

Ride exits are grouped so one mechanic can cover a handful of rides without walking
across the park between breakdowns. Clusters are grown greedily under three caps:

- ``max_exits``: members per cluster
- ``diameter_cap``: largest hop distance between any two members
- ``mst_cap``: total length of the minimum spanning tree over the members

Each finished cluster's spanning tree is then expanded into the literal footpath
tiles between its exits, which become the mechanic's patrol area.
"""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Dict, List, Optional, Sequence, Tuple

from .footpaths.graph import GraphBuild, PathGraph
from .footpaths.helpers import TilePredicate, bfs_tree, reconstruct_path
from .schemas import ExitPoint, MechanicCluster, RouteEdge

INF = math.inf

Distances = Sequence[Sequence[float]]


@dataclass
class DistanceMatrix:
    """All-pairs hop distances between exits plus the BFS trees behind them."""

    exits: List[ExitPoint]
    distances: List[List[float]] = field(default_factory=list)
    predecessors: List[Dict[int, int]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.exits)

    def path(self, i: int, j: int) -> List[int]:
        """Node ids from exit ``i`` to exit ``j``, both included; empty if unreachable."""
        return reconstruct_path(self.predecessors[i], self.exits[i].node_id, self.exits[j].node_id)


@dataclass
class MechanicRouting:
    matrix: DistanceMatrix
    clusters: List[MechanicCluster] = field(default_factory=list)
    unreachable_exits: List[int] = field(default_factory=list)


def find_exit_points(
    build: GraphBuild,
    valid: AbstractSet[int],
    ride_name: Callable[[int], str],
    notes: Optional[List[str]] = None,
) -> List[ExitPoint]:
    """Ride exits reachable from valid footpath, in scan order.

    An exit beside the path resolves to the neighbouring path tile. A failing
    ``ride_name`` lookup falls back to "Ride <id>" and is recorded in ``notes``.
    """

    graph = build.graph
    names: Dict[int, str] = {}
    exits: List[ExitPoint] = []
    for (x, y), marker in build.ride_markers:
        if marker.kind != "exit":
            continue
        node_id = graph.anchor(x, y, valid)
        if node_id is None:
            continue
        # One lookup per ride, even when the ride has several exits.
        if marker.ride_id not in names:
            fallback = f"Ride {marker.ride_id}"
            try:
                names[marker.ride_id] = str(ride_name(marker.ride_id)) or fallback
            except Exception as exc:
                names[marker.ride_id] = fallback
                if notes is not None:
                    notes.append(f"Ride {marker.ride_id} name lookup failed ({exc!r}); using '{fallback}'.")
        nx, ny = graph.coord(node_id)
        exits.append(
            ExitPoint(node_id=node_id, x=nx, y=ny, ride_id=marker.ride_id, ride_name=names[marker.ride_id])
        )
    return exits


def _guarded(admissible: TilePredicate, always: AbstractSet[int], notes: List[str]) -> TilePredicate:
    failed: List[bool] = []

    def check(node_id: int) -> bool:
        if node_id in always:
            return True
        try:
            return bool(admissible(node_id))
        except Exception as exc:
            if not failed:
                failed.append(True)
                notes.append(f"Route tile filter failed ({exc}); failing tiles are treated as walkable.")
            return True

    return check


def build_distance_matrix(
    graph: PathGraph,
    valid: AbstractSet[int],
    exits: List[ExitPoint],
    *,
    admissible: Optional[TilePredicate] = None,
    notes: Optional[List[str]] = None,
) -> DistanceMatrix:
    """One BFS per exit over ``valid``; unreachable pairs are ``inf``.

    Tiles rejected by ``admissible`` are never walked through, except exit tiles
    themselves, which always stay reachable.
    """

    predicate = None
    if admissible is not None:
        predicate = _guarded(admissible, {e.node_id for e in exits}, notes if notes is not None else [])

    matrix = DistanceMatrix(exits=list(exits))
    # One BFS per exit; each predecessor map is kept for route reconstruction.
    for source in exits:
        dist, prev = bfs_tree(graph, source.node_id, valid, admissible=predicate)
        matrix.distances.append([float(dist.get(target.node_id, INF)) for target in exits])
        matrix.predecessors.append(prev)
    return matrix


def minimum_spanning_tree(members: Sequence[int], dist: Distances) -> List[Tuple[int, int]]:
    """Prim's algorithm from ``members[0]``; returns tree edges in the order added.

    Ties resolve to the earliest tree vertex, then the earliest candidate. Stops early
    if the rest of the members are unreachable.
    """

    if not members:
        return []
    # Tree grows from the first member, one cheapest crossing edge at a time.
    used = [members[0]]
    used_set = {members[0]}
    edges: List[Tuple[int, int]] = []
    while len(used) < len(members):
        best: Optional[Tuple[int, int]] = None
        best_weight = INF
        for u in used:
            for v in members:
                if v in used_set:
                    continue
                if dist[u][v] < best_weight:
                    best_weight = dist[u][v]
                    best = (u, v)
        # Remaining members are unreachable from the tree.
        if best is None:
            break
        used.append(best[1])
        used_set.add(best[1])
        edges.append(best)
    return edges


def mst_length(members: Sequence[int], dist: Distances) -> float:
    return sum(dist[u][v] for u, v in minimum_spanning_tree(members, dist))


def diameter(members: Sequence[int], dist: Distances) -> float:
    longest = 0.0
    for i, a in enumerate(members):
        for b in members[i + 1:]:
            longest = max(longest, dist[a][b])
    return longest


def cluster_exits(
    dist: Distances,
    *,
    max_exits: int,
    diameter_cap: float,
    mst_cap: float,
) -> List[List[int]]:
    """Greedy capped clustering of exit indices.

    The lowest unassigned index seeds each cluster. The cluster then repeatedly absorbs
    the unassigned exit closest to any member, among those keeping the diameter within
    ``diameter_cap``. An addition that pushes the spanning tree past ``mst_cap`` is
    undone and closes the cluster.
    """

    unassigned = list(range(len(dist)))
    clusters: List[List[int]] = []

    while unassigned:
        # Lowest unassigned index seeds the next cluster.
        current = [unassigned.pop(0)]
        current_diameter = 0.0

        while len(current) < max_exits:
            best: Optional[int] = None
            best_distance = INF
            best_diameter = current_diameter
            for index in unassigned:
                # Diameter only grows through pairs involving the newcomer.
                grown = max(current_diameter, max(dist[index][member] for member in current))
                if grown > diameter_cap:
                    continue
                nearest = min(dist[index][member] for member in current)
                if nearest < best_distance:
                    best_distance = nearest
                    best = index
                    best_diameter = grown
            if best is None:
                break

            # Tentative addition; undone if the spanning tree gets too long.
            current.append(best)
            unassigned.remove(best)
            if mst_length(current, dist) > mst_cap:
                current.pop()
                # Back in index order so it can seed a later cluster.
                bisect.insort(unassigned, best)
                break
            current_diameter = best_diameter

        clusters.append(current)
    return clusters


def build_route_clusters(matrix: DistanceMatrix, groups: List[List[int]]) -> List[MechanicCluster]:
    """Expand each group's spanning tree into footpath tiles."""

    clusters: List[MechanicCluster] = []
    for group in groups:
        if not group:
            continue
        routes: List[RouteEdge] = []
        tiles = set()
        # Singletons have no tree edges and an empty tile set.
        for u, v in minimum_spanning_tree(group, matrix.distances):
            path = matrix.path(u, v)
            tiles.update(path)
            routes.append(RouteEdge(source=u, target=v, distance=int(matrix.distances[u][v]), path=tuple(path)))
        clusters.append(
            MechanicCluster(
                name=f"Cluster {len(clusters) + 1}",
                exits=tuple(group),
                tiles=frozenset(tiles),
                routes=tuple(routes),
            )
        )
    return clusters


def plan_mechanic_routes(
    graph: PathGraph,
    valid: AbstractSet[int],
    exits: List[ExitPoint],
    *,
    max_exits: int,
    mst_cap: float,
    diameter_cap: float,
    admissible: Optional[TilePredicate] = None,
    notes: Optional[List[str]] = None,
) -> MechanicRouting:
    matrix = build_distance_matrix(graph, valid, exits, admissible=admissible, notes=notes)
    groups = cluster_exits(
        matrix.distances,
        max_exits=max_exits,
        diameter_cap=diameter_cap,
        mst_cap=mst_cap,
    )
    unreachable = [
        i for i in range(len(exits))
        if len(exits) > 1 and all(matrix.distances[i][j] == INF for j in range(len(exits)) if j != i)
    ]
    return MechanicRouting(
        matrix=matrix,
        clusters=build_route_clusters(matrix, groups),
        unreachable_exits=unreachable,
    )
