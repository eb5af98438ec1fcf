"""Footpath graph construction.

Scans a map snapshot and turns every staff-walkable tile into a node of a 4-neighbour
grid graph. Nodes live in a dense list indexed by id, adjacency is a parallel list of
neighbour ids, and a separate coordinate map resolves (x, y) back to ids. The graph is
rebuilt from scratch on every planning run and never mutated afterwards; later stages
only shrink the *valid* id set that travels alongside it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Dict, FrozenSet, List, Optional, Tuple

from .grid import RideMarker, TileInfo, TileQuery

Coord = Tuple[int, int]

# East, west, south, north. Order fixes neighbour iteration and therefore tie-breaks.
NEIGHBOR_OFFSETS: Tuple[Coord, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


@dataclass(frozen=True)
class Node:
    """One walkable tile."""

    id: int
    x: int
    y: int
    degree: int = 0
    is_attractor: bool = False

    @property
    def coord(self) -> Coord:
        return (self.x, self.y)


@dataclass
class PathGraph:
    """Nodes plus symmetric adjacency lists, both indexed by node id."""

    width: int
    height: int
    nodes: List[Node] = field(default_factory=list)
    adjacency: List[Tuple[int, ...]] = field(default_factory=list)
    id_by_xy: Dict[Coord, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.nodes)

    def neighbors(self, node_id: int) -> Tuple[int, ...]:
        return self.adjacency[node_id]

    def node_at(self, x: int, y: int) -> Optional[int]:
        return self.id_by_xy.get((x, y))

    def coord(self, node_id: int) -> Coord:
        node = self.nodes[node_id]
        return (node.x, node.y)

    def anchor(self, x: int, y: int, allowed: Optional[AbstractSet[int]] = None) -> Optional[int]:
        """Node standing on (x, y), else the first neighbouring node.

        Ride entrances and exits usually sit on their own tile beside the footpath; this
        resolves such a marker to the path tile staff actually walk to.
        """
        for dx, dy in ((0, 0),) + NEIGHBOR_OFFSETS:
            node_id = self.id_by_xy.get((x + dx, y + dy))
            if node_id is not None and (allowed is None or node_id in allowed):
                return node_id
        return None


@dataclass
class GraphBuild:
    """Output of ``build_path_graph``.

    ``ride_markers`` and ``soft_attractor_tiles`` keep every marker seen during the scan,
    including markers on tiles that did not become nodes, in scan order (x-major).
    A ride marker off the path flags every path node beside it as an attractor.
    """

    graph: PathGraph
    valid: FrozenSet[int]
    attractors: FrozenSet[int]
    ride_markers: List[Tuple[Coord, RideMarker]] = field(default_factory=list)
    soft_attractor_tiles: List[Coord] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)


def _is_staff_walkable(tile: TileInfo) -> bool:
    # A tile mixing a normal path with a queue segment is dropped entirely.
    return tile.walkable_path and not tile.queue_path


def build_path_graph(snapshot: TileQuery, *, include_soft_attractors: bool = False) -> GraphBuild:
    """Scan ``snapshot`` and build the footpath graph.

    Args:
        snapshot: Anything implementing ``TileQuery``.
        include_soft_attractors: Also flag bench/bin tiles as attractors so pruning keeps
            the cul-de-sacs leading to them.

    Returns:
        GraphBuild with every created node valid and attractors flagged. A failing tile
        query skips that tile and is summarised in ``notes``; it never aborts the scan.
    """

    width, height = int(snapshot.width), int(snapshot.height)
    notes: List[str] = []

    coords: List[Coord] = []
    attractor_flags: List[bool] = []
    id_by_xy: Dict[Coord, int] = {}
    ride_markers: List[Tuple[Coord, RideMarker]] = []
    soft_tiles: List[Coord] = []

    failures = 0
    first_failure: Optional[str] = None

    for x in range(width):
        for y in range(height):
            try:
                tile = snapshot.tile_at(x, y)
            except Exception as exc:  # host lookups are best effort
                failures += 1
                if first_failure is None:
                    first_failure = f"({x}, {y}): {exc}"
                continue
            if tile is None:
                continue

            if tile.ride_marker is not None:
                ride_markers.append(((x, y), tile.ride_marker))
            if tile.soft_attractor:
                soft_tiles.append((x, y))

            if not _is_staff_walkable(tile):
                continue

            id_by_xy[(x, y)] = len(coords)
            coords.append((x, y))
            attractor = tile.ride_marker is not None
            if include_soft_attractors and tile.soft_attractor:
                attractor = True
            attractor_flags.append(attractor)

    # A marker off the path anchors every path tile touching it.
    for (x, y), _marker in ride_markers:
        if (x, y) in id_by_xy:
            continue
        for dx, dy in NEIGHBOR_OFFSETS:
            other = id_by_xy.get((x + dx, y + dy))
            if other is not None:
                attractor_flags[other] = True

    if failures:
        notes.append(f"Tile query failed for {failures} tile(s); first failure at {first_failure}.")

    adjacency: List[Tuple[int, ...]] = []
    for x, y in coords:
        neighbors = []
        for dx, dy in NEIGHBOR_OFFSETS:
            other = id_by_xy.get((x + dx, y + dy))
            if other is not None:
                neighbors.append(other)
        adjacency.append(tuple(neighbors))

    nodes = [
        Node(id=i, x=x, y=y, degree=len(adjacency[i]), is_attractor=attractor_flags[i])
        for i, (x, y) in enumerate(coords)
    ]
    graph = PathGraph(width=width, height=height, nodes=nodes, adjacency=adjacency, id_by_xy=id_by_xy)

    return GraphBuild(
        graph=graph,
        valid=frozenset(range(len(nodes))),
        attractors=frozenset(node.id for node in nodes if node.is_attractor),
        ride_markers=ride_markers,
        soft_attractor_tiles=soft_tiles,
        notes=notes,
    )
