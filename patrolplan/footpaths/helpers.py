"""Utilities shared by the pruning, zoning and routing stages."""

from __future__ import annotations

import math
from collections import deque
from typing import AbstractSet, Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .graph import Coord, PathGraph

TilePredicate = Callable[[int], bool]


def manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def round_half_up(value: float) -> int:
    """Round like a map editor does: .5 always goes up."""
    return int(math.floor(value + 0.5))


def degree_within(graph: PathGraph, node_id: int, members: AbstractSet[int]) -> int:
    """Count neighbours of ``node_id`` that belong to ``members``."""
    return sum(1 for nb in graph.neighbors(node_id) if nb in members)


def bfs_tree(
    graph: PathGraph,
    start: int,
    allowed: AbstractSet[int],
    *,
    admissible: Optional[TilePredicate] = None,
) -> Tuple[Dict[int, int], Dict[int, int]]:
    """Breadth-first search from ``start`` restricted to ``allowed`` tiles.

    Returns ``(dist, prev)``: hop distance per reached node and the predecessor link
    used to reconstruct shortest paths. Neighbours rejected by ``admissible`` are never
    entered. The start node is always reached, even if the predicate rejects it.
    """

    dist: Dict[int, int] = {start: 0}
    prev: Dict[int, int] = {}
    queue: deque[int] = deque([start])

    while queue:
        node = queue.popleft()
        for nb in graph.neighbors(node):
            if nb not in allowed or nb in dist:
                continue
            if admissible is not None and not admissible(nb):
                continue
            dist[nb] = dist[node] + 1
            prev[nb] = node
            queue.append(nb)
    return dist, prev


def reconstruct_path(prev: Dict[int, int], start: int, goal: int) -> List[int]:
    """Walk predecessor links back from ``goal``. Empty list when unreachable."""

    if goal == start:
        return [start]
    if goal not in prev:
        return []
    path = [goal]
    current = goal
    while current != start:
        current = prev[current]
        path.append(current)
    path.reverse()
    return path


def reachable_from(graph: PathGraph, sources: Iterable[int], allowed: AbstractSet[int]) -> Set[int]:
    """Every ``allowed`` node connected to at least one source."""

    seen: Set[int] = {s for s in sources if s in allowed}
    queue: deque[int] = deque(seen)
    while queue:
        node = queue.popleft()
        for nb in graph.neighbors(node):
            if nb in allowed and nb not in seen:
                seen.add(nb)
                queue.append(nb)
    return seen


def centroid(graph: PathGraph, node_ids: Iterable[int]) -> Coord:
    sx = sy = count = 0
    for node_id in node_ids:
        node = graph.nodes[node_id]
        sx += node.x
        sy += node.y
        count += 1
    if not count:
        return (0, 0)
    return (round_half_up(sx / count), round_half_up(sy / count))


def plaza_tiles(graph: PathGraph, valid: AbstractSet[int]) -> FrozenSet[int]:
    """Tiles whose eight surrounding tiles are all valid path, i.e. plaza interiors."""

    plazas = set()
    for node_id in valid:
        x, y = graph.coord(node_id)
        surrounded = True
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                other = graph.node_at(x + dx, y + dy)
                if other is None or other not in valid:
                    surrounded = False
                    break
            if not surrounded:
                break
        if surrounded:
            plazas.add(node_id)
    return frozenset(plazas)
