"""Dead-end pruning.

Decorative spurs (scenery paths, abandoned stubs) inflate patrol areas without leading
anywhere staff need to go. ``prune_dead_ends`` peels such branches leaf by leaf until
every remaining leaf sits on, or next to, an attractor.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, FrozenSet, List, Set

from .graph import PathGraph
from .helpers import degree_within


@dataclass
class PruneResult:
    valid: FrozenSet[int]
    removed: int
    protected: FrozenSet[int]
    warnings: List[str] = field(default_factory=list)


def protected_tiles(graph: PathGraph, attractors: AbstractSet[int], buffer: int = 1) -> FrozenSet[int]:
    """Attractors plus every node within ``buffer`` hops of one."""

    depth: Dict[int, int] = {a: 0 for a in attractors}
    queue: deque[int] = deque(attractors)
    while queue:
        node = queue.popleft()
        if depth[node] >= buffer:
            continue
        for nb in graph.neighbors(node):
            if nb not in depth:
                depth[nb] = depth[node] + 1
                queue.append(nb)
    return frozenset(depth)


def prune_dead_ends(
    graph: PathGraph,
    valid: AbstractSet[int],
    attractors: AbstractSet[int],
    *,
    buffer: int = 1,
) -> PruneResult:
    """Iteratively remove unprotected leaves (degree <= 1) from ``valid``.

    With the default ``buffer`` of 1 a node survives as a leaf only if it is an attractor
    or adjacent to one. Larger buffers keep a longer stub in front of each attractor.
    A network without attractors can prune to nothing; that is reported as a warning.
    """

    keep = protected_tiles(graph, attractors, buffer)
    remaining: Set[int] = set(valid)
    degree = {node_id: degree_within(graph, node_id, remaining) for node_id in remaining}

    stack = [node_id for node_id in sorted(remaining) if degree[node_id] <= 1 and node_id not in keep]
    while stack:
        node_id = stack.pop()
        if node_id not in remaining or node_id in keep:
            continue
        remaining.discard(node_id)
        for nb in graph.neighbors(node_id):
            if nb in remaining:
                degree[nb] -= 1
                if degree[nb] <= 1 and nb not in keep:
                    stack.append(nb)

    warnings: List[str] = []
    if valid and not remaining:
        warnings.append(
            f"All {len(valid)} path tiles were pruned: no ride entrance or exit anchors the network."
        )

    return PruneResult(
        valid=frozenset(remaining),
        removed=len(valid) - len(remaining),
        protected=keep,
        warnings=warnings,
    )
