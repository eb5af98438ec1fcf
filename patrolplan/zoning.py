"""Balanced handyman zoning.

Splits the footpath left over after food court reservation into roughly equal,
contiguous zones:

- ``pick_seeds``: farthest-point sampling (Manhattan) spreads K seeds over the map.
- ``balanced_flood``: all seeds flood outward in synchronous rounds; a zone stops
  claiming once it reaches the target size and the first zone to touch a tile keeps it.
- ``assign_leftovers``: tiles the flood never reached (because every zone around them
  filled up) join the zone with the Manhattan-closest centroid.
- ``rescue_dead_ends``: a valid tile outside every zone with exactly one zoned neighbour
  is attached to that neighbour's zone. This is how a food court's boundary stubs get
  a handyman too, at the price of a one-tile overlap.

Components of the candidate graph that contain no seed are left alone and reported as
unassigned; they are coverage gaps, not errors.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, FrozenSet, List, Optional, Set

from .footpaths.graph import PathGraph
from .footpaths.helpers import centroid, manhattan, reachable_from, round_half_up
from .schemas import Zone


@dataclass
class ZoningResult:
    zones: List[Zone] = field(default_factory=list)
    seeds: List[int] = field(default_factory=list)
    unassigned: FrozenSet[int] = frozenset()
    leftovers_assigned: int = 0
    rescued: int = 0


def pick_seeds(graph: PathGraph, candidates: AbstractSet[int], k: int) -> List[int]:
    """Choose up to ``k`` spread-out seeds, starting from the lowest tile id.

    Each further seed is the candidate farthest (Manhattan) from its nearest chosen seed;
    ties go to the lower tile id.
    """

    ids = sorted(candidates)
    if not ids or k <= 0:
        return []

    # Lowest id starts.
    seeds = [ids[0]]
    chosen = {ids[0]}
    # Distance from every tile to its closest seed so far, updated after each pick.
    nearest = {node_id: manhattan(graph.coord(node_id), graph.coord(ids[0])) for node_id in ids}

    while len(seeds) < k:
        best: Optional[int] = None
        best_score = -1
        for node_id in ids:
            if node_id in chosen:
                continue
            # Strict > keeps the lower id on ties.
            if nearest[node_id] > best_score:
                best_score = nearest[node_id]
                best = node_id
        if best is None:
            break
        seeds.append(best)
        chosen.add(best)
        best_coord = graph.coord(best)
        for node_id in ids:
            d = manhattan(graph.coord(node_id), best_coord)
            if d < nearest[node_id]:
                nearest[node_id] = d
    return seeds


def balanced_flood(
    graph: PathGraph,
    candidates: AbstractSet[int],
    seeds: List[int],
    target: int,
) -> List[Set[int]]:
    """Grow one zone per seed in lock-step rounds until nobody can grow."""

    zones: List[Set[int]] = [set() for _ in seeds]
    frontier: List[deque[int]] = [deque([seed]) for seed in seeds]
    claimed: Dict[int, int] = {}

    # Each zone owns its seed before the first round.
    for index, seed in enumerate(seeds):
        if seed in candidates and seed not in claimed:
            zones[index].add(seed)
            claimed[seed] = index

    while True:
        progressed = False
        # One round: every zone under target expands by one full wave, in index order.
        for index, zone in enumerate(zones):
            if len(zone) >= target:
                continue
            wave = frontier[index]
            next_wave: deque[int] = deque()
            while wave and len(zone) < target:
                node_id = wave.popleft()
                for nb in graph.neighbors(node_id):
                    # First zone to reach a tile keeps it for good.
                    if nb not in candidates or nb in claimed:
                        continue
                    claimed[nb] = index
                    zone.add(nb)
                    next_wave.append(nb)
                    progressed = True
                    if len(zone) >= target:
                        break
            frontier[index] = next_wave
        if not progressed or all(len(zone) >= target for zone in zones):
            break

    return zones


def assign_leftovers(
    graph: PathGraph,
    candidates: AbstractSet[int],
    zones: List[Set[int]],
    seeds: List[int],
) -> int:
    """Give unclaimed tiles of seeded components to the nearest zone centroid.

    Centroids move as tiles are added. Ties go to the lowest zone index. Returns the
    number of tiles assigned.
    """

    claimed: Set[int] = set().union(*zones) if zones else set()
    # Only tiles connected to a seed; seedless components stay unassigned.
    reachable = reachable_from(graph, seeds, candidates)
    remaining = sorted(node_id for node_id in reachable if node_id not in claimed)
    if not remaining:
        return 0

    # Running coordinate sums so centroids follow each added tile.
    sums = []
    for zone in zones:
        sx = sum(graph.nodes[t].x for t in zone)
        sy = sum(graph.nodes[t].y for t in zone)
        sums.append([sx, sy, len(zone)])

    assigned = 0
    for node_id in remaining:
        coord = graph.coord(node_id)
        best = -1
        best_distance = math.inf
        for index, (sx, sy, count) in enumerate(sums):
            if not count:
                continue
            center = (round_half_up(sx / count), round_half_up(sy / count))
            d = manhattan(center, coord)
            if d < best_distance:
                best_distance = d
                best = index
        if best < 0:
            continue
        zones[best].add(node_id)
        sums[best][0] += coord[0]
        sums[best][1] += coord[1]
        sums[best][2] += 1
        assigned += 1
    return assigned


def rescue_dead_ends(
    graph: PathGraph,
    valid: AbstractSet[int],
    zones: List[Set[int]],
) -> List[Set[int]]:
    """Attach stranded leaf tiles to the zone next to them.

    Looks at every valid tile outside all zones (food court tiles, isolated pieces).
    A tile whose degree in the zoned graph would be exactly one joins the zone owning
    that single neighbour. Single pass; returns the rescued tiles per zone.
    """

    owner: Dict[int, int] = {}
    for index, zone in enumerate(zones):
        for node_id in zone:
            owner.setdefault(node_id, index)

    rescued: List[Set[int]] = [set() for _ in zones]
    for node_id in sorted(valid):
        if node_id in owner:
            continue
        zoned_neighbors = [nb for nb in graph.neighbors(node_id) if nb in owner]
        # Exactly one zoned neighbour means the tile is a leaf of the zoned graph.
        if len(zoned_neighbors) != 1:
            continue
        index = owner[zoned_neighbors[0]]
        rescued[index].add(node_id)

    # Applied after the scan so one rescue never enables another.
    for index, tiles in enumerate(rescued):
        zones[index].update(tiles)
    return rescued


def partition_zones(
    graph: PathGraph,
    candidates: AbstractSet[int],
    *,
    zone_count: int,
    target: int,
    valid: Optional[AbstractSet[int]] = None,
    rescue: bool = True,
) -> ZoningResult:
    """Run seeding, balanced flood, leftover assignment and (optionally) rescue.

    Args:
        graph: Footpath graph.
        candidates: Valid tiles minus reserved food court tiles.
        zone_count: Desired number of zones (K).
        target: Tiles per zone the flood aims for.
        valid: Full valid set used by the rescue pass; defaults to ``candidates``.
        rescue: Run the dead-end rescue pass.
    """

    if not candidates or zone_count <= 0:
        return ZoningResult(unassigned=frozenset(candidates))

    seeds = pick_seeds(graph, candidates, zone_count)
    grown = balanced_flood(graph, candidates, seeds, max(1, target))
    leftovers = assign_leftovers(graph, candidates, grown, seeds)

    rescued: List[Set[int]] = [set() for _ in grown]
    if rescue:
        rescued = rescue_dead_ends(graph, valid if valid is not None else candidates, grown)

    zones: List[Zone] = []
    for index, tiles in enumerate(grown):
        if not tiles:
            continue
        zones.append(
            Zone(
                name=f"Zone {len(zones) + 1}",
                tiles=frozenset(tiles),
                centroid=centroid(graph, tiles),
                seed=seeds[index],
                rescued=frozenset(rescued[index]),
            )
        )

    covered: Set[int] = set().union(*grown) if grown else set()
    return ZoningResult(
        zones=zones,
        seeds=seeds,
        unassigned=frozenset(t for t in candidates if t not in covered),
        leftovers_assigned=leftovers,
        rescued=sum(len(tiles) for tiles in rescued),
    )
