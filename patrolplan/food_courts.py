"""Food court detection.

A food court is a tight knot of stalls whose litter deserves a dedicated cleaner.
Detection works on stall points (entrances of rides the caller classifies as shops):

1. A stall becomes a seed when at least ``threshold`` stalls, itself included, lie
   within ``radius`` tiles (Euclidean) of it.
2. Seeds are grown in input order by a breadth-first flood over valid footpath. The flood
   never leaves the disc of ``radius`` around the *seed* coordinate, never enters a tile
   another growth already visited, and stops at ``max_tiles``.
3. Growths smaller than ``min_tiles`` are discarded. Their visited tiles stay consumed.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Dict, FrozenSet, List, Optional, Sequence, Set

from .footpaths.graph import Coord, GraphBuild, PathGraph
from .schemas import FoodCourt

# ride_id -> True (shop/stall), False (not one), None (lookup failed)
RideClassifier = Callable[[int], Optional[bool]]


@dataclass
class FoodCourtDetection:
    courts: List[FoodCourt] = field(default_factory=list)
    seeds: List[Coord] = field(default_factory=list)
    rejected: int = 0

    @property
    def reserved(self) -> FrozenSet[int]:
        tiles: Set[int] = set()
        for court in self.courts:
            tiles.update(court.tiles)
        return frozenset(tiles)


def collect_stall_points(
    build: GraphBuild,
    classifier: Optional[RideClassifier],
    notes: List[str],
    *,
    include_seating_bins: bool = False,
) -> List[Coord]:
    """Coordinates of stall entrances, in scan order.

    The classifier is asked once per distinct ride id. A lookup that raises or returns
    ``None`` counts as "not a stall" and is recorded in ``notes``.
    """

    points: List[Coord] = []
    verdicts: Dict[int, bool] = {}

    if classifier is None:
        notes.append("No ride classifier supplied; food court detection uses seating/bins only.")
    else:
        for coord, marker in build.ride_markers:
            if marker.kind != "entrance":
                continue
            if marker.ride_id not in verdicts:
                try:
                    verdict = classifier(marker.ride_id)
                except Exception as exc:
                    verdict = None
                    notes.append(f"Ride {marker.ride_id} could not be classified: {exc}")
                else:
                    if verdict is None:
                        notes.append(f"Ride {marker.ride_id} could not be classified.")
                verdicts[marker.ride_id] = bool(verdict)
            if verdicts[marker.ride_id]:
                points.append(coord)

    if include_seating_bins:
        points.extend(build.soft_attractor_tiles)
    return points


def find_seeds(points: Sequence[Coord], radius: int, threshold: int) -> List[Coord]:
    """Stall points with at least ``threshold`` stalls within ``radius``."""

    r2 = radius * radius
    seeds: List[Coord] = []
    for px, py in points:
        # The stall counts itself, so threshold 1 makes every stall a seed.
        count = sum(1 for qx, qy in points if (qx - px) ** 2 + (qy - py) ** 2 <= r2)
        if count >= threshold:
            seeds.append((px, py))
    return seeds


def detect_food_courts(
    graph: PathGraph,
    valid: AbstractSet[int],
    points: Sequence[Coord],
    *,
    radius: int = 8,
    threshold: int = 3,
    max_tiles: int = 160,
    min_tiles: int = 20,
    tiles_per_cleaner: int = 120,
) -> FoodCourtDetection:
    seeds = find_seeds(points, radius, threshold)
    detection = FoodCourtDetection(seeds=seeds)
    r2 = radius * radius
    visited: Set[int] = set()

    for cx, cy in seeds:
        # Stalls beside the path start from the path tile in front of them.
        start = graph.anchor(cx, cy, valid)
        # A seed swallowed by an earlier growth (accepted or not) starts nothing.
        if start is None or start in visited:
            continue

        tiles: Set[int] = set()
        queue: deque[int] = deque([start])
        visited.add(start)
        while queue and len(tiles) < max_tiles:
            node_id = queue.popleft()
            tiles.add(node_id)
            for nb in graph.neighbors(node_id):
                # visited is shared by all seeds, which keeps courts disjoint.
                if nb not in valid or nb in visited:
                    continue
                # Radius is measured from the seed stall, never from the fill front.
                nx, ny = graph.coord(nb)
                if (nx - cx) ** 2 + (ny - cy) ** 2 > r2:
                    continue
                visited.add(nb)
                queue.append(nb)

        # Too small to deserve its own cleaner; its tiles stay consumed.
        if len(tiles) < min_tiles:
            detection.rejected += 1
            continue

        detection.courts.append(
            FoodCourt(
                name=f"Food Court {len(detection.courts) + 1}",
                center=(cx, cy),
                tiles=frozenset(tiles),
                staff_needed=max(1, math.ceil(len(tiles) / tiles_per_cleaner)),
            )
        )

    return detection
