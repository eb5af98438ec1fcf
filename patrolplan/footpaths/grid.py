"""Tile snapshot contracts consumed by the graph builder.

The planner never talks to a live park. Callers hand it something that can answer
"what is on tile (x, y)?" and the builder turns those answers into a footpath graph.
``ParkMapState`` in ``schemas.py`` is the bundled implementation; host integrations can
provide their own object as long as it satisfies ``TileQuery``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Protocol

MarkerKind = Literal["entrance", "exit"]


@dataclass(frozen=True)
class RideMarker:
    """A ride entrance or exit standing on a tile."""

    ride_id: int
    kind: MarkerKind = "exit"


@dataclass(frozen=True)
class TileInfo:
    """Answer to a single tile query."""

    walkable_path: bool = False
    queue_path: bool = False
    ride_marker: Optional[RideMarker] = None
    soft_attractor: bool = False  # bench, bin


class TileQuery(Protocol):
    """Read-only view of a map snapshot."""

    width: int
    height: int

    def tile_at(self, x: int, y: int) -> Optional[TileInfo]:
        ...
