"""Pydantic schemas for park map snapshots.

These models mirror the lightweight dataclasses in ``grid.py`` but keep snapshots
serialisable, so a host can dump the park once and plan against the file later.
``ParkMapState`` satisfies the ``TileQuery`` protocol directly.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from .grid import RideMarker, TileInfo

SOFT_ATTRACTOR_KEYWORDS = ("bench", "bin")


class TileState(BaseModel):
    """Everything the planner needs to know about one tile."""

    path: bool = Field(False, description="Tile carries a non-queue footpath element")
    queue: bool = Field(False, description="Tile carries a queue-flagged footpath element")
    ride_id: Optional[int] = Field(None, description="Ride owning the entrance/exit on this tile")
    ride_kind: Optional[Literal["entrance", "exit"]] = Field(
        None, description="Whether the ride marker is an entrance or an exit",
    )
    scenery: List[str] = Field(
        default_factory=list,
        description="Scenery object identifiers placed on the tile (benches, bins, lamps)",
    )

    def to_tile_info(self) -> TileInfo:
        marker = None
        if self.ride_id is not None:
            marker = RideMarker(ride_id=self.ride_id, kind=self.ride_kind or "entrance")
        soft = any(
            keyword in item.lower() for item in self.scenery for keyword in SOFT_ATTRACTOR_KEYWORDS
        )
        return TileInfo(
            walkable_path=self.path,
            queue_path=self.queue,
            ride_marker=marker,
            soft_attractor=soft,
        )


class RideState(BaseModel):
    """Ride metadata used for naming and shop classification."""

    name: Optional[str] = None
    type: Optional[str] = Field(None, description="Ride type identifier, e.g. 'food_stall'")
    classification: Optional[str] = Field(None, description="'ride', 'stall', 'facility'")


class ParkMapState(BaseModel):
    """Sparse representation of a park map."""

    width: int
    height: int
    tiles: Dict[Tuple[int, int], TileState] = Field(
        default_factory=dict,
        description="Sparse map: (x, y) → tile contents",
    )
    rides: Dict[int, RideState] = Field(
        default_factory=dict,
        description="Map of ride_id → ride metadata",
    )
    staff: Dict[str, int] = Field(
        default_factory=dict,
        description="Existing staff head count by role ('handyman', 'mechanic')",
    )

    def tile_at(self, x: int, y: int) -> Optional[TileInfo]:
        tile = self.tiles.get((x, y))
        if tile is None:
            return None
        return tile.to_tile_info()

    def ride_name(self, ride_id: int) -> str:
        ride = self.rides.get(ride_id)
        if ride is not None and ride.name:
            return ride.name
        return f"Ride {ride_id}"
