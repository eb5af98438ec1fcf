"""
Pydantic schemas for patrol plans.

A plan is the only thing a planning run hands back. It is an immutable value: every
model here is frozen, tile collections are frozensets of node ids, and ``coordinates``
maps those ids back to map tiles so consumers never need the intermediate graph.

Design notes:
- Node ids are dense indices into ``PatrolPlan.coordinates`` and are only meaningful
  within the plan that produced them (ids are reassigned on every build)
- Food courts and general zones are kept apart; together they make up the handyman
  areas that need a cleaner each
- Statistics and warnings are computed once at build time and stored on the plan
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .settings import PlannerSettings

Coord = Tuple[int, int]


class PlanModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# ============================================================================
# Handyman areas
# ============================================================================


class FoodCourt(PlanModel):
    """A dense cluster of stalls reserved as its own cleaning area."""

    name: str
    center: Coord = Field(..., description="Seed stall coordinate; the growth radius is measured from here")
    tiles: FrozenSet[int] = Field(default_factory=frozenset)
    staff_needed: int = Field(1, ge=1, description="max(1, ceil(tiles / tiles_per_cleaner))")

    @property
    def size(self) -> int:
        return len(self.tiles)


class Zone(PlanModel):
    """A contiguous patch of footpath patrolled by one handyman."""

    name: str
    tiles: FrozenSet[int] = Field(default_factory=frozenset)
    centroid: Coord = (0, 0)
    seed: Optional[int] = Field(None, description="Node the balanced flood grew from")
    rescued: FrozenSet[int] = Field(
        default_factory=frozenset,
        description="Dead-end tiles attached by the rescue pass (may also belong to a food court)",
    )

    @property
    def size(self) -> int:
        return len(self.tiles)


# ============================================================================
# Mechanic routes
# ============================================================================


class ExitPoint(PlanModel):
    """A ride exit, placed on the valid footpath tile on or beside it."""

    node_id: int
    x: int
    y: int
    ride_id: int
    ride_name: str

    @property
    def coord(self) -> Coord:
        return (self.x, self.y)


class RouteEdge(PlanModel):
    """One minimum spanning tree edge, expanded to the tiles walked between two exits."""

    source: int = Field(..., description="Index into PatrolPlan.exits")
    target: int = Field(..., description="Index into PatrolPlan.exits")
    distance: int = Field(..., description="Hop distance between the two exits")
    path: Tuple[int, ...] = Field(default_factory=tuple, description="Node ids, both ends included")


class MechanicCluster(PlanModel):
    """Exits inspected by one mechanic plus the route tree connecting them."""

    name: str
    exits: Tuple[int, ...] = Field(default_factory=tuple, description="Indices into PatrolPlan.exits")
    tiles: FrozenSet[int] = Field(default_factory=frozenset)
    routes: Tuple[RouteEdge, ...] = Field(default_factory=tuple)

    @property
    def mst_length(self) -> int:
        return sum(route.distance for route in self.routes)

    @property
    def longest_route(self) -> int:
        return max((len(route.path) for route in self.routes), default=0)


# ============================================================================
# Plan
# ============================================================================


class PlanKpis(PlanModel):
    """Derived statistics shown alongside a plan."""

    valid_path_tiles: int = 0
    covered_tiles: int = 0
    coverage_percent: int = 0
    unassigned_tiles: int = 0
    overlap_tiles: int = 0
    rescued_tiles: int = 0
    handyman_areas: int = 0
    handyman_avg_tiles: int = 0
    handyman_max_tiles: int = 0
    mech_clusters: int = 0
    mech_avg_exits: int = 0
    mech_longest_route: int = 0
    food_courts: int = 0


class PatrolPlan(PlanModel):
    """Immutable result of one planning run."""

    settings: PlannerSettings
    width: int
    height: int
    coordinates: Tuple[Coord, ...] = Field(default_factory=tuple, description="Node id → (x, y)")
    valid_tiles: FrozenSet[int] = Field(default_factory=frozenset)
    attractors: FrozenSet[int] = Field(default_factory=frozenset)
    food_courts: Tuple[FoodCourt, ...] = Field(default_factory=tuple)
    folded_food_courts: Tuple[FoodCourt, ...] = Field(
        default_factory=tuple,
        description="Detected courts returned to the general pool by the staffing policy",
    )
    zones: Tuple[Zone, ...] = Field(default_factory=tuple)
    unassigned_tiles: FrozenSet[int] = Field(default_factory=frozenset)
    exits: Tuple[ExitPoint, ...] = Field(default_factory=tuple)
    mechanic_clusters: Tuple[MechanicCluster, ...] = Field(default_factory=tuple)
    kpis: PlanKpis = Field(default_factory=PlanKpis)
    warnings: Tuple[str, ...] = Field(default_factory=tuple)
    notes: Tuple[str, ...] = Field(default_factory=tuple, description="Collaborator failures met while building")

    def tiles_to_coordinates(self, node_ids: Iterable[int]) -> List[Coord]:
        return [self.coordinates[node_id] for node_id in sorted(node_ids)]

    @property
    def is_empty(self) -> bool:
        return not self.zones and not self.food_courts and not self.mechanic_clusters
