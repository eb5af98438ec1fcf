"""
Patrolplan - staff patrol planning for theme park footpaths.

Turns a park map snapshot into handyman zones, food court cleaning areas and
mechanic inspection routes.

Planning is a pure function of the snapshot and settings.
Applying a plan goes through a host-provided StaffBackend.
"""

__version__ = "0.1.0"

# Main planning entry points
from .planner import PatrolPlanner, build_plan
from .settings import (
    PlannerSettings,
    ZonePreset,
    MechPreset,
    StaffPolicy,
    FoodCourtStaffPolicy,
)
from .staffing import StaffOnHand

# Footpath graph layer
from .footpaths import (
    ParkMapState,
    RideState,
    TileState,
    RideMarker,
    TileInfo,
    TileQuery,
    PathGraph,
    build_path_graph,
    prune_dead_ends,
)

# Plan schemas
from .schemas import (
    PatrolPlan,
    PlanKpis,
    FoodCourt,
    Zone,
    ExitPoint,
    RouteEdge,
    MechanicCluster,
)

# Applying plans
from .applier import (
    PlanApplier,
    ApplyReport,
    StaffBackend,
    InMemoryStaffBackend,
    Capabilities,
    OperationResult,
    StaffRef,
    StaffRole,
)

# Snapshot loader helpers
from .snapshot import SnapshotLoader, parse_ascii_layout, ride_classifier
from .summary import format_status

__all__ = [
    # Main class
    "PatrolPlanner",
    "build_plan",
    # Settings
    "PlannerSettings",
    "ZonePreset",
    "MechPreset",
    "StaffPolicy",
    "FoodCourtStaffPolicy",
    "StaffOnHand",
    # Footpaths
    "ParkMapState",
    "RideState",
    "TileState",
    "RideMarker",
    "TileInfo",
    "TileQuery",
    "PathGraph",
    "build_path_graph",
    "prune_dead_ends",
    # Schemas
    "PatrolPlan",
    "PlanKpis",
    "FoodCourt",
    "Zone",
    "ExitPoint",
    "RouteEdge",
    "MechanicCluster",
    # Applying
    "PlanApplier",
    "ApplyReport",
    "StaffBackend",
    "InMemoryStaffBackend",
    "Capabilities",
    "OperationResult",
    "StaffRef",
    "StaffRole",
    # Snapshots
    "SnapshotLoader",
    "parse_ascii_layout",
    "ride_classifier",
    "format_status",
]
