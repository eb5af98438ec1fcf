"""
Patrol planner: the pure build pipeline.

Coordinates one planning run:
1. Build the footpath graph from a map snapshot
2. Prune decorative dead ends
3. Detect food courts and reserve their tiles
4. Cut the remaining footpath into balanced handyman zones
5. Cluster ride exits into mechanic routes
6. Aggregate statistics and warnings into an immutable ``PatrolPlan``

Nothing here keeps state between runs and nothing touches the park: collaborators are
injected, the snapshot is only read, and the result is a fresh frozen value.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from .config import Config
from .food_courts import RideClassifier, collect_stall_points, detect_food_courts
from .footpaths import ParkMapState, TileQuery, build_path_graph, plaza_tiles, prune_dead_ends
from .footpaths.helpers import TilePredicate
from .logging_utils import log_step, log_success, log_warning
from .mechanics import find_exit_points, plan_mechanic_routes
from .schemas import FoodCourt, MechanicCluster, PatrolPlan, Zone
from .settings import PlannerSettings
from .snapshot import ride_classifier
from .staffing import StaffOnHand, fold_food_courts, zone_count
from .summary import build_warnings, compute_kpis
from .zoning import partition_zones


class PatrolPlanner:
    """
    Builds patrol plans from map snapshots.

    Fully decoupled: settings and collaborators are passed in, and ``build`` can be
    called any number of times with independent results.
    """

    def __init__(
        self,
        settings: Optional[PlannerSettings] = None,
        *,
        classifier: Optional[RideClassifier] = None,
        route_filter: Optional[TilePredicate] = None,
        verbose: Optional[bool] = None,
    ):
        """
        Args:
            settings: Planning knobs; defaults to ``PlannerSettings.from_config()``.
            classifier: ``ride_id -> is stall?`` used for food court detection. When
                omitted and the snapshot is a ``ParkMapState``, its ride metadata is used.
            route_filter: ``node_id -> admissible?`` for mechanic routing. Overrides the
                built-in plaza filter enabled by ``settings.avoid_plazas``.
            verbose: Print each stage; defaults to ``Config.VERBOSE``.
        """
        self.settings = settings or PlannerSettings.from_config()
        self.classifier = classifier
        self.route_filter = route_filter
        self.verbose = Config.VERBOSE if verbose is None else verbose

    def _log(self, message: str) -> None:
        if self.verbose:
            log_step(message)

    def build(
        self,
        snapshot: TileQuery,
        *,
        staff: Optional[StaffOnHand] = None,
        ride_names: Optional[Callable[[int], str]] = None,
    ) -> PatrolPlan:
        """Run the whole pipeline against ``snapshot`` and return the plan."""

        settings = self.settings
        warnings: List[str] = []
        notes: List[str] = []

        classifier = self.classifier
        if isinstance(snapshot, ParkMapState):
            if staff is None:
                staff = StaffOnHand(
                    handymen=snapshot.staff.get("handyman"),
                    mechanics=snapshot.staff.get("mechanic"),
                )
            if ride_names is None:
                ride_names = snapshot.ride_name
            if classifier is None:
                classifier = ride_classifier(snapshot.rides)
        staff = staff or StaffOnHand()
        ride_names = ride_names or (lambda ride_id: f"Ride {ride_id}")

        # 1. Graph
        self._log("[Graph] Scanning footpath tiles...")
        build = build_path_graph(snapshot, include_soft_attractors=settings.keep_facility_culdesacs)
        graph = build.graph
        notes.extend(build.notes)
        if not len(graph):
            warnings.append("No walkable footpath tiles found.")
        self._log(f"[Graph] {len(graph)} tiles, {len(build.attractors)} attractors")

        # 2. Pruning
        pruned = prune_dead_ends(graph, build.valid, build.attractors, buffer=settings.attractor_buffer)
        valid = pruned.valid
        warnings.extend(pruned.warnings)
        self._log(f"[Prune] Removed {pruned.removed} dead-end tiles, {len(valid)} remain")

        # 3. Food courts
        food_courts: List[FoodCourt] = []
        folded: List[FoodCourt] = []
        if settings.enable_food_courts and valid:
            points = collect_stall_points(
                build, classifier, notes, include_seating_bins=settings.food_court_include_seating_bins,
            )
            detection = detect_food_courts(
                graph,
                valid,
                points,
                radius=settings.food_court_radius,
                threshold=settings.food_court_stall_threshold,
                max_tiles=settings.food_court_max_tiles,
                min_tiles=settings.food_court_min_tiles,
                tiles_per_cleaner=settings.food_court_tiles_per_cleaner,
            )
            food_courts, folded = fold_food_courts(detection.courts, settings, staff)
            for court in folded:
                warnings.append(f"{court.name} folded into general zones: not enough handymen.")
            self._log(f"[Food courts] {len(detection.seeds)} seeds, {len(food_courts)} courts kept")

        reserved = set()
        for court in food_courts:
            reserved.update(court.tiles)
        candidates = frozenset(t for t in valid if t not in reserved)

        # 4. Handyman zones
        zones: List[Zone] = []
        unassigned = candidates
        if settings.enable_handymen:
            k = zone_count(len(candidates), settings, staff)
            zoning = partition_zones(
                graph,
                candidates,
                zone_count=k,
                target=settings.tiles_per_handyman,
                valid=valid,
                rescue=settings.allow_dead_end_rescue,
            )
            zones = zoning.zones
            unassigned = zoning.unassigned
            self._log(
                f"[Zones] {len(zones)} zones, {zoning.leftovers_assigned} leftovers assigned, "
                f"{zoning.rescued} tiles rescued"
            )

        # 5. Mechanic routes
        exits = []
        clusters: List[MechanicCluster] = []
        if settings.enable_mechanics:
            exits = find_exit_points(build, valid, ride_names, notes)
            route_filter = self.route_filter
            if route_filter is None and settings.avoid_plazas:
                plazas = plaza_tiles(graph, valid)

                def route_filter(node_id: int) -> bool:
                    return node_id not in plazas

            routing = plan_mechanic_routes(
                graph,
                valid,
                exits,
                max_exits=settings.mech_max_exits,
                mst_cap=settings.mech_mst_cap,
                diameter_cap=settings.mech_diameter_cap,
                admissible=route_filter,
                notes=notes,
            )
            clusters = routing.clusters
            for index in routing.unreachable_exits:
                exit_point = exits[index]
                warnings.append(
                    f"{exit_point.ride_name} exit at ({exit_point.x}, {exit_point.y}) "
                    "is not connected to any other exit."
                )
            self._log(f"[Mechanics] {len(exits)} exits in {len(clusters)} clusters")

        # 6. Statistics
        kpis = compute_kpis(
            valid_tiles=len(valid),
            zones=zones,
            food_courts=food_courts,
            unassigned=len(unassigned) if settings.enable_handymen else 0,
            clusters=clusters,
        )
        warnings.extend(build_warnings(settings, kpis, food_courts))

        plan = PatrolPlan(
            settings=settings,
            width=graph.width,
            height=graph.height,
            coordinates=tuple(node.coord for node in graph.nodes),
            valid_tiles=valid,
            attractors=build.attractors,
            food_courts=tuple(food_courts),
            folded_food_courts=tuple(folded),
            zones=tuple(zones),
            unassigned_tiles=unassigned if settings.enable_handymen else frozenset(),
            exits=tuple(exits),
            mechanic_clusters=tuple(clusters),
            kpis=kpis,
            warnings=tuple(warnings),
            notes=tuple(notes),
        )

        if self.verbose:
            log_success(f"[Plan] Coverage {kpis.coverage_percent}%, {kpis.mech_clusters} mechanic clusters")
            for warning in plan.warnings:
                log_warning(warning)
        return plan


def build_plan(
    snapshot: TileQuery,
    settings: Optional[PlannerSettings] = None,
    **kwargs,
) -> PatrolPlan:
    """Convenience wrapper: ``PatrolPlanner(settings).build(snapshot, **kwargs)``."""

    return PatrolPlanner(settings).build(snapshot, **kwargs)
