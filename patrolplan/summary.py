"""Plan statistics, warnings and the one-line status shown next to a preview."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Sequence

from .footpaths.helpers import round_half_up
from .schemas import FoodCourt, MechanicCluster, PatrolPlan, PlanKpis, Zone
from .settings import PlannerSettings


def compute_kpis(
    *,
    valid_tiles: int,
    zones: Sequence[Zone],
    food_courts: Sequence[FoodCourt],
    unassigned: int,
    clusters: Sequence[MechanicCluster],
) -> PlanKpis:
    """Aggregate a finished build into ``PlanKpis``.

    Food courts and general zones both count as handyman areas. Coverage counts each
    tile once even when the rescue pass put it in two areas; ``overlap_tiles`` reports
    how many tiles that happened to.
    """

    areas = [court.tiles for court in food_courts] + [zone.tiles for zone in zones]
    membership: Counter[int] = Counter()
    for tiles in areas:
        membership.update(tiles)

    covered = len(membership)
    sizes = [len(tiles) for tiles in areas]
    total_exits = sum(len(cluster.exits) for cluster in clusters)

    return PlanKpis(
        valid_path_tiles=valid_tiles,
        covered_tiles=covered,
        coverage_percent=round_half_up(100 * covered / valid_tiles) if valid_tiles else 0,
        unassigned_tiles=unassigned,
        overlap_tiles=sum(1 for count in membership.values() if count > 1),
        rescued_tiles=sum(len(zone.rescued) for zone in zones),
        handyman_areas=len(areas),
        handyman_avg_tiles=round_half_up(sum(sizes) / len(sizes)) if sizes else 0,
        handyman_max_tiles=max(sizes, default=0),
        mech_clusters=len(clusters),
        mech_avg_exits=round_half_up(total_exits / len(clusters)) if clusters else 0,
        mech_longest_route=max((cluster.longest_route for cluster in clusters), default=0),
        food_courts=len(food_courts),
    )


def build_warnings(
    settings: PlannerSettings,
    kpis: PlanKpis,
    food_courts: Iterable[FoodCourt],
) -> List[str]:
    """Warnings derived from the statistics; stage warnings are added by the planner."""

    warnings: List[str] = []
    if settings.enable_handymen and kpis.valid_path_tiles and kpis.covered_tiles < kpis.valid_path_tiles:
        # Round down here so a gap never reads as "100%".
        shown = 100 * kpis.covered_tiles // kpis.valid_path_tiles
        warnings.append(
            f"Coverage {shown}%: some valid paths are not in a zone "
            f"({kpis.valid_path_tiles - kpis.covered_tiles} tiles)."
        )
    if settings.enable_mechanics and kpis.mech_clusters == 0:
        warnings.append("No mechanic clusters detected (no ride exits?).")
    for court in food_courts:
        if court.staff_needed > 1:
            warnings.append(
                f"{court.name} is large ({court.size} tiles). Recommend {court.staff_needed} cleaners."
            )
    return warnings


def format_status(plan: PatrolPlan) -> str:
    """Render the preview status line.

    Example output:
    "Handyman coverage: 100% of valid path tiles  |  Avg tiles/cleaner: 133 (max 180)  |  ..."
    """

    k = plan.kpis
    parts = [
        f"Handyman coverage: {k.coverage_percent}% of valid path tiles",
        f"Avg tiles/cleaner: {k.handyman_avg_tiles} (max {k.handyman_max_tiles})",
        f"Mechanic clusters: {k.mech_clusters}, avg exits {k.mech_avg_exits}, "
        f"longest route {k.mech_longest_route} tiles",
        f"Food courts detected: {k.food_courts}",
    ]
    return "  |  ".join(parts)
