"""
Example: Plan and apply patrols for a small park
================================================

WHAT THIS SHOWS:
- Loading a park snapshot from examples/snapshots
- Building a plan with the default presets (or PATROLPLAN_* environment overrides)
- Printing zones, food courts and mechanic clusters
- Applying the plan to an in-memory staff roster

RUN:
    python -m examples.park.run
    python -m examples.park.run sample_park
"""

import sys

from patrolplan import (
    InMemoryStaffBackend,
    PatrolPlanner,
    PlanApplier,
    PlannerSettings,
    SnapshotLoader,
    format_status,
)
from patrolplan.config import Config


def main(snapshot_name: str = "sample_park") -> None:
    Config.validate()
    print(Config.display())
    print()

    # ========================================
    # STEP 1: Load the map snapshot
    # ========================================
    park = SnapshotLoader().load(snapshot_name)

    # ========================================
    # STEP 2: Plan (pure, repeatable)
    # ========================================
    planner = PatrolPlanner(PlannerSettings.from_config(), verbose=True)
    plan = planner.build(park)

    print()
    print(format_status(plan))
    print()
    for court in plan.food_courts:
        print(f"{court.name}: {court.size} tiles around {court.center}, {court.staff_needed} cleaner(s)")
    for zone in plan.zones:
        print(f"{zone.name}: {zone.size} tiles, centroid {zone.centroid}")
    for cluster in plan.mechanic_clusters:
        rides = ", ".join(plan.exits[i].ride_name for i in cluster.exits)
        print(f"{cluster.name}: {rides} (route {cluster.mst_length} tiles)")

    # ========================================
    # STEP 3: Apply to a staff roster
    # ========================================
    # The in-memory backend stands in for a live park; it starts with the
    # staff the snapshot reports and hires the rest.
    backend = InMemoryStaffBackend(
        handymen=park.staff.get("handyman", 0),
        mechanics=park.staff.get("mechanic", 0),
    )
    report = PlanApplier(backend).apply(plan)

    print()
    print(report.summary())


if __name__ == "__main__":
    main(*sys.argv[1:2])
