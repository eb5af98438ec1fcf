"""Staffing policy: how many zones to cut and whether food courts keep their own cleaners."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .schemas import FoodCourt
from .settings import FoodCourtStaffPolicy, PlannerSettings, StaffPolicy


@dataclass(frozen=True)
class StaffOnHand:
    """Existing staff head count; ``None`` means unknown."""

    handymen: Optional[int] = None
    mechanics: Optional[int] = None


def zone_count(candidate_tiles: int, settings: PlannerSettings, staff: StaffOnHand) -> int:
    """Number of general zones (K) for ``candidate_tiles`` tiles.

    The need is one handyman per ``tiles_per_handyman`` tiles. Under
    ``assign_only_existing`` the need is capped by the known head count; the other
    policies plan for the full need (hiring or stretching happens when applying).
    There is always at least one zone while there are tiles to cover.
    """

    if candidate_tiles <= 0:
        return 0
    needed = math.ceil(candidate_tiles / settings.tiles_per_handyman)
    if settings.staff_insufficient == StaffPolicy.ASSIGN_ONLY_EXISTING and staff.handymen is not None:
        needed = min(needed, staff.handymen)
    return max(needed, 1)


def fold_food_courts(
    courts: Sequence[FoodCourt],
    settings: PlannerSettings,
    staff: StaffOnHand,
) -> Tuple[List[FoodCourt], List[FoodCourt]]:
    """Split detected courts into (kept, folded back into the general pool)."""

    courts = list(courts)
    if settings.food_court_staff_insufficient != FoodCourtStaffPolicy.FOLD_INTO_GENERAL:
        return courts, []
    if staff.handymen is None:
        return courts, []
    demand = sum(court.staff_needed for court in courts)
    if staff.handymen >= demand:
        return courts, []
    return [], courts
