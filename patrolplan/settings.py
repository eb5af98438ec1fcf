"""Planner settings, presets and staffing policies.

Every knob of a planning run lives on ``PlannerSettings``. Numeric fields are clamped
to the ranges the park UI exposes rather than rejected, so a settings dict coming from
a slider can be fed in as-is. Presets bundle the common combinations.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import Config


class ZonePreset(str, Enum):
    TIGHT = "tight"
    BALANCED = "balanced"
    WIDE = "wide"


class MechPreset(str, Enum):
    COMPACT = "compact"
    STANDARD = "standard"
    EXTENDED = "extended"


class StaffPolicy(str, Enum):
    """What to do when there are fewer staff than zones/clusters."""

    AUTO_HIRE = "auto_hire"
    ASSIGN_ONLY_EXISTING = "assign_only_existing"
    STRETCH_ZONES = "stretch_zones"


class FoodCourtStaffPolicy(str, Enum):
    AUTO_HIRE = "auto_hire"
    ASSIGN_ONLY_EXISTING = "assign_only_existing"
    FOLD_INTO_GENERAL = "fold_into_general"


ZONE_PRESETS: Dict[ZonePreset, int] = {
    ZonePreset.TIGHT: 140,
    ZonePreset.BALANCED: 180,
    ZonePreset.WIDE: 220,
}

# (max exits per cluster, MST length cap, diameter cap)
MECH_PRESETS: Dict[MechPreset, Tuple[int, int, int]] = {
    MechPreset.COMPACT: (3, 120, 100),
    MechPreset.STANDARD: (4, 180, 120),
    MechPreset.EXTENDED: (5, 200, 140),
}

CLAMP_RANGES: Dict[str, Tuple[int, int]] = {
    "tiles_per_handyman": (80, 400),
    "food_court_stall_threshold": (1, 10),
    "food_court_radius": (3, 20),
    "food_court_tiles_per_cleaner": (60, 240),
    "food_court_max_tiles": (60, 500),
    "mech_max_exits": (1, 10),
    "mech_mst_cap": (40, 400),
    "mech_diameter_cap": (40, 400),
    "attractor_buffer": (1, 3),
}


class PlannerSettings(BaseModel):
    """All inputs of a planning run that are not map data."""

    model_config = ConfigDict(frozen=True)

    enable_handymen: bool = True
    enable_mechanics: bool = True
    enable_food_courts: bool = True

    # Handymen
    zone_preset: ZonePreset = ZonePreset.BALANCED
    tiles_per_handyman: int = 180
    allow_dead_end_rescue: bool = True
    keep_facility_culdesacs: bool = Field(
        False, description="Treat bench/bin tiles as attractors so their cul-de-sacs survive pruning",
    )
    attractor_buffer: int = Field(1, description="Hops around an attractor protected from pruning")

    # Food courts
    food_court_stall_threshold: int = 3
    food_court_radius: int = 8
    food_court_include_seating_bins: bool = False
    food_court_max_tiles: int = 160
    food_court_min_tiles: int = Field(20, ge=1, description="Smallest accepted food court")
    food_court_tiles_per_cleaner: int = 120
    food_court_staff_insufficient: FoodCourtStaffPolicy = FoodCourtStaffPolicy.AUTO_HIRE

    # Mechanics
    mech_preset: MechPreset = MechPreset.STANDARD
    mech_max_exits: int = 4
    mech_mst_cap: int = 180
    mech_diameter_cap: int = 120
    avoid_plazas: bool = False

    # Staff handling
    staff_insufficient: StaffPolicy = StaffPolicy.AUTO_HIRE
    spawn_new_inside_zone: bool = True
    move_existing_to_zone: bool = True

    @field_validator(*CLAMP_RANGES.keys(), mode="before")
    @classmethod
    def _clamp(cls, value: Any, info) -> int:
        lo, hi = CLAMP_RANGES[info.field_name]
        return max(lo, min(hi, int(value)))

    def with_zone_preset(self, preset: ZonePreset | str) -> "PlannerSettings":
        preset = ZonePreset(preset)
        return self.model_copy(update={
            "zone_preset": preset,
            "tiles_per_handyman": ZONE_PRESETS[preset],
        })

    def with_mech_preset(self, preset: MechPreset | str) -> "PlannerSettings":
        preset = MechPreset(preset)
        max_exits, mst_cap, diameter_cap = MECH_PRESETS[preset]
        return self.model_copy(update={
            "mech_preset": preset,
            "mech_max_exits": max_exits,
            "mech_mst_cap": mst_cap,
            "mech_diameter_cap": diameter_cap,
        })

    @classmethod
    def from_config(cls, **overrides: Any) -> "PlannerSettings":
        """Settings seeded with the presets named in the environment."""
        base = cls().with_zone_preset(Config.ZONE_PRESET).with_mech_preset(Config.MECH_PRESET)
        if not overrides:
            return base
        return cls.model_validate({**base.model_dump(), **overrides})
