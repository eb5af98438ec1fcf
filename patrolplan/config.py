"""
Patrolplan Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def _flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Application configuration loaded from environment variables."""

    # Presets applied by PlannerSettings.from_config()
    ZONE_PRESET: str = os.getenv("PATROLPLAN_ZONE_PRESET", "balanced")
    MECH_PRESET: str = os.getenv("PATROLPLAN_MECH_PRESET", "standard")

    # Attempts per staff call when applying a plan (first try included)
    APPLY_RETRIES: int = int(os.getenv("PATROLPLAN_APPLY_RETRIES", "2"))

    # Print each pipeline stage while planning
    VERBOSE: bool = _flag("PATROLPLAN_VERBOSE")

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    SNAPSHOT_DIR: Path = Path(
        os.getenv("PATROLPLAN_SNAPSHOT_DIR", str(PROJECT_ROOT / "examples" / "snapshots"))
    )

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are unusable."""
        zone_presets = {"tight", "balanced", "wide"}
        mech_presets = {"compact", "standard", "extended"}

        if cls.ZONE_PRESET not in zone_presets:
            raise ValueError(
                f"PATROLPLAN_ZONE_PRESET must be one of {sorted(zone_presets)}, got '{cls.ZONE_PRESET}'"
            )

        if cls.MECH_PRESET not in mech_presets:
            raise ValueError(
                f"PATROLPLAN_MECH_PRESET must be one of {sorted(mech_presets)}, got '{cls.MECH_PRESET}'"
            )

        if cls.APPLY_RETRIES < 1:
            raise ValueError("PATROLPLAN_APPLY_RETRIES must be at least 1")

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Patrolplan Configuration:",
            f"  Zone preset: {cls.ZONE_PRESET}",
            f"  Mechanic preset: {cls.MECH_PRESET}",
            f"  Apply attempts: {cls.APPLY_RETRIES}",
            f"  Verbose: {cls.VERBOSE}",
            f"  Snapshots: {cls.SNAPSHOT_DIR}",
        ]
        return "\n".join(lines)
