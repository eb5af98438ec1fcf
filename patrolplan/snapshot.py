"""
Map snapshot loading for planning runs.

This module turns files and text into ``ParkMapState`` snapshots:
- ``SnapshotLoader`` reads ``<name>.json`` files from a snapshot directory
- ``parse_ascii_layout`` builds a snapshot from rows of characters, handy for tests
  and for sketching a park by hand
- ``ride_classifier`` answers "is this ride a stall?" from snapshot ride metadata

Snapshot file structure:
```json
{
  "name": "Lakeside",
  "width": 12,
  "height": 6,
  "layout": ["####E###", "#......#", "###X####"],
  "legend": {"E": {"ride": 1, "kind": "entrance"}, "X": {"ride": 2, "kind": "exit"}},
  "tiles": [{"x": 3, "y": 4, "path": true, "scenery": ["bench"]}],
  "rides": {"1": {"name": "Burger Bar", "classification": "stall"}},
  "staff": {"handyman": 2, "mechanic": 1}
}
```
``layout`` and ``tiles`` may be combined; explicit tiles override layout cells.

Layout characters:
- ``.`` or space: nothing
- ``#``: footpath
- ``Q``: queue only
- ``M``: footpath and queue on one tile (excluded from the staff graph)
- ``b``: footpath with a bench, ``o``: footpath with a litter bin
- legend characters: footpath carrying the given ride entrance/exit
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from .config import Config
from .footpaths.schemas import ParkMapState, RideState, TileState

LegendEntry = Union[Tuple[int, str], Mapping[str, Any]]

_LAYOUT_TILES: Dict[str, Dict[str, Any]] = {
    "#": {"path": True},
    "Q": {"queue": True},
    "M": {"path": True, "queue": True},
    "b": {"path": True, "scenery": ["bench"]},
    "o": {"path": True, "scenery": ["litter_bin"]},
}

_STALL_KEYWORDS = ("stall", "shop")


def _legend_tile(entry: LegendEntry) -> TileState:
    if isinstance(entry, Mapping):
        ride_id = entry.get("ride", entry.get("ride_id"))
        kind = entry.get("kind", "exit")
    else:
        ride_id, kind = entry
    if ride_id is None:
        raise ValueError(f"Legend entry {entry!r} has no ride id")
    return TileState(path=True, ride_id=int(ride_id), ride_kind=kind)


def parse_ascii_layout(
    rows: Iterable[str],
    *,
    legend: Optional[Mapping[str, LegendEntry]] = None,
    rides: Optional[Mapping[int, Union[RideState, Mapping[str, Any]]]] = None,
    staff: Optional[Mapping[str, int]] = None,
) -> ParkMapState:
    """Build a snapshot from text rows; row index is y, column index is x."""

    rows = list(rows)
    legend = dict(legend or {})
    tiles: Dict[Tuple[int, int], TileState] = {}

    for y, row in enumerate(rows):
        for x, char in enumerate(row):
            if char in (".", " "):
                continue
            if char in legend:
                tiles[(x, y)] = _legend_tile(legend[char])
            elif char in _LAYOUT_TILES:
                tiles[(x, y)] = TileState(**_LAYOUT_TILES[char])
            else:
                raise ValueError(f"Unknown layout character {char!r} at ({x}, {y})")

    parsed_rides = {
        int(ride_id): ride if isinstance(ride, RideState) else RideState(**ride)
        for ride_id, ride in (rides or {}).items()
    }
    return ParkMapState(
        width=max((len(row) for row in rows), default=0),
        height=len(rows),
        tiles=tiles,
        rides=parsed_rides,
        staff=dict(staff or {}),
    )


def ride_classifier(rides: Mapping[int, RideState]):
    """Stall/shop heuristic over ride metadata.

    Returns a callable giving True when the ride's type, classification or name mentions
    a stall or shop, False otherwise, and None for rides missing from ``rides``.
    """

    def classify(ride_id: int) -> Optional[bool]:
        ride = rides.get(ride_id)
        if ride is None:
            return None
        fields = (ride.type or "", ride.classification or "", ride.name or "")
        return any(keyword in value.lower() for value in fields for keyword in _STALL_KEYWORDS)

    return classify


class SnapshotLoader:
    """Load and validate map snapshots from JSON files.

    Directory structure:
    - Default: ``Config.SNAPSHOT_DIR`` ({PROJECT_ROOT}/examples/snapshots)
    - Override via constructor: SnapshotLoader(Path("/custom/snapshots"))
    - Snapshot files: {snapshot_name}.json

    Validation raises ValueError early rather than letting a malformed file turn into
    an empty plan.
    """

    def __init__(self, snapshots_dir: Optional[Path] = None):
        self.snapshots_dir = snapshots_dir or Config.SNAPSHOT_DIR

    def load(self, snapshot_name: str) -> ParkMapState:
        """Load ``<snapshot_name>.json`` from the snapshot directory.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If required fields are missing or malformed
            json.JSONDecodeError: If the file contains invalid JSON
        """
        snapshot_path = self.snapshots_dir / f"{snapshot_name}.json"
        if not snapshot_path.exists():
            raise FileNotFoundError(
                f"Snapshot '{snapshot_name}' not found at {snapshot_path}"
            )
        return self.parse(json.loads(snapshot_path.read_text()))

    def parse(self, data: Dict[str, Any]) -> ParkMapState:
        self._validate_snapshot(data)

        base = parse_ascii_layout(
            data.get("layout", []),
            legend=data.get("legend"),
            rides={int(k): v for k, v in data.get("rides", {}).items()},
            staff=data.get("staff"),
        )
        tiles = dict(base.tiles)
        for entry in data.get("tiles", []):
            tiles[(int(entry["x"]), int(entry["y"]))] = self._parse_tile(entry)

        return ParkMapState(
            width=int(data.get("width", base.width)),
            height=int(data.get("height", base.height)),
            tiles=tiles,
            rides=base.rides,
            staff=base.staff,
        )

    def _validate_snapshot(self, data: Dict[str, Any]) -> None:
        if not isinstance(data, dict):
            raise ValueError("Snapshot must be a JSON object")

        if "layout" not in data and "tiles" not in data:
            raise ValueError("Snapshot needs a 'layout' or a 'tiles' block")

        if "layout" not in data:
            missing = [f for f in ("width", "height") if f not in data]
            if missing:
                raise ValueError(f"Snapshot without a layout is missing fields: {missing}")

        for entry in data.get("tiles", []):
            if "x" not in entry or "y" not in entry:
                raise ValueError(f"Tile entry {entry!r} needs 'x' and 'y'")

    def _parse_tile(self, entry: Dict[str, Any]) -> TileState:
        ride = entry.get("ride")
        return TileState(
            path=bool(entry.get("path", False)),
            queue=bool(entry.get("queue", False)),
            ride_id=None if ride is None else int(ride["id"]),
            ride_kind=None if ride is None else ride.get("kind", "exit"),
            scenery=list(entry.get("scenery", [])),
        )
