"""
Applying plans to a live park.

This module provides the ``StaffBackend`` interface the host implements, an in-memory
backend for tests and demos, and ``PlanApplier``, which walks a finished ``PatrolPlan``
and asks the backend to hire, assign patrol areas and position staff.

Core principle: every staff operation stands alone. A backend call that raises or
returns a failure is retried a bounded number of times, then written to the report's
notes; the applier carries on with the next staff member.

Capability descriptor:
    Backends declare up front what they can do (``Capabilities``). The applier branches
    on that descriptor instead of calling operations speculatively, so a host without a
    patrol API still gets a clear "preview only" note per staff member.

Usage pattern:
    backend = InMemoryStaffBackend(handymen=2)
    report = PlanApplier(backend).apply(plan)
    print(report.summary())
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from tenacity import Retrying, retry_if_result, stop_after_attempt

from .config import Config
from .logging_utils import log_error, log_info
from .schemas import Coord, PatrolPlan
from .settings import FoodCourtStaffPolicy, PlannerSettings, StaffPolicy


class StaffRole(str, Enum):
    HANDYMAN = "handyman"
    MECHANIC = "mechanic"


@dataclass(frozen=True)
class StaffRef:
    """Handle on one staff member as the backend knows them."""

    staff_id: int
    role: StaffRole
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or f"{self.role.value.title()} {self.staff_id}"


@dataclass(frozen=True)
class Capabilities:
    supports_hire: bool = False
    supports_patrol_write: bool = False
    supports_move: bool = False


@dataclass(frozen=True)
class OperationResult:
    ok: bool
    error: Optional[str] = None
    staff: Optional[StaffRef] = None

    @classmethod
    def success(cls, staff: Optional[StaffRef] = None) -> "OperationResult":
        return cls(ok=True, staff=staff)

    @classmethod
    def failure(cls, error: str) -> "OperationResult":
        return cls(ok=False, error=error)


class StaffBackend(ABC):
    """Side-effecting collaborator that owns the park's staff.

    Subclasses must report their ``capabilities`` and list staff; operations they do not
    support keep the default failing implementations.
    """

    @property
    @abstractmethod
    def capabilities(self) -> Capabilities:
        ...

    @abstractmethod
    def list_staff(self, role: StaffRole) -> List[StaffRef]:
        ...

    def hire(self, role: StaffRole) -> OperationResult:
        return OperationResult.failure("hiring is not supported")

    def set_patrol_area(self, staff: StaffRef, tiles: Sequence[Coord]) -> OperationResult:
        """Replace (not extend) ``staff``'s patrol area with ``tiles``."""
        return OperationResult.failure("patrol areas are not supported")

    def move_or_spawn(self, staff: StaffRef, coord: Coord) -> OperationResult:
        return OperationResult.failure("moving staff is not supported")


class InMemoryStaffBackend(StaffBackend):
    """Dict-backed staff roster; nothing leaves the process.

    ``failing`` lists operation names ("hire", "patrol", "move") that always fail,
    which lets tests exercise the degraded paths.
    """

    def __init__(
        self,
        *,
        handymen: int = 0,
        mechanics: int = 0,
        capabilities: Optional[Capabilities] = None,
        failing: Sequence[str] = (),
    ):
        self._capabilities = capabilities or Capabilities(True, True, True)
        self._failing = set(failing)
        self._ids = itertools.count(1)
        self.staff: Dict[int, StaffRef] = {}
        self.patrol_areas: Dict[int, List[Coord]] = {}
        self.positions: Dict[int, Coord] = {}
        self.calls: List[Tuple[str, int]] = []
        for _ in range(handymen):
            self._add(StaffRole.HANDYMAN)
        for _ in range(mechanics):
            self._add(StaffRole.MECHANIC)

    def _add(self, role: StaffRole) -> StaffRef:
        ref = StaffRef(staff_id=next(self._ids), role=role)
        self.staff[ref.staff_id] = ref
        return ref

    @property
    def capabilities(self) -> Capabilities:
        return self._capabilities

    def list_staff(self, role: StaffRole) -> List[StaffRef]:
        return [ref for ref in self.staff.values() if ref.role == role]

    def hire(self, role: StaffRole) -> OperationResult:
        self.calls.append(("hire", 0))
        if "hire" in self._failing:
            return OperationResult.failure("not enough cash")
        return OperationResult.success(self._add(role))

    def set_patrol_area(self, staff: StaffRef, tiles: Sequence[Coord]) -> OperationResult:
        self.calls.append(("patrol", staff.staff_id))
        if "patrol" in self._failing:
            return OperationResult.failure("patrol write rejected")
        self.patrol_areas[staff.staff_id] = list(tiles)
        return OperationResult.success(staff)

    def move_or_spawn(self, staff: StaffRef, coord: Coord) -> OperationResult:
        self.calls.append(("move", staff.staff_id))
        if "move" in self._failing:
            return OperationResult.failure("tile is blocked")
        self.positions[staff.staff_id] = coord
        return OperationResult.success(staff)


@dataclass
class ApplyReport:
    handymen_applied: bool = False
    mechanics_applied: bool = False
    hired: Dict[StaffRole, int] = field(default_factory=lambda: {role: 0 for role in StaffRole})
    assignments: Dict[str, List[StaffRef]] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)

    def summary(self) -> str:
        lines = [
            "Handyman zones applied (where supported)." if self.handymen_applied
            else "Handyman zones previewed only.",
            "Mechanic routes applied (where supported)." if self.mechanics_applied
            else "Mechanic routes previewed only.",
            "",
            "Notes:",
            *self.notes,
        ]
        return "\n".join(lines)


@dataclass
class _Area:
    name: str
    tiles: List[Coord]
    spawn: Coord


class PlanApplier:
    """Push a ``PatrolPlan`` onto a ``StaffBackend``, one staff member at a time."""

    def __init__(self, backend: StaffBackend, *, attempts: Optional[int] = None):
        self.backend = backend
        self.attempts = attempts if attempts is not None else Config.APPLY_RETRIES
        self._capabilities = Capabilities()

    def _call(self, description: str, operation: Callable[..., OperationResult], *args) -> OperationResult:
        """Run one backend operation with bounded retries; never raises."""

        def attempt() -> OperationResult:
            try:
                result = operation(*args)
            except Exception as exc:
                return OperationResult.failure(str(exc) or exc.__class__.__name__)
            # A bare True counts as success; any other non-result is a failure.
            if isinstance(result, OperationResult):
                return result
            if result is True:
                return OperationResult.success()
            return OperationResult.failure(f"unexpected backend result {result!r}")

        retrying = Retrying(
            stop=stop_after_attempt(max(1, self.attempts)),
            retry=retry_if_result(lambda result: not result.ok),
            retry_error_callback=lambda state: state.outcome.result(),
        )
        result = retrying(attempt)
        if not result.ok:
            log_error(f"[Apply] {description} failed: {result.error}")
        return result

    def _read_capabilities(self, report: ApplyReport) -> Capabilities:
        """Backend capabilities, or none at all when the backend cannot report them."""
        try:
            capabilities = self.backend.capabilities
        except Exception as exc:
            report.notes.append(f"Could not read backend capabilities ({exc}); preview only.")
            return Capabilities()
        if not isinstance(capabilities, Capabilities):
            report.notes.append(f"Backend reported {capabilities!r} as capabilities; preview only.")
            return Capabilities()
        return capabilities

    def _existing(self, role: StaffRole, report: ApplyReport) -> List[StaffRef]:
        try:
            return list(self.backend.list_staff(role))
        except Exception as exc:
            report.notes.append(f"Could not list {role.value} staff: {exc}")
            return []

    def _take_staff(
        self,
        role: StaffRole,
        count: int,
        pool: List[StaffRef],
        may_hire: bool,
        report: ApplyReport,
        hired: Set[int],
    ) -> List[Optional[StaffRef]]:
        """Take ``count`` staff from ``pool``, hiring the shortfall when allowed."""

        taken: List[Optional[StaffRef]] = [pool.pop(0) for _ in range(min(count, len(pool)))]
        missing = count - len(taken)
        if missing <= 0:
            return taken
        if may_hire and not self._capabilities.supports_hire:
            report.notes.append(f"Hiring is not supported; {missing} {role.value} slot(s) left unstaffed.")
        elif may_hire:
            for _ in range(missing):
                result = self._call(f"Hiring {role.value}", self.backend.hire, role)
                if result.ok and result.staff is not None:
                    taken.append(result.staff)
                    hired.add(result.staff.staff_id)
                    report.hired[role] += 1
        taken.extend([None] * (count - len(taken)))
        return taken

    def _assign(
        self,
        staff: Optional[StaffRef],
        area: _Area,
        role: StaffRole,
        settings: PlannerSettings,
        newly_hired: Set[int],
        report: ApplyReport,
    ) -> bool:
        if staff is None:
            report.notes.append(f"No {role.value} available for {area.name}.")
            return False
        report.assignments.setdefault(area.name, []).append(staff)

        capabilities = self._capabilities
        patrol_ok = False
        if capabilities.supports_patrol_write:
            patrol_ok = self._call(
                f"Patrol write for {staff.label}", self.backend.set_patrol_area, staff, area.tiles,
            ).ok
        if not patrol_ok:
            report.notes.append(f"Patrol API not available for {staff.label}; preview only.")

        is_new = staff.staff_id in newly_hired
        wants_move = settings.spawn_new_inside_zone if is_new else settings.move_existing_to_zone
        if wants_move:
            moved = capabilities.supports_move and self._call(
                f"Moving {staff.label}", self.backend.move_or_spawn, staff, area.spawn,
            ).ok
            if not moved:
                x, y = area.spawn
                report.notes.append(f"Could not move {staff.label}; please place them near {x},{y}.")
        return patrol_ok

    def apply(self, plan: PatrolPlan) -> ApplyReport:
        """Apply handyman areas, then mechanic routes. Returns what happened."""

        report = ApplyReport()
        settings = plan.settings
        newly_hired: Set[int] = set()

        if not settings.enable_handymen and not settings.enable_mechanics:
            report.notes.append("Nothing to apply: handymen and mechanics are both disabled.")
            return report
        self._capabilities = self._read_capabilities(report)

        if settings.enable_handymen:
            court_areas = [
                _Area(court.name, plan.tiles_to_coordinates(court.tiles), court.center)
                for court in plan.food_courts
                for _ in range(court.staff_needed)
            ]
            zone_areas = [
                _Area(zone.name, plan.tiles_to_coordinates(zone.tiles), zone.centroid)
                for zone in plan.zones
            ]
            if not court_areas and not zone_areas:
                report.notes.append("No handyman zones to apply.")
            else:
                pool = self._existing(StaffRole.HANDYMAN, report)
                court_staff = self._take_staff(
                    StaffRole.HANDYMAN,
                    len(court_areas),
                    pool,
                    settings.food_court_staff_insufficient == FoodCourtStaffPolicy.AUTO_HIRE,
                    report,
                    newly_hired,
                )
                zone_staff = self._take_staff(
                    StaffRole.HANDYMAN,
                    len(zone_areas),
                    pool,
                    settings.staff_insufficient == StaffPolicy.AUTO_HIRE,
                    report,
                    newly_hired,
                )
                for staff, area in zip(court_staff + zone_staff, court_areas + zone_areas):
                    if self._assign(staff, area, StaffRole.HANDYMAN, settings, newly_hired, report):
                        report.handymen_applied = True

        if settings.enable_mechanics:
            if not plan.mechanic_clusters:
                report.notes.append("No mechanic routes to apply.")
            else:
                areas = []
                for cluster in plan.mechanic_clusters:
                    first = plan.exits[cluster.exits[0]]
                    tiles = cluster.tiles or frozenset({first.node_id})
                    areas.append(_Area(cluster.name, plan.tiles_to_coordinates(tiles), first.coord))
                pool = self._existing(StaffRole.MECHANIC, report)
                mechanics = self._take_staff(
                    StaffRole.MECHANIC,
                    len(areas),
                    pool,
                    settings.staff_insufficient == StaffPolicy.AUTO_HIRE,
                    report,
                    newly_hired,
                )
                for staff, area in zip(mechanics, areas):
                    if self._assign(staff, area, StaffRole.MECHANIC, settings, newly_hired, report):
                        report.mechanics_applied = True

        report.notes[:0] = [
            f"Hired {count} {role.value}{'' if count == 1 else 's'}."
            for role, count in report.hired.items()
            if count
        ]
        log_info(
            f"[Apply] handymen={'applied' if report.handymen_applied else 'preview'}, "
            f"mechanics={'applied' if report.mechanics_applied else 'preview'}, {len(report.notes)} notes"
        )
        return report
