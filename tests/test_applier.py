"""Tests for applying plans through a staff backend."""

import pytest

from patrolplan import (
    Capabilities,
    InMemoryStaffBackend,
    OperationResult,
    PlanApplier,
    PlannerSettings,
    StaffPolicy,
    StaffRole,
    build_plan,
    parse_ascii_layout,
)


def make_plan(**settings):
    snapshot = parse_ascii_layout(
        [
            "ABC###..........",
            "###############X",
            "######..........",
            "######..........",
        ],
        legend={
            "A": (1, "entrance"),
            "B": (2, "entrance"),
            "C": (3, "entrance"),
            "X": (4, "exit"),
        },
        rides={
            1: {"name": "Burger Stall", "classification": "stall"},
            2: {"name": "Drinks Stall", "classification": "stall"},
            3: {"name": "Fries Stall", "classification": "stall"},
            4: {"name": "Ferris Wheel", "classification": "ride"},
        },
    )
    return build_plan(snapshot, PlannerSettings(**settings))


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    monkeypatch.setenv("PATROLPLAN_NO_COLOR", "1")


def test_auto_hire_fills_every_area():
    plan = make_plan()
    backend = InMemoryStaffBackend(handymen=1)

    report = PlanApplier(backend).apply(plan)

    assert report.handymen_applied and report.mechanics_applied
    assert report.hired == {StaffRole.HANDYMAN: 1, StaffRole.MECHANIC: 1}
    assert report.notes == ["Hired 1 handyman.", "Hired 1 mechanic."]

    # The existing handyman takes the food court, the new one the zone.
    assert len(backend.patrol_areas[1]) == 26
    assert len(backend.patrol_areas[2]) == 9
    assert backend.patrol_areas[3] == [(15, 1)]
    assert backend.positions[1] == (0, 0)
    assert backend.positions[2] == plan.zones[0].centroid
    assert backend.positions[3] == (15, 1)
    assert [ref.staff_id for ref in report.assignments["Food Court 1"]] == [1]


def test_assign_only_existing_leaves_gaps():
    plan = make_plan(staff_insufficient=StaffPolicy.ASSIGN_ONLY_EXISTING)
    backend = InMemoryStaffBackend(handymen=1)

    report = PlanApplier(backend).apply(plan)

    assert report.handymen_applied
    assert not report.mechanics_applied
    assert "No handyman available for Zone 1." in report.notes
    assert "No mechanic available for Cluster 1." in report.notes
    assert ("hire", 0) not in backend.calls


def test_backend_without_capabilities_is_preview_only():
    plan = make_plan()
    backend = InMemoryStaffBackend(handymen=2, mechanics=1, capabilities=Capabilities())

    report = PlanApplier(backend).apply(plan)

    assert not report.handymen_applied
    assert not report.mechanics_applied
    assert backend.calls == []
    assert "Patrol API not available for Handyman 1; preview only." in report.notes
    assert "Could not move Handyman 1; please place them near 0,0." in report.notes


def test_failing_patrol_write_is_retried_then_noted(capsys):
    plan = make_plan()
    backend = InMemoryStaffBackend(handymen=2, mechanics=1, failing=["patrol"])

    report = PlanApplier(backend, attempts=3).apply(plan)

    assert backend.calls.count(("patrol", 1)) == 3
    assert not report.handymen_applied
    assert "Patrol API not available for Handyman 1; preview only." in report.notes
    # Positioning still happens for every staff member.
    assert backend.positions[1] == (0, 0)
    out = capsys.readouterr().out
    assert "[!] [Apply] Patrol write for Handyman 1 failed: patrol write rejected" in out


class ExplodingBackend(InMemoryStaffBackend):
    def move_or_spawn(self, staff, coord):
        raise RuntimeError("staff member is stuck")


def test_backend_exceptions_do_not_propagate():
    plan = make_plan()
    backend = ExplodingBackend(handymen=2, mechanics=1)

    report = PlanApplier(backend, attempts=1).apply(plan)

    assert report.handymen_applied
    assert backend.positions == {}
    assert "Could not move Mechanic 3; please place them near 15,1." in report.notes


def test_every_hire_is_attempted_even_after_failures():
    plan = make_plan()
    backend = InMemoryStaffBackend(failing=["hire"])

    report = PlanApplier(backend, attempts=2).apply(plan)

    assert backend.calls.count(("hire", 0)) == 6
    assert report.hired == {StaffRole.HANDYMAN: 0, StaffRole.MECHANIC: 0}
    assert "No handyman available for Food Court 1." in report.notes
    assert "No handyman available for Zone 1." in report.notes
    assert "No mechanic available for Cluster 1." in report.notes


def test_summary_text():
    plan = make_plan(enable_mechanics=False)
    report = PlanApplier(InMemoryStaffBackend(handymen=2)).apply(plan)

    assert report.summary().splitlines()[:3] == [
        "Handyman zones applied (where supported).",
        "Mechanic routes previewed only.",
        "",
    ]


def test_operation_result_helpers():
    assert OperationResult.success().ok
    failure = OperationResult.failure("nope")
    assert not failure.ok and failure.error == "nope"


def test_nothing_enabled_is_a_noop():
    plan = make_plan(enable_handymen=False, enable_mechanics=False)
    backend = InMemoryStaffBackend(handymen=1)

    report = PlanApplier(backend).apply(plan)

    assert report.notes == ["Nothing to apply: handymen and mechanics are both disabled."]
    assert backend.calls == []


class BoolBackend(InMemoryStaffBackend):
    def set_patrol_area(self, staff, tiles):
        super().set_patrol_area(staff, tiles)
        return True

    def move_or_spawn(self, staff, coord):
        self.calls.append(("move", staff.staff_id))
        return "ok"


def test_non_result_backend_returns_are_normalised():
    plan = make_plan()
    backend = BoolBackend(handymen=2, mechanics=1)

    report = PlanApplier(backend, attempts=2).apply(plan)

    assert report.handymen_applied and report.mechanics_applied
    assert len(backend.patrol_areas[1]) == 26
    assert backend.calls.count(("move", 1)) == 2
    assert "Could not move Handyman 1; please place them near 0,0." in report.notes


class NoCapabilitiesBackend(InMemoryStaffBackend):
    @property
    def capabilities(self):
        raise RuntimeError("roster offline")


def test_unreadable_capabilities_fall_back_to_preview():
    plan = make_plan()
    backend = NoCapabilitiesBackend(handymen=2, mechanics=1)

    report = PlanApplier(backend).apply(plan)

    assert not report.handymen_applied
    assert not report.mechanics_applied
    assert report.notes[0] == "Could not read backend capabilities (roster offline); preview only."
    assert backend.calls == []
    assert "Patrol API not available for Handyman 1; preview only." in report.notes
