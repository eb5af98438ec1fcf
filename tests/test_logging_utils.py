"""Tests for console logging helpers."""

from patrolplan.logging_utils import Color, colored, log_error, log_info, log_step, log_success, log_warning


def test_tags_prefix_messages(capsys, monkeypatch):
    monkeypatch.setenv("PATROLPLAN_NO_COLOR", "1")

    log_step("stage")
    log_error("failed")
    log_success("done")
    log_info("meta")
    log_warning("careful")

    assert capsys.readouterr().out.splitlines() == [
        "[•] stage",
        "[!] failed",
        "[✓] done",
        "[i] meta",
        "[?] careful",
    ]


def test_colored_wraps_text(monkeypatch):
    monkeypatch.delenv("PATROLPLAN_NO_COLOR", raising=False)

    assert colored("hi", Color.RED) == "\033[91mhi\033[0m"
    assert colored("hi", Color.GREEN, bold=True) == "\033[1m\033[92mhi\033[0m"
