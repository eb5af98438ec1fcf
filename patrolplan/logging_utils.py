"""Logging utilities for patrol planning.

Provides color-coded console output so planning stages, successes and collaborator
failures are easy to tell apart when a build or apply runs in a terminal.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    BLUE = "\033[94m"      # Planning stages (graph, zoning, routing)
    RED = "\033[91m"       # Collaborator failures
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata
    YELLOW = "\033[93m"    # Warnings in a finished plan

    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes unless PATROLPLAN_NO_COLOR is set."""
    if os.getenv("PATROLPLAN_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


# Markers for message types (color-blind accessible)
LOG_TAG_STEP = "[•]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"
LOG_TAG_WARNING = "[?]"


def log_step(message: str) -> None:
    """Log a planning stage (blue)."""
    print(colored(f"{LOG_TAG_STEP} {message}", Color.BLUE))


def log_error(message: str) -> None:
    """Log a failed collaborator call (red)."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


def log_warning(message: str) -> None:
    """Log a plan warning (yellow)."""
    print(colored(f"{LOG_TAG_WARNING} {message}", Color.YELLOW))
