"""Configuration constants and environment-driven settings for workdocs.

Status markers, section headings and warning thresholds live here as plain
constants. Per-user overrides come from WORKDOCS_* environment variables via
load_settings().
"""

import os
from dataclasses import dataclass

from workdocs.errors import ConfigError

# ---------------------------------------------------------------------------
# Status markers
# ---------------------------------------------------------------------------

# Category key -> (emoji, word). Keys match the TaskTally field names.
STATUS_MARKERS = {
    "done": ("✅", "Done"),
    "in_progress": ("🚧", "In Progress"),
    "pending": ("⏳", "Pending"),
    "blocked": ("❌", "Blocked"),
}

# ---------------------------------------------------------------------------
# Document layout
# ---------------------------------------------------------------------------

PHASE_HEADING_LEVEL = 3
SUMMARY_HEADING = "Progress Summary"
SUMMARY_HEADING_LEVEL = 2

# ---------------------------------------------------------------------------
# Console warnings
# ---------------------------------------------------------------------------

BLOCKED_WARN_THRESHOLD = 0
IN_PROGRESS_WARN_THRESHOLD = 3

# ---------------------------------------------------------------------------
# Count modes
# ---------------------------------------------------------------------------

COUNT_MODE_LINE = "line"
COUNT_MODE_MARKER = "marker"
COUNT_MODES = (COUNT_MODE_LINE, COUNT_MODE_MARKER)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_DOCS_DIR = "docs/work"
DEFAULT_PLAN_FILENAME = "implementation-plan.md"
DEFAULT_PHASE_COUNT = 4


@dataclass(frozen=True)
class Settings:
    docs_dir: str = DEFAULT_DOCS_DIR
    plan_filename: str = DEFAULT_PLAN_FILENAME
    count_mode: str = COUNT_MODE_LINE
    log_file: str = ""


def validate_count_mode(mode: str) -> str:
    """Normalize a count mode name. Raises ConfigError listing valid modes."""
    normalized = (mode or "").strip().lower()
    if normalized not in COUNT_MODES:
        allowed = ", ".join(COUNT_MODES)
        raise ConfigError(f"Invalid count mode '{mode}'. Allowed modes: {allowed}")
    return normalized


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build Settings from WORKDOCS_* environment variables.

    Unset or empty variables fall back to the defaults above.
    """
    if environ is None:
        environ = dict(os.environ)
    count_mode = environ.get("WORKDOCS_COUNT_MODE", "") or COUNT_MODE_LINE
    return Settings(
        docs_dir=environ.get("WORKDOCS_DOCS_DIR", "") or DEFAULT_DOCS_DIR,
        plan_filename=environ.get("WORKDOCS_PLAN_FILENAME", "") or DEFAULT_PLAN_FILENAME,
        count_mode=validate_count_mode(count_mode),
        log_file=environ.get("WORKDOCS_LOG_FILE", ""),
    )
