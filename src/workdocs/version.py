"""Version information with git commit tracking.

Reports the package version plus the commit date and short hash of the
source checkout, so an editable install can tell which code is running.
Git runs against this file's repo, not the caller's cwd (which is usually
the project whose plan is being updated).
"""

import os

from workdocs.utils import run_cmd

PACKAGE_VERSION = "0.3.0"

_REPO_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _git_output(*args: str) -> str:
    """Run a git command in the source repo. Return stripped stdout or ""."""
    result = run_cmd(["git", "-C", _REPO_DIR, *args], capture=True)
    if result.returncode != 0:
        return ""
    return result.stdout.strip()


def format_version(version: str, commit: str, date: str, dirty: bool) -> str:
    """Pure function: '0.3.0 (2026-10-18 g3a7f2c1+dirty)', or just the version without a commit."""
    if not commit:
        return version
    suffix = "+dirty" if dirty else ""
    return f"{version} ({date or 'unknown'} g{commit}{suffix})"


def get_version() -> str:
    commit = _git_output("rev-parse", "--short", "HEAD")
    date = _git_output("log", "-1", "--format=%cs") if commit else ""
    dirty = bool(_git_output("status", "--porcelain")) if commit else False
    return format_version(PACKAGE_VERSION, commit, date, dirty)
