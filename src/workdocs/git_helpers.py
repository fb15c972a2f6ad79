"""Git helpers: current branch lookup and per-branch plan path derivation."""

import os
from collections.abc import Callable

from workdocs.errors import PlanNotFoundError
from workdocs.utils import run_cmd

BranchResolver = Callable[[], str]

_MISSING_PLAN_HINT = "create a plan file first or specify correct path"


def parse_branch_output(output: str) -> str:
    """Extract the branch name from 'git rev-parse --abbrev-ref HEAD' output.

    Pure function: returns "" for empty output and for a detached HEAD,
    which git reports as the literal 'HEAD'.
    """
    branch = output.strip().split("\n")[0].strip() if output.strip() else ""
    if branch == "HEAD":
        return ""
    return branch


def get_current_branch(cwd: str | None = None) -> str:
    """Return the checked-out branch name, or "" outside a git repository."""
    result = run_cmd(["git", "rev-parse", "--abbrev-ref", "HEAD"], capture=True, cwd=cwd)
    if result.returncode != 0:
        return ""
    return parse_branch_output(result.stdout)


def default_plan_path(branch: str, docs_dir: str, plan_filename: str) -> str:
    """Build docs/work/<branch>/implementation-plan.md for a branch.

    Pure function. Branch names with slashes (feature/login) become nested
    folders, mirroring how the branch is displayed.
    """
    return os.path.join(docs_dir, *branch.split("/"), plan_filename)


def resolve_plan_path(
    path: str | None,
    branch_resolver: BranchResolver,
    docs_dir: str,
    plan_filename: str,
) -> str:
    """Return the plan path to operate on.

    An explicit *path* always wins. Otherwise the path is derived from the
    branch that *branch_resolver* reports. Raises PlanNotFoundError when no
    branch is available.
    """
    if path:
        return os.path.expanduser(path)
    branch = branch_resolver()
    if not branch:
        raise PlanNotFoundError(
            "Cannot derive plan path: no git branch found",
            user_message=f"Not on a git branch; {_MISSING_PLAN_HINT}.",
        )
    return default_plan_path(branch, docs_dir, plan_filename)


def missing_plan_message(path: str) -> str:
    """Actionable message for a plan file that does not exist."""
    return f"Plan file not found: {path} ({_MISSING_PLAN_HINT})"
