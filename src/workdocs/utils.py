"""Core utility functions: console logging and command execution."""

import os
import subprocess

from rich.console import Console

console = Console()

_log_file = ""


def set_log_file(path: str) -> None:
    """Mirror every log() line into *path* (empty string disables)."""
    global _log_file
    _log_file = os.path.expanduser(path) if path else ""


def get_log_file() -> str:
    return _log_file


def log(message: str, style: str = "") -> None:
    """Write a message to the console (with optional style) and the log file, if one is set."""
    if style:
        console.print(message, style=style)
    else:
        console.print(message)

    if not _log_file:
        return
    try:
        parent = os.path.dirname(_log_file)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(message + "\n")
    except OSError:
        pass  # Never break the command over logging


def run_cmd(
    args: list[str], capture: bool = False, quiet: bool = False, cwd: str | None = None,
) -> subprocess.CompletedProcess:
    """Run a command, optionally capturing output.

    A missing executable is reported as a failed process (returncode 127)
    rather than an exception, so callers only need to check returncode.
    """
    kwargs = {}
    if capture or quiet:
        kwargs["stdout"] = subprocess.PIPE
        kwargs["stderr"] = subprocess.PIPE
        kwargs["text"] = True
    if cwd:
        kwargs["cwd"] = cwd
    try:
        return subprocess.run(args, **kwargs)
    except FileNotFoundError as exc:
        return subprocess.CompletedProcess(args, 127, stdout="", stderr=str(exc))
