"""Implementation-plan progress: phase discovery, status tallies, summary rewrite.

A plan document groups tasks under '### Phase N: Title' headings. Each task
line carries a status marker (emoji or word). update_plan() counts the
markers per phase and regenerates the '## Progress Summary' section in place,
leaving every other byte of the file untouched.

Everything except read_plan/write_plan_atomic/update_plan is a pure function
over text so it can be tested without touching the filesystem.
"""

import os
import re
import tempfile
from dataclasses import dataclass, field

from workdocs.config import (
    COUNT_MODE_LINE,
    COUNT_MODE_MARKER,
    PHASE_HEADING_LEVEL,
    STATUS_MARKERS,
    SUMMARY_HEADING,
    SUMMARY_HEADING_LEVEL,
    validate_count_mode,
)
from workdocs.errors import InvalidPlanFormatError, PlanNotFoundError, PlanWriteError
from workdocs.markdown import HEADING, Block, detect_newline, find_heading, headings, parse_blocks, section_end

_PHASE_TITLE_RE = re.compile(r"^Phase\s+([^:]+?)\s*:\s*(.*)$")


def _build_marker_re() -> re.Pattern:
    """One alternation with a named group per status category."""
    parts = []
    for category, (emoji, word) in STATUS_MARKERS.items():
        word_pattern = r"[ \t]+".join(re.escape(w) for w in word.split())
        parts.append(f"(?P<{category}>{re.escape(emoji)}|(?<!\\w){word_pattern}(?!\\w))")
    return re.compile("|".join(parts))


_MARKER_RE = _build_marker_re()


# ============================================
# Data model
# ============================================


@dataclass
class TaskTally:
    """Task counts per status. ``total`` is always the sum of the four counts."""

    done: int = 0
    in_progress: int = 0
    pending: int = 0
    blocked: int = 0

    @property
    def total(self) -> int:
        return self.done + self.in_progress + self.pending + self.blocked

    def add(self, category: str, count: int = 1) -> None:
        setattr(self, category, getattr(self, category) + count)

    def __add__(self, other: "TaskTally") -> "TaskTally":
        return TaskTally(
            done=self.done + other.done,
            in_progress=self.in_progress + other.in_progress,
            pending=self.pending + other.pending,
            blocked=self.blocked + other.blocked,
        )


@dataclass
class Phase:
    number: int | None
    title: str
    start: int
    end: int
    tally: TaskTally = field(default_factory=TaskTally)

    @property
    def label(self) -> str:
        return "?" if self.number is None else str(self.number)


@dataclass
class PlanProgress:
    phases: list[Phase]
    totals: TaskTally

    @property
    def percent(self) -> int | None:
        return percent_complete(self.totals.done, self.totals.total)


@dataclass
class UpdateResult:
    path: str
    progress: PlanProgress
    section_found: bool
    changed: bool
    written: bool


# ============================================
# Parsing and counting (pure functions)
# ============================================


def parse_phase_title(title: str) -> tuple[int | None, str] | None:
    """Split a heading title like 'Phase 2: Core' into (2, 'Core').

    Returns None when the title is not a phase heading at all. A non-numeric
    label ('Phase Two: Core') yields (None, 'Core').
    """
    m = _PHASE_TITLE_RE.match(title)
    if not m:
        return None
    label = m.group(1).strip()
    number = int(label) if label.isascii() and label.isdigit() else None
    return number, m.group(2).strip()


def discover_phases(text: str, blocks: list[Block] | None = None) -> list[Phase]:
    """Return phases in document order with their spans (tallies left empty).

    A phase span runs from its heading to the next heading at the same or a
    shallower level, or to the end of the document.
    """
    if blocks is None:
        blocks = parse_blocks(text)
    phases = []
    for idx, block in enumerate(blocks):
        if block.kind != HEADING or block.level != PHASE_HEADING_LEVEL:
            continue
        parsed = parse_phase_title(block.title)
        if parsed is None:
            continue
        number, title = parsed
        phases.append(Phase(
            number=number,
            title=title,
            start=block.start,
            end=section_end(blocks, idx),
        ))
    return phases


def count_markers(span: str, count_mode: str = COUNT_MODE_LINE) -> TaskTally:
    """Tally status markers in a phase span.

    Pure function. Two disciplines:

    - ``line``: the span's first line (the phase heading) is skipped, and
      every other line holding at least one marker counts once, classified
      by its earliest marker. '✅ Done' is one done task.
    - ``marker``: every marker occurrence in the span counts, emoji and word
      independently. '✅ Done' is two done tasks.
    """
    tally = TaskTally()
    if count_mode == COUNT_MODE_MARKER:
        for m in _MARKER_RE.finditer(span):
            tally.add(m.lastgroup)
        return tally

    for line in span.split("\n")[1:]:
        m = _MARKER_RE.search(line)
        if m:
            tally.add(m.lastgroup)
    return tally


def percent_complete(done: int, total: int) -> int | None:
    """Return round(100 * done / total) with halves rounded up, or None when total is 0."""
    if total <= 0:
        return None
    return (200 * done + total) // (2 * total)


def summarize(text: str, count_mode: str = COUNT_MODE_LINE, blocks: list[Block] | None = None) -> PlanProgress:
    """Discover phases, tally each one, and sum the grand totals.

    Raises InvalidPlanFormatError when the document has no phase headings.
    """
    count_mode = validate_count_mode(count_mode)
    phases = discover_phases(text, blocks)
    if not phases:
        raise InvalidPlanFormatError(
            "no phases found",
            user_message="No phases found: expected headings like '### Phase 1: Setup'.",
        )
    totals = TaskTally()
    for phase in phases:
        phase.tally = count_markers(text[phase.start:phase.end], count_mode)
        totals = totals + phase.tally
    return PlanProgress(phases=phases, totals=totals)


# ============================================
# Rendering and splicing (pure functions)
# ============================================


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|")


def render_summary(progress: PlanProgress, newline: str = "\n") -> str:
    """Render the summary table (and overall progress line) as Markdown.

    Returns text ending with a newline. The overall progress line is omitted
    when there are no tasks.
    """
    lines = [
        "| Phase | Title | Total | Done | In Progress | Pending | Blocked |",
        "|-------|-------|-------|------|-------------|---------|---------|",
    ]
    for phase in progress.phases:
        t = phase.tally
        lines.append(
            f"| {phase.label} | {_escape_cell(phase.title)} | {t.total} | {t.done} "
            f"| {t.in_progress} | {t.pending} | {t.blocked} |"
        )
    t = progress.totals
    lines.append(
        f"| **TOTAL** | | **{t.total}** | **{t.done}** | **{t.in_progress}** "
        f"| **{t.pending}** | **{t.blocked}** |"
    )
    if progress.percent is not None:
        lines.append("")
        lines.append(f"**Overall Progress: {progress.percent}% ({t.done}/{t.total} tasks)**")
    return newline.join(lines) + newline


def _summary_span(blocks: list[Block], index: int) -> int:
    """End offset of the Progress Summary section starting at blocks[index].

    The section stops at the next heading of level <= 2, and also at any
    phase heading, so phases nested directly under the summary survive.
    """
    end = section_end(blocks, index, max_level=SUMMARY_HEADING_LEVEL)
    for block in headings(blocks[index + 1:]):
        if block.start >= end:
            break
        if block.level == PHASE_HEADING_LEVEL and parse_phase_title(block.title) is not None:
            return block.start
    return end


def splice_summary(text: str, body: str, blocks: list[Block] | None = None) -> tuple[str, bool]:
    """Replace the first '## Progress Summary' section with *body*.

    Returns (new_text, found). When the heading is missing the text comes
    back unchanged with found=False.
    """
    if blocks is None:
        blocks = parse_blocks(text)
    index = find_heading(blocks, SUMMARY_HEADING, SUMMARY_HEADING_LEVEL)
    if index is None:
        return text, False

    newline = detect_newline(text)
    start = blocks[index].start
    if start == 0 and text.startswith("\ufeff"):
        start = 1
    end = _summary_span(blocks, index)
    section = f"{'#' * SUMMARY_HEADING_LEVEL} {SUMMARY_HEADING}{newline}{newline}{body}"
    if end < len(text):
        section += newline
    return text[:start] + section + text[end:], True


def update_plan_text(text: str, count_mode: str = COUNT_MODE_LINE) -> tuple[str, PlanProgress, bool]:
    """Recompute the Progress Summary of a plan document.

    Pure function: returns (new_text, progress, section_found).
    """
    blocks = parse_blocks(text)
    progress = summarize(text, count_mode, blocks)
    body = render_summary(progress, detect_newline(text))
    new_text, found = splice_summary(text, body, blocks)
    return new_text, progress, found


# ============================================
# File I/O
# ============================================


def read_plan(path: str) -> str:
    """Read a plan file as UTF-8 without newline translation."""
    if not os.path.isfile(path):
        raise PlanNotFoundError(f"Plan file not found: {path}", path=path)
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise PlanNotFoundError(f"Cannot read plan file {path}: {exc}", path=path) from exc


def write_plan_atomic(path: str, content: str) -> None:
    """Write *content* to a temp file beside *path*, then rename it over *path*.

    The original file's permission bits are kept. On failure the original is
    left as it was and PlanWriteError is raised.
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = ""
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=directory, prefix=f".{os.path.basename(path)}.", suffix=".tmp",
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if os.path.exists(path):
            os.chmod(tmp_path, os.stat(path).st_mode & 0o7777)
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise PlanWriteError(f"Failed to write plan file {path}: {exc}", path=path) from exc


def update_plan(path: str, *, count_mode: str = COUNT_MODE_LINE, dry_run: bool = False) -> UpdateResult:
    """Recompute and rewrite the Progress Summary section of the plan at *path*.

    Raises PlanNotFoundError, InvalidPlanFormatError or PlanWriteError. A
    missing Progress Summary heading is reported through
    ``section_found=False`` and nothing is written. The file is only
    rewritten when its content actually changes.
    """
    text = read_plan(path)
    new_text, progress, found = update_plan_text(text, count_mode)
    changed = found and new_text != text
    written = False
    if changed and not dry_run:
        write_plan_atomic(path, new_text)
        written = True
    return UpdateResult(
        path=path,
        progress=progress,
        section_found=found,
        changed=changed,
        written=written,
    )
