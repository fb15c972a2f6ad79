"""Tests for phase discovery, status counting, summary rendering and splicing."""

import pytest

from workdocs.errors import ConfigError, InvalidPlanFormatError
from workdocs.progress import (
    PlanProgress,
    TaskTally,
    count_markers,
    discover_phases,
    parse_phase_title,
    percent_complete,
    render_summary,
    splice_summary,
    summarize,
    update_plan_text,
)


def _table(*statuses: str) -> str:
    rows = "".join(f"| Task {i} | {s} |\n" for i, s in enumerate(statuses, 1))
    return "| Task | Status |\n|------|--------|\n" + rows


FOUR_PHASE_PLAN = f"""\
# Implementation Plan: Login flow

**Branch:** `feature/login`

## Progress Summary

Out of date numbers that will be replaced.

## Implementation Phases

### Phase 1: Setup

{_table("✅", "✅", "⏳", "⏳")}
### Phase 2: Core Implementation

{_table("⏳", "⏳", "⏳")}
### Phase 3: Testing

{_table("⏳", "⏳", "⏳")}
### Phase 4: Documentation

{_table("⏳", "⏳", "⏳")}
## Notes

Hand-written notes must survive ✅ untouched.
"""

EXPECTED_FOUR_PHASE_SUMMARY = """\
| Phase | Title | Total | Done | In Progress | Pending | Blocked |
|-------|-------|-------|------|-------------|---------|---------|
| 1 | Setup | 4 | 2 | 0 | 2 | 0 |
| 2 | Core Implementation | 3 | 0 | 0 | 3 | 0 |
| 3 | Testing | 3 | 0 | 0 | 3 | 0 |
| 4 | Documentation | 3 | 0 | 0 | 3 | 0 |
| **TOTAL** | | **13** | **2** | **0** | **11** | **0** |

**Overall Progress: 15% (2/13 tasks)**
"""


# ============================================
# parse_phase_title
# ============================================


def test_numbered_phase_title():
    assert parse_phase_title("Phase 2: Core Implementation") == (2, "Core Implementation")


def test_multi_digit_phase_number():
    assert parse_phase_title("Phase 12: Cleanup") == (12, "Cleanup")


def test_non_numeric_phase_label_has_no_number():
    assert parse_phase_title("Phase Two: Core Implementation") == (None, "Core Implementation")


def test_non_ascii_digit_label_has_no_number():
    assert parse_phase_title("Phase \u00b2: Extra") == (None, "Extra")


def test_non_phase_title_is_rejected():
    assert parse_phase_title("Overview") is None
    assert parse_phase_title("Phase 1 without colon") is None


# ============================================
# discover_phases
# ============================================


def test_phases_are_discovered_in_document_order():
    phases = discover_phases(FOUR_PHASE_PLAN)
    assert [p.number for p in phases] == [1, 2, 3, 4]
    assert [p.title for p in phases] == ["Setup", "Core Implementation", "Testing", "Documentation"]


def test_phase_order_follows_document_not_numbers():
    text = "### Phase 3: C\n⏳\n### Phase 1: A\n✅\n### Phase 2: B\n❌\n"
    assert [p.number for p in discover_phases(text)] == [3, 1, 2]


def test_phase_span_stops_at_shallower_heading():
    phases = discover_phases(FOUR_PHASE_PLAN)
    last = phases[-1]
    span = FOUR_PHASE_PLAN[last.start:last.end]
    assert span.startswith("### Phase 4: Documentation")
    assert "## Notes" not in span


def test_phase_headings_at_other_levels_are_ignored():
    text = "## Phase 1: Too shallow\n✅\n#### Phase 2: Too deep\n✅\n"
    assert discover_phases(text) == []


def test_phase_heading_inside_code_fence_is_ignored():
    text = "### Phase 1: Real\n⏳\n```\n### Phase 2: Example only\n```\n"
    phases = discover_phases(text)
    assert len(phases) == 1
    assert phases[0].title == "Real"


# ============================================
# count_markers
# ============================================


def test_emoji_only_markers():
    span = "### Phase 1: X\n" + _table("✅", "🚧", "⏳", "❌", "⏳")
    for mode in ("line", "marker"):
        assert count_markers(span, mode) == TaskTally(done=1, in_progress=1, pending=2, blocked=1)


def test_word_only_markers():
    span = "### Phase 1: X\n" + _table("Done", "In Progress", "Pending", "Blocked", "Done")
    for mode in ("line", "marker"):
        assert count_markers(span, mode) == TaskTally(done=2, in_progress=1, pending=1, blocked=1)


def test_mixed_markers_line_mode_counts_each_task_once():
    span = "### Phase 1: X\n" + _table("✅ Done", "🚧 In Progress", "⏳ Pending", "❌ Blocked")
    tally = count_markers(span, "line")
    assert tally == TaskTally(done=1, in_progress=1, pending=1, blocked=1)
    assert tally.total == 4


def test_mixed_markers_marker_mode_counts_every_occurrence():
    span = "### Phase 1: X\n" + _table("✅ Done", "🚧 In Progress", "⏳ Pending", "❌ Blocked")
    tally = count_markers(span, "marker")
    assert tally == TaskTally(done=2, in_progress=2, pending=2, blocked=2)
    assert tally.total == 8


def test_line_mode_uses_earliest_marker_in_line():
    span = "### Phase 1: X\n| Review API | 🚧 | Pending sign-off |\n"
    assert count_markers(span, "line") == TaskTally(in_progress=1)


def test_words_must_match_whole_words():
    span = "### Phase 1: X\n| Update DoneList widget | ⏳ |\n| Unblocked parser | ✅ |\n"
    assert count_markers(span, "line") == TaskTally(done=1, pending=1)
    assert count_markers(span, "marker") == TaskTally(done=1, pending=1)


def test_words_are_case_sensitive():
    span = "### Phase 1: X\n| done lowercase | pending |\n"
    assert count_markers(span, "line").total == 0


def test_line_mode_skips_the_phase_heading_line():
    span = "### Phase 1: Done with setup\n| A | ⏳ |\n"
    assert count_markers(span, "line") == TaskTally(pending=1)
    assert count_markers(span, "marker") == TaskTally(done=1, pending=1)


def test_span_without_markers_counts_zero():
    assert count_markers("### Phase 1: Empty\n\nNothing yet.\n").total == 0


# ============================================
# percent_complete
# ============================================


def test_percent_rounds_down_below_half():
    assert percent_complete(2, 14) == 14


def test_percent_rounds_to_nearest():
    assert percent_complete(2, 13) == 15


def test_percent_rounds_half_up():
    assert percent_complete(1, 8) == 13


def test_percent_complete_and_zero():
    assert percent_complete(5, 5) == 100
    assert percent_complete(0, 7) == 0


def test_percent_is_none_without_tasks():
    assert percent_complete(0, 0) is None


# ============================================
# summarize
# ============================================


def test_four_phase_scenario_totals():
    progress = summarize(FOUR_PHASE_PLAN)
    assert progress.totals == TaskTally(done=2, in_progress=0, pending=11, blocked=0)
    assert progress.totals.total == 13
    assert progress.percent == 15


def test_conservation_per_phase_and_totals():
    text = (
        "### Phase 1: A\n" + _table("✅ Done", "🚧", "Pending", "❌")
        + "### Phase 2: B\n" + _table("Blocked", "⏳ Pending", "✅")
    )
    for mode in ("line", "marker"):
        progress = summarize(text, mode)
        for phase in progress.phases:
            t = phase.tally
            assert t.total == t.done + t.in_progress + t.pending + t.blocked
        for field_name in ("done", "in_progress", "pending", "blocked"):
            assert getattr(progress.totals, field_name) == sum(
                getattr(p.tally, field_name) for p in progress.phases
            )


def test_unnumbered_phase_is_still_counted():
    text = "### Phase 1: Setup\n| A | ✅ |\n### Phase Two: Core Implementation\n| B | ⏳ |\n| C | ⏳ |\n"
    progress = summarize(text)
    assert [p.label for p in progress.phases] == ["1", "?"]
    assert progress.totals.total == 3


def test_superscript_phase_number_is_counted_as_unnumbered():
    progress = summarize("## Progress Summary\n\n### Phase \u00b2: Extra\n| A | ✅ |\n")
    assert [p.label for p in progress.phases] == ["?"]
    assert progress.totals.done == 1


def test_no_phases_raises_invalid_format():
    with pytest.raises(InvalidPlanFormatError, match="no phases found"):
        summarize("# Plan\n\n## Progress Summary\n\n## Notes\n")


def test_unknown_count_mode_raises_config_error():
    with pytest.raises(ConfigError):
        summarize(FOUR_PHASE_PLAN, "rows")


# ============================================
# render_summary
# ============================================


def test_render_four_phase_summary():
    assert render_summary(summarize(FOUR_PHASE_PLAN)) == EXPECTED_FOUR_PHASE_SUMMARY


def test_render_without_tasks_omits_overall_line():
    progress = summarize("### Phase 1: Empty\n\nNothing yet.\n")
    rendered = render_summary(progress)
    assert "Overall Progress" not in rendered
    assert "| **TOTAL** | | **0** | **0** | **0** | **0** | **0** |" in rendered


def test_render_unnumbered_phase_shows_question_mark():
    progress = summarize("### Phase Two: Core Implementation\n| B | ⏳ |\n")
    assert "| ? | Core Implementation | 1 | 0 | 0 | 1 | 0 |" in render_summary(progress)


def test_render_escapes_pipes_in_titles():
    progress = summarize("### Phase 1: Read | Write\n| A | ✅ |\n")
    assert "| 1 | Read \\| Write | 1 | 1 | 0 | 0 | 0 |" in render_summary(progress)


def test_render_uses_requested_newline():
    rendered = render_summary(summarize(FOUR_PHASE_PLAN), "\r\n")
    assert rendered.endswith("\r\n")
    assert "\n" not in rendered.replace("\r\n", "")


def test_render_rows_follow_phase_order():
    progress = PlanProgress(phases=summarize(FOUR_PHASE_PLAN).phases[::-1], totals=TaskTally())
    rows = [line for line in render_summary(progress).split("\n") if line.startswith("| ") and line[2].isdigit()]
    assert [row.split("|")[1].strip() for row in rows] == ["4", "3", "2", "1"]


# ============================================
# splice_summary / update_plan_text
# ============================================


def test_update_replaces_summary_section():
    new_text, progress, found = update_plan_text(FOUR_PHASE_PLAN)
    assert found is True
    assert "Out of date numbers" not in new_text
    assert "## Progress Summary\n\n" + EXPECTED_FOUR_PHASE_SUMMARY + "\n## Implementation Phases" in new_text
    assert progress.percent == 15


def test_update_preserves_text_outside_summary():
    new_text, _progress, _found = update_plan_text(FOUR_PHASE_PLAN)
    head, _, _ = FOUR_PHASE_PLAN.partition("## Progress Summary")
    _, tail_marker, tail = FOUR_PHASE_PLAN.partition("## Implementation Phases")
    assert new_text.startswith(head)
    assert new_text.endswith(tail_marker + tail)


def test_update_is_idempotent():
    once, _p, _f = update_plan_text(FOUR_PHASE_PLAN)
    twice, _p, _f = update_plan_text(once)
    assert twice == once


def test_update_is_idempotent_in_marker_mode():
    once, _p, _f = update_plan_text(FOUR_PHASE_PLAN, "marker")
    twice, _p, _f = update_plan_text(once, "marker")
    assert twice == once


def test_update_preserves_crlf_line_endings():
    crlf = FOUR_PHASE_PLAN.replace("\n", "\r\n")
    new_text, _progress, found = update_plan_text(crlf)
    assert found
    assert "\n" not in new_text.replace("\r\n", "")
    assert new_text.endswith("Hand-written notes must survive ✅ untouched.\r\n")
    again, _p, _f = update_plan_text(new_text)
    assert again == new_text


def test_missing_summary_section_leaves_text_unchanged():
    text = FOUR_PHASE_PLAN.replace("## Progress Summary\n\nOut of date numbers that will be replaced.\n\n", "")
    new_text, progress, found = update_plan_text(text)
    assert found is False
    assert new_text == text
    assert progress.totals.total == 13


def test_summary_at_end_of_document():
    text = "### Phase 1: Only\n| A | ✅ |\n\n## Progress Summary\n\nold"
    new_text, _progress, found = update_plan_text(text)
    assert found
    assert new_text.endswith("**Overall Progress: 100% (1/1 tasks)**\n")
    assert update_plan_text(new_text)[0] == new_text


def test_summary_placed_after_phases_does_not_count_its_own_table():
    text = "### Phase 1: Only\n| A | ⏳ |\n\n## Progress Summary\n"
    once, progress, _found = update_plan_text(text)
    assert progress.totals.total == 1
    twice, progress, _found = update_plan_text(once)
    assert progress.totals.total == 1
    assert twice == once


def test_phases_nested_under_summary_heading_survive():
    text = "## Progress Summary\n\nold table\n\n### Phase 1: Only\n| A | ✅ |\n"
    new_text, _progress, found = update_plan_text(text)
    assert found
    assert "old table" not in new_text
    assert new_text.endswith("\n### Phase 1: Only\n| A | ✅ |\n")
    assert update_plan_text(new_text)[0] == new_text


def test_only_first_summary_section_is_replaced():
    text = "## Progress Summary\n\nfirst\n\n## Progress Summary\n\nsecond\n\n### Phase 1: A\n| x | ✅ |\n"
    new_text, _progress, _found = update_plan_text(text)
    assert "first" not in new_text
    assert "second" in new_text


def test_splice_summary_reports_missing_heading():
    text = "# Plan\n\nNo summary here.\n"
    assert splice_summary(text, "body\n") == (text, False)


def test_summary_heading_with_trailing_spaces_is_found():
    text = "## Progress Summary   \n\nold\n\n### Phase 1: A\n| x | ✅ |\n"
    new_text, _progress, found = update_plan_text(text)
    assert found
    assert new_text.startswith("## Progress Summary\n\n| Phase |")


def test_byte_order_mark_before_summary_heading_is_kept():
    text = "\ufeff## Progress Summary\n\nold\n\n## Phases\n\n### Phase 1: X\n| a | ✅ |\n"
    new_text, _progress, found = update_plan_text(text)
    assert found
    assert new_text.startswith("\ufeff## Progress Summary\n\n| Phase |")
    assert new_text.endswith("\n\n## Phases\n\n### Phase 1: X\n| a | ✅ |\n")
    assert update_plan_text(new_text)[0] == new_text
