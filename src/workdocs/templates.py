"""Document templates.

Each constant is a format string. Use .format() to interpolate variables
before writing the file.
"""

IMPLEMENTATION_PLAN_TEMPLATE = """\
# Implementation Plan: {title}

**Branch:** `{branch}`
**Created:** {created}

## Progress Summary

## Overview

Describe the goal of this work and the approach in a few sentences.

## Implementation Phases

Status legend: ✅ Done · 🚧 In Progress · ⏳ Pending · ❌ Blocked

{phases}
## Notes

Decisions, open questions and links go here.
"""

PHASE_TEMPLATE = """\
### Phase {number}: {title}

| Task | Status | Notes |
|------|--------|-------|
| Define tasks for this phase | ⏳ | |
"""
