"""Minimal Markdown block parser.

Splits a document into a flat sequence of typed blocks (heading, fenced
code, table, text) with exact character offsets into the source, so callers
can reason about section boundaries without ad-hoc regex scans and can
splice a section back in without touching any other byte.
"""

import re
from dataclasses import dataclass

HEADING = "heading"
CODE = "code"
TABLE = "table"
TEXT = "text"

_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
_CLOSING_HASHES_RE = re.compile(r"(?:^|[ \t]+)#+$")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_TABLE_ROW_RE = re.compile(r"^ {0,3}\|")
_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")


@dataclass
class Block:
    kind: str
    start: int
    end: int
    text: str
    level: int = 0
    title: str = ""


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def _match_heading(line: str) -> tuple[int, str] | None:
    """Return (level, title) for an ATX heading line, else None."""
    m = _HEADING_RE.match(_strip_eol(line))
    if not m:
        return None
    title = _CLOSING_HASHES_RE.sub("", m.group(2) or "").strip()
    return len(m.group(1)), title


def _closes_fence(line: str, fence: str) -> bool:
    stripped = _strip_eol(line).strip()
    return (
        len(stripped) >= len(fence)
        and set(stripped) == {fence[0]}
        and len(line) - len(line.lstrip(" ")) <= 3
    )


def parse_blocks(text: str) -> list[Block]:
    """Parse markdown text into blocks, in document order.

    Pure function. Concatenating every block's text reproduces the input
    exactly. Consecutive non-special lines (including blank lines) merge into
    one text block; consecutive '|' lines merge into one table block. A
    fenced code block runs to its closing fence, or to the end of the
    document when unclosed, and nothing inside it is a heading.
    """
    blocks: list[Block] = []
    lines = _LINE_RE.findall(text)
    offset = 0
    i = 0

    def _append(kind: str, start: int, chunk: str, level: int = 0, title: str = "") -> None:
        if kind in (TEXT, TABLE) and blocks and blocks[-1].kind == kind:
            prev = blocks[-1]
            prev.text += chunk
            prev.end = start + len(chunk)
            return
        blocks.append(Block(kind, start, start + len(chunk), chunk, level, title))

    while i < len(lines):
        line = lines[i]
        # A byte-order mark must not hide a heading on the first line
        probe = line.lstrip("\ufeff") if i == 0 else line

        fence = _FENCE_RE.match(probe)
        if fence:
            marker = fence.group(1)
            chunk = line
            i += 1
            while i < len(lines):
                chunk += lines[i]
                i += 1
                if _closes_fence(lines[i - 1], marker):
                    break
            _append(CODE, offset, chunk)
            offset += len(chunk)
            continue

        heading = _match_heading(probe)
        if heading:
            _append(HEADING, offset, line, level=heading[0], title=heading[1])
        elif _TABLE_ROW_RE.match(probe):
            _append(TABLE, offset, line)
        else:
            _append(TEXT, offset, line)
        offset += len(line)
        i += 1

    return blocks


def headings(blocks: list[Block]) -> list[Block]:
    return [b for b in blocks if b.kind == HEADING]


def section_end(blocks: list[Block], index: int, max_level: int | None = None) -> int:
    """Return the end offset of the section opened by the heading at blocks[index].

    The section runs until the next heading at level <= *max_level* (default:
    the opening heading's own level), or to the end of the document.
    """
    limit = blocks[index].level if max_level is None else max_level
    for block in blocks[index + 1:]:
        if block.kind == HEADING and block.level <= limit:
            return block.start
    return blocks[-1].end if blocks else 0


def find_heading(blocks: list[Block], title: str, level: int) -> int | None:
    """Return the index of the first heading block with this exact level and title."""
    for idx, block in enumerate(blocks):
        if block.kind == HEADING and block.level == level and block.title == title:
            return idx
    return None


def detect_newline(text: str) -> str:
    """Return the document's newline sequence: '\\r\\n' if it uses CRLF, else '\\n'."""
    return "\r\n" if "\r\n" in text else "\n"
