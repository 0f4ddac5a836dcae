"""Line classification for the block scanner.

Pure functions: they inspect a line (and, for blank lines, the line after
it) and never touch scanner position. All patterns are anchored and
bounded to a single line.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from changerawr_markdown.lexer.modes import BlockState, LineKind

FENCE_OPEN = re.compile(r"(?P<fence>`{3,}|~{3,})(?P<info>[^\n]*)$")
LIST_MARKER = re.compile(r"(?:[-*+]|\d{1,9}[.)])(?:[ \t]|$)")
THEMATIC_BREAK = re.compile(r"(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})$")
ATX_HEADING = re.compile(r"#{1,6}(?:[ \t]|$)")
SUBTEXT = re.compile(r"-#[ \t]")
DIRECTIVE_OPEN = re.compile(r":::[A-Za-z][\w-]*")
DIRECTIVE_CLOSE = re.compile(r":::[ \t]*$")

# Indentation at which a line is content of the enclosing container
# rather than a new block.
CONTAINER_INDENT = 2
CODE_INDENT = 4


def calc_indent(line: str) -> tuple[int, int]:
    """Calculate indent level and content start position.

    Spaces count as 1, tabs expand to next multiple of 4.

    Returns:
        (indent_spaces, content_start_index)
    """
    indent = 0
    pos = 0
    line_len = len(line)
    while pos < line_len:
        char = line[pos]
        if char == " ":
            indent += 1
        elif char == "\t":
            indent += 4 - (indent % 4)
        else:
            break
        pos += 1
    return indent, pos


def is_blank(line: str) -> bool:
    return not line.strip()


def parse_fence(line: str) -> tuple[str, int, str] | None:
    """Parse a fence opening line.

    Returns:
        (fence_char, fence_length, info_string) or None when the line does
        not open a fence. Backtick fences may not carry backticks in the
        info string.
    """
    indent, start = calc_indent(line)
    if indent >= CODE_INDENT:
        return None
    match = FENCE_OPEN.match(line, start)
    if match is None:
        return None
    fence = match.group("fence")
    info = match.group("info").strip()
    if fence[0] == "`" and "`" in info:
        return None
    return fence[0], len(fence), info


def closes_fence(line: str, fence_char: str, fence_count: int) -> bool:
    """Check whether line closes a fence opened with fence_char * fence_count."""
    indent, start = calc_indent(line)
    if indent >= CODE_INDENT:
        return False
    rest = line[start:].rstrip()
    if len(rest) < fence_count:
        return False
    return rest == fence_char * len(rest)


def _starts_container_content(line: str) -> bool:
    indent, start = calc_indent(line)
    if indent >= CONTAINER_INDENT:
        return True
    return LIST_MARKER.match(line, start) is not None and not THEMATIC_BREAK.match(
        line, start
    )


def next_nonblank_indices(lines: Sequence[str]) -> list[int]:
    """Index of the first non-blank line at or after each line.

    Computed in one backward pass. The result has one extra entry for the
    end of input; ``len(lines)`` means no non-blank line follows.
    """
    result = [len(lines)] * (len(lines) + 1)
    for index in range(len(lines) - 1, -1, -1):
        result[index] = result[index + 1] if is_blank(lines[index]) else index
    return result


def classify_blank(
    lines: Sequence[str],
    index: int,
    next_nonblank: Sequence[int] | None = None,
) -> LineKind:
    """Classify a blank line by looking at the next non-blank line.

    Pass ``next_nonblank`` (from next_nonblank_indices) when classifying
    every line of a text; without it the lookahead walks the blank run.
    """
    if next_nonblank is not None:
        follow = next_nonblank[index + 1]
    else:
        follow = index + 1
        while follow < len(lines) and is_blank(lines[follow]):
            follow += 1
    if follow < len(lines) and _starts_container_content(lines[follow]):
        return LineKind.SOFT_BLANK
    return LineKind.BLANK


def classify_line(
    lines: Sequence[str],
    index: int,
    state: BlockState,
    fence: tuple[str, int] | None = None,
    next_nonblank: Sequence[int] | None = None,
) -> LineKind:
    """Classify lines[index] for the given scanner state.

    Args:
        lines: All source lines (without newlines)
        index: Index of the line to classify
        state: Current scanner state
        fence: (fence_char, fence_count) of the open fence, if any
        next_nonblank: Precomputed blank-run lookahead for the whole text

    Returns:
        LineKind for the transition table
    """
    line = lines[index]

    if state is BlockState.IN_CODE_FENCE:
        if fence is not None and closes_fence(line, fence[0], fence[1]):
            return LineKind.FENCE
        return LineKind.BLANK if is_blank(line) else LineKind.TEXT

    if is_blank(line):
        return classify_blank(lines, index, next_nonblank)

    indent, start = calc_indent(line)
    if state is BlockState.IN_LIST and indent >= CONTAINER_INDENT:
        return LineKind.INDENTED
    if indent >= CODE_INDENT:
        return LineKind.INDENTED

    if parse_fence(line) is not None:
        return LineKind.FENCE
    if DIRECTIVE_CLOSE.match(line, start):
        return LineKind.DIRECTIVE_CLOSE
    if DIRECTIVE_OPEN.match(line, start):
        return LineKind.DIRECTIVE_OPEN

    char = line[start]
    if char == ">":
        return LineKind.QUOTE
    if char == "|":
        return LineKind.TABLE_ROW
    if THEMATIC_BREAK.match(line, start):
        return LineKind.LEAF
    if LIST_MARKER.match(line, start):
        return LineKind.LIST_ITEM
    if indent < CONTAINER_INDENT and (
        ATX_HEADING.match(line, start) or SUBTEXT.match(line, start)
    ):
        return LineKind.LEAF
    if indent >= CONTAINER_INDENT:
        return LineKind.INDENTED
    return LineKind.TEXT


__all__ = [
    "ATX_HEADING",
    "CODE_INDENT",
    "CONTAINER_INDENT",
    "LIST_MARKER",
    "SUBTEXT",
    "THEMATIC_BREAK",
    "calc_indent",
    "classify_blank",
    "classify_line",
    "closes_fence",
    "is_blank",
    "next_nonblank_indices",
    "parse_fence",
]
