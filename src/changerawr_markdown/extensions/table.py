"""GFM pipe tables.

Syntax:
    | Left | Center | Right |
    |:-----|:------:|------:|
    | L    | C      | R     |

A table needs a header row immediately followed by a separator row with
one ``:?-+:?`` marker per header cell. Without one, the rule declines and
the lines are parsed as a paragraph. The header fixes the column count:
body rows are padded with empty cells or truncated. ``\\|`` keeps a
literal pipe inside a cell.

Token structure:
    table -> table_head -> table_row -> table_cell (header=True)
          -> table_body -> table_row* -> table_cell

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changerawr_markdown.lexer.modes import BlockState
from changerawr_markdown.rules import PRIORITY_CONTAINER, Extension, ParseRule, RenderRule
from changerawr_markdown.tokens import (
    Alignment,
    TableAttrs,
    TableCellAttrs,
    Token,
    TokenKind,
)
from changerawr_markdown.utils.logger import get_logger
from changerawr_markdown.utils.text import html_escape

if TYPE_CHECKING:
    from changerawr_markdown.parser import Parser

logger = get_logger(__name__)

_SEPARATOR_CELL = r"[ \t]*:?-+:?[ \t]*"
_TABLE = re.compile(
    r"(?P<head>[^\n]*\|[^\n]*)\n"
    rf"(?P<sep>[ \t]*\|?{_SEPARATOR_CELL}(?:\|{_SEPARATOR_CELL})*\|?[ \t]*)(?:\n|$)"
    r"(?P<body>(?:[^\n]*\|[^\n]*(?:\n|$))*)"
)
_ALIGNMENT_MARKER = re.compile(r":?-+:?")


def split_row(line: str) -> list[str]:
    """Split a table row into trimmed cell texts.

    Leading and trailing pipes are optional; ``\\|`` is a literal pipe.

    Example:
        >>> split_row("| a | b \\\\| c |")
        ['a', 'b | c']
    """
    row = line.strip()
    if row.startswith("|"):
        row = row[1:]
    if row.endswith("|") and not row.endswith("\\|"):
        row = row[:-1]

    cells: list[str] = []
    current: list[str] = []
    pos = 0
    row_len = len(row)
    while pos < row_len:
        char = row[pos]
        if char == "\\" and pos + 1 < row_len and row[pos + 1] == "|":
            current.append("|")
            pos += 2
            continue
        if char == "|":
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        pos += 1
    cells.append("".join(current).strip())
    return cells


def parse_alignment(marker: str) -> Alignment | None:
    """Alignment for a separator cell: ``:--`` left, ``--:`` right, ``:-:`` center."""
    left = marker.startswith(":")
    right = marker.endswith(":")
    if left and right:
        return "center"
    if right:
        return "right"
    if left:
        return "left"
    return None


def _produce_table(match: re.Match[str], parser: Parser) -> Token | None:
    headers = split_row(match.group("head"))
    markers = split_row(match.group("sep"))
    if len(markers) != len(headers) or not all(_ALIGNMENT_MARKER.fullmatch(m) for m in markers):
        logger.debug(
            "Table declined: %d header cells, %d separator cells",
            len(headers),
            len(markers),
        )
        return None

    alignments = tuple(parse_alignment(marker) for marker in markers)
    head_row = _row(parser, headers, alignments, header=True)
    body_rows = tuple(
        _row(parser, split_row(line), alignments, header=False)
        for line in match.group("body").split("\n")
        if line.strip()
    )

    return Token(
        TokenKind.TABLE,
        match.group(0),
        children=(
            Token(TokenKind.TABLE_HEAD, match.group("head"), children=(head_row,)),
            Token(TokenKind.TABLE_BODY, match.group("body"), children=body_rows),
        ),
        attrs=TableAttrs(alignments=alignments),
    )


def _row(
    parser: Parser,
    cells: list[str],
    alignments: tuple[Alignment | None, ...],
    *,
    header: bool,
) -> Token:
    width = len(alignments)
    cells = (cells + [""] * width)[:width]
    return Token(
        TokenKind.TABLE_ROW,
        " | ".join(cells),
        children=tuple(
            Token(
                TokenKind.TABLE_CELL,
                text,
                text,
                children=parser.parse_inline(text),
                attrs=TableCellAttrs(alignment=align, header=header),
            )
            for text, align in zip(cells, alignments, strict=True)
        ),
    )


def _render_cell(token: Token, child_html: str) -> str:
    attrs = token.attrs
    if not isinstance(attrs, TableCellAttrs):
        return html_escape(token.raw)
    tag = "th" if attrs.header else "td"
    style = f' style="text-align: {attrs.alignment}"' if attrs.alignment else ""
    return f"<{tag}{style}>{child_html}</{tag}>\n"


def table_extension() -> Extension:
    """Create the table extension.

    Table rows outrank paragraphs, so a header/separator pair inside a
    paragraph run starts a table.
    """
    return Extension(
        name="table",
        parse_rules=(
            ParseRule(
                "table",
                _TABLE,
                _produce_table,
                PRIORITY_CONTAINER,
                states=frozenset({BlockState.NONE, BlockState.IN_TABLE}),
            ),
        ),
        render_rules=(
            RenderRule(TokenKind.TABLE, lambda token, html: f"<table>\n{html}</table>\n"),
            RenderRule(TokenKind.TABLE_HEAD, lambda token, html: f"<thead>\n{html}</thead>\n"),
            RenderRule(TokenKind.TABLE_BODY, lambda token, html: f"<tbody>\n{html}</tbody>\n"),
            RenderRule(TokenKind.TABLE_ROW, lambda token, html: f"<tr>\n{html}</tr>\n"),
            RenderRule(TokenKind.TABLE_CELL, _render_cell),
        ),
    )


__all__ = ["parse_alignment", "split_row", "table_extension"]
