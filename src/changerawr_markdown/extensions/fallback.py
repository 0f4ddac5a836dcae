"""Fallback rules: paragraph (block) and text (inline).

These always match at a non-blank position and always consume at least one
character, so the scanner cannot stall. The registry appends them after
every other rule; they are never registered directly.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changerawr_markdown.registry import FALLBACK_EXTENSION
from changerawr_markdown.rules import (
    ALL_BLOCK_STATES,
    PRIORITY_FALLBACK,
    Extension,
    ParseRule,
    RenderRule,
    RuleLevel,
)
from changerawr_markdown.tokens import TokenKind
from changerawr_markdown.utils.text import html_escape

if TYPE_CHECKING:
    from changerawr_markdown.parser import Parser
    from changerawr_markdown.tokens import Token

_FIRST_LINE = re.compile(r"[^\n]*\n?")
_ANY_CHAR = re.compile(r"[\s\S]")


def _produce_paragraph(match: re.Match[str], parser: Parser) -> Token:
    return parser.consume_paragraph(match)


def _produce_text(match: re.Match[str], parser: Parser) -> Token:
    return parser.consume_text(match)


def _render_paragraph(token: Token, child_html: str) -> str:
    return f"<p>{child_html}</p>\n"


def _render_text(token: Token, child_html: str) -> str:
    return html_escape(token.content)


_EXTENSION = Extension(
    name=FALLBACK_EXTENSION,
    parse_rules=(
        ParseRule(
            name="paragraph",
            pattern=_FIRST_LINE,
            produce=_produce_paragraph,
            priority=PRIORITY_FALLBACK,
            level=RuleLevel.BLOCK,
            states=ALL_BLOCK_STATES,
        ),
        ParseRule(
            name="text",
            pattern=_ANY_CHAR,
            produce=_produce_text,
            priority=PRIORITY_FALLBACK,
            level=RuleLevel.INLINE,
        ),
    ),
    render_rules=(
        RenderRule(TokenKind.PARAGRAPH, _render_paragraph),
        RenderRule(TokenKind.TEXT, _render_text),
    ),
)


def fallback_extension() -> Extension:
    """The shared fallback extension (immutable)."""
    return _EXTENSION


__all__ = ["fallback_extension"]
