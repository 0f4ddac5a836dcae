"""Subtext: small, muted secondary lines.

Syntax:
    -# Supporting details below

Renders ``<p class="cum-subtext">`` with the text inline-parsed.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changerawr_markdown.lexer.modes import BlockState
from changerawr_markdown.rules import PRIORITY_HIGH, Extension, ParseRule, RenderRule
from changerawr_markdown.tokens import Token, TokenKind

if TYPE_CHECKING:
    from changerawr_markdown.parser import Parser

_SUBTEXT = re.compile(r"-#[ \t]+(\S[^\n]*)(?:\n|$)")


def _produce_subtext(match: re.Match[str], parser: Parser) -> Token:
    content = match.group(1).rstrip()
    return Token(
        TokenKind.SUBTEXT,
        match.group(0),
        content,
        children=parser.parse_inline(content),
    )


def subtext_extension() -> Extension:
    return Extension(
        name="subtext",
        parse_rules=(
            ParseRule(
                "subtext",
                _SUBTEXT,
                _produce_subtext,
                PRIORITY_HIGH,
                states=frozenset({BlockState.NONE}),
            ),
        ),
        render_rules=(
            RenderRule(
                TokenKind.SUBTEXT,
                lambda token, html: f'<p class="cum-subtext">{html}</p>\n',
            ),
        ),
    )


__all__ = ["subtext_extension"]
