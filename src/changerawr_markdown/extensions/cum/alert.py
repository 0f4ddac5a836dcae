"""CUM alert directive.

Syntax:
    :::warning Heads up
    This release drops **Python 3.10**.
    :::

The open marker names the type (info, warning, error, success, tip) and an
optional title. The body runs to a ``:::`` line or the first blank line and
is parsed as blocks. Unknown types are not alerts; the lines stay text.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changerawr_markdown.lexer.modes import BlockState
from changerawr_markdown.rules import PRIORITY_DIRECTIVE, Extension, ParseRule, RenderRule
from changerawr_markdown.tokens import AlertAttrs, Token, TokenKind
from changerawr_markdown.utils.text import html_escape

if TYPE_CHECKING:
    from changerawr_markdown.parser import Parser

ALERT_TYPES = frozenset({"info", "warning", "error", "success", "tip"})

_ALERT = re.compile(
    r"[ \t]{0,3}:::(info|warning|error|success|tip)(?:[ \t]+([^\n]*?))?[ \t]*(?:\n|$)([\s\S]*)"
)
_CLOSE = re.compile(r"[ \t]{0,3}:::[ \t]*")


def _produce_alert(match: re.Match[str], parser: Parser) -> Token:
    lines = match.group(3).split("\n")
    while lines and not lines[-1].strip():
        lines.pop()
    if lines and _CLOSE.fullmatch(lines[-1]):
        lines.pop()

    title = match.group(2) or None
    return Token(
        TokenKind.CUM_ALERT,
        match.group(0),
        children=parser.parse_blocks("\n".join(lines)),
        attrs=AlertAttrs(alert_type=match.group(1), title=title),
    )


def _render_alert(token: Token, child_html: str) -> str:
    attrs = token.attrs
    if not isinstance(attrs, AlertAttrs):
        return html_escape(token.raw)
    title = (
        f'<p class="cum-alert-title">{html_escape(attrs.title)}</p>\n' if attrs.title else ""
    )
    return (
        f'<div class="cum-alert cum-alert-{attrs.alert_type}" role="alert">\n'
        f"{title}{child_html}</div>\n"
    )


def alert_extension() -> Extension:
    return Extension(
        name="cum-alert",
        parse_rules=(
            ParseRule(
                "cum_alert",
                _ALERT,
                _produce_alert,
                PRIORITY_DIRECTIVE,
                states=frozenset({BlockState.IN_DIRECTIVE}),
            ),
        ),
        render_rules=(RenderRule(TokenKind.CUM_ALERT, _render_alert),),
    )


__all__ = ["ALERT_TYPES", "alert_extension"]
