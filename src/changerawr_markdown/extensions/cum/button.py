"""CUM button directive.

Syntax:
    [button:Get started](https://example.com){success,lg}
    [button:Docs](/docs){outline,self}
    [button:Soon](https://example.com){disabled}

Options are optional, comma-separated and order-independent:
- style: default, primary, secondary, success, danger, outline, ghost
- size: sm, md, lg
- flags: ``disabled`` (non-interactive), ``self`` (open in the same tab)

Unknown option words are ignored. Defaults: primary, md, new tab.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changerawr_markdown.renderers.html import attributes, safe_href
from changerawr_markdown.rules import (
    PRIORITY_DIRECTIVE,
    Extension,
    ParseRule,
    RenderRule,
    RuleLevel,
)
from changerawr_markdown.tokens import ButtonAttrs, Token, TokenKind
from changerawr_markdown.utils.logger import get_logger
from changerawr_markdown.utils.text import html_escape

if TYPE_CHECKING:
    from changerawr_markdown.parser import Parser

logger = get_logger(__name__)

BUTTON_STYLES = frozenset(
    {"default", "primary", "secondary", "success", "danger", "outline", "ghost"}
)
BUTTON_SIZES = frozenset({"sm", "md", "lg"})

_BUTTON = re.compile(r"\[button:([^\[\]\n]+)\]\(([^()\s]+)\)(?:\{([^}\n]*)\})?")


def parse_button_options(options: str | None, url: str) -> ButtonAttrs:
    """Build ButtonAttrs from the ``{...}`` option list.

    Example:
        >>> parse_button_options("lg, success, self", "https://x.com")
        ButtonAttrs(url='https://x.com', style='success', size='lg', disabled=False, target='_self')
    """
    style = "primary"
    size = "md"
    disabled = False
    target = "_blank"

    for option in (options or "").split(","):
        word = option.strip().lower()
        if not word:
            continue
        if word in BUTTON_STYLES:
            style = word
        elif word in BUTTON_SIZES:
            size = word
        elif word == "disabled":
            disabled = True
        elif word == "self":
            target = "_self"
        else:
            logger.debug("Ignoring unknown button option %r", word)

    return ButtonAttrs(url=url, style=style, size=size, disabled=disabled, target=target)


def _produce_button(match: re.Match[str], parser: Parser) -> Token | None:
    text = match.group(1).strip()
    if not text:
        return None
    return Token(
        TokenKind.CUM_BUTTON,
        match.group(0),
        text,
        attrs=parse_button_options(match.group(3), match.group(2)),
    )


def _render_button(token: Token, child_html: str) -> str:
    attrs = token.attrs
    if not isinstance(attrs, ButtonAttrs):
        return html_escape(token.raw)
    classes = f"cum-button cum-button-{attrs.style} cum-button-{attrs.size}"
    label = html_escape(token.content)

    href = None if attrs.disabled else safe_href(attrs.url)
    if href is None:
        pairs = (
            ("class", f"{classes} cum-button-disabled"),
            ("role", "link"),
            ("aria-disabled", "true"),
            ("tabindex", "-1"),
        )
        return f"<a{attributes(pairs)}>{label}</a>"

    rel = "noopener noreferrer" if attrs.target == "_blank" else None
    pairs = (("href", href), ("class", classes), ("target", attrs.target), ("rel", rel))
    return f"<a{attributes(pairs)}>{label}</a>"


def button_extension() -> Extension:
    return Extension(
        name="cum-button",
        parse_rules=(
            ParseRule(
                "cum_button",
                _BUTTON,
                _produce_button,
                PRIORITY_DIRECTIVE,
                level=RuleLevel.INLINE,
                triggers=frozenset("["),
            ),
        ),
        render_rules=(RenderRule(TokenKind.CUM_BUTTON, _render_button),),
    )


__all__ = ["BUTTON_SIZES", "BUTTON_STYLES", "button_extension", "parse_button_options"]
