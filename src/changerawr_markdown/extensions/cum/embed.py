"""CUM embed directive.

Syntax (one line, block level):
    [embed:youtube](https://www.youtube.com/watch?v=dQw4w9WgXcQ){autoplay:true}
    [embed:codepen](https://codepen.io/team/pen/abcde){height:500,theme:light}
    [embed:github](https://github.com/org/repo)

Providers: youtube, codepen, figma, twitter, github, generic. YouTube,
CodePen and Figma render as an iframe when the URL can be mapped to the
provider's embed endpoint; every other case renders a link card.

Options are ``key:value`` pairs separated by commas; a bare key means
``true``. Recognized keys: width, height, autoplay, theme, title.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING
from urllib.parse import quote

from changerawr_markdown.lexer.modes import BlockState
from changerawr_markdown.renderers.html import attributes, safe_href
from changerawr_markdown.rules import PRIORITY_DIRECTIVE, Extension, ParseRule, RenderRule
from changerawr_markdown.tokens import EmbedAttrs, Token, TokenKind
from changerawr_markdown.utils.text import html_escape

if TYPE_CHECKING:
    from changerawr_markdown.parser import Parser

EMBED_PROVIDERS = frozenset({"youtube", "codepen", "figma", "twitter", "github", "generic"})

_EMBED = re.compile(
    r"[ \t]{0,3}\[embed:([A-Za-z]+)\]\(([^)\s]+)\)(?:\{([^}\n]*)\})?[ \t]*(?:\n|$)"
)
_YOUTUBE_ID = re.compile(
    r"^https?://(?:www\.|m\.)?(?:youtube\.com/(?:watch\?(?:[^#]*&)?v=|embed/|shorts/)"
    r"|youtu\.be/)([\w-]{6,})"
)
_CODEPEN = re.compile(r"^https?://codepen\.io/([\w-]+)/(?:pen|embed|full)/([\w-]+)")
_FIGMA = re.compile(r"^https://(?:www\.)?figma\.com/(?:file|design|proto|board)/")
_DIMENSION = re.compile(r"\d{1,4}%?")

_DEFAULT_HEIGHT = {"youtube": "315", "codepen": "400", "figma": "450"}


def parse_embed_options(options: str | None) -> tuple[tuple[str, str], ...]:
    """Parse ``key:value`` pairs in source order.

    Example:
        >>> parse_embed_options("height:500, autoplay")
        (('height', '500'), ('autoplay', 'true'))
    """
    pairs: list[tuple[str, str]] = []
    for option in (options or "").split(","):
        key, sep, value = option.partition(":")
        key = key.strip().lower()
        if not key:
            continue
        pairs.append((key, value.strip() if sep else "true"))
    return tuple(pairs)


def _produce_embed(match: re.Match[str], parser: Parser) -> Token | None:
    provider = match.group(1).lower()
    if provider not in EMBED_PROVIDERS:
        return None
    return Token(
        TokenKind.CUM_EMBED,
        match.group(0),
        attrs=EmbedAttrs(
            provider=provider,
            url=match.group(2),
            options=parse_embed_options(match.group(3)),
        ),
    )


def embed_src(attrs: EmbedAttrs) -> str | None:
    """Provider embed URL for iframe providers, or None for a link card."""
    url = attrs.url
    if attrs.provider == "youtube":
        video = _YOUTUBE_ID.match(url)
        if video is None:
            return None
        src = f"https://www.youtube.com/embed/{video.group(1)}"
        if attrs.option("autoplay") == "true":
            src += "?autoplay=1"
        return src
    if attrs.provider == "codepen":
        pen = _CODEPEN.match(url)
        if pen is None:
            return None
        theme = "light" if attrs.option("theme") == "light" else "dark"
        return (
            f"https://codepen.io/{pen.group(1)}/embed/{pen.group(2)}"
            f"?default-tab=result&theme-id={theme}"
        )
    if attrs.provider == "figma":
        if _FIGMA.match(url) is None:
            return None
        return f"https://www.figma.com/embed?embed_host=share&url={quote(url, safe='')}"
    return None


def _dimension(value: str | None, default: str) -> str:
    if value is not None and _DIMENSION.fullmatch(value):
        return value
    return default


def _render_embed(token: Token, child_html: str) -> str:
    attrs = token.attrs
    if not isinstance(attrs, EmbedAttrs):
        return html_escape(token.raw)
    wrapper = f'<div class="cum-embed cum-embed-{attrs.provider}">'

    src = embed_src(attrs)
    if src is not None:
        pairs = (
            ("src", html_escape(src)),
            ("width", _dimension(attrs.option("width"), "100%")),
            ("height", _dimension(attrs.option("height"), _DEFAULT_HEIGHT[attrs.provider])),
            ("title", html_escape(attrs.option("title", f"{attrs.provider} embed") or "")),
            ("frameborder", "0"),
            ("loading", "lazy"),
            ("allowfullscreen", ""),
        )
        return f"{wrapper}<iframe{attributes(pairs)}></iframe></div>\n"

    href = safe_href(attrs.url)
    if href is None:
        return f"{wrapper}</div>\n"
    label = html_escape(attrs.option("title") or attrs.url)
    pairs = (
        ("href", href),
        ("class", "cum-embed-link"),
        ("target", "_blank"),
        ("rel", "noopener noreferrer"),
    )
    return f"{wrapper}<a{attributes(pairs)}>{label}</a></div>\n"


def embed_extension() -> Extension:
    return Extension(
        name="cum-embed",
        parse_rules=(
            ParseRule(
                "cum_embed",
                _EMBED,
                _produce_embed,
                PRIORITY_DIRECTIVE,
                states=frozenset({BlockState.NONE}),
            ),
        ),
        render_rules=(RenderRule(TokenKind.CUM_EMBED, _render_embed),),
    )


__all__ = ["EMBED_PROVIDERS", "embed_extension", "embed_src", "parse_embed_options"]
