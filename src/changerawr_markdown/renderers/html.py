"""HTML renderer driven by the render-rule table.

Renders a token tree depth-first: the children of a token are rendered
first, then the render rule registered for the token's kind wraps the
children's HTML. Tokens without a render rule are emitted as their escaped
source text.

Thread Safety:
HtmlRenderer holds only the immutable registry. Each render() call keeps
its state on the stack, so multiple threads can share one renderer.

"""

from __future__ import annotations

import html
from collections.abc import Iterable
from typing import TYPE_CHECKING
from urllib.parse import quote as url_quote

from changerawr_markdown.errors import MarkdownEngineError, RenderError
from changerawr_markdown.sanitize import is_dangerous_url
from changerawr_markdown.stringbuilder import StringBuilder
from changerawr_markdown.utils.logger import get_logger
from changerawr_markdown.utils.text import html_escape

if TYPE_CHECKING:
    from changerawr_markdown.registry import ExtensionRegistry
    from changerawr_markdown.tokens import Token

logger = get_logger(__name__)


def encode_url(url: str) -> str:
    """Percent-encode a URL for an attribute value.

    HTML entities are decoded first, then spaces, backslashes and non-ASCII
    characters are percent-encoded. Already-encoded sequences are kept.
    The result still needs html_escape for quotes.
    """
    decoded = html.unescape(url)
    return url_quote(decoded, safe="/:?#[]@!$&'()*+,;=-_.~%")


def safe_href(url: str) -> str | None:
    """Escaped, encoded attribute value for url, or None for unsafe schemes."""
    if is_dangerous_url(url):
        logger.debug("Dropping URL with unsafe scheme")
        return None
    return html_escape(encode_url(url))


def attributes(pairs: Iterable[tuple[str, str | None]]) -> str:
    """Format attribute pairs as `` name="value"``; None values are skipped.

    Values must already be escaped.
    """
    sb = StringBuilder()
    for name, value in pairs:
        if value is not None:
            sb.append(f' {name}="{value}"')
    return sb.build()


class HtmlRenderer:
    """Render tokens to HTML using the registry's render rules.

    Usage:
        >>> renderer = HtmlRenderer(registry)
        >>> renderer.render(parser.parse())
        '<h1 id="hello">Hello <strong>World</strong></h1>\\n'

    Thread Safety:
        Multiple threads can safely share a single HtmlRenderer instance.
    """

    __slots__ = ("_registry",)

    def __init__(self, registry: ExtensionRegistry) -> None:
        self._registry = registry

    def render(self, tokens: Iterable[Token]) -> str:
        """Render a token sequence to an HTML string."""
        sb = StringBuilder()
        for token in tokens:
            sb.append(self.render_token(token))
        return sb.build()

    def render_token(self, token: Token) -> str:
        """Render one token and its children.

        Raises:
            RenderError: If the token's render rule raises
        """
        child_html = self.render(token.children) if token.children else ""

        rule = self._registry.render_rule(token.kind)
        if rule is None:
            logger.debug("No render rule for %r; emitting escaped source", token.kind)
            return html_escape(token.raw)

        try:
            return rule.render(token, child_html)
        except MarkdownEngineError:
            raise
        except Exception as exc:
            raise RenderError(token.kind, f"{type(exc).__name__}: {exc}") from exc


__all__ = [
    "HtmlRenderer",
    "attributes",
    "encode_url",
    "safe_href",
]
