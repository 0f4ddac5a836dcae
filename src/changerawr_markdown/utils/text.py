"""Text processing utilities.

Provides canonical implementations for slugification and HTML escaping.

Example:
    >>> from changerawr_markdown.utils.text import slugify
    >>> slugify("Hello World!")
    'hello-world'
"""

from __future__ import annotations

import html as html_module
import re

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[-\s]+")


def slugify(text: str, unescape_html: bool = True, separator: str = "-") -> str:
    """Convert text to a URL-safe slug with Unicode support.

    Args:
        text: Text to slugify
        unescape_html: Whether to decode HTML entities first (e.g., &amp; -> &)
        separator: Character to use between words (default: '-')

    Returns:
        Lowercase slug of Unicode word characters joined by separator

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("Test &amp; Code")
        'test-code'
        >>> slugify("Café")
        'café'
    """
    if not text:
        return ""

    if unescape_html:
        text = html_module.unescape(text)

    text = text.lower().strip()
    text = _NON_WORD.sub("", text)
    text = _SEPARATORS.sub(separator, text)
    return text.strip(separator)


def html_escape(text: str) -> str:
    """Escape text for element content and double-quoted attributes.

    Escapes ``<``, ``>``, ``&`` and ``"`` but leaves single quotes alone;
    every attribute the renderer writes is double-quoted.

    Examples:
        >>> html_escape('<a href="x">')
        '&lt;a href=&quot;x&quot;&gt;'
    """
    if not text:
        return ""
    return html_module.escape(text, quote=False).replace('"', "&quot;")
