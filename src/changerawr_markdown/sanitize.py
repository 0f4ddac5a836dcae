"""HTML allow-list sanitizer.

The last pass before rendered HTML reaches a browser. Anything outside the
allow-list is removed: disallowed tags are stripped (their text kept),
event-handler attributes dropped, URLs with schemes other than http, https
and mailto removed, comments discarded. The engine applies it to every
render unconditionally.

Built on bleach's Cleaner with its CSS sanitizer, so only ``text-align``
survives in ``style`` attributes (table column alignment). Embedded
iframes keep their ``src`` only for allow-listed embed hosts.

Example:
    >>> from changerawr_markdown.sanitize import sanitize_html
    >>> sanitize_html('<p onclick="x()">Hi<script>alert(1)</script></p>')
    '<p>Hialert(1)</p>'

Thread Safety:
bleach cleaners are not thread-safe, so each thread gets its own Cleaner,
built lazily from the immutable SanitizerConfig.

"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import urlsplit

from bleach.css_sanitizer import CSSSanitizer
from bleach.sanitizer import Cleaner

from changerawr_markdown.utils.logger import get_logger
from changerawr_markdown.utils.text import html_escape

logger = get_logger(__name__)

# Zero-width and bidi override characters to strip (Trojan Source mitigation)
_NORMALIZE_UNICODE_PATTERN = re.compile(
    "[\u200b\u200c\u200d\u200e\u200f\u202a\u202b\u202c\u202d\u202e\ufeff]+"
)

_DANGEROUS_SCHEMES = ("javascript:", "data:", "vbscript:")

# Browsers ignore ASCII control characters and whitespace inside schemes.
_SCHEME_NOISE = re.compile(r"[\x00-\x20\x7f]+")

_TAG = re.compile(r"<[^>]*>")

ALLOWED_TAGS: frozenset[str] = frozenset(
    {
        # text
        "p",
        "br",
        "hr",
        "div",
        "span",
        "strong",
        "em",
        "del",
        "code",
        "pre",
        "blockquote",
        # headings
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        # lists
        "ul",
        "ol",
        "li",
        "input",
        # tables
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
        # links and media
        "a",
        "img",
        "iframe",
    }
)

ALLOWED_ATTRIBUTES: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "*": ("class",),
        "h1": ("id", "class"),
        "h2": ("id", "class"),
        "h3": ("id", "class"),
        "h4": ("id", "class"),
        "h5": ("id", "class"),
        "h6": ("id", "class"),
        "a": ("href", "title", "target", "rel", "class", "role", "aria-disabled", "tabindex"),
        "img": ("src", "alt", "title"),
        "div": ("class", "role"),
        "ol": ("start",),
        "input": ("type", "checked", "disabled"),
        "th": ("style",),
        "td": ("style",),
    }
)

IFRAME_ATTRIBUTES: frozenset[str] = frozenset(
    {"src", "width", "height", "title", "frameborder", "allow", "allowfullscreen", "loading"}
)

EMBED_HOSTS: frozenset[str] = frozenset(
    {
        "www.youtube.com",
        "www.youtube-nocookie.com",
        "codepen.io",
        "www.figma.com",
    }
)


def is_dangerous_url(url: str) -> bool:
    """Check if URL uses a dangerous scheme (javascript:, data:, vbscript:)."""
    lower = _SCHEME_NOISE.sub("", url).lower()
    return lower.startswith(_DANGEROUS_SCHEMES)


def normalize_unicode(text: str) -> str:
    """Remove zero-width and bidi override characters."""
    return _NORMALIZE_UNICODE_PATTERN.sub("", text)


@dataclass(frozen=True, slots=True)
class SanitizerConfig:
    """Allow-list for the sanitizer.

    Frozen dataclass ensures thread-safety (immutable after creation).

    Attributes:
        tags: Elements kept in the output
        attributes: Per-tag attribute allow-list (``"*"`` applies to all)
        protocols: URL schemes kept in href/src
        css_properties: CSS properties kept in style attributes
        embed_hosts: Hosts an iframe src may point at
        normalize_unicode: Strip zero-width and bidi override characters

    """

    tags: frozenset[str] = ALLOWED_TAGS
    attributes: MappingProxyType[str, tuple[str, ...]] = field(
        default_factory=lambda: ALLOWED_ATTRIBUTES
    )
    protocols: frozenset[str] = frozenset({"http", "https", "mailto"})
    css_properties: frozenset[str] = frozenset({"text-align"})
    embed_hosts: frozenset[str] = EMBED_HOSTS
    normalize_unicode: bool = True


class Sanitizer:
    """Allow-list HTML sanitizer backed by bleach.

    Usage:
            >>> sanitizer = Sanitizer()
            >>> sanitizer.sanitize('<a href="javascript:alert(1)">x</a>')
            '<a>x</a>'

    Never raises for content: a failure inside bleach is logged and the
    output degrades to tag-stripped, escaped text.

    """

    __slots__ = ("_config", "_local")

    def __init__(self, config: SanitizerConfig | None = None) -> None:
        self._config = config or SanitizerConfig()
        self._local = threading.local()

    @property
    def config(self) -> SanitizerConfig:
        return self._config

    def sanitize(self, html: str) -> str:
        """Sanitize an HTML fragment."""
        if not html:
            return ""
        if self._config.normalize_unicode:
            html = normalize_unicode(html)
        try:
            return self._cleaner().clean(html)
        except Exception:
            logger.error("HTML sanitization failed; degrading to plain text", exc_info=True)
            return html_escape(_TAG.sub("", html))

    def _cleaner(self) -> Cleaner:
        cleaner = getattr(self._local, "cleaner", None)
        if cleaner is None:
            cleaner = self._build_cleaner()
            self._local.cleaner = cleaner
        return cleaner

    def _build_cleaner(self) -> Cleaner:
        config = self._config
        embed_hosts = config.embed_hosts

        def iframe_attribute(tag: str, name: str, value: str) -> bool:
            if name == "src":
                parts = urlsplit(value)
                return parts.scheme == "https" and parts.hostname in embed_hosts
            return name in IFRAME_ATTRIBUTES

        attributes: dict[str, object] = {
            tag: list(names) for tag, names in config.attributes.items()
        }
        attributes["iframe"] = iframe_attribute

        return Cleaner(
            tags=config.tags,
            attributes=attributes,
            protocols=config.protocols,
            strip=True,
            strip_comments=True,
            css_sanitizer=CSSSanitizer(allowed_css_properties=config.css_properties),
        )


_default_sanitizer: Sanitizer | None = None
_default_lock = threading.Lock()


def sanitize_html(html: str) -> str:
    """Sanitize HTML with the default allow-list."""
    global _default_sanitizer
    sanitizer = _default_sanitizer
    if sanitizer is None:
        with _default_lock:
            if _default_sanitizer is None:
                _default_sanitizer = Sanitizer()
            sanitizer = _default_sanitizer
    return sanitizer.sanitize(html)


__all__ = [
    "ALLOWED_ATTRIBUTES",
    "ALLOWED_TAGS",
    "EMBED_HOSTS",
    "Sanitizer",
    "SanitizerConfig",
    "is_dangerous_url",
    "normalize_unicode",
    "sanitize_html",
]
