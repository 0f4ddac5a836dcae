"""Rule-driven parser producing a token tree.

Architecture:
The parser uses a mixin-based design for separation of concerns:
- `BlockParsingMixin`: Block scanner candidates and block rules
- `InlineParsingMixin`: Inline rules and text runs

The Parser is also the context handed to every rule's ``produce``
callable, which uses it to recurse (``parse_blocks``, ``parse_inline``)
and to allocate document-unique heading slugs (``unique_slug``).

Thread Safety:
Parser instances are single-use and not thread-safe. Create one per
parse operation. The registry it reads is immutable and the resulting
tokens are frozen, so both are safe to share.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from changerawr_markdown.config import DEFAULT_CONFIG, EngineConfig
from changerawr_markdown.parsing import BlockParsingMixin, InlineParsingMixin
from changerawr_markdown.parsing.delimiters import DelimiterIndex
from changerawr_markdown.utils.text import slugify

if TYPE_CHECKING:
    from changerawr_markdown.registry import ExtensionRegistry
    from changerawr_markdown.rules import ParseRule
    from changerawr_markdown.tokens import Token


class Parser(BlockParsingMixin, InlineParsingMixin):
    """Markdown parser driven by an ExtensionRegistry.

    Usage:
            >>> parser = Parser("# Hello\\n\\nWorld", registry)
            >>> tokens = parser.parse()
            >>> tokens[0].kind
            'heading'

    """

    __slots__ = (
        "_source",
        "_registry",
        "_max_nesting",
        "_depth",
        "_inline_depth",
        "_active_rules",
        "_slugs",
        "_delimiters",
    )

    def __init__(
        self,
        source: str,
        registry: ExtensionRegistry,
        config: EngineConfig = DEFAULT_CONFIG,
    ) -> None:
        """Initialize parser with source and registry.

        Args:
            source: Markdown source text
            registry: Rules to parse with
            config: Engine configuration (nesting limit)
        """
        self._source = source.replace("\r\n", "\n").replace("\r", "\n")
        self._registry = registry
        self._max_nesting = max(1, config.max_nesting)
        self._depth = 0
        self._inline_depth = 0
        self._active_rules: tuple[ParseRule, ...] = ()
        self._slugs: dict[str, int] = {}
        self._delimiters: dict[str, DelimiterIndex] = {}

    @property
    def source(self) -> str:
        return self._source

    @property
    def registry(self) -> ExtensionRegistry:
        return self._registry

    def parse(self) -> list[Token]:
        """Parse the source into a list of block tokens."""
        return list(self.parse_blocks(self._source))

    def unique_slug(self, text: str) -> str:
        """Return a slug for text that is unique within this document.

        Repeated slugs get ``-1``, ``-2``... suffixes.
        """
        base = slugify(text) or "section"
        count = self._slugs.get(base, 0)
        self._slugs[base] = count + 1
        if count == 0:
            return base
        slug = f"{base}-{count}"
        while slug in self._slugs:
            count += 1
            slug = f"{base}-{count}"
        self._slugs[slug] = 1
        return slug


__all__ = ["Parser"]
