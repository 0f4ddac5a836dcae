"""Parsing subsystem.

Provides mixin classes for modular parsing functionality:
- `BlockParsingMixin`: Block candidates, block rules, paragraph fallback
- `InlineParsingMixin`: Inline rules, text fallback, text merging

Example:
    >>> from changerawr_markdown.parsing import BlockParsingMixin, InlineParsingMixin
    >>> class Parser(BlockParsingMixin, InlineParsingMixin):
    ...     pass

"""

from changerawr_markdown.parsing.blocks import BlockParsingMixin
from changerawr_markdown.parsing.inline import InlineParsingMixin

__all__ = [
    "BlockParsingMixin",
    "InlineParsingMixin",
]
