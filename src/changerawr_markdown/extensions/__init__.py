"""Built-in extensions.

Registration order (ties in priority resolve to the earlier extension):
1. Core grammar: code-block, heading, thematic-break, blockquote, list,
   escape, code-span, line-break, html, image, link, emphasis, strikethrough
2. table, subtext
3. CUM directives: cum-button, cum-alert, cum-embed (when enabled)

The fallback paragraph/text rules are not listed here; the registry always
appends them last.

Example:
    >>> from changerawr_markdown.extensions import builtin_extensions
    >>> [ext.name for ext in builtin_extensions()][-3:]
    ['cum-button', 'cum-alert', 'cum-embed']

"""

from __future__ import annotations

from changerawr_markdown.config import DEFAULT_CONFIG, EngineConfig
from changerawr_markdown.extensions.core import core_extensions
from changerawr_markdown.extensions.cum import cum_extensions
from changerawr_markdown.extensions.subtext import subtext_extension
from changerawr_markdown.extensions.table import table_extension
from changerawr_markdown.rules import Extension


def builtin_extensions(config: EngineConfig = DEFAULT_CONFIG) -> tuple[Extension, ...]:
    """Built-in extensions for a configuration, in registration order."""
    extensions = [*core_extensions(), table_extension(), subtext_extension()]
    if config.cum_enabled:
        extensions.extend(cum_extensions())
    return tuple(extensions)


__all__ = [
    "builtin_extensions",
    "core_extensions",
    "cum_extensions",
    "subtext_extension",
    "table_extension",
]
