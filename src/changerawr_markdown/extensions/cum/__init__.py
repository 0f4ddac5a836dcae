"""CUM (Changerawr Universal Markup) directives.

Interactive elements layered on top of markdown:
- cum-button: inline ``[button:Text](url){options}``
- cum-alert: block ``:::type Title`` ... ``:::``
- cum-embed: block ``[embed:provider](url){key:value}``

Registered only when ``EngineConfig.cum_enabled`` is true; otherwise the
syntax stays literal text.
"""

from changerawr_markdown.extensions.cum.alert import ALERT_TYPES, alert_extension
from changerawr_markdown.extensions.cum.button import (
    BUTTON_SIZES,
    BUTTON_STYLES,
    button_extension,
    parse_button_options,
)
from changerawr_markdown.extensions.cum.embed import (
    EMBED_PROVIDERS,
    embed_extension,
    embed_src,
    parse_embed_options,
)
from changerawr_markdown.rules import Extension


def cum_extensions() -> tuple[Extension, ...]:
    """CUM directive extensions in registration order."""
    return (button_extension(), alert_extension(), embed_extension())


__all__ = [
    "ALERT_TYPES",
    "BUTTON_SIZES",
    "BUTTON_STYLES",
    "EMBED_PROVIDERS",
    "alert_extension",
    "button_extension",
    "cum_extensions",
    "embed_extension",
    "embed_src",
    "parse_button_options",
    "parse_embed_options",
]
