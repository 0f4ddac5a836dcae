"""
Changerawr Markdown — extensible Markdown engine with CUM directives

Turns markdown into sanitized HTML through a pluggable pipeline:
scanner/parser -> extension registry -> renderer -> sanitizer.
Ships GitHub-style tables, subtext lines, and the CUM (Changerawr
Universal Markup) directives: buttons, alerts and embeds.

Quick Start:
    >>> from changerawr_markdown import render_markdown
    >>> render_markdown("# Hello, World!")
    '<h1 id="hello-world">Hello, World!</h1>\\n'

Custom Extensions:
    >>> import re
    >>> from changerawr_markdown import (
    ...     Extension, ParseRule, RenderRule, RuleLevel, Token, register_extension,
    ... )
    >>> mention = Extension(
    ...     name="mention",
    ...     parse_rules=(
    ...         ParseRule(
    ...             "mention",
    ...             re.compile(r"@(\\w+)"),
    ...             lambda m, parser: Token("mention", m.group(0), m.group(1)),
    ...             level=RuleLevel.INLINE,
    ...             triggers=frozenset("@"),
    ...         ),
    ...     ),
    ...     render_rules=(RenderRule("mention", lambda t, _: f"<strong>@{t.content}</strong>"),),
    ... )
    >>> register_extension(mention)      # before the first render

Installation:
    pip install changerawr-markdown
"""

from changerawr_markdown.config import DEFAULT_CONFIG, EngineConfig
from changerawr_markdown.engine import (
    Engine,
    configure_engine,
    create_engine,
    get_engine,
    get_extension,
    get_extension_names,
    parse_markdown,
    register_extension,
    render_markdown,
    reset_engine_instance,
)
from changerawr_markdown.errors import (
    DuplicateExtensionError,
    EngineStateError,
    ExtensionError,
    MarkdownEngineError,
    ParseError,
    RenderError,
)
from changerawr_markdown.registry import ExtensionRegistry, ExtensionRegistryBuilder
from changerawr_markdown.rules import Extension, ParseRule, RenderRule, RuleLevel
from changerawr_markdown.sanitize import Sanitizer, SanitizerConfig, sanitize_html
from changerawr_markdown.serialization import from_dict, from_json, to_dict, to_json
from changerawr_markdown.tokens import Token, TokenKind

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "DuplicateExtensionError",
    "Engine",
    "EngineConfig",
    "EngineStateError",
    "Extension",
    "ExtensionError",
    "ExtensionRegistry",
    "ExtensionRegistryBuilder",
    "MarkdownEngineError",
    "ParseError",
    "ParseRule",
    "RenderError",
    "RenderRule",
    "RuleLevel",
    "Sanitizer",
    "SanitizerConfig",
    "Token",
    "TokenKind",
    "__version__",
    "configure_engine",
    "create_engine",
    "from_dict",
    "from_json",
    "get_engine",
    "get_extension",
    "get_extension_names",
    "parse_markdown",
    "register_extension",
    "render_markdown",
    "reset_engine_instance",
    "sanitize_html",
    "to_dict",
    "to_json",
]
