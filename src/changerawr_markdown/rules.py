"""Parse rules, render rules and extensions.

A ParseRule maps a regex match at the scan position to a Token. A RenderRule
maps a Token (plus the already-rendered HTML of its children) to an HTML
string. An Extension bundles both under a unique name; the built-in grammar
is expressed as extensions too, so every syntax goes through the same
registration path.

Priority:
Rules are evaluated in descending priority. Equal priorities keep the
order in which their extensions were registered (earlier wins). The
fallback rules (paragraph, text) sit below every other rule.

Example:
    >>> import re
    >>> from changerawr_markdown.rules import Extension, ParseRule, RenderRule, RuleLevel
    >>> from changerawr_markdown.tokens import Token
    >>> mention = Extension(
    ...     name="mention",
    ...     parse_rules=(
    ...         ParseRule(
    ...             name="mention",
    ...             pattern=re.compile(r"@(\\w+)"),
    ...             produce=lambda m, p: Token("mention", m.group(0), m.group(1)),
    ...             level=RuleLevel.INLINE,
    ...             triggers=frozenset("@"),
    ...         ),
    ...     ),
    ...     render_rules=(RenderRule("mention", lambda t, _: f"<b>@{t.content}</b>"),),
    ... )

Thread Safety:
All classes here are frozen dataclasses. ``produce`` and ``render``
callables must not keep per-call state outside the Parser they receive.

"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from changerawr_markdown.lexer.modes import BlockState

if TYPE_CHECKING:
    from changerawr_markdown.parser import Parser
    from changerawr_markdown.tokens import Token


class RuleLevel(Enum):
    """Which pass evaluates a parse rule."""

    BLOCK = "block"
    INLINE = "inline"


# Named priorities. Higher runs first.
PRIORITY_DIRECTIVE = 90
PRIORITY_HIGH = 80
PRIORITY_CONTAINER = 60
PRIORITY_DEFAULT = 50
PRIORITY_LOW = 20
PRIORITY_FALLBACK = 0

ALL_BLOCK_STATES: frozenset[BlockState] = frozenset(BlockState)

ProduceFn = Callable[[re.Match[str], "Parser"], "Token | None"]
RenderFn = Callable[["Token", str], str]


@dataclass(frozen=True, slots=True)
class ParseRule:
    """Pattern-to-token mapping.

    Attributes:
        name: Rule name, used in logs and errors
        pattern: Compiled regex, matched with ``pattern.match(text, pos)``
        produce: Builds a Token from the match, or returns None to decline.
            The token's ``raw`` is the consumed span and must be non-empty.
        priority: Higher priorities are tried first
        level: Block or inline pass
        states: Block scanner states the rule applies to (block rules only)
        triggers: First characters the rule can start with (inline rules
            only); None means the rule is tried at every position

    """

    name: str
    pattern: re.Pattern[str]
    produce: ProduceFn
    priority: int = PRIORITY_DEFAULT
    level: RuleLevel = RuleLevel.BLOCK
    states: frozenset[BlockState] = field(default=frozenset({BlockState.NONE}))
    triggers: frozenset[str] | None = None


@dataclass(frozen=True, slots=True)
class RenderRule:
    """Token-to-HTML mapping for one token kind."""

    kind: str
    render: RenderFn


@dataclass(frozen=True, slots=True)
class Extension:
    """A named bundle of parse and render rules.

    Names are unique within a registry.
    """

    name: str
    parse_rules: tuple[ParseRule, ...] = ()
    render_rules: tuple[RenderRule, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Extension name must be non-empty")


__all__ = [
    "ALL_BLOCK_STATES",
    "PRIORITY_CONTAINER",
    "PRIORITY_DEFAULT",
    "PRIORITY_DIRECTIVE",
    "PRIORITY_FALLBACK",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "Extension",
    "ParseRule",
    "ProduceFn",
    "RenderFn",
    "RenderRule",
    "RuleLevel",
]
