"""Extension registry: priority-ordered parse rules and the render-rule table.

The registry is assembled once from a sequence of extensions and never
changes afterwards. Parse rules are stable-sorted by descending priority,
so equal priorities keep registration order (earlier registration wins).
The reserved ``fallback`` extension (paragraph and text) is always placed
after every other rule.

Thread Safety:
ExtensionRegistry is immutable after creation. Safe to share.
Use ExtensionRegistryBuilder for mutable construction.

Example:
    >>> builder = ExtensionRegistryBuilder()
    >>> builder.register_all(builtin_extensions())
    >>> registry = builder.build()
    >>> "table" in registry
    True
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from types import MappingProxyType
from typing import TYPE_CHECKING

from changerawr_markdown.errors import DuplicateExtensionError
from changerawr_markdown.lexer.modes import BlockState
from changerawr_markdown.rules import Extension, ParseRule, RenderRule, RuleLevel

if TYPE_CHECKING:
    from collections.abc import Mapping

FALLBACK_EXTENSION = "fallback"
FALLBACK_KINDS = ("paragraph", "text")


class ExtensionRegistry:
    """Immutable, priority-ordered view of registered extensions.

    Block rules are pre-grouped per scanner state and inline rules are
    pre-grouped per trigger character, so the parser never sorts or filters
    on the hot path.

    Thread Safety:
        Immutable after creation. Safe to share across threads.
    """

    __slots__ = (
        "_extensions",
        "_by_name",
        "_block_rules",
        "_inline_rules",
        "_inline_by_trigger",
        "_inline_untriggered",
        "_trigger_pattern",
        "_render_rules",
    )

    def __init__(self, extensions: tuple[Extension, ...]) -> None:
        """Initialize registry from extensions in registration order.

        The last extension must be the fallback. Use ExtensionRegistryBuilder
        to create instances.
        """
        self._extensions = extensions
        self._by_name = MappingProxyType({ext.name: ext for ext in extensions})

        ordered = _order_rules(extensions)
        block = [rule for rule in ordered if rule.level is RuleLevel.BLOCK]
        inline = [rule for rule in ordered if rule.level is RuleLevel.INLINE]

        self._block_rules: Mapping[BlockState, tuple[ParseRule, ...]] = MappingProxyType(
            {
                state: tuple(rule for rule in block if state in rule.states)
                for state in BlockState
            }
        )
        self._inline_rules = tuple(inline)

        # Per trigger character: triggered rules for that character merged
        # with untriggered rules, still in priority order.
        triggers = {char for rule in inline if rule.triggers for char in rule.triggers}
        self._inline_by_trigger: Mapping[str, tuple[ParseRule, ...]] = MappingProxyType(
            {
                char: tuple(
                    rule for rule in inline if rule.triggers is None or char in rule.triggers
                )
                for char in triggers
            }
        )
        self._inline_untriggered = tuple(rule for rule in inline if rule.triggers is None)
        self._trigger_pattern = (
            re.compile("[" + "".join(re.escape(c) for c in sorted(triggers)) + "]")
            if triggers
            else None
        )

        render: dict[str, RenderRule] = {}
        for ext in extensions:
            for rule in ext.render_rules:
                render[rule.kind] = rule
        self._render_rules: Mapping[str, RenderRule] = MappingProxyType(render)

    def get(self, name: str) -> Extension | None:
        """Get an extension by name.

        Returns:
            The extension if registered, None otherwise
        """
        return self._by_name.get(name)

    @property
    def names(self) -> tuple[str, ...]:
        """Registered extension names in registration order (fallback last)."""
        return tuple(ext.name for ext in self._extensions)

    @property
    def extensions(self) -> tuple[Extension, ...]:
        return self._extensions

    def block_rules(self, state: BlockState) -> tuple[ParseRule, ...]:
        """Block rules applicable in a scanner state, highest priority first."""
        return self._block_rules[state]

    @property
    def inline_rules(self) -> tuple[ParseRule, ...]:
        """All inline rules, highest priority first."""
        return self._inline_rules

    def inline_rules_for(self, char: str) -> tuple[ParseRule, ...]:
        """Inline rules worth trying at a position starting with ``char``."""
        return self._inline_by_trigger.get(char, self._inline_untriggered)

    @property
    def trigger_chars(self) -> frozenset[str]:
        return frozenset(self._inline_by_trigger)

    @property
    def trigger_pattern(self) -> re.Pattern[str] | None:
        """Character class matching any inline trigger character."""
        return self._trigger_pattern

    @property
    def has_untriggered_inline(self) -> bool:
        """True when a non-fallback inline rule must be tried at every position."""
        return any(r.name != "text" for r in self._inline_untriggered)

    def render_rule(self, kind: str) -> RenderRule | None:
        """Get the render rule for a token kind, or None."""
        return self._render_rules.get(kind)

    @property
    def render_kinds(self) -> frozenset[str]:
        return frozenset(self._render_rules)

    def __contains__(self, name: object) -> bool:
        """Support 'name in registry' syntax."""
        return name in self._by_name

    def __len__(self) -> int:
        """Number of registered extensions, fallback included."""
        return len(self._extensions)

    def __repr__(self) -> str:
        return f"ExtensionRegistry({', '.join(self.names)})"


class ExtensionRegistryBuilder:
    """Mutable builder for ExtensionRegistry.

    Register extensions, then call build() to create an immutable registry.
    Duplicate extension names are rejected, and so is a second render rule
    for a token kind another extension already renders.

    Example:
        >>> builder = ExtensionRegistryBuilder()
        >>> builder.register(my_extension)
        >>> registry = builder.build()
    """

    __slots__ = ("_extensions", "_render_owner")

    def __init__(self) -> None:
        """Initialize empty builder."""
        self._extensions: list[Extension] = []
        self._render_owner: dict[str, str] = dict.fromkeys(FALLBACK_KINDS, FALLBACK_EXTENSION)

    def register(self, extension: Extension) -> ExtensionRegistryBuilder:
        """Register an extension.

        Args:
            extension: Extension to add after those already registered

        Returns:
            Self for chaining

        Raises:
            TypeError: If the argument is not an Extension
            DuplicateExtensionError: If the name (or a render kind) is taken
        """
        if not isinstance(extension, Extension):
            msg = f"Expected Extension, got {type(extension).__name__}"
            raise TypeError(msg)

        name = extension.name
        if name == FALLBACK_EXTENSION:
            raise DuplicateExtensionError(name, "name is reserved for the fallback rules")
        if name in self:
            raise DuplicateExtensionError(name, "already registered")

        for rule in extension.render_rules:
            owner = self._render_owner.get(rule.kind)
            if owner is not None:
                raise DuplicateExtensionError(
                    name, f"token kind '{rule.kind}' is already rendered by '{owner}'"
                )

        for rule in extension.render_rules:
            self._render_owner[rule.kind] = name
        self._extensions.append(extension)
        return self

    def register_all(self, extensions: Iterable[Extension]) -> ExtensionRegistryBuilder:
        """Register multiple extensions in order.

        Returns:
            Self for chaining
        """
        for extension in extensions:
            self.register(extension)
        return self

    def build(self) -> ExtensionRegistry:
        """Build an immutable registry; the fallback extension is appended last."""
        from changerawr_markdown.extensions.fallback import fallback_extension

        return ExtensionRegistry((*self._extensions, fallback_extension()))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(ext.name for ext in self._extensions)

    def __contains__(self, name: object) -> bool:
        return any(ext.name == name for ext in self._extensions)

    def __len__(self) -> int:
        """Number of registered extensions."""
        return len(self._extensions)


def _order_rules(extensions: tuple[Extension, ...]) -> list[ParseRule]:
    """Stable-sort parse rules by priority, fallback rules last."""
    regular: list[ParseRule] = []
    fallback: list[ParseRule] = []
    for ext in extensions:
        target = fallback if ext.name == FALLBACK_EXTENSION else regular
        target.extend(ext.parse_rules)
    # sorted() is stable: equal priorities keep registration order.
    regular = sorted(regular, key=lambda rule: -rule.priority)
    return regular + fallback


__all__ = [
    "FALLBACK_EXTENSION",
    "FALLBACK_KINDS",
    "ExtensionRegistry",
    "ExtensionRegistryBuilder",
]
