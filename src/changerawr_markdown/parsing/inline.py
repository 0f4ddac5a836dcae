"""Inline parsing for the rule-driven parser.

Inline rules are tried at each position in priority order. Rules declare
the characters they can start with, so positions holding ordinary text
skip straight to the text fallback, which consumes the whole run up to
the next trigger character. Adjacent text tokens are merged.

Thread Safety:
All methods use instance-local state only.
Safe for concurrent use when each parser instance is used by one thread.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changerawr_markdown.errors import MarkdownEngineError, ParseError
from changerawr_markdown.parsing.delimiters import DelimiterIndex
from changerawr_markdown.tokens import Token, TokenKind, text_token
from changerawr_markdown.utils.logger import get_logger

if TYPE_CHECKING:
    from changerawr_markdown.registry import ExtensionRegistry
    from changerawr_markdown.rules import ParseRule

logger = get_logger(__name__)


class InlineParsingMixin:
    """Inline parsing methods.

    Required Host Attributes:
        - _registry: ExtensionRegistry
        - _max_nesting: int
        - _inline_depth: int
        - _delimiters: dict[str, DelimiterIndex]

    """

    _registry: ExtensionRegistry
    _max_nesting: int
    _inline_depth: int
    _delimiters: dict[str, DelimiterIndex]

    def parse_inline(self, text: str) -> tuple[Token, ...]:
        """Parse inline content into tokens.

        Container rules (links, emphasis) call this recursively for their
        inner text. Past the nesting limit the text is kept literal.
        """
        if not text:
            return ()
        if self._inline_depth >= self._max_nesting:
            logger.debug("Inline nesting limit %d reached", self._max_nesting)
            return (text_token(text),)

        self._inline_depth += 1
        try:
            return self._scan_inline(text)
        finally:
            self._inline_depth -= 1

    def _scan_inline(self, text: str) -> tuple[Token, ...]:
        registry = self._registry
        tokens: list[Token] = []
        # Adjacent text runs, joined once when a non-text token or the end
        # of the text is reached.
        pending_raw: list[str] = []
        pending_content: list[str] = []
        pos = 0
        text_len = len(text)

        while pos < text_len:
            token = self._apply_inline_rules(registry.inline_rules_for(text[pos]), text, pos)
            if token.kind == TokenKind.TEXT:
                pending_raw.append(token.raw)
                pending_content.append(token.content)
            else:
                if pending_raw:
                    tokens.append(_join_text(pending_raw, pending_content))
                tokens.append(token)
            pos += len(token.raw)

        if pending_raw:
            tokens.append(_join_text(pending_raw, pending_content))
        return tuple(tokens)

    def _apply_inline_rules(
        self, rules: tuple[ParseRule, ...], text: str, pos: int
    ) -> Token:
        for rule in rules:
            match = rule.pattern.match(text, pos)
            if match is None:
                continue
            try:
                token = rule.produce(match, self)  # type: ignore[arg-type]
            except MarkdownEngineError:
                raise
            except Exception as exc:
                raise ParseError(rule.name, pos, f"{type(exc).__name__}: {exc}") from exc
            if token is None:
                continue
            if not token.raw:
                logger.debug("Ignoring zero-length %r token from rule %r", token.kind, rule.name)
                continue
            return token
        return text_token(text[pos])

    def delimiters(self, text: str) -> DelimiterIndex:
        """Closer index for an inline text, built once per text per parse."""
        index = self._delimiters.get(text)
        if index is None:
            index = DelimiterIndex(text)
            self._delimiters[text] = index
        return index

    def consume_text(self, match: re.Match[str]) -> Token:
        """Extend a one-character text match to the next trigger character."""
        text = match.string
        start = match.start()
        end = match.end()
        registry = self._registry
        # An untriggered rule may match anywhere, so text advances one char.
        if not registry.has_untriggered_inline:
            trigger = registry.trigger_pattern
            found = trigger.search(text, end) if trigger is not None else None
            end = found.start() if found is not None else len(text)
        return text_token(text[start:end])


def _join_text(raw_parts: list[str], content_parts: list[str]) -> Token:
    token = text_token("".join(content_parts), raw="".join(raw_parts))
    raw_parts.clear()
    content_parts.clear()
    return token


__all__ = ["InlineParsingMixin"]
