"""Block-level parsing for the rule-driven parser.

The block pass runs the BlockScanner over the text, then applies the block
rules registered for each candidate's scanner state at successive line
starts. The first rule (in priority order) whose pattern matches and whose
``produce`` returns a non-empty token wins; its ``raw`` length is consumed.

Thread Safety:
All methods use instance-local state only.
Safe for concurrent use when each parser instance is used by one thread.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changerawr_markdown.errors import MarkdownEngineError, ParseError
from changerawr_markdown.lexer import BlockCandidate, BlockScanner, BlockState
from changerawr_markdown.tokens import Token, TokenKind
from changerawr_markdown.utils.logger import get_logger

if TYPE_CHECKING:
    from changerawr_markdown.registry import ExtensionRegistry
    from changerawr_markdown.rules import ParseRule

logger = get_logger(__name__)

_BLANK_LINES = re.compile(r"(?:[ \t]*\n)+")

# Rule names that never interrupt an open paragraph.
_NON_INTERRUPTING = frozenset({"paragraph"})


class BlockParsingMixin:
    """Block parsing methods.

    Required Host Attributes:
        - _registry: ExtensionRegistry
        - _max_nesting: int
        - _depth: int
        - _active_rules: tuple[ParseRule, ...]

    Required Host Methods:
        - parse_inline(text) -> tuple[Token, ...]

    """

    _registry: ExtensionRegistry
    _max_nesting: int
    _depth: int
    _active_rules: tuple[ParseRule, ...]

    def parse_blocks(self, text: str) -> tuple[Token, ...]:
        """Parse text into block tokens.

        Called for the document and, recursively, by container rules
        (block quotes, list items, alerts) for their inner content. Past the
        nesting limit, the text becomes a single paragraph.
        """
        if self._depth >= self._max_nesting:
            logger.debug(
                "Nesting limit %d reached; keeping content as paragraph", self._max_nesting
            )
            stripped = text.strip()
            if not stripped:
                return ()
            return (Token(TokenKind.PARAGRAPH, text, children=self.parse_inline(stripped)),)

        self._depth += 1
        saved_rules = self._active_rules
        try:
            tokens: list[Token] = []
            for candidate in BlockScanner(text).scan():
                tokens.extend(self._parse_candidate(candidate))
            return tuple(tokens)
        finally:
            self._active_rules = saved_rules
            self._depth -= 1

    def _parse_candidate(self, candidate: BlockCandidate) -> list[Token]:
        text = candidate.text
        rules = self._registry.block_rules(candidate.state)
        tokens: list[Token] = []
        pos = 0
        end = len(text)

        while pos < end:
            blank = _BLANK_LINES.match(text, pos)
            if blank is not None:
                pos = blank.end()
                continue
            if text.find("\n", pos) == -1 and not text[pos:].strip():
                break
            # Nested parse_blocks calls replace _active_rules; reset per block.
            self._active_rules = rules
            token = self._apply_block_rules(rules, text, pos, candidate.state)
            tokens.append(token)
            pos += len(token.raw)

        return tokens

    def _apply_block_rules(
        self,
        rules: tuple[ParseRule, ...],
        text: str,
        pos: int,
        state: BlockState,
    ) -> Token:
        for rule in rules:
            match = rule.pattern.match(text, pos)
            if match is None:
                continue
            token = self._produce(rule, match, pos)
            if token is None:
                logger.debug("Block rule %r declined at offset %d", rule.name, pos)
                continue
            if not token.raw:
                logger.debug("Ignoring zero-length %r token from rule %r", token.kind, rule.name)
                continue
            return token

        # Only reachable when the fallback paragraph rule does not apply to
        # this state; consume one line so the scan always advances.
        logger.debug("No block rule for %s at offset %d", state.name, pos)
        line_end = text.find("\n", pos)
        line_end = len(text) if line_end == -1 else line_end + 1
        raw = text[pos:line_end]
        return Token(TokenKind.PARAGRAPH, raw, children=self.parse_inline(raw.strip()))

    def _produce(self, rule: ParseRule, match: re.Match[str], pos: int) -> Token | None:
        try:
            return rule.produce(match, self)  # type: ignore[arg-type]
        except MarkdownEngineError:
            raise
        except Exception as exc:
            raise ParseError(rule.name, pos, f"{type(exc).__name__}: {exc}") from exc

    def consume_paragraph(self, match: re.Match[str]) -> Token:
        """Extend a paragraph from its first line.

        The paragraph runs until a blank line, the end of the text, or a line
        at which another block rule of the current state matches.
        """
        text = match.string
        start = match.start()
        pos = match.end()
        text_len = len(text)

        while pos < text_len:
            line_end = text.find("\n", pos)
            line_end = text_len if line_end == -1 else line_end + 1
            if not text[pos:line_end].strip() or self._interrupts(text, pos):
                break
            pos = line_end

        raw = text[start:pos]
        content = "\n".join(line.lstrip() for line in raw.split("\n")).rstrip()
        return Token(TokenKind.PARAGRAPH, raw, children=self.parse_inline(content))

    def _interrupts(self, text: str, pos: int) -> bool:
        for rule in self._active_rules:
            if rule.name in _NON_INTERRUPTING:
                continue
            if rule.pattern.match(text, pos) is not None:
                return True
        return False


__all__ = ["BlockParsingMixin"]
