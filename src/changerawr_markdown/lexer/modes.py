"""Block scanner states and the transition table.

The block scanner is a finite state machine over source lines. Each line is
classified into a LineKind; the pair (current state, line kind) selects the
next state and an Action telling the scanner what to do with the line.

The table is declarative so fence, table, list and quote grouping can be
audited and tested without running the parser.
"""

from __future__ import annotations

from enum import Enum, auto


class BlockState(Enum):
    """Block scanner states.

    - NONE: Between containers; paragraphs, headings and single-line
      directives are collected here
    - IN_CODE_FENCE: Inside a fenced code block; nothing else matches
      until the closing fence or end of input
    - IN_TABLE: Consecutive pipe rows
    - IN_LIST: List items with their continuation lines
    - IN_BLOCKQUOTE: ``>`` lines with lazy continuation lines
    - IN_DIRECTIVE: A ``:::name`` block directive, closed by a ``:::``
      line or a blank line

    """

    NONE = auto()
    IN_CODE_FENCE = auto()
    IN_TABLE = auto()
    IN_LIST = auto()
    IN_BLOCKQUOTE = auto()
    IN_DIRECTIVE = auto()


class LineKind(Enum):
    """Line classes seen by the block scanner.

    SOFT_BLANK is a blank line followed by a list item or an indented line;
    it keeps a list open (loose list) but ends every other region.
    LEAF is an unindented single-line block (ATX heading, thematic break,
    subtext) that ends an open list, quote or table.
    """

    BLANK = auto()
    SOFT_BLANK = auto()
    FENCE = auto()
    DIRECTIVE_OPEN = auto()
    DIRECTIVE_CLOSE = auto()
    LIST_ITEM = auto()
    QUOTE = auto()
    TABLE_ROW = auto()
    LEAF = auto()
    INDENTED = auto()
    TEXT = auto()


class Action(Enum):
    """What the scanner does with the current line.

    - CONTINUE: Append the line to the open candidate (or open one)
    - SPLIT: Close the open candidate, open a new one with this line
    - FINISH: Append the line, then close the candidate
    - BREAK: Close the open candidate and drop the line

    """

    CONTINUE = auto()
    SPLIT = auto()
    FINISH = auto()
    BREAK = auto()


_S = BlockState
_L = LineKind
_A = Action

# Lines that open a container from any state outside fences and directives.
_OPENERS: dict[LineKind, BlockState] = {
    _L.FENCE: _S.IN_CODE_FENCE,
    _L.DIRECTIVE_OPEN: _S.IN_DIRECTIVE,
    _L.LIST_ITEM: _S.IN_LIST,
    _L.QUOTE: _S.IN_BLOCKQUOTE,
    _L.TABLE_ROW: _S.IN_TABLE,
}


def _build_transitions() -> dict[tuple[BlockState, LineKind], tuple[BlockState, Action]]:
    table: dict[tuple[BlockState, LineKind], tuple[BlockState, Action]] = {}

    for state in (_S.NONE, _S.IN_TABLE, _S.IN_LIST, _S.IN_BLOCKQUOTE):
        for kind, target in _OPENERS.items():
            table[(state, kind)] = (target, _A.SPLIT)
        table[(state, _L.BLANK)] = (_S.NONE, _A.BREAK)
        table[(state, _L.SOFT_BLANK)] = (_S.NONE, _A.BREAK)
        table[(state, _L.LEAF)] = (_S.NONE, _A.SPLIT)

    for kind in (_L.TEXT, _L.INDENTED, _L.LEAF, _L.DIRECTIVE_CLOSE):
        table[(_S.NONE, kind)] = (_S.NONE, _A.CONTINUE)

    table[(_S.IN_TABLE, _L.TABLE_ROW)] = (_S.IN_TABLE, _A.CONTINUE)
    for kind in (_L.TEXT, _L.INDENTED, _L.DIRECTIVE_CLOSE):
        table[(_S.IN_TABLE, kind)] = (_S.NONE, _A.SPLIT)

    table[(_S.IN_LIST, _L.LIST_ITEM)] = (_S.IN_LIST, _A.CONTINUE)
    table[(_S.IN_LIST, _L.SOFT_BLANK)] = (_S.IN_LIST, _A.CONTINUE)
    for kind in (_L.TEXT, _L.INDENTED, _L.DIRECTIVE_CLOSE):
        table[(_S.IN_LIST, kind)] = (_S.IN_LIST, _A.CONTINUE)

    table[(_S.IN_BLOCKQUOTE, _L.QUOTE)] = (_S.IN_BLOCKQUOTE, _A.CONTINUE)
    for kind in (_L.TEXT, _L.INDENTED, _L.DIRECTIVE_CLOSE):
        table[(_S.IN_BLOCKQUOTE, kind)] = (_S.IN_BLOCKQUOTE, _A.CONTINUE)

    # Directive bodies run to a ":::" line or a blank line.
    for kind in LineKind:
        table[(_S.IN_DIRECTIVE, kind)] = (_S.IN_DIRECTIVE, _A.CONTINUE)
    table[(_S.IN_DIRECTIVE, _L.DIRECTIVE_CLOSE)] = (_S.NONE, _A.FINISH)
    table[(_S.IN_DIRECTIVE, _L.BLANK)] = (_S.NONE, _A.BREAK)
    table[(_S.IN_DIRECTIVE, _L.SOFT_BLANK)] = (_S.NONE, _A.BREAK)

    # Inside a fence every line is content; only the closing fence leaves.
    for kind in LineKind:
        table[(_S.IN_CODE_FENCE, kind)] = (_S.IN_CODE_FENCE, _A.CONTINUE)
    table[(_S.IN_CODE_FENCE, _L.FENCE)] = (_S.NONE, _A.FINISH)

    return table


TRANSITIONS: dict[tuple[BlockState, LineKind], tuple[BlockState, Action]] = _build_transitions()


def transition(state: BlockState, kind: LineKind) -> tuple[BlockState, Action]:
    """Look up the next state and action for a classified line."""
    return TRANSITIONS[(state, kind)]


__all__ = [
    "TRANSITIONS",
    "Action",
    "BlockState",
    "LineKind",
    "transition",
]
