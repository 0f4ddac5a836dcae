"""Block scanner for the markdown engine.

Groups source lines into block candidates with an explicit finite state
machine: named states, a line classifier and a declarative transition
table. Inline syntax is handled later by the parser's inline pass.

Example:
    >>> from changerawr_markdown.lexer import BlockScanner
    >>> [c.state.name for c in BlockScanner("```\\ncode\\n```\\ntext").scan()]
    ['IN_CODE_FENCE', 'NONE']

"""

from changerawr_markdown.lexer.classifiers import classify_line
from changerawr_markdown.lexer.core import BlockCandidate, BlockScanner
from changerawr_markdown.lexer.modes import (
    TRANSITIONS,
    Action,
    BlockState,
    LineKind,
    transition,
)

__all__ = [
    "TRANSITIONS",
    "Action",
    "BlockCandidate",
    "BlockScanner",
    "BlockState",
    "LineKind",
    "classify_line",
    "transition",
]
