"""Line-oriented block scanner.

Slices source text into block candidates: contiguous line regions that
belong to one container (a fence, a table, a list, a quote, a directive)
or to the open paragraph/leaf region between containers. The parser then
applies block parse rules to each candidate.

Every line is visited once and classified once. Blank lines look ahead to
the next non-blank line through an index built in one backward pass.

Thread Safety:
BlockScanner instances are single-use. Create one per text.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from changerawr_markdown.lexer.classifiers import (
    classify_line,
    next_nonblank_indices,
    parse_fence,
)
from changerawr_markdown.lexer.modes import Action, BlockState, transition


@dataclass(frozen=True, slots=True)
class BlockCandidate:
    """A region of source lines collected in one scanner state.

    Attributes:
        state: State the lines were collected in
        text: Exact source slice, trailing newline included when present
        offset: Start offset of the slice in the scanned text
        closed: False for a fence or directive still open at end of input

    """

    state: BlockState
    text: str
    offset: int
    closed: bool = True

    @property
    def end(self) -> int:
        return self.offset + len(self.text)


class BlockScanner:
    """Finite state machine grouping lines into block candidates.

    Usage:
            >>> scanner = BlockScanner("# Title\\n\\n| a |\\n|---|\\n")
            >>> [c.state.name for c in scanner.scan()]
            ['NONE', 'IN_TABLE']

    Unterminated fences and directives close at end of input; the last
    candidate is then marked ``closed=False`` and the parse rule decides how
    to present it.

    """

    __slots__ = (
        "_source",
        "_state",
        "_fence",
        "_trace",
    )

    def __init__(self, source: str, *, trace: bool = False) -> None:
        """Initialize scanner with source text.

        Args:
            source: Text to scan
            trace: Record (line index, state, next state, action) per line
        """
        self._source = source
        self._state = BlockState.NONE
        self._fence: tuple[str, int] | None = None
        self._trace: list[tuple[int, BlockState, BlockState, Action]] | None = (
            [] if trace else None
        )

    @property
    def state(self) -> BlockState:
        """Current scanner state (NONE once a scan has completed)."""
        return self._state

    @property
    def trace(self) -> list[tuple[int, BlockState, BlockState, Action]]:
        return list(self._trace or ())

    def scan(self) -> Iterator[BlockCandidate]:
        """Scan source into block candidates.

        Yields:
            BlockCandidate objects in source order

        Complexity: O(n) in the number of lines
        """
        source = self._source
        starts, lines = self._split_lines(source)
        next_nonblank = next_nonblank_indices(lines)

        cand_start: int | None = None
        cand_state = BlockState.NONE

        for index, line in enumerate(lines):
            line_start = starts[index]
            line_end = starts[index + 1]
            kind = classify_line(lines, index, self._state, self._fence, next_nonblank)
            next_state, action = transition(self._state, kind)
            if self._trace is not None:
                self._trace.append((index, self._state, next_state, action))

            if action is Action.CONTINUE:
                if cand_start is None:
                    cand_start = line_start
                    cand_state = next_state
            elif action is Action.SPLIT:
                if cand_start is not None:
                    yield self._candidate(cand_state, cand_start, line_start)
                cand_start = line_start
                cand_state = next_state
                if next_state is BlockState.IN_CODE_FENCE:
                    fence = parse_fence(line)
                    self._fence = (fence[0], fence[1]) if fence else None
            elif action is Action.FINISH:
                if cand_start is None:
                    cand_start = line_start
                yield self._candidate(cand_state, cand_start, line_end)
                cand_start = None
                self._fence = None
            else:
                if cand_start is not None:
                    yield self._candidate(cand_state, cand_start, line_start)
                cand_start = None

            self._state = next_state

        if cand_start is not None:
            closed = self._state not in (BlockState.IN_CODE_FENCE, BlockState.IN_DIRECTIVE)
            yield self._candidate(cand_state, cand_start, len(source), closed=closed)

        self._state = BlockState.NONE
        self._fence = None

    def _candidate(
        self, state: BlockState, start: int, end: int, *, closed: bool = True
    ) -> BlockCandidate:
        return BlockCandidate(
            state=state, text=self._source[start:end], offset=start, closed=closed
        )

    @staticmethod
    def _split_lines(source: str) -> tuple[list[int], list[str]]:
        """Split source into lines with their start offsets.

        Returns:
            (starts, lines) where starts has one extra entry: the end offset
            of the last line (len(source)).
        """
        starts: list[int] = []
        lines: list[str] = []
        pos = 0
        source_len = len(source)
        while pos < source_len:
            idx = source.find("\n", pos)
            end = idx if idx != -1 else source_len
            starts.append(pos)
            lines.append(source[pos:end])
            pos = end + 1 if idx != -1 else source_len
        starts.append(source_len)
        return starts, lines


__all__ = ["BlockCandidate", "BlockScanner"]
