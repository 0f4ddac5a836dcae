"""Closer lookup for delimited inline syntax.

Rules such as emphasis, strikethrough and code spans match an opening
delimiter and then need the first valid closing delimiter after it. A lazy
``[\\s\\S]+?`` regex rescans the rest of the text for every opener, which
is quadratic when many openers have no closer. DelimiterIndex instead
finds every closer candidate of a pattern once per text and answers each
lookup with a binary search.

Thread Safety:
Instances are owned by a single Parser and never shared.

"""

from __future__ import annotations

import re
from bisect import bisect_left


class DelimiterIndex:
    """Sorted closer positions for one inline text.

    Usage:
            >>> index = DelimiterIndex("a *b* c*")
            >>> index.next_closer(re.compile(r"(?<![\\s*])\\*+(?!\\*)"), 3, length=1)
            4

    """

    __slots__ = ("_text", "_positions")

    def __init__(self, text: str) -> None:
        self._text = text
        self._positions: dict[tuple[re.Pattern[str], int | None], list[int]] = {}

    def next_closer(
        self, pattern: re.Pattern[str], start: int, length: int | None = None
    ) -> int | None:
        """Position of the first closer at or after ``start``.

        Args:
            pattern: Closer pattern; its matches must not overlap
            start: Lowest acceptable closer position
            length: Only accept matches of exactly this length

        Returns:
            Start offset of the closer, or None if there is none
        """
        key = (pattern, length)
        positions = self._positions.get(key)
        if positions is None:
            positions = [
                m.start()
                for m in pattern.finditer(self._text)
                if length is None or m.end() - m.start() == length
            ]
            self._positions[key] = positions
        i = bisect_left(positions, start)
        return positions[i] if i < len(positions) else None


__all__ = ["DelimiterIndex"]
