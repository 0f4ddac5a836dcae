"""Token and attribute definitions.

The parser produces a tree of Token objects that the renderer consumes.
Each Token names the kind that produced it, the exact source span it
consumed, decoded text content (for leaf kinds), child tokens, and a
kind-specific attribute record.

Attribute records are a closed set of frozen dataclasses, one per kind that
needs structured data, so render rules can match on concrete shapes instead
of probing an open dictionary. Extensions that introduce new kinds define
their own frozen attribute dataclasses the same way.

Thread Safety:
Token and all attribute records are frozen (immutable) and safe to share
across threads. TokenKind is an enum (inherently immutable).

"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

Alignment = Literal["left", "center", "right"]


class TokenKind(StrEnum):
    """Token kinds produced by the built-in extensions.

    Members are plain strings, so ``token.kind == "table"`` and
    ``token.kind == TokenKind.TABLE`` are equivalent. Custom extensions
    may produce any other string kind.

    """

    # Fallback kinds (always registered)
    PARAGRAPH = "paragraph"
    TEXT = "text"

    # Block kinds
    HEADING = "heading"
    THEMATIC_BREAK = "thematic_break"
    CODE_BLOCK = "code_block"
    BLOCKQUOTE = "blockquote"
    LIST = "list"
    LIST_ITEM = "list_item"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_BODY = "table_body"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    SUBTEXT = "subtext"

    # Inline kinds
    STRONG = "strong"
    EMPHASIS = "emphasis"
    STRIKETHROUGH = "strikethrough"
    CODE_SPAN = "code_span"
    LINK = "link"
    IMAGE = "image"
    HTML = "html"
    LINE_BREAK = "line_break"

    # CUM directives
    CUM_BUTTON = "cum-button"
    CUM_ALERT = "cum-alert"
    CUM_EMBED = "cum-embed"


# =============================================================================
# Attribute records
# =============================================================================


@dataclass(frozen=True, slots=True)
class HeadingAttrs:
    """Heading level (1-6) and its document-unique anchor slug."""

    level: int
    slug: str


@dataclass(frozen=True, slots=True)
class CodeBlockAttrs:
    """Fenced code block metadata.

    ``closed`` is False when the fence ran to end of input without a
    closing line.
    """

    language: str | None
    closed: bool = True


@dataclass(frozen=True, slots=True)
class ListAttrs:
    ordered: bool
    start: int = 1
    tight: bool = True


@dataclass(frozen=True, slots=True)
class ListItemAttrs:
    """Task-list state: None for plain items."""

    checked: bool | None = None


@dataclass(frozen=True, slots=True)
class LinkAttrs:
    url: str
    title: str | None = None


@dataclass(frozen=True, slots=True)
class ImageAttrs:
    url: str
    alt: str
    title: str | None = None


@dataclass(frozen=True, slots=True)
class TableAttrs:
    """Per-column alignment; the header row fixes the column count."""

    alignments: tuple[Alignment | None, ...]

    @property
    def column_count(self) -> int:
        return len(self.alignments)


@dataclass(frozen=True, slots=True)
class TableCellAttrs:
    alignment: Alignment | None
    header: bool = False


@dataclass(frozen=True, slots=True)
class ButtonAttrs:
    """CUM button options.

    Attributes:
        url: Link destination
        style: One of default/primary/secondary/success/danger/outline/ghost
        size: One of sm/md/lg
        disabled: Render as a non-interactive element
        target: ``_blank`` unless the ``self`` flag was given

    """

    url: str
    style: str = "primary"
    size: str = "md"
    disabled: bool = False
    target: str = "_blank"


@dataclass(frozen=True, slots=True)
class AlertAttrs:
    alert_type: str
    title: str | None = None


@dataclass(frozen=True, slots=True)
class EmbedAttrs:
    """CUM embed target.

    ``options`` keeps the ``key:value`` pairs in source order.
    """

    provider: str
    url: str
    options: tuple[tuple[str, str], ...] = ()

    def option(self, key: str, default: str | None = None) -> str | None:
        for name, value in self.options:
            if name == key:
                return value
        return default


TokenAttrs = (
    HeadingAttrs
    | CodeBlockAttrs
    | ListAttrs
    | ListItemAttrs
    | LinkAttrs
    | ImageAttrs
    | TableAttrs
    | TableCellAttrs
    | ButtonAttrs
    | AlertAttrs
    | EmbedAttrs
)


# =============================================================================
# Token
# =============================================================================


@dataclass(frozen=True, slots=True)
class Token:
    """A parsed markup fragment.

    Attributes:
        kind: Kind of the token; selects the render rule
        raw: Exact source span consumed by the rule that produced this token.
            Never empty for tokens produced by the scanner.
        content: Decoded text payload for leaf kinds (text, code)
        children: Child tokens, rendered before the parent wraps them
        attrs: Kind-specific attribute record, or None

    Thread Safety:
        Frozen dataclass ensures immutability for safe sharing.

    """

    kind: str
    raw: str
    content: str = ""
    children: tuple[Token, ...] = ()
    attrs: object | None = None

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        raw = self.raw
        if len(raw) > 20:
            raw = raw[:17] + "..."
        suffix = f", {len(self.children)} children" if self.children else ""
        return f"Token({self.kind}, {raw!r}{suffix})"

    def walk(self) -> Iterator[Token]:
        """Yield this token and all descendants, depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()


def text_token(content: str, raw: str | None = None) -> Token:
    """Create a text token; ``raw`` defaults to the content itself."""
    return Token(kind=TokenKind.TEXT, raw=content if raw is None else raw, content=content)
